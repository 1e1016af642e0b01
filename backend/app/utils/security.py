"""Password hashing and session token signing"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.utils.errors import MalformedTokenError
from app.utils.logger import logger

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


class BcryptHasher:
    """One-way, salted password hashing with a fixed bcrypt cost factor."""

    def __init__(self, rounds: int = 10):
        self.crypt_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Return the hash of a plain text password."""
        return self.crypt_context.hash(password)

    def compare(self, password: str, hashed_password: str) -> bool:
        """Verify if the plain text password matches the stored hash."""
        try:
            return self.crypt_context.verify(password, hashed_password)
        except ValueError:
            # Stored value is not a recognisable hash
            return False


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


class JWTTokenSigner:
    """Issue and verify signed session tokens.

    The signing secret is handed in at construction; nothing here reads
    settings directly.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_seconds: int = 3600):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_seconds = expire_seconds

    def issue(self, user_id: str, email_id: str, role: str) -> str:
        """Sign and return a session token for a user.

        Claims:
            sub:     the user's opaque id
            emailId: the user's email
            role:    'user' or 'admin'
            jti:     unique token id, so two tokens issued in the same
                     second never collide in the blocklist
            iat/exp: issue time and expiry (iat + expire_seconds)
        """
        now = int(datetime.now(timezone.utc).timestamp())

        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "emailId": email_id,
            "role": role,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.expire_seconds,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Verify signature and expiry and return the claims.

        Raises:
            MalformedTokenError: on any verification failure.
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.debug(f"JWT decode failed: {exc}")
            raise MalformedTokenError()

    def decode_unsafe(self, token: str) -> Optional[Dict[str, Any]]:
        """Read the claims without checking signature or expiry.

        Returns None when the token cannot be parsed at all.
        """
        try:
            return jwt.get_unverified_claims(token)
        except JWTError:
            return None
