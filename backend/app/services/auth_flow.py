"""Authentication flow - register, login, logout and account removal.

A session token moves through three states:

    ANONYMOUS --register/login--> AUTHENTICATED --logout--> REVOKED

Tokens are not stored on issuance. Logout writes a blocklist entry that
expires together with the token, and every protected request checks the
signature, the expiry and the blocklist together (see ``authenticate``).
"""
import enum
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.utils.blocklist import BLOCKED, blocklist_key
from app.utils.errors import (
    InvalidCredentialsError,
    MalformedTokenError,
    MissingCredentialsError,
    MissingIdentityError,
    MissingTokenError,
    RevokedTokenError,
    ServiceUnavailableError,
)
from app.utils.logger import logger
from app.utils.validator import validate


class SessionState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    REVOKED = "revoked"


def _expiry_timestamp(value: Any) -> int:
    """Unix expiry of a token, checked before anything is written for it.

    Raises:
        MalformedTokenError: not an integer, or outside the datetime range
    """
    if isinstance(value, bool):
        raise MalformedTokenError()
    try:
        exp = int(value)
        datetime.fromtimestamp(exp, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        raise MalformedTokenError()
    return exp


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

class Hasher(Protocol):
    def hash(self, password: str) -> str: ...

    def compare(self, password: str, hashed_password: str) -> bool: ...


class TokenSigner(Protocol):
    def issue(self, user_id: str, email_id: str, role: str) -> str: ...

    def verify(self, token: str) -> Dict[str, Any]: ...

    def decode_unsafe(self, token: str) -> Optional[Dict[str, Any]]: ...


class UserStore(Protocol):
    def create(self, **fields: Any) -> User: ...

    def find_by_email(self, email_id: str) -> Optional[User]: ...

    def find_by_id(self, user_id: str) -> Optional[User]: ...

    def delete_by_id(self, user_id: str) -> Optional[User]: ...


class TokenBlocklist(Protocol):
    def set(self, key: str, value: str = BLOCKED) -> None: ...

    def exists(self, key: str) -> bool: ...

    def expire_at(self, key: str, timestamp: int) -> bool: ...


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------

class AuthFlow:
    """Orchestrates validation, hashing, the user store and token issuance."""

    def __init__(
        self,
        user_store: UserStore,
        blocklist: TokenBlocklist,
        hasher: Hasher,
        signer: TokenSigner,
    ):
        self.user_store = user_store
        self.blocklist = blocklist
        self.hasher = hasher
        self.signer = signer

    def _issue(self, user: User) -> str:
        return self.signer.issue(user.user_id, user.email_id, user.role)

    def register(self, record: Optional[Mapping[str, Any]], role: str = ROLE_USER) -> Tuple[User, str]:
        """Create an account and open a session for it.

        Raises:
            ValidationError: record fails validation
            DuplicateEmailError: email already registered
            PersistenceError: the store rejected the insert
        """
        validate(record)

        user = self.user_store.create(
            first_name=record["firstName"],
            last_name=record.get("lastName"),
            email_id=record["emailId"],
            age=record.get("age"),
            password=self.hasher.hash(record["password"]),
            role=role,
        )

        logger.info(
            f"Registered user {user.user_id} (role={role})",
            extra={"user_id": user.user_id, "action": "register"},
        )
        return user, self._issue(user)

    def admin_register(self, record: Optional[Mapping[str, Any]]) -> Tuple[User, str]:
        """Register with the administrator role.

        Callers must already be authorized as administrators.
        """
        return self.register(record, role=ROLE_ADMIN)

    def login(self, email_id: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """Check credentials and open a session.

        Raises:
            MissingCredentialsError: email or password missing
            InvalidCredentialsError: unknown email or wrong password
        """
        if not email_id or not password:
            raise MissingCredentialsError()

        user = self.user_store.find_by_email(email_id)
        if user is None:
            raise InvalidCredentialsError()

        if not self.hasher.compare(password, user.password):
            raise InvalidCredentialsError()

        logger.info(f"User {user.user_id} logged in", extra={"user_id": user.user_id, "action": "login"})
        return user, self._issue(user)

    def logout(self, token: Optional[str]) -> None:
        """Revoke a token until its natural expiry.

        The signature is not re-checked; only the expiry is needed.

        Raises:
            MissingTokenError: no token
            MalformedTokenError: token unreadable or without a usable expiry
            ServiceUnavailableError: the blocklist write failed
        """
        if not token:
            raise MissingTokenError()

        claims = self.signer.decode_unsafe(token)
        if not claims or "exp" not in claims:
            raise MalformedTokenError()
        exp = _expiry_timestamp(claims["exp"])

        key = blocklist_key(token)
        try:
            self.blocklist.set(key, BLOCKED)
            self.blocklist.expire_at(key, exp)
        except ServiceUnavailableError:
            raise
        except Exception as exc:
            logger.error(f"Blocklist unavailable during logout: {exc}")
            raise ServiceUnavailableError() from exc

        logger.info(
            "Session token revoked",
            extra={"user_id": claims.get("sub"), "action": "logout"},
        )

    def delete_profile(self, identity: Optional[User]) -> None:
        """Delete the authenticated user's account.

        Raises:
            MissingIdentityError: no authenticated identity
            PersistenceError: the store failed to delete
        """
        if identity is None:
            raise MissingIdentityError()

        self.user_store.delete_by_id(identity.user_id)
        logger.info(
            f"Deleted user {identity.user_id}",
            extra={"user_id": identity.user_id, "action": "delete_profile"},
        )

    def authenticate(self, token: Optional[str]) -> Dict[str, Any]:
        """Return the claims of a token usable for authorization.

        A token is usable only if it verifies, has not expired and is not
        on the blocklist.

        Raises:
            MissingTokenError, MalformedTokenError, RevokedTokenError
            ServiceUnavailableError: the blocklist could not be read
        """
        if not token:
            raise MissingTokenError()

        claims = self.signer.verify(token)
        if not claims.get("sub"):
            raise MalformedTokenError()

        if self.blocklist.exists(blocklist_key(token)):
            raise RevokedTokenError()

        return claims

    def session_state(self, token: Optional[str]) -> SessionState:
        try:
            self.authenticate(token)
        except RevokedTokenError:
            return SessionState.REVOKED
        except (MissingTokenError, MalformedTokenError):
            return SessionState.ANONYMOUS
        return SessionState.AUTHENTICATED
