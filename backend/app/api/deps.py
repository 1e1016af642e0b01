"""API dependencies: capability wiring, authentication and authorization.

The session token is read from the ``token`` cookie set at login, or from
``Authorization: Bearer <JWT>`` for non-browser clients. The cookie wins
when both are present.

Roles:
    admin > user
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.monitoring import record_auth_failure
from app.models.user import ROLE_ADMIN, User
from app.services.auth_flow import AuthFlow
from app.services.doubt_solver import DoubtSolver, TextCompletionService
from app.utils.blocklist import SqlTokenBlocklist
from app.utils.completion import AnthropicCompletionService
from app.utils.errors import AuthenticationError, ServiceUnavailableError
from app.utils.security import BcryptHasher, JWTTokenSigner
from app.utils.user_store import SqlUserStore

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

@lru_cache
def get_hasher() -> BcryptHasher:
    return BcryptHasher(rounds=settings.BCRYPT_ROUNDS)


@lru_cache
def get_token_signer() -> JWTTokenSigner:
    return JWTTokenSigner(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_seconds=settings.JWT_EXPIRE_SECONDS,
    )


def get_auth_flow(
    db: Session = Depends(get_db),
    hasher: BcryptHasher = Depends(get_hasher),
    signer: JWTTokenSigner = Depends(get_token_signer),
) -> AuthFlow:
    return AuthFlow(
        user_store=SqlUserStore(db),
        blocklist=SqlTokenBlocklist(db),
        hasher=hasher,
        signer=signer,
    )


def get_completion_service() -> TextCompletionService:
    return AnthropicCompletionService(api_key=settings.ANTHROPIC_API_KEY, model=settings.AI_MODEL)


def get_doubt_solver(
    completion: TextCompletionService = Depends(get_completion_service),
) -> DoubtSolver:
    return DoubtSolver(
        completion,
        max_tokens=settings.AI_MAX_TOKENS,
        temperature=settings.AI_TEMPERATURE,
    )


# ---------------------------------------------------------------------------
# Session token
# ---------------------------------------------------------------------------

def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[str]:
    """Return the caller's session token, or None if there is none."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


# ---------------------------------------------------------------------------
# require_user / require_admin
# ---------------------------------------------------------------------------

def require_user(
    token: Optional[str] = Depends(get_session_token),
    flow: AuthFlow = Depends(get_auth_flow),
) -> User:
    """Require a usable session token and return the User it belongs to.

    Raises 401 if the token is missing, fails verification, has expired, has
    been revoked, or belongs to a deleted account; 503 if the blocklist
    cannot be read.
    """
    try:
        claims = flow.authenticate(token)
    except AuthenticationError as exc:
        record_auth_failure("token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    except ServiceUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message)

    user = flow.user_store.find_by_id(claims["sub"])
    if user is None:
        record_auth_failure("token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User doesn't exist",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    """Require an authenticated administrator."""
    if user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user
