"""Session token blocklist"""
import hashlib
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.blocked_token import BlockedToken
from app.utils.errors import ServiceUnavailableError
from app.utils.logger import logger

BLOCKED = "Blocked"


def blocklist_key(token: str) -> str:
    """Blocklist key for a token string"""
    return f"token:{hashlib.sha256(token.encode()).hexdigest()}"


class SqlTokenBlocklist:
    """Key-value store with per-key expiry, backed by the blocked_tokens table.

    Any database failure is reported as ServiceUnavailableError; callers treat
    the blocklist as a transient dependency.
    """

    def __init__(self, db: Session):
        self.db = db

    def set(self, key: str, value: str = BLOCKED) -> None:
        """Create or overwrite an entry with no expiry."""
        try:
            entry = self.db.query(BlockedToken).filter(BlockedToken.key == key).first()
            if entry is None:
                self.db.add(BlockedToken(key=key, value=value))
            else:
                entry.value = value
                entry.expires_at = None
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Blocklist write failed: {exc}")
            raise ServiceUnavailableError()

    def expire_at(self, key: str, timestamp: int) -> bool:
        """Set the absolute expiry (unix seconds) of an entry.

        Returns False if no entry exists for the key.

        Raises:
            ValueError: the timestamp is outside the datetime range
        """
        try:
            expires_at = datetime.fromtimestamp(int(timestamp), tz=timezone.utc).replace(tzinfo=None)
        except (TypeError, OverflowError, OSError) as exc:
            raise ValueError(f"Invalid expiry timestamp: {timestamp!r}") from exc

        try:
            entry = self.db.query(BlockedToken).filter(BlockedToken.key == key).first()
            if entry is None:
                return False
            entry.expires_at = expires_at
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Blocklist expiry update failed: {exc}")
            raise ServiceUnavailableError()
        return True

    def exists(self, key: str) -> bool:
        """True if an unexpired entry exists for the key."""
        try:
            entry = self.db.query(BlockedToken).filter(BlockedToken.key == key).first()
        except SQLAlchemyError as exc:
            logger.error(f"Blocklist read failed: {exc}")
            raise ServiceUnavailableError()
        if entry is None:
            return False
        return entry.expires_at is None or entry.expires_at > datetime.utcnow()

    def purge_expired(self) -> int:
        """Delete expired entries, returning how many were removed."""
        try:
            deleted = (
                self.db.query(BlockedToken)
                .filter(BlockedToken.expires_at.isnot(None), BlockedToken.expires_at <= datetime.utcnow())
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Blocklist purge failed: {exc}")
            raise ServiceUnavailableError()
        return deleted
