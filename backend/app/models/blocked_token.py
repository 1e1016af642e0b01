"""BlockedToken model - session token blocklist"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base


class BlockedToken(Base):
    """A revoked session token.

    ``key`` is derived from the token string (see ``blocklist_key``).
    ``expires_at`` mirrors the token's own exp, so an entry stops counting
    once the token could no longer verify anyway; expired rows are swept by
    ``SqlTokenBlocklist.purge_expired``.
    """

    __tablename__ = "blocked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(80), unique=True, nullable=False, index=True)
    value = Column(String(20), nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)  # null until expire_at() runs
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
