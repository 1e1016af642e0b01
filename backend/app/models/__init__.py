"""Database models"""
from app.models.blocked_token import BlockedToken
from app.models.user import User

__all__ = ["BlockedToken", "User"]
