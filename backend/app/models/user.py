"""User model - platform accounts"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


class User(Base):
    """A registered user.

    ``user_id`` is the opaque identity carried in session tokens. ``email_id``
    is stored lower-cased so the unique constraint is case-insensitive.
    ``password`` only ever holds a bcrypt hash.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), default=generate_uuid_string, unique=True, nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=True)
    email_id = Column(String(255), unique=True, nullable=False, index=True)
    age = Column(Integer, nullable=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), default=ROLE_USER, nullable=False)  # user | admin
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
