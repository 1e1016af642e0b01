"""Credential store - persistence of user records"""
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user import User
from app.utils.errors import DuplicateEmailError, PersistenceError
from app.utils.logger import logger


def normalize_email(email_id: str) -> str:
    return email_id.strip().lower()


class SqlUserStore:
    """User records in the relational database.

    The unique index on ``users.email_id`` is the only guard against two
    simultaneous registrations with the same email.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> User:
        """Insert a user and return it.

        Raises:
            DuplicateEmailError: the email is already registered
            PersistenceError: any other database failure
        """
        fields["email_id"] = normalize_email(fields["email_id"])
        user = User(**fields)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Rejected duplicate registration: {exc.orig}")
            raise DuplicateEmailError()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Failed to create user: {exc}")
            raise PersistenceError()
        return user

    def find_by_email(self, email_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.email_id == normalize_email(email_id)).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.user_id == user_id).first()

    def delete_by_id(self, user_id: str) -> Optional[User]:
        """Delete a user by opaque id, returning the deleted record (or None)."""
        try:
            user = self.find_by_id(user_id)
            if user is not None:
                self.db.delete(user)
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {exc}")
            raise PersistenceError()
        return user
