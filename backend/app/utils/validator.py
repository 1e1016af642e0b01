"""Registration input validation"""
import re
from typing import Any, Mapping, Optional

from app.utils.errors import (
    InvalidEmailError,
    MissingFieldError,
    ValidationError,
    WeakPasswordError,
)

REQUIRED_FIELDS = ("firstName", "emailId", "password")

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

PASSWORD_MIN_LENGTH = 8


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_strong_password(password: str) -> bool:
    """At least 8 chars with an uppercase letter, a digit and a special character"""
    return (
        len(password) >= PASSWORD_MIN_LENGTH
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"\d", password) is not None
        and re.search(r"[^A-Za-z0-9]", password) is not None
    )


def validate(record: Optional[Mapping[str, Any]]) -> None:
    """
    Validate a registration record.

    Checks run in order (presence, email shape, password strength) and the
    first failure is raised. Keys other than the required ones are ignored.

    Raises:
        ValidationError: record is None
        MissingFieldError: firstName, emailId or password absent or empty
        InvalidEmailError: emailId is not shaped like local@domain.tld
        WeakPasswordError: password fails the strength rule
    """
    if record is None:
        raise ValidationError()

    if not all(record.get(field) for field in REQUIRED_FIELDS):
        raise MissingFieldError()

    if not is_valid_email(str(record["emailId"])):
        raise InvalidEmailError()

    if not is_strong_password(str(record["password"])):
        raise WeakPasswordError()
