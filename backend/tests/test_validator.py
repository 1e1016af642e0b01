"""Tests for registration input validation"""
import pytest

from app.utils.errors import (
    InvalidEmailError,
    MissingFieldError,
    ValidationError,
    WeakPasswordError,
)
from app.utils.validator import validate

VALID = {"firstName": "John", "emailId": "john@example.com", "password": "SecurePass123!"}


def test_valid_record():
    """Test that a complete, well-formed record passes"""
    validate(dict(VALID))


def test_extra_fields_are_ignored():
    """Test that optional fields do not affect validation"""
    validate({**VALID, "lastName": "Doe", "age": 25})


@pytest.mark.parametrize("missing", ["firstName", "emailId", "password"])
def test_missing_required_field(missing: str):
    """Test that each required field is enforced"""
    record = {k: v for k, v in VALID.items() if k != missing}
    with pytest.raises(MissingFieldError):
        validate(record)


def test_all_fields_missing():
    """Test that an empty record reports missing fields"""
    with pytest.raises(MissingFieldError):
        validate({})


def test_empty_string_counts_as_missing():
    """Test that empty values are treated as absent"""
    with pytest.raises(MissingFieldError):
        validate({**VALID, "firstName": ""})


def test_none_record():
    """Test that a null record is rejected with a generic error"""
    with pytest.raises(ValidationError):
        validate(None)


@pytest.mark.parametrize("email", ["invalid-email", "john@", "johnexample.com", "john@@example.com", "john@example"])
def test_invalid_email(email: str):
    """Test that malformed emails are rejected"""
    with pytest.raises(InvalidEmailError):
        validate({**VALID, "emailId": email})


@pytest.mark.parametrize("email", ["user@example.com", "john.doe@company.co.uk", "test+tag@domain.com", "JOHN@EXAMPLE.COM"])
def test_valid_email(email: str):
    """Test common email shapes, including upper case"""
    validate({**VALID, "emailId": email})


@pytest.mark.parametrize("password", ["weak", "weakpass123!", "Weakpass123", "WeakPass!"])
def test_weak_password(password: str):
    """Test short passwords and passwords missing an uppercase letter, special character or digit"""
    with pytest.raises(WeakPasswordError):
        validate({**VALID, "password": password})


@pytest.mark.parametrize("password", ["SecurePass123!", "MySecure@Pass2024", "Test@Secure#1"])
def test_strong_password(password: str):
    """Test that strong passwords pass"""
    validate({**VALID, "password": password})


def test_email_checked_before_password():
    """Test that an invalid email is reported even when the password is also weak"""
    with pytest.raises(InvalidEmailError):
        validate({"firstName": "John", "emailId": "invalid-email", "password": "weak"})
