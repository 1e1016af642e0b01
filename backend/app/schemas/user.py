"""User and session schemas"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Registration body.

    Every field is optional at the schema level so that missing fields are
    reported by the validator (400) rather than by request parsing (422).
    """
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email_id: Optional[str] = Field(None, alias="emailId")
    password: Optional[str] = None
    age: Optional[int] = None

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_record(self) -> Dict[str, Any]:
        """Camel-cased record as accepted by ``validate``"""
        return self.model_dump(by_alias=True)


class LoginRequest(BaseModel):
    email_id: Optional[str] = Field(None, alias="emailId")
    password: Optional[str] = None

    class Config:
        populate_by_name = True


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash."""
    id: str
    first_name: str = Field(..., alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email_id: str = Field(..., alias="emailId")
    age: Optional[int] = None
    role: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.user_id,
            first_name=user.first_name,
            last_name=user.last_name,
            email_id=user.email_id,
            age=user.age,
            role=user.role,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    user: UserResponse
    message: str
