"""Pydantic schemas for request/response validation"""
from app.schemas.chat import ChatRequest, ChatResponse
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse

__all__ = [
    "AuthResponse",
    "ChatRequest",
    "ChatResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
]
