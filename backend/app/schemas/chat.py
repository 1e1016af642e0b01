"""Doubt-solving chat schemas"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Conversation plus the problem the user is looking at.

    ``messages`` is the full running conversation as kept by the chat UI,
    e.g. ``[{"role": "user", "parts": [{"text": "..."}]}]``.
    """
    messages: Optional[List[Dict[str, Any]]] = None
    title: Optional[str] = None
    description: Optional[Any] = None
    test_cases: Optional[Any] = Field(None, alias="testCases")
    start_code: Optional[Any] = Field(None, alias="startCode")

    class Config:
        populate_by_name = True


class ChatResponse(BaseModel):
    success: bool
    message: str
