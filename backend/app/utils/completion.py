"""Text completion client for the doubt-solving chat"""
from typing import Any, Dict, List, Optional

import anthropic

from app.utils.errors import ServiceUnavailableError
from app.utils.logger import logger

# Chat UI roles -> Anthropic roles
_ROLE_MAP = {
    "user": "user",
    "model": "assistant",
    "assistant": "assistant",
}


def _message_text(message: Dict[str, Any]) -> str:
    """Extract the text of a chat message.

    Accepts both ``{"role", "parts": [{"text"}]}`` (what the chat UI sends)
    and ``{"role", "content": "..."}``. Null texts count as empty.
    """
    content = message.get("content")
    if isinstance(content, str):
        return content

    parts = message.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(str(part.get("text") or "") for part in parts if isinstance(part, dict))


def to_anthropic_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Normalise a chat-UI conversation into Anthropic ``messages``.

    The conversation must open with a user turn and alternate roles, so leading
    assistant turns (the UI's greeting) are dropped and consecutive turns from
    the same role are merged. Empty and unknown-role messages are skipped.
    """
    converted: List[Dict[str, str]] = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        role = message.get("role", "user")
        role = _ROLE_MAP.get(role) if isinstance(role, str) else None
        text = _message_text(message).strip()
        if role is None or not text:
            continue
        if not converted and role == "assistant":
            continue
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"] += f"\n\n{text}"
        else:
            converted.append({"role": role, "content": text})
    return converted


class AnthropicCompletionService:
    """Generates tutor replies with the Anthropic Messages API."""

    def __init__(self, api_key: Optional[str], model: str):
        self.api_key = api_key
        self.model = model

    def complete(
        self,
        messages: List[Dict[str, Any]],
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Return the model's reply to the conversation.

        Raises:
            ServiceUnavailableError: the API is not configured, the call fails,
                or the response carries no text.
        """
        try:
            conversation = to_anthropic_messages(messages)
        except Exception as e:
            logger.error(f"Could not read doubt-solving conversation: {e}")
            raise ServiceUnavailableError()

        if not conversation:
            logger.warning("Doubt-solving request has no user message")
            raise ServiceUnavailableError()

        try:
            client = anthropic.Anthropic(api_key=self.api_key)
            response = client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=conversation,
            )
            text = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            ).strip()
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic API error: {e}")
            raise ServiceUnavailableError()
        except (AttributeError, TypeError) as e:
            logger.error(f"Anthropic returned a malformed response: {e}")
            raise ServiceUnavailableError()
        except Exception as e:
            logger.error(f"Doubt-solving call failed: {e}")
            raise ServiceUnavailableError()

        if not text:
            logger.warning("Anthropic returned an empty response")
            raise ServiceUnavailableError()
        return text
