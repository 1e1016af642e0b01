"""Doubt-solving proxy - tutor prompts for the problem page chat"""
import json
from typing import Any, Dict, List, Optional, Protocol

from app.utils.errors import MissingFieldsError

NOT_PROVIDED = "Not provided"

SYSTEM_PROMPT_TEMPLATE = """
You are a DSA tutor. Help with hints, code review, and explanations ONLY for the current problem.

Problem: {title}
Description: {description}
Test Cases: {test_cases}
Start Code: {start_code}

Provide step-by-step guidance without giving direct answers. Focus on understanding.
If the user asks about anything unrelated to this problem, politely steer them back to it.
"""


class TextCompletionService(Protocol):
    def complete(
        self,
        messages: List[Dict[str, Any]],
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        ...


def _render(value: Any) -> str:
    if value is None or value == "" or value == [] or value == {}:
        return NOT_PROVIDED
    if isinstance(value, (list, dict)):
        return json.dumps(value, indent=2)
    return str(value)


def build_system_prompt(
    title: str,
    description: Any = None,
    test_cases: Any = None,
    start_code: Any = None,
) -> str:
    """Render the tutor system prompt for a problem."""
    return SYSTEM_PROMPT_TEMPLATE.format(
        title=title,
        description=_render(description),
        test_cases=_render(test_cases),
        start_code=_render(start_code),
    )


class DoubtSolver:
    """Stateless relay from a problem-page conversation to a completion service.

    The caller resends the whole conversation on every call; nothing is kept
    between requests.
    """

    def __init__(self, completion: TextCompletionService, max_tokens: int = 2048, temperature: float = 0.7):
        self.completion = completion
        self.max_tokens = max_tokens
        self.temperature = temperature

    def solve(
        self,
        messages: Optional[List[Dict[str, Any]]],
        title: Optional[str],
        description: Any = None,
        test_cases: Any = None,
        start_code: Any = None,
    ) -> str:
        """Return the tutor's reply.

        Raises:
            MissingFieldsError: messages or title absent (no downstream call is made)
            ServiceUnavailableError: the completion service failed
        """
        if messages is None or not title:
            raise MissingFieldsError()

        system_prompt = build_system_prompt(title, description, test_cases, start_code)
        return self.completion.complete(
            messages,
            system_prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
