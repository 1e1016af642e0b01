"""Tests for the AI doubt-solving chat"""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_completion_service
from app.main import app
from app.services.doubt_solver import DoubtSolver, build_system_prompt
from app.utils.completion import AnthropicCompletionService, to_anthropic_messages
from app.utils.errors import MissingFieldsError, ServiceUnavailableError


# ---------------------------------------------------------------------------
# POST /ai/chat
# ---------------------------------------------------------------------------

def test_chat(registered_client: TestClient, completion, sample_chat_data: dict):
    """Test a successful tutoring reply"""
    response = registered_client.post("/ai/chat", json=sample_chat_data)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": completion.reply}

    assert len(completion.calls) == 1
    call = completion.calls[0]
    assert call["messages"] == sample_chat_data["messages"]
    assert call["max_tokens"] == 2048
    assert call["temperature"] == 0.7
    assert "Problem: Two Sum" in call["system_prompt"]
    assert "def two_sum(nums, target):" in call["system_prompt"]
    assert "nums = [2,7,11,15], target = 9" in call["system_prompt"]


def test_chat_missing_messages(registered_client: TestClient, completion, sample_chat_data: dict):
    """Test that a request without messages is rejected before any model call"""
    del sample_chat_data["messages"]

    response = registered_client.post("/ai/chat", json=sample_chat_data)
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert completion.calls == []


def test_chat_missing_title(registered_client: TestClient, completion, sample_chat_data: dict):
    """Test that a request without a title is rejected before any model call"""
    del sample_chat_data["title"]

    response = registered_client.post("/ai/chat", json=sample_chat_data)
    assert response.status_code == 400
    assert completion.calls == []


def test_chat_downstream_failure(registered_client: TestClient, completion, sample_chat_data: dict):
    """Test that a model failure becomes a generic 500"""
    completion.fail = True

    response = registered_client.post("/ai/chat", json=sample_chat_data)
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "AI service temporarily unavailable. Please try again.",
    }


def test_chat_null_message_text(registered_client: TestClient, sample_chat_data: dict):
    """Test that unreadable message parts get the chat error body, not a crash"""
    app.dependency_overrides[get_completion_service] = lambda: AnthropicCompletionService(
        api_key="test-key", model="claude-test"
    )
    sample_chat_data["messages"] = [{"role": "user", "parts": [{"text": None}]}]

    with patch("app.utils.completion.anthropic.Anthropic") as client_cls:
        response = registered_client.post("/ai/chat", json=sample_chat_data)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "AI service temporarily unavailable. Please try again.",
    }
    client_cls.assert_not_called()


def test_chat_requires_auth(client: TestClient, completion, sample_chat_data: dict):
    response = client.post("/ai/chat", json=sample_chat_data)
    assert response.status_code == 401
    assert completion.calls == []


# ---------------------------------------------------------------------------
# DoubtSolver
# ---------------------------------------------------------------------------

def test_system_prompt_placeholders():
    """Test that absent problem details are marked as not provided"""
    prompt = build_system_prompt("Two Sum")
    assert "Problem: Two Sum" in prompt
    assert "Description: Not provided" in prompt
    assert "Test Cases: Not provided" in prompt
    assert "Start Code: Not provided" in prompt
    assert "without giving direct answers" in prompt


def test_solver_passes_limits():
    completion = MagicMock()
    completion.complete.return_value = "hint"
    solver = DoubtSolver(completion, max_tokens=100, temperature=0.2)

    assert solver.solve([{"role": "user", "content": "help"}], "Two Sum") == "hint"
    args, kwargs = completion.complete.call_args
    assert kwargs == {"max_tokens": 100, "temperature": 0.2}


@pytest.mark.parametrize("messages, title", [(None, "Two Sum"), ([], None), ([], "")])
def test_solver_missing_fields(messages, title):
    completion = MagicMock()
    with pytest.raises(MissingFieldsError):
        DoubtSolver(completion).solve(messages, title)
    completion.complete.assert_not_called()


# ---------------------------------------------------------------------------
# AnthropicCompletionService
# ---------------------------------------------------------------------------

def test_to_anthropic_messages():
    """Test conversion of chat-UI turns"""
    messages = [
        {"role": "model", "parts": [{"text": "Hello! I'm your DSA assistant."}]},
        {"role": "user", "parts": [{"text": "Hint please"}]},
        {"role": "user", "content": "Also, what is the complexity?"},
        {"role": "model", "parts": [{"text": "Think about sorting."}]},
        {"role": "user", "parts": [{"text": ""}]},
    ]

    assert to_anthropic_messages(messages) == [
        {"role": "user", "content": "Hint please\n\nAlso, what is the complexity?"},
        {"role": "assistant", "content": "Think about sorting."},
    ]


def test_to_anthropic_messages_odd_parts():
    """Test that null, numeric and non-list parts and non-string roles are tolerated"""
    messages = [
        {"role": "user", "parts": [{"text": None}, {"text": 42}, "stray"]},
        {"role": ["user"], "parts": [{"text": "ignored"}]},
        {"role": "user", "parts": "not a list"},
        {"role": "model", "parts": [{"text": "Try a set."}]},
    ]

    assert to_anthropic_messages(messages) == [
        {"role": "user", "content": "42"},
        {"role": "assistant", "content": "Try a set."},
    ]


def _fake_response(text: str):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


def test_completion_calls_messages_api():
    service = AnthropicCompletionService(api_key="test-key", model="claude-test")

    with patch("app.utils.completion.anthropic.Anthropic") as client_cls:
        client_cls.return_value.messages.create.return_value = _fake_response("Try two pointers.")
        reply = service.complete(
            [{"role": "user", "parts": [{"text": "Hint?"}]}],
            "You are a DSA tutor.",
            max_tokens=2048,
            temperature=0.7,
        )

    assert reply == "Try two pointers."
    client_cls.assert_called_once_with(api_key="test-key")
    client_cls.return_value.messages.create.assert_called_once_with(
        model="claude-test",
        max_tokens=2048,
        temperature=0.7,
        system="You are a DSA tutor.",
        messages=[{"role": "user", "content": "Hint?"}],
    )


def test_completion_api_error():
    """Test that SDK errors become ServiceUnavailableError"""
    service = AnthropicCompletionService(api_key="test-key", model="claude-test")
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")

    with patch("app.utils.completion.anthropic.Anthropic") as client_cls:
        client_cls.return_value.messages.create.side_effect = anthropic.APIConnectionError(request=request)
        with pytest.raises(ServiceUnavailableError):
            service.complete([{"role": "user", "content": "Hint?"}], "prompt", max_tokens=10, temperature=0.7)


def test_completion_empty_response():
    service = AnthropicCompletionService(api_key="test-key", model="claude-test")

    with patch("app.utils.completion.anthropic.Anthropic") as client_cls:
        client_cls.return_value.messages.create.return_value = SimpleNamespace(content=[])
        with pytest.raises(ServiceUnavailableError):
            service.complete([{"role": "user", "content": "Hint?"}], "prompt", max_tokens=10, temperature=0.7)


def test_completion_without_user_message():
    """Test that a conversation with no user turn never reaches the API"""
    service = AnthropicCompletionService(api_key="test-key", model="claude-test")

    with patch("app.utils.completion.anthropic.Anthropic") as client_cls:
        with pytest.raises(ServiceUnavailableError):
            service.complete([{"role": "model", "parts": [{"text": "Hello!"}]}], "prompt", max_tokens=10, temperature=0.7)
    client_cls.assert_not_called()
