"""Pytest configuration and fixtures"""
import os

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from typing import Any, Dict, Generator, List  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.api.deps import get_completion_service  # noqa: E402
from app.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.utils.errors import ServiceUnavailableError  # noqa: E402


class FakeCompletionService:
    """Records calls instead of reaching the Anthropic API"""

    def __init__(self, reply: str = "Think about what a hash map gives you here.", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    def complete(self, messages, system_prompt, max_tokens, temperature) -> str:
        self.calls.append({
            "messages": messages,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.fail:
            raise ServiceUnavailableError()
        return self.reply


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def completion() -> FakeCompletionService:
    return FakeCompletionService()


@pytest.fixture(scope="function")
def client(db: Session, completion: FakeCompletionService) -> Generator[TestClient, None, None]:
    """Create test client with database session and AI client overrides"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_service] = lambda: completion
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data() -> dict:
    """Valid registration body"""
    return {
        "firstName": "John",
        "emailId": "john@example.com",
        "password": "SecurePass123!",
    }


@pytest.fixture
def registered_client(client: TestClient, sample_user_data: dict) -> TestClient:
    """Client holding the session cookie of a freshly registered user"""
    response = client.post("/user/register", json=sample_user_data)
    assert response.status_code == 201
    return client


@pytest.fixture
def admin_client(client: TestClient, db: Session) -> TestClient:
    """Client holding the session cookie of an administrator"""
    from app.api.deps import get_hasher
    from app.models.user import ROLE_ADMIN, User

    db.add(User(
        first_name="Admin",
        email_id="admin@example.com",
        password=get_hasher().hash("AdminPass123!"),
        role=ROLE_ADMIN,
    ))
    db.commit()

    response = client.post("/user/login", json={"emailId": "admin@example.com", "password": "AdminPass123!"})
    assert response.status_code == 201
    return client


@pytest.fixture
def sample_chat_data() -> dict:
    """Chat body as sent by the problem page"""
    return {
        "messages": [
            {"role": "model", "parts": [{"text": "Hello! I'm your DSA assistant."}]},
            {"role": "user", "parts": [{"text": "How should I start?"}]},
        ],
        "title": "Two Sum",
        "description": "Return indices of the two numbers that add up to target.",
        "testCases": [{"input": "nums = [2,7,11,15], target = 9", "output": "[0,1]"}],
        "startCode": "def two_sum(nums, target):\n    pass",
    }
