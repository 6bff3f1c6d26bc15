from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from ai_apps.config import get_settings
from ai_apps.main import app


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "OPENROUTER_API_KEY",
        "GOOGLE_GEMINI_API_KEY",
        "HUGGINGFACE_API_TOKEN",
    ):
        monkeypatch.setenv(name, "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
