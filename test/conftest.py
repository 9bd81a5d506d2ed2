from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from clarityai.config import Settings
from clarityai.main import create_app
from helpers import FakeCompletionClient, FakeExplorer


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", api_url="https://provider.test/v1/chat/completions", backoff_seconds=0.0)


@pytest.fixture
def make_client(settings):
    """Build a TestClient around a fake provider scripted with ``replies``."""

    def _make(*replies: Any, explorer: Optional[FakeExplorer] = None):
        fake = FakeCompletionClient(replies or ["{}"])
        app = create_app(settings, completion_client=fake, explorer=explorer or FakeExplorer())
        return TestClient(app), fake

    return _make


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def malicious_source() -> str:
    return "\n".join(
        ["(define-public (drain (amount uint))"]
        + [f"  (contract-call? 'SP000000000000000000002Q6VF78.pool swap-{n} amount)" for n in range(1, 8)]
        + [")"]
    )
