"""Shared fixtures for the critic server and client tests.

The OpenAI client is a MagicMock shaped like the SDK responses the analysis
helpers read. Log files go to a throwaway directory.
"""

import os
import tempfile
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("CRITIC_LOG_DIR", tempfile.mkdtemp(prefix="critic-test-logs-"))

from critic_testutils import chat_response, image_response, make_png, make_settings  # noqa: E402
from uicritic.api.app import create_app  # noqa: E402
from uicritic.config.settings import Settings  # noqa: E402
from uicritic.services.analysis import AnalysisService  # noqa: E402


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_openai() -> MagicMock:
    client = MagicMock()
    client.chat.completions.create.return_value = chat_response("Looks clear.")
    client.images.edit.return_value = image_response("aGVsbG8=")
    return client


@pytest.fixture
def make_client(fake_openai: MagicMock) -> Callable[..., Any]:
    """Factory fixture returning a Flask test client wired to ``fake_openai``.

    Pass ``client_factory`` or ``resolver`` to override the analysis service's
    collaborators; remaining keyword arguments go to ``create_app``.
    """

    def _make(settings: Settings, **kwargs: Any):
        factory = kwargs.pop("client_factory", lambda _settings: fake_openai)
        service = AnalysisService(
            settings,
            resolver=kwargs.pop("resolver", None),
            client_factory=factory,
        )
        app = create_app(settings, analysis_service=service, **kwargs)
        app.config["TESTING"] = True
        return app.test_client()

    return _make
