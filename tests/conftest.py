"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
import os
from io import StringIO
from typing import TYPE_CHECKING, Any

import pytest

from paydemo.models.config import Settings
from paydemo.utils.logging import JsonFormatter
from tests.fixtures.webhook_payloads import create_checkout_session_object, create_event_payload

if TYPE_CHECKING:
    from collections.abc import Generator

WEBHOOK_SECRET = "whsec_test_0123456789abcdef"


@pytest.fixture(autouse=True)
def reset_env() -> Generator[None]:
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def webhook_secret() -> str:
    """Shared signing secret for tests."""
    return WEBHOOK_SECRET


@pytest.fixture
def mock_env(webhook_secret: str) -> dict[str, str]:
    """Standard environment variables for testing."""
    return {
        "STRIPE_WEBHOOK_SECRET": webhook_secret,
        "STRIPE_SECRET_KEY": "sk_test_placeholder",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def set_mock_env(mock_env: dict[str, str]) -> Generator[None]:
    """Set mock environment variables for a test."""
    for key, value in mock_env.items():
        os.environ[key] = value
    yield


@pytest.fixture
def settings(webhook_secret: str) -> Settings:
    """Settings with a vendor API key configured."""
    return Settings(webhook_secret=webhook_secret, stripe_api_key="sk_test_placeholder")


@pytest.fixture
def sample_session_object() -> dict[str, Any]:
    """A paid checkout session object."""
    return create_checkout_session_object()


@pytest.fixture
def sample_completed_event() -> dict[str, Any]:
    """A checkout.session.completed event payload."""
    return create_event_payload()


@pytest.fixture
def log_stream() -> Generator[StringIO]:
    """Capture JSON log lines written under the ``paydemo`` logger."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger("paydemo")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield stream
    logger.removeHandler(handler)
    logger.setLevel(previous_level)
