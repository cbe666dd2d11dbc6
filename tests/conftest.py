"""Pytest configuration and fixtures."""

import hashlib
import hmac

import pytest

from src.config import Settings, create_test_config


@pytest.fixture
def webhook_secret():
    """Shared secret used to sign test deliveries."""
    return "test-secret"


@pytest.fixture
def test_settings(webhook_secret) -> Settings:
    """Webhook-only settings with the test secret."""
    return create_test_config(webhook_secret=webhook_secret)


@pytest.fixture
def sign():
    """Sign a payload the way GitHub does for X-Hub-Signature."""

    def _sign(payload: bytes, secret: str) -> str:
        return "sha1=" + hmac.new(secret.encode(), payload, hashlib.sha1).hexdigest()

    return _sign
