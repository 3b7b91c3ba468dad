"""
Test Configuration
==================

Pytest fixtures for zkmail tests.
"""

import os
from collections.abc import Callable

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["PROVER_MODE"] = "mock"


TWITTER_BODY = "We noticed a login to your account @alice from a new device"


def build_email(
    body: str = TWITTER_BODY,
    sender: str = "Twitter <notify@twitter.com>",
    dkim: bool = True,
    newline: str = "\r\n",
    extra_headers: list[str] | None = None,
) -> str:
    """Assemble a raw email."""
    headers = [f"From: {sender}", "To: alice@example.com", "Subject: New login"]
    if dkim:
        headers.append("DKIM-Signature: v=1; a=rsa-sha256; d=twitter.com; s=dkim-201406")
    headers.extend(extra_headers or [])
    return newline.join(headers) + newline + newline + body


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def email_factory() -> Callable[..., str]:
    """Factory for raw test emails."""
    return build_email


@pytest.fixture
def twitter_email() -> str:
    """Login notice for @alice from twitter.com."""
    return build_email()


@pytest.fixture
def mock_backend():
    """Fresh deterministic proving backend."""
    from zkmail.zk.mock import MockProvingBackend

    return MockProvingBackend(key_id="test-key", delay_seconds=0)


@pytest.fixture(autouse=True)
def reset_backend():
    """Keep the global proving backend from leaking between tests."""
    from zkmail.zk.backend import reset_proving_backend

    reset_proving_backend()
    yield
    reset_proving_backend()
