"""Shared fixtures for unit tests."""

import pytest

from plantnamer.core.agent import reset_model_agent


@pytest.fixture(autouse=True)
def _fresh_model_agent():
    """Each test starts without a cached OpenAI client."""
    reset_model_agent()
    yield
    reset_model_agent()
