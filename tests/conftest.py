"""Shared pytest fixtures for MAXSPAN tests."""

import sys
from pathlib import Path

import pytest
from loguru import logger

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Import all fixtures for global availability
from tests.fixtures.span_fixtures import *
from tests.fixtures.bhav_fixtures import *


@pytest.fixture
def log_messages():
    """
    Capture loguru messages emitted during a test.

    Returns:
        list[str]: Formatted "LEVEL message" strings, appended as logged

    Example:
        def test_warns(log_messages):
            do_something()
            assert any("WARNING" in m for m in log_messages)
    """
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(f"{m.record['level'].name} {m.record['message']}"), level="DEBUG")
    yield messages
    logger.remove(handler_id)
