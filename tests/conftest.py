"""Pytest fixtures for hookchain tests."""

import pytest
from loguru import logger

from hookchain import Hooks


@pytest.fixture
def hooks() -> Hooks:
    """Fresh hook instance per test."""
    return Hooks()


@pytest.fixture
def log_messages():
    """Capture hookchain log records as (level, message) tuples."""
    messages: list[tuple[str, str]] = []
    logger.enable("hookchain")
    handler_id = logger.add(
        lambda message: messages.append((message.record["level"].name, message.record["message"])),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
    logger.disable("hookchain")
