import pytest
from loguru import logger

from coreduce import config


@pytest.fixture
def loguru_messages():
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(str(message)),
        level="DEBUG",
        format="{level} {message}",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def debug_steps(monkeypatch):
    monkeypatch.setattr(config, "DEBUG_STEPS", True)
