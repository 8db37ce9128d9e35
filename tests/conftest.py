"""
Shared Test Fixtures.

Resets module-level caches between tests and provides a scripted RPC
channel for orchestration and CLI tests.
"""

import logging
from collections.abc import Callable, Generator
from typing import Any

import pytest
import structlog

from xapi_bridge.core import config as config_module
from xapi_bridge.core import logging as logging_module
from xapi_bridge.core.exceptions import TransportError
from xapi_bridge.rpc.values import TypedValue


class FakeChannel:
    """
    RPC channel that answers from a script and records every call.

    Scripted outcomes are TypedValues (returned) or exceptions (raised).
    Methods with no script raise TransportError.
    """

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, tuple[TypedValue, ...]]] = []

    def call(self, method: str, args: list[TypedValue] | tuple[TypedValue, ...]) -> TypedValue:
        self.calls.append((method, tuple(args)))
        if method not in self.responses:
            raise TransportError(f"No scripted response for {method}")
        outcome = self.responses[method]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_caches() -> Generator[None, None, None]:
    """Reset config caches, structlog context and handlers added by setup_logging."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level

    config_module._app_config = None
    logging_module._logging_config = None
    structlog.contextvars.clear_contextvars()

    yield

    config_module._app_config = None
    logging_module._logging_config = None
    structlog.contextvars.clear_contextvars()
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(saved_level)


@pytest.fixture
def make_channel() -> Callable[..., FakeChannel]:
    """Factory for scripted channels."""
    return FakeChannel
