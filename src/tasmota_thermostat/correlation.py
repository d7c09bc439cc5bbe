"""
Correlation ids for tying together the log lines of one inbound message.

Every MQTT message is handled inside its own ``correlation_context()`` so the
decode, model update, and push notification logs share a single id.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "correlation_context",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)


def generate_correlation_id() -> str:
    """Return a new correlation id (UUID4 hex, no dashes)."""
    return uuid.uuid4().hex


def get_correlation_id() -> str | None:
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str]:
    """
    Scope a correlation id to a block, restoring the previous id on exit.

    Args:
        correlation_id: Id to use; a new one is generated when omitted

    Yields:
        The correlation id active inside the block
    """
    if correlation_id is None:
        correlation_id = generate_correlation_id()
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


def ensure_correlation_id() -> str:
    """Return the current correlation id, creating one for this context if unset."""
    current_id = _correlation_id.get()
    if current_id is None:
        current_id = generate_correlation_id()
        _ = _correlation_id.set(current_id)
    return current_id
