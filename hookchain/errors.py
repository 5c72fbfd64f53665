"""Exceptions raised by the hook engine itself."""

from typing import Any


class HooksError(Exception):
    """Base class for hook engine errors."""


class InvalidHookError(HooksError, TypeError):
    """Raised at registration time when a hook cannot be used."""


class HookCallbackError(HooksError):
    """Wraps a non-exception error value passed to a completion callback.

    Hooks may signal failure with ``next("error!")``; Python can only raise
    exceptions, so the original value is kept on ``value``.
    """

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return str(self.value)


class SyncHookError(HooksError):
    """Raised when a hook in a synchronous chain returns an awaitable."""
