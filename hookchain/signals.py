"""Control signals hooks use to steer the wrapped call.

Signals can be raised, returned, or handed to a completion callback::

    def pre(ctx, next):
        next(skip_wrapped_function(cached_value))

    def post(ctx, result):
        return overwrite_result(result.upper())
"""

from typing import Any


class HookSignal(Exception):
    """Base class for control signals; carries a payload tuple."""

    def __init__(self, *payload: Any) -> None:
        super().__init__(*payload)
        self.payload = payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.payload!r}"


class SkipWrappedFunction(HookSignal):
    """Pre-hook signal: do not call the wrapped function, use ``payload`` instead."""


class OverwriteResult(HookSignal):
    """Post-hook signal: replace the result arguments with ``payload``."""


def skip_wrapped_function(*payload: Any) -> SkipWrappedFunction:
    return SkipWrappedFunction(*payload)


def overwrite_result(*payload: Any) -> OverwriteResult:
    return OverwriteResult(*payload)
