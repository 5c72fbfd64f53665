"""Tagged hook outcomes and the one-shot completion token handed to hooks."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from loguru import logger

from ..errors import HookCallbackError
from ..signals import HookSignal, OverwriteResult, SkipWrappedFunction


class OutcomeKind(Enum):
    """What a single hook invocation asked the chain to do."""

    CONTINUE = "continue"
    FAILED = "failed"
    SKIP = "skip"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class Outcome:
    """Result of one hook invocation, threaded through the execution loops."""

    kind: OutcomeKind
    error: Optional[BaseException] = None
    signal: Optional[HookSignal] = None

    @property
    def payload(self) -> tuple:
        return self.signal.payload if self.signal is not None else ()

    @classmethod
    def from_error(cls, error: Any) -> "Outcome":
        """Classify an error raised by a hook or passed to its callback."""
        if not error:
            return CONTINUE
        if isinstance(error, SkipWrappedFunction):
            return cls(OutcomeKind.SKIP, signal=error)
        if isinstance(error, OverwriteResult):
            return cls(OutcomeKind.OVERWRITE, signal=error)
        return cls(OutcomeKind.FAILED, error=as_exception(error))

    @classmethod
    def from_value(cls, value: Any) -> "Outcome":
        """Classify a value returned by a hook; only signals are meaningful."""
        if isinstance(value, HookSignal):
            return cls.from_error(value)
        return CONTINUE

    @classmethod
    def from_task(cls, task: "asyncio.Future[Any]") -> "Outcome":
        if task.cancelled():
            return cls(OutcomeKind.FAILED, error=asyncio.CancelledError())
        error = task.exception()
        if error is not None:
            return cls.from_error(error)
        return cls.from_value(task.result())


CONTINUE = Outcome(OutcomeKind.CONTINUE)


def as_exception(error: Any) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return HookCallbackError(error)


class Completion:
    """One-shot completion token.

    Hooks receive instances as ``next``, ``done`` or ``callback`` and call
    them as ``token()`` or ``token(error)``. The first call settles the
    token; later calls are ignored. Calls from other threads are marshalled
    onto the loop that created the token.
    """

    def __init__(self, label: str = "callback") -> None:
        self.label = label
        self._loop = asyncio.get_running_loop()
        self._future: "asyncio.Future[Outcome]" = self._loop.create_future()

    def __call__(self, error: Any = None, *_: Any) -> None:
        self.settle(Outcome.from_error(error))

    def settle(self, outcome: Outcome) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._settle(outcome)
            return
        try:
            self._loop.call_soon_threadsafe(self._settle, outcome)
        except RuntimeError:
            logger.debug(f"Ignoring {self.label}() call after its event loop closed ({outcome.kind.value})")

    def _settle(self, outcome: Outcome) -> None:
        if self._future.done():
            logger.debug(f"Ignoring repeated {self.label}() call ({outcome.kind.value})")
            return
        self._future.set_result(outcome)

    @property
    def settled(self) -> bool:
        return self._future.done()

    @property
    def future(self) -> "asyncio.Future[Outcome]":
        return self._future

    def __await__(self):
        return self._future.__await__()
