"""Pre-hook chain execution.

Hooks run in registration order. Sequential hooks (SYNC and CALLBACK) must
finish before the next hook starts. PARALLEL hooks only need to call
``next()`` for the chain to move on; their ``done()`` signals are collected
into a barrier that is awaited once the chain pointer is exhausted.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional, Sequence

from loguru import logger

from ..errors import SyncHookError
from ..signals import SkipWrappedFunction
from ..types import Convention, HookList, HookName, PreHook, describe
from .outcome import Completion, Outcome, OutcomeKind

# Strong references to tasks spawned for awaitable parallel hooks
_background: set = set()


async def run_pre_chain(
    name: HookName,
    chain: HookList[PreHook],
    context: Any,
    args: Sequence[Any] = (),
) -> None:
    """Run every pre hook in ``chain``.

    Raises
    ------
    SkipWrappedFunction
        If any hook signalled a skip and no hook failed.
    Exception
        The first error signalled by a hook.
    """
    if not len(chain):
        return

    forwarded = _forwardable(args)
    barrier: list[Completion] = []
    skipped: Optional[SkipWrappedFunction] = None

    for hook in chain:
        if hook.convention is Convention.PARALLEL:
            proceed = Completion("next")
            done = Completion("done")
            outcome = await _start_parallel(hook, context, proceed, done)
            if outcome.kind is not OutcomeKind.SKIP:
                barrier.append(done)
        elif hook.convention is Convention.CALLBACK:
            proceed = Completion("next")
            extra = hook.signature.fit(forwarded, reserved=1)
            outcome = await _settle(lambda: hook.fn(context, proceed, *extra), proceed)
        else:
            outcome = await _settle(lambda: hook.fn(context), None)

        skipped = _check(name, outcome, skipped)

    if barrier:
        skipped = await _await_barrier(name, barrier, skipped)

    if skipped is not None:
        raise skipped


def run_pre_chain_sync(chain: HookList[PreHook], context: Any, args: Sequence[Any] = ()) -> None:
    for hook in chain:
        result = hook.fn(context, *hook.signature.fit(args))
        if inspect.isawaitable(result):
            _discard(result)
            raise SyncHookError(f"pre hook {describe(hook.fn)} returned an awaitable in a synchronous chain")


def _forwardable(args: Sequence[Any]) -> tuple:
    # Never hand the caller's own trailing continuation to a hook
    args = tuple(args)
    if args and callable(args[-1]):
        return args[:-1]
    return args


async def _settle(invoke: Callable[[], Any], completion: Optional[Completion]) -> Outcome:
    """Invoke a sequential hook and wait for its completion signal.

    A returned awaitable takes precedence over the completion callback.
    """
    try:
        result = invoke()
        if inspect.isawaitable(result):
            return Outcome.from_value(await result)
        if completion is None:
            return Outcome.from_value(result)
    except Exception as exc:
        return Outcome.from_error(exc)
    return await completion


async def _start_parallel(
    hook: PreHook,
    context: Any,
    proceed: Completion,
    done: Completion,
) -> Outcome:
    callbacks = hook.signature.fit((proceed, done))
    try:
        result = hook.fn(context, *callbacks)
    except Exception as exc:
        outcome = Outcome.from_error(exc)
        proceed.settle(outcome)
        done.settle(outcome)
        return outcome

    if inspect.isawaitable(result):
        # The hook's own completion counts as both next() and done() unless
        # it fired them itself first
        task = asyncio.ensure_future(result)

        def _finish(fut: asyncio.Future) -> None:
            _background.discard(fut)
            outcome = Outcome.from_task(fut)
            proceed.settle(outcome)
            done.settle(outcome)

        _background.add(task)
        task.add_done_callback(_finish)
    elif not callbacks:
        outcome = Outcome.from_value(result)
        proceed.settle(outcome)
        done.settle(outcome)
    elif len(callbacks) == 1:
        # A hook that only takes next() is done when it calls it
        proceed.future.add_done_callback(lambda fut: done.settle(fut.result()))

    return await proceed


def _check(name: HookName, outcome: Outcome, skipped: Optional[SkipWrappedFunction]) -> Optional[SkipWrappedFunction]:
    if outcome.kind is OutcomeKind.FAILED:
        logger.debug(f"Pre hook chain {name!r} failed: {outcome.error!r}")
        raise outcome.error
    if outcome.kind is OutcomeKind.SKIP:
        logger.debug(f"Pre hook chain {name!r} will skip the wrapped function")
        return skipped if skipped is not None else outcome.signal
    if outcome.kind is OutcomeKind.OVERWRITE:
        logger.warning(f"Ignoring overwrite_result() signalled by a pre hook for {name!r}")
    return skipped


async def _await_barrier(
    name: HookName,
    barrier: list[Completion],
    skipped: Optional[SkipWrappedFunction],
) -> Optional[SkipWrappedFunction]:
    """Wait for every done() signal; the first error in completion order wins."""
    pending = {completion.future for completion in barrier}
    while pending:
        finished, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        for completion in barrier:
            if completion.future in finished:
                skipped = _check(name, completion.future.result(), skipped)
    return skipped


def _discard(result: Any) -> None:
    if inspect.iscoroutine(result):
        result.close()
