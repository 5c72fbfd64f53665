"""Post-hook chain execution.

Post hooks always run to the end of the chain. Once an error is pending only
error handlers run; each may replace the pending error or overwrite the
result arguments, but nothing clears the error again.
"""

import inspect
from typing import Any, Optional, Sequence

from loguru import logger

from ..config import config
from ..errors import SyncHookError
from ..signals import OverwriteResult
from ..types import HookList, HookName, PostHook, describe
from .outcome import Completion, Outcome, OutcomeKind, as_exception


def public_arguments(
    args: Sequence[Any],
    num_callback_params: Optional[int] = None,
    ignore_attribute: Optional[str] = None,
) -> list:
    """Drop internal arguments, then pad or truncate to ``num_callback_params``."""
    marker = ignore_attribute or config.IGNORE_ATTRIBUTE
    # Exactly True; mocks and proxies invent attributes on demand
    public = [arg for arg in args if getattr(arg, marker, False) is not True]
    if num_callback_params is not None:
        public = public[:num_callback_params]
        public.extend([None] * (num_callback_params - len(public)))
    return public


async def run_post_chain(
    name: HookName,
    chain: HookList[PostHook],
    context: Any,
    args: Sequence[Any],
    error: Any = None,
    num_callback_params: Optional[int] = None,
    ignore_attribute: Optional[str] = None,
) -> list:
    """Run every post hook in ``chain`` and return the final result arguments.

    Raises
    ------
    Exception
        The error still pending after the last hook.
    """
    args = list(args)
    pending = as_exception(error) if error else None

    for hook in chain:
        public = public_arguments(args, num_callback_params, ignore_attribute)
        num_args = len(public)
        handles_errors = hook.handles_errors(num_args)

        if pending is not None:
            if not handles_errors:
                continue
            outcome = await _invoke(hook, context, [pending] + public, hook.takes_callback(num_args, True))
        else:
            if handles_errors:
                continue
            outcome = await _invoke(hook, context, public, hook.takes_callback(num_args, False))

        if outcome.kind is OutcomeKind.OVERWRITE:
            args = list(outcome.payload)
        elif outcome.kind is OutcomeKind.FAILED:
            if pending is not None:
                logger.debug(f"Post hook error for {name!r} replaced: {pending!r} -> {outcome.error!r}")
            pending = outcome.error
        elif outcome.kind is OutcomeKind.SKIP:
            logger.warning(f"Ignoring skip_wrapped_function() signalled by a post hook for {name!r}")

    if pending is not None:
        raise pending
    return args


def run_post_chain_sync(chain: HookList[PostHook], context: Any, args: Sequence[Any] = ()) -> list:
    args = list(args)
    for hook in chain:
        result = hook.fn(context, *hook.signature.fit(args))
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise SyncHookError(f"post hook {describe(hook.fn)} returned an awaitable in a synchronous chain")
        if isinstance(result, OverwriteResult):
            args = list(result.payload)
    return args


async def _invoke(hook: PostHook, context: Any, args: list, takes_callback: bool) -> Outcome:
    callback = Completion("callback") if takes_callback else None
    try:
        if callback is not None:
            result = hook.fn(context, *hook.signature.fit(args, reserved=1), callback)
        else:
            result = hook.fn(context, *hook.signature.fit(args))
        if inspect.isawaitable(result):
            return Outcome.from_value(await result)
        if callback is None:
            return Outcome.from_value(result)
    except Exception as exc:
        return Outcome.from_error(exc)
    return await callback
