"""Pre/post hook chains around arbitrary functions."""

from loguru import logger

from .config import Config, config
from .errors import HookCallbackError, HooksError, InvalidHookError, SyncHookError
from .hooks import Hooks, SyncWrappedFunction, WrappedFunction
from .registry import HookRegistry
from .signals import HookSignal, OverwriteResult, SkipWrappedFunction, overwrite_result, skip_wrapped_function
from .types import Convention, HookList, HookSignature, PostHook, PreHook

# Silent unless the application opts in with logger.enable("hookchain")
logger.disable("hookchain")

__all__ = [
    "Config",
    "Convention",
    "HookCallbackError",
    "HookList",
    "HookRegistry",
    "HookSignal",
    "HookSignature",
    "Hooks",
    "HooksError",
    "InvalidHookError",
    "OverwriteResult",
    "PostHook",
    "PreHook",
    "SkipWrappedFunction",
    "SyncHookError",
    "SyncWrappedFunction",
    "WrappedFunction",
    "config",
    "overwrite_result",
    "skip_wrapped_function",
]
