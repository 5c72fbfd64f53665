"""Hook execution and wrapping on top of the registry.

Example usage:
```python
hooks = Hooks()

def validate(doc, next):
    if not doc.title:
        next(ValueError("title required"))
    else:
        next()

hooks.pre("save", validate)
hooks.post("save", lambda doc, result: audit.record(doc, result))

save = hooks.create_wrapper("save", repository.save, doc)
await save(doc)
```
"""

import functools
import inspect
import types
from typing import Any, Callable, Optional, Sequence

from .execution import run_post_chain, run_post_chain_sync, run_pre_chain, run_pre_chain_sync
from .registry import HookRegistry
from .signals import SkipWrappedFunction
from .types import HookName


class Hooks(HookRegistry):
    """Registry plus the pre/post engines and the wrap orchestration."""

    async def exec_pre(self, name: HookName, context: Any, args: Sequence[Any] = ()) -> None:
        """Run the pre hooks for ``name``.

        Raises ``SkipWrappedFunction`` if a hook asked to skip the wrapped
        function, or the first error signalled by a hook.
        """
        await run_pre_chain(name, self.pres(name), context, args)

    def exec_pre_sync(self, name: HookName, context: Any, args: Sequence[Any] = ()) -> None:
        run_pre_chain_sync(self.pres(name), context, args)

    async def exec_post(
        self,
        name: HookName,
        context: Any,
        args: Sequence[Any],
        *,
        error: Any = None,
        num_callback_params: Optional[int] = None,
    ) -> list:
        """Run the post hooks for ``name`` and return the result arguments.

        Args:
            name: Hook name
            context: Passed as the first argument to every hook
            args: Result arguments handed to the hooks
            error: Seeds a pending error; only error handlers run while set
            num_callback_params: Fixes the number of public result arguments
        """
        return await run_post_chain(
            name,
            self.posts(name),
            context,
            args,
            error=error,
            num_callback_params=num_callback_params,
            ignore_attribute=self.ignore_attribute,
        )

    def exec_post_sync(self, name: HookName, context: Any, args: Sequence[Any] = ()) -> list:
        return run_post_chain_sync(self.posts(name), context, args)

    async def wrap(
        self,
        name: HookName,
        fn: Callable[..., Any],
        context: Any,
        args: Sequence[Any] = (),
        *,
        num_callback_params: Optional[int] = None,
    ) -> Any:
        """Run pre hooks, then ``fn(*args)``, then post hooks on its result.

        If a pre hook fails, ``fn`` is not called; the post chain runs with
        the error pending so error handlers can observe (or replace) it, and
        the resulting error is raised. Errors raised by ``fn`` itself are
        raised directly without running post hooks.
        """
        args = list(args)
        try:
            await self.exec_pre(name, context, args)
        except SkipWrappedFunction as skip:
            results = list(skip.payload) or [None]
        except Exception as error:
            await self.exec_post(name, context, args, error=error, num_callback_params=num_callback_params)
            raise
        else:
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
            results = [result]

        results = await self.exec_post(name, context, results, num_callback_params=num_callback_params)
        return results[0] if results else None

    def create_wrapper(
        self,
        name: HookName,
        fn: Callable[..., Any],
        context: Any = None,
        *,
        num_callback_params: Optional[int] = None,
    ) -> Callable[..., Any]:
        """Wrap ``fn`` so every call goes through ``wrap()``.

        Returns ``fn`` itself when no hooks are registered for ``name``.
        """
        if not self.has_hooks(name):
            return fn
        return WrappedFunction(self, name, fn, context, num_callback_params=num_callback_params)

    def create_wrapper_sync(self, name: HookName, fn: Callable[..., Any]) -> Callable[..., Any]:
        return SyncWrappedFunction(self, name, fn)


class WrappedFunction:
    """Awaitable callable produced by ``Hooks.create_wrapper``.

    Accessed through an instance (e.g. assigned as a class attribute) with no
    explicit context, the instance becomes the hook context and ``fn`` is
    bound to it like a method.
    """

    def __init__(
        self,
        hooks: Hooks,
        name: HookName,
        fn: Callable[..., Any],
        context: Any = None,
        num_callback_params: Optional[int] = None,
    ) -> None:
        self.hooks = hooks
        self.name = name
        self.fn = fn
        self.context = context
        self.num_callback_params = num_callback_params
        functools.update_wrapper(self, fn)

    def _bind(self, fn: Callable[..., Any], context: Any) -> "WrappedFunction":
        return type(self)(self.hooks, self.name, fn, context, self.num_callback_params)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> "WrappedFunction":
        if instance is None or self.context is not None:
            return self
        return self._bind(types.MethodType(self.fn, instance), instance)

    async def __call__(self, *args: Any) -> Any:
        return await self.hooks.wrap(
            self.name,
            self.fn,
            self.context,
            args,
            num_callback_params=self.num_callback_params,
        )


class SyncWrappedFunction(WrappedFunction):
    """Synchronous counterpart: pre hooks, ``fn``, post hooks, no suspension."""

    def __call__(self, *args: Any) -> Any:
        self.hooks.exec_pre_sync(self.name, self.context, args)
        result = self.fn(*args)
        results = self.hooks.exec_post_sync(self.name, self.context, [result])
        return results[0] if results else None
