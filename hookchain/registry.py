"""Registry of pre and post hooks keyed by hook name."""

from typing import Any, Callable, Optional

from loguru import logger

from .config import config
from .errors import InvalidHookError
from .types import Convention, HookList, HookName, HookSignature, PostHook, PreHook, describe

HookPredicate = Callable[[Any], bool]


class HookRegistry:
    """Stores pre and post hooks per name, in registration order.

    Hook lists are immutable values, so ``clone()`` only copies the two
    mappings and a clone can never alias the lists of its source. Names whose
    list becomes empty are removed from the mapping.
    """

    def __init__(self, arity_inference: Optional[bool] = None, ignore_attribute: Optional[str] = None) -> None:
        self.arity_inference = config.ARITY_INFERENCE if arity_inference is None else arity_inference
        self.ignore_attribute = ignore_attribute or config.IGNORE_ATTRIBUTE
        self._pres: dict[HookName, HookList[PreHook]] = {}
        self._posts: dict[HookName, HookList[PostHook]] = {}

    def _spawn(self) -> "HookRegistry":
        return type(self)(arity_inference=self.arity_inference, ignore_attribute=self.ignore_attribute)

    def pre(
        self,
        name: HookName,
        fn: Optional[Callable[..., Any]] = None,
        *,
        is_async: bool = False,
        convention: Optional[Convention] = None,
        prepend: bool = False,
        **options: Any,
    ) -> "HookRegistry":
        """Register a pre hook for ``name``.

        Parameters
        ----------
        name : HookName
            Hook name.
        fn : callable
            Called as ``fn(context)``, ``fn(context, next, *args)`` or
            ``fn(context, next, done)`` depending on its convention.
        is_async : bool
            Run with the parallel convention (``next`` and ``done`` callbacks).
        convention : Convention, optional
            Explicit calling convention. When omitted it is inferred from the
            signature if arity inference is enabled, otherwise SYNC.
        prepend : bool
            Insert before the already registered hooks.
        **options
            Arbitrary metadata stored on the hook record.

        Raises
        ------
        InvalidHookError
            If ``fn`` is not callable or cannot accept a context argument.
        """
        _validate("pre", fn)
        if convention is Convention.PARALLEL:
            is_async = True
        elif is_async:
            convention = Convention.PARALLEL
        elif convention is None:
            convention = self._infer_pre(fn)

        hook = _build(PreHook, fn, convention=convention, is_async=is_async, options=options)
        self._pres[name] = self.pres(name).add(hook, prepend=prepend)
        logger.debug(f"Registered pre hook {describe(fn)} for {name!r} ({convention.value})")
        return self

    def post(
        self,
        name: HookName,
        fn: Optional[Callable[..., Any]] = None,
        *,
        error_handler: bool = False,
        convention: Optional[Convention] = None,
        prepend: bool = False,
        **options: Any,
    ) -> "HookRegistry":
        """Register a post hook for ``name``.

        Post hooks are called as ``fn(context, *result)`` or, with the
        CALLBACK convention, ``fn(context, *result, callback)``. Error
        handlers receive the pending error before the result arguments.
        """
        _validate("post", fn)
        if convention is Convention.PARALLEL:
            raise InvalidHookError("post() does not support the parallel convention")
        if convention is None and not self.arity_inference:
            convention = Convention.SYNC

        hook = _build(PostHook, fn, convention=convention, error_handler=error_handler, options=options)
        self._posts[name] = self.posts(name).add(hook, prepend=prepend)
        kind = "error handler" if error_handler else "post hook"
        logger.debug(f"Registered {kind} {describe(fn)} for {name!r}")
        return self

    def post_error(
        self,
        name: HookName,
        fn: Optional[Callable[..., Any]] = None,
        *,
        convention: Optional[Convention] = None,
        prepend: bool = False,
        **options: Any,
    ) -> "HookRegistry":
        """Register a post hook that only runs while an error is pending."""
        return self.post(name, fn, error_handler=True, convention=convention, prepend=prepend, **options)

    def _infer_pre(self, fn: Callable[..., Any]) -> Convention:
        if self.arity_inference and _signature(fn).arity > 0:
            return Convention.CALLBACK
        return Convention.SYNC

    def pres(self, name: HookName) -> HookList[PreHook]:
        return self._pres.get(name, HookList())

    def posts(self, name: HookName) -> HookList[PostHook]:
        return self._posts.get(name, HookList())

    def has_hooks(self, name: HookName) -> bool:
        """True if any pre or post hook is registered for ``name``."""
        return name in self._pres or name in self._posts

    def unregister(self, name: HookName, fn: Callable[..., Any]) -> bool:
        """Remove every pre and post registration of ``fn`` under ``name``.

        Returns True if anything was removed.
        """
        removed = False
        for hooks in (self._pres, self._posts):
            current = hooks.get(name)
            if current is None:
                continue
            remaining = current.without(fn)
            if len(remaining) == len(current):
                continue
            removed = True
            if len(remaining):
                hooks[name] = remaining
            else:
                del hooks[name]
        if removed:
            logger.debug(f"Unregistered {describe(fn)} from {name!r}")
        return removed

    def clear(self, name: Optional[HookName] = None) -> None:
        """Clear hooks. If name given, clear only that name."""
        if name is None:
            self._pres.clear()
            self._posts.clear()
        else:
            self._pres.pop(name, None)
            self._posts.pop(name, None)

    def list_hooks(self, name: Optional[HookName] = None) -> dict[HookName, dict[str, list[str]]]:
        """Map hook names to the readable names of their pre and post hooks."""
        names = [name] if name is not None else list(dict.fromkeys([*self._pres, *self._posts]))
        return {
            n: {
                "pre": [describe(h.fn) for h in self.pres(n)],
                "post": [describe(h.fn) for h in self.posts(n)],
            }
            for n in names
            if self.has_hooks(n)
        }

    def clone(self) -> "HookRegistry":
        """Independent copy; hook records are shared, lists are not."""
        other = self._spawn()
        other._pres = dict(self._pres)
        other._posts = dict(self._posts)
        return other

    def merge(self, other: "HookRegistry", into_clone: bool = True) -> "HookRegistry":
        """Fold ``other``'s hooks into this registry (or into a clone of it).

        Pre hooks are deduplicated by callable, post hooks by record.
        """
        target = self.clone() if into_clone else self

        for name, incoming in other._pres.items():
            existing = target.pres(name)
            known = [h.fn for h in existing]
            target._pres[name] = existing.extend(h for h in incoming if not any(h.fn is fn for fn in known))

        for name, incoming in other._posts.items():
            existing = target.posts(name)
            target._posts[name] = existing.extend(h for h in incoming if not any(h is p for p in existing))

        return target

    def filter(self, predicate: HookPredicate) -> "HookRegistry":
        """New registry holding only hooks for which ``predicate`` is true.

        The predicate receives copies of the hook records with ``name`` set.
        """
        filtered = self.clone()
        for source, target in ((self._pres, filtered._pres), (self._posts, filtered._posts)):
            for name, hooks in source.items():
                kept = HookList.of(h for h in (hook.named(name) for hook in hooks) if predicate(h))
                if len(kept):
                    target[name] = kept
                else:
                    del target[name]
        return filtered


def _validate(method: str, fn: Any) -> None:
    if not callable(fn):
        raise InvalidHookError(f"{method}() requires a callable, got {type(fn).__name__!r}")


def _build(cls: type, fn: Callable[..., Any], **fields: Any):
    try:
        return cls(fn=fn, **fields)
    except ValueError as exc:
        raise InvalidHookError(f"{describe(fn)}: {exc}") from exc


def _signature(fn: Callable[..., Any]) -> HookSignature:
    try:
        return HookSignature.of(fn)
    except ValueError as exc:
        raise InvalidHookError(f"{describe(fn)}: {exc}") from exc
