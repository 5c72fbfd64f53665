"""Hook records and the immutable per-name hook lists."""

import inspect
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Mapping, Optional, TypeVar

# A hook name: usually a string, but any hashable key (e.g. a compiled regex) works
HookName = Hashable


class Convention(Enum):
    """How a hook signals that it has finished."""

    SYNC = "sync"  # returns (or returns an awaitable)
    CALLBACK = "callback"  # calls a completion callback
    PARALLEL = "parallel"  # pre only: separate next() and done() callbacks


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class HookSignature:
    """Positional shape of a hook, not counting the leading context argument."""

    arity: int
    variadic: bool = False

    @classmethod
    def of(cls, fn: Callable[..., Any]) -> "HookSignature":
        """Inspect ``fn``.

        Raises
        ------
        ValueError
            If ``fn`` cannot take the context as its first positional argument.
        """
        try:
            params = inspect.signature(fn).parameters.values()
        except (TypeError, ValueError):
            # Builtins without metadata: assume they accept anything
            return cls(arity=0, variadic=True)

        positional = sum(1 for p in params if p.kind in _POSITIONAL)
        variadic = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
        if positional == 0 and not variadic:
            raise ValueError("hook must accept the context as its first positional argument")
        return cls(arity=max(positional - 1, 0), variadic=variadic)

    def fit(self, args: Iterable[Any], reserved: int = 0) -> tuple:
        """Match ``args`` to the hook's positional arity.

        Surplus arguments are dropped and missing ones are filled with None.
        ``reserved`` positions are kept free for callbacks appended afterwards.
        """
        args = tuple(args)
        if self.variadic:
            return args
        width = max(self.arity - reserved, 0)
        return args[:width] + (None,) * (width - len(args))


@dataclass(frozen=True, eq=False)
class PreHook:
    """A registered pre hook. Compared by identity."""

    fn: Callable[..., Any]
    convention: Convention = Convention.SYNC
    is_async: bool = False
    options: Mapping[str, Any] = field(default_factory=dict)
    name: Optional[HookName] = None
    signature: HookSignature = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", HookSignature.of(self.fn))

    def named(self, name: HookName) -> "PreHook":
        return replace(self, name=name)


@dataclass(frozen=True, eq=False)
class PostHook:
    """A registered post hook. Compared by identity.

    ``convention`` is None when the calling convention is inferred at
    execution time from the hook's arity.
    """

    fn: Callable[..., Any]
    convention: Optional[Convention] = None
    error_handler: bool = False
    options: Mapping[str, Any] = field(default_factory=dict)
    name: Optional[HookName] = None
    signature: HookSignature = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", HookSignature.of(self.fn))

    def named(self, name: HookName) -> "PostHook":
        return replace(self, name=name)

    def handles_errors(self, num_args: int) -> bool:
        """Whether this hook runs only while an error is pending.

        ``num_args`` is the number of public result arguments.
        """
        if self.error_handler:
            return True
        # error + data args + callback
        return self.convention is None and self.signature.arity == num_args + 2

    def takes_callback(self, num_args: int, handling_error: bool) -> bool:
        if self.convention is not None:
            return self.convention is Convention.CALLBACK
        expected = num_args + 2 if handling_error else num_args + 1
        return self.signature.arity == expected


H = TypeVar("H", PreHook, PostHook)


@dataclass(frozen=True)
class HookList(Generic[H]):
    """Ordered hooks for one name plus the count of parallel pre hooks.

    Instances are immutable; every modification returns a new list.
    """

    hooks: tuple = ()
    num_async: int = 0

    @classmethod
    def of(cls, hooks: Iterable[H]) -> "HookList[H]":
        hooks = tuple(hooks)
        return cls(hooks=hooks, num_async=sum(1 for h in hooks if getattr(h, "is_async", False)))

    def add(self, hook: H, prepend: bool = False) -> "HookList[H]":
        hooks = (hook,) + self.hooks if prepend else self.hooks + (hook,)
        return HookList(hooks=hooks, num_async=self.num_async + int(getattr(hook, "is_async", False)))

    def extend(self, hooks: Iterable[H]) -> "HookList[H]":
        hooks = tuple(hooks)
        added = sum(1 for h in hooks if getattr(h, "is_async", False))
        return HookList(hooks=self.hooks + hooks, num_async=self.num_async + added)

    def without(self, fn: Callable[..., Any]) -> "HookList[H]":
        return HookList.of(h for h in self.hooks if h.fn is not fn)

    def __iter__(self) -> Iterator[H]:
        return iter(self.hooks)

    def __len__(self) -> int:
        return len(self.hooks)

    def __getitem__(self, index: int) -> H:
        return self.hooks[index]


def describe(fn: Callable[..., Any]) -> str:
    """Readable name for a hook callable, used in logs and introspection."""
    return getattr(fn, "__qualname__", None) or repr(fn)
