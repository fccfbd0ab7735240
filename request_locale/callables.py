"""
Helpers for callbacks that may or may not be coroutines.

Strategies and predicates are plain callables whose result is either a value
or an awaitable. Combinators stay synchronous until they meet an awaitable.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def close_awaitable(value: Any) -> None:
    """Close an awaitable that will never be awaited."""
    close = getattr(value, "close", None)
    if callable(close):
        close()


def labelled(func: F, label: str) -> F:
    """Attach a display label to a freshly built callback."""
    func.label = label  # type: ignore[attr-defined]
    return func


def describe(func: Callable[..., Any]) -> str:
    """
    Human-readable name for a strategy or predicate.

    Uses the label set by this package's factories, then the callable's
    qualified name, then its repr.
    """
    label = getattr(func, "label", None)
    if isinstance(label, str):
        return label
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", None)
    if name and "<lambda>" not in name:
        return name
    return repr(func)
