"""
Request predicates, their combinators, and strategy gates.

Predicates classify the request environment (local development, preview
deployments). ``any_of`` / ``all_of`` combine them, and ``when`` /
``when_not`` use them to switch strategies on and off:

    is_dev = any_of(is_local, is_preview_domain())

    strategies = [
        when(is_dev, from_path_prefix(locales)),
        when_not(is_dev, from_subdomain(locales)),
    ]

All combinators evaluate left to right and stop as soon as the outcome is
known. Callbacks may return awaitables; a combinator returns a plain value
until one does, and an awaitable from then on.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Awaitable, Sequence
from typing import Union

from request_locale.callables import describe, labelled, maybe_await
from request_locale.models import MaybeLocale, Predicate, RequestContext, Strategy

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "::1", "[::1]"})

DEFAULT_PREVIEW_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\.trycloudflare\.com$"),
    re.compile(r"\.ngrok\.app$"),
)

PreviewPattern = Union[str, re.Pattern]


def is_local(ctx: RequestContext) -> bool:
    """True for localhost, 127.0.0.1, the IPv6 loopback and *.localhost."""
    host = ctx.hostname
    return host in LOCAL_HOSTNAMES or host.endswith(".localhost")


def is_preview_domain(patterns: Sequence[PreviewPattern] | None = None) -> Predicate:
    """
    Build a predicate matching preview / tunnel hostnames.

    Args:
        patterns: Substrings (tested with ``in``) and compiled regular
            expressions (tested with ``search``). Replaces the defaults,
            DEFAULT_PREVIEW_PATTERNS, when given.

    Raises:
        TypeError: If a pattern is neither a string nor a compiled regex
    """
    checked = tuple(DEFAULT_PREVIEW_PATTERNS if patterns is None else patterns)
    for pattern in checked:
        if not isinstance(pattern, (str, re.Pattern)):
            raise TypeError(
                f"Preview patterns must be str or re.Pattern, got {type(pattern).__name__}"
            )

    def predicate(ctx: RequestContext) -> bool:
        host = ctx.hostname
        for pattern in checked:
            if isinstance(pattern, str):
                if pattern in host:
                    return True
            elif pattern.search(host):
                return True
        return False

    return labelled(predicate, "is_preview_domain")


def negate(predicate: Predicate) -> Predicate:
    """Logical NOT of a predicate."""

    def negated(ctx: RequestContext) -> Union[bool, Awaitable[bool]]:
        verdict = predicate(ctx)
        if inspect.isawaitable(verdict):
            return _negate_async(verdict)
        return not verdict

    return labelled(negated, f"not {describe(predicate)}")


async def _negate_async(pending: Awaitable[bool]) -> bool:
    return not await pending


def any_of(*predicates: Predicate) -> Predicate:
    """Logical OR; stops at the first true predicate. ``any_of()`` is False."""

    def combined(ctx: RequestContext) -> Union[bool, Awaitable[bool]]:
        for index, predicate in enumerate(predicates):
            verdict = predicate(ctx)
            if inspect.isawaitable(verdict):
                return _any_of_async(verdict, predicates[index + 1 :], ctx)
            if verdict:
                return True
        return False

    names = ", ".join(describe(predicate) for predicate in predicates)
    return labelled(combined, f"any_of({names})")


async def _any_of_async(
    pending: Awaitable[bool], rest: Sequence[Predicate], ctx: RequestContext
) -> bool:
    if await pending:
        return True
    for predicate in rest:
        if await maybe_await(predicate(ctx)):
            return True
    return False


def all_of(*predicates: Predicate) -> Predicate:
    """Logical AND; stops at the first false predicate. ``all_of()`` is True."""

    def combined(ctx: RequestContext) -> Union[bool, Awaitable[bool]]:
        for index, predicate in enumerate(predicates):
            verdict = predicate(ctx)
            if inspect.isawaitable(verdict):
                return _all_of_async(verdict, predicates[index + 1 :], ctx)
            if not verdict:
                return False
        return True

    names = ", ".join(describe(predicate) for predicate in predicates)
    return labelled(combined, f"all_of({names})")


async def _all_of_async(
    pending: Awaitable[bool], rest: Sequence[Predicate], ctx: RequestContext
) -> bool:
    if not await pending:
        return False
    for predicate in rest:
        if not await maybe_await(predicate(ctx)):
            return False
    return True


def when(predicate: Predicate, strategy: Strategy) -> Strategy:
    """
    Run ``strategy`` only when ``predicate`` holds.

    When the predicate is false the strategy is not called at all and the
    gate returns None.
    """

    def gated(ctx: RequestContext) -> Union[MaybeLocale, Awaitable[MaybeLocale]]:
        verdict = predicate(ctx)
        if inspect.isawaitable(verdict):
            return _when_async(verdict, strategy, ctx)
        if verdict:
            return strategy(ctx)
        return None

    return labelled(gated, f"when({describe(predicate)}, {describe(strategy)})")


async def _when_async(
    pending: Awaitable[bool], strategy: Strategy, ctx: RequestContext
) -> MaybeLocale:
    if await pending:
        return await maybe_await(strategy(ctx))
    return None


def when_not(predicate: Predicate, strategy: Strategy) -> Strategy:
    """Run ``strategy`` only when ``predicate`` does not hold."""
    gated = when(negate(predicate), strategy)
    return labelled(gated, f"when_not({describe(predicate)}, {describe(strategy)})")
