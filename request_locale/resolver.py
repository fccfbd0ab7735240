"""
Locale resolution from an ordered list of strategies.

Build a resolver once at startup and call it for every request:

    resolve_locale = get_locale_from_request(
        strategies=[
            from_cookie("locale", locales),
            from_subdomain(locales),
            from_accept_language_header(locales),
        ],
        default_locale=Locale("EN", "US"),
    )

    locale = await resolve_locale(request)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from request_locale.callables import close_awaitable, describe
from request_locale.models import Locale, RequestContext, Strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution, with the strategy that produced it."""

    locale: Locale
    strategy_index: int | None = None
    strategy_name: str | None = None

    @property
    def is_default(self) -> bool:
        return self.strategy_index is None


class LocaleResolver:
    """
    Evaluates strategies in order and returns the first locale found.

    The first strategy returning something other than None wins and no
    later strategy is called. When none matches, the default locale object
    itself is returned. Exceptions raised by strategies propagate unchanged.
    """

    def __init__(self, strategies: Iterable[Strategy], default_locale: Locale) -> None:
        self.strategies: tuple[Strategy, ...] = tuple(strategies)
        self.default_locale = default_locale

    async def __call__(self, request: Any) -> Locale:
        return await self.resolve(request)

    async def resolve(self, request: Any) -> Locale:
        """Resolve the locale for ``request``, awaiting async strategies."""
        resolution = await self.explain(request)
        return resolution.locale

    async def explain(self, request: Any) -> Resolution:
        """Like resolve(), but also report which strategy matched."""
        ctx = RequestContext.from_request(request)

        for index, strategy in enumerate(self.strategies):
            result = strategy(ctx)
            if inspect.isawaitable(result):
                result = await result
            if result is not None:
                return self._matched(ctx, index, strategy, result)

        return self._fallback(ctx)

    def resolve_sync(self, request: Any) -> Locale:
        """
        Resolve without an event loop.

        Raises:
            TypeError: If a strategy returns an awaitable
        """
        return self.explain_sync(request).locale

    def explain_sync(self, request: Any) -> Resolution:
        """Synchronous explain(); see resolve_sync()."""
        ctx = RequestContext.from_request(request)

        for index, strategy in enumerate(self.strategies):
            result = strategy(ctx)
            if inspect.isawaitable(result):
                close_awaitable(result)
                raise TypeError(
                    f"Strategy {describe(strategy)} returned an awaitable; "
                    "use 'await resolver(request)' instead of resolve_sync()"
                )
            if result is not None:
                return self._matched(ctx, index, strategy, result)

        return self._fallback(ctx)

    def _matched(
        self, ctx: RequestContext, index: int, strategy: Strategy, locale: Locale
    ) -> Resolution:
        name = describe(strategy)
        logger.debug(f"Locale {locale!r} for {ctx.url.geturl()} resolved by {name}")
        return Resolution(locale=locale, strategy_index=index, strategy_name=name)

    def _fallback(self, ctx: RequestContext) -> Resolution:
        logger.debug(
            f"No strategy matched {ctx.url.geturl()}; using default {self.default_locale!r}"
        )
        return Resolution(locale=self.default_locale)

    def __repr__(self) -> str:
        names = ", ".join(describe(strategy) for strategy in self.strategies)
        return f"LocaleResolver([{names}], default_locale={self.default_locale!r})"


def get_locale_from_request(
    strategies: Iterable[Strategy], default_locale: Locale
) -> LocaleResolver:
    """
    Build a resolver from ordered strategies and a fallback locale.

    Args:
        strategies: Strategies in priority order (index 0 is tried first)
        default_locale: Returned, unchanged, when no strategy matches

    Returns:
        A LocaleResolver; ``await resolver(request)`` yields a Locale
    """
    return LocaleResolver(strategies, default_locale)


def describe_strategy(strategy: Strategy) -> str:
    """Readable name of a strategy, as shown in Resolution.strategy_name."""
    return describe(strategy)
