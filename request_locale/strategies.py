"""
Locale strategies: one factory per request facet.

Every factory takes its configuration once and returns a strategy, a
callable of RequestContext -> Locale | None. ``None`` means "no opinion",
whether the facet is missing from the request or its value is not in the
map. Map keys are lowercased when the strategy is built, so lookups are
case-insensitive.

Usage:
    from request_locale import Locale, from_cookie, from_subdomain

    locales = {"fr": Locale("FR", "FR"), "de": Locale("DE", "DE")}
    strategies = [from_cookie("locale", locales), from_subdomain(locales)]
"""

from __future__ import annotations

import logging

from request_locale.callables import labelled
from request_locale.models import Locale, LocaleMap, RequestContext, Strategy
from request_locale.parsing import get_cookie, parse_accept_language, primary_subtag

logger = logging.getLogger(__name__)


def normalize_keys(locale_map: LocaleMap) -> dict[str, Locale]:
    """
    Copy a locale map with every key lowercased.

    Keys that only differ in case collapse into one entry; the one seen last
    wins.
    """
    normalized: dict[str, Locale] = {}
    for key, locale in locale_map.items():
        lowered = key.lower()
        if lowered in normalized:
            logger.debug(f"Locale map key {key!r} replaces an earlier entry for {lowered!r}")
        normalized[lowered] = locale
    return normalized


def from_subdomain(subdomain_map: LocaleMap) -> Strategy:
    """
    Resolve from the first hostname label.

    Examples:
        fr.my-store.com -> map["fr"]
        localhost       -> None (no subdomain)
    """
    locales = normalize_keys(subdomain_map)

    def strategy(ctx: RequestContext) -> Locale | None:
        labels = ctx.hostname.split(".")
        if len(labels) < 2:
            return None
        return locales.get(labels[0].lower())

    return labelled(strategy, "from_subdomain")


def from_domain_tld(tld_map: LocaleMap) -> Strategy:
    """
    Resolve from the domain suffix, including multi-label suffixes.

    Longer keys are tried first, so with ``{"com": A, "com.br": B}`` the host
    ``store.com.br`` resolves to B and ``store.com`` to A.
    """
    locales = normalize_keys(tld_map)
    suffixes = sorted(locales, key=len, reverse=True)

    def strategy(ctx: RequestContext) -> Locale | None:
        host = ctx.hostname
        for suffix in suffixes:
            if host == suffix or host.endswith(f".{suffix}"):
                return locales[suffix]
        return None

    return labelled(strategy, "from_domain_tld")


def from_path_prefix(prefix_map: LocaleMap) -> Strategy:
    """
    Resolve from the first path segment: ``/fr/products`` -> map["fr"].
    """
    locales = normalize_keys(prefix_map)

    def strategy(ctx: RequestContext) -> Locale | None:
        if not ctx.path.startswith("/"):
            return None
        segment = ctx.path.split("/")[1].lower()
        if not segment:
            return None
        return locales.get(segment)

    return labelled(strategy, "from_path_prefix")


def from_query_param(param_name: str, value_map: LocaleMap) -> Strategy:
    """Resolve from a query parameter: ``?locale=fr`` -> map["fr"]."""
    locales = normalize_keys(value_map)

    def strategy(ctx: RequestContext) -> Locale | None:
        value = ctx.query.get(param_name)
        if not value:
            return None
        return locales.get(value.lower())

    return labelled(strategy, f"from_query_param({param_name!r})")


def from_cookie(cookie_name: str, value_map: LocaleMap) -> Strategy:
    """Resolve from a cookie: ``Cookie: locale=fr`` -> map["fr"]."""
    locales = normalize_keys(value_map)

    def strategy(ctx: RequestContext) -> Locale | None:
        header = ctx.headers.get("cookie")
        if not header:
            return None
        value = get_cookie(header, cookie_name)
        if value is None:
            return None
        return locales.get(value.lower())

    return labelled(strategy, f"from_cookie({cookie_name!r})")


def from_header(header_name: str, value_map: LocaleMap) -> Strategy:
    """
    Resolve from a custom header, e.g. ``X-Storefront-Locale: fr``.

    The header name is matched case-insensitively.
    """
    locales = normalize_keys(value_map)

    def strategy(ctx: RequestContext) -> Locale | None:
        value = ctx.headers.get(header_name, "").strip().lower()
        if not value:
            return None
        return locales.get(value)

    return labelled(strategy, f"from_header({header_name!r})")


def from_accept_language_header(supported_locales: LocaleMap) -> Strategy:
    """
    Resolve from Accept-Language, honouring quality values.

    Each tag is tried as-is, then by its primary subtag, in descending
    quality order:

        "fr-CA;q=0.9, de;q=0.8" with {"fr": FR, "de": DE} -> FR
    """
    locales = normalize_keys(supported_locales)

    def strategy(ctx: RequestContext) -> Locale | None:
        header = ctx.headers.get("accept-language")
        if not header:
            return None

        for tag, _quality in parse_accept_language(header):
            if tag in locales:
                return locales[tag]
            primary = primary_subtag(tag)
            if primary in locales:
                return locales[primary]
        return None

    return labelled(strategy, "from_accept_language_header")
