"""
Declarative resolver configuration.

Handles:
- Loading a YAML resolver definition (explicit path or REQUEST_LOCALE_CONFIG)
- Named locales and named predicates shared between strategies
- Building the strategy list, with when / when_not gates

Example document:

    default: {language: EN, country: US}
    locales:
      fr: {language: FR, country: FR}
      de: {language: DE, country: DE}
    predicates:
      is_dev: {any_of: [is_local, {preview_domain: ["/\\\\.ngrok\\\\.app$/"]}]}
    strategies:
      - {type: path_prefix, when: is_dev}
      - {type: subdomain, when_not: is_dev}
      - {type: cookie, name: locale}
      - {type: accept_language}
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from request_locale.callables import describe, labelled
from request_locale.models import Locale, LocaleMap, Predicate, RequestContext, Strategy
from request_locale.predicates import (
    all_of,
    any_of,
    is_local,
    is_preview_domain,
    negate,
    when,
    when_not,
)
from request_locale.resolver import LocaleResolver
from request_locale.strategies import (
    from_accept_language_header,
    from_cookie,
    from_domain_tld,
    from_header,
    from_path_prefix,
    from_query_param,
    from_subdomain,
)

# Get logger for this module
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "REQUEST_LOCALE_CONFIG"

# Strategy types configured by a locale map alone
MAP_STRATEGIES: dict[str, Callable[[LocaleMap], Strategy]] = {
    "subdomain": from_subdomain,
    "domain_tld": from_domain_tld,
    "path_prefix": from_path_prefix,
    "accept_language": from_accept_language_header,
}

# Strategy types that also read a named cookie, header or query parameter
NAMED_STRATEGIES: dict[str, Callable[[str, LocaleMap], Strategy]] = {
    "query_param": from_query_param,
    "cookie": from_cookie,
    "header": from_header,
}

STRATEGY_KEYS = frozenset({"type", "name", "map", "when", "when_not"})

BUILTIN_PREDICATES: dict[str, Callable[[], Predicate]] = {
    "is_local": lambda: is_local,
    "is_preview_domain": lambda: is_preview_domain(),
}


class LocaleConfigError(ValueError):
    """Raised when a resolver configuration cannot be loaded or built."""


@dataclass(frozen=True)
class ResolverConfig:
    """A parsed configuration, ready to build a resolver from."""

    default_locale: Locale
    locales: dict[str, Locale] = field(default_factory=dict)
    strategies: tuple[Strategy, ...] = ()
    source: Path | None = None

    def build(self) -> LocaleResolver:
        """Create the resolver described by this configuration."""
        return LocaleResolver(self.strategies, self.default_locale)

    def strategy_names(self) -> list[str]:
        return [describe(strategy) for strategy in self.strategies]


def get_config_path(path: str | os.PathLike[str] | None = None) -> Path:
    """
    Resolve which configuration file to read.

    Resolution order:
    1. Explicit ``path`` argument
    2. REQUEST_LOCALE_CONFIG environment variable

    Raises:
        LocaleConfigError: If neither is set
    """
    if path:
        return Path(path)

    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)

    raise LocaleConfigError(
        f"No configuration file given; pass a path or set {CONFIG_ENV_VAR}"
    )


def load_config(path: str | os.PathLike[str] | None = None) -> ResolverConfig:
    """
    Read and parse a YAML resolver configuration.

    Raises:
        LocaleConfigError: If the file is missing, unreadable, not valid
            YAML, or describes an invalid resolver
    """
    config_path = get_config_path(path)

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LocaleConfigError(f"Malformed YAML in {config_path}: {e}") from e
    except OSError as e:
        raise LocaleConfigError(f"Could not read {config_path}: {e}") from e

    logger.debug(f"Loaded resolver configuration from {config_path}")
    return parse_config(data, source=config_path)


def load_resolver(path: str | os.PathLike[str] | None = None) -> LocaleResolver:
    """Shorthand for ``load_config(path).build()``."""
    return load_config(path).build()


def build_resolver(data: Mapping[str, Any]) -> LocaleResolver:
    """Build a resolver from an already-parsed configuration mapping."""
    return parse_config(data).build()


def parse_config(data: Any, source: Path | None = None) -> ResolverConfig:
    """
    Validate a configuration mapping and build its strategies.

    Args:
        data: Parsed document (see module docstring)
        source: File the data came from, kept for display

    Raises:
        LocaleConfigError: On any structural problem
    """
    if not isinstance(data, Mapping):
        kind = "empty document" if data is None else type(data).__name__
        raise LocaleConfigError(f"Configuration must be a mapping, got {kind}")

    if "default" not in data:
        raise LocaleConfigError("Configuration is missing the 'default' locale")

    locales = _parse_locales(data.get("locales") or {})
    default_locale = _parse_locale_ref(data["default"], locales, "default")
    predicates = _parse_predicates(data.get("predicates") or {})

    raw_strategies = data.get("strategies") or []
    if not isinstance(raw_strategies, list):
        raise LocaleConfigError("'strategies' must be a list")

    strategies = tuple(
        _parse_strategy(entry, index, locales, predicates)
        for index, entry in enumerate(raw_strategies)
    )

    return ResolverConfig(
        default_locale=default_locale,
        locales=locales,
        strategies=strategies,
        source=source,
    )


def _parse_locale(data: Any, where: str) -> Locale:
    if not isinstance(data, Mapping):
        raise LocaleConfigError(f"{where}: a locale must be a mapping, got {data!r}")
    try:
        return Locale.from_dict(data)
    except ValueError as e:
        raise LocaleConfigError(f"{where}: {e}") from e


def _parse_key(key: Any, where: str) -> str:
    """
    A locale map or table key.

    YAML 1.1 reads some bare ISO codes as other types (``no`` is False),
    so anything but a string is rejected instead of being stringified.
    """
    if not isinstance(key, str):
        raise LocaleConfigError(
            f"{where}: key {key!r} is a {type(key).__name__}, not a string; quote it"
        )
    return key


def _parse_locales(data: Any) -> dict[str, Locale]:
    if not isinstance(data, Mapping):
        raise LocaleConfigError("'locales' must be a mapping of name to locale")
    return {
        _parse_key(name, "locales"): _parse_locale(value, f"locales.{name}")
        for name, value in data.items()
    }


def _parse_locale_ref(value: Any, locales: Mapping[str, Locale], where: str) -> Locale:
    """A locale given inline, or by name from the 'locales' table."""
    if isinstance(value, str):
        if value not in locales:
            raise LocaleConfigError(f"{where}: unknown locale {value!r}")
        return locales[value]
    return _parse_locale(value, where)


def _parse_predicates(data: Any) -> dict[str, Predicate]:
    if not isinstance(data, Mapping):
        raise LocaleConfigError("'predicates' must be a mapping of name to expression")

    named: dict[str, Predicate] = {}
    for name, expression in data.items():
        name = _parse_key(name, "predicates")
        if name in BUILTIN_PREDICATES:
            raise LocaleConfigError(f"predicates.{name}: shadows a built-in predicate")
        predicate = _parse_predicate(expression, named, f"predicates.{name}")
        named[name] = labelled(_alias(predicate), name)
    return named


def _alias(predicate: Predicate) -> Predicate:
    def aliased(ctx: RequestContext) -> bool | Awaitable[bool]:
        return predicate(ctx)

    return aliased


def _parse_predicate(expression: Any, named: Mapping[str, Predicate], where: str) -> Predicate:
    """
    Build a predicate from a config expression.

    Accepts a predicate name, or a single-key mapping: any_of, all_of, not,
    preview_domain.
    """
    if isinstance(expression, str):
        if expression in named:
            return named[expression]
        if expression in BUILTIN_PREDICATES:
            return BUILTIN_PREDICATES[expression]()
        raise LocaleConfigError(f"{where}: unknown predicate {expression!r}")

    if not isinstance(expression, Mapping) or len(expression) != 1:
        raise LocaleConfigError(
            f"{where}: expected a predicate name or a single-key mapping, got {expression!r}"
        )

    operator, operand = next(iter(expression.items()))

    if operator in ("any_of", "all_of"):
        if not isinstance(operand, list):
            raise LocaleConfigError(f"{where}.{operator}: expected a list")
        parts = [
            _parse_predicate(item, named, f"{where}.{operator}[{index}]")
            for index, item in enumerate(operand)
        ]
        return any_of(*parts) if operator == "any_of" else all_of(*parts)

    if operator == "not":
        return negate(_parse_predicate(operand, named, f"{where}.not"))

    if operator == "preview_domain":
        if operand is None:
            return is_preview_domain()
        if not isinstance(operand, list):
            raise LocaleConfigError(f"{where}.preview_domain: expected a list of patterns")
        return is_preview_domain([_parse_pattern(item, where) for item in operand])

    raise LocaleConfigError(f"{where}: unknown predicate operator {operator!r}")


def _parse_pattern(value: Any, where: str) -> str | re.Pattern[str]:
    """``/regex/`` compiles to a regular expression; other strings are substrings."""
    if not isinstance(value, str) or not value:
        raise LocaleConfigError(f"{where}: preview patterns must be non-empty strings")

    if len(value) >= 2 and value.startswith("/") and value.endswith("/"):
        try:
            return re.compile(value[1:-1])
        except re.error as e:
            raise LocaleConfigError(f"{where}: invalid regular expression {value!r}: {e}") from e
    return value


def _parse_strategy(
    entry: Any,
    index: int,
    locales: Mapping[str, Locale],
    predicates: Mapping[str, Predicate],
) -> Strategy:
    where = f"strategies[{index}]"
    if not isinstance(entry, Mapping):
        raise LocaleConfigError(f"{where}: expected a mapping, got {entry!r}")

    kind = entry.get("type")
    unknown = sorted(str(key) for key in entry if key not in STRATEGY_KEYS)
    if unknown:
        logger.warning(f"{where}: ignoring unknown keys {', '.join(unknown)}")

    if "map" in entry:
        raw_map = entry["map"]
        if not isinstance(raw_map, Mapping):
            raise LocaleConfigError(f"{where}.map: expected a mapping")
        locale_map = {
            _parse_key(key, f"{where}.map"): _parse_locale_ref(
                value, locales, f"{where}.map.{key}"
            )
            for key, value in raw_map.items()
        }
    else:
        locale_map = dict(locales)

    if not locale_map:
        logger.warning(f"{where}: empty locale map, this strategy never matches")

    if kind in MAP_STRATEGIES:
        strategy = MAP_STRATEGIES[kind](locale_map)
    elif kind in NAMED_STRATEGIES:
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise LocaleConfigError(f"{where}: strategy {kind!r} needs a 'name'")
        strategy = NAMED_STRATEGIES[kind](name, locale_map)
    else:
        known = ", ".join(sorted([*MAP_STRATEGIES, *NAMED_STRATEGIES]))
        raise LocaleConfigError(f"{where}: unknown strategy type {kind!r} (known: {known})")

    if "when" in entry:
        strategy = when(_parse_predicate(entry["when"], predicates, f"{where}.when"), strategy)
    if "when_not" in entry:
        strategy = when_not(
            _parse_predicate(entry["when_not"], predicates, f"{where}.when_not"), strategy
        )

    return strategy
