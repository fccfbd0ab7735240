"""
Parsers for the raw header values read by the strategies.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 1.0

# Malformed q= values sort after every well-formed one
MALFORMED_QUALITY = 0.0


def parse_quality(value: str) -> float:
    """
    Parse an Accept-Language ``q`` parameter.

    Returns a value clamped to [0, 1]. Anything that is not a finite number
    yields MALFORMED_QUALITY.
    """
    try:
        quality = float(value.strip())
    except ValueError:
        logger.debug(f"Ignoring malformed Accept-Language quality {value!r}")
        return MALFORMED_QUALITY

    if not math.isfinite(quality):
        logger.debug(f"Ignoring non-finite Accept-Language quality {value!r}")
        return MALFORMED_QUALITY

    return min(max(quality, 0.0), 1.0)


def parse_accept_language(header: str) -> list[tuple[str, float]]:
    """
    Parse an Accept-Language header into ``(tag, quality)`` pairs.

    Tags are lowercased. Pairs are ordered by descending quality; tags with
    equal quality keep the order they had in the header.

    Examples:
        "de;q=0.8, fr;q=0.9"   -> [("fr", 0.9), ("de", 0.8)]
        "en-US,en;q=0.9"       -> [("en-us", 1.0), ("en", 0.9)]
    """
    languages: list[tuple[str, float]] = []

    for segment in header.split(","):
        tag, *params = segment.split(";")
        tag = tag.strip().lower()
        if not tag:
            continue

        quality = DEFAULT_QUALITY
        for param in params:
            name, sep, value = param.strip().partition("=")
            if sep and name.strip().lower() == "q":
                quality = parse_quality(value)
                break

        languages.append((tag, quality))

    # sort() is stable, also with reverse=True
    languages.sort(key=lambda item: item[1], reverse=True)
    return languages


def primary_subtag(tag: str) -> str:
    """Language part of a tag: ``fr-ca`` -> ``fr``."""
    return tag.split("-", 1)[0]


def get_cookie(header: str, name: str) -> str | None:
    """
    Value of the first cookie called ``name`` in a Cookie header.

    Surrounding double quotes are removed from the value. Returns None when
    the cookie is absent or empty.
    """
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if not sep or key.strip() != name:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        return value or None

    return None
