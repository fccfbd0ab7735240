"""
Value types shared by strategies, predicates and the resolver.

- Locale: immutable language/country pair with optional extra fields
- Request: minimal request value for callers without a web framework
- Headers: case-insensitive, read-only header view
- RequestContext: one parsed snapshot of a request, shared by every callback
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union
from urllib.parse import SplitResult, parse_qsl, urlsplit


class Locale:
    """
    A resolved locale.

    Two locales are equal when language, country and every extra field
    match. Extra fields are readable as attributes:

        >>> locale = Locale("FR", "FR", currency="EUR")
        >>> locale.currency
        'EUR'

    Locales are immutable; build a new one with ``replace``.
    """

    language: str
    country: str
    extra: Mapping[str, Any]

    def __init__(self, language: str, country: str, **extra: Any) -> None:
        object.__setattr__(self, "language", language)
        object.__setattr__(self, "country", country)
        object.__setattr__(self, "extra", MappingProxyType(dict(extra)))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Locale is immutable, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Locale is immutable, cannot delete {name!r}")

    def __reduce__(self) -> tuple[Any, ...]:
        # The read-only extras view cannot be pickled, rebuild from plain values
        return (type(self).from_dict, (self.to_dict(),))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Locale):
            return NotImplemented
        return (
            self.language == other.language
            and self.country == other.country
            and dict(self.extra) == dict(other.extra)
        )

    def __hash__(self) -> int:
        return hash((self.language, self.country))

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        extra = self.__dict__.get("extra")
        if extra is not None and name in extra:
            return extra[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        fields = [f"language={self.language!r}", f"country={self.country!r}"]
        fields.extend(f"{key}={value!r}" for key, value in self.extra.items())
        return f"Locale({', '.join(fields)})"

    def replace(self, **changes: Any) -> Locale:
        """
        Copy with some fields changed. ``language``, ``country`` and extra
        fields are all given by name:

            >>> Locale("FR", "FR", currency="EUR").replace(country="CA")
            Locale(language='FR', country='CA', currency='EUR')
        """
        return type(self).from_dict({**self.to_dict(), **changes})

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a plain dict (language, country, then extras)."""
        return {"language": self.language, "country": self.country, **self.extra}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Locale:
        """
        Build a locale from a mapping with ``language`` and ``country`` keys.

        Raises:
            ValueError: If either required key is missing or not a string
        """
        values = dict(data)
        language = values.pop("language", None)
        country = values.pop("country", None)
        if not isinstance(language, str) or not isinstance(country, str):
            raise ValueError(
                f"A locale needs string 'language' and 'country' values, got {dict(data)!r}"
            )
        return cls(language, country, **{str(key): value for key, value in values.items()})


class Headers(Mapping[str, str]):
    """
    Read-only header mapping with case-insensitive names.

    Accepts a mapping, any object with ``items()`` (Werkzeug and Starlette
    header collections), or an iterable of ``(name, value)`` pairs. Repeated
    headers are folded into one value.
    """

    def __init__(self, source: Any = None) -> None:
        self._values: dict[str, str] = {}
        if source is None:
            return

        pairs = source.items() if hasattr(source, "items") else source
        for name, value in pairs:
            key = str(name).lower()
            if key in self._values:
                # Cookie pairs are ';'-separated, everything else is a list
                separator = "; " if key == "cookie" else ", "
                self._values[key] = f"{self._values[key]}{separator}{value}"
            else:
                self._values[key] = str(value)

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"


@dataclass(frozen=True)
class Request:
    """Minimal HTTP request. Only ``url`` and ``headers`` are ever read."""

    url: str
    headers: Mapping[str, str] | Iterable[tuple[str, str]] = field(default_factory=dict)
    method: str = "GET"
    body: bytes | None = None


@dataclass(frozen=True)
class RequestContext:
    """
    A single parsed view of one request.

    Built once per resolution and handed unchanged to every strategy and
    predicate, so they all observe the same URL and headers.
    """

    request: Any
    url: SplitResult
    hostname: str
    path: str
    query: Mapping[str, str]
    headers: Headers

    @classmethod
    def from_request(cls, request: Any) -> RequestContext:
        """
        Parse a request-like object.

        The object needs a ``url`` attribute (a string, or anything whose
        ``str()`` is the absolute URL) and optionally ``headers``.
        """
        url = urlsplit(str(request.url))
        query: dict[str, str] = {}
        for name, value in parse_qsl(url.query, keep_blank_values=True):
            query.setdefault(name, value)

        return cls(
            request=request,
            url=url,
            hostname=(url.hostname or "").lower(),
            path=url.path,
            query=MappingProxyType(query),
            headers=Headers(getattr(request, "headers", None)),
        )


MaybeLocale = Union[Locale, None]

Strategy = Callable[[RequestContext], Union[MaybeLocale, Awaitable[MaybeLocale]]]
Predicate = Callable[[RequestContext], Union[bool, Awaitable[bool]]]
LocaleMap = Mapping[str, Locale]
