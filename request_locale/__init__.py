"""
Request locale resolution from composable strategies.

Provides:
- Strategies reading one request facet each (subdomain, domain suffix,
  path prefix, query parameter, cookie, header, Accept-Language)
- Predicates (is_local, is_preview_domain) and combinators (any_of, all_of)
- Gates (when, when_not) switching strategies on and off per request
- A resolver returning the first matching locale, or a default

Usage:
    from request_locale import (
        Locale,
        any_of,
        from_accept_language_header,
        from_cookie,
        from_path_prefix,
        from_subdomain,
        get_locale_from_request,
        is_local,
        is_preview_domain,
        when,
        when_not,
    )

    FR = Locale("FR", "FR")
    DE = Locale("DE", "DE")
    locales = {"fr": FR, "de": DE}
    is_dev = any_of(is_local, is_preview_domain())

    resolve_locale = get_locale_from_request(
        strategies=[
            when(is_dev, from_path_prefix(locales)),
            when_not(is_dev, from_subdomain(locales)),
            from_cookie("locale", locales),
            from_accept_language_header(locales),
        ],
        default_locale=Locale("EN", "US"),
    )

    locale = await resolve_locale(request)
"""

__version__ = "0.1.0"

from request_locale.models import (
    Headers,
    Locale,
    LocaleMap,
    Predicate,
    Request,
    RequestContext,
    Strategy,
)
from request_locale.predicates import (
    DEFAULT_PREVIEW_PATTERNS,
    all_of,
    any_of,
    is_local,
    is_preview_domain,
    negate,
    when,
    when_not,
)
from request_locale.resolver import (
    LocaleResolver,
    Resolution,
    describe_strategy,
    get_locale_from_request,
)
from request_locale.strategies import (
    from_accept_language_header,
    from_cookie,
    from_domain_tld,
    from_header,
    from_path_prefix,
    from_query_param,
    from_subdomain,
    normalize_keys,
)

__all__ = [
    # Values
    "Locale",
    "LocaleMap",
    "Request",
    "RequestContext",
    "Headers",
    "Strategy",
    "Predicate",
    # Resolver
    "get_locale_from_request",
    "LocaleResolver",
    "Resolution",
    "describe_strategy",
    # Strategies
    "from_subdomain",
    "from_domain_tld",
    "from_path_prefix",
    "from_query_param",
    "from_cookie",
    "from_header",
    "from_accept_language_header",
    "normalize_keys",
    # Predicates and gates
    "is_local",
    "is_preview_domain",
    "DEFAULT_PREVIEW_PATTERNS",
    "any_of",
    "all_of",
    "negate",
    "when",
    "when_not",
]
