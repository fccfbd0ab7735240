import argparse
import asyncio
import logging
import sys

from request_locale import __version__
from request_locale.config import LocaleConfigError, ResolverConfig, load_config
from request_locale.models import Locale, Request
from request_locale.ui import console, data_table, error, info, status_box, success, warning


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``Name: value`` command-line header."""
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise ValueError(f"Invalid header {raw!r}, expected 'Name: value'")
    return name.strip(), value.strip()


def locale_items(locale: Locale) -> dict[str, str]:
    items = {"Language": locale.language, "Country": locale.country}
    for key, value in locale.extra.items():
        items[key] = str(value)
    return items


class RequestLocaleCLI:
    """Command handlers; each takes parsed arguments and returns an exit code."""

    def resolve(self, args: argparse.Namespace) -> int:
        """Resolve the locale of a synthetic request against a configuration."""
        headers = [parse_header(raw) for raw in args.header or []]
        config = load_config(args.config)
        request = Request(url=args.url, headers=headers)

        resolution = asyncio.run(config.build().explain(request))

        items = locale_items(resolution.locale)
        if resolution.is_default:
            items["Matched by"] = "default locale"
        else:
            items["Matched by"] = f"#{resolution.strategy_index + 1} {resolution.strategy_name}"

        status_box("RESOLVED LOCALE", items)
        return 0

    def check(self, args: argparse.Namespace) -> int:
        """Validate a configuration and show what it contains."""
        config = load_config(args.config)
        self._show_config(config)
        success("Configuration is valid", details=str(config.source))
        if not config.strategies:
            warning(
                "No strategies configured",
                details="Every request resolves to the default locale",
            )
        return 0

    def _show_config(self, config: ResolverConfig) -> None:
        if config.locales:
            data_table(
                columns=[
                    {"name": "Name", "style": "cyan"},
                    {"name": "Language"},
                    {"name": "Country"},
                ],
                rows=[
                    [name, locale.language, locale.country]
                    for name, locale in config.locales.items()
                ],
                title="Locales",
            )

        data_table(
            columns=[
                {"name": "#", "justify": "right", "style": "dim"},
                {"name": "Strategy", "style": "cyan"},
            ],
            rows=[[index, name] for index, name in enumerate(config.strategy_names(), 1)],
            title="Strategies (in priority order)",
        )

        default = config.default_locale
        info(f"Default locale: [bold]{default.language}-{default.country}[/bold]")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="request-locale",
        description="Resolve request locales from composable strategies",
    )
    parser.add_argument(
        "--version", "-V", action="version", version=f"request-locale {__version__}"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve the locale for a URL")
    resolve_parser.add_argument("url", help="Absolute request URL")
    resolve_parser.add_argument(
        "--header",
        "-H",
        action="append",
        metavar="'NAME: VALUE'",
        help="Request header, may be repeated",
    )
    resolve_parser.add_argument("--config", "-c", help="Resolver YAML file")

    check_parser = subparsers.add_parser("check", help="Validate a resolver configuration")
    check_parser.add_argument("--config", "-c", help="Resolver YAML file")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    cli = RequestLocaleCLI()

    try:
        if args.command == "resolve":
            return cli.resolve(args)
        elif args.command == "check":
            return cli.check(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        console.print()
        error("Operation cancelled")
        return 130
    except LocaleConfigError as e:
        error("Invalid configuration", details=str(e))
        return 1
    except ValueError as e:
        error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
