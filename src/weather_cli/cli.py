"""Command-line entry point: `weather get | provider | alias`."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import UTC, date

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Settings, load_settings
from .dates import parse_date
from .exceptions import ConfigError, SelectionError, WeatherProviderError
from .log_setup import setup_logger
from .redaction import mask_secret
from .resolver import QueryResolver
from .store import ConfigStore
from .weather.factory import known_provider_ids, provider_display_name
from .weather.models import WeatherReport

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_SELECTION = 3
EXIT_PROVIDER = 4
EXIT_UNEXPECTED = 99


def _date_arg(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weather",
        description="Current and historical weather from interchangeable providers.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug console output.")

    # Lets --debug also appear after the subcommand without resetting the global flag.
    debug_flag = argparse.ArgumentParser(add_help=False)
    debug_flag.add_argument(
        "--debug", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS
    )

    commands = parser.add_subparsers(dest="command", required=True)

    get = commands.add_parser("get", parents=[debug_flag], help="Retrieve weather information.")
    get.add_argument(
        "location",
        nargs="?",
        default=None,
        metavar="LOCATION",
        help="Address or alias to query; defaults to the default alias.",
    )
    get.add_argument(
        "-d",
        "--date",
        type=_date_arg,
        default=None,
        help="Date to query (YYYY-MM-DD and other common formats).",
    )
    get.add_argument(
        "-p",
        "--provider",
        default=None,
        metavar="PROVIDER",
        help="Provider to use for this request instead of the default.",
    )

    provider = commands.add_parser(
        "provider", parents=[debug_flag], help="Manage weather service providers."
    )
    provider.add_argument(
        "provider_id",
        nargs="?",
        default=None,
        metavar="PROVIDER",
        help="Provider id; without --key it becomes the default.",
    )
    provider.add_argument(
        "-k",
        "--key",
        default=None,
        metavar="API_KEY",
        help="Set the API key for PROVIDER (an empty value clears it).",
    )
    provider.add_argument(
        "-l", "--list", action="store_true", help="List providers and their status."
    )

    alias = commands.add_parser(
        "alias",
        parents=[debug_flag],
        help='Manage location aliases, e.g. "home" -> "London, UK".',
    )
    alias.add_argument(
        "name",
        nargs="?",
        default=None,
        metavar="ALIAS",
        help="Alias name; without --address it becomes the default.",
    )
    alias.add_argument("-a", "--address", default=None, help="Address to assign to ALIAS.")
    alias.add_argument("-l", "--list", action="store_true", help="List configured aliases.")
    alias.add_argument("-r", "--remove", default=None, metavar="ALIAS", help="Remove an alias.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments and reject conflicting flag combinations."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "provider" and args.list and (args.provider_id or args.key is not None):
        parser.error("--list cannot be combined with PROVIDER or --key.")
    if args.command == "provider" and args.key is not None and not args.provider_id:
        parser.error("--key requires PROVIDER.")
    if args.command == "alias":
        if args.list and (args.name or args.address or args.remove):
            parser.error("--list cannot be combined with other alias options.")
        if args.remove and (args.name or args.address):
            parser.error("--remove cannot be combined with ALIAS or --address.")
        if args.address is not None and not args.name:
            parser.error("--address requires ALIAS.")
    return args


def _print_report(console: Console, report: WeatherReport) -> None:
    title = f"Weather in {report.location}"
    if report.resolved_name:
        title += f" ({report.resolved_name})"
    table = Table(title=escape(title))
    table.add_column("Field")
    table.add_column("Value", overflow="fold")

    table.add_row("Provider", f"{provider_display_name(report.provider)} ({report.provider})")
    table.add_row("Kind", report.kind)
    table.add_row("Date", report.date.isoformat())
    table.add_row("Observed (UTC)", report.observed_at.astimezone(UTC).isoformat())
    table.add_row("Temperature", f"{report.temperature:.1f} °{report.temperature_unit}")
    table.add_row("Conditions", escape(report.conditions or "-"))
    table.add_row("Humidity", f"{report.humidity:g}%" if report.humidity is not None else "-")
    wind = (
        f"{report.wind_speed:.1f} {report.wind_speed_unit}"
        if report.wind_speed is not None
        else "-"
    )
    table.add_row("Wind", wind)
    console.print(table)


def _print_providers(console: Console, store: ConfigStore) -> None:
    table = Table(title="Weather providers")
    table.add_column("ID")
    table.add_column("Provider")
    table.add_column("API key")
    table.add_column("Default")
    for provider_id in known_provider_ids():
        config = store.providers.get(provider_id)
        table.add_row(
            provider_id,
            provider_display_name(provider_id),
            mask_secret(config.api_key if config else None),
            "yes" if config and config.is_default else "",
        )
    console.print(table)

    default = store.providers.default()
    if default is None:
        console.print("Default provider is not set.")
    else:
        console.print(f"Default provider: '{provider_display_name(default.id)}' ({default.id})")


def _print_aliases(console: Console, store: ConfigStore) -> None:
    aliases = store.aliases.list()
    if not aliases:
        console.print("No aliases are set.")
        return

    table = Table(title="Aliases")
    table.add_column("Alias")
    table.add_column("Address", overflow="fold")
    table.add_column("Default")
    for alias in aliases:
        table.add_row(escape(alias.name), escape(alias.address), "yes" if alias.is_default else "")
    console.print(table)

    default = store.aliases.default()
    if default is None:
        console.print("No default alias is set.")
    else:
        console.print(f"Default alias: {escape(default.name)}")


def run_get(
    args: argparse.Namespace, store: ConfigStore, console: Console, logger: logging.Logger
) -> None:
    resolver = QueryResolver(store.providers, store.aliases, logger=logger)
    report = resolver.get(args.location, date=args.date, provider=args.provider)
    _print_report(console, report)


def run_provider(args: argparse.Namespace, store: ConfigStore, console: Console) -> None:
    if args.list or not args.provider_id:
        _print_providers(console, store)
        return

    with store.mutate():
        if args.key is None:
            config = store.providers.set_default(args.provider_id)
            console.print(f"Default provider set to: '{provider_display_name(config.id)}'")
            return

        had_default = store.providers.default() is not None
        if args.key.strip():
            config = store.providers.set_key(args.provider_id, args.key)
            console.print(f"API key for '{provider_display_name(config.id)}' updated.")
            if config.is_default and not had_default:
                console.print(f"Default provider set to: '{provider_display_name(config.id)}'")
        else:
            config = store.providers.clear_key(args.provider_id)
            console.print(f"API key for '{provider_display_name(config.id)}' cleared.")


def run_alias(args: argparse.Namespace, store: ConfigStore, console: Console) -> None:
    if args.list or (not args.name and not args.remove):
        _print_aliases(console, store)
        return

    with store.mutate():
        if args.remove:
            removed = store.aliases.remove(args.remove)
            console.print(f"Alias '{escape(removed.name)}' removed.")
            if removed.is_default:
                console.print(
                    f"Note: '{escape(removed.name)}' was the default alias. "
                    "Default alias is now unset."
                )
            return

        if args.address is None:
            alias = store.aliases.set_default(args.name)
            console.print(f"Alias '{escape(alias.name)}' set as default.")
            return

        had_default = store.aliases.default() is not None
        alias = store.aliases.set(args.name, args.address)
        console.print(f"Alias '{escape(alias.name)}' set to '{escape(alias.address)}'.")
        if alias.is_default and not had_default:
            console.print(f"Alias '{escape(alias.name)}' set as default.")


def _console_level(debug: bool, settings: Settings | None = None) -> int:
    if debug:
        return logging.DEBUG
    return logging.getLevelName(settings.log_level) if settings else logging.WARNING


def main(argv: Sequence[str] | None = None) -> int:
    """Run one CLI command and return its exit code."""
    args = parse_args(argv)
    console = Console()
    error_console = Console(stderr=True)

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger = setup_logger(level=_console_level(args.debug))
        logger.error("Configuration failure: %s", exc)
        return EXIT_CONFIG

    logger = setup_logger(level=_console_level(args.debug, settings), log_dir=settings.log_dir)
    logger.debug("Debug output enabled. Settings: %s", settings.safe_summary())

    try:
        store = ConfigStore.load(settings.config_file, settings=settings, logger=logger)
        if args.command == "get":
            run_get(args, store, console, logger)
        elif args.command == "provider":
            run_provider(args, store, console)
        else:
            run_alias(args, store, console)
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return EXIT_CONFIG
    except SelectionError as exc:
        logger.debug("Selection failure (%s): %s", type(exc).__name__, exc)
        error_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return EXIT_SELECTION
    except WeatherProviderError as exc:
        logger.debug("Provider failure (%s): %s", type(exc).__name__, exc)
        error_console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        return EXIT_PROVIDER
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected weather CLI failure: %s", exc)
        return EXIT_UNEXPECTED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
