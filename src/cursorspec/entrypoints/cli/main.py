"""cursorspec CLI entry point.

Defines the top-level ``cursorspec`` command (via Click-Extra) with the
logging options shared by every subcommand, and the subcommands:

- ``cursorspec list``: registered connectors and contract checks.
- ``cursorspec run``: run the conformance matrix and report the results.

Examples
    $ cursorspec list
    $ cursorspec run -c sqlite -k 'reader.get_*'
    $ CURSORSPEC_PG_URL=postgresql+psycopg://u:p@localhost/db cursorspec run --json
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir
from rich.console import Console
from rich.table import Table

from cursorspec import __version__
from cursorspec.adapters.connectors import (
    UnknownConnectorError,
    available_connectors,
    get_connector,
)
from cursorspec.config import ConnectorNotConfiguredError
from cursorspec.contract import DEFAULT_SUITES
from cursorspec.logging import config_console_handler, config_flight_recorder, log_startup
from cursorspec.runner import ConformanceRunner

from .helpers import describe_target, error, parse_log_level, success, warn

if TYPE_CHECKING:
    from logging import Handler

    from cursorspec.interfaces.connector import Connector

logger = logging.getLogger(__name__)


HELP = """cursorspec command-line interface.

    cursorspec runs one behavioral contract for forward-only result readers
    (typed access, absent values, lifecycle errors, multi-result batches)
    unchanged against every registered database connector, and reports where
    each connector deviates.
    """


EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('Environment:', fg='blue', bold=True, underline=True)}",
        "  CURSORSPEC_SQLITE_DATABASE  SQLite database path (default :memory:)",
        "  CURSORSPEC_PG_URL           PostgreSQL URL for the 'postgres' connector",
    ]
)


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (enables extra developer diagnostics beyond -vvv).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file (overrides default flight recorder path).",
    default=Path(user_log_dir("cursorspec", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="CURSORSPEC_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="CURSORSPEC_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Enable the in-memory flight recorder. Keeps the last N log records "
        "(tunable via CURSORSPEC_FLIGHT_RECORDER_CAPACITY) at DEBUG granularity "
        "(unaffected by -v/-q) and writes them to --log-path when a WARNING/ERROR "
        "occurs, or on clean exit if --force-flush is set."
    ),
    default=True,
    envvar="CURSORSPEC_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help=(
        "Force-flush the flight recorder buffer to --log-path on program exit. "
        "Normally the buffer only dumps on WARNING/ERROR; console output is unaffected."
    ),
    default=False,
    show_default=True,
    envvar="CURSORSPEC_FORCE_FLUSH_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). This changes the "
        "logger's own level, so it applies to BOTH console and flight-recorder. "
        "Repeatable (e.g. -L sqlalchemy.pool=DEBUG -L psycopg=INFO) or via "
        "CURSORSPEC_LOGGER_LEVELS (comma/space list)."
    ),
    default=("sqlalchemy=WARNING", "psycopg=WARNING"),
    envvar="CURSORSPEC_LOGGER_LEVELS",
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def cursorspec(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """cursorspec command-line interface."""

    # 0) compute effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) console
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(config_console_handler(level=level, debug_mode=debug, color=use_color))

    # 2) flight recorder
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # 3) root logger captures everything; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) per-logger levels
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


def _resolve_connectors(keys: tuple[str, ...]) -> list["Connector"]:
    """Build the requested connectors, or every configured one when none is named."""
    if keys:
        connectors = []
        for key in keys:
            try:
                connectors.append(get_connector(key))
            except UnknownConnectorError as e:
                raise click.BadParameter(str(e), param_hint="'--connector'") from e
            except ConnectorNotConfiguredError as e:
                raise click.ClickException(str(e)) from e
        return connectors

    connectors = []
    for key in available_connectors():
        try:
            connectors.append(get_connector(key))
        except ConnectorNotConfiguredError as e:
            warn(f"Skipping connector '{key}': {e}")
    return connectors


@click.command("list")
@click.option(
    "--checks/--no-checks",
    "show_checks",
    default=True,
    show_default=True,
    help="Also list every contract check.",
)
def list_command(show_checks: bool) -> None:
    """List registered connectors and contract checks."""
    console = Console()

    table = Table(title="Connectors")
    table.add_column("Key", style="bold")
    table.add_column("Name")
    table.add_column("Target")
    for key in available_connectors():
        try:
            connector = get_connector(key)
        except ConnectorNotConfiguredError as e:
            table.add_row(key, "-", f"not configured (set {e.variable})")
        else:
            table.add_row(key, connector.name, describe_target(connector))
    console.print(table)

    if show_checks:
        checks = Table(title="Checks")
        checks.add_column("Check", style="bold")
        checks.add_column("Description")
        for suite in DEFAULT_SUITES:
            for name, spec in suite.checks.items():
                checks.add_row(suite.qualify(name), spec.description)
        console.print(checks)


@click.command("run")
@click.option(
    "-c",
    "--connector",
    "connector_keys",
    multiple=True,
    metavar="KEY",
    help="Connector to evaluate (repeatable). Default: every configured connector.",
)
@click.option(
    "-k",
    "--select",
    default=None,
    metavar="PATTERN",
    help="Only run checks whose id matches this shell-style pattern, e.g. 'reader.get_*'.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Write the report to stdout as JSON instead of tables.",
)
@click.option(
    "--show-passed",
    is_flag=True,
    help="Include passed checks in the results table.",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    connector_keys: tuple[str, ...],
    select: str | None,
    as_json: bool,
    show_passed: bool,
) -> None:
    """Run the contract suites against connectors.

    Exits with status 1 when any check FAILED or ERRORED.
    """
    connectors = _resolve_connectors(connector_keys)
    if not connectors:
        raise click.ClickException("No connector is configured.")

    runner = ConformanceRunner(connectors, select=select)
    if not any(runner.selected(suite) for suite in runner.suites):
        raise click.BadParameter(f"No check matches {select!r}.", param_hint="'--select'")

    report = runner.run()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        console = Console()
        console.print(report.results_table(show_passed=show_passed))
        console.print(report.summary_table())

    counts = report.counts()
    totals = ", ".join(f"{counts[o]} {o.value}" for o in counts)
    if report.ok:
        success(f"All connectors conform ({totals}).")
        return
    error(f"Non-conformance detected ({totals}).")
    ctx.exit(1)


cursorspec.add_command(list_command)
cursorspec.add_command(run_command)
