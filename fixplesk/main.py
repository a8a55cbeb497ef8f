from __future__ import annotations

import sys
from typing import List, Optional, Sequence

import typer
from pydantic import ValidationError

from fixplesk import reporter
from fixplesk.config import get_settings
from fixplesk.errors import FixPleskError
from fixplesk.preconditions import check_preconditions
from fixplesk.resolver import DomainResolver
from fixplesk.runner import RunResult, run_domains
from fixplesk.utils.logging import configure_logging

PROG_NAME = "fixplesk"

USAGE = """\
Restore permissions of a target domain in Plesk.

Usage:
  {prog} [[domain] ...]
    Check if the domain exists in Plesk and restore default permissions for it.
    Note: mode 644 will be used by default for files and 755 for folders.
    The document root itself gets 750.

Environment:
  FILE_MODE      mode for files (default 644)
  DIR_MODE       mode for directories (default 755)
  DOCROOT_MODE   mode for the document root (default 750)

Options:
  -h, --help     Show this message and exit.
  --log-level    Override LOG_LEVEL for this run.
  --json-logs    Emit log lines as JSON.
"""

app = typer.Typer(add_completion=False, add_help_option=False)


def _usage() -> None:
    typer.echo(USAGE.format(prog=PROG_NAME))


def _settings_error(exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return f"Invalid configuration: {problems}"


@app.command(add_help_option=False, context_settings={"ignore_unknown_options": True})
def restore_permissions(
    domains: Optional[List[str]] = typer.Argument(None, metavar="[DOMAIN]..."),
    show_help: bool = typer.Option(False, "--help", "-h", help="Show usage and exit."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
) -> None:
    """
    Restore ownership and permissions for the given Plesk domains.
    """
    if show_help or not domains:
        _usage()
        raise typer.Exit(code=1)

    try:
        settings = get_settings()
    except ValidationError as exc:
        reporter.error(_settings_error(exc))
        raise typer.Exit(code=1)

    try:
        configure_logging(
            level=log_level or settings.log_level,
            json_logs=json_logs or settings.log_json,
        )
    except ValueError as exc:
        reporter.error(f"Invalid log level: {exc}")
        raise typer.Exit(code=1)

    result = RunResult()
    try:
        check_preconditions(settings)
        policy = settings.policy()
        with DomainResolver(settings) as resolver:
            run_domains(domains, policy, resolver, result=result)
    except FixPleskError as exc:
        reporter.error(str(exc))
        # Domains restored before the failure are still listed.
        reporter.print_summary(result.reports, result.skipped)
        raise typer.Exit(code=1)

    reporter.print_summary(result.reports, result.skipped)
    raise typer.Exit(code=0)


def run(args: Sequence[str]) -> int:
    """
    Run the command line with explicit arguments and return the exit code.
    """
    try:
        app(args=list(args), prog_name=PROG_NAME)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1
    return 0


def main() -> None:
    try:
        app(prog_name=PROG_NAME)
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
