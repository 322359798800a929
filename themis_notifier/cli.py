"""themis-notify: CI step entry point.

Reads instance configuration from THEMIS_* environment variables, runs a
report upload, project refresh or connection test, and exits non-zero
when the action's report is fatal.
"""

import os
from pathlib import Path
from typing import Optional

import typer

from themis_notifier import __version__
from themis_notifier.actions import RefreshAction, ReportAction, ReportFile
from themis_notifier.actions.types import supported_type_tags
from themis_notifier.core.config import Settings, get_settings
from themis_notifier.core.http import build_client
from themis_notifier.core.logging import configure_structlog
from themis_notifier.reporting.aggregator import ERROR, AggregateReport
from themis_notifier.reporting.metadata import BuildRun
from themis_notifier.reporting.workspace import Workspace
from themis_notifier.service.connection import check_connection

BUILD_START_ENV = "BUILD_START_MILLIS"

cli = typer.Typer(
    name="themis-notify",
    help="Send build reports to a Themis instance or trigger a project refresh.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Themis CI notifier."""


def _load_settings() -> Settings:
    try:
        settings = get_settings()
    except ValueError as exc:
        typer.echo(f"Invalid Themis configuration: {exc}", err=True)
        raise typer.Exit(2)
    configure_structlog(debug=settings.debug)
    return settings


def _build_run() -> BuildRun:
    raw = os.environ.get(BUILD_START_ENV)
    if raw:
        try:
            return BuildRun(start_time_millis=int(raw))
        except ValueError:
            typer.echo(f"Ignoring invalid {BUILD_START_ENV}: {raw!r}", err=True)
    return BuildRun.now()


def _emit(report: AggregateReport) -> None:
    for line in report.lines:
        if line.level == ERROR:
            typer.echo(line.message, err=True)
            if line.detail:
                typer.echo(line.detail, err=True)
        else:
            typer.echo(line.message)
    if report.fatal:
        typer.echo(f"Failing the build: {report.message}", err=True)
        raise typer.Exit(1)


@cli.command()
def report(
    instance: str = typer.Option(..., "--instance", help="Configured Themis instance name."),
    source_key: str = typer.Option(..., "--source-key", help="Themis source receiving the reports."),
    reports: list[str] = typer.Option(
        ..., "--report", help="Report as TYPE=GLOB; repeat for several.",
    ),
    workspace: Path = typer.Option(
        Path("."), "--workspace", help="Workspace root the globs are relative to.",
    ),
    fail_build: bool = typer.Option(
        False, "--fail-build", help="Exit non-zero when any report fails.",
    ),
) -> None:
    """Archive report files per type and upload them."""
    settings = _load_settings()
    action = ReportAction(instance, source_key, fail_build=fail_build)
    for declaration in reports:
        try:
            report_file = ReportFile.parse(declaration)
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(2)
        if report_file.type.lower() not in supported_type_tags():
            typer.echo(f"Warning: unrecognised report type {report_file.type!r}", err=True)
        action.add_report_file(report_file)

    _emit(action.perform(settings, _build_run(), Workspace(workspace)))


@cli.command()
def refresh(
    instance: str = typer.Option(..., "--instance", help="Configured Themis instance name."),
    project_key: str = typer.Option(..., "--project-key", help="Project to refresh."),
    fail_build: bool = typer.Option(
        False, "--fail-build", help="Exit non-zero when the refresh fails.",
    ),
) -> None:
    """Ask Themis to refresh a project's data."""
    settings = _load_settings()
    action = RefreshAction(instance, project_key, fail_build=fail_build)
    _emit(action.perform(settings, _build_run()))


@cli.command("test-connection")
def test_connection(
    url: str = typer.Option(..., "--url", help="Themis base URL."),
    api_key: str = typer.Option(..., "--api-key", help="Themis API key."),
) -> None:
    """Check that a Themis instance is reachable with the given key."""
    settings = _load_settings()
    with build_client(settings) as client:
        result = check_connection(client, url, api_key)
    if result.ok:
        typer.echo(result.message)
        return
    typer.echo(result.message, err=True)
    raise typer.Exit(1)


if __name__ == "__main__":
    cli()
