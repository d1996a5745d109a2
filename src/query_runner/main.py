"""Command-line entry point.

Reads one request payload from stdin (or a file), writes one JSON response
envelope to stdout and always exits 0: callers detect failure from the
envelope, not from the exit code.
"""

from collections.abc import Callable

import click
from loguru import logger

from query_runner.config import Settings, get_settings
from query_runner.domain.models import ResponseEnvelope
from query_runner.infrastructure.postgres import PostgresConnector
from query_runner.logging_config import setup_logging
from query_runner.services.executor import dry_run, execute_payload


def _common_options(command):
    command = click.option(
        "--json-logs", is_flag=True, help="Write logs to stderr as JSON."
    )(command)
    command = click.option(
        "--log-level", default=None, help="Minimum log level written to stderr."
    )(command)
    command = click.option(
        "--input",
        "input_file",
        type=click.File("rb"),
        default="-",
        help="Read the request payload from this file instead of stdin.",
    )(command)
    return command


def _respond(
    action: Callable[[Settings, bytes], ResponseEnvelope],
    input_file,
    log_level: str | None,
    json_logs: bool,
) -> None:
    """Run ``action`` and print exactly one envelope, whatever goes wrong."""
    try:
        settings = get_settings()
        setup_logging(settings, level=log_level, json=json_logs)
        envelope = action(settings, input_file.read())
    except Exception as e:
        logger.exception("Unexpected failure")
        envelope = ResponseEnvelope.failure(f"unexpected error: {e}")
    click.echo(envelope.model_dump_json())


@click.group()
def cli():
    """Run a single statement against PostgreSQL and report the result as JSON."""
    pass


@cli.command()
@_common_options
def run(input_file, log_level: str | None, json_logs: bool):
    """Execute the request and print its response envelope."""
    _respond(
        lambda settings, payload: execute_payload(payload, PostgresConnector(settings), settings),
        input_file,
        log_level,
        json_logs,
    )


@cli.command()
@_common_options
def build(input_file, log_level: str | None, json_logs: bool):
    """Print the statement a request would run, without connecting."""
    _respond(
        lambda settings, payload: dry_run(payload, settings),
        input_file,
        log_level,
        json_logs,
    )


if __name__ == "__main__":
    cli()
