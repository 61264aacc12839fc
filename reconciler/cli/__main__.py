# reconciler/cli/__main__.py

"""
Reconciler CLI

Usage: python -m reconciler.cli [command] [options]
"""

import atexit
from pathlib import Path

import click

from reconciler.cli.context import CLIContext
from reconciler.core.logging import ReconcilerLogger

cli_context = CLIContext()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """Validator reward and event log reconciler

    Runs the event syncer and reward reconciler, serves the refresh API,
    and manages the reconciler database schema.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['cli_context'] = cli_context

    ReconcilerLogger.configure(
        log_dir=Path.cwd() / "logs",
        log_level="DEBUG" if verbose else "INFO",
        console_enabled=True,
        file_enabled=False,
        structured_format=False,
    )


from reconciler.cli.commands.service import run, serve, refresh, status
from reconciler.cli.commands.db import db

cli.add_command(run)
cli.add_command(serve)
cli.add_command(refresh)
cli.add_command(status)
cli.add_command(db)


def cleanup():
    cli_context.shutdown()


atexit.register(cleanup)


if __name__ == '__main__':
    cli()
