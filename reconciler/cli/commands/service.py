# reconciler/cli/commands/service.py

"""
Service CLI Commands

Run the schedulers in the foreground, serve the HTTP API, trigger a single
refresh, or print the current reconciliation status.
"""

import json
import signal
import threading

import click


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.command()
@click.pass_context
def run(ctx):
    """Start the event syncer and reward reconciler schedules

    Runs an initial pass of every enabled job, then polls on the configured
    intervals until SIGINT or SIGTERM.
    """
    cli_context = ctx.obj['cli_context']
    shutdown_event = threading.Event()

    def _signal_handler(signum, frame):
        click.echo(f"Received signal {signum}, shutting down")
        shutdown_event.set()

    signal.signal(signal.SIGTERM, _signal_handler)
    signal.signal(signal.SIGINT, _signal_handler)

    try:
        runtime = cli_context.runtime
        runtime.start()
    except Exception as e:
        raise click.ClickException(f"Reconciler failed to start: {e}")

    click.echo("✅ Reconciler running")
    for scheduler in runtime.schedulers:
        click.echo(f"   {scheduler.job.name}: every {scheduler.interval_seconds:g}s")

    shutdown_event.wait()
    cli_context.shutdown()
    click.echo("Reconciler stopped")


@click.command()
@click.option('--host', default='0.0.0.0', show_default=True, help='Bind address')
@click.option('--port', default=8000, type=int, show_default=True, help='Bind port')
def serve(host, port):
    """Serve the refresh API (schedules start with the app)"""
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port)


@click.group()
def refresh():
    """Run a single reconciliation pass now"""
    pass


@refresh.command('rewards')
@click.pass_context
def refresh_rewards(ctx):
    """Reconcile validator rewards once and print the result

    Examples:
        refresh rewards
    """
    cli_context = ctx.obj['cli_context']
    try:
        result = cli_context.runtime.refresh_rewards()
    except Exception as e:
        raise click.ClickException(f"Reward refresh failed: {e}")
    _echo_json(result.to_response())


@refresh.command('events')
@click.pass_context
def refresh_events(ctx):
    """Sync contract event logs once and print the result"""
    cli_context = ctx.obj['cli_context']
    try:
        result = cli_context.runtime.refresh_events()
    except Exception as e:
        raise click.ClickException(f"Event refresh failed: {e}")
    _echo_json(result.to_response())


@click.command()
@click.pass_context
def status(ctx):
    """Show cursor position, stored rewards and the available balance"""
    cli_context = ctx.obj['cli_context']
    try:
        summary = cli_context.runtime.status()
    except Exception as e:
        raise click.ClickException(f"Status check failed: {e}")
    _echo_json(summary)
