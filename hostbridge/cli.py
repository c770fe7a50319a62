"""Command line entry point: serve the bridge, build the companion worker, list operations."""

import signal
import sys
import threading

import click

from hostbridge import __version__
from hostbridge.config import get_settings, load_settings
from hostbridge.context import BridgeContext
from hostbridge.infrastructure.observability import level_for, setup_logging
from hostbridge.services.orchestrator import CompanionOrchestrator


def _load(settings_path, **overrides):
    settings = load_settings(settings_path) if settings_path else get_settings()
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)
    setup_logging(level_for(settings), settings.log_format)
    return settings


@click.group()
@click.version_option(version=__version__, prog_name="hostbridge")
def cli():
    """hostbridge - WebSocket bridge for host-application tools and resources."""


@cli.command()
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help="Settings JSON file")
@click.option("--worker-path", type=click.Path(file_okay=False), help="Companion worker directory")
@click.option("--port", type=int, help="Override the listen port")
@click.option("--build/--no-build", default=None, help="Build the companion worker if needed")
@click.option("--start/--no-start", default=None, help="Start the listener (default: auto_start_server)")
def serve(settings_path, worker_path, port, build, start):
    """Run the bridge until interrupted."""
    settings = _load(settings_path, port=port)
    context = BridgeContext(settings)

    done = threading.Event()

    def _shutdown(*_):
        done.set()
        # during startup this only marks the stop; start() applies it after binding
        context.listener.stop()

    previous = {sig: signal.signal(sig, _shutdown) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        _serve_until_done(context, worker_path, build, start, done)
    finally:
        context.close()
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def _serve_until_done(context, worker_path, build, start, done):
    if start is None:
        started = context.autostart(worker_path, build=build)
    elif start:
        started = context.listener.start(worker_path, build=build)
    else:
        started = False
    if not started:
        if done.is_set():
            click.echo("Interrupted during startup.", err=True)
            return
        click.echo("Bridge listener did not start; see log for details.", err=True)
        sys.exit(1)

    click.echo(f"Listening on {context.listener.url}")
    while not done.is_set() and context.listener.is_listening:
        done.wait(0.5)


@cli.command("build-worker")
@click.argument("worker_path", type=click.Path(exists=True, file_okay=False))
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help="Settings JSON file")
def build_worker(worker_path, settings_path):
    """Install and build the companion worker if its artifact is missing."""
    settings = _load(settings_path)
    result = CompanionOrchestrator.from_settings(settings).ensure_built(worker_path)
    if not result.attempted:
        click.echo("Companion worker is already built.")
    elif result.succeeded:
        click.echo("Companion worker built successfully.")
    else:
        click.echo(f"Companion worker build failed:\n{result.diagnostic}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help="Settings JSON file")
def operations(settings_path):
    """List the operations a bridge would expose."""
    context = BridgeContext(_load(settings_path))
    for descriptor in context.registry.descriptors():
        marker = "" if descriptor.available else "  (unavailable)"
        click.echo(f"{descriptor.kind.value:<9} {descriptor.name:<24} {descriptor.description}{marker}")


if __name__ == "__main__":
    cli()
