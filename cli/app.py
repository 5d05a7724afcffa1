from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, Optional

import typer

from cli.render import render_location
from logging_config import configure_logging
from services.bridge import build_bridge
from settings import STORE_BACKENDS, Settings, get_settings
from storage.base import StoreError
from storage.factory import build_default_store


@dataclass
class CLIState:
    settings: Settings


app = typer.Typer(
    help="Mirror numeric serial sensor readings into a key-value store.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _stop_signals() -> list[signal.Signals]:
    names = ("SIGINT", "SIGTERM", "SIGBREAK")
    return [getattr(signal, name) for name in names if hasattr(signal, name)]


@contextmanager
def stop_on_signals(stop_event: threading.Event) -> Iterator[None]:
    """Set ``stop_event`` on interrupt/terminate while the block runs."""

    def handler(_signum, _frame) -> None:
        stop_event.set()

    previous = {}
    for sig in _stop_signals():
        previous[sig] = signal.signal(sig, handler)
    try:
        yield
    finally:
        for sig, old_handler in previous.items():
            signal.signal(sig, old_handler)


@app.callback()
def main(
    ctx: typer.Context,
    store_backend: Optional[str] = typer.Option(
        None,
        "--backend",
        help=f"Store backend ({', '.join(STORE_BACKENDS)}).",
    ),
    store_path: Optional[str] = typer.Option(
        None,
        "--store-path",
        help="JSON document used by the file backend.",
    ),
    store_key: Optional[str] = typer.Option(
        None,
        "--store-key",
        "-k",
        help="Path of the store location holding Name and Value.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Entry point for the CLI."""
    settings = get_settings()
    overrides = {}
    if store_backend is not None:
        backend = store_backend.lower()
        if backend not in STORE_BACKENDS:
            raise typer.BadParameter(
                f"Unknown backend {store_backend!r}.", param_hint="--backend"
            )
        overrides["store_backend"] = backend
    if store_path is not None:
        overrides["store_path"] = store_path
    if store_key is not None:
        overrides["store_key"] = store_key
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    settings = replace(settings, **overrides)

    configure_logging(settings.log_level)
    ctx.obj = CLIState(settings=settings)


@app.command("run")
def run_command(
    ctx: typer.Context,
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Serial device to read."),
    baud_rate: Optional[int] = typer.Option(None, "--baud", min=1, help="Baud rate."),
    label: Optional[str] = typer.Option(None, "--label", help="Sensor name written at startup."),
) -> None:
    """Read sensor lines until interrupted, mirroring each new value."""
    state = _get_state(ctx)
    overrides = {}
    if port is not None:
        overrides["serial_port"] = port
    if baud_rate is not None:
        overrides["baud_rate"] = baud_rate
    if label is not None:
        overrides["sensor_label"] = label
    settings = replace(state.settings, **overrides)

    stop_event = threading.Event()
    bridge = build_bridge(settings, stop_event=stop_event)
    typer.echo(f"Opening serial port {settings.serial_port} ...")
    with stop_on_signals(stop_event):
        exit_code = bridge.run()
    raise typer.Exit(code=exit_code)


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Print the entries currently stored at the configured location."""
    settings = _get_state(ctx).settings
    try:
        store = build_default_store(settings.store_backend, settings.store_path)
        with store.open_location(settings.store_key) as location:
            entries = location.values()
    except StoreError as exc:
        typer.secho(f"ERROR: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    render_location(settings.store_key, entries)
