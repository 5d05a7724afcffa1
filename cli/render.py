from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

from services.store_writer import NAME_ENTRY, VALUE_ENTRY


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_location(path: str, entries: Dict[str, str]) -> None:
    echo_heading("Store Location")
    typer.echo(path)
    typer.echo()
    echo_heading("Entries")
    if not entries:
        typer.echo("No entries written yet.")
        return

    known = [(name, entries[name]) for name in (NAME_ENTRY, VALUE_ENTRY) if name in entries]
    others = sorted(
        (name, value) for name, value in entries.items() if name not in (NAME_ENTRY, VALUE_ENTRY)
    )
    echo_key_values(known + others)
