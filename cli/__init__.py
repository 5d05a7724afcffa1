"""Command-line entry points for the telemetry bridge."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


# ``cli.app`` is left as the module rather than the Typer instance so tests can
# patch names such as ``cli.app.build_bridge`` on that module path.

__all__ = []
