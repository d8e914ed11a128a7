"""Locate the user's Router from a ``module:attribute`` reference."""

import importlib
import sys
from pathlib import Path

import typer

from clocktick.router import Router


def import_router(reference: str) -> Router:
    """Import ``package.module:router`` and return the Router it names.

    The current directory is put on ``sys.path`` so project modules resolve
    the same way they do for ``uvicorn module:app``.

    Raises:
        typer.BadParameter: If the reference cannot be resolved to a Router.
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise typer.BadParameter(
            f"Expected 'module:attribute', got {reference!r}", param_hint="APP"
        )

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(
            f"Cannot import module {module_name!r}: {e}", param_hint="APP"
        ) from e

    target = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise typer.BadParameter(
                f"Module {module_name!r} has no attribute {attribute!r}",
                param_hint="APP",
            ) from e

    if callable(target) and not isinstance(target, Router):
        target = target()
    if not isinstance(target, Router):
        raise typer.BadParameter(
            f"{reference!r} is a {type(target).__name__}, not a Router",
            param_hint="APP",
        )
    return target
