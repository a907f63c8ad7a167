"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import operator
import os
import sys
from pathlib import Path
from typing import Any, NoReturn

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from qwform.app import Qwform
from qwform.context import RenderContext
from qwform.exceptions import DataFileError, QwformError
from qwform.forms import FormSchema

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the qwform CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (QWFORM_DEBUG=1): DEBUG level - every directive and frame
    """
    debug = bool(os.environ.get("QWFORM_DEBUG"))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("qwform")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Handle and exit on qwform errors."""
    if isinstance(error, QwformError):
        exit_with_error(str(error))
    typer.echo(f"Unexpected error: {error}", err=True)
    sys.exit(1)


def load_data_file(path: Path | None) -> dict[str, Any]:
    """Load a render data file.

    Layout:
        action: MemberEditAction
        form: {memberName: Ariel}
        data: {products: [...]}
        errors:
          - {property: memberName, key: errors.required, args: [Name]}
    """
    if path is None:
        return {}
    if not path.exists():
        raise DataFileError(str(path), "file not found")
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DataFileError(str(path), f"invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise DataFileError(str(path), "top level must be a mapping")
    for section in ("form", "data"):
        if not isinstance(data.get(section) or {}, dict):
            raise DataFileError(str(path), f"'{section}' must be a mapping", data[section])
    errors = data.get("errors") or []
    if not isinstance(errors, list):
        raise DataFileError(str(path), "'errors' must be a list", errors)
    for entry in errors:
        if not isinstance(entry, dict) or "property" not in entry or "key" not in entry:
            raise DataFileError(str(path), "error entries need 'property' and 'key'", entry)
    return data


def build_context(app: Qwform, data: dict[str, Any], template_path: str) -> RenderContext:
    """RenderContext from a loaded data file."""
    errors = app.new_errors()
    for entry in data.get("errors") or []:
        errors.add(entry["property"], entry["key"], *(entry.get("args") or []))

    ctx = app.new_context(errors=errors, template_path=template_path)
    form = data.get("form") or {}
    if form:
        schema = FormSchema(dict, {name: operator.itemgetter(name) for name in form})
        ctx.register_form(form, schema)
    for name, value in (data.get("data") or {}).items():
        ctx.register_data(name, value)
    return ctx
