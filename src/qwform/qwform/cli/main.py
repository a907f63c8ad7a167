"""QWForm CLI Main Entry Point

Usage:
    qwform render page.html --data data.yaml     # render to stdout
    qwform render page.html -o out.html          # render to file
    qwform lint templates/*.html                 # report mistaken prefixes
    qwform directives                            # list registered directives
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from qwform import __version__
from qwform.app import Qwform
from qwform.cli.utils import (
    build_context,
    console,
    handle_error,
    load_data_file,
    setup_logging,
)
from qwform.config import find_config, load_config
from qwform.engine.dispatcher import default_registry
from qwform.engine.mistake import find_mistaken_prefixes
from qwform.exceptions import QwformError
from qwform.host.parser import parse_html

app = typer.Typer(help="Form-binding attribute dialect for HTML templates.")


def _load_app(config_path: Optional[Path]) -> Qwform:
    path = config_path or find_config()
    return Qwform(load_config(path))


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"qwform {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    setup_logging(verbose)


@app.command()
def render(
    template: Path = typer.Argument(..., help="Template to render."),
    data_file: Optional[Path] = typer.Option(
        None, "-d", "--data", help="YAML with form, data, errors and action."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to qwform.yaml."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the HTML to a file."
    ),
    issue_token: bool = typer.Option(
        False, "--token", help="Pre-issue a double-submit token for the action."
    ),
) -> None:
    """Render a template with the data file."""
    try:
        qw = _load_app(config_path)
        data = load_data_file(data_file)
        action = data.get("action")
        if issue_token and action:
            qw.tokens.save_token(action)
        ctx = build_context(qw, data, str(template))
        html = qw.engine.render_source(template.read_text(), ctx, str(template), action)
    except (QwformError, OSError, ValueError) as e:
        handle_error(e)

    if output:
        output.write_text(html)
        console.print(f"[green]Rendered {template} -> {output}[/green]")
    else:
        typer.echo(html)


@app.command()
def lint(
    templates: List[Path] = typer.Argument(..., help="Templates to check."),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to qwform.yaml."
    ),
) -> None:
    """Report dialect directives written with the host prefix."""
    config = load_config(config_path or find_config())
    table = Table("Template", "Element", "Attribute", "Use instead")
    found = 0
    for template in templates:
        for diagnostic in find_mistaken_prefixes(parse_html(template.read_text()), config):
            found += 1
            table.add_row(
                str(template),
                f"<{diagnostic.tag}>",
                f'{diagnostic.attribute}="{diagnostic.value}"',
                diagnostic.suggestion,
            )

    if found:
        console.print(table)
        raise typer.Exit(1)
    console.print("[green]No mistaken prefixes found[/green]")


@app.command()
def directives(
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to qwform.yaml."
    ),
) -> None:
    """List registered directives in processing order."""
    config = load_config(config_path or find_config())
    table = Table("Attribute", "Precedence", "Removes original")
    for handler in default_registry():
        table.add_row(
            config.dialect_attr(handler.name),
            str(handler.precedence),
            "yes" if handler.directive.remove_original else "no",
        )
    console.print(table)


if __name__ == "__main__":
    app()
