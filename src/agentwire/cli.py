from pathlib import Path
import json
import logging
import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typing import List, Optional

from .classifier import classify, normalize, package_of, short_name
from .diagnostics import Severity
from .ir import InvalidGraphError
from .settings import SettingsError, load_settings
from .validator import load_graph, validate_files
from .visualize import capability_plan

app = typer.Typer(no_args_is_help=True, help="agentwire — semantic checks for AI agent workflows")

_STYLES = {Severity.ERROR: "bold red", Severity.WARNING: "yellow", Severity.INFO: "cyan"}


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )


@app.command()
def validate(files: List[Path] = typer.Argument(..., help="Workflow files (.json, .yaml, .yml)."),
             as_json: bool = typer.Option(False, "--json", help="Print machine-readable JSON."),
             config: Optional[Path] = typer.Option(None, help="YAML file with validation thresholds."),
             workers: int = typer.Option(1, min=1, help="Validate files in parallel."),
             verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    ):
    """Validate the AI nodes of one or more workflows."""
    _setup_logging(verbose)
    try:
        settings = load_settings(config)
    except SettingsError as e:
        rprint(Panel.fit(f"[bold red]{escape(str(e))}[/]"))
        raise typer.Exit(code=2)

    results = validate_files(files, settings, max_workers=workers)
    if as_json:
        payload = [r.model_dump(mode="json") for r in results]
        typer.echo(json.dumps(payload, indent=2))
    else:
        for r in results:
            if r.report is None:
                rprint(Panel.fit(f"[bold red]Could not load[/] [cyan]{r.path}[/]: {escape(r.failure or '')}"))
                continue
            if not r.report.ai_checked:
                rprint(Panel.fit(f"[cyan]{r.path}[/]: no AI nodes, nothing to check"))
                continue
            table = Table(title=f"Validation Report: {r.path}", show_lines=True)
            table.add_column("Severity", justify="center", style="bold")
            table.add_column("Code", no_wrap=True)
            table.add_column("Node")
            table.add_column("Message")
            for d in r.report.diagnostics:
                table.add_row(f"[{_STYLES[d.severity]}]{d.severity.value}[/]", d.code,
                              escape(d.node_name or ""), escape(d.message))
            rprint(table)
            status = "[bold green]valid[/]" if r.report.valid else "[bold red]invalid[/]"
            rprint(f"{status}: {len(r.report.errors)} error(s), {len(r.report.warnings)} warning(s)")
    if not all(r.ok for r in results):
        raise typer.Exit(code=1)


@app.command()
def explain(file: Path):
    """Print which capabilities are wired into each node."""
    try:
        graph = load_graph(file)
    except InvalidGraphError as e:
        rprint(Panel.fit(f"[bold red]{escape(str(e))}[/]"))
        raise typer.Exit(code=1)
    print(capability_plan(graph))


@app.command("classify")
def classify_type(node_type: str = typer.Argument(..., help="Raw node type, e.g. @n8n/n8n-nodes-langchain.agent")):
    """Show how a node type is normalized and categorized."""
    canonical = normalize(node_type)
    c = classify(canonical)
    table = Table(show_header=False)
    table.add_row("normalized", canonical)
    table.add_row("name", short_name(canonical))
    table.add_row("package", package_of(canonical))
    table.add_row("category", c.category.value)
    if c.subtype:
        table.add_row("tool subtype", c.subtype)
    rprint(table)


if __name__ == "__main__":
    app()
