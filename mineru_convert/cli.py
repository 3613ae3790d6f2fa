"""CLI entry point for mineru-convert."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from mineru_convert.config import AppConfig, OutputConfig, PollingConfig, load_config
from mineru_convert.config.loader import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE
from mineru_convert.converter import DocumentConverter
from mineru_convert.errors import ConversionError
from mineru_convert.extractor import ConversionResult
from mineru_convert.jobs import JobController
from mineru_convert.logging_setup import configure_logging
from mineru_convert.output import ResultWriter
from mineru_convert.transport import create_transport

app = typer.Typer(
    name="mineru-convert",
    help="Convert documents to markdown and images through the MinerU batch API.",
)

config_app = typer.Typer(help="Manage mineru-convert configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: AppConfig | None = None


def _get_config() -> AppConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to mineru-convert.yaml")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging("debug" if verbose else _config.log_level, _config.log_format)


def _display_result(result: ConversionResult) -> None:
    """Summarise a conversion result as a Rich panel plus image table."""
    m = result.metadata
    rprint(
        Panel(
            f"[dim]Title:[/dim]   {m.title or '(none)'}\n"
            f"[dim]Pages:[/dim]   {m.page_count}\n"
            f"[dim]Images:[/dim]  {len(result.images)}\n"
            f"[dim]Chars:[/dim]   {len(result.markdown)}",
            title="Conversion Result",
            border_style="green",
        )
    )
    if result.images:
        table = Table(title=f"Images ({len(result.images)})")
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Page", justify="right")
        for img in result.images:
            table.add_row(
                img.name,
                img.mime_type,
                str(img.page_number) if img.page_number is not None else "-",
            )
        rprint(table)


def _emit(result: ConversionResult, stem: str, output: str | None, as_json: bool) -> None:
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return
    if output:
        dest = ResultWriter(OutputConfig(base_dir=output)).write(result, stem)
        rprint(f"[green]Written to[/green] {dest}")
    else:
        typer.echo(result.markdown)
    _display_result(result)


@app.command()
def convert(
    file: str = typer.Argument(..., help="Path to the document to convert"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Directory for markdown, images and metadata"
    ),
    max_wait: float | None = typer.Option(
        None, "--max-wait", help="Seconds to wait for the remote job"
    ),
    poll_interval: float | None = typer.Option(
        None, "--poll-interval", help="Seconds between status polls"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Convert a document to markdown via the remote batch API."""
    cfg = _get_config()
    path = Path(file)
    if not path.is_file():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    overrides = {
        k: v
        for k, v in {"max_wait": max_wait, "poll_interval": poll_interval}.items()
        if v is not None
    }
    try:
        polling = PollingConfig.model_validate(
            {**cfg.conversion.polling.model_dump(), **overrides}
        )
    except ValidationError as e:
        rprint(f"[red]Error:[/red] Invalid polling options: {escape(str(e))}")
        raise typer.Exit(1)
    converter = DocumentConverter.from_config(
        cfg.conversion.model_copy(update={"polling": polling})
    )

    rprint(f"[bold]Converting[/bold] {path.name}...")
    try:
        result = asyncio.run(converter.convert(path.read_bytes(), file_name=path.name))
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _emit(result, path.stem, output, as_json)


@app.command()
def status(
    batch_id: str = typer.Argument(..., help="Batch id returned on submission"),
) -> None:
    """Query the remote status of a batch once."""
    cfg = _get_config()
    controller = JobController(create_transport(cfg.conversion.mineru))
    try:
        job_status = asyncio.run(controller.status(batch_id))
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title=f"Batch {batch_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("State", job_status.state.value)
    table.add_row("Terminal", str(job_status.state.is_terminal))
    if job_status.progress is not None:
        table.add_row(
            "Progress",
            f"{job_status.progress.extracted_pages}/{job_status.progress.total_pages} pages",
        )
    if job_status.result_locator:
        table.add_row("Result", job_status.result_locator)
    if job_status.error_message:
        table.add_row("Error", job_status.error_message)
    rprint(table)


@app.command()
def extract(
    container: str = typer.Argument(..., help="Path to a downloaded result ZIP"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Directory for markdown, images and metadata"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Extract markdown and images from a local result ZIP."""
    cfg = _get_config()
    path = Path(container)
    if not path.is_file():
        rprint(f"[red]Error:[/red] File not found: {container}")
        raise typer.Exit(1)

    converter = DocumentConverter.from_config(cfg.conversion)
    result = converter.extract(path.read_bytes())
    _emit(result, path.stem, output, as_json)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    data = cfg.model_dump()
    if data["conversion"]["mineru"]["api_token"]:
        data["conversion"]["mineru"]["api_token"] = "***"
    rprint(Syntax(yaml.dump(data, default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default mineru-convert.yaml in current directory."""
    target = Path(CONFIG_FILENAME)
    if target.exists() and not force:
        rprint("[yellow]mineru-convert.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
