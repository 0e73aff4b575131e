"""rtldocs CLI: render contracts and estimates to PDF / Word.

Usage:
    rtldocs render records.json contract 12 --format pdf
    rtldocs fonts
    rtldocs template estimate > estimate.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from . import __version__
from .core.config import load_config
from .core.errors import RtlDocsError
from .core.fonts import FontCache, describe
from .core.models import DocumentKind, OutputFormat
from .generators.base import BaseGenerator
from .pipeline import DocumentPipeline, JsonRecordStore
from .templates import get_template, load_template

console = Console()

_FORMAT_MAP: dict[str, list[OutputFormat]] = {
    "pdf": [OutputFormat.PDF],
    "word": [OutputFormat.WORD],
    "all": [OutputFormat.PDF, OutputFormat.WORD],
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.version_option(version=__version__, prog_name="rtldocs")
def main():
    """rtldocs: generate right-to-left contracts and estimates."""
    pass


@main.command()
@click.argument("records", type=click.Path(exists=True, dir_okay=False))
@click.argument("kind", type=click.Choice([k.value for k in DocumentKind], case_sensitive=False))
@click.argument("record_id", type=int)
@click.option(
    "-f", "--format",
    "fmt",
    type=click.Choice(list(_FORMAT_MAP), case_sensitive=False),
    default="pdf",
    help="Output format (default: pdf).",
)
@click.option(
    "-o", "--output",
    "output_dir",
    type=click.Path(file_okay=False),
    default="./output",
    help="Output directory (default: ./output).",
)
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Engine config file (YAML or JSON).",
)
@click.option(
    "--template",
    "template_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Template file overriding the built-in one.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
def render(
    records: str,
    kind: str,
    record_id: int,
    fmt: str,
    output_dir: str,
    config_path: str | None,
    template_path: str | None,
    verbose: bool,
):
    """Render record RECORD_ID of KIND from the RECORDS json file."""
    _setup_logging(verbose)
    try:
        config = load_config(config_path)
        template = load_template(template_path) if template_path else None
        store = JsonRecordStore.from_file(records)
        pipeline = DocumentPipeline(config)

        results = [
            pipeline.generate_from_store(
                store, DocumentKind(kind.lower()), record_id, out, template=template,
            )
            for out in _FORMAT_MAP[fmt.lower()]
        ]
        paths = [BaseGenerator.save(r, Path(output_dir)) for r in results]
    except (RtlDocsError, ValueError) as exc:
        console.print(f"[bold red]Generation failed:[/] {exc}")
        raise SystemExit(1)

    table = RichTable(title="Generated Documents", show_lines=False)
    table.add_column("Format", style="bold cyan")
    table.add_column("File", style="green")
    table.add_column("Pages", justify="right")
    table.add_column("Size", justify="right")
    for result, path in zip(results, paths):
        table.add_row(result.format.value, str(path), str(result.page_count), f"{result.size:,} B")
    console.print(table)

    if not pipeline.fonts.supports_persian:
        console.print(
            "[yellow]⚠  No Persian font found; PDF text was written unshaped. "
            "Set RTLDOCS_FONT_PATH or add fonts/Vazirmatn-Regular.ttf.[/]"
        )


@main.command()
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
)
def fonts(config_path: str | None):
    """Show how the Persian fonts resolve."""
    config = load_config(config_path)
    cache = FontCache(config.fonts or None, base_dir=config.font_dir)

    table = RichTable(title="Fonts")
    table.add_column("Logical name", style="bold cyan")
    table.add_column("Registered as")
    table.add_column("Path", style="dim")
    for logical, registered, path in describe(cache):
        table.add_row(logical, registered, path)
    console.print(table)

    status = "[green]Persian shaping enabled[/]" if cache.supports_persian else "[yellow]Fallback font: Persian text is not shaped[/]"
    console.print(Panel(status, border_style="cyan"))


@main.command()
@click.argument("kind", type=click.Choice([k.value for k in DocumentKind], case_sensitive=False))
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Merge the company settings of this config into the template.",
)
def template(kind: str, config_path: str | None):
    """Print a built-in template as YAML."""
    company = load_config(config_path).company if config_path else None
    data = get_template(kind.lower(), company).model_dump(mode="json", exclude_none=True)
    click.echo(yaml.safe_dump(data, allow_unicode=True, sort_keys=False))


if __name__ == "__main__":
    main()
