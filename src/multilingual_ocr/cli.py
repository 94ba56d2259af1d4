"""Command-line interface for multilingual OCR.

Runs OCR on a single image, or shows how a language list would be grouped
without loading any models.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import Settings, get_settings
from .exceptions import MultilingualOCRError
from .languages import fix_dependencies, normalize_languages, plan_groups
from .models import OCRResult
from .service import MultilingualOCRService

app = typer.Typer(
    name="multilingual-ocr",
    help="Multilingual OCR with language grouping and result fusion",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _create_service(settings: Settings) -> MultilingualOCRService:
    return MultilingualOCRService(settings=settings)


async def _run_extract(
    image: Path, languages: list[str], settings: Settings
) -> tuple[OCRResult, str]:
    async with _create_service(settings) as service:
        result = await service.extract_text(image, languages)
        return result, service.timings.summary()


def _lines_table(result: OCRResult) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Text")
    table.add_column("Confidence", justify="right")
    table.add_column("Box (min_x, min_y, max_x, max_y)")

    for i, line in enumerate(result.lines, start=1):
        box = line.bounding_box
        table.add_row(
            str(i),
            line.text,
            f"{line.confidence:.3f}",
            f"{box.min_x:.1f}, {box.min_y:.1f}, {box.max_x:.1f}, {box.max_y:.1f}",
        )
    return table


@app.command()
def extract(
    image: Path = typer.Argument(
        ...,
        help="Path to image file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    languages: list[str] = typer.Option(
        ["en"],
        "--language",
        "-l",
        help="Language code, repeat for several (e.g. -l en -l hi -l ar)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON on stdout",
    ),
    show_timings: bool = typer.Option(
        False,
        "--timings",
        "-t",
        help="Print per-stage timings",
    ),
) -> None:
    """Extract text from an image across one or more languages."""
    settings = get_settings()
    _configure_logging(settings.log_level)

    if not as_json:
        console.print(f"[bold]Running OCR on {image.name}[/bold]")
        console.print(f"Languages: {', '.join(languages)}")
        console.print()

    try:
        result, timing_summary = asyncio.run(_run_extract(image, languages, settings))
    except (MultilingualOCRError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        console.print(_lines_table(result))
        console.print()
        console.print(
            f"[green]✓[/green] {len(result.lines)} lines, "
            f"languages: {', '.join(sorted(result.languages)) or '-'}, "
            f"GPU: {'yes' if result.used_gpu else 'no'}, "
            f"{result.duration:.2f}s"
        )

    if show_timings:
        console.print(timing_summary)


@app.command()
def plan(
    languages: list[str] = typer.Option(
        ...,
        "--language",
        "-l",
        help="Language code, repeat for several",
    ),
) -> None:
    """Show how languages would be grouped, without running OCR."""
    resolved = normalize_languages(languages)
    if not resolved:
        console.print("[red]Error:[/red] At least one valid language must be specified.")
        raise typer.Exit(1)

    typer.echo(f"Requested: {', '.join(resolved)}")
    typer.echo(f"With dependencies: {', '.join(sorted(fix_dependencies(resolved)))}")
    for i, group in enumerate(plan_groups(resolved), start=1):
        typer.echo(f"Group {i}: {', '.join(group)} -> reader [{', '.join(sorted(fix_dependencies(group)))}]")


@app.command("cache-dir")
def cache_dir() -> None:
    """Print the model cache directory."""
    typer.echo(str(get_settings().model_cache_dir))


if __name__ == "__main__":
    app()
