"""
Command-line interface for the question paper solver.

Solve a question paper from a file or from text, check the language model
connection, or run the HTTP API.
"""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

from paper_solver.config import get_settings
from paper_solver.models import Artifact, SolutionEnvelope
from paper_solver.pipeline import SolutionPipeline, create_solution_pipeline
from paper_solver.utils.errors import PaperSolverError
from paper_solver.utils.logging import setup_logging

app = typer.Typer(
    name="paper-solver",
    help="Extract question papers from text, images or PDFs and generate step-by-step solutions",
    add_completion=False,
)
console = Console()

# Global pipeline instance
_pipeline = None


def get_pipeline() -> SolutionPipeline:
    """Get or create the global pipeline instance."""
    global _pipeline
    if _pipeline is None:
        _pipeline = create_solution_pipeline()
    return _pipeline


def guess_content_type(path: Path) -> Optional[str]:
    """Guess a MIME type from the file extension."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type


def _show_result(result: SolutionEnvelope, show_text: bool, output: Optional[Path]) -> None:
    if show_text:
        console.print(Panel(Text(result.extracted_text), title="Extracted text", border_style="dim"))

    console.print(Markdown(result.solutions))

    if output:
        output.write_text(result.solutions, encoding="utf-8")
        console.print(f"[green]✓[/green] Solutions saved to {output}")


@app.command()
def solve(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Question paper file (PDF, PNG, JPG or TXT)",
    ),
    content_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="MIME type to use instead of guessing from the extension",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the markdown solutions to this file",
    ),
    show_text: bool = typer.Option(
        False,
        "--show-text",
        help="Print the extracted text before the solutions",
    ),
):
    """Solve a question paper file."""

    async def _solve():
        artifact = Artifact(
            data=path.read_bytes(),
            content_type=content_type or guess_content_type(path),
            filename=path.name,
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Solving {path.name}...", total=None)
            return await get_pipeline().process_file(artifact)

    try:
        result = asyncio.run(_solve())
    except PaperSolverError as e:
        console.print(f"[red]✗[/red] {escape(e.message)}")
        raise typer.Exit(1)

    _show_result(result, show_text, output)


@app.command("solve-text")
def solve_text(
    text: str = typer.Argument(..., help="Question paper text"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the markdown solutions to this file",
    ),
):
    """Solve question text given on the command line."""
    try:
        result = asyncio.run(get_pipeline().process_text({"text": text}))
    except PaperSolverError as e:
        console.print(f"[red]✗[/red] {escape(e.message)}")
        raise typer.Exit(1)

    _show_result(result, show_text=False, output=output)


@app.command()
def health():
    """Check the connection to the language model."""
    result = asyncio.run(get_pipeline().health())

    if result.gemini_api_connected:
        console.print("[green]✓[/green] Gemini API connected")
    else:
        console.print("[red]✗[/red] Gemini API not reachable")
        raise typer.Exit(1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
):
    """Run the HTTP API."""
    import uvicorn

    from paper_solver.api import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(get_pipeline()),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Question paper solver."""
    setup_logging(log_level=log_level.upper() if log_level else None)


if __name__ == "__main__":
    app()
