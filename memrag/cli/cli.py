# memrag/cli/cli.py
"""
memrag CLI - main application.

Commands:
    memrag chunk      Preview how a file is chunked
    memrag search     Index files in memory and show ranked hits
    memrag ask        Index files in memory and answer a question
    memrag config     Show the effective configuration
    memrag version    Show version

NOTE: Commands use lazy loading - heavy imports only happen when a command is invoked.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

app = typer.Typer(
    name="memrag",
    help="memrag - in-memory RAG over local files with Ollama.",
    no_args_is_help=True,
    add_completion=False,
)

# =============================================================================
# LAZY COMMANDS
# =============================================================================


@app.command("chunk")
def chunk(
    file: Path = typer.Argument(..., help="File to chunk."),
    size: Optional[int] = typer.Option(None, "--size", "-s", help="Chunk size in characters."),
    overlap: Optional[int] = typer.Option(None, "--overlap", "-o", help="Overlap in characters."),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file."),
) -> None:
    """Preview how a file is split into chunks."""
    from memrag.cli.commands import chunk as mod

    mod.command(file=file, size=size, overlap=overlap, config=config)


@app.command("search")
def search(
    files: List[Path] = typer.Argument(..., help="Files to index."),
    query: str = typer.Option(..., "--query", "-q", help="Search query."),
    top_k: int = typer.Option(5, "--top-k", "-k", help="Number of results."),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file."),
) -> None:
    """Index files in memory and show ranked hits for a query."""
    from memrag.cli.commands import search as mod

    mod.command(files=files, query=query, top_k=top_k, config=config)


@app.command("ask")
def ask(
    files: List[Path] = typer.Argument(..., help="Files to index."),
    question: str = typer.Option(..., "--question", "-q", help="Question to answer."),
    stream: bool = typer.Option(False, "--stream", help="Stream the answer as it is generated."),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file."),
) -> None:
    """Index files in memory and answer a question from them."""
    from memrag.cli.commands import ask as mod

    mod.command(files=files, question=question, stream=stream, config=config)


@app.command("config")
def config_cmd(
    config: Optional[Path] = typer.Option(None, "--config", help="Config file."),
) -> None:
    """Show the effective configuration."""
    from memrag.cli.commands import config as mod

    mod.command(config=config)


@app.command("version")
def version() -> None:
    """Show version."""
    from memrag import __version__

    typer.echo(f"memrag version {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
