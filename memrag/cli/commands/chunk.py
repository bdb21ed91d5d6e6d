# memrag/cli/commands/chunk.py
"""
Chunk preview command.

Usage:
    memrag chunk notes.md
    memrag chunk report.pdf --size 500 --overlap 50
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from memrag.cli.commands._common import load_config_safe
from memrag.cli.ui import ui
from memrag.ingestion.chunking.paragraph import ParagraphChunker
from memrag.ingestion.parser.base import ParseError
from memrag.ingestion.parser.router import extract_text

PREVIEW_CHARS = 120


def command(
    file: Path,
    size: Optional[int] = None,
    overlap: Optional[int] = None,
    config: Optional[Path] = None,
) -> None:
    cfg = load_config_safe(config)
    try:
        chunker = ParagraphChunker(
            chunk_size=size if size is not None else cfg.chunking.chunk_size,
            chunk_overlap=overlap if overlap is not None else cfg.chunking.chunk_overlap,
        )
    except ValueError as e:
        ui.error(str(e))
        raise typer.Exit(1)

    try:
        text = extract_text(file)
    except ParseError as e:
        ui.error(f"Cannot read {file}: {e}")
        raise typer.Exit(1)

    pieces = chunker.chunk_text(text)
    ui.header(f"Chunks for {file.name}", f"{chunker.chunker_id} - {len(pieces)} chunks")

    rows = []
    for i, piece in enumerate(pieces):
        preview = piece.replace("\n", " ")
        if len(preview) > PREVIEW_CHARS:
            preview = preview[:PREVIEW_CHARS] + "..."
        rows.append((i, len(piece), preview))
    ui.table(["#", "chars", "preview"], rows)
