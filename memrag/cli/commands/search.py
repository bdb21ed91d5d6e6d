# memrag/cli/commands/search.py
"""
Search command.

Usage:
    memrag search docs/*.md -q "retry policy" -k 3
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from memrag.cli.commands._common import index_files, load_config_safe
from memrag.cli.ui import ui
from memrag.core.exceptions import QueryError


def command(
    files: List[Path],
    query: str,
    top_k: int = 5,
    config: Optional[Path] = None,
) -> None:
    cfg = load_config_safe(config)
    service = index_files(cfg, files)
    try:
        try:
            result = service.search(query, top_k)
        except QueryError as e:
            ui.error(str(e))
            raise typer.Exit(1)

        if result.failed:
            ui.error(f"Search failed: {result.error}")
            raise typer.Exit(1)
        if not result.hits:
            ui.warning("No relevant chunks found.")
            return

        rows = [
            (
                rank,
                f"{hit.score:.3f}",
                hit.chunk.source_file_name or "-",
                hit.chunk.content[:100].replace("\n", " "),
            )
            for rank, hit in enumerate(result.hits, start=1)
        ]
        ui.table(["rank", "score", "file", "content"], rows, title=f"Results for: {query}")
    finally:
        service.close()
