# memrag/cli/commands/ask.py
"""
Ask command.

Usage:
    memrag ask handbook.pdf -q "How many vacation days?"
    memrag ask notes/*.md -q "Summarize the decisions" --stream
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from memrag.cli.commands._common import index_files, load_config_safe
from memrag.cli.ui import console, ui
from memrag.core.exceptions import EngineError


def _stream_answer(service, question: str) -> None:
    failures: list = []

    handle = service.query_stream(
        question,
        on_token=lambda token: console.print(token, end="", markup=False, highlight=False),
        on_done=lambda: console.print(),
        on_error=failures.append,
    )
    handle.wait()
    if failures:
        console.print()
        ui.error(f"Answer failed: {failures[0]}")
        raise typer.Exit(1)


def command(
    files: List[Path],
    question: str,
    stream: bool = False,
    config: Optional[Path] = None,
) -> None:
    cfg = load_config_safe(config)
    service = index_files(cfg, files)
    try:
        if stream:
            _stream_answer(service, question)
            return

        try:
            answer = service.query(question)
        except EngineError as e:
            ui.error(f"Answer failed: {e}")
            raise typer.Exit(1)

        ui.panel(answer.text, title="Answer", style="green")
        if answer.sources:
            ui.info("Sources: " + ", ".join(answer.sources))
    finally:
        service.close()
