# memrag/cli/commands/_common.py
"""Helpers shared by commands that need config or an indexed service."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from memrag.cli.ui import ui
from memrag.config.loader import load_config
from memrag.config.schema import MemragConfig
from memrag.core.config import ConfigError
from memrag.ingestion.parser.base import ParseError
from memrag.logging.logger import configure_logging, get_logger
from memrag.logging.tags import CLI
from memrag.sdk.service import RagService

logger = get_logger(__name__)


def load_config_safe(path: Optional[Path]) -> MemragConfig:
    """Load config or exit with a readable message."""
    try:
        config = load_config(path)
    except ConfigError as e:
        ui.error(f"Failed to load config: {e}")
        raise typer.Exit(1)
    configure_logging(config.logging.level)
    return config


def index_files(config: MemragConfig, files: List[Path]) -> RagService:
    """Build a service and ingest every file; unreadable files are reported and skipped."""
    service = RagService(config)
    indexed = 0
    for path in files:
        try:
            result = service.add_document(path)
        except ParseError as e:
            ui.warning(f"Skipped {path}", str(e))
            continue
        indexed += 1
        detail = f"{result.chunks} chunks"
        if result.partial:
            detail += f", {result.failed} failed to embed"
        ui.info(f"Indexed {result.file_name} ({detail})")

    logger.debug(f"{CLI} Indexed {indexed}/{len(files)} files")
    if indexed == 0:
        service.close()
        ui.error("No files could be indexed.")
        raise typer.Exit(1)
    return service
