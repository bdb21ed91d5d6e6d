# memrag/cli/commands/config.py
"""Show the effective configuration and where it came from."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml

from memrag.cli.commands._common import load_config_safe
from memrag.cli.ui import ui
from memrag.config.loader import get_config_source


def command(config: Optional[Path] = None) -> None:
    cfg = load_config_safe(config)
    ui.header("memrag config", get_config_source(config))
    ui.print(yaml.safe_dump(cfg.model_dump(), sort_keys=False).rstrip())
