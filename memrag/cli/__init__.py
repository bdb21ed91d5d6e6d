# memrag/cli/__init__.py
from memrag.cli.cli import app

__all__ = ["app"]
