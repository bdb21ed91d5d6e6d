# memrag/sdk/__init__.py
from memrag.sdk.service import Answer, FileRecord, RagService

__all__ = ["RagService", "Answer", "FileRecord"]
