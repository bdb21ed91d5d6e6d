# memrag/logging/tags.py
"""
Central place for defining logging subsystem tags.

Tags prefix log messages so output stays consistent and searchable:
    logger.info(f"{VECTOR_DB} Added 12 chunks")

Changing a tag here updates it project-wide.
"""

INGEST = "[INGEST]"
CHUNKING = "[CHUNKING]"
VECTOR_DB = "[VECTOR_DB]"
CACHE = "[CACHE]"
EMBEDDING = "[EMBEDDING]"
CHAT = "[CHAT]"
RETRIEVER = "[RETRIEVER]"
PROMPT = "[PROMPT]"
PIPELINE = "[PIPELINE]"
RUNTIME = "[RUNTIME]"
CLI = "[CLI]"
