# memrag/ingestion/__init__.py
