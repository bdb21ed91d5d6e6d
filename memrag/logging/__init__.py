# memrag/logging/__init__.py
