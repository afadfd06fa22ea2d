"""Reference resolvers: an in-memory list and a SQLite table."""

from .memory import MemoryResolver
from .sqlite import SQLiteResolver

__all__ = ["MemoryResolver", "SQLiteResolver"]
