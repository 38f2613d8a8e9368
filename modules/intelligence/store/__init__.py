"""
Signal stores: read-only aggregate access to workspace records.
"""

from modules.intelligence.store.base import Condition, SignalStore, ENTITIES, OPERATORS
from modules.intelligence.store.memory_store import MemorySignalStore
from modules.intelligence.store.sql_store import SqlSignalStore

__all__ = [
    "Condition",
    "SignalStore",
    "ENTITIES",
    "OPERATORS",
    "MemorySignalStore",
    "SqlSignalStore",
]
