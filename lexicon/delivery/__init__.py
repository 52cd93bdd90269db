"""
Delivery: storage collaborators and the terminal CLI.

Components:
- StorageBackend: Async persistence contract used by the session managers
- InMemoryStore: Dict-backed store for tests and throwaway runs
- StateStore: SQLite persistence
- cli: Typer/Rich commands (imported on demand by the console script)
"""

from lexicon.delivery.state_store import StateStore
from lexicon.delivery.storage import InMemoryStore, StorageBackend, export_data, import_data

__all__ = [
    "StorageBackend",
    "InMemoryStore",
    "StateStore",
    "export_data",
    "import_data",
]
