from fragments.db.engine import get_engine
from fragments.db.memory import InMemoryFragmentStore
from fragments.db.postgres import PostgresFragmentStore

__all__ = [
    "InMemoryFragmentStore",
    "PostgresFragmentStore",
    "get_engine",
]
