from .article_store import ArticleStore
from .database import Database
from .exceptions import PersistenceError, StoreConnectionError, StoreError
from .ledger_store import LedgerStore

__all__ = [
    "ArticleStore",
    "Database",
    "LedgerStore",
    "PersistenceError",
    "StoreConnectionError",
    "StoreError",
]
