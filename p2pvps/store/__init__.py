"""
Handles the persistence of the rental payment ledgers.
Currently has two implementations: the tortoise database
and an in-memory store for testing and mocking.
"""

from .ledger_store import LedgerStore
from .database import DatabaseLedgerStore
from .memory import MemoryLedgerStore
