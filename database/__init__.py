"""
Database package for the facility booking service.

This package provides modular database operations:
- connection: Connection management (get_db, close_db, init_db) and
  transaction helpers (transaction, snapshot)
- schema: Table creation and indexes
- seed: Initial seed data
"""

from database.connection import get_db, close_db, init_db, transaction, snapshot
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'transaction',
    'snapshot',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
]
