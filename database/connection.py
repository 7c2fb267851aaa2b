"""
Database connection management.
Handles per-context connections, write transactions, and initialization.
"""

import sqlite3
from contextlib import contextmanager

from flask import g, current_app


def get_db():
    """
    Get thread-safe database connection with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/facility_booking.db')
        g.db = sqlite3.connect(
            db_path,
            timeout=current_app.config.get('DB_BUSY_TIMEOUT', 10),
            detect_types=sqlite3.PARSE_DECLTYPES
        )
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # WAL lets readers keep a snapshot while a writer commits
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


@contextmanager
def transaction():
    """
    Open a write transaction and yield its cursor.

    BEGIN IMMEDIATE takes the write lock up front so that the reads inside
    the block cannot be invalidated by another writer before commit.
    Any exception rolls back every statement issued in the block.
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('BEGIN IMMEDIATE')
    try:
        yield cursor
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def snapshot():
    """
    Open a read transaction and yield its cursor.

    Every SELECT in the block sees the same committed state. Readers never
    take the write lock, so writers are not blocked while the block runs.
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('BEGIN')
    try:
        yield cursor
    finally:
        db.commit()


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    # Insert seed data
    seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
