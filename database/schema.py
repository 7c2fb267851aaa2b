"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'booking_status_history',
        'bookings',
        'slots',
        'facilities',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Identities
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'MEMBER'
                CHECK (role IN ('MEMBER', 'STAFF')),
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_login TIMESTAMP
        )
    ''')

    # 2. Facility catalog (reference data)
    db.execute('''
        CREATE TABLE facilities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            category TEXT NOT NULL
                CHECK (category IN ('lab', 'classroom', 'sports', 'meeting')),
            building TEXT,
            floor INTEGER,
            capacity INTEGER DEFAULT 1,
            description TEXT,
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Slots
    db.execute('''
        CREATE TABLE slots (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            facility_id INTEGER NOT NULL REFERENCES facilities(id),
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'AVAILABLE'
                CHECK (status IN ('AVAILABLE', 'BOOKED')),
            updated_at TEXT,
            CHECK (start_time < end_time),
            UNIQUE (facility_id, start_time)
        )
    ''')

    # 4. Bookings (never deleted)
    db.execute('''
        CREATE TABLE bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id),
            facility_id INTEGER NOT NULL REFERENCES facilities(id),
            slot_id INTEGER NOT NULL REFERENCES slots(id),
            purpose TEXT,
            status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'APPROVED', 'REJECTED', 'CANCELED', 'CHECKED_IN')),
            checkin_token TEXT UNIQUE,
            created_at TEXT NOT NULL,
            reviewed_at TEXT,
            reviewed_by INTEGER REFERENCES users(id),
            approved_at TEXT,
            cancelled_at TEXT,
            checked_in_at TEXT,
            checked_in_by INTEGER REFERENCES users(id),
            updated_at TEXT
        )
    ''')

    # 5. Transition history
    db.execute('''
        CREATE TABLE booking_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            booking_id INTEGER NOT NULL REFERENCES bookings(id),
            from_status TEXT,
            to_status TEXT NOT NULL,
            changed_by INTEGER REFERENCES users(id),
            notes TEXT,
            created_at TEXT NOT NULL
        )
    ''')


def create_indexes(db):
    """Create database indexes."""
    db.execute('CREATE INDEX IF NOT EXISTS idx_slots_facility_start ON slots(facility_id, start_time)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_bookings_user ON bookings(user_id)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_bookings_status_created ON bookings(status, created_at)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_bookings_facility ON bookings(facility_id)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_history_booking ON booking_status_history(booking_id)')

    # At most one live booking per slot
    db.execute('''
        CREATE UNIQUE INDEX IF NOT EXISTS idx_bookings_live_slot
        ON bookings(slot_id)
        WHERE status NOT IN ('REJECTED', 'CANCELED')
    ''')
