"""
Database seed data.
Initial data population for fresh database installations.
"""

from flask import current_app
from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Staff account
    db.execute('''
        INSERT INTO users (name, email, password_hash, role)
        VALUES (?, ?, ?, 'STAFF')
    ''', (
        'Administrator',
        current_app.config['ADMIN_EMAIL'],
        generate_password_hash(current_app.config['ADMIN_PASSWORD'])
    ))

    # 2. Facility catalog
    facilities_data = [
        ('Chemistry Lab A', 'lab', 'Science Building', 2, 24,
         'Fume hoods, benches and safety equipment for wet chemistry'),
        ('Seminar Room 101', 'classroom', 'Main Building', 1, 40,
         'Projector, whiteboard and movable seating'),
        ('Indoor Court', 'sports', 'Sports Center', 0, 12,
         'Multi-purpose court for basketball and volleyball'),
        ('Meeting Room B', 'meeting', 'Library', 3, 8,
         'Video conferencing and a large display'),
    ]

    for name, category, building, floor, capacity, description in facilities_data:
        db.execute('''
            INSERT INTO facilities (name, category, building, floor, capacity, description)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (name, category, building, floor, capacity, description))
