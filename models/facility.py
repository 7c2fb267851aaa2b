"""
Facility catalog data access functions.
Facilities are reference data: the booking engine only reads them.
"""

from database import get_db

FACILITY_CATEGORIES = ('lab', 'classroom', 'sports', 'meeting')


def get_all_facilities(category: str = None, active_only: bool = True) -> list:
    """
    Get all facilities.

    Args:
        category: Filter by category (optional)
        active_only: If True, only return active facilities

    Returns:
        List of facility dicts ordered by name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM facilities WHERE 1=1'
    params = []

    if category:
        query += ' AND category = ?'
        params.append(category)

    if active_only:
        query += ' AND active = 1'

    query += ' ORDER BY name'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_facility_by_id(facility_id: int) -> dict:
    """
    Get facility by ID.

    Args:
        facility_id: Facility ID

    Returns:
        Facility dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM facilities WHERE id = ?', (facility_id,))
    row = cursor.fetchone()
    return dict(row) if row else None
