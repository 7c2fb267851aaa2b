"""Reports model module."""
from models.reports.booking_summary import summarize_bookings

__all__ = [
    'summarize_bookings'
]
