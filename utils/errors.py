"""
Booking engine error taxonomy.

Every rejected operation raises one of these. Each carries the HTTP status
and a stable code so the API layer can answer without inspecting messages.
"""


class BookingError(Exception):
    """Base class for caller-visible booking failures."""

    status_code = 400
    code = 'BookingError'

    def __init__(self, message: str = None, **context):
        self.message = message or self.__class__.__doc__.strip().splitlines()[0]
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {'code': self.code}
        payload.update(self.context)
        return payload


class NotFoundError(BookingError):
    """The referenced resource does not exist."""

    status_code = 404
    code = 'NotFound'


class ValidationError(BookingError):
    """The request is malformed."""

    status_code = 422
    code = 'Validation'


class ConflictError(BookingError):
    """The resource is contended or already taken."""

    status_code = 409
    code = 'Conflict'


class SlotUnavailableError(ConflictError):
    """The slot is no longer available."""

    code = 'SlotUnavailable'


class InvalidTransitionError(BookingError):
    """The booking cannot move to the requested status."""

    status_code = 409
    code = 'InvalidTransition'

    def __init__(self, current: str, target: str, message: str = None):
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot move booking from {current} to {target}",
            current_status=current,
            target_status=target
        )


class AlreadyCheckedInError(InvalidTransitionError):
    """The booking has already been checked in."""

    code = 'AlreadyCheckedIn'

    def __init__(self, booking_id: int = None):
        self.booking_id = booking_id
        super().__init__('CHECKED_IN', 'CHECKED_IN', message='Booking has already been checked in')


class ForbiddenError(BookingError):
    """The caller is not allowed to perform this action."""

    status_code = 403
    code = 'Forbidden'


class TooLateError(BookingError):
    """The slot has already started."""

    status_code = 410
    code = 'TooLate'


class ExpiredError(BookingError):
    """The check-in window has closed."""

    status_code = 410
    code = 'Expired'


class TooEarlyError(BookingError):
    """The check-in window has not opened yet."""

    status_code = 425
    code = 'TooEarly'


class StorageUnavailableError(BookingError):
    """The booking store is temporarily unavailable."""

    status_code = 503
    code = 'StorageUnavailable'
