"""Error kinds raised by the core.

Every error is raised before a unit of work commits, so a failed operation
never leaves riders, drivers or trips partially updated.  The HTTP layer
translates them to status codes.
"""


class RideHailingError(Exception):
    """Base class for all core failures."""


class NotFound(RideHailingError):
    """Raised when a referenced entity does not exist."""


class RiderNotFound(NotFound):
    pass


class DriverNotFound(NotFound):
    pass


class TripNotFound(NotFound):
    pass


class DriverOffline(RideHailingError):
    """Raised when an offline driver tries to take a trip."""


class Forbidden(RideHailingError):
    """Raised when the acting rider or driver does not own the trip."""


class InvalidState(RideHailingError):
    """Raised when an operation is not legal in the current state."""


class ValidationError(RideHailingError):
    """Raised for malformed input that slipped past the request schemas."""
