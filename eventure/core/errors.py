"""Booking flow errors.

Every error carries the HTTP status it maps to and a stable machine code.
The API layer turns them into ``{"detail": ..., "error": ...}`` responses.
"""
from typing import Iterable, Optional


class BookingError(Exception):
    status_code = 400
    code = "booking_error"
    message = "Booking request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class IncompleteFields(BookingError):
    status_code = 422
    code = "incomplete_fields"

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Please fill in required fields: {', '.join(self.missing)}")


class InvalidRange(BookingError):
    status_code = 422
    code = "invalid_range"
    message = "Drop-off must be after pickup"


class UnknownDraftField(BookingError):
    status_code = 422
    code = "unknown_field"

    def __init__(self, name: str):
        self.field = name
        super().__init__(f"Unknown booking field: {name}")


class DraftNotFound(BookingError):
    status_code = 404
    code = "draft_not_found"
    message = "Booking draft not found or expired"


class ScooterUnavailable(BookingError):
    status_code = 409
    code = "scooter_unavailable"
    message = "Scooter is not available for booking"


class PaymentInProgress(BookingError):
    status_code = 409
    code = "payment_in_progress"
    message = "A payment for this booking is already in progress"


class PaymentInitFailed(BookingError):
    status_code = 502
    code = "payment_init_failed"
    message = "Could not start the payment. Please try again."


class PaymentSessionNotFound(BookingError):
    status_code = 404
    code = "payment_session_not_found"
    message = "Payment session not found or expired"


class PaymentAlreadyResolved(BookingError):
    status_code = 409
    code = "payment_already_resolved"
    message = "Payment session has already been resolved"


class SoldOut(BookingError):
    status_code = 409
    code = "sold_out"
    message = "No units of this scooter are left"


class BookingPersistenceFailed(BookingError):
    status_code = 500
    code = "booking_persistence_failed"
    message = "Booking failed. Please try again later."


class AvailabilityUpdateFailed(BookingError):
    """Local listing could not reflect a confirmed booking. Logged, never raised to clients."""
    status_code = 500
    code = "availability_update_failed"
    message = "Could not update local availability"


class CatalogFetchFailed(BookingError):
    status_code = 503
    code = "catalog_fetch_failed"
    message = "Failed to load scooters"


class PaymentRefConflict(BookingError):
    status_code = 409
    code = "payment_ref_conflict"
    message = "This payment is already attached to another booking"
