from typing import Any, Optional, Tuple
from eventure.core.errors import IncompleteFields, InvalidRange, PaymentInProgress, UnknownDraftField
from eventure.schemas.booking import BookingDraft
from eventure.services.pricing import Quote, quote_for_draft

DATE_TIME_FIELDS = ("pickup_date", "pickup_time", "dropoff_date", "dropoff_time")
LOCATION_FIELDS = ("pickup_location", "dropoff_location")
REQUIRED_FIELDS = DATE_TIME_FIELDS + LOCATION_FIELDS


class BookingFormController:
    """Owns one booking draft and its derived quote.

    The quote is never stored alongside the draft: it is recomputed from the
    current date/time fields the first time it is read after any of them
    changed, so it always matches the latest draft.
    """

    def __init__(self, draft: Optional[BookingDraft] = None, hourly_rate: float = 0.0, submitting: bool = False):
        self.draft = draft or BookingDraft()
        self.hourly_rate = hourly_rate
        self.submitting = submitting
        self._quote_key: Optional[Tuple] = None
        self._quote: Optional[Quote] = None

    def _snapshot(self) -> Tuple:
        return tuple(getattr(self.draft, name) for name in DATE_TIME_FIELDS) + (self.hourly_rate,)

    @property
    def quote(self) -> Quote:
        key = self._snapshot()
        if self._quote is None or key != self._quote_key:
            self._quote = quote_for_draft(self.draft, self.hourly_rate)
            self._quote_key = key
        return self._quote

    def set_field(self, name: str, value: Any) -> BookingDraft:
        if name not in REQUIRED_FIELDS:
            raise UnknownDraftField(name)
        if self.submitting:
            raise PaymentInProgress()

        values = self.draft.model_dump()
        values[name] = value
        self.draft = BookingDraft.model_validate(values)
        return self.draft

    def missing_fields(self) -> list:
        return [name for name in REQUIRED_FIELDS if getattr(self.draft, name) is None]

    def validate(self) -> Quote:
        missing = self.missing_fields()
        if missing:
            raise IncompleteFields(missing)

        quote = self.quote
        if not quote.valid:
            raise InvalidRange()
        if not quote.payable:
            raise InvalidRange("Booking total must be greater than zero")
        return quote
