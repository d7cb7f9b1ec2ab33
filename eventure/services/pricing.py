from dataclasses import dataclass
from eventure.schemas.booking import BookingDraft
from eventure.schemas.quote import QuoteResponse
from eventure.services.timerange import TimeRange, compute_time_range


@dataclass(frozen=True)
class Quote:
    total_hours: float
    total_amount: float
    hourly_rate: float
    valid: bool

    @property
    def payable(self) -> bool:
        return self.valid and self.total_amount > 0

    @property
    def display_amount(self) -> str:
        return f"{self.total_amount:.2f}"

    def to_response(self) -> QuoteResponse:
        return QuoteResponse(
            total_hours=self.total_hours,
            total_amount=self.total_amount,
            total_amount_display=self.display_amount,
            hourly_rate=self.hourly_rate,
            valid=self.valid,
            payable=self.payable,
        )


def calculate_quote(time_range: TimeRange, hourly_rate: float) -> Quote:
    if hourly_rate < 0:
        raise ValueError("hourly_rate must be non-negative")

    if not time_range.valid:
        return Quote(total_hours=0.0, total_amount=0.0, hourly_rate=hourly_rate, valid=False)

    return Quote(
        total_hours=time_range.total_hours,
        total_amount=time_range.total_hours * hourly_rate,
        hourly_rate=hourly_rate,
        valid=True,
    )


def quote_for_draft(draft: BookingDraft, hourly_rate: float) -> Quote:
    time_range = compute_time_range(
        draft.pickup_date,
        draft.pickup_time,
        draft.dropoff_date,
        draft.dropoff_time,
    )
    return calculate_quote(time_range, hourly_rate)


def to_minor_units(amount: float) -> int:
    """Rupees to paise, rounded to the nearest paisa."""
    return int(round(amount * 100))
