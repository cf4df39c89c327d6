"""
Booking date overlap detection.

Stays are half-open ranges [check_in, check_out). A new check-in on the
day another guest checks out (or the reverse) is a same-day turnover and
is never a conflict.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence

from guestform.domain.dates import normalize_date, today_in_manila

CANCELED = "canceled"


class BookingLike(Protocol):
    id: str
    check_in_date: str
    check_out_date: str
    status: Optional[str]


@dataclass
class OverlapResult:
    overlap: bool
    conflicts: list = field(default_factory=list)


@dataclass(frozen=True)
class BookedDateRange:
    id: str
    check_in_date: str
    check_out_date: str


def _status_value(booking: BookingLike) -> Optional[str]:
    # Enum members and plain strings both end up as "booked"/"canceled"
    status = getattr(booking, "status", None)
    return getattr(status, "value", status)


def is_canceled(booking: BookingLike) -> bool:
    return _status_value(booking) == CANCELED


def ranges_overlap(new_in: str, new_out: str, existing_in: str, existing_out: str) -> bool:
    """Compare four normalized YYYY-MM-DD strings."""
    touching = new_in < existing_out and new_out > existing_in
    turnover = new_in == existing_out or new_out == existing_in
    return touching and not turnover


def has_overlap(
    new_check_in: str,
    new_check_out: str,
    existing_bookings: Iterable[BookingLike],
    exclude_id: Optional[str] = None,
) -> OverlapResult:
    """
    Find active bookings that share at least one night with the candidate stay.

    exclude_id skips the booking being edited so it can't conflict with itself.
    """
    new_in = normalize_date(new_check_in)
    new_out = normalize_date(new_check_out)

    conflicts = []
    for booking in existing_bookings:
        if exclude_id is not None and booking.id == exclude_id:
            continue
        if is_canceled(booking):
            continue

        existing_in = normalize_date(booking.check_in_date)
        existing_out = normalize_date(booking.check_out_date)

        if ranges_overlap(new_in, new_out, existing_in, existing_out):
            conflicts.append(booking)

    return OverlapResult(overlap=bool(conflicts), conflicts=conflicts)


def active_booked_ranges(
    bookings: Iterable[BookingLike], today: Optional[str] = None
) -> Sequence[BookedDateRange]:
    """
    Date ranges the calendar widget should show as unavailable.

    Drops canceled bookings and bookings that checked out before today
    (Asia/Manila unless given). Dates come back normalized, sorted by check-in.
    """
    today = normalize_date(today) if today else today_in_manila()

    ranges = []
    for booking in bookings:
        if is_canceled(booking):
            continue
        check_out = normalize_date(booking.check_out_date)
        if check_out < today:
            continue
        ranges.append(
            BookedDateRange(
                id=booking.id,
                check_in_date=normalize_date(booking.check_in_date),
                check_out_date=check_out,
            )
        )

    return sorted(ranges, key=lambda r: r.check_in_date)
