"""Service for deciding whether a proposed stay may be committed."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from lodging.domain.dates import as_day
from lodging.domain.models import Rejection, RejectionKind, Reservation


def ranges_overlap(
    a_start: date, a_end: date, b_start: date, b_end: date
) -> bool:
    """Closed-interval intersection on whole days.

    Sharing a single boundary day counts as overlap: a stay that checks out
    on the 5th blocks a check-in on the 5th for the same room.
    """
    return a_start <= b_end and a_end >= b_start


def find_conflicts(
    room_number: int,
    check_in: date,
    check_out: date,
    existing: Iterable[Reservation],
    exclude_id: str | None = None,
) -> list[Reservation]:
    """Return reservations for *room_number* that intersect the given range.

    The reservation identified by *exclude_id* is skipped so an edited stay
    never conflicts with its own previous version.
    """
    check_in, check_out = as_day(check_in), as_day(check_out)
    return [
        r
        for r in existing
        if r.room_number == room_number
        and r.id != exclude_id
        and ranges_overlap(check_in, check_out, r.check_in, r.check_out)
    ]


def can_commit(
    existing: Iterable[Reservation],
    room_number: int,
    check_in: date,
    check_out: date,
    exclude_id: str | None = None,
    rooms: Iterable[int] | None = None,
) -> Rejection | None:
    """Gate a create or update; ``None`` means the stay may be committed.

    Checks, in order: the room belongs to *rooms* (when given), the range is
    not inverted, and no other stay in the same room intersects it.
    """
    check_in, check_out = as_day(check_in), as_day(check_out)
    requested = {
        "room_number": room_number,
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
    }

    if rooms is not None and room_number not in set(rooms):
        return Rejection(
            kind=RejectionKind.UNKNOWN_ROOM,
            detail=f"Room {room_number} does not exist.",
            context=requested,
        )

    if check_out < check_in:
        return Rejection(
            kind=RejectionKind.RANGE_INVALID,
            detail="End date cannot be before start date.",
            context=requested,
        )

    conflicts = find_conflicts(room_number, check_in, check_out, existing, exclude_id)
    if conflicts:
        return Rejection(
            kind=RejectionKind.ROOM_CONFLICT,
            detail=f"Room {room_number} is already booked during these dates.",
            context={
                **requested,
                "conflicts": [
                    {
                        "reservation_id": c.id,
                        "check_in": c.check_in.isoformat(),
                        "check_out": c.check_out.isoformat(),
                    }
                    for c in sorted(conflicts, key=lambda c: c.check_in)
                ],
            },
        )

    return None
