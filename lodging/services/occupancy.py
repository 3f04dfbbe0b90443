"""Service for answering which reservations touch a given day."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from lodging.domain.dates import as_day
from lodging.domain.models import Reservation, RoomStatus


def occupants_on_day(day: date, reservations: Iterable[Reservation]) -> list[Reservation]:
    """Return every reservation whose inclusive range contains *day*, by room."""
    day = as_day(day)
    return sorted(
        (r for r in reservations if r.covers(day)),
        key=lambda r: (r.room_number, r.check_in),
    )


def room_statuses(
    day: date, reservations: Iterable[Reservation], rooms: Iterable[int]
) -> list[RoomStatus]:
    """One entry per room for *day*: the occupying reservation, or vacant."""
    by_room: dict[int, Reservation] = {}
    for reservation in occupants_on_day(day, reservations):
        by_room.setdefault(reservation.room_number, reservation)
    return [
        RoomStatus(room_number=room, reservation=by_room.get(room))
        for room in sorted(rooms)
    ]
