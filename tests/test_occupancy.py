"""Tests for the per-day occupancy queries."""

from datetime import date, datetime

from lodging.domain.models import Reservation
from lodging.services.occupancy import occupants_on_day, room_statuses


def _make_reservation(room: int, check_in: date, check_out: date) -> Reservation:
    return Reservation(
        room_number=room, name=f"Guest {room}", check_in=check_in, check_out=check_out
    )


def test_day_inside_stay_returns_it():
    booking = _make_reservation(1, date(2024, 6, 1), date(2024, 6, 5))

    occupants = occupants_on_day(date(2024, 6, 3), [booking])

    assert occupants == [booking]


def test_day_after_checkout_returns_nothing():
    booking = _make_reservation(1, date(2024, 6, 1), date(2024, 6, 5))

    assert occupants_on_day(date(2024, 6, 6), [booking]) == []


def test_both_boundary_days_are_occupied():
    booking = _make_reservation(1, date(2024, 6, 1), date(2024, 6, 5))

    assert occupants_on_day(date(2024, 6, 1), [booking]) == [booking]
    assert occupants_on_day(date(2024, 6, 5), [booking]) == [booking]


def test_results_are_ordered_by_room():
    r3 = _make_reservation(3, date(2024, 6, 1), date(2024, 6, 2))
    r1 = _make_reservation(1, date(2024, 6, 2), date(2024, 6, 4))
    r2 = _make_reservation(2, date(2024, 5, 30), date(2024, 6, 2))

    occupants = occupants_on_day(date(2024, 6, 2), [r3, r1, r2])

    assert [r.room_number for r in occupants] == [1, 2, 3]


def test_datetime_query_is_normalised_to_day():
    booking = _make_reservation(1, date(2024, 6, 1), date(2024, 6, 5))

    assert occupants_on_day(datetime(2024, 6, 5, 18, 30), [booking]) == [booking]


def test_room_statuses_lists_every_room():
    booking = _make_reservation(2, date(2024, 6, 1), date(2024, 6, 5))

    statuses = room_statuses(date(2024, 6, 3), [booking], rooms=[3, 1, 2])

    assert [s.room_number for s in statuses] == [1, 2, 3]
    assert [s.occupied for s in statuses] == [False, True, False]
    assert statuses[1].reservation == booking
