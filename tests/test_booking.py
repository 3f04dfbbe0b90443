"""Tests for the booking service: gate, commit and lifecycle events."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from lodging.domain.bus import EventBus
from lodging.domain.events import (
    BookingRejected,
    ReservationBooked,
    ReservationCancelled,
    ReservationModified,
)
from lodging.domain.handlers import HandlerRegistry
from lodging.domain.models import ProposedStay, RejectionKind
from lodging.repos.memory import ReservationRepository
from lodging.services.booking import ReservationService


@pytest.fixture()
def env():
    """Fresh bus + repo + service for each test, recording every event."""
    bus = EventBus()
    repo = ReservationRepository()
    HandlerRegistry(bus=bus)
    published: list = []
    for event_type in (
        ReservationBooked,
        ReservationModified,
        ReservationCancelled,
        BookingRejected,
    ):
        bus.subscribe(event_type, published.append)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.repo = repo
    e.service = ReservationService(repo, bus, rooms=[1, 2, 3])
    e.published = published
    return e


def _stay(**overrides) -> ProposedStay:
    defaults = dict(
        room_number=1,
        name="Sarah Jenkins",
        check_in=date(2024, 6, 1),
        check_out=date(2024, 6, 5),
        amount_paid="$1,200",
    )
    defaults.update(overrides)
    return ProposedStay(**defaults)


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------


def test_book_commits_and_publishes(env):
    result = env.service.book(_stay())

    assert result.ok
    assert env.repo.get(result.reservation.id) == result.reservation
    assert [type(e) for e in env.published] == [ReservationBooked]
    assert env.published[0].reservation_id == result.reservation.id


def test_conflicting_booking_leaves_store_untouched(env):
    env.service.book(_stay())

    result = env.service.book(
        _stay(name="Late guest", check_in=date(2024, 6, 5), check_out=date(2024, 6, 7))
    )

    assert not result.ok
    assert result.rejection.kind == RejectionKind.ROOM_CONFLICT
    assert result.reservation is None
    assert len(env.repo.list_all()) == 1
    rejected = env.published[-1]
    assert isinstance(rejected, BookingRejected)
    assert rejected.conflicting_ids == [env.repo.list_all()[0].id]


def test_invalid_range_is_rejected(env):
    result = env.service.book(_stay(check_in=date(2024, 6, 10), check_out=date(2024, 6, 5)))

    assert result.rejection.kind == RejectionKind.RANGE_INVALID
    assert env.repo.list_all() == []


def test_unknown_room_is_rejected(env):
    result = env.service.book(_stay(room_number=9))

    assert result.rejection.kind == RejectionKind.UNKNOWN_ROOM


def test_same_dates_other_room_accepted(env):
    env.service.book(_stay(room_number=1))

    assert env.service.book(_stay(room_number=2)).ok


def test_exemption_clears_paid_amount(env):
    result = env.service.book(_stay(amount_paid="$500", is_exempted=True))

    assert result.reservation.amount_paid == ""
    assert result.reservation.is_exempted is True


def test_check_does_not_commit(env):
    assert env.service.check(_stay()) is None
    assert env.repo.list_all() == []
    assert env.published == []


# ---------------------------------------------------------------------------
# Modify / cancel
# ---------------------------------------------------------------------------


def test_modify_overlapping_own_dates(env):
    booked = env.service.book(_stay()).reservation

    result = env.service.modify(
        booked.id, _stay(check_in=date(2024, 6, 2), check_out=date(2024, 6, 6))
    )

    assert result.ok
    assert result.reservation.id == booked.id
    assert env.repo.get(booked.id).check_out == date(2024, 6, 6)
    assert isinstance(env.published[-1], ReservationModified)


def test_modify_unchanged_succeeds(env):
    booked = env.service.book(_stay()).reservation

    assert env.service.modify(booked.id, _stay()).ok


def test_modify_into_conflict_keeps_old_version(env):
    first = env.service.book(_stay()).reservation
    second = env.service.book(
        _stay(name="Second", check_in=date(2024, 6, 10), check_out=date(2024, 6, 12))
    ).reservation

    result = env.service.modify(
        second.id,
        _stay(name="Second", check_in=date(2024, 6, 4), check_out=date(2024, 6, 12)),
    )

    assert result.rejection.kind == RejectionKind.ROOM_CONFLICT
    assert env.repo.get(second.id).check_in == date(2024, 6, 10)
    assert env.repo.get(first.id) == first


def test_modify_unknown_id_is_not_found(env):
    result = env.service.modify("missing", _stay())

    assert result.rejection.kind == RejectionKind.NOT_FOUND
    assert env.repo.list_all() == []


def test_cancel_removes_and_is_idempotent(env):
    booked = env.service.book(_stay()).reservation

    assert env.service.cancel(booked.id) is True
    assert env.service.cancel(booked.id) is False
    assert env.repo.list_all() == []
    assert sum(isinstance(e, ReservationCancelled) for e in env.published) == 1


def test_rebook_after_cancel(env):
    booked = env.service.book(_stay()).reservation
    env.service.cancel(booked.id)

    assert env.service.book(_stay(name="Next guest")).ok


# ---------------------------------------------------------------------------
# Invariant
# ---------------------------------------------------------------------------


def test_no_two_stays_in_a_room_intersect(env):
    """Whatever is attempted, committed stays per room stay disjoint."""
    attempts = [
        (1, date(2024, 6, 1), date(2024, 6, 3)),
        (1, date(2024, 6, 3), date(2024, 6, 4)),
        (1, date(2024, 6, 4), date(2024, 6, 4)),
        (1, date(2024, 6, 2), date(2024, 6, 8)),
        (2, date(2024, 6, 2), date(2024, 6, 8)),
        (2, date(2024, 6, 8), date(2024, 6, 9)),
        (1, date(2024, 6, 5), date(2024, 6, 9)),
    ]
    for room, check_in, check_out in attempts:
        env.service.book(_stay(room_number=room, check_in=check_in, check_out=check_out))

    for room in (1, 2, 3):
        stays = sorted(env.repo.list_by_room(room), key=lambda r: r.check_in)
        for earlier, later in zip(stays, stays[1:]):
            assert earlier.check_out < later.check_in
    assert len(env.repo.list_all()) == 4


class _SlowReservationRepository(ReservationRepository):
    """Widens the gap between reading a room's stays and committing."""

    def list_by_room(self, room_number: int):
        stays = super().list_by_room(room_number)
        time.sleep(0.01)
        return stays


def test_concurrent_bookings_commit_one_stay(env):
    repo = _SlowReservationRepository()
    service = ReservationService(repo, env.bus, rooms=[1, 2, 3])
    barrier = threading.Barrier(8)

    def attempt(_):
        barrier.wait()
        return service.book(_stay())

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(8)))

    assert sum(r.ok for r in results) == 1
    assert {r.rejection.kind for r in results if not r.ok} == {RejectionKind.ROOM_CONFLICT}
    assert len(repo.list_by_room(1)) == 1


def test_concurrent_modifications_stay_disjoint(env):
    repo = _SlowReservationRepository()
    service = ReservationService(repo, env.bus, rooms=[1, 2, 3])
    first = service.book(_stay(check_in=date(2024, 6, 1), check_out=date(2024, 6, 2)))
    second = service.book(_stay(check_in=date(2024, 6, 10), check_out=date(2024, 6, 11)))
    barrier = threading.Barrier(2)
    target = _stay(check_in=date(2024, 6, 5), check_out=date(2024, 6, 6))

    def attempt(reservation_id):
        barrier.wait()
        return service.modify(reservation_id, target)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(
            pool.map(attempt, [first.reservation.id, second.reservation.id])
        )

    assert sum(r.ok for r in results) == 1
    stays = sorted(repo.list_by_room(1), key=lambda r: r.check_in)
    for earlier, later in zip(stays, stays[1:]):
        assert earlier.check_out < later.check_in
