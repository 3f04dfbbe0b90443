"""Service that runs the conflict gate and commits reservations."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from lodging.domain.bus import EventBus
from lodging.domain.events import (
    BookingRejected,
    ReservationBooked,
    ReservationCancelled,
    ReservationModified,
)
from lodging.domain.models import (
    BookingResult,
    ProposedStay,
    Rejection,
    RejectionKind,
)
from lodging.repos.memory import ReservationRepository
from lodging.services.conflicts import can_commit


class ReservationService:
    """Book, modify and cancel stays against a single reservation store.

    Mutations hold a single writer lock from the conflict check through the
    commit, so concurrent callers cannot both pass the gate for overlapping
    stays.
    """

    def __init__(
        self, repo: ReservationRepository, bus: EventBus, rooms: Iterable[int]
    ) -> None:
        self.repo = repo
        self.bus = bus
        self.rooms = sorted(rooms)
        self._lock = threading.Lock()

    def check(self, stay: ProposedStay, exclude_id: str | None = None) -> Rejection | None:
        """Dry-run the gate without committing or publishing anything."""
        return can_commit(
            self.repo.list_by_room(stay.room_number),
            stay.room_number,
            stay.check_in,
            stay.check_out,
            exclude_id=exclude_id,
            rooms=self.rooms,
        )

    def book(self, stay: ProposedStay) -> BookingResult:
        with self._lock:
            rejection = self.check(stay)
            if rejection is None:
                reservation = self.repo.add(stay)
        if rejection is not None:
            return self._reject(stay, rejection)

        self.bus.publish(
            ReservationBooked(
                reservation_id=reservation.id,
                room_number=reservation.room_number,
                check_in=reservation.check_in,
                check_out=reservation.check_out,
            )
        )
        return BookingResult(reservation=reservation)

    def modify(self, reservation_id: str, stay: ProposedStay) -> BookingResult:
        with self._lock:
            if self.repo.get(reservation_id) is None:
                return BookingResult(
                    rejection=Rejection(
                        kind=RejectionKind.NOT_FOUND,
                        detail="Reservation not found",
                        context={"reservation_id": reservation_id},
                    )
                )

            rejection = self.check(stay, exclude_id=reservation_id)
            if rejection is None:
                reservation = self.repo.update(reservation_id, stay)
        if rejection is not None:
            return self._reject(stay, rejection)

        self.bus.publish(
            ReservationModified(
                reservation_id=reservation.id,
                room_number=reservation.room_number,
                check_in=reservation.check_in,
                check_out=reservation.check_out,
            )
        )
        return BookingResult(reservation=reservation)

    def cancel(self, reservation_id: str) -> bool:
        """Delete a reservation; unknown ids are a no-op returning False."""
        with self._lock:
            reservation = self.repo.get(reservation_id)
            if reservation is None:
                return False
            self.repo.remove(reservation_id)

        self.bus.publish(
            ReservationCancelled(
                reservation_id=reservation_id, room_number=reservation.room_number
            )
        )
        return True

    def _reject(self, stay: ProposedStay, rejection: Rejection) -> BookingResult:
        self.bus.publish(
            BookingRejected(
                kind=rejection.kind,
                room_number=stay.room_number,
                check_in=stay.check_in,
                check_out=stay.check_out,
                conflicting_ids=[
                    c["reservation_id"] for c in rejection.context.get("conflicts", [])
                ],
            )
        )
        return BookingResult(rejection=rejection)
