"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from lodging.domain.bus import EventBus
from lodging.domain.events import (
    BookingRejected,
    ReservationBooked,
    ReservationCancelled,
    ReservationModified,
    UserAdded,
    UserRemoved,
)
from lodging.domain.models import RejectionKind

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires lifecycle-event handlers to the bus.

    Log records carry room numbers, dates and ids only; guest names, phone
    numbers and addresses never reach the log.
    """

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ReservationBooked, self.on_reservation_booked)
        self.bus.subscribe(ReservationModified, self.on_reservation_modified)
        self.bus.subscribe(ReservationCancelled, self.on_reservation_cancelled)
        self.bus.subscribe(BookingRejected, self.on_booking_rejected)
        self.bus.subscribe(UserAdded, self.on_user_added)
        self.bus.subscribe(UserRemoved, self.on_user_removed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_reservation_booked(self, event: ReservationBooked) -> None:
        logger.info(
            "reservation booked",
            extra={
                "extra_fields": {
                    "reservation_id": event.reservation_id,
                    "room_number": event.room_number,
                    "check_in": event.check_in.isoformat(),
                    "check_out": event.check_out.isoformat(),
                }
            },
        )

    def on_reservation_modified(self, event: ReservationModified) -> None:
        logger.info(
            "reservation modified",
            extra={
                "extra_fields": {
                    "reservation_id": event.reservation_id,
                    "room_number": event.room_number,
                    "check_in": event.check_in.isoformat(),
                    "check_out": event.check_out.isoformat(),
                }
            },
        )

    def on_reservation_cancelled(self, event: ReservationCancelled) -> None:
        logger.info(
            "reservation cancelled",
            extra={
                "extra_fields": {
                    "reservation_id": event.reservation_id,
                    "room_number": event.room_number,
                }
            },
        )

    def on_booking_rejected(self, event: BookingRejected) -> None:
        fields = {
            "kind": str(event.kind),
            "room_number": event.room_number,
            "requested_check_in": event.check_in.isoformat(),
            "requested_check_out": event.check_out.isoformat(),
        }
        if event.kind == RejectionKind.ROOM_CONFLICT:
            fields["conflicting_ids"] = event.conflicting_ids
            logger.warning("room conflict detected", extra={"extra_fields": fields})
        else:
            logger.info("booking rejected", extra={"extra_fields": fields})

    def on_user_added(self, event: UserAdded) -> None:
        logger.info(
            "user added: %s%s", event.username, " (admin)" if event.is_admin else ""
        )

    def on_user_removed(self, event: UserRemoved) -> None:
        logger.info("user removed: %s", event.username)
