"""Domain events emitted when reservations and users change."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from lodging.domain.models import RejectionKind


class ReservationBooked(BaseModel):
    """Fired when a new reservation is committed to the store."""

    reservation_id: str
    room_number: int
    check_in: date
    check_out: date


class ReservationModified(BaseModel):
    """Fired when an existing reservation is replaced in place."""

    reservation_id: str
    room_number: int
    check_in: date
    check_out: date


class ReservationCancelled(BaseModel):
    reservation_id: str
    room_number: int


class BookingRejected(BaseModel):
    """Fired when the conflict gate refuses a proposed stay."""

    kind: RejectionKind
    room_number: int
    check_in: date
    check_out: date
    conflicting_ids: list[str] = []


class UserAdded(BaseModel):
    user_id: str
    username: str
    is_admin: bool


class UserRemoved(BaseModel):
    user_id: str
    username: str
