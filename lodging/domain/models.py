"""Domain models for the reservation engine."""

from __future__ import annotations

import uuid
from datetime import date
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from lodging.domain.dates import coerce_day

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class RejectionKind(StrEnum):
    RANGE_INVALID = "range_invalid"
    ROOM_CONFLICT = "room_conflict"
    UNKNOWN_ROOM = "unknown_room"
    NOT_FOUND = "not_found"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHORIZATION_INSUFFICIENT = "authorization_insufficient"
    INVALID_USER = "invalid_user"


class Privilege(StrEnum):
    USER = "user"
    ADMIN = "admin"


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class ProposedStay(BaseModel):
    """A booking request as entered by the caller, before it is committed.

    The date range is not validated here; an inverted range is reported by
    the conflict gate as ``range_invalid``.
    """

    room_number: int
    name: str = Field(min_length=1)
    address: str = ""
    phone: str = ""
    check_in: date
    check_out: date
    amount_paid: str = ""
    is_exempted: bool = False

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _coerce_dates(cls, value: object) -> object:
        return coerce_day(value)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class Reservation(ProposedStay):
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=_new_id)

    @model_validator(mode="after")
    def _normalise(self) -> Reservation:
        if self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        # exemption wins over whatever amount was supplied
        if self.is_exempted and self.amount_paid:
            self.amount_paid = ""
        return self

    def covers(self, day: date) -> bool:
        return self.check_in <= day <= self.check_out


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    username: str
    password: str
    is_admin: bool = False


class Rejection(BaseModel):
    """A recoverable failure returned to the caller instead of being raised."""

    kind: RejectionKind
    detail: str
    context: dict = Field(default_factory=dict)


class BookingResult(BaseModel):
    reservation: Reservation | None = None
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


# ---------------------------------------------------------------------------
# Calendar views
# ---------------------------------------------------------------------------


class RoomStatus(BaseModel):
    room_number: int
    reservation: Reservation | None = None

    @computed_field
    @property
    def occupied(self) -> bool:
        return self.reservation is not None


class DayCell(BaseModel):
    day: date
    in_month: bool
    is_today: bool
    reservations: list[Reservation] = Field(default_factory=list)

    @property
    def occupied(self) -> bool:
        return bool(self.reservations)

    @property
    def highlighted(self) -> bool:
        """Occupied days are only highlighted inside the displayed month."""
        return self.occupied and self.in_month

    @property
    def rooms(self) -> list[int]:
        return [r.room_number for r in self.reservations]


class MonthGrid(BaseModel):
    year: int
    month: int
    title: str
    weekday_labels: list[str]
    cells: list[DayCell]

    @property
    def weeks(self) -> list[list[DayCell]]:
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class NewUserRequest(BaseModel):
    username: str
    password: str
    is_admin: bool = False


class UserView(BaseModel):
    id: str
    username: str
    is_admin: bool


class DayCellView(BaseModel):
    day: date
    in_month: bool
    is_today: bool
    occupied: bool
    highlighted: bool
    rooms: list[int]


class MonthGridView(BaseModel):
    year: int
    month: int
    title: str
    weekday_labels: list[str]
    weeks: list[list[DayCellView]]
