"""FastAPI application: entry point for the reservation manager."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from lodging.config import LodgingSettings, configure_logging
from lodging.domain.bus import EventBus
from lodging.domain.dates import parse_iso_date
from lodging.domain.handlers import HandlerRegistry
from lodging.domain.models import (
    DayCellView,
    MonthGridView,
    NewUserRequest,
    Privilege,
    ProposedStay,
    Rejection,
    RejectionKind,
    Reservation,
    RoomStatus,
    UserView,
)
from lodging.repos.memory import create_reservation_repository, create_user_repository
from lodging.services.booking import ReservationService
from lodging.services.gateway import MutationGateway
from lodging.services.months import calendar_view
from lodging.services.occupancy import occupants_on_day, room_statuses
from lodging.services.users import UserService

settings = LodgingSettings.from_env()
configure_logging(settings)

app = FastAPI(title="Holiday Home Reservations")
security = HTTPBasic(auto_error=False)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
reservation_repo = create_reservation_repository(seed=settings.seed_sample_data)
user_repo = create_user_repository()

handler_registry = HandlerRegistry(bus=event_bus)
reservation_service = ReservationService(reservation_repo, event_bus, settings.rooms)
user_service = UserService(user_repo, event_bus)
gateway = MutationGateway(user_repo.list_all)

_STATUS_CODES = {
    RejectionKind.RANGE_INVALID: 422,
    RejectionKind.UNKNOWN_ROOM: 422,
    RejectionKind.INVALID_USER: 422,
    RejectionKind.ROOM_CONFLICT: 409,
    RejectionKind.NOT_FOUND: 404,
    RejectionKind.AUTHENTICATION_FAILED: 401,
    RejectionKind.AUTHORIZATION_INSUFFICIENT: 403,
}


def _http_error(rejection: Rejection) -> HTTPException:
    headers = None
    if rejection.kind == RejectionKind.AUTHENTICATION_FAILED:
        headers = {"WWW-Authenticate": "Basic"}
    return HTTPException(
        status_code=_STATUS_CODES[rejection.kind],
        detail=rejection.model_dump(mode="json"),
        headers=headers,
    )


def _gated(
    action: Callable[[], Any],
    privilege: Privilege,
    credentials: HTTPBasicCredentials | None,
    label: str,
) -> Any:
    """Run *action* through the mutation gateway with the request's credentials."""
    pending = gateway.request(action, privilege, label)
    if credentials is None:
        gateway.cancel(pending)
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )

    result = gateway.submit(pending, credentials.username, credentials.password)
    if not result.ok:
        gateway.cancel(pending)
        raise _http_error(result.rejection)
    return result.value


def _committed(result) -> Reservation:
    if not result.ok:
        raise _http_error(result.rejection)
    return result.reservation


def _day_param(raw: str) -> date:
    try:
        return parse_iso_date(raw)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# ── Reservations ──────────────────────────────────────────────────────


@app.get("/reservations", response_model=list[Reservation])
def list_reservations() -> list[Reservation]:
    """Return all reservations ordered by room and check-in."""
    return sorted(
        reservation_repo.list_all(), key=lambda r: (r.room_number, r.check_in)
    )


@app.get("/reservations/{reservation_id}", response_model=Reservation)
def get_reservation(reservation_id: str) -> Reservation:
    reservation = reservation_repo.get(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


@app.post("/reservations/check")
def check_reservation(stay: ProposedStay, exclude_id: str | None = None) -> dict:
    """Dry-run the conflict gate for a proposed stay."""
    rejection = reservation_service.check(stay, exclude_id=exclude_id)
    return {
        "ok": rejection is None,
        "rejection": rejection.model_dump(mode="json") if rejection else None,
    }


@app.post("/reservations", response_model=Reservation, status_code=201)
def book_reservation(
    stay: ProposedStay,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> Reservation:
    result = _gated(
        lambda: reservation_service.book(stay), Privilege.USER, credentials, "book"
    )
    return _committed(result)


@app.put("/reservations/{reservation_id}", response_model=Reservation)
def modify_reservation(
    reservation_id: str,
    stay: ProposedStay,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> Reservation:
    result = _gated(
        lambda: reservation_service.modify(reservation_id, stay),
        Privilege.USER,
        credentials,
        "modify",
    )
    return _committed(result)


@app.delete("/reservations/{reservation_id}")
def delete_reservation(
    reservation_id: str,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> dict:
    """Delete a reservation. Unknown ids succeed with ``deleted: false``."""
    deleted = _gated(
        lambda: reservation_service.cancel(reservation_id),
        Privilege.USER,
        credentials,
        "delete",
    )
    return {"reservation_id": reservation_id, "deleted": deleted}


# ── Occupancy & calendar ──────────────────────────────────────────────


@app.get("/occupancy/{day}", response_model=list[Reservation])
def occupancy(day: str) -> list[Reservation]:
    """Reservations covering *day* across all rooms, ordered by room."""
    return occupants_on_day(_day_param(day), reservation_repo.list_all())


@app.get("/days/{day}", response_model=list[RoomStatus])
def day_detail(day: str) -> list[RoomStatus]:
    """Occupied/vacant status of every room on *day*."""
    return room_statuses(_day_param(day), reservation_repo.list_all(), settings.rooms)


@app.get("/calendar", response_model=list[MonthGridView])
def calendar(
    anchor: str | None = None,
    months: int | None = Query(default=None, ge=1, le=24),
) -> list[MonthGridView]:
    """Month grids starting at *anchor*'s month (defaults: today, configured count)."""
    today = date.today()
    grids = calendar_view(
        _day_param(anchor) if anchor is not None else today,
        reservation_repo.list_all(),
        today,
        months=months or settings.months_displayed,
        week_start=settings.week_start,
    )
    return [
        MonthGridView(
            year=grid.year,
            month=grid.month,
            title=grid.title,
            weekday_labels=grid.weekday_labels,
            weeks=[
                [
                    DayCellView(
                        day=cell.day,
                        in_month=cell.in_month,
                        is_today=cell.is_today,
                        occupied=cell.occupied,
                        highlighted=cell.highlighted,
                        rooms=cell.rooms,
                    )
                    for cell in week
                ]
                for week in grid.weeks
            ],
        )
        for grid in grids
    ]


# ── Users ─────────────────────────────────────────────────────────────


def _user_view(user) -> UserView:
    return UserView(id=user.id, username=user.username, is_admin=user.is_admin)


@app.get("/users", response_model=list[UserView])
def list_users(
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> list[UserView]:
    users = _gated(user_repo.list_all, Privilege.ADMIN, credentials, "list users")
    return [_user_view(u) for u in users]


@app.post("/users", response_model=UserView, status_code=201)
def create_user(
    payload: NewUserRequest,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> UserView:
    outcome = _gated(
        lambda: user_service.add_user(
            payload.username, payload.password, payload.is_admin
        ),
        Privilege.ADMIN,
        credentials,
        "create user",
    )
    if isinstance(outcome, Rejection):
        raise _http_error(outcome)
    return _user_view(outcome)


@app.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> dict:
    rejection = _gated(
        lambda: user_service.delete_user(user_id),
        Privilege.ADMIN,
        credentials,
        "delete user",
    )
    if rejection is not None:
        raise _http_error(rejection)
    return {"user_id": user_id, "status": "deleted"}
