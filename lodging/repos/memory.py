"""In-memory repositories for reservations and users."""

from __future__ import annotations

from datetime import date

from lodging.domain.models import ProposedStay, Reservation, User


class ReservationRepository:
    """Dict-backed store for Reservation instances, keyed by id.

    The store performs no business validation; callers are expected to run
    the conflict gate before ``add`` or ``update``.
    """

    def __init__(self) -> None:
        self._store: dict[str, Reservation] = {}

    def add(self, stay: ProposedStay) -> Reservation:
        """Assign a fresh identity to *stay*, store it and return the record."""
        reservation = Reservation(**stay.model_dump(exclude={"id"}))
        self._store[reservation.id] = reservation
        return reservation

    def update(self, reservation_id: str, stay: ProposedStay) -> Reservation | None:
        """Replace every field but the id; ``None`` if the id is unknown."""
        if reservation_id not in self._store:
            return None
        reservation = Reservation(id=reservation_id, **stay.model_dump(exclude={"id"}))
        self._store[reservation_id] = reservation
        return reservation

    def remove(self, reservation_id: str) -> bool:
        return self._store.pop(reservation_id, None) is not None

    def get(self, reservation_id: str) -> Reservation | None:
        return self._store.get(reservation_id)

    def list_all(self) -> list[Reservation]:
        return list(self._store.values())

    def list_by_room(self, room_number: int) -> list[Reservation]:
        return [r for r in self._store.values() if r.room_number == room_number]


class UserRepository:
    """Dict-backed store for User instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def find_by_username(self, username: str) -> User | None:
        for user in self._store.values():
            if user.username == username:
                return user
        return None

    def list_all(self) -> list[User]:
        return list(self._store.values())

    def remove(self, user_id: str) -> bool:
        return self._store.pop(user_id, None) is not None


# ---------------------------------------------------------------------------
# Seed data – one sample stay and the bootstrap administrator
# ---------------------------------------------------------------------------


def _seed_reservations(repo: ReservationRepository, today: date) -> None:
    repo.add(
        ProposedStay(
            room_number=1,
            name="Sarah Jenkins",
            address="42 Sunset Blvd, Malibu CA",
            phone="(555) 123-4567",
            check_in=today,
            check_out=today,
            amount_paid="$1,200",
        )
    )


def create_reservation_repository(
    today: date | None = None, seed: bool = True
) -> ReservationRepository:
    """Return a ReservationRepository, pre-loaded with a sample stay on *today*."""
    repo = ReservationRepository()
    if seed:
        _seed_reservations(repo, today or date.today())
    return repo


def create_user_repository() -> UserRepository:
    """Return a UserRepository holding the bootstrap ``admin`` account."""
    repo = UserRepository()
    repo.add(User(id="admin", username="admin", password="admin", is_admin=True))
    return repo
