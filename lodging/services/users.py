"""Service for administering the user list."""

from __future__ import annotations

from lodging.domain.bus import EventBus
from lodging.domain.events import UserAdded, UserRemoved
from lodging.domain.models import Rejection, RejectionKind, User
from lodging.repos.memory import UserRepository


class UserService:
    def __init__(self, repo: UserRepository, bus: EventBus) -> None:
        self.repo = repo
        self.bus = bus

    def add_user(
        self, username: str, password: str, is_admin: bool = False
    ) -> User | Rejection:
        """Create a user; blank credentials and duplicate usernames are refused."""
        if not username.strip() or not password.strip():
            return Rejection(
                kind=RejectionKind.INVALID_USER,
                detail="Username and password are required",
            )
        if self.repo.find_by_username(username) is not None:
            return Rejection(
                kind=RejectionKind.INVALID_USER,
                detail="Username already exists",
                context={"username": username},
            )

        user = User(username=username, password=password, is_admin=is_admin)
        self.repo.add(user)
        self.bus.publish(
            UserAdded(user_id=user.id, username=user.username, is_admin=user.is_admin)
        )
        return user

    def delete_user(self, user_id: str) -> Rejection | None:
        """Remove a non-admin user. Unknown ids are a silent no-op."""
        user = self.repo.get(user_id)
        if user is None:
            return None
        if user.is_admin:
            return Rejection(
                kind=RejectionKind.INVALID_USER,
                detail="Administrator accounts cannot be deleted",
                context={"user_id": user_id},
            )
        self.repo.remove(user_id)
        self.bus.publish(UserRemoved(user_id=user.id, username=user.username))
        return None
