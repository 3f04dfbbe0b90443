"""Credential checks and the gate that every mutating action passes through.

Credentials are compared in plaintext against the user list. This is an
access gate for a single-household tool, not a security boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

from lodging.domain.models import Privilege, Rejection, RejectionKind, User

logger = logging.getLogger(__name__)


def authenticate(
    users: Iterable[User], username: str, password: str, require_admin: bool = False
) -> User | None:
    """Return the matching user, or ``None`` on mismatch or missing privilege."""
    outcome = check_credentials(users, username, password, require_admin)
    return outcome if isinstance(outcome, User) else None


def check_credentials(
    users: Iterable[User], username: str, password: str, require_admin: bool = False
) -> User | Rejection:
    """Like :func:`authenticate`, but say *why* access was refused."""
    user = next(
        (u for u in users if u.username == username and u.password == password),
        None,
    )
    if user is None:
        logger.warning("authentication failed for %r", username)
        return Rejection(
            kind=RejectionKind.AUTHENTICATION_FAILED,
            detail="Invalid username or password",
        )
    if require_admin and not user.is_admin:
        logger.warning("administrator privileges required, %r is not an admin", username)
        return Rejection(
            kind=RejectionKind.AUTHORIZATION_INSUFFICIENT,
            detail="Administrator privileges required",
        )
    return user


class PendingAction:
    """A captured action waiting for credentials.

    Runs at most once: after it has been invoked or discarded, further
    attempts to run it are refused.
    """

    def __init__(
        self, action: Callable[[], Any], privilege: Privilege, label: str = ""
    ) -> None:
        self._action = action
        self.privilege = privilege
        self.label = label or getattr(action, "__name__", "action")
        self.done = False

    def run(self) -> Any:
        if self.done:
            raise RuntimeError(f"Pending action {self.label!r} already resolved")
        self.done = True
        action, self._action = self._action, None
        return action()

    def discard(self) -> None:
        self.done = True
        self._action = None

    def __repr__(self) -> str:
        return f"PendingAction({self.label!r}, privilege={self.privilege}, done={self.done})"


class GateResult:
    """Outcome of submitting credentials for a pending action."""

    def __init__(
        self, user: User | None = None, value: Any = None, rejection: Rejection | None = None
    ) -> None:
        self.user = user
        self.value = value
        self.rejection = rejection

    @property
    def ok(self) -> bool:
        return self.rejection is None


class MutationGateway:
    """Runs pending actions once the caller proves the required privilege."""

    def __init__(self, users: Callable[[], Iterable[User]]) -> None:
        self._users = users

    def request(
        self, action: Callable[[], Any], privilege: Privilege = Privilege.USER, label: str = ""
    ) -> PendingAction:
        return PendingAction(action, privilege, label)

    def submit(self, pending: PendingAction, username: str, password: str) -> GateResult:
        """Check credentials and, on success, invoke *pending* exactly once.

        On failure the action stays pending and is not invoked; the caller
        may retry with other credentials or cancel it.
        """
        if pending.done:
            raise RuntimeError(f"Pending action {pending.label!r} already resolved")

        outcome = check_credentials(
            self._users(),
            username,
            password,
            require_admin=pending.privilege == Privilege.ADMIN,
        )
        if isinstance(outcome, Rejection):
            return GateResult(rejection=outcome)

        logger.debug("%s authorised %s", outcome.username, pending.label)
        return GateResult(user=outcome, value=pending.run())

    def cancel(self, pending: PendingAction) -> None:
        logger.debug("cancelled %s", pending.label)
        pending.discard()
