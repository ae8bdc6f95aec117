"""Fake identity provider — holds the signed-in user in memory for testing."""

from collections.abc import Callable

from fleet.exceptions import AdapterUnavailable
from fleet.identity.port import IdentityProvider, User


class FakeIdentityProvider(IdentityProvider):
    """Identity provider that signs users in without any external call."""

    def __init__(self) -> None:
        self._user: User | None = None
        self._listeners: list[Callable[[User | None], None]] = []
        self.available = True

    def configure(self, available: bool = True) -> None:
        """Make subsequent calls succeed or fail."""
        self.available = available

    def current_user(self) -> User | None:
        self._check()
        return self._user

    def login(self, user: User) -> User:
        self._check()
        self._user = user
        self._emit()
        return user

    def logout(self) -> None:
        self._check()
        self._user = None
        self._emit()

    def on_change(self, callback: Callable[[User | None], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)

    def _check(self) -> None:
        if not self.available:
            raise AdapterUnavailable("Identity provider unavailable")
