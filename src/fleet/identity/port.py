"""Identity provider port (abstract interface).

The engine never authenticates anyone itself; it asks the provider who the
current viewer is and scopes reads by that viewer's role.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    ADMIN = "admin"
    SALES = "sales"
    FINANCE = "finance"
    BROKER = "broker"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class User:
    """The signed-in viewer as reported by the identity provider."""

    id: str
    email: str
    role: Role
    display_name: str | None = None

    @property
    def sender_name(self) -> str:
        return self.email or self.display_name or self.role.value.title()


class IdentityProvider(ABC):
    """Abstract identity provider interface."""

    @abstractmethod
    def current_user(self) -> User | None:
        """Return the signed-in user, or None."""
        ...

    @abstractmethod
    def login(self, user: User) -> User:
        """Sign a user in and notify listeners."""
        ...

    @abstractmethod
    def logout(self) -> None:
        """Sign the current user out and notify listeners."""
        ...

    @abstractmethod
    def on_change(self, callback: Callable[[User | None], None]) -> Callable[[], None]:
        """Register a listener for sign-in changes. Returns an unsubscribe function."""
        ...
