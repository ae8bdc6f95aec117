"""Identity provider factory.

Uses the fake provider by default; IDENTITY_PROVIDER selects another one.
"""

import os

from fleet.identity.port import IdentityProvider, Role, User

__all__ = ["IdentityProvider", "Role", "User", "get_identity_provider", "reset_identity_provider", "set_identity_provider"]

_provider_instance: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """Return the configured identity provider (singleton)."""
    global _provider_instance
    if _provider_instance is None:
        adapter = os.environ.get("IDENTITY_PROVIDER", "fake")
        if adapter == "fake":
            from fleet.identity.fake_provider import FakeIdentityProvider

            _provider_instance = FakeIdentityProvider()
        else:
            raise ValueError(f"Unknown identity provider: {adapter}")
    return _provider_instance


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the active identity provider (useful for tests)."""
    global _provider_instance
    _provider_instance = provider


def reset_identity_provider() -> None:
    """Reset the identity provider singleton (useful for testing)."""
    global _provider_instance
    _provider_instance = None
