"""
Session Store Port.

Defines the per-browser-session key-value storage the credential
workflows keep their state in (the logged-in user and pending OTP
challenges). Values must be JSON-compatible.
"""

from typing import Protocol, Optional, Any


class SessionStore(Protocol):
    """
    Key-value storage scoped to one browser session.

    Nothing stored here is visible from any other session.
    """

    @property
    def session_id(self) -> str:
        """Opaque identifier of the browser session."""
        ...

    async def get(self, key: str) -> Optional[Any]:
        """Get a value, or None when the key is absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Set a value, replacing any previous one."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...

    async def clear(self) -> None:
        """Remove every key of the session (logout)."""
        ...


class SessionBackend(Protocol):
    """
    Factory for session-scoped stores.

    Implementations: in-memory (dev/test), Redis (production).
    """

    def scope(self, session_id: str) -> SessionStore:
        """Return the store for one browser session."""
        ...
