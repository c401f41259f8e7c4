"""
Password Hasher Port.

One-way hashing of passwords; digests can be verified but never
reversed.
"""

from typing import Protocol


class PasswordHasherPort(Protocol):
    async def hash(self, password: str) -> str:
        """Return a salted digest of the password."""
        ...

    async def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a digest."""
        ...
