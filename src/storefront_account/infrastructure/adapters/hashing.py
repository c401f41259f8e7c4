"""
Password Hasher Adapter.

bcrypt implementation of PasswordHasherPort. bcrypt is CPU-bound, so
both operations run in a worker thread to keep the event loop free.
"""

import asyncio
import logging

import bcrypt

from storefront_account.ports.hashing import PasswordHasherPort

logger = logging.getLogger("storefront_account.infrastructure.adapters.hashing")

BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """
    Hash passwords with bcrypt.

    Args:
        rounds: bcrypt cost factor (4-31)
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def _verify(self, password: str, password_hash: str) -> bool:
        secret = password.encode("utf-8")
        if len(secret) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        return await asyncio.to_thread(self._verify, password, password_hash)


__all__ = ["BcryptPasswordHasher", "BCRYPT_MAX_BYTES"]
