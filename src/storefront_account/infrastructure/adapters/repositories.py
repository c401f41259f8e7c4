"""
In-memory User Repository.

Stores users as serialized dicts, so loaded aggregates never share
state with stored ones. Suitable for development and testing.
"""

import logging
from typing import Optional, Dict, Any

from storefront_account.domain.aggregates import User
from storefront_account.ports.persistence import UserRepository

logger = logging.getLogger("storefront_account.infrastructure.adapters.repositories")


class InMemoryUserRepository(UserRepository):
    """
    In-memory implementation of UserRepository.

    Usage:
        repo = InMemoryUserRepository()
        await repo.save(user)
        same = await repo.get_by_email(user.email)
    """

    def __init__(self):
        self._users: Dict[str, Dict[str, Any]] = {}

    async def get(self, user_id: str) -> Optional[User]:
        data = self._users.get(user_id)
        return User.from_dict(data) if data else None

    async def get_by_email(self, email: str) -> Optional[User]:
        for data in self._users.values():
            if data["email"] == email:
                return User.from_dict(data)
        return None

    async def save(self, user: User) -> None:
        self._users[user.id] = user.to_dict()
        logger.debug(f"Saved user: {user.id}")

    def clear(self) -> None:
        """Clear all users (for testing)."""
        self._users.clear()


__all__ = ["InMemoryUserRepository"]
