"""
User Repository Port.

Defines the interface for loading and saving the User aggregate.
The address book and the default-address snapshot are part of the
aggregate and are always saved together with it.
"""

from typing import Protocol, Optional

from storefront_account.domain.aggregates import User


class UserRepository(Protocol):
    """
    Repository for users.

    Implementations raise PersistenceFailureError when the backing
    store fails.
    """

    async def get(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        ...

    async def save(self, user: User) -> None:
        """Insert or replace the whole user."""
        ...
