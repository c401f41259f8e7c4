"""
SQLAlchemy User Repository.

Persistent storage for the User aggregate. The address book and the
default-address snapshot are stored as JSON columns on the user row, so
a save always writes the whole aggregate in one transaction.

Requirements:
- sqlalchemy[asyncio]
- an async driver (asyncpg, aiosqlite, ...)

Usage:
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

    engine = create_async_engine("postgresql+asyncpg://...")
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    repo = SQLAlchemyUserRepository(session_factory)
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional, Callable

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Integer,
    Boolean,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import declarative_base

from storefront_account.domain.aggregates import User
from storefront_account.domain.errors import PersistenceFailureError
from storefront_account.ports.persistence import UserRepository

logger = logging.getLogger("storefront_account.infrastructure.adapters.sqlalchemy")

Base = declarative_base()

# Type for async session factory
AsyncSessionFactory = Callable[[], AsyncSession]


class UserModel(Base):
    """SQLAlchemy model for storefront users."""

    __tablename__ = "storefront_users"

    user_id = Column(String(64), primary_key=True, nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)

    # Null for guest checkout records
    password_hash = Column(Text, nullable=True)

    full_name = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default="customer")
    provider = Column(String(20), nullable=False, default="local")
    provider_id = Column(Text, nullable=True)
    is_guest = Column(Boolean, nullable=False, default=False)

    # JSON array of addresses / JSON object for the default snapshot
    addresses = Column(Text, nullable=True)
    default_address = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, default=0)

    __table_args__ = {"comment": "Storefront customer accounts with address books."}


class SQLAlchemyUserRepository(UserRepository):
    """
    SQLAlchemy implementation of UserRepository.

    Database errors are raised as PersistenceFailureError after the
    transaction is rolled back.
    """

    def __init__(
        self,
        session_factory: AsyncSessionFactory,
        model_class: type = UserModel,
    ):
        """
        Initialize the repository.

        Args:
            session_factory: Async session factory from async_sessionmaker
            model_class: SQLAlchemy model class (for custom tables)
        """
        self.session_factory = session_factory
        self.model_class = model_class

    @asynccontextmanager
    async def _session_scope(self):
        """Provide a transactional scope for database operations."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"User storage failed: {e}")
                raise PersistenceFailureError() from e
            except Exception:
                await session.rollback()
                raise

    def _apply(self, model: UserModel, user: User) -> UserModel:
        data = user.to_dict()
        model.user_id = user.id
        model.email = user.email
        model.password_hash = user.password_hash
        model.full_name = user.full_name
        model.role = user.role.value
        model.provider = user.provider.value
        model.provider_id = user.provider_id
        model.is_guest = user.is_guest
        model.addresses = json.dumps(data["addresses"])
        model.default_address = (
            json.dumps(data["default_address"]) if data["default_address"] else None
        )
        model.created_at = user.created_at
        model.updated_at = user.updated_at
        model.version = user.version
        return model

    def _from_model(self, model: UserModel) -> User:
        return User.from_dict(
            {
                "user_id": model.user_id,
                "email": model.email,
                "password_hash": model.password_hash,
                "full_name": model.full_name,
                "role": model.role,
                "provider": model.provider,
                "provider_id": model.provider_id,
                "is_guest": model.is_guest or False,
                "addresses": json.loads(model.addresses) if model.addresses else [],
                "default_address": json.loads(model.default_address)
                if model.default_address
                else None,
                "created_at": model.created_at,
                "updated_at": model.updated_at,
                "version": model.version or 0,
            }
        )

    async def get(self, user_id: str) -> Optional[User]:
        async with self._session_scope() as db:
            stmt = select(self.model_class).where(self.model_class.user_id == user_id)
            result = await db.execute(stmt)
            model = result.scalar_one_or_none()
            return self._from_model(model) if model is not None else None

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._session_scope() as db:
            stmt = select(self.model_class).where(self.model_class.email == email)
            result = await db.execute(stmt)
            model = result.scalar_one_or_none()
            return self._from_model(model) if model is not None else None

    async def save(self, user: User) -> None:
        async with self._session_scope() as db:
            stmt = select(self.model_class).where(self.model_class.user_id == user.id)
            result = await db.execute(stmt)
            existing = result.scalar_one_or_none()

            if existing:
                self._apply(existing, user)
            else:
                db.add(self._apply(self.model_class(), user))

        logger.debug(f"Saved user: {user.id}")


__all__ = [
    "Base",
    "UserModel",
    "SQLAlchemyUserRepository",
]
