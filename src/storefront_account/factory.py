"""
Factory functions for container creation.

Reads configuration from the environment and swaps the in-memory
default adapters for production ones when their settings are present:
``redis.url`` for sessions, ``database.url`` for users and ``mail.host``
for SMTP delivery.
"""

import os
import logging
from typing import Any, Mapping, Optional

from dependency_injector import providers

from storefront_account.contrib.dependency_injector import StorefrontContainer

logger = logging.getLogger("storefront_account.factory")

# (environment variable, config path, converter)
_ENV_OPTIONS = (
    ("SMTP_HOST", ("mail", "host"), str),
    ("SMTP_PORT", ("mail", "port"), int),
    ("SMTP_USER", ("mail", "user"), str),
    ("SMTP_PASS", ("mail", "password"), str),
    ("SMTP_FROM", ("mail", "default_from"), str),
    ("SMTP_STARTTLS", ("mail", "use_starttls"), lambda v: v.lower() == "true"),
    ("STOREFRONT_APP_NAME", ("mail", "app_name"), str),
    ("STOREFRONT_OTP_TTL_SECONDS", ("otp", "ttl_seconds"), int),
    ("STOREFRONT_OTP_CODE_LENGTH", ("otp", "code_length"), int),
    ("STOREFRONT_PASSWORD_MIN_LENGTH", ("password", "min_length"), int),
    ("STOREFRONT_BCRYPT_ROUNDS", ("password", "bcrypt_rounds"), int),
    ("STOREFRONT_SESSION_COOKIE", ("session", "cookie_name"), str),
    ("STOREFRONT_SESSION_TTL_SECONDS", ("session", "ttl_seconds"), int),
    ("STOREFRONT_REDIS_URL", ("redis", "url"), str),
    ("STOREFRONT_DATABASE_URL", ("database", "url"), str),
)


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """
    Build a container config dict from environment variables.

    Only variables that are set appear in the result, so the container
    defaults apply to everything else.
    """
    environ = os.environ if environ is None else environ
    config: dict[str, Any] = {}
    for variable, (section, key), convert in _ENV_OPTIONS:
        value = environ.get(variable)
        if value is None or value == "":
            continue
        config.setdefault(section, {})[key] = convert(value)
    return config


def _override_adapters(container: StorefrontContainer) -> None:
    redis_url = container.config.redis.url()
    if redis_url:
        from storefront_account.infrastructure.adapters.session import (
            RedisSessionBackend,
        )

        container.session_backend.override(
            providers.Singleton(
                RedisSessionBackend.from_url,
                redis_url,
                ttl_seconds=container.config.session.ttl_seconds(),
            )
        )
        logger.info("Using Redis session backend")

    database_url = container.config.database.url()
    if database_url:
        from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

        from storefront_account.infrastructure.adapters.sqlalchemy_storage import (
            SQLAlchemyUserRepository,
        )

        engine = create_async_engine(database_url)
        container.user_repo.override(
            providers.Singleton(
                SQLAlchemyUserRepository,
                session_factory=async_sessionmaker(engine, expire_on_commit=False),
            )
        )
        logger.info("Using SQLAlchemy user repository")

    mail_host = container.config.mail.host()
    if mail_host:
        from storefront_account.contrib.fastapi.mail import AsyncSMTPEmailSender

        container.email_sender.override(
            providers.Singleton(
                AsyncSMTPEmailSender,
                host=mail_host,
                port=container.config.mail.port(),
                user=container.config.mail.user(),
                password=container.config.mail.password(),
                use_starttls=container.config.mail.use_starttls(),
                default_from=container.config.mail.default_from(),
                from_name=container.config.mail.app_name(),
            )
        )
        logger.info(f"Using SMTP email sender via {mail_host}")


def create_container(
    config: Optional[dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StorefrontContainer:
    """
    Create a configured container.

    Args:
        config: Explicit config; read from the environment when omitted
        environ: Environment mapping used instead of ``os.environ``
    """
    container = StorefrontContainer()
    container.config.from_dict(config if config is not None else config_from_env(environ))
    _override_adapters(container)
    return container
