"""
Contrib modules for framework and library integrations.

- dependency_injector: StorefrontContainer for DI
- fastapi: router, dependencies, exception handlers and SMTP sender
"""

from storefront_account.contrib.dependency_injector import StorefrontContainer

__all__ = ["StorefrontContainer"]
