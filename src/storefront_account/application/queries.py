"""
Account queries.

Queries read state and never modify it.
"""

from dataclasses import dataclass

from storefront_account.ddd import Query
from storefront_account.domain.value_objects import OTPPurpose


@dataclass(kw_only=True)
class GetAccountProfile(Query):
    """Account details with the address book and the default address."""

    user_id: str


@dataclass(kw_only=True)
class GetPendingChallenge(Query):
    """
    Whether a challenge of a purpose waits in the session.

    Used when a verify page is reloaded.
    """

    session_id: str
    purpose: OTPPurpose
