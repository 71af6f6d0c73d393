"""AWS Support plan pricing profiles.

Profiles are plain configuration data; the surcharge calculator receives one
explicitly instead of looking it up.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from costinsights.billing.models import AccountType, SupportAccountProfile, SupportTier
from costinsights.exceptions import UnknownAccountTierError

DEVELOPER_PROFILE = SupportAccountProfile(
    account_type=AccountType.DEVELOPER,
    minimum_cost=29.00,
    tiers=(SupportTier(rate=0.03, start=0, end=0),),
)

BUSINESS_PROFILE = SupportAccountProfile(
    account_type=AccountType.BUSINESS,
    minimum_cost=100.00,
    tiers=(
        SupportTier(rate=0.10, start=0, end=10_000.00),
        SupportTier(rate=0.07, start=10_000.00, end=80_000.00),
        SupportTier(rate=0.05, start=80_000.00, end=250_000.00),
        SupportTier(rate=0.03, start=250_000.00, end=0),
    ),
)

ENTERPRISE_PROFILE = SupportAccountProfile(
    account_type=AccountType.ENTERPRISE,
    minimum_cost=15_000.00,
    tiers=(
        SupportTier(rate=0.10, start=0, end=150_000.00),
        SupportTier(rate=0.07, start=150_000.00, end=500_000.00),
        SupportTier(rate=0.05, start=500_000.00, end=1_000_000.00),
        SupportTier(rate=0.03, start=1_000_000.00, end=0),
    ),
)

DEFAULT_SUPPORT_PROFILES: Mapping[AccountType, SupportAccountProfile] = MappingProxyType(
    {
        AccountType.DEVELOPER: DEVELOPER_PROFILE,
        AccountType.BUSINESS: BUSINESS_PROFILE,
        AccountType.ENTERPRISE: ENTERPRISE_PROFILE,
    }
)


def resolve_support_profile(
    account_type: str,
    profiles: Mapping[AccountType, SupportAccountProfile] = DEFAULT_SUPPORT_PROFILES,
) -> SupportAccountProfile:
    """Look up the profile for an account tier name (case-insensitive)."""
    try:
        return profiles[AccountType(account_type.upper())]
    except (KeyError, ValueError):
        raise UnknownAccountTierError(
            f"No support profile for account type '{account_type}'",
            extra={"available": [str(t) for t in profiles]},
        ) from None
