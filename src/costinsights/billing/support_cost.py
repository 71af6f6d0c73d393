"""Tiered support surcharge.

AWS Support plans bill a percentage of monthly spend in progressive brackets,
with a flat minimum. The surcharge is computed once for a whole query window.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from costinsights.billing.amounts import metric_amount
from costinsights.billing.models import RawPeriodRecord, SupportAccountProfile

logger = structlog.get_logger()

NET_AMORTIZED_COST = "NetAmortizedCost"


def surcharge_for_total(profile: SupportAccountProfile, total: float) -> float:
    """Apply the profile's minimum and progressive brackets to ``total``."""
    if not profile.tiers:
        logger.warning(
            "support_cost.no_tiers",
            account_type=profile.account_type.value,
        )
        return 0.0

    if total * profile.tiers[0].rate < profile.minimum_cost:
        logger.debug(
            "support_cost.floor_applied",
            account_type=profile.account_type.value,
            total=total,
            minimum_cost=profile.minimum_cost,
        )
        return profile.minimum_cost

    surcharge = 0.0
    for tier in profile.tiers:
        if tier.start > total:
            return surcharge
        if tier.unbounded:
            return surcharge + (total - tier.start) * tier.rate
        if tier.end > total:
            return surcharge + (total - tier.start) * tier.rate
        surcharge += (tier.end - tier.start) * tier.rate

    # Brackets exhausted without an unbounded terminal bracket.
    logger.warning(
        "support_cost.brackets_exhausted",
        account_type=profile.account_type.value,
        total=total,
        surcharge=surcharge,
    )
    return surcharge


def compute_surcharge(
    profile: SupportAccountProfile,
    periods: Sequence[RawPeriodRecord],
    *,
    metric: str = NET_AMORTIZED_COST,
) -> float:
    """Sum ``metric`` across all periods and return the window's surcharge."""
    total = sum(metric_amount(p.total, metric) for p in periods)
    surcharge = surcharge_for_total(profile, total)
    logger.info(
        "support_cost.computed",
        account_type=profile.account_type.value,
        periods=len(periods),
        total=total,
        surcharge=surcharge,
    )
    return surcharge
