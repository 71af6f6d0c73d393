"""Cost aggregation from raw Cost Explorer periods to date series and entities.

Three views are built from the same kind of input:

* a plain date series, optionally blended with the support surcharge;
* one date series per group key (products or linked accounts);
* a two-period split per group key for before/after comparisons.

Every function here is a pure transformation of its arguments. Non-positive
amounts are never emitted in a date series: they mean "no cost to report".
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from costinsights.billing.amounts import metric_amount
from costinsights.billing.key_index import build_key_index
from costinsights.billing.models import (
    DateAggregation,
    EntityAggregation,
    KeyedCostSeries,
    RawPeriodRecord,
    SupportAccountProfile,
)
from costinsights.billing.statistics import change_of_entity
from costinsights.billing.support_cost import NET_AMORTIZED_COST, compute_surcharge

logger = structlog.get_logger()

UNBLENDED_COST = "UnblendedCost"


def aggregate_date_series(
    periods: Sequence[RawPeriodRecord],
    *,
    support_cost_enabled: bool = False,
    profile: SupportAccountProfile | None = None,
    metric: str = UNBLENDED_COST,
    support_cost_metric: str = NET_AMORTIZED_COST,
    round_amounts: bool = False,
) -> list[DateAggregation]:
    """Build the daily cost series for a window.

    When the support surcharge is enabled it is computed once for the whole
    window and spread evenly across every period, regardless of each day's
    share of the spend.
    """
    surcharge = 0.0
    if support_cost_enabled:
        if profile is None:
            logger.warning("support_cost.profile_missing", periods=len(periods))
        elif periods:
            surcharge = compute_surcharge(profile, periods, metric=support_cost_metric)
    per_period = surcharge / len(periods) if periods else 0.0

    series: list[DateAggregation] = []
    for period in periods:
        amount = metric_amount(period.total, metric, round_amount=round_amounts) + per_period
        if amount > 0:
            series.append(DateAggregation(date=period.start, amount=amount))

    logger.debug(
        "aggregation.date_series",
        periods=len(periods),
        points=len(series),
        surcharge=surcharge,
    )
    return series


def aggregate_grouped_series(
    periods: Sequence[RawPeriodRecord],
    *,
    metric: str = UNBLENDED_COST,
    round_amounts: bool = False,
) -> list[KeyedCostSeries]:
    """Build one date series per group key, in first-seen key order.

    Keys whose series has no positive amount are left out.
    """
    keys = build_key_index(periods)
    costs = [KeyedCostSeries(id=key) for key in keys]

    for period in periods:
        for group in period.groups:
            amount = metric_amount(group.metrics, metric, round_amount=round_amounts)
            if amount > 0:
                costs[keys[group.key]].aggregation.append(
                    DateAggregation(date=period.start, amount=amount)
                )

    filtered = [cost for cost in costs if cost.aggregation]
    logger.debug(
        "aggregation.grouped_series",
        periods=len(periods),
        keys=len(keys),
        emitted=len(filtered),
    )
    return filtered


def aggregate_entity_split(
    periods: Sequence[RawPeriodRecord],
    *,
    metric: str = UNBLENDED_COST,
    round_amounts: bool = False,
) -> dict[str, EntityAggregation]:
    """Sum each group's cost into a before and an after bucket.

    The first ``len(periods) // 2`` periods form the before bucket; an odd
    period count puts the extra period after the midpoint. Groups with no
    cost in either bucket are dropped.
    """
    keys = build_key_index(periods)
    buckets = [[0.0, 0.0] for _ in keys]
    midpoint = len(periods) // 2

    for i, period in enumerate(periods):
        bucket = 0 if i < midpoint else 1
        for group in period.groups:
            amount = metric_amount(group.metrics, metric, round_amount=round_amounts)
            buckets[keys[group.key]][bucket] += amount

    entities: dict[str, EntityAggregation] = {}
    for key, index in keys.items():
        before, after = buckets[index]
        if before == 0 and after == 0:
            continue
        entities[key] = EntityAggregation(
            id=key,
            aggregation=(before, after),
            change=change_of_entity((before, after)),
        )
    return entities


def aggregate_product_entity(
    product: str,
    periods: Sequence[RawPeriodRecord],
    *,
    metric: str = UNBLENDED_COST,
    round_amounts: bool = False,
) -> EntityAggregation:
    """Roll the per-group split up into a single parent entity."""
    children = aggregate_entity_split(periods, metric=metric, round_amounts=round_amounts)
    before = sum(child.aggregation[0] for child in children.values())
    after = sum(child.aggregation[1] for child in children.values())
    logger.info(
        "aggregation.product_entity",
        product=product,
        entities=len(children),
        before=before,
        after=after,
    )
    return EntityAggregation(
        id=product,
        aggregation=(before, after),
        change=change_of_entity((before, after)),
        entities=list(children.values()),
    )
