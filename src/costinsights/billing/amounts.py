"""Metric amount parsing for Cost Explorer records.

Amounts arrive as decimal strings. Units are ignored; every amount is treated
as the same currency.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

import structlog

logger = structlog.get_logger()

# every float at or above 2**52 is already an integer
_INTEGRAL_FLOAT = 2.0**52


def parse_amount(raw: str | None, *, round_amount: bool = False) -> float:
    """Parse a decimal-string amount, treating malformed input as zero."""
    if raw is None:
        return 0.0
    try:
        amount = float(raw)
    except (TypeError, ValueError):
        logger.warning("amounts.malformed", raw=raw)
        return 0.0
    if not math.isfinite(amount):
        logger.warning("amounts.malformed", raw=raw)
        return 0.0
    if round_amount:
        return round_half_away(amount)
    return amount


def round_half_away(amount: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    if abs(amount) >= _INTEGRAL_FLOAT:
        return amount
    # exact binary value, so 0.49999999999999994 stays below the half
    return float(Decimal(amount).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def metric_amount(
    metrics: dict[str, str],
    metric: str,
    *,
    round_amount: bool = False,
) -> float:
    """Return the named metric's amount from a record, or zero if absent."""
    raw = metrics.get(metric)
    if raw is None:
        logger.warning(
            "amounts.metric_missing",
            metric=metric,
            available=sorted(metrics),
        )
        return 0.0
    return parse_amount(raw, round_amount=round_amount)
