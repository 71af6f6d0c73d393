"""Billing aggregation core."""

from costinsights.billing.aggregation import (
    aggregate_date_series,
    aggregate_entity_split,
    aggregate_grouped_series,
    aggregate_product_entity,
)
from costinsights.billing.key_index import build_key_index
from costinsights.billing.support_cost import compute_surcharge, surcharge_for_total

__all__ = [
    "aggregate_date_series",
    "aggregate_entity_split",
    "aggregate_grouped_series",
    "aggregate_product_entity",
    "build_key_index",
    "compute_surcharge",
    "surcharge_for_total",
]
