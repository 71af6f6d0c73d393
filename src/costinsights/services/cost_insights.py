"""Cost Insights service: fetch Cost Explorer data and shape it for display.

Each operation parses the requested repeating interval, fetches raw periods
from the cost-data source and runs them through exactly one aggregator per
view. Source failures propagate unchanged.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Mapping
from typing import Any

import structlog

from costinsights.billing.aggregation import (
    aggregate_date_series,
    aggregate_grouped_series,
    aggregate_product_entity,
)
from costinsights.billing.catalog import AWS_SERVICES, service_name_for
from costinsights.billing.intervals import (
    DEFAULT_DATE_FORMAT,
    Interval,
    inclusive_start_date_of,
    parse_intervals,
)
from costinsights.billing.models import (
    DailyCost,
    EntityAggregation,
    Group,
    GroupedCosts,
    KeyedCostSeries,
    Project,
    RawPeriodRecord,
    SupportAccountProfile,
)
from costinsights.billing.statistics import change_of, trendline_of
from costinsights.billing.support_profiles import resolve_support_profile
from costinsights.config import Settings
from costinsights.integrations.billing.base import CostDataSource, GroupBy, dimension_filter

logger = structlog.get_logger()


class CostInsightsService:
    """Cost-insights operations over a single billing scope."""

    def __init__(
        self,
        source: CostDataSource,
        settings: Settings,
        support_profile: SupportAccountProfile | None = None,
        services: Mapping[str, str] = AWS_SERVICES,
    ) -> None:
        self._source = source
        self._settings = settings
        self._services = services
        self._support_profile = support_profile
        if self._support_profile is None and settings.support_cost_enabled:
            self._support_profile = resolve_support_profile(settings.support_account_type)
        logger.info(
            "cost_insights.initialized",
            provider=source.provider,
            metric=settings.cost_metric,
            support_cost_enabled=settings.support_cost_enabled,
        )

    # -- metadata --------------------------------------------------------

    def get_last_complete_billing_date(self, today: dt.date | None = None) -> str:
        """Most recent date with complete billing data (yesterday)."""
        today = today or dt.datetime.now(dt.UTC).date()
        return (today - dt.timedelta(days=1)).strftime(DEFAULT_DATE_FORMAT)

    def get_user_groups(self, user_id: str) -> list[Group]:
        return [Group(id=g) for g in self._settings.user_groups]

    async def get_group_projects(self, group: str, today: dt.date | None = None) -> list[Project]:
        """Linked accounts with usage over the last 30 days."""
        end = today or dt.datetime.now(dt.UTC).date()
        start = end - dt.timedelta(days=30)
        async with asyncio.timeout(self._settings.fetch_timeout_seconds):
            accounts = await self._source.list_linked_accounts(start, end)
        return [Project(id=a) for a in accounts]

    # -- daily cost ------------------------------------------------------

    async def get_group_daily_cost(self, group: str, intervals: str) -> DailyCost:
        """Daily cost for a group, broken down by product and by project."""
        interval = parse_intervals(intervals)
        cost = await self._daily_cost(interval)
        cost.grouped_costs = GroupedCosts(
            product=await self._grouped(interval, GroupBy.service()),
            project=await self._grouped(interval, GroupBy.linked_account()),
        )
        logger.info(
            "cost_insights.group_daily_cost",
            group=group,
            intervals=intervals,
            points=len(cost.aggregation),
        )
        return cost

    async def get_project_daily_cost(self, project: str, intervals: str) -> DailyCost:
        """Daily cost for one linked account, broken down by product."""
        interval = parse_intervals(intervals)
        account_filter = dimension_filter("LINKED_ACCOUNT", [project])
        cost = await self._daily_cost(interval, filter=account_filter)
        cost.grouped_costs = GroupedCosts(
            product=await self._grouped(interval, GroupBy.service(), filter=account_filter),
        )
        logger.info(
            "cost_insights.project_daily_cost",
            project=project,
            intervals=intervals,
            points=len(cost.aggregation),
        )
        return cost

    # -- product insights ------------------------------------------------

    async def get_product_insights(
        self,
        product: str,
        intervals: str,
        project: str | None = None,
    ) -> EntityAggregation:
        """Before/after cost for a product, split by its cost-allocation tag."""
        service_name = service_name_for(product, self._services)
        interval = parse_intervals(intervals)
        service_filter = dimension_filter("SERVICE", [service_name])
        if project is not None:
            service_filter = {
                "And": [service_filter, dimension_filter("LINKED_ACCOUNT", [project])]
            }
        periods = await self._fetch(
            interval,
            group_by=GroupBy.tag(self._settings.product_tag_key),
            filter=service_filter,
        )
        return aggregate_product_entity(
            product,
            periods,
            metric=self._settings.cost_metric,
            round_amounts=self._settings.cost_round,
        )

    # -- internals -------------------------------------------------------

    async def _fetch(
        self,
        interval: Interval,
        *,
        metrics: list[str] | None = None,
        group_by: GroupBy | None = None,
        filter: dict[str, Any] | None = None,
    ) -> list[RawPeriodRecord]:
        start = inclusive_start_date_of(interval.duration, interval.end_date)
        async with asyncio.timeout(self._settings.fetch_timeout_seconds):
            return await self._source.fetch_periods(
                start,
                interval.end_date,
                metrics=metrics or [self._settings.cost_metric],
                group_by=group_by,
                filter=filter,
            )

    async def _daily_cost(
        self,
        interval: Interval,
        *,
        filter: dict[str, Any] | None = None,
    ) -> DailyCost:
        metrics = [self._settings.cost_metric]
        support_enabled = self._settings.support_cost_enabled
        if support_enabled and self._settings.support_cost_metric not in metrics:
            metrics.append(self._settings.support_cost_metric)

        periods = await self._fetch(interval, metrics=metrics, filter=filter)
        aggregation = aggregate_date_series(
            periods,
            support_cost_enabled=support_enabled,
            profile=self._support_profile,
            metric=self._settings.cost_metric,
            support_cost_metric=self._settings.support_cost_metric,
            round_amounts=self._settings.cost_round,
        )
        return DailyCost(
            aggregation=aggregation,
            change=change_of(aggregation),
            trendline=trendline_of(aggregation),
        )

    async def _grouped(
        self,
        interval: Interval,
        group_by: GroupBy,
        *,
        filter: dict[str, Any] | None = None,
    ) -> list[KeyedCostSeries]:
        periods = await self._fetch(interval, group_by=group_by, filter=filter)
        return aggregate_grouped_series(
            periods,
            metric=self._settings.cost_metric,
            round_amounts=self._settings.cost_round,
        )
