"""Tests for costinsights.services.cost_insights — CostInsightsService."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any

import pytest

from costinsights.billing.models import RawGroup, RawPeriodRecord
from costinsights.billing.support_profiles import DEVELOPER_PROFILE
from costinsights.config import Settings
from costinsights.exceptions import (
    InvalidIntervalError,
    UnknownAccountTierError,
    UnknownProductError,
)
from costinsights.integrations.billing.base import GroupBy
from costinsights.services.cost_insights import CostInsightsService


class FakeCostSource:
    """In-memory cost source keyed by grouping dimension."""

    provider = "fake"

    def __init__(
        self,
        periods: dict[str | None, list[RawPeriodRecord]] | None = None,
        accounts: list[str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.periods = periods or {}
        self.accounts = accounts or []
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    async def fetch_periods(
        self,
        start: dt.date,
        end: dt.date,
        *,
        metrics: list[str],
        group_by: GroupBy | None = None,
        filter: dict[str, Any] | None = None,
    ) -> list[RawPeriodRecord]:
        self.calls.append(
            {"start": start, "end": end, "metrics": metrics, "group_by": group_by, "filter": filter}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.periods.get(group_by.key if group_by else None, [])

    async def list_linked_accounts(self, start: dt.date, end: dt.date) -> list[str]:
        self.calls.append({"start": start, "end": end})
        return self.accounts


def _day(n: int) -> dt.date:
    return dt.date(2020, 8, 1) + dt.timedelta(days=n)


def _totals(*amounts: str, net: str = "0") -> list[RawPeriodRecord]:
    return [
        RawPeriodRecord(start=_day(i), total={"UnblendedCost": a, "NetAmortizedCost": net})
        for i, a in enumerate(amounts)
    ]


def _groups(*days: dict[str, str]) -> list[RawPeriodRecord]:
    return [
        RawPeriodRecord(
            start=_day(i),
            groups=[RawGroup(keys=[k], metrics={"UnblendedCost": v}) for k, v in day.items()],
        )
        for i, day in enumerate(days)
    ]


def _service(source: FakeCostSource, **settings_kw: Any) -> CostInsightsService:
    return CostInsightsService(source, Settings(**settings_kw))


INTERVALS = "R2/P30D/2020-09-01"


# -------------------------------------------------------------------
# Metadata operations
# -------------------------------------------------------------------


class TestMetadata:
    def test_last_complete_billing_date(self):
        svc = _service(FakeCostSource())
        assert svc.get_last_complete_billing_date(today=dt.date(2021, 3, 1)) == "2021-02-28"

    def test_last_complete_billing_date_defaults_to_today(self):
        svc = _service(FakeCostSource())
        expected = (dt.datetime.now(dt.UTC).date() - dt.timedelta(days=1)).isoformat()
        assert svc.get_last_complete_billing_date() == expected

    def test_user_groups_from_settings(self):
        svc = _service(FakeCostSource(), user_groups=["platform", "data"])
        assert [g.id for g in svc.get_user_groups("alice")] == ["platform", "data"]

    @pytest.mark.asyncio
    async def test_group_projects_from_linked_accounts(self):
        source = FakeCostSource(accounts=["111111111111", "222222222222"])
        svc = _service(source)

        projects = await svc.get_group_projects("default-group", today=dt.date(2021, 3, 31))

        assert [p.id for p in projects] == ["111111111111", "222222222222"]
        assert source.calls[0]["start"] == dt.date(2021, 3, 1)
        assert source.calls[0]["end"] == dt.date(2021, 3, 31)


# -------------------------------------------------------------------
# Group / project daily cost
# -------------------------------------------------------------------


class TestGroupDailyCost:
    @pytest.mark.asyncio
    async def test_aggregation_change_and_trendline(self):
        source = FakeCostSource(periods={None: _totals("10", "0", "20")})
        svc = _service(source)

        cost = await svc.get_group_daily_cost("default-group", INTERVALS)

        assert cost.format == "number"
        assert [a.amount for a in cost.aggregation] == [10.0, 20.0]
        assert cost.change.amount == pytest.approx(10.0)
        assert cost.change.ratio == pytest.approx(1.0)
        assert cost.trendline.slope > 0

    @pytest.mark.asyncio
    async def test_grouped_by_product_and_project(self):
        source = FakeCostSource(
            periods={
                None: _totals("5"),
                "SERVICE": _groups({"AWS Lambda": "2", "Amazon Simple Storage Service": "3"}),
                "LINKED_ACCOUNT": _groups({"111111111111": "5"}),
            }
        )
        svc = _service(source)

        cost = await svc.get_group_daily_cost("default-group", INTERVALS)

        assert [s.id for s in cost.grouped_costs.product] == [
            "AWS Lambda",
            "Amazon Simple Storage Service",
        ]
        assert [s.id for s in cost.grouped_costs.project] == ["111111111111"]

    @pytest.mark.asyncio
    async def test_queries_two_periods_back_from_end(self):
        source = FakeCostSource()
        svc = _service(source)

        await svc.get_group_daily_cost("default-group", INTERVALS)

        assert len(source.calls) == 3
        assert source.calls[0]["start"] == dt.date(2020, 7, 3)
        assert source.calls[0]["end"] == dt.date(2020, 9, 1)
        assert source.calls[0]["metrics"] == ["UnblendedCost"]

    @pytest.mark.asyncio
    async def test_support_cost_blended(self):
        source = FakeCostSource(periods={None: _totals("10", "10", net="0")})
        svc = _service(source, support_cost_enabled=True, support_account_type="DEVELOPER")

        cost = await svc.get_group_daily_cost("default-group", INTERVALS)

        # Developer minimum 29 split over two days
        assert [a.amount for a in cost.aggregation] == [24.5, 24.5]
        assert source.calls[0]["metrics"] == ["UnblendedCost", "NetAmortizedCost"]

    @pytest.mark.asyncio
    async def test_explicit_support_profile(self):
        source = FakeCostSource(periods={None: _totals("1", net="10000")})
        svc = CostInsightsService(
            source,
            Settings(support_cost_enabled=True),
            support_profile=DEVELOPER_PROFILE,
        )

        cost = await svc.get_group_daily_cost("default-group", INTERVALS)

        assert cost.aggregation[0].amount == pytest.approx(301.0)

    def test_unknown_support_tier(self):
        with pytest.raises(UnknownAccountTierError):
            _service(FakeCostSource(), support_cost_enabled=True, support_account_type="GOLD")

    @pytest.mark.asyncio
    async def test_rounding_setting(self):
        source = FakeCostSource(periods={None: _totals("1.6", "0.2")})
        svc = _service(source, cost_round=True)

        cost = await svc.get_group_daily_cost("default-group", INTERVALS)

        assert [a.amount for a in cost.aggregation] == [2.0]

    @pytest.mark.asyncio
    async def test_invalid_intervals(self):
        source = FakeCostSource()
        with pytest.raises(InvalidIntervalError):
            await _service(source).get_group_daily_cost("default-group", "last month")
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self):
        source = FakeCostSource(error=ConnectionError("endpoint unreachable"))
        with pytest.raises(ConnectionError, match="endpoint unreachable"):
            await _service(source).get_group_daily_cost("default-group", INTERVALS)
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_fetch_timeout(self):
        source = FakeCostSource(delay=1.0)
        svc = _service(source, fetch_timeout_seconds=0.01)
        with pytest.raises(TimeoutError):
            await svc.get_group_daily_cost("default-group", INTERVALS)


class TestProjectDailyCost:
    @pytest.mark.asyncio
    async def test_filters_by_linked_account(self):
        source = FakeCostSource(
            periods={None: _totals("4"), "SERVICE": _groups({"AWS Lambda": "4"})}
        )
        svc = _service(source)

        cost = await svc.get_project_daily_cost("111111111111", INTERVALS)

        assert [a.amount for a in cost.aggregation] == [4.0]
        assert [s.id for s in cost.grouped_costs.product] == ["AWS Lambda"]
        assert cost.grouped_costs.project == []
        expected = {"Dimensions": {"Key": "LINKED_ACCOUNT", "Values": ["111111111111"]}}
        assert all(call["filter"] == expected for call in source.calls)
        assert len(source.calls) == 2


# -------------------------------------------------------------------
# Product insights
# -------------------------------------------------------------------


class TestProductInsights:
    @pytest.mark.asyncio
    async def test_entity_split_by_tag(self):
        source = FakeCostSource(
            periods={
                "Product": _groups(
                    {"Product$api": "10", "Product$web": "1"},
                    {"Product$api": "30", "Product$web": "1"},
                )
            }
        )
        svc = _service(source)

        entity = await svc.get_product_insights("EC2", INTERVALS)

        assert entity.id == "EC2"
        assert entity.aggregation == (11.0, 31.0)
        assert [e.id for e in entity.entities] == ["Product$api", "Product$web"]
        call = source.calls[0]
        assert call["group_by"] == GroupBy.tag("Product")
        assert call["filter"] == {
            "Dimensions": {
                "Key": "SERVICE",
                "Values": ["Amazon Elastic Compute Cloud - Compute"],
            }
        }

    @pytest.mark.asyncio
    async def test_project_narrows_filter(self):
        source = FakeCostSource()
        svc = _service(source)

        await svc.get_product_insights("S3", INTERVALS, project="111111111111")

        assert source.calls[0]["filter"] == {
            "And": [
                {"Dimensions": {"Key": "SERVICE", "Values": ["Amazon Simple Storage Service"]}},
                {"Dimensions": {"Key": "LINKED_ACCOUNT", "Values": ["111111111111"]}},
            ]
        }

    @pytest.mark.asyncio
    async def test_configurable_tag_key(self):
        source = FakeCostSource()
        svc = _service(source, product_tag_key="CostCenter")

        await svc.get_product_insights("Lambda", INTERVALS)

        assert source.calls[0]["group_by"] == GroupBy.tag("CostCenter")

    @pytest.mark.asyncio
    async def test_unknown_product(self):
        source = FakeCostSource()
        with pytest.raises(UnknownProductError):
            await _service(source).get_product_insights("Mainframe", INTERVALS)
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_custom_service_catalog(self):
        source = FakeCostSource()
        svc = CostInsightsService(source, Settings(), services={"Kafka": "Amazon MSK"})

        await svc.get_product_insights("Kafka", INTERVALS)

        assert source.calls[0]["filter"]["Dimensions"]["Values"] == ["Amazon MSK"]
