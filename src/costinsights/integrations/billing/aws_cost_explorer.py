"""AWS Cost Explorer cost-data source.

Queries ``GetCostAndUsage`` at DAILY granularity and converts
``ResultsByTime`` entries into :class:`RawPeriodRecord`. The boto3 client is
created lazily and its blocking calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any

import structlog

from costinsights.billing.intervals import DEFAULT_DATE_FORMAT
from costinsights.billing.models import RawGroup, RawPeriodRecord
from costinsights.integrations.billing.base import GroupBy

logger = structlog.get_logger()


def _parse_result(result: dict[str, Any]) -> RawPeriodRecord:
    start = dt.datetime.strptime(result["TimePeriod"]["Start"], DEFAULT_DATE_FORMAT).date()
    total = {name: value.get("Amount", "") for name, value in result.get("Total", {}).items()}
    groups = [
        RawGroup(
            keys=list(group.get("Keys", [])),
            metrics={
                name: value.get("Amount", "") for name, value in group.get("Metrics", {}).items()
            },
        )
        for group in result.get("Groups", [])
    ]
    return RawPeriodRecord(start=start, total=total, groups=groups)


class AWSCostExplorerSource:
    """Cost-data source backed by the AWS Cost Explorer API."""

    provider = "aws"

    def __init__(self, region: str = "us-east-1") -> None:
        self._region = region
        self._client: Any = None

    def _ensure_client(self) -> None:
        if self._client is None:
            import boto3

            self._client = boto3.client("ce", region_name=self._region)

    async def fetch_periods(
        self,
        start: dt.date,
        end: dt.date,
        *,
        metrics: list[str],
        group_by: GroupBy | None = None,
        filter: dict[str, Any] | None = None,
    ) -> list[RawPeriodRecord]:
        """Fetch daily periods in ``[start, end)``, following pagination."""
        self._ensure_client()
        kwargs: dict[str, Any] = {
            "TimePeriod": {
                "Start": start.strftime(DEFAULT_DATE_FORMAT),
                "End": end.strftime(DEFAULT_DATE_FORMAT),
            },
            "Granularity": "DAILY",
            "Metrics": list(metrics),
        }
        if group_by is not None:
            kwargs["GroupBy"] = [{"Type": group_by.type.value, "Key": group_by.key}]
        if filter is not None:
            kwargs["Filter"] = filter

        periods: list[RawPeriodRecord] = []
        pages = 0
        while True:
            response = await asyncio.to_thread(self._client.get_cost_and_usage, **kwargs)
            pages += 1
            periods.extend(_parse_result(r) for r in response.get("ResultsByTime", []))
            next_token = response.get("NextPageToken")
            if not next_token:
                break
            kwargs["NextPageToken"] = next_token

        logger.info(
            "cost_explorer.fetched",
            start=kwargs["TimePeriod"]["Start"],
            end=kwargs["TimePeriod"]["End"],
            group_by=group_by.key if group_by else None,
            pages=pages,
            periods=len(periods),
        )
        return periods

    async def list_linked_accounts(self, start: dt.date, end: dt.date) -> list[str]:
        """Linked account ids with usage in ``[start, end)``."""
        self._ensure_client()
        kwargs: dict[str, Any] = {
            "TimePeriod": {
                "Start": start.strftime(DEFAULT_DATE_FORMAT),
                "End": end.strftime(DEFAULT_DATE_FORMAT),
            },
            "Dimension": "LINKED_ACCOUNT",
            "Context": "COST_AND_USAGE",
        }
        accounts: list[str] = []
        while True:
            response = await asyncio.to_thread(self._client.get_dimension_values, **kwargs)
            accounts.extend(v["Value"] for v in response.get("DimensionValues", []))
            next_token = response.get("NextPageToken")
            if not next_token:
                break
            kwargs["NextPageToken"] = next_token
        return accounts
