"""Cost-data source protocol."""

from __future__ import annotations

import datetime as dt
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from costinsights.billing.models import GroupDefinitionType, RawPeriodRecord


class GroupBy(BaseModel):
    """A single grouping dimension for a cost query."""

    model_config = ConfigDict(frozen=True)

    key: str
    type: GroupDefinitionType = GroupDefinitionType.DIMENSION

    @classmethod
    def service(cls) -> GroupBy:
        return cls(key="SERVICE")

    @classmethod
    def linked_account(cls) -> GroupBy:
        return cls(key="LINKED_ACCOUNT")

    @classmethod
    def tag(cls, key: str) -> GroupBy:
        return cls(key=key, type=GroupDefinitionType.TAG)


def dimension_filter(key: str, values: list[str]) -> dict[str, Any]:
    """Cost Explorer filter expression matching a dimension's values."""
    return {"Dimensions": {"Key": key, "Values": values}}


@runtime_checkable
class CostDataSource(Protocol):
    """Anything that can return daily cost records for a date range.

    ``end`` is exclusive. Failures are raised to the caller as-is; sources do
    not retry.
    """

    provider: str

    async def fetch_periods(
        self,
        start: dt.date,
        end: dt.date,
        *,
        metrics: list[str],
        group_by: GroupBy | None = None,
        filter: dict[str, Any] | None = None,
    ) -> list[RawPeriodRecord]: ...

    async def list_linked_accounts(self, start: dt.date, end: dt.date) -> list[str]: ...
