"""Billing data models for raw Cost Explorer periods and aggregated outputs."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class AccountType(StrEnum):
    DEVELOPER = "DEVELOPER"
    BUSINESS = "BUSINESS"
    ENTERPRISE = "ENTERPRISE"


class GroupDefinitionType(StrEnum):
    DIMENSION = "DIMENSION"
    TAG = "TAG"


# --- Raw records ---


class RawGroup(BaseModel):
    """A sub-total within one period.

    Only ``keys[0]`` is used; further keys belong to compound groupings.
    """

    model_config = ConfigDict(frozen=True)

    keys: list[str] = Field(default_factory=list)
    metrics: dict[str, str] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.keys[0] if self.keys else ""


class RawPeriodRecord(BaseModel):
    """One billing period (one calendar day at DAILY granularity)."""

    model_config = ConfigDict(frozen=True)

    start: dt.date
    total: dict[str, str] = Field(default_factory=dict)
    groups: list[RawGroup] = Field(default_factory=list)


# --- Aggregated outputs ---


class DateAggregation(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: float


class KeyedCostSeries(BaseModel):
    id: str
    aggregation: list[DateAggregation] = Field(default_factory=list)


class ChangeStatistic(BaseModel):
    model_config = ConfigDict(frozen=True)

    ratio: float | None = None
    amount: float = 0.0


class Trendline(BaseModel):
    model_config = ConfigDict(frozen=True)

    slope: float = 0.0
    intercept: float = 0.0


class EntityAggregation(BaseModel):
    """Before/after cost totals for one entity plus their change."""

    id: str
    aggregation: tuple[float, float] = (0.0, 0.0)
    change: ChangeStatistic = Field(default_factory=ChangeStatistic)
    entities: list[EntityAggregation] = Field(default_factory=list)


# --- Support configuration ---


class SupportTier(BaseModel):
    """One progressive bracket: ``rate`` applies to ``[start, end)``.

    ``end == 0`` marks the unbounded last bracket.
    """

    model_config = ConfigDict(frozen=True)

    rate: float
    start: float = 0.0
    end: float = 0.0

    @property
    def unbounded(self) -> bool:
        return self.end == 0


class SupportAccountProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_type: AccountType
    minimum_cost: float = 0.0
    tiers: tuple[SupportTier, ...] = ()


# --- Service responses ---


class GroupedCosts(BaseModel):
    product: list[KeyedCostSeries] = Field(default_factory=list)
    project: list[KeyedCostSeries] = Field(default_factory=list)


class DailyCost(BaseModel):
    format: str = "number"
    aggregation: list[DateAggregation] = Field(default_factory=list)
    change: ChangeStatistic = Field(default_factory=ChangeStatistic)
    trendline: Trendline = Field(default_factory=Trendline)
    grouped_costs: GroupedCosts = Field(default_factory=GroupedCosts)


class Group(BaseModel):
    id: str


class Project(BaseModel):
    id: str
