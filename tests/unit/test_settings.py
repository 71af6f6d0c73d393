"""Tests for costinsights.config and costinsights.exceptions."""

from __future__ import annotations

from costinsights.config import Settings
from costinsights.exceptions import (
    CostInsightsError,
    InvalidIntervalError,
    UnknownAccountTierError,
    UnknownProductError,
)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "COSTINSIGHTS_COST_METRIC",
            "COSTINSIGHTS_SUPPORT_COST_ENABLED",
            "COSTINSIGHTS_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.cost_metric == "UnblendedCost"
        assert s.support_cost_metric == "NetAmortizedCost"
        assert s.support_cost_enabled is False
        assert s.support_account_type == "BUSINESS"
        assert s.cost_round is False
        assert s.product_tag_key == "Product"
        assert s.user_groups == ["default-group"]
        assert s.log_level == "WARNING"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("COSTINSIGHTS_SUPPORT_COST_ENABLED", "true")
        monkeypatch.setenv("COSTINSIGHTS_SUPPORT_ACCOUNT_TYPE", "ENTERPRISE")
        monkeypatch.setenv("COSTINSIGHTS_COST_METRIC", "BlendedCost")
        s = Settings(_env_file=None)
        assert s.support_cost_enabled is True
        assert s.support_account_type == "ENTERPRISE"
        assert s.cost_metric == "BlendedCost"


class TestExceptions:
    def test_hierarchy(self):
        for exc_type in (InvalidIntervalError, UnknownAccountTierError, UnknownProductError):
            assert issubclass(exc_type, CostInsightsError)

    def test_default_detail_is_title(self):
        assert InvalidIntervalError().detail == "Invalid Interval"

    def test_problem_detail(self):
        exc = UnknownProductError("Unknown product 'X'", instance="/products/X", extra={"a": 1})
        body = exc.to_problem_detail()
        assert body == {
            "type": "urn:costinsights:error:unknown-product",
            "title": "Unknown Product",
            "status": 404,
            "detail": "Unknown product 'X'",
            "instance": "/products/X",
            "a": 1,
        }
