"""Structured exception hierarchy following RFC 7807 Problem Details.

All Cost Insights domain exceptions extend ``CostInsightsError``. Errors
raised by the upstream cost-data source (boto3/botocore) are not wrapped and
reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class CostInsightsError(Exception):
    """Base exception for all Cost Insights domain errors."""

    status_code: int = 500
    error_type: str = "about:blank"
    title: str = "Internal Server Error"

    def __init__(
        self,
        detail: str = "",
        *,
        instance: str = "",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail or self.title
        self.instance = instance
        self.extra = extra or {}
        super().__init__(self.detail)

    def to_problem_detail(self) -> dict[str, Any]:
        """RFC 7807 Problem Details JSON object."""
        body: dict[str, Any] = {
            "type": self.error_type,
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
        }
        if self.instance:
            body["instance"] = self.instance
        if self.extra:
            body.update(self.extra)
        return body


class InvalidIntervalError(CostInsightsError):
    status_code = 400
    error_type = "urn:costinsights:error:invalid-interval"
    title = "Invalid Interval"


class UnknownAccountTierError(CostInsightsError):
    status_code = 422
    error_type = "urn:costinsights:error:unknown-account-tier"
    title = "Unknown Support Account Tier"


class UnknownProductError(CostInsightsError):
    status_code = 404
    error_type = "urn:costinsights:error:unknown-product"
    title = "Unknown Product"
