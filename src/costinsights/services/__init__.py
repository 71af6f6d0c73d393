"""Application services."""

from costinsights.services.cost_insights import CostInsightsService

__all__ = ["CostInsightsService"]
