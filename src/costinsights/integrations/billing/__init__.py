"""Cost-data sources."""

from costinsights.integrations.billing.aws_cost_explorer import AWSCostExplorerSource
from costinsights.integrations.billing.base import CostDataSource, GroupBy

__all__ = ["AWSCostExplorerSource", "CostDataSource", "GroupBy"]
