"""Cost Insights: billing aggregation for AWS Cost Explorer data."""

__version__ = "0.1.0"
