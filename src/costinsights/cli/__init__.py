"""Cost Insights command-line interface."""
