"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Cost Insights configuration loaded from environment variables."""

    # Application
    app_name: str = "Cost Insights"
    app_version: str = "0.1.0"
    environment: str = "development"  # development, staging, production
    log_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR

    # AWS
    aws_region: str = "us-east-1"
    fetch_timeout_seconds: float = 30.0

    # Cost metrics
    cost_metric: str = "UnblendedCost"
    cost_round: bool = False

    # Support surcharge
    support_cost_enabled: bool = False
    support_cost_metric: str = "NetAmortizedCost"
    support_account_type: str = "BUSINESS"  # DEVELOPER, BUSINESS, ENTERPRISE

    # Product insights
    product_tag_key: str = "Product"

    # Groups
    user_groups: list[str] = ["default-group"]

    model_config = {
        "env_prefix": "COSTINSIGHTS_",
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
