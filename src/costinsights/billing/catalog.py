"""Short product ids mapped to Cost Explorer SERVICE dimension values."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from costinsights.exceptions import UnknownProductError

AWS_SERVICES: Mapping[str, str] = MappingProxyType(
    {
        "EC2": "Amazon Elastic Compute Cloud - Compute",
        "EC2Other": "EC2 - Other",
        "S3": "Amazon Simple Storage Service",
        "DynamoDB": "Amazon DynamoDB",
        "ElasticSearch": "Amazon Elasticsearch Service",
        "CloudWatch": "Amazon CloudWatch",
        "CloudTrail": "AWS CloudTrail",
        "RDS": "Amazon Relational Database Service",
        "ELB": "Amazon Elastic Load Balancing",
        "EMR": "Amazon Elastic MapReduce",
        "MSK": "Amazon Managed Streaming for Apache Kafka",
        "Lambda": "AWS Lambda",
        "SNS": "Amazon Simple Notification Service",
        "SQS": "Amazon Simple Queue Service",
    }
)


def service_name_for(
    product: str,
    services: Mapping[str, str] = AWS_SERVICES,
) -> str:
    """Resolve a product id to its Cost Explorer service name."""
    try:
        return services[product]
    except KeyError:
        raise UnknownProductError(
            f"Unknown product '{product}'",
            extra={"available": sorted(services)},
        ) from None
