"""Cost Insights CLI -- query Cost Explorer aggregations from the terminal."""
# mypy: disable-error-code="misc,untyped-decorator"

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

import click
import structlog

from costinsights.billing.models import DailyCost, EntityAggregation
from costinsights.billing.support_cost import surcharge_for_total
from costinsights.billing.support_profiles import resolve_support_profile
from costinsights.cli.output import (
    format_amount,
    format_ratio,
    print_detail,
    print_error,
    print_json,
    print_table,
)
from costinsights.config import settings
from costinsights.exceptions import CostInsightsError
from costinsights.integrations.billing.aws_cost_explorer import AWSCostExplorerSource
from costinsights.services.cost_insights import CostInsightsService

INTERVALS_HELP = "ISO 8601 repeating interval, e.g. R2/P30D/2020-09-01."


def build_service() -> CostInsightsService:
    return CostInsightsService(AWSCostExplorerSource(region=settings.aws_region), settings)


def configure_logging(level: str) -> None:
    """Send structured logs to stderr so stdout carries only command output."""
    structlog.configure(
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)
        ),
    )


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except CostInsightsError as exc:
        print_error(exc.detail)
        raise SystemExit(1) from exc


def _run(call: Callable[[CostInsightsService], Awaitable[Any]]) -> Any:
    with _domain_errors():
        return asyncio.run(call(build_service()))


def _print_daily_cost(ctx: click.Context, cost: DailyCost) -> None:
    if ctx.obj["format"] == "json":
        print_json(cost.model_dump(mode="json"))
        return
    print_table(
        ["Date", "Amount"],
        [[a.date.isoformat(), format_amount(a.amount)] for a in cost.aggregation],
    )
    change = cost.change
    print_detail("Change", f"{format_amount(change.amount)} ({format_ratio(change.ratio)})")
    print_detail("Trend slope (per day)", f"{cost.trendline.slope * 86400:.4f}")
    for label, series in (
        ("Products", cost.grouped_costs.product),
        ("Projects", cost.grouped_costs.project),
    ):
        if not series:
            continue
        click.echo(label)
        print_table(
            ["Id", "Days", "Total"],
            [
                [s.id, str(len(s.aggregation)), format_amount(sum(a.amount for a in s.aggregation))]
                for s in series
            ],
        )


def _print_entity(ctx: click.Context, entity: EntityAggregation) -> None:
    if ctx.obj["format"] == "json":
        print_json(entity.model_dump(mode="json"))
        return
    rows = [
        [
            e.id or "(untagged)",
            format_amount(e.aggregation[0]),
            format_amount(e.aggregation[1]),
            format_ratio(e.change.ratio),
        ]
        for e in [*entity.entities, entity]
    ]
    print_table(["Entity", "Before", "After", "Change"], rows)


@click.group()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
@click.version_option(version=settings.app_version)
@click.pass_context
def cli(ctx: click.Context, output_format: str) -> None:
    """Cost Insights -- AWS cost aggregation and support surcharge CLI."""
    configure_logging(settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


@cli.command("daily-cost")
@click.argument("group")
@click.option("--intervals", required=True, help=INTERVALS_HELP)
@click.pass_context
def daily_cost(ctx: click.Context, group: str, intervals: str) -> None:
    """Daily cost for GROUP with product and project breakdowns."""
    cost = _run(lambda svc: svc.get_group_daily_cost(group, intervals))
    _print_daily_cost(ctx, cost)


@cli.command("project-cost")
@click.argument("project")
@click.option("--intervals", required=True, help=INTERVALS_HELP)
@click.pass_context
def project_cost(ctx: click.Context, project: str, intervals: str) -> None:
    """Daily cost for a single linked account PROJECT."""
    cost = _run(lambda svc: svc.get_project_daily_cost(project, intervals))
    _print_daily_cost(ctx, cost)


@cli.command("product-insights")
@click.argument("product")
@click.option("--intervals", required=True, help=INTERVALS_HELP)
@click.option("--project", default=None, help="Restrict to one linked account.")
@click.pass_context
def product_insights(ctx: click.Context, product: str, intervals: str, project: str | None) -> None:
    """Before/after cost for PRODUCT split by its cost-allocation tag."""
    entity = _run(
        lambda svc: svc.get_product_insights(product, intervals, project=project)
    )
    _print_entity(ctx, entity)


@cli.command("support-cost")
@click.option(
    "--tier",
    default=settings.support_account_type,
    help="Support plan: DEVELOPER, BUSINESS or ENTERPRISE.",
)
@click.option("--total", type=float, required=True, help="Total cost for the window.")
@click.pass_context
def support_cost(ctx: click.Context, tier: str, total: float) -> None:
    """Support surcharge for a given total cost."""
    with _domain_errors():
        profile = resolve_support_profile(tier)
    surcharge = surcharge_for_total(profile, total)
    if ctx.obj["format"] == "json":
        print_json({"account_type": profile.account_type, "total": total, "surcharge": surcharge})
        return
    print_detail("Account type", profile.account_type.value)
    print_detail("Total", format_amount(total))
    print_detail("Surcharge", format_amount(surcharge))


@cli.command("billing-date")
def billing_date() -> None:
    """Last date with complete billing data."""
    with _domain_errors():
        service = build_service()
    click.echo(service.get_last_complete_billing_date())


@cli.command()
@click.argument("user_id")
def groups(user_id: str) -> None:
    """Groups USER_ID belongs to."""
    with _domain_errors():
        service = build_service()
    for group in service.get_user_groups(user_id):
        click.echo(group.id)


@cli.command()
@click.argument("group")
def projects(group: str) -> None:
    """Linked accounts visible to GROUP."""
    for project in _run(lambda svc: svc.get_group_projects(group)):
        click.echo(project.id)


if __name__ == "__main__":
    cli()
