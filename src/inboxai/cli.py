"""Click CLI for inboxai: inspect cache keys, limits, scores and settings."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from inboxai.config.hierarchy import load_config_hierarchy

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="inboxai")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """inboxai: AI service layer for a creator messaging inbox."""
    config = load_config_hierarchy()
    _setup_logging(verbose, config.get("log_level", "WARNING"))
    ctx.obj = config


@cli.command("cache-key")
@click.argument("text")
@click.option("--operation", default="categorization", show_default=True, help="AI operation.")
def cache_key(text: str, operation: str) -> None:
    """Print the deterministic cache key for TEXT."""
    from inboxai.cache.keys import generate_cache_key
    from inboxai.cache.ttl import resolve_ttl

    key = generate_cache_key(text, operation)
    console.print(key)
    if resolve_ttl(operation) <= 0:
        error_console.print(f"[yellow]{operation} results are never cached.[/yellow]")


@cli.command("limits")
def list_limits() -> None:
    """Show cache TTLs and rate limits per operation."""
    from inboxai.cache.ttl import resolve_ttl
    from inboxai.ratelimit.limits import RATE_LIMITS

    table = Table(title="AI Operation Limits", show_header=True)
    table.add_column("Operation", style="cyan")
    table.add_column("Cache TTL")
    table.add_column("Per hour", justify="right")
    table.add_column("Per day", justify="right")

    for operation, limits in RATE_LIMITS.items():
        ttl = resolve_ttl(operation)
        table.add_row(
            str(operation),
            _format_ttl(ttl),
            str(limits.per_hour),
            str(limits.per_day),
        )

    console.print(table)


def _format_ttl(seconds: int) -> str:
    if seconds <= 0:
        return "not cached"
    if seconds % 86400 == 0:
        return f"{seconds // 86400}d"
    if seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    return f"{seconds // 60}m"


@cli.command("score")
@click.option("--category", default=None, help="Message category.")
@click.option("--sentiment-score", type=float, default=None, help="Sentiment score (-1 to 1).")
@click.option("--opportunity-score", type=float, default=None, help="Opportunity score (0-100).")
@click.option("--vip", is_flag=True, default=False, help="Conversation is VIP.")
@click.option("--message-count", type=int, default=0, help="Messages in the conversation.")
@click.option(
    "--days-since-last", type=float, default=30.0, help="Days since the last interaction."
)
@click.pass_obj
def score(
    config: dict[str, Any],
    category: str | None,
    sentiment_score: float | None,
    opportunity_score: float | None,
    vip: bool,
    message_count: int,
    days_since_last: float,
) -> None:
    """Relationship priority score for one message."""
    from inboxai.config.loader import load_scoring_weights
    from inboxai.scoring.relationship import RelationshipContext, calculate_relationship_score
    from inboxai.types import Message, MessageMetadata
    from inboxai.utils.clock import local_now

    weights = None
    weights_path = config.get("scoring_weights_path")
    if weights_path:
        try:
            weights = load_scoring_weights(weights_path)
        except (OSError, ValueError) as e:
            error_console.print(f"[red]Invalid scoring weights:[/red] {e}")
            sys.exit(1)

    now = local_now()
    message = Message(
        id="cli",
        conversation_id="cli",
        sender_id="cli",
        metadata=MessageMetadata(
            category=category,
            sentiment_score=sentiment_score,
            opportunity_score=opportunity_score,
        ),
    )
    context = RelationshipContext(
        last_interaction=now - timedelta(days=days_since_last),
        message_count=message_count,
        is_vip=vip,
    )
    result = calculate_relationship_score(message, context, weights=weights, now=now)

    table = Table(title="Relationship Score", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Points", justify="right")
    breakdown = result.breakdown
    table.add_row("Category", f"{breakdown.category:g}")
    table.add_row("Sentiment", f"{breakdown.sentiment:g}")
    table.add_row("Opportunity", f"{breakdown.opportunity:g}")
    table.add_row("Relationship", f"{breakdown.relationship:g}")
    table.add_row("Total", f"[bold]{result.score:g}[/bold]")
    table.add_row("Priority", str(result.priority))
    console.print(table)


@cli.command("health")
@click.option("--response-rate", type=float, required=True, help="Personal response rate (0-100).")
@click.option("--response-time", type=float, required=True, help="Average response time (hours).")
@click.option("--depth", type=float, required=True, help="Conversation depth (0-100).")
@click.option("--capacity-usage", type=float, required=True, help="Capacity usage (0-100).")
@click.option("--days-at-max", type=int, default=0, help="Days at max capacity this week.")
def health(
    response_rate: float,
    response_time: float,
    depth: float,
    capacity_usage: float,
    days_at_max: int,
) -> None:
    """Engagement health score and burnout risk from raw metrics."""
    from inboxai.scoring.health import (
        RawEngagementMetrics,
        assess_burnout_risk,
        calculate_health_score,
        to_components,
    )

    metrics = RawEngagementMetrics(
        personal_response_rate=response_rate,
        avg_response_time=response_time,
        conversation_depth=depth,
        capacity_usage=capacity_usage,
    )
    console.print(f"Health score: [bold]{calculate_health_score(to_components(metrics))}[/bold]")
    console.print(f"Burnout risk: {assess_burnout_risk(metrics, days_at_max)}")


@cli.command("render-boundary")
@click.option("--template", "template_path", type=click.Path(exists=True), help="Template file.")
@click.option("--creator-name", default=None)
@click.option("--faq-url", default=None)
@click.option("--community-url", default=None)
def render_boundary(
    template_path: str | None,
    creator_name: str | None,
    faq_url: str | None,
    community_url: str | None,
) -> None:
    """Render a boundary auto-reply (the default template unless --template)."""
    from inboxai.messaging.boundary import DEFAULT_BOUNDARY_TEMPLATE, render_boundary_template

    template = Path(template_path).read_text() if template_path else DEFAULT_BOUNDARY_TEMPLATE
    rendered = render_boundary_template(template, creator_name, faq_url, community_url)
    console.print(rendered, markup=False)


@cli.group()
def abtest() -> None:
    """A/B test commands against the configured store."""


@abtest.command("compare")
@click.argument("test_id")
@click.pass_obj
def abtest_compare(config: dict[str, Any], test_id: str) -> None:
    """Compare the two arms of TEST_ID."""
    result = _run_with_context(config, lambda ctx: ctx.ab_tests.compare_results(test_id))
    if result is None:
        error_console.print(
            f"[yellow]No comparison for {test_id}: missing test or not enough data.[/yellow]"
        )
        sys.exit(1)

    table = Table(title=f"A/B Test {test_id}", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Winner", result.winner)
    table.add_row("Confidence", f"{result.confidence}%")
    table.add_row("Latency diff", f"{result.latency_diff:.1f}%")
    table.add_row("Cost diff", f"{result.cost_diff:.1f}%")
    table.add_row("Success rate diff", f"{result.success_rate_diff:.1f}%")
    table.add_row("Score A / B", f"{result.variant_a_score:.1f} / {result.variant_b_score:.1f}")
    table.add_row(
        "Sample size", f"{result.sample_size.variant_a} / {result.sample_size.variant_b}"
    )
    console.print(table)
    console.print(result.recommendation)


@abtest.command("assign")
@click.argument("test_id")
@click.argument("user_id")
@click.pass_obj
def abtest_assign(config: dict[str, Any], test_id: str, user_id: str) -> None:
    """Show which arm USER_ID sees in TEST_ID."""
    variant = _run_with_context(config, lambda ctx: ctx.ab_tests.assign_variant(test_id, user_id))
    if variant is None:
        error_console.print(f"[yellow]Test {test_id} is missing or inactive.[/yellow]")
        sys.exit(1)
    console.print(str(variant))


@cli.command("validate-settings")
@click.argument("settings_yaml", type=click.Path(exists=True))
def validate_settings(settings_yaml: str) -> None:
    """Validate a daily agent settings YAML file."""
    import yaml

    from inboxai.config.loader import load_daily_agent_yaml

    try:
        settings = load_daily_agent_yaml(settings_yaml)
    except (ValueError, yaml.YAMLError) as e:
        error_console.print(f"[red]Invalid settings:[/red] {e}")
        sys.exit(1)

    workflow = settings.workflow_settings
    console.print("[green]Valid daily agent settings[/green]")
    console.print(f"  Daily workflow: {'on' if settings.features.daily_workflow_enabled else 'off'}")
    console.print(f"  Runs at: {workflow.daily_workflow_time} ({workflow.timezone})")
    console.print(f"  Max auto-responses: {workflow.max_auto_responses}")
    console.print(f"  Escalation threshold: {workflow.escalation_threshold}")


def _run_with_context(config: dict[str, Any], action: Callable[[Any], Awaitable[T]]) -> T:
    from inboxai.core import ServiceContext

    async def _run() -> T:
        ctx = ServiceContext.from_config(config)
        try:
            return await action(ctx)
        finally:
            await ctx.close()

    return asyncio.run(_run())


def main() -> None:
    """Entry point for the CLI."""
    cli()
