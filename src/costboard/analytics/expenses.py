"""
Synthesise expense records from provider data.

Live provider summaries are converted into expenses so they flow through the
same filters and aggregations as the sample data.
"""

import logging
import re
from datetime import datetime, timezone

from ..clients.models import CostSummary, ModelBillingData, OpenAIUsageData
from .mock_data import CATEGORIES, PROJECTS, TEAMS
from .models import Category, Environment, Expense, Project, Team, UsageMetric

logger = logging.getLogger(__name__)

# Default attribution for spend that arrives without team or project data
PROVIDER_ATTRIBUTION = {
    "aws": ("cat-1", "team-3", "proj-3"),
    "vercel": ("cat-1", "team-3", "proj-3"),
    "openai": ("cat-2", "team-2", "proj-2"),
    "anthropic": ("cat-2", "team-2", "proj-2"),
    "cohere": ("cat-2", "team-2", "proj-2"),
    "gemini": ("cat-2", "team-2", "proj-2"),
    "cursor": ("cat-2", "team-1", "proj-1"),
}


def slugify(value: str) -> str:
    """Lowercase, dash-separated identifier for a display name."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "unknown"


def _attribution(
    provider: str,
    category: Category | None,
    team: Team | None,
    project: Project | None,
) -> tuple[Category, Team, Project]:
    category_id, team_id, project_id = PROVIDER_ATTRIBUTION.get(
        provider, PROVIDER_ATTRIBUTION["aws"]
    )
    category = category or next(c for c in CATEGORIES if c.id == category_id)
    team = team or next(t for t in TEAMS if t.id == team_id)
    project = project or next(p for p in PROJECTS if p.id == project_id)
    return category, team, project


def _expense(
    expense_id: str,
    timestamp: datetime,
    amount: float,
    provider: str,
    service_name: str,
    attribution: tuple[Category, Team, Project],
    environment: Environment,
    metrics: list[UsageMetric] | None = None,
) -> Expense:
    category, team, project = attribution
    return Expense(
        id=expense_id,
        timestamp=timestamp,
        amount=amount,
        service_id=f"{provider}-{slugify(service_name)}",
        service_name=service_name,
        category_id=category.id,
        category_name=category.name,
        team_id=team.id,
        team_name=team.name,
        project_id=project.id,
        project_name=project.name,
        environment=environment,
        tags=[provider],
        usage_metrics=metrics or [],
    )


def expenses_from_cost_summary(
    summary: CostSummary,
    provider: str,
    category: Category | None = None,
    team: Team | None = None,
    project: Project | None = None,
    environment: Environment = Environment.PROD,
) -> list[Expense]:
    """
    Create one expense per (date, service) entry of a cost summary.

    Args:
        summary: Provider cost summary
        provider: Provider name, used for ids and tags
        category: Category to attribute the spend to (provider default if omitted)
        team: Owning team (provider default if omitted)
        project: Owning project (provider default if omitted)
        environment: Environment the spend belongs to

    Returns:
        Expenses timestamped at midnight UTC of each cost date
    """
    attribution = _attribution(provider, category, team, project)
    expenses = []

    for day, entries in sorted(summary.costs_by_date.items()):
        timestamp = datetime.fromisoformat(day).replace(tzinfo=timezone.utc)
        for entry in entries:
            expenses.append(
                _expense(
                    f"{provider}-{len(expenses)}",
                    timestamp,
                    entry.cost,
                    provider,
                    entry.service_name,
                    attribution,
                    environment,
                )
            )

    logger.debug(f"Synthesised {len(expenses)} expenses from {provider} cost summary")
    return expenses


def expenses_from_openai_usage(
    data: OpenAIUsageData, environment: Environment = Environment.PROD
) -> list[Expense]:
    """One expense per OpenAI usage record, carrying its token count as a metric."""
    attribution = _attribution("openai", None, None, None)
    return [
        _expense(
            f"openai-{record.id}",
            datetime.fromtimestamp(record.created / 1000, tz=timezone.utc),
            record.cost,
            "openai",
            record.model,
            attribution,
            environment,
            [UsageMetric(type="tokens", value=record.usage.total_tokens, unit="tokens")],
        )
        for record in data.data
    ]


def expenses_from_model_billing(
    provider: str, data: ModelBillingData, environment: Environment = Environment.PROD
) -> list[Expense]:
    """One expense per billed request of a model vendor."""
    attribution = _attribution(provider, None, None, None)
    return [
        _expense(
            f"{provider}-{record.id}",
            record.timestamp,
            record.cost,
            provider,
            record.model,
            attribution,
            environment,
            [
                UsageMetric(type="input-tokens", value=record.input_tokens, unit="tokens"),
                UsageMetric(type="output-tokens", value=record.output_tokens, unit="tokens"),
            ],
        )
        for record in data.usage_history
    ]
