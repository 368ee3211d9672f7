"""
Sample catalog and expense data.

Used by the report command and the dashboard when no provider data has been
fetched, and as a deterministic fixture when a seed is given.
"""

import random
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from .models import (
    Category,
    Environment,
    Expense,
    MonthlyExpense,
    Project,
    Service,
    Team,
    UsageMetric,
    ensure_utc,
    utc_now,
)

CATEGORIES = [
    Category(id="cat-1", name="Cloud Infrastructure", color="#3B82F6"),
    Category(id="cat-2", name="AI/ML Services", color="#10B981"),
    Category(id="cat-3", name="Observability", color="#8B5CF6"),
]

SERVICES = [
    Service(id="aws", name="AWS", category_id="cat-1"),
    Service(id="gcp", name="Google Cloud", category_id="cat-1"),
    Service(id="anthropic", name="Anthropic", category_id="cat-2"),
    Service(id="openai", name="OpenAI", category_id="cat-2"),
    Service(id="datadog", name="Datadog", category_id="cat-3"),
]

TEAMS = [
    Team(id="team-1", name="Engineering"),
    Team(id="team-2", name="Data Science"),
    Team(id="team-3", name="Platform"),
]

PROJECTS = [
    Project(id="proj-1", name="Core Platform", team_id="team-1"),
    Project(id="proj-2", name="AI Services", team_id="team-2"),
    Project(id="proj-3", name="Infrastructure", team_id="team-3"),
]

TAGS = [
    "production",
    "development",
    "testing",
    "internal",
    "external",
    "customer-facing",
    "backend",
    "frontend",
    "data",
    "api",
    "auth",
    "storage",
    "compute",
    "serverless",
    "managed-service",
    "legacy",
]

METRIC_TYPES = [
    "api-calls",
    "storage-gb",
    "compute-hours",
    "requests",
    "bandwidth-gb",
    "transactions",
    "users",
    "data-processed-gb",
]

# Production spend is weighted higher than staging and dev
ENVIRONMENT_MULTIPLIERS = {
    Environment.DEV: 1.0,
    Environment.STAGING: 1.5,
    Environment.PROD: 3.0,
}

HISTORY_DAYS = 180


def category_by_id(category_id: str) -> Category | None:
    return next((category for category in CATEGORIES if category.id == category_id), None)


def service_by_id(service_id: str) -> Service | None:
    return next((service for service in SERVICES if service.id == service_id), None)


def generate_expenses(
    count: int = 500, seed: int | None = None, today: datetime | None = None
) -> list[Expense]:
    """
    Generate random expenses spread over the last 180 days.

    Args:
        count: Number of expenses to generate
        seed: Seed for a reproducible sequence
        today: Reference instant (defaults to now, UTC)

    Returns:
        List of generated expenses
    """
    rng = random.Random(seed)
    today = ensure_utc(today) if today else utc_now()
    expenses = []

    for i in range(count):
        days_ago = rng.randint(0, HISTORY_DAYS)
        service = rng.choice(SERVICES)
        category = category_by_id(service.category_id)
        team = rng.choice(TEAMS)
        project = rng.choice([p for p in PROJECTS if p.team_id == team.id])
        environment = rng.choice(list(Environment))

        base_amount = rng.randint(100, 1000)
        amount = round(base_amount * ENVIRONMENT_MULTIPLIERS[environment], 2)

        expenses.append(
            Expense(
                id=f"expense-{i}",
                timestamp=today - timedelta(days=days_ago),
                amount=amount,
                service_id=service.id,
                service_name=service.name,
                category_id=category.id,
                category_name=category.name,
                team_id=team.id,
                team_name=team.name,
                project_id=project.id,
                project_name=project.name,
                environment=environment,
                tags=rng.sample(TAGS, rng.randint(1, 4)),
                usage_metrics=[
                    UsageMetric(type=rng.choice(METRIC_TYPES), value=rng.randint(10, 10000))
                ],
            )
        )

    return expenses


def generate_monthly_trends(
    months: int = 7, seed: int | None = None, today: datetime | None = None
) -> list[MonthlyExpense]:
    """Per-category monthly totals with a simulated 10% monthly growth."""
    rng = random.Random(seed)
    today = ensure_utc(today) if today else utc_now()
    trends = []

    for i in range(months - 1, -1, -1):
        month = today - relativedelta(months=i)
        growth_factor = 1 + (months - 1 - i) * 0.1
        trend = MonthlyExpense(month=month.strftime("%b %Y"))
        total = 0.0

        for category in CATEGORIES:
            amount = rng.randint(1000, 5000) * growth_factor
            trend.by_category[category.id] = round(amount, 2)
            total += amount

        trend.total = round(total, 2)
        trends.append(trend)

    return trends


def _sample_expense(
    expense_id: str,
    amount: float,
    service_id: str,
    team_id: str,
    project_id: str,
    tags: list[str],
    metrics: list[tuple[str, float, str]],
) -> Expense:
    service = service_by_id(service_id)
    category = category_by_id(service.category_id)
    team = next(t for t in TEAMS if t.id == team_id)
    project = next(p for p in PROJECTS if p.id == project_id)
    return Expense(
        id=expense_id,
        timestamp="2024-03-01T00:00:00Z",
        amount=amount,
        service_id=service.id,
        service_name=service.name,
        category_id=category.id,
        category_name=category.name,
        team_id=team.id,
        team_name=team.name,
        project_id=project.id,
        project_name=project.name,
        environment=Environment.PROD,
        tags=tags,
        usage_metrics=[UsageMetric(type=t, value=v, unit=u) for t, v, u in metrics],
    )


def sample_expenses() -> list[Expense]:
    """The fixed five-expense sample set, one per catalog service."""
    infra_tags = ["production", "compute", "storage"]
    ai_tags = ["production", "ai", "ml"]
    return [
        _sample_expense(
            "1", 2500.00, "aws", "team-1", "proj-1", infra_tags,
            [("compute-hours", 720, "hours"), ("storage-gb", 500, "GB")],
        ),
        _sample_expense(
            "2", 1800.00, "gcp", "team-1", "proj-1", infra_tags,
            [("compute-hours", 600, "hours"), ("storage-gb", 300, "GB")],
        ),
        _sample_expense(
            "3", 1200.00, "anthropic", "team-2", "proj-2", ai_tags,
            [("api-calls", 50000, "calls"), ("tokens", 1000000, "tokens")],
        ),
        _sample_expense(
            "4", 1500.00, "openai", "team-2", "proj-2", ai_tags,
            [("api-calls", 75000, "calls"), ("tokens", 1500000, "tokens")],
        ),
        _sample_expense(
            "5", 800.00, "datadog", "team-3", "proj-3",
            ["production", "monitoring", "observability"],
            [("hosts-monitored", 50, "hosts"), ("custom-metrics", 1000, "metrics")],
        ),
    ]
