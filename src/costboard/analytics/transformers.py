"""
Aggregations over expense records.

All functions are pure: they take a list of expenses and return new result
objects without mutating their inputs.
"""

import csv
import io
import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from .mock_data import CATEGORIES, SERVICES
from .models import (
    Category,
    CostAllocationNode,
    Expense,
    ExpenseByCategory,
    ExpenseByService,
    FilterState,
    MoMChange,
    MonthlyExpense,
    Service,
    ensure_utc,
    utc_now,
)

logger = logging.getLogger(__name__)

TREND_BUCKET = timedelta(days=30)
ALLOCATION_CSV_HEADER = ["Team", "Project", "Category", "Service", "Amount"]


def _matches_search(expense: Expense, query: str) -> bool:
    fields = [
        expense.service_name,
        expense.category_name,
        expense.team_name,
        expense.project_name,
        *expense.tags,
    ]
    return any(query in field.lower() for field in fields)


def filter_expenses(expenses: list[Expense], filters: FilterState) -> list[Expense]:
    """
    Apply every active filter to a list of expenses.

    The date range is inclusive at both ends. Empty category, team, project
    and environment selections match everything; the search query matches
    case-insensitively against names and tags.
    """
    start, end = filters.date_range
    query = filters.search_query.lower()
    environments = {env.value for env in filters.environments}

    filtered = []
    for expense in expenses:
        if expense.timestamp < start or expense.timestamp > end:
            continue
        if filters.categories and expense.category_id not in filters.categories:
            continue
        if filters.teams and expense.team_id not in filters.teams:
            continue
        if filters.projects and expense.project_id not in filters.projects:
            continue
        if environments and expense.environment.value not in environments:
            continue
        if query and not _matches_search(expense, query):
            continue
        filtered.append(expense)

    return filtered


def calculate_total_expenses(expenses: list[Expense], start: datetime, end: datetime) -> float:
    """Sum of expenses whose timestamp falls within [start, end]."""
    start, end = ensure_utc(start), ensure_utc(end)
    return sum(expense.amount for expense in expenses if start <= expense.timestamp <= end)


def calculate_mom_change(expenses: list[Expense], today: datetime | None = None) -> MoMChange:
    """
    Compare month-to-date spend against the whole of the previous month.

    Args:
        expenses: Expenses to total
        today: Reference instant (defaults to now, UTC)

    Returns:
        Current and previous month totals and the percentage change, all
        rounded to two places; the change is 0 when last month had no spend
    """
    today = ensure_utc(today) if today else utc_now()
    current_start = today.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    previous_start = current_start - relativedelta(months=1)
    previous_end = current_start - timedelta(microseconds=1)

    current = calculate_total_expenses(expenses, current_start, today)
    previous = calculate_total_expenses(expenses, previous_start, previous_end)
    change = (current - previous) / previous * 100 if previous != 0 else 0

    return MoMChange(
        current_month=round(current, 2),
        previous_month=round(previous, 2),
        percentage_change=round(change, 2),
    )


def calculate_expenses_by_category(
    expenses: list[Expense], categories: list[Category] | None = None
) -> list[ExpenseByCategory]:
    """Totals for every catalog category, largest first; unused categories show 0."""
    categories = CATEGORIES if categories is None else categories
    totals: dict[str, float] = defaultdict(float)
    for expense in expenses:
        totals[expense.category_id] += expense.amount

    results = [
        ExpenseByCategory(
            category_id=category.id,
            category_name=category.name,
            amount=round(totals.get(category.id, 0.0), 2),
            color=category.color,
        )
        for category in categories
    ]
    return sorted(results, key=lambda item: item.amount, reverse=True)


def calculate_expenses_by_service(
    expenses: list[Expense],
    category_id: str | None = None,
    services: list[Service] | None = None,
) -> list[ExpenseByService]:
    """Totals per service, optionally within one category, largest first."""
    services = SERVICES if services is None else services
    catalog = {service.id: service.name for service in services}

    totals: dict[str, float] = {}
    names: dict[str, str] = {}
    for expense in expenses:
        if category_id and expense.category_id != category_id:
            continue
        totals[expense.service_id] = totals.get(expense.service_id, 0.0) + expense.amount
        names.setdefault(expense.service_id, expense.service_name)

    results = [
        ExpenseByService(
            service_id=service_id,
            service_name=catalog.get(service_id) or names.get(service_id) or "Unknown Service",
            amount=round(amount, 2),
        )
        for service_id, amount in totals.items()
    ]
    return sorted(results, key=lambda item: item.amount, reverse=True)


def generate_trend_data(
    expenses: list[Expense], months: int = 6, today: datetime | None = None
) -> list[MonthlyExpense]:
    """
    Monthly totals for the trailing `months` months, oldest first.

    Expenses are bucketed by age in 30-day steps counted back from `today`;
    anything older than the window or in the future is skipped.
    """
    today = ensure_utc(today) if today else utc_now()
    trend = [
        MonthlyExpense(month=(today - relativedelta(months=i)).strftime("%b %Y"))
        for i in range(months - 1, -1, -1)
    ]

    for expense in expenses:
        age_buckets = math.floor((today - expense.timestamp) / TREND_BUCKET)
        index = months - 1 - age_buckets
        if index < 0 or index >= months:
            continue

        bucket = trend[index]
        bucket.total += expense.amount
        bucket.by_category[expense.category_id] = (
            bucket.by_category.get(expense.category_id, 0.0) + expense.amount
        )

    for bucket in trend:
        bucket.total = round(bucket.total, 2)
        bucket.by_category = {key: round(value, 2) for key, value in bucket.by_category.items()}

    return trend


def _build_node(node_id: str, entry: dict[str, Any]) -> CostAllocationNode:
    if "children" not in entry:
        return CostAllocationNode(id=node_id, name=entry["name"], value=round(entry["value"], 2))

    children = [_build_node(child_id, child) for child_id, child in entry["children"].items()]
    return CostAllocationNode(
        id=node_id,
        name=entry["name"],
        value=round(sum(child.value for child in children), 2),
        children=children,
    )


def generate_cost_allocation_data(expenses: list[Expense]) -> CostAllocationNode:
    """
    Build the Total > team > project > category > service allocation tree.

    Children keep the order in which they were first seen. Leaf values are
    rounded to two places and every parent is the sum of its rounded
    children, so the tree adds up exactly at every level.
    """
    teams: dict[str, dict[str, Any]] = {}

    for expense in expenses:
        team = teams.setdefault(expense.team_id, {"name": expense.team_name, "children": {}})
        project = team["children"].setdefault(
            expense.project_id, {"name": expense.project_name, "children": {}}
        )
        category = project["children"].setdefault(
            expense.category_id, {"name": expense.category_name, "children": {}}
        )
        service = category["children"].setdefault(
            expense.service_id, {"name": expense.service_name, "value": 0.0}
        )
        service["value"] += expense.amount

    return _build_node("root", {"name": "Total", "children": teams})


def calculate_unit_economics(expenses: list[Expense]) -> dict[str, float]:
    """
    Cost per unit of usage for each metric type.

    An expense's full amount counts toward every metric it carries. The
    ratio is rounded to six places and is 0 when the metric saw no usage.
    """
    totals: dict[str, dict[str, float]] = {}
    for expense in expenses:
        for metric in expense.usage_metrics:
            entry = totals.setdefault(metric.type, {"cost": 0.0, "usage": 0.0})
            entry["cost"] += expense.amount
            entry["usage"] += metric.value

    return {
        metric_type: round(entry["cost"] / entry["usage"], 6) if entry["usage"] > 0 else 0
        for metric_type, entry in totals.items()
    }


def node_percentage(value: float, total: float) -> float:
    """Share of `total`, in percent to one decimal place."""
    if total <= 0:
        return 0
    return round(value / total * 100, 1)


def format_amount(value: float) -> str:
    """Two-decimal amount without trailing zeros (2500.0 -> "2500", 12.5 -> "12.5")."""
    return f"{value:.2f}".rstrip("0").rstrip(".") or "0"


def flatten_allocation(root: CostAllocationNode) -> list[list[str]]:
    """One row per leaf: its ancestors below the root, its name and its value."""
    rows: list[list[str]] = []

    def visit(node: CostAllocationNode, path: list[str]):
        if node.is_leaf:
            rows.append([*path, node.name, format_amount(node.value)])
            return
        for child in node.children:
            visit(child, [*path, node.name])

    for child in root.children or []:
        visit(child, [])
    return rows


def allocation_csv(root: CostAllocationNode) -> str:
    """CSV export of the allocation tree with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(ALLOCATION_CSV_HEADER)
    writer.writerows(flatten_allocation(root))
    return buffer.getvalue()


def daily_spend_series(
    expenses: list[Expense], days: int = 14, today: datetime | None = None
) -> dict[str, float]:
    """Per-day totals for the trailing `days` days, zero-filled and in date order."""
    today = ensure_utc(today) if today else utc_now()
    series = {
        (today - timedelta(days=i)).date().isoformat(): 0.0 for i in range(days - 1, -1, -1)
    }

    for expense in expenses:
        day = expense.timestamp.date().isoformat()
        if day in series:
            series[day] += expense.amount

    return {day: round(total, 2) for day, total in series.items()}
