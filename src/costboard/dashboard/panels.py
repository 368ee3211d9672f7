"""
Dashboard panels.

Each panel holds the expenses and filters it was given plus its own local
selection, and produces the chart-ready data for its view.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any

from ..analytics.mock_data import CATEGORIES
from ..analytics.models import (
    CostAllocationNode,
    Expense,
    ExpenseByCategory,
    ExpenseByService,
    FilterState,
    MoMChange,
    MonthlyExpense,
)
from ..analytics.transformers import (
    allocation_csv,
    calculate_expenses_by_category,
    calculate_expenses_by_service,
    calculate_mom_change,
    calculate_unit_economics,
    daily_spend_series,
    filter_expenses,
    generate_cost_allocation_data,
    generate_trend_data,
    node_percentage,
)

logger = logging.getLogger(__name__)


class Panel:
    """Base class for panels that work on the filtered expense set."""

    def __init__(
        self,
        expenses: list[Expense],
        filters: FilterState | None = None,
        today: datetime | None = None,
    ):
        self.expenses = expenses
        self.filters = filters or FilterState()
        self.today = today

    @property
    def filtered_expenses(self) -> list[Expense]:
        return filter_expenses(self.expenses, self.filters)


class SpendOverview(Panel):
    """Month-over-month change and recent daily spend."""

    days = 14

    def mom_change(self) -> MoMChange:
        return calculate_mom_change(self.filtered_expenses, today=self.today)

    def daily_spend(self) -> dict[str, float]:
        return daily_spend_series(self.filtered_expenses, days=self.days, today=self.today)

    def chart_data(self) -> dict[str, Any]:
        series = self.daily_spend()
        return {"labels": list(series), "data": list(series.values())}


class ServiceBreakdown(Panel):
    """Spend per category and the top services of the selected category."""

    top_n = 5

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selected_category: str | None = None

    def select_category(self, category_id: str | None):
        self.selected_category = category_id or None

    def category_totals(self) -> list[ExpenseByCategory]:
        return calculate_expenses_by_category(self.filtered_expenses)

    def top_services(self) -> list[ExpenseByService]:
        services = calculate_expenses_by_service(self.filtered_expenses, self.selected_category)
        return services[: self.top_n]

    def total_amount(self) -> float:
        """Combined spend of the services shown."""
        return round(sum(service.amount for service in self.top_services()), 2)


class TrendAnalysis(Panel):
    """Monthly totals with one series per category."""

    months = 6

    def trend(self) -> list[MonthlyExpense]:
        return generate_trend_data(self.filtered_expenses, months=self.months, today=self.today)

    def chart_data(self) -> dict[str, Any]:
        """Labels plus a total series and one series per category that has spend."""
        trend = self.trend()
        datasets = [{"label": "Total", "data": [month.total for month in trend]}]

        for category in CATEGORIES:
            if not any(month.by_category.get(category.id) for month in trend):
                continue
            datasets.append(
                {
                    "label": category.name,
                    "color": category.color,
                    "data": [month.by_category.get(category.id, 0) for month in trend],
                }
            )

        return {"labels": [month.month for month in trend], "datasets": datasets}


class CostAllocationView(Panel):
    """
    Drill-down navigator over the cost allocation tree.

    The view starts at the root; `path` holds the nodes above the current
    one so the breadcrumb trail can be rebuilt and navigated.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tree = generate_cost_allocation_data(self.filtered_expenses)
        self.current: CostAllocationNode | None = None
        self.path: list[CostAllocationNode] = []

    @property
    def view(self) -> CostAllocationNode:
        return self.current or self.tree

    @property
    def breadcrumbs(self) -> list[str]:
        return [node.name for node in self.path[1:]] + ([self.current.name] if self.current else [])

    def drill_down(self, node_id: str) -> bool:
        """Descend into a child of the current view; leaves cannot be entered."""
        node = self.view.child(node_id)
        if node is None or node.is_leaf:
            return False

        self.path.append(self.view)
        self.current = node
        logger.debug(f"Drilled down into {node.name}")
        return True

    def drill_up(self) -> bool:
        if not self.path:
            return False
        parent = self.path.pop()
        self.current = parent if self.path else None
        return True

    def navigate_to(self, index: int) -> bool:
        """Jump to the breadcrumb at `index`, dropping everything below it."""
        if not self.current or not 0 <= index < len(self.path):
            return False

        crumbs = self.path[1:] + [self.current]
        self.current = crumbs[index]
        self.path = self.path[: index + 1]
        return True

    def reset(self):
        self.path = []
        self.current = None

    def percentage(self, node: CostAllocationNode) -> float:
        """Share of the root total."""
        return node_percentage(node.value, self.tree.value)

    def export_csv(self) -> str:
        return allocation_csv(self.tree)


class UsageMetrics(Panel):
    """Unit economics for the selected service or for all filtered spend."""

    top_n = 10

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selected_service = ""

    def service_options(self) -> list[ExpenseByService]:
        return calculate_expenses_by_service(self.filtered_expenses)[: self.top_n]

    def select_service(self, service_id: str | None):
        self.selected_service = service_id or ""

    def service_expenses(self) -> list[Expense]:
        expenses = self.filtered_expenses
        if not self.selected_service:
            return expenses
        return [expense for expense in expenses if expense.service_id == self.selected_service]

    def unit_economics(self) -> dict[str, float]:
        return calculate_unit_economics(self.service_expenses())

    def total_usage_by_type(self) -> dict[str, float]:
        """Summed usage per metric type for the selected service."""
        totals: dict[str, float] = defaultdict(float)
        for expense in self.service_expenses():
            for metric in expense.usage_metrics:
                totals[metric.type] += metric.value
        return dict(totals)
