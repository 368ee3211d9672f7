"""Expense models, sample data and the aggregations behind the dashboard panels."""

from .expenses import (
    expenses_from_cost_summary,
    expenses_from_model_billing,
    expenses_from_openai_usage,
)
from .models import (
    CostAllocationNode,
    Environment,
    Expense,
    FilterState,
    MoMChange,
    MonthlyExpense,
)
from .transformers import (
    allocation_csv,
    calculate_expenses_by_category,
    calculate_expenses_by_service,
    calculate_mom_change,
    calculate_total_expenses,
    calculate_unit_economics,
    daily_spend_series,
    filter_expenses,
    flatten_allocation,
    generate_cost_allocation_data,
    generate_trend_data,
    node_percentage,
)
