"""Dashboard panel logic and provider fetch state."""

from .data_manager import CostDataManager
from .panels import CostAllocationView, ServiceBreakdown, SpendOverview, TrendAnalysis, UsageMetrics
from .state import FetchState, FilterStore
