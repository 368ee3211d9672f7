"""
Fetch and filter state shared by the dashboard panels.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..analytics.models import Environment, FilterState, utc_now


@dataclass
class FetchState:
    """Loading, error and data for one provider fetch."""

    is_loading: bool = False
    error: str | None = None
    data: Any = None
    last_updated: datetime | None = None

    def start(self):
        self.is_loading = True
        self.error = None
        self.data = None

    def succeed(self, data: Any):
        self.is_loading = False
        self.data = data
        self.last_updated = utc_now()

    def fail(self, message: str):
        self.is_loading = False
        self.error = message


class FilterStore:
    """Holds the active filters; each setter replaces them with an updated copy."""

    def __init__(self, filters: FilterState | None = None):
        self.filters = filters or FilterState()

    def set_date_range(self, start: datetime, end: datetime) -> FilterState:
        self.filters = self.filters.with_date_range(start, end)
        return self.filters

    def set_categories(self, categories: list[str]) -> FilterState:
        self.filters = self.filters.with_categories(categories)
        return self.filters

    def set_teams(self, teams: list[str]) -> FilterState:
        self.filters = self.filters.with_teams(teams)
        return self.filters

    def set_projects(self, projects: list[str]) -> FilterState:
        self.filters = self.filters.with_projects(projects)
        return self.filters

    def set_environments(self, environments: list[Environment | str]) -> FilterState:
        self.filters = self.filters.with_environments(environments)
        return self.filters

    def set_search_query(self, query: str) -> FilterState:
        self.filters = self.filters.with_search_query(query)
        return self.filters

    def reset(self) -> FilterState:
        self.filters = FilterState()
        return self.filters
