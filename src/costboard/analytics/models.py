"""
Expense records, catalog entities and aggregation results.

Expenses are the unit every dashboard aggregation works on; they are either
generated sample data or synthesised from a provider cost summary.
"""

from datetime import datetime, timezone
from enum import Enum

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, field_validator, model_validator


class Environment(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UsageMetric(BaseModel):
    type: str
    value: float
    unit: str | None = None


class Expense(BaseModel):
    """A single unit of spend attributed to a service, team and project."""

    id: str
    timestamp: datetime
    amount: float
    service_id: str
    service_name: str
    category_id: str
    category_name: str
    team_id: str
    team_name: str
    project_id: str
    project_name: str
    environment: Environment
    tags: list[str] = Field(default_factory=list)
    usage_metrics: list[UsageMetric] = Field(default_factory=list)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        """Strip whitespace and drop empty tags."""
        return [tag.strip() for tag in v if tag and tag.strip()]


class Category(BaseModel):
    id: str
    name: str
    color: str


class Service(BaseModel):
    id: str
    name: str
    category_id: str


class Team(BaseModel):
    id: str
    name: str


class Project(BaseModel):
    id: str
    name: str
    team_id: str


def default_date_range() -> tuple[datetime, datetime]:
    now = utc_now()
    return now - relativedelta(months=6), now


class FilterState(BaseModel):
    """
    Active dashboard filters.

    An empty selection list matches everything. Setters return an updated
    copy and leave the original untouched.
    """

    date_range: tuple[datetime, datetime] = Field(default_factory=default_date_range)
    categories: list[str] = Field(default_factory=list)
    teams: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    environments: list[Environment] = Field(default_factory=lambda: list(Environment))
    search_query: str = ""

    @field_validator("date_range")
    @classmethod
    def normalize_date_range(cls, v: tuple[datetime, datetime]) -> tuple[datetime, datetime]:
        return ensure_utc(v[0]), ensure_utc(v[1])

    @model_validator(mode="after")
    def validate_date_order(self):
        start, end = self.date_range
        if start > end:
            raise ValueError(f"Filter start {start} must not be after end {end}")
        return self

    def with_date_range(self, start: datetime, end: datetime) -> "FilterState":
        return self._updated(date_range=(start, end))

    def with_categories(self, categories: list[str]) -> "FilterState":
        return self._updated(categories=list(categories))

    def with_teams(self, teams: list[str]) -> "FilterState":
        return self._updated(teams=list(teams))

    def with_projects(self, projects: list[str]) -> "FilterState":
        return self._updated(projects=list(projects))

    def with_environments(self, environments: list[Environment | str]) -> "FilterState":
        return self._updated(environments=list(environments))

    def with_search_query(self, query: str) -> "FilterState":
        return self._updated(search_query=query)

    def _updated(self, **changes) -> "FilterState":
        # Rebuild through validation so setters get the same normalisation as construction
        return FilterState.model_validate({**self.model_dump(), **changes})


class ExpenseByCategory(BaseModel):
    category_id: str
    category_name: str
    amount: float
    color: str


class ExpenseByService(BaseModel):
    service_id: str
    service_name: str
    amount: float


class MonthlyExpense(BaseModel):
    month: str
    total: float = 0.0
    by_category: dict[str, float] = Field(default_factory=dict)


class MoMChange(BaseModel):
    current_month: float
    previous_month: float
    percentage_change: float


class CostAllocationNode(BaseModel):
    """Node of the team, project, category and service allocation tree."""

    id: str
    name: str
    value: float = 0.0
    children: list["CostAllocationNode"] | None = None

    def child(self, node_id: str) -> "CostAllocationNode | None":
        for node in self.children or []:
            if node.id == node_id:
                return node
        return None

    @property
    def is_leaf(self) -> bool:
        return not self.children


CostAllocationNode.model_rebuild()
