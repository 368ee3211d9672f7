"""
Normalised per-provider summaries built by the provider clients.

Each client reshapes its vendor payload into one of these models so the
dashboard and the aggregation layer can treat providers uniformly.
"""

import re
from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ServiceCost(BaseModel):
    cost: float = 0.0
    unit: str = "USD"


class DailyServiceCost(BaseModel):
    service_name: str
    cost: float


class TimeRange(BaseModel):
    start: str | None = None
    end: str | None = None


class CostSummary(BaseModel):
    """Total, per-service and per-day costs for one provider and period."""

    total_cost: float = 0.0
    costs_by_service: dict[str, ServiceCost] = Field(default_factory=dict)
    costs_by_date: dict[str, list[DailyServiceCost]] = Field(default_factory=dict)
    time_range: TimeRange = Field(default_factory=TimeRange)

    @field_validator("costs_by_date")
    @classmethod
    def validate_date_keys(
        cls, v: dict[str, list[DailyServiceCost]]
    ) -> dict[str, list[DailyServiceCost]]:
        """Date buckets are keyed by YYYY-MM-DD."""
        for key in v:
            if not DATE_KEY.match(key):
                raise ValueError(f"Cost date key '{key}' is not in YYYY-MM-DD format")
        return v

    def add_cost(self, day: str, service_name: str, cost: float, unit: str = "USD") -> None:
        """Record one service's cost for a day and roll it into the totals."""
        if not DATE_KEY.match(day):
            raise ValueError(f"Cost date key '{day}' is not in YYYY-MM-DD format")
        service = self.costs_by_service.setdefault(service_name, ServiceCost(unit=unit))
        service.cost += cost
        self.total_cost += cost
        self.costs_by_date.setdefault(day, []).append(
            DailyServiceCost(service_name=service_name, cost=cost)
        )

    def daily_totals(self) -> dict[str, float]:
        """Total cost per day, in date order."""
        return {
            day: round(sum(entry.cost for entry in entries), 2)
            for day, entries in sorted(self.costs_by_date.items())
        }


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class OpenAIUsageRecord(BaseModel):
    id: str
    object: str = "usage"
    created: int
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    cost: float = 0.0


class OpenAIUsageData(BaseModel):
    object: str = "list"
    data: list[OpenAIUsageRecord] = Field(default_factory=list)


class ModelUsage(BaseModel):
    cost: float = 0.0
    tokens: int = 0


class OpenAIUsageSummary(BaseModel):
    total_cost: float = 0.0
    total_tokens: int = 0
    usage_by_model: dict[str, ModelUsage] = Field(default_factory=dict)


class CursorServiceUsage(BaseModel):
    tokens: int = 0
    cost: float = 0.0


class CursorUsageSummary(BaseModel):
    total_tokens: int
    total_cost: float
    currency: str
    costs_by_service: dict[str, CursorServiceUsage] = Field(default_factory=dict)
    time_range: TimeRange = Field(default_factory=TimeRange)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate and normalize currency code."""
        if not v or not v.strip():
            raise ValueError("Currency must be specified")
        return v.upper().strip()


class ModelTokenCost(BaseModel):
    input_tokens: int = Field(0, validation_alias=AliasChoices("input_tokens", "inputTokens"))
    output_tokens: int = Field(0, validation_alias=AliasChoices("output_tokens", "outputTokens"))
    cost: float = 0.0


class ModelUsageRecord(BaseModel):
    """One billed request reported by a model vendor."""

    id: str
    timestamp: datetime
    model: str
    input_tokens: int = Field(0, validation_alias=AliasChoices("input_tokens", "inputTokens"))
    output_tokens: int = Field(0, validation_alias=AliasChoices("output_tokens", "outputTokens"))
    cost: float = 0.0
    request_id: str | None = Field(
        None, validation_alias=AliasChoices("request_id", "requestId")
    )


class ModelBillingData(BaseModel):
    """Billing data returned for Anthropic, Cohere and Gemini."""

    total_cost: float = Field(0.0, validation_alias=AliasChoices("total_cost", "totalCost"))
    usage_by_model: dict[str, ModelTokenCost] = Field(
        default_factory=dict, validation_alias=AliasChoices("usage_by_model", "usageByModel")
    )
    usage_history: list[ModelUsageRecord] = Field(
        default_factory=list, validation_alias=AliasChoices("usage_history", "usageHistory")
    )

    @model_validator(mode="after")
    def validate_costs(self):
        """Costs reported by vendors are never negative."""
        if self.total_cost < 0:
            raise ValueError(f"Total cost {self.total_cost} cannot be negative")
        return self
