"""Client for the OpenAI usage proxy route."""

from typing import Any

from dateutil import tz
from dateutil.parser import isoparse

from .base import PAYLOAD_ERRORS, ProviderClient
from .models import ModelUsage, OpenAIUsageData, OpenAIUsageRecord, OpenAIUsageSummary, TokenUsage


def to_epoch_ms(value: str) -> int:
    """Milliseconds since the epoch for an ISO date; date-only values are UTC."""
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return int(parsed.timestamp() * 1000)


class OpenAIService(ProviderClient):
    provider_name = "openai"
    endpoint = "/api/openai/usage"

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    def get_usage_data(self, start_date: str, end_date: str) -> OpenAIUsageData:
        """Fetch usage and convert vendor entries into usage records."""
        body = self._fetch(start_date, end_date) or {}
        try:
            return OpenAIUsageData(
                data=[self._to_record(item) for item in body.get("data") or []]
            )
        except PAYLOAD_ERRORS as e:
            raise self._payload_error(e) from e

    @staticmethod
    def _to_record(item: dict[str, Any]) -> OpenAIUsageRecord:
        return OpenAIUsageRecord(
            id=item["id"],
            created=to_epoch_ms(item["date"]),
            model=item["model"],
            usage=TokenUsage(
                prompt_tokens=item.get("prompt_tokens") or 0,
                completion_tokens=item.get("completion_tokens") or 0,
                total_tokens=item.get("total_tokens") or 0,
            ),
            cost=item.get("cost") or 0,
        )

    def calculate_usage_summary(self, data: OpenAIUsageData) -> OpenAIUsageSummary:
        summary = OpenAIUsageSummary()
        for record in data.data:
            summary.total_cost += record.cost
            summary.total_tokens += record.usage.total_tokens

            model_usage = summary.usage_by_model.setdefault(record.model, ModelUsage())
            model_usage.cost += record.cost
            model_usage.tokens += record.usage.total_tokens
        return summary
