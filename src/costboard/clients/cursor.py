"""Client for the Cursor usage proxy route."""

from typing import Any

from .base import PAYLOAD_ERRORS, ProviderClient
from .models import CursorUsageSummary


class CursorService(ProviderClient):
    provider_name = "cursor"
    endpoint = "/api/cursor/usage"

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    def get_usage_data(self, start_date: str, end_date: str) -> dict[str, Any]:
        return self._fetch(start_date, end_date)

    def calculate_usage_summary(self, data: dict[str, Any]) -> CursorUsageSummary:
        try:
            usage = data["usage"]
            return CursorUsageSummary(
                total_tokens=usage["total_tokens"],
                total_cost=usage["total_cost"],
                currency=usage["currency"],
                costs_by_service=usage.get("services") or {},
                time_range=data.get("timeRange") or {},
            )
        except PAYLOAD_ERRORS as e:
            raise self._payload_error(e) from e
