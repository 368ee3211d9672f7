"""Client for the Vercel usage proxy route."""

import logging
from typing import Any

from .base import PAYLOAD_ERRORS, ProviderClient, ProviderClientError
from .models import CostSummary, TimeRange

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = (
    "No cost data found for the selected period. This might mean no costs were "
    "incurred or the date range is invalid."
)
STATUS_MESSAGES = {
    401: "Invalid Vercel API token. Please check your credentials.",
    403: "Insufficient permissions. Please ensure your Vercel token has the necessary permissions.",
}


class VercelService(ProviderClient):
    provider_name = "vercel"
    endpoint = "/api/vercel/costs"

    def __init__(self, api_token: str, team_id: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.api_token = api_token
        self.team_id = team_id

    def _headers(self) -> dict[str, str]:
        headers = {"x-vercel-token": self.api_token, "Content-Type": "application/json"}
        if self.team_id:
            headers["x-vercel-team-id"] = self.team_id
        return headers

    def get_cost_data(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Fetch usage for the period; raises when nothing was billed."""
        try:
            data = self._fetch(start_date, end_date)
        except ProviderClientError as e:
            if e.status_code in STATUS_MESSAGES:
                raise ProviderClientError(
                    STATUS_MESSAGES[e.status_code],
                    provider=self.provider_name,
                    status_code=e.status_code,
                ) from e
            raise

        if not isinstance(data, dict) or not data.get("usage"):
            raise ProviderClientError(NO_DATA_MESSAGE, provider=self.provider_name)
        return data

    def calculate_cost_summary(self, data: dict[str, Any]) -> CostSummary:
        """Bucket usage entries by day and by service."""
        try:
            period = data.get("period") or {}
            summary = CostSummary(
                time_range=TimeRange(start=period.get("start"), end=period.get("end"))
            )
            for usage in data.get("usage") or []:
                day = usage["timestamp"].split("T")[0]
                cost = usage.get("cost") or {}
                summary.add_cost(
                    day,
                    usage["service"],
                    float(cost.get("amount", 0) or 0),
                    cost.get("currency", "USD"),
                )
        except PAYLOAD_ERRORS as e:
            raise self._payload_error(e) from e
        return summary
