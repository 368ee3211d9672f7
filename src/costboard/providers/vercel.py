"""Vercel usage API provider."""

import logging
from typing import Any

from .base import AuthenticationError, NotFoundError, ProviderFactory, RESTBillingProvider

logger = logging.getLogger(__name__)


class VercelCostProvider(RESTBillingProvider):
    """Proxies the Vercel v2 usage endpoint for a personal account or team."""

    default_base_url = "https://api.vercel.com/v2"
    auth_failure_details = "The Vercel API token is invalid or has expired."
    access_denied_details = (
        "Your Vercel token does not have permission to read usage for this team."
    )

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.api_key = config.get("api_token") or config.get("api_key")
        self.team_id = config.get("team_id")

    def _get_provider_name(self) -> str:
        return "vercel"

    def validate_credentials(self) -> None:
        if not self.api_key:
            raise AuthenticationError("Vercel API token is required", provider=self.provider_name)

    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        self.validate_credentials()
        self.validate_date_range(start_date, end_date)

        data = self._request_json(
            self.usage_path,
            params={"teamId": self.team_id, "from": start_date, "to": end_date},
        )

        usage = data.get("usage") if isinstance(data, dict) else None
        if usage is None:
            logger.warning(f"Vercel returned no usage for {start_date} to {end_date}")
            raise NotFoundError(
                "No usage data found for the selected period", provider=self.provider_name
            )

        return {"usage": usage, "period": {"start": start_date, "end": end_date}}


ProviderFactory.register_provider("vercel", VercelCostProvider)
