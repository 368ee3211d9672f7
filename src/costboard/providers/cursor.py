"""
Cursor usage provider.

Cursor does not publish a billing API, so this provider validates the request
and answers with a fixed usage payload for the requested period.
"""

import logging
from typing import Any

from .base import AuthenticationError, BillingProvider, ProviderFactory

logger = logging.getLogger(__name__)

MOCK_SERVICES = {
    "code-completion": {"tokens": 1_000_000, "cost": 10.00},
    "code-analysis": {"tokens": 500_000, "cost": 5.00},
}


class CursorUsageProvider(BillingProvider):
    """Mock Cursor usage provider."""

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.currency = config.get("currency", "USD")

    def _get_provider_name(self) -> str:
        return "cursor"

    def validate_credentials(self) -> None:
        if not self.api_key:
            raise AuthenticationError("API key is required", provider=self.provider_name)

    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        self.validate_credentials()
        self.validate_date_range(start_date, end_date, required=False)
        logger.info(f"Serving mock Cursor usage for {start_date} to {end_date}")

        services = {name: dict(values) for name, values in MOCK_SERVICES.items()}
        return {
            "usage": {
                "total_tokens": sum(service["tokens"] for service in services.values()),
                "total_cost": round(sum(service["cost"] for service in services.values()), 2),
                "currency": self.currency,
                "services": services,
            },
            "timeRange": {"start": start_date, "end": end_date},
        }


ProviderFactory.register_provider("cursor", CursorUsageProvider)
