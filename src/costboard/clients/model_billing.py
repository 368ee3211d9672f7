"""Client for the Anthropic, Cohere and Gemini billing proxy routes."""

import logging

from .base import PAYLOAD_ERRORS, ProviderClient
from .models import ModelBillingData

logger = logging.getLogger(__name__)

MODEL_VENDORS = ("anthropic", "cohere", "gemini")


class ModelBillingService(ProviderClient):
    """Fetches per-model billing data for one model vendor."""

    def __init__(self, provider: str, api_key: str, **kwargs):
        provider = provider.lower()
        if provider not in MODEL_VENDORS:
            raise ValueError(
                f"Unknown model vendor '{provider}'. Must be one of: {', '.join(MODEL_VENDORS)}"
            )
        super().__init__(**kwargs)
        self.provider_name = provider
        self.endpoint = f"/api/{provider}/usage"
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    def get_billing_data(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> ModelBillingData:
        """Fetch billing data; dates are optional and only sent as a pair."""
        if not (start_date and end_date):
            start_date = end_date = None

        body = self._fetch(start_date, end_date) or {}
        try:
            data = ModelBillingData(
                total_cost=body.get("total_cost") or 0,
                usage_by_model=body.get("usage_by_model") or {},
                usage_history=body.get("usage_history") or [],
            )
        except PAYLOAD_ERRORS as e:
            raise self._payload_error(e) from e
        logger.info(
            f"{self.provider_name} billing: total {data.total_cost}, "
            f"{len(data.usage_history)} usage records"
        )
        return data
