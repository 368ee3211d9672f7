"""
Model-vendor billing providers (Anthropic, Cohere, Gemini).

The three vendors share one response shape: a total cost, a per-model token
and cost breakdown, and a history of individual usage records.
"""

import logging
from typing import Any

from .base import ProviderFactory, RESTBillingProvider

logger = logging.getLogger(__name__)

MODEL_VENDORS = ("anthropic", "cohere", "gemini")


class ModelBillingProvider(RESTBillingProvider):
    """Base class for per-model usage billing endpoints."""

    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        self.validate_credentials()
        start, end = self.validate_date_range(start_date, end_date, required=False)

        # Dates are only forwarded as a pair
        params = {}
        if start and end:
            params = {"start_date": start_date, "end_date": end_date}

        data = self._request_json(self.usage_path, params=params)
        if not isinstance(data, dict):
            logger.warning(f"{self.provider_name} returned an unexpected usage payload")
            data = {}

        return {
            "total_cost": data.get("total_cost") or 0,
            "usage_by_model": data.get("usage_by_model") or {},
            "usage_history": data.get("usage_history") or [],
        }


class AnthropicBillingProvider(ModelBillingProvider):
    default_base_url = "https://api.anthropic.com/v1"

    def _get_provider_name(self) -> str:
        return "anthropic"

    def _auth_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.config.get("api_version", "2023-06-01"),
            "Content-Type": "application/json",
        }


class CohereBillingProvider(ModelBillingProvider):
    default_base_url = "https://api.cohere.ai/v1"

    def _get_provider_name(self) -> str:
        return "cohere"


class GeminiBillingProvider(ModelBillingProvider):
    default_base_url = "https://generativelanguage.googleapis.com/v1"

    def _get_provider_name(self) -> str:
        return "gemini"

    def _auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}


ProviderFactory.register_provider("anthropic", AnthropicBillingProvider)
ProviderFactory.register_provider("cohere", CohereBillingProvider)
ProviderFactory.register_provider("gemini", GeminiBillingProvider)
