"""OpenAI usage API provider."""

import logging
from typing import Any

from .base import InvalidRequestError, ProviderFactory, RESTBillingProvider

logger = logging.getLogger(__name__)

PROJECT_KEY_PREFIX = "sk-proj-"


class OpenAIUsageProvider(RESTBillingProvider):
    """Proxies the organisation usage endpoint of the OpenAI API."""

    default_base_url = "https://api.openai.com/v1"
    access_denied_details = (
        "Your API key does not have permission to access usage data. Please ensure you are "
        "using an organization API key with appropriate permissions."
    )

    def _get_provider_name(self) -> str:
        return "openai"

    def validate_credentials(self) -> None:
        super().validate_credentials()

        # Project keys are scoped below the organisation and cannot read usage
        if self.api_key.startswith(PROJECT_KEY_PREFIX):
            raise InvalidRequestError(
                "Invalid API key type",
                provider=self.provider_name,
                details=(
                    "This endpoint requires an organization API key. Project API keys cannot "
                    "access usage data. Please use an organization API key from "
                    "https://platform.openai.com/account/org-settings"
                ),
            )

    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        self.validate_credentials()
        self.validate_date_range(start_date, end_date, required=False)

        data = self._request_json(
            self.usage_path, params={"start_date": start_date, "end_date": end_date}
        )
        logger.debug(f"OpenAI usage response: {data}")
        return data


ProviderFactory.register_provider("openai", OpenAIUsageProvider)
