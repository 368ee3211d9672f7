"""
Provider data management for the dashboard.

Keeps one FetchState per provider and exposes a fetch coroutine for each
client. Failures are recorded on the state for display, never raised.
"""

import asyncio
import logging
from typing import Any, Callable

from ..clients.aws import AWSService
from ..clients.base import ProviderClientError
from ..clients.cursor import CursorService
from ..clients.model_billing import MODEL_VENDORS, ModelBillingService
from ..clients.openai import OpenAIService
from ..clients.vercel import VercelService
from ..utils.http_client import HTTPClient
from .state import FetchState

logger = logging.getLogger(__name__)

PROVIDERS = ("aws", "openai", "vercel", "cursor", *MODEL_VENDORS)


class CostDataManager:
    """Fetches provider summaries through the proxy and tracks their state."""

    def __init__(self, http_client: HTTPClient | None = None):
        self.http_client = http_client
        self.states: dict[str, FetchState] = {provider: FetchState() for provider in PROVIDERS}
        logger.info("CostDataManager initialized")

    def state(self, provider: str) -> FetchState:
        return self.states[provider]

    async def _run(self, provider: str, load: Callable[[], Any]) -> FetchState:
        state = self.states[provider]
        state.start()
        logger.info(f"Fetching {provider} data")

        try:
            data = await asyncio.to_thread(load)
        except (ProviderClientError, ValueError) as e:
            logger.error(f"Failed to fetch {provider} data: {e}")
            state.fail(str(e))
            return state
        finally:
            state.is_loading = False

        state.succeed(data)
        return state

    async def fetch_aws(
        self,
        access_key_id: str,
        secret_access_key: str,
        region: str,
        start_date: str,
        end_date: str,
    ) -> FetchState:
        service = AWSService(
            access_key_id, secret_access_key, region, http_client=self.http_client
        )
        return await self._run(
            "aws",
            lambda: service.calculate_cost_summary(service.get_cost_data(start_date, end_date)),
        )

    async def fetch_openai(self, api_key: str, start_date: str, end_date: str) -> FetchState:
        service = OpenAIService(api_key, http_client=self.http_client)
        return await self._run(
            "openai",
            lambda: service.calculate_usage_summary(service.get_usage_data(start_date, end_date)),
        )

    async def fetch_vercel(
        self, api_token: str, team_id: str | None, start_date: str, end_date: str
    ) -> FetchState:
        service = VercelService(api_token, team_id, http_client=self.http_client)
        return await self._run(
            "vercel",
            lambda: service.calculate_cost_summary(service.get_cost_data(start_date, end_date)),
        )

    async def fetch_cursor(self, api_key: str, start_date: str, end_date: str) -> FetchState:
        service = CursorService(api_key, http_client=self.http_client)
        return await self._run(
            "cursor",
            lambda: service.calculate_usage_summary(service.get_usage_data(start_date, end_date)),
        )

    async def fetch_model_billing(
        self,
        provider: str,
        api_key: str,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FetchState:
        service = ModelBillingService(provider, api_key, http_client=self.http_client)
        return await self._run(
            service.provider_name, lambda: service.get_billing_data(start_date, end_date)
        )
