"""
Shared plumbing for the provider clients.

Clients call the local proxy rather than the vendors directly, passing the
caller's credentials as request headers.
"""

import logging
from typing import Any

import requests

from ..config.settings import get_config
from ..utils.http_client import HTTPClient

logger = logging.getLogger(__name__)

# Raised while reshaping a payload of the wrong shape; covers pydantic ValidationError
PAYLOAD_ERRORS = (KeyError, TypeError, AttributeError, ValueError)


class ProviderClientError(Exception):
    """A proxy call failed; the message is safe to show to a user."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.details = details


class ProviderClient:
    """Base class for a client of one proxy route."""

    provider_name = ""
    endpoint = ""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        http_client: HTTPClient | None = None,
    ):
        if http_client is None:
            client_config = get_config().client
            http_client = HTTPClient(
                base_url or client_config.get("base_url", "http://localhost:3001"),
                timeout=timeout or client_config.get("timeout", 30),
            )
        self.http = http_client

    def _headers(self) -> dict[str, str]:
        """Credential headers sent to the proxy."""
        return {"Content-Type": "application/json"}

    def _fetch(self, start_date: str | None = None, end_date: str | None = None) -> Any:
        """Call the proxy route and return its JSON body."""
        try:
            return self.http.get(
                self.endpoint,
                params={"start_date": start_date, "end_date": end_date},
                headers=self._headers(),
            )
        except requests.HTTPError as e:
            raise self._translate_http_error(e) from e
        except requests.RequestException as e:
            logger.error(f"Error fetching {self.provider_name} data: {e}")
            raise ProviderClientError(
                f"Could not reach the cost proxy: {e}", provider=self.provider_name
            ) from e

    def _translate_http_error(self, error: requests.HTTPError) -> ProviderClientError:
        """Build a client error from the proxy's error body."""
        response = error.response
        status_code = response.status_code if response is not None else None
        message, details = str(error), None

        if response is not None:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
                details = body.get("details")

        logger.error(f"Error fetching {self.provider_name} data: {status_code} {message}")
        return ProviderClientError(
            message, provider=self.provider_name, status_code=status_code, details=details
        )

    def _payload_error(self, error: Exception) -> ProviderClientError:
        """Build a client error for a proxy payload of the wrong shape."""
        logger.error(f"Unexpected {self.provider_name} payload: {error!r}")
        return ProviderClientError(
            f"Unexpected {self.provider_name} response format",
            provider=self.provider_name,
            details=str(error),
        )
