"""
Abstract base provider class for billing API proxies.

Defines the interface every vendor integration implements, the error
hierarchy the proxy maps onto HTTP responses, and the factory used to build
a provider from per-request credentials.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Any

import requests

logger = logging.getLogger(__name__)


class CloudProviderError(Exception):
    """Base exception for provider errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict[str, Any]:
        """Error body returned by the proxy."""
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(CloudProviderError):
    """Missing or rejected credentials."""

    status_code = 401


class PermissionDeniedError(CloudProviderError):
    """Credentials are valid but lack billing permissions."""

    status_code = 403


class InvalidRequestError(CloudProviderError):
    """Request parameters are missing or malformed."""

    status_code = 400


class NotFoundError(CloudProviderError):
    """The vendor returned no data for the request."""

    status_code = 404


class APIError(CloudProviderError):
    """API-related errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        provider: str | None = None,
        details: str | None = None,
        code: str | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message, provider=provider, details=details, status_code=status_code)
        self.code = code
        self.request_id = request_id

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        if self.code:
            body["code"] = self.code
        if self.request_id:
            body["requestId"] = self.request_id
        return body


class RateLimitError(APIError):
    """Rate limiting errors."""

    def __init__(self, message: str, retry_after: int | None = None, provider: str | None = None):
        super().__init__(message, status_code=429, provider=provider)
        self.retry_after = retry_after


class ConfigurationError(CloudProviderError):
    """Configuration-related errors."""

    pass


class BillingProvider(ABC):
    """Abstract base class for billing API providers."""

    def __init__(self, config: dict[str, Any]):
        """
        Initialize the provider with configuration.

        Args:
            config: Provider settings merged with the caller's credentials
        """
        self.config = config
        self.provider_name = self._get_provider_name()

    @abstractmethod
    def _get_provider_name(self) -> str:
        """Return the provider name (aws, openai, vercel, ...)."""
        pass

    @abstractmethod
    def validate_credentials(self) -> None:
        """
        Check that the credentials needed for the vendor call are present.

        Raises:
            AuthenticationError: If a required credential is missing
        """
        pass

    @abstractmethod
    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        """
        Retrieve raw billing data for the specified time period.

        Args:
            start_date: Start date (YYYY-MM-DD)
            end_date: End date (YYYY-MM-DD)

        Returns:
            JSON-serialisable payload returned to the proxy caller

        Raises:
            CloudProviderError: If validation or the vendor call fails
        """
        pass

    def close(self) -> None:
        """Release connections held by the provider."""
        pass

    def parse_date(self, value: str) -> date:
        """Parse a YYYY-MM-DD query value."""
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise InvalidRequestError(
                f"Invalid date '{value}'",
                provider=self.provider_name,
                details="Dates must use the YYYY-MM-DD format",
            )

    def validate_date_range(
        self, start_date: str | None, end_date: str | None, required: bool = True
    ) -> tuple[date | None, date | None]:
        """
        Validate and parse the requested date range.

        Args:
            start_date: Start date string
            end_date: End date string
            required: Whether both dates must be present

        Returns:
            Tuple of parsed dates (None for omitted optional dates)

        Raises:
            InvalidRequestError: If the range is missing, malformed or inverted
        """
        if not start_date or not end_date:
            if required:
                raise InvalidRequestError(
                    "Start date and end date are required", provider=self.provider_name
                )
            return (
                self.parse_date(start_date) if start_date else None,
                self.parse_date(end_date) if end_date else None,
            )

        start = self.parse_date(start_date)
        end = self.parse_date(end_date)
        if start > end:
            raise InvalidRequestError(
                "Start date cannot be after end date", provider=self.provider_name
            )
        return start, end


class RESTBillingProvider(BillingProvider):
    """Base class for vendors exposing a bearer-token usage endpoint over HTTPS."""

    default_base_url = ""
    usage_path = "/usage"
    auth_failure_details = (
        "The API key is invalid or has been revoked. Please check your API key and try again."
    )
    access_denied_details = "Your API key does not have permission to access usage data."

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.base_url = (config.get("base_url") or self.default_base_url).rstrip("/")
        self.timeout = config.get("timeout", 30)
        self.session = requests.Session()

    def validate_credentials(self) -> None:
        if not self.api_key:
            raise AuthenticationError("API key is required", provider=self.provider_name)

    def close(self) -> None:
        self.session.close()

    def _auth_headers(self) -> dict[str, str]:
        """Headers carrying the vendor credential."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _request_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a vendor endpoint and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        query = {key: value for key, value in (params or {}).items() if value is not None}

        logger.info(f"Requesting {self.provider_name} usage from {url}")
        try:
            response = self.session.get(
                url, headers=self._auth_headers(), params=query, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{self.provider_name} request failed: {e}")
            raise APIError(
                "Internal server error",
                status_code=500,
                provider=self.provider_name,
                details=str(e),
            ) from e

        logger.info(f"{self.provider_name} API response status: {response.status_code}")
        if not response.ok:
            self._handle_error_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"{self.provider_name} returned a non-JSON response",
                status_code=502,
                provider=self.provider_name,
                details=str(e),
            ) from e

    def _handle_error_response(self, response: requests.Response):
        """Translate a failed vendor response into a provider exception."""
        vendor_message = self._extract_error_message(response)
        logger.error(
            f"{self.provider_name} API error: status={response.status_code}, error={vendor_message}"
        )

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed",
                provider=self.provider_name,
                details=self.auth_failure_details,
            )
        if response.status_code == 403:
            raise PermissionDeniedError(
                "Access denied",
                provider=self.provider_name,
                details=self.access_denied_details,
            )
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                vendor_message or f"{self.provider_name} rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                provider=self.provider_name,
            )
        raise APIError(
            vendor_message or "Internal server error",
            status_code=response.status_code,
            provider=self.provider_name,
            details=f"Request failed with status code {response.status_code}",
        )

    @staticmethod
    def _extract_error_message(response: requests.Response) -> str | None:
        """Pull the vendor's error text out of an error body."""
        try:
            body = response.json()
        except ValueError:
            return response.text.strip() or None

        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message") or error.get("code")
        if error:
            return str(error)
        return body.get("message")


def shift_end_date(start: date, end: date) -> date:
    """Return an exclusive end date for APIs that require start < end."""
    if start == end:
        return end + timedelta(days=1)
    return end


class ProviderFactory:
    """Factory class for creating provider instances."""

    _providers: dict[str, type] = {}

    @classmethod
    def register_provider(cls, name: str, provider_class: type):
        """Register a provider class with the factory."""
        cls._providers[name.lower()] = provider_class

    @classmethod
    def create_provider(cls, name: str, config: dict[str, Any]) -> BillingProvider:
        """
        Create a provider instance.

        Args:
            name: Provider name
            config: Provider configuration including credentials

        Returns:
            Provider instance

        Raises:
            ValueError: If provider not found
        """
        name = name.lower()
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys())
            raise ValueError(f"Unknown provider '{name}'. Available providers: {available}")

        provider_class = cls._providers[name]
        return provider_class(config)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available provider names."""
        return list(cls._providers.keys())
