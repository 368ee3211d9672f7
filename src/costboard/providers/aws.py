"""
AWS Cost Explorer provider implementation.

Proxies daily, per-service unblended cost data from the AWS Cost Explorer API
using the caller's access keys.
"""

import logging
from datetime import date
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .base import (
    APIError,
    AuthenticationError,
    BillingProvider,
    PermissionDeniedError,
    ProviderFactory,
    RateLimitError,
    shift_end_date,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL_CODES = {"InvalidAccessKeyId", "UnrecognizedClientException"}
THROTTLING_CODES = {"ThrottlingException", "Throttling"}


class AWSCostProvider(BillingProvider):
    """AWS Cost Explorer provider implementation."""

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.access_key_id = config.get("access_key_id")
        self.secret_access_key = config.get("secret_access_key")
        self.region = config.get("region") or "us-east-1"
        self.cost_explorer_client = None

        # Cost Explorer request shape; deduplicated while preserving order
        self.granularity = config.get("granularity", "DAILY")
        self.metrics = list(dict.fromkeys(config.get("metrics", ["UnblendedCost"])))
        self.group_by = list(dict.fromkeys(config.get("group_by", ["SERVICE"])))

    def _get_provider_name(self) -> str:
        return "aws"

    def validate_credentials(self) -> None:
        logger.info(
            f"🔵 AWS: credentials - access key: {'present' if self.access_key_id else 'missing'}, "
            f"secret key: {'present' if self.secret_access_key else 'missing'}, region: {self.region}"
        )
        if not self.access_key_id or not self.secret_access_key:
            raise AuthenticationError("AWS credentials are required", provider=self.provider_name)

    def _create_cost_explorer_client(self):
        """Create AWS Cost Explorer client from the request credentials."""
        session = boto3.Session(
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            region_name=self.region,
        )
        config = Config(region_name=self.region, retries={"max_attempts": 3, "mode": "adaptive"})
        return session.client("ce", config=config)

    def _prepare_cost_request_params(self, start: date, end: date) -> dict[str, Any]:
        """Build the get_cost_and_usage request for a date range."""
        return {
            "TimePeriod": {
                "Start": start.isoformat(),
                "End": shift_end_date(start, end).isoformat(),
            },
            "Granularity": self.granularity,
            "Metrics": self.metrics,
            "GroupBy": [{"Type": "DIMENSION", "Key": key} for key in self.group_by],
        }

    async def get_cost_data(self, start_date: str | None, end_date: str | None) -> dict[str, Any]:
        """Retrieve every page of daily service costs from AWS Cost Explorer."""
        self.validate_credentials()
        start, end = self.validate_date_range(start_date, end_date)

        if self.cost_explorer_client is None:
            self.cost_explorer_client = self._create_cost_explorer_client()

        params = self._prepare_cost_request_params(start, end)
        results: list[dict[str, Any]] = []
        next_token = None
        page = 0

        try:
            while True:
                page += 1
                if next_token:
                    params["NextPageToken"] = next_token
                logger.debug(f"🔵 AWS: Requesting page {page} with params {params}")

                response = self.cost_explorer_client.get_cost_and_usage(**params)
                results.extend(response.get("ResultsByTime", []))
                next_token = response.get("NextPageToken")

                logger.debug(f"🔵 AWS: Page {page} received, next token present: {bool(next_token)}")
                if not next_token:
                    break
        except ClientError as e:
            self._handle_client_error(e)
        except BotoCoreError as e:
            logger.error(f"🔵 AWS: Cost Explorer request failed: {e}")
            raise APIError(str(e), status_code=500, provider=self.provider_name) from e

        logger.info(f"🔵 AWS: Fetched {len(results)} daily entries in {page} page(s)")
        return {"ResultsByTime": results}

    def _handle_client_error(self, error: ClientError):
        """Map AWS client errors onto provider exceptions."""
        error_info = error.response.get("Error", {})
        error_code = error_info.get("Code", "Unknown")
        error_message = error_info.get("Message", str(error))
        metadata = error.response.get("ResponseMetadata", {})

        logger.error(
            f"🔵 AWS: Cost Explorer error - code: {error_code}, message: {error_message}, "
            f"request id: {metadata.get('RequestId')}, status: {metadata.get('HTTPStatusCode')}"
        )

        if error_code in INVALID_CREDENTIAL_CODES:
            raise AuthenticationError(
                "Invalid AWS credentials. Please check your Access Key ID and Secret Access Key.",
                provider=self.provider_name,
            )
        if error_code == "AccessDeniedException":
            raise PermissionDeniedError(
                "Insufficient permissions. Please ensure your AWS credentials have "
                "ce:GetCostAndUsage permissions.",
                provider=self.provider_name,
            )
        if error_code in THROTTLING_CODES:
            raise RateLimitError(
                "AWS API rate limit exceeded. Please wait a moment and try again.",
                provider=self.provider_name,
            )
        raise APIError(
            error_message,
            status_code=metadata.get("HTTPStatusCode") or 500,
            provider=self.provider_name,
            code=error_code,
            request_id=metadata.get("RequestId"),
        )


# Register the AWS provider with the factory
ProviderFactory.register_provider("aws", AWSCostProvider)
