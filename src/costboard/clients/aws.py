"""Client for the AWS Cost Explorer proxy route."""

import logging
from typing import Any

from .base import PAYLOAD_ERRORS, ProviderClient
from .models import CostSummary, TimeRange

logger = logging.getLogger(__name__)

UNGROUPED_SERVICE = "Total"


class AWSService(ProviderClient):
    """Fetches daily per-service AWS costs and folds them into a CostSummary."""

    provider_name = "aws"
    endpoint = "/api/aws/costs"

    def __init__(
        self,
        access_key_id: str,
        secret_access_key: str,
        region: str = "us-east-1",
        metric: str = "UnblendedCost",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.region = region
        self.metric = metric

    def _headers(self) -> dict[str, str]:
        return {
            "x-aws-access-key": self.access_key_id,
            "x-aws-secret-key": self.secret_access_key,
            "x-aws-region": self.region,
            "Content-Type": "application/json",
        }

    def get_cost_data(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Return the raw ResultsByTime payload for the period."""
        return self._fetch(start_date, end_date)

    def calculate_cost_summary(self, data: dict[str, Any]) -> CostSummary:
        """
        Fold every day's service groups into a CostSummary.

        Days reported without groups contribute their period total under a
        single "Total" service so no spend is dropped.
        """
        try:
            return self._fold_results(data)
        except PAYLOAD_ERRORS as e:
            raise self._payload_error(e) from e

    def _fold_results(self, data: dict[str, Any]) -> CostSummary:
        results = data.get("ResultsByTime") or []
        summary = CostSummary()

        for entry in results:
            period = entry.get("TimePeriod", {})
            day = period.get("Start")
            if not day:
                logger.warning(f"🔵 AWS: Skipping result without a time period: {entry}")
                continue

            groups = entry.get("Groups") or []
            if groups:
                for group in groups:
                    keys = group.get("Keys") or [UNGROUPED_SERVICE]
                    amount, unit = self._metric_value(group.get("Metrics", {}))
                    summary.add_cost(day, keys[0], amount, unit)
            elif entry.get("Total"):
                amount, unit = self._metric_value(entry["Total"])
                summary.add_cost(day, UNGROUPED_SERVICE, amount, unit)

        if results:
            summary.time_range = TimeRange(
                start=results[0].get("TimePeriod", {}).get("Start"),
                end=results[-1].get("TimePeriod", {}).get("End"),
            )
        return summary

    def _metric_value(self, metrics: dict[str, Any]) -> tuple[float, str]:
        metric = metrics.get(self.metric) or {}
        return float(metric.get("Amount", 0) or 0), metric.get("Unit", "USD")
