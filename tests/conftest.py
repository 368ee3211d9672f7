"""
Pytest configuration and shared fixtures for costboard tests.

This module provides common fixtures used across the provider, client,
analytics, dashboard and API test modules.
"""

import json
import os
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from costboard.analytics.mock_data import sample_expenses
from costboard.analytics.models import Environment, Expense, FilterState, UsageMetric
from costboard.utils.http_client import HTTPClient


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "aws: mark test as AWS-specific")


# Environment fixture
@pytest.fixture
def clean_env() -> Generator[dict[str, str], None, None]:
    """Provide a clean environment for testing."""
    original_env = os.environ.copy()
    env_vars_to_clear = [
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_REGION",
        "COSTBOARD_API_KEY",
    ]

    for var in env_vars_to_clear:
        os.environ.pop(var, None)

    yield os.environ

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


# Time fixtures
@pytest.fixture
def fixed_now() -> datetime:
    """Reference instant used by date-sensitive aggregations."""
    return datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


# Expense fixtures
@pytest.fixture
def sample_expense_set() -> list[Expense]:
    """The fixed five-expense sample set (all dated 2024-03-01)."""
    return sample_expenses()


@pytest.fixture
def sample_filters() -> FilterState:
    """Filters whose date range covers the sample expense set."""
    return FilterState(
        date_range=(
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 12, 31, tzinfo=timezone.utc),
        )
    )


@pytest.fixture
def make_expense():
    """Factory for expenses with sensible defaults."""
    counter = {"n": 0}

    def factory(**overrides) -> Expense:
        counter["n"] += 1
        data = {
            "id": f"test-{counter['n']}",
            "timestamp": datetime(2024, 3, 1, tzinfo=timezone.utc),
            "amount": 100.0,
            "service_id": "aws",
            "service_name": "AWS",
            "category_id": "cat-1",
            "category_name": "Cloud Infrastructure",
            "team_id": "team-1",
            "team_name": "Engineering",
            "project_id": "proj-1",
            "project_name": "Core Platform",
            "environment": Environment.PROD,
            "tags": [],
            "usage_metrics": [],
        }
        data.update(overrides)
        data["usage_metrics"] = [
            m if isinstance(m, UsageMetric) else UsageMetric(**m) for m in data["usage_metrics"]
        ]
        return Expense(**data)

    return factory


# HTTP fixtures
@pytest.fixture
def make_response():
    """Factory for real requests.Response objects with a JSON or text body."""

    def factory(
        status_code: int = 200,
        json_data: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        response.url = "https://vendor.test/usage"
        response.encoding = "utf-8"
        if text is not None:
            response._content = text.encode("utf-8")
        else:
            response._content = json.dumps(json_data if json_data is not None else {}).encode()
            response.headers["Content-Type"] = "application/json"
        response.headers.update(headers or {})
        return response

    return factory


@pytest.fixture
def mock_http_client():
    """HTTPClient double for provider client tests."""
    return MagicMock(spec=HTTPClient)


# Mock vendor responses
@pytest.fixture
def aws_cost_response() -> dict[str, Any]:
    """Mock AWS Cost Explorer results across three days."""
    return {
        "ResultsByTime": [
            {
                "TimePeriod": {"Start": "2024-03-01", "End": "2024-03-02"},
                "Total": {},
                "Groups": [
                    {
                        "Keys": ["Amazon Elastic Compute Cloud - Compute"],
                        "Metrics": {"UnblendedCost": {"Amount": "10.50", "Unit": "USD"}},
                    },
                    {
                        "Keys": ["Amazon Simple Storage Service"],
                        "Metrics": {"UnblendedCost": {"Amount": "2.25", "Unit": "USD"}},
                    },
                ],
            },
            {
                "TimePeriod": {"Start": "2024-03-02", "End": "2024-03-03"},
                "Groups": [
                    {
                        "Keys": ["Amazon Elastic Compute Cloud - Compute"],
                        "Metrics": {"UnblendedCost": {"Amount": "4.50", "Unit": "USD"}},
                    }
                ],
            },
            {
                "TimePeriod": {"Start": "2024-03-03", "End": "2024-03-04"},
                "Total": {"UnblendedCost": {"Amount": "1.00", "Unit": "USD"}},
                "Groups": [],
            },
        ]
    }


@pytest.fixture
def mock_aws_cost_explorer_client(aws_cost_response):
    """Mock AWS Cost Explorer client returning a single page."""
    mock_client = MagicMock()
    mock_client.get_cost_and_usage.return_value = aws_cost_response
    return mock_client


@pytest.fixture
def openai_usage_response() -> dict[str, Any]:
    """Mock OpenAI usage payload."""
    return {
        "object": "list",
        "data": [
            {
                "id": "usage-1",
                "date": "2024-03-01",
                "model": "gpt-4",
                "prompt_tokens": 100,
                "completion_tokens": 50,
                "total_tokens": 150,
                "cost": 0.5,
            },
            {
                "id": "usage-2",
                "date": "2024-03-02T00:00:00Z",
                "model": "gpt-4",
                "total_tokens": 30,
                "cost": 0.25,
            },
            {"id": "usage-3", "date": "2024-03-02", "model": "gpt-3.5-turbo"},
        ],
    }


@pytest.fixture
def vercel_usage_response() -> dict[str, Any]:
    """Mock Vercel usage payload as returned by the proxy."""
    return {
        "usage": [
            {
                "timestamp": "2024-03-01T10:00:00Z",
                "service": "Bandwidth",
                "cost": {"amount": 1.5, "currency": "USD"},
                "usage": {"value": 120, "unit": "GB"},
            },
            {
                "timestamp": "2024-03-01T18:00:00Z",
                "service": "Serverless Functions",
                "cost": {"amount": 2.0, "currency": "USD"},
                "usage": {"value": 1000, "unit": "GB-hours"},
            },
            {
                "timestamp": "2024-03-02T01:00:00Z",
                "service": "Bandwidth",
                "cost": {"amount": 0.5, "currency": "USD"},
                "usage": {"value": 40, "unit": "GB"},
            },
        ],
        "period": {"start": "2024-03-01", "end": "2024-03-02"},
    }


@pytest.fixture
def model_billing_response() -> dict[str, Any]:
    """Mock model vendor billing payload."""
    return {
        "total_cost": 1.35,
        "usage_by_model": {
            "claude-3-opus": {"input_tokens": 1000, "output_tokens": 200, "cost": 0.9},
            "claude-3-haiku": {"input_tokens": 5000, "output_tokens": 1000, "cost": 0.45},
        },
        "usage_history": [
            {
                "id": "rec-1",
                "timestamp": "2024-03-01T10:00:00Z",
                "model": "claude-3-opus",
                "input_tokens": 1000,
                "output_tokens": 200,
                "cost": 0.9,
                "request_id": "req_1",
            },
            {
                "id": "rec-2",
                "timestamp": "2024-03-02T11:30:00Z",
                "model": "claude-3-haiku",
                "input_tokens": 5000,
                "output_tokens": 1000,
                "cost": 0.45,
                "request_id": "req_2",
            },
        ],
    }
