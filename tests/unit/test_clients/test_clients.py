"""
Unit tests for the proxy clients and the summaries they build.
"""

from datetime import datetime, timezone

import pytest
import requests
from pydantic import ValidationError

from costboard.clients import (
    AWSService,
    CostSummary,
    CursorService,
    ModelBillingData,
    ModelBillingService,
    OpenAIService,
    ProviderClientError,
    VercelService,
)
from costboard.clients.openai import to_epoch_ms
from costboard.clients.vercel import NO_DATA_MESSAGE, STATUS_MESSAGES


def http_error(make_response, status_code, body=None, text=None):
    return requests.HTTPError(
        f"{status_code} Error", response=make_response(status_code, body, text=text)
    )


class TestCostSummary:
    """Test the CostSummary model."""

    def test_add_cost(self):
        """Costs roll up into service and grand totals."""
        summary = CostSummary()
        summary.add_cost("2024-03-01", "EC2", 10.0)
        summary.add_cost("2024-03-02", "EC2", 5.0)
        summary.add_cost("2024-03-02", "S3", 1.5)

        assert summary.total_cost == 16.5
        assert summary.costs_by_service["EC2"].cost == 15.0
        assert len(summary.costs_by_date["2024-03-02"]) == 2
        assert summary.daily_totals() == {"2024-03-01": 10.0, "2024-03-02": 6.5}

    def test_invalid_date_key(self):
        """Date buckets must be YYYY-MM-DD."""
        with pytest.raises(ValidationError):
            CostSummary(costs_by_date={"03/01/2024": []})

    def test_add_cost_rejects_invalid_day(self):
        """Days recorded after construction are checked too."""
        summary = CostSummary()

        with pytest.raises(ValueError, match="not in YYYY-MM-DD format"):
            summary.add_cost("2024-03-01 10:00", "EC2", 1.0)

        assert summary.costs_by_date == {}
        assert summary.total_cost == 0


class TestProviderClient:
    """Test error translation shared by all clients."""

    def test_proxy_error_body(self, mock_http_client, make_response):
        """The proxy's error and details become the client error."""
        mock_http_client.get.side_effect = http_error(
            make_response, 403, {"error": "Access denied", "details": "Missing scope"}
        )
        service = OpenAIService("sk-test", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_usage_data("2024-03-01", "2024-03-31")

        assert exc_info.value.message == "Access denied"
        assert exc_info.value.details == "Missing scope"
        assert exc_info.value.status_code == 403
        assert exc_info.value.provider == "openai"

    def test_proxy_error_without_body(self, mock_http_client, make_response):
        """Errors without a JSON body keep the HTTP error text."""
        mock_http_client.get.side_effect = http_error(make_response, 502, text="Bad Gateway")
        service = CursorService("key", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_usage_data("2024-03-01", "2024-03-31")

        assert exc_info.value.message == "502 Error"
        assert exc_info.value.status_code == 502

    def test_unreachable_proxy(self, mock_http_client):
        """Transport failures are reported as an unreachable proxy."""
        mock_http_client.get.side_effect = requests.ConnectionError("connection refused")
        service = CursorService("key", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_usage_data("2024-03-01", "2024-03-31")

        assert exc_info.value.message == "Could not reach the cost proxy: connection refused"
        assert exc_info.value.status_code is None


class TestAWSService:
    """Test cases for AWSService."""

    @pytest.fixture
    def service(self, mock_http_client):
        return AWSService("AKIATEST", "secret", region="us-west-2", http_client=mock_http_client)

    def test_get_cost_data(self, service, mock_http_client, aws_cost_response):
        """Credentials travel as headers and dates as query parameters."""
        mock_http_client.get.return_value = aws_cost_response

        assert service.get_cost_data("2024-03-01", "2024-03-04") == aws_cost_response
        mock_http_client.get.assert_called_once_with(
            "/api/aws/costs",
            params={"start_date": "2024-03-01", "end_date": "2024-03-04"},
            headers={
                "x-aws-access-key": "AKIATEST",
                "x-aws-secret-key": "secret",
                "x-aws-region": "us-west-2",
                "Content-Type": "application/json",
            },
        )

    def test_calculate_cost_summary(self, service, aws_cost_response):
        """Groups fold into per-service and per-day totals."""
        summary = service.calculate_cost_summary(aws_cost_response)

        assert summary.total_cost == pytest.approx(18.25)
        assert summary.costs_by_service["Amazon Elastic Compute Cloud - Compute"].cost == 15.0
        assert summary.costs_by_service["Amazon Simple Storage Service"].cost == 2.25
        assert summary.daily_totals() == {
            "2024-03-01": 12.75,
            "2024-03-02": 4.5,
            "2024-03-03": 1.0,
        }
        assert summary.time_range.start == "2024-03-01"
        assert summary.time_range.end == "2024-03-04"

    def test_ungrouped_day_uses_total(self, service, aws_cost_response):
        """A day without groups is recorded under the Total service."""
        summary = service.calculate_cost_summary(aws_cost_response)

        assert summary.costs_by_service["Total"].cost == 1.0

    def test_summary_sum_matches_total(self, service, aws_cost_response):
        """The grand total equals the sum of the service totals."""
        summary = service.calculate_cost_summary(aws_cost_response)

        assert summary.total_cost == pytest.approx(
            sum(item.cost for item in summary.costs_by_service.values())
        )

    def test_empty_results(self, service):
        summary = service.calculate_cost_summary({"ResultsByTime": []})

        assert summary.total_cost == 0
        assert summary.costs_by_service == {}
        assert summary.time_range.start is None

    def test_malformed_groups(self, service):
        """Groups that are not objects raise a client error."""
        data = {"ResultsByTime": [{"TimePeriod": {"Start": "2024-03-01"}, "Groups": ["EC2"]}]}

        with pytest.raises(ProviderClientError, match="Unexpected aws response format"):
            service.calculate_cost_summary(data)


class TestOpenAIService:
    """Test cases for OpenAIService."""

    def test_to_epoch_ms(self):
        """Date-only values are midnight UTC."""
        assert to_epoch_ms("2024-03-01") == 1709251200000
        assert to_epoch_ms("2024-03-01T00:00:00Z") == 1709251200000

    def test_get_usage_data(self, mock_http_client, openai_usage_response):
        """Vendor entries become usage records with defaults for missing counts."""
        mock_http_client.get.return_value = openai_usage_response
        service = OpenAIService("sk-test", http_client=mock_http_client)

        data = service.get_usage_data("2024-03-01", "2024-03-31")

        assert [record.id for record in data.data] == ["usage-1", "usage-2", "usage-3"]
        assert data.data[0].created == 1709251200000
        assert data.data[0].usage.prompt_tokens == 100
        assert data.data[2].usage.total_tokens == 0
        assert data.data[2].cost == 0
        assert mock_http_client.get.call_args.kwargs["headers"]["x-api-key"] == "sk-test"

    def test_calculate_usage_summary(self, mock_http_client, openai_usage_response):
        """Totals aggregate across records and per model."""
        mock_http_client.get.return_value = openai_usage_response
        service = OpenAIService("sk-test", http_client=mock_http_client)

        summary = service.calculate_usage_summary(service.get_usage_data(None, None))

        assert summary.total_cost == pytest.approx(0.75)
        assert summary.total_tokens == 180
        assert summary.usage_by_model["gpt-4"].tokens == 180
        assert summary.usage_by_model["gpt-3.5-turbo"].cost == 0

    def test_empty_body(self, mock_http_client):
        mock_http_client.get.return_value = {}
        service = OpenAIService("sk-test", http_client=mock_http_client)

        assert service.get_usage_data(None, None).data == []

    def test_malformed_record(self, mock_http_client):
        """Records missing required fields raise a client error."""
        mock_http_client.get.return_value = {
            "object": "list",
            "data": [{"aggregation_timestamp": 1709251200, "n_requests": 3}],
        }
        service = OpenAIService("sk-test", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_usage_data("2024-03-01", "2024-03-31")

        assert exc_info.value.message == "Unexpected openai response format"
        assert exc_info.value.provider == "openai"
        assert "id" in exc_info.value.details


class TestVercelService:
    """Test cases for VercelService."""

    def test_headers(self, mock_http_client):
        """The team header is only sent when a team is set."""
        assert "x-vercel-team-id" not in VercelService(
            "token", http_client=mock_http_client
        )._headers()
        assert (
            VercelService("token", "team_1", http_client=mock_http_client)._headers()[
                "x-vercel-team-id"
            ]
            == "team_1"
        )

    def test_calculate_cost_summary(self, mock_http_client, vercel_usage_response):
        """Usage is bucketed by day and service."""
        mock_http_client.get.return_value = vercel_usage_response
        service = VercelService("token", http_client=mock_http_client)

        summary = service.calculate_cost_summary(service.get_cost_data("2024-03-01", "2024-03-02"))

        assert summary.total_cost == pytest.approx(4.0)
        assert summary.costs_by_service["Bandwidth"].cost == pytest.approx(2.0)
        assert summary.daily_totals() == {"2024-03-01": 3.5, "2024-03-02": 0.5}
        assert summary.time_range.start == "2024-03-01"

    def test_no_usage(self, mock_http_client):
        """An empty usage list raises the no-data message."""
        mock_http_client.get.return_value = {"usage": []}
        service = VercelService("token", http_client=mock_http_client)

        with pytest.raises(ProviderClientError, match="No cost data found"):
            service.get_cost_data("2024-03-01", "2024-03-02")

    def test_timestamp_without_time_part(self, mock_http_client):
        """Timestamps that do not split into a YYYY-MM-DD day are rejected."""
        service = VercelService("token", http_client=mock_http_client)
        data = {
            "usage": [
                {
                    "timestamp": "2024-03-01 10:00:00",
                    "service": "Bandwidth",
                    "cost": {"amount": 1.5, "currency": "USD"},
                }
            ]
        }

        with pytest.raises(ProviderClientError) as exc_info:
            service.calculate_cost_summary(data)

        assert "YYYY-MM-DD" in exc_info.value.details

    def test_proxy_not_found_keeps_message(self, mock_http_client, make_response):
        mock_http_client.get.side_effect = http_error(
            make_response, 404, {"error": "No usage data found for the selected period"}
        )
        service = VercelService("token", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_cost_data("2024-03-01", "2024-03-02")

        assert exc_info.value.message == "No usage data found for the selected period"
        assert exc_info.value.message != NO_DATA_MESSAGE

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_status_messages(self, mock_http_client, make_response, status_code):
        """Credential failures get Vercel-specific guidance."""
        mock_http_client.get.side_effect = http_error(
            make_response, status_code, {"error": "Authentication failed"}
        )
        service = VercelService("token", http_client=mock_http_client)

        with pytest.raises(ProviderClientError) as exc_info:
            service.get_cost_data("2024-03-01", "2024-03-02")

        assert exc_info.value.message == STATUS_MESSAGES[status_code]


class TestCursorService:
    def test_calculate_usage_summary(self, mock_http_client):
        """The proxy payload maps one to one onto the summary."""
        mock_http_client.get.return_value = {
            "usage": {
                "total_tokens": 1_500_000,
                "total_cost": 15.0,
                "currency": "usd",
                "services": {
                    "code-completion": {"tokens": 1_000_000, "cost": 10.0},
                    "code-analysis": {"tokens": 500_000, "cost": 5.0},
                },
            },
            "timeRange": {"start": "2024-03-01", "end": "2024-03-31"},
        }
        service = CursorService("key", http_client=mock_http_client)

        summary = service.calculate_usage_summary(service.get_usage_data("2024-03-01", "2024-03-31"))

        assert summary.total_tokens == 1_500_000
        assert summary.currency == "USD"
        assert summary.costs_by_service["code-analysis"].cost == 5.0
        assert summary.time_range.end == "2024-03-31"

    def test_missing_usage(self, mock_http_client):
        service = CursorService("key", http_client=mock_http_client)

        with pytest.raises(ProviderClientError, match="Unexpected cursor response format"):
            service.calculate_usage_summary({"timeRange": {}})


class TestModelBillingService:
    """Test cases for ModelBillingService."""

    def test_unknown_vendor(self, mock_http_client):
        with pytest.raises(ValueError, match="Unknown model vendor 'mistral'"):
            ModelBillingService("mistral", "key", http_client=mock_http_client)

    def test_endpoint_per_vendor(self, mock_http_client):
        service = ModelBillingService("Gemini", "key", http_client=mock_http_client)

        assert service.provider_name == "gemini"
        assert service.endpoint == "/api/gemini/usage"

    def test_get_billing_data(self, mock_http_client, model_billing_response):
        """Records parse into typed billing data."""
        mock_http_client.get.return_value = model_billing_response
        service = ModelBillingService("anthropic", "sk-ant", http_client=mock_http_client)

        data = service.get_billing_data("2024-03-01", "2024-03-31")

        assert data.total_cost == 1.35
        assert data.usage_by_model["claude-3-opus"].output_tokens == 200
        assert data.usage_history[0].timestamp == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
        assert data.usage_history[1].request_id == "req_2"
        assert mock_http_client.get.call_args.kwargs["params"] == {
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
        }

    def test_dates_only_sent_as_pair(self, mock_http_client):
        mock_http_client.get.return_value = {}
        service = ModelBillingService("cohere", "key", http_client=mock_http_client)

        data = service.get_billing_data("2024-03-01")

        assert mock_http_client.get.call_args.kwargs["params"] == {
            "start_date": None,
            "end_date": None,
        }
        assert data.total_cost == 0
        assert data.usage_history == []

    def test_camel_case_fields(self):
        """Vendor payloads may use camelCase keys."""
        data = ModelBillingData.model_validate(
            {
                "totalCost": 2.5,
                "usageByModel": {"command-r": {"inputTokens": 10, "outputTokens": 5, "cost": 2.5}},
                "usageHistory": [],
            }
        )

        assert data.total_cost == 2.5
        assert data.usage_by_model["command-r"].input_tokens == 10

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            ModelBillingData(total_cost=-1)

    def test_invalid_billing_payload(self, mock_http_client):
        """Payloads that fail validation surface as client errors."""
        mock_http_client.get.return_value = {"total_cost": -5}
        service = ModelBillingService("gemini", "key", http_client=mock_http_client)

        with pytest.raises(ProviderClientError, match="Unexpected gemini response format"):
            service.get_billing_data()
