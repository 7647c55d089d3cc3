"""
Test Module for the FastAPI Endpoints.

Runs the routers through TestClient with the metrics source, settings and
clock overridden, so no database is needed.
"""

import pytest

from response_metrics.core.exceptions import SourceReadFailure
from response_metrics.services.data_source import InMemoryMetricsSource
from response_metrics.tests.conftest import build_client


pytestmark = pytest.mark.api


class FailingSource(InMemoryMetricsSource):
    """Source whose every read fails."""

    async def fetch_metric_rows(self, start, end):
        raise SourceReadFailure("connection refused")

    async def fetch_employees(self):
        raise SourceReadFailure("connection refused", source="employees")

    async def fetch_unanswered(self, limit):
        raise SourceReadFailure("connection refused", source="unanswered_emails")


@pytest.fixture
def client_for(test_settings):
    """Factory for a TestClient over a given source."""
    from response_metrics.main import app

    def factory(source):
        return build_client(source, test_settings)

    yield factory
    app.dependency_overrides.clear()


class TestServiceEndpoints:

    def test_health(self, api_client):
        response = api_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, api_client):
        body = api_client.get("/").json()
        assert body["name"] == "Response Metrics API"
        assert body["docs"] == "/docs"


class TestDashboardEndpoint:

    def test_default_range_anchored_on_latest_data(self, api_client):
        response = api_client.get("/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["anchor"] == "latest_data"
        assert body["anchorDate"] == "2024-01-05"
        assert body["range"] == {"start": "2023-12-07", "end": "2024-01-05"}
        assert body["teamTotals"] == {
            "responses": 24,
            "breaches": 7,
            "weightedAvgMinutes": 10.0,
            "slaPercent": 71,
        }
        assert len(body["dailySeries"]) == 30

    def test_preset_and_today_anchor(self, api_client):
        body = api_client.get("/dashboard", params={"preset": 7, "anchor": "today"}).json()
        assert body["range"] == {"start": "2024-01-04", "end": "2024-01-10"}
        assert body["teamTotals"]["responses"] == 4

    def test_custom_range(self, api_client):
        body = api_client.get("/dashboard", params={"start": "2024-01-01", "end": "2024-01-01"}).json()
        assert body["teamTotals"]["slaPercent"] == 80
        assert [s["employeeId"] for s in body["employeeSummaries"]] == ["a", "b", "c"]

    def test_no_data_serialized(self, api_client):
        body = api_client.get("/dashboard", params={"start": "2024-01-03", "end": "2024-01-04"}).json()
        assert body["teamTotals"]["weightedAvgMinutes"] == "no_data"
        assert body["teamTotals"]["slaPercent"] == "no_data"

    def test_heatmap_in_summary_order(self, api_client):
        heatmap = api_client.get("/dashboard", params={"preset": 7}).json()["heatmap"]
        assert heatmap["employeeIds"] == ["a", "b", "c"]
        assert heatmap["maxBreaches"] == 4

    def test_empty_feed(self, client_for):
        client = client_for(InMemoryMetricsSource())
        response = client.get("/dashboard")
        assert response.status_code == 200
        body = response.json()
        assert body["range"] is None
        assert body["dailySeries"] == []
        assert body["teamTotals"]["weightedAvgMinutes"] == "no_data"

    @pytest.mark.parametrize("params", [
        {"preset": 5},
        {"start": "2024/01/01", "end": "2024-01-05"},
        {"start": "2024-02-30", "end": "2024-03-01"},
    ])
    def test_invalid_range_returns_400(self, api_client, params):
        response = api_client.get("/dashboard", params=params)
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid range")

    def test_invalid_anchor_rejected(self, api_client):
        assert api_client.get("/dashboard", params={"anchor": "yesterday"}).status_code == 422

    def test_source_failure_returns_502(self, client_for):
        client = client_for(FailingSource())
        response = client.get("/dashboard")
        assert response.status_code == 502


class TestUnansweredEndpoint:

    def test_lists_oldest_first(self, api_client):
        response = api_client.get("/unanswered")
        assert response.status_code == 200
        body = response.json()
        assert [e["id"] for e in body] == ["6", "5"]
        assert body[0]["slaStatus"] == "Breached"
        assert body[0]["subject"] == "(No subject)"
        assert body[0]["outlookLink"].endswith("AAMkAD")
        assert body[1]["outlookLink"] is None

    def test_source_failure_returns_502(self, client_for):
        assert client_for(FailingSource()).get("/unanswered").status_code == 502


class TestExportEndpoint:

    def test_employees_csv(self, api_client):
        response = api_client.get("/exports/employees")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == (
            'attachment; filename="employees_2023-12-07_to_2024-01-05.csv"'
        )
        lines = response.text.splitlines()
        assert lines[0] == "Employee,Name,First Responses,Avg Response (min),SLA Breaches,SLA %"
        assert lines[1] == "a,Alice,15,6.0,6,60"
        assert lines[2] == "b,Bob,9,16.7,1,89"

    def test_daily_csv_has_every_day(self, api_client):
        response = api_client.get("/exports/daily", params={"start": "2024-01-01", "end": "2024-01-03"})
        lines = response.text.splitlines()
        assert len(lines) == 4
        assert lines[3] == "2024-01-03,0,—,0,—"

    def test_unanswered_csv_quotes_subject(self, api_client):
        response = api_client.get("/exports/unanswered")
        assert response.status_code == 200
        assert 'filename="unanswered_2024-01-10_to_2024-01-10.csv"' in response.headers["content-disposition"]
        assert '"Quote, ""urgent"""' in response.text

    def test_empty_export_returns_204(self, client_for):
        response = client_for(InMemoryMetricsSource()).get("/exports/employees")
        assert response.status_code == 204
        assert response.content == b""

    def test_unknown_dataset(self, api_client):
        assert api_client.get("/exports/everything").status_code == 422

    def test_invalid_range_returns_400(self, api_client):
        assert api_client.get("/exports/daily", params={"preset": 9}).status_code == 400

    def test_source_failure_returns_502(self, client_for):
        assert client_for(FailingSource()).get("/exports/heatmap").status_code == 502


class TestTrackedFeed:
    """?feed=tracked rolls answered tracked emails up on read."""

    def test_dashboard_from_tracked_emails(self, api_client):
        response = api_client.get("/dashboard", params={"feed": "tracked"})

        assert response.status_code == 200
        body = response.json()
        assert body["anchorDate"] == "2024-01-02"
        assert body["range"] == {"start": "2023-12-04", "end": "2024-01-02"}
        assert body["teamTotals"] == {
            "responses": 3,
            "breaches": 1,
            "weightedAvgMinutes": 15.0,
            "slaPercent": 67,
        }
        assert [(s["employeeId"], s["responses"]) for s in body["employeeSummaries"]] == [
            ("a", 2), ("b", 1), ("c", 0),
        ]

    def test_export_from_tracked_emails(self, api_client):
        response = api_client.get("/exports/employees", params={"feed": "tracked"})

        assert response.status_code == 200
        assert 'filename="employees_2023-12-04_to_2024-01-02.csv"' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[1] == "a,Alice,2,15.0,1,50"
        assert lines[2] == "b,Bob,1,15.0,0,100"

    def test_unknown_feed_rejected(self, api_client):
        assert api_client.get("/dashboard", params={"feed": "hourly"}).status_code == 422
