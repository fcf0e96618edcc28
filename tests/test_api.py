"""
Tests for the HTTP surface using FastAPI's TestClient
"""

import pytest
from fastapi.testclient import TestClient

from app.main import create_app

from conftest import make_cursor


@pytest.fixture
def app(test_settings, repository):
    return create_app(settings=test_settings, repository=repository)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


class TestProblemsEndpoints:
    def test_list_problems(self, client, mock_collection):
        mock_collection.find.return_value = make_cursor([{"problemId": "P-1"}])
        mock_collection.count_documents.return_value = 1

        response = client.get("/api/v1/problems", params={"page": 1, "limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {
            "problems": [{"problemId": "P-1"}],
            "total": 1,
            "page": 1,
            "limit": 5,
            "totalPages": 1,
        }

    def test_list_problems_applies_filters(self, client, mock_collection):
        client.get("/api/v1/problems?status=OPEN&status=CLOSED&hasRootCause=false")

        query = mock_collection.find.call_args.args[0]
        assert query["status"] == {"$in": ["OPEN", "CLOSED"]}
        assert "$or" in query

    def test_list_problems_rejects_large_limit(self, client):
        response = client.get("/api/v1/problems", params={"limit": 5000})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_malformed_duration_is_a_validation_error(self, client):
        response = client.get("/api/v1/problems", params={"durationMin": "abc"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "durationMin must be a number, got 'abc'",
                "statusCode": 400,
            },
        }

    def test_get_problem(self, client, mock_collection):
        mock_collection.find_one.return_value = {"problemId": "P-1", "status": "OPEN"}

        response = client.get("/api/v1/problems/P-1")

        assert response.status_code == 200
        assert response.json()["data"] == {"problem": {"problemId": "P-1", "status": "OPEN"}}

    def test_get_problem_not_found(self, client):
        response = client.get("/api/v1/problems/P-404")

        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "NOT_FOUND",
            "message": "Problem not found",
            "statusCode": 404,
        }

    def test_update_status(self, client, mock_collection):
        mock_collection.find_one_and_update.return_value = {"problemId": "P-1", "status": "CLOSED"}

        response = client.patch("/api/v1/problems/P-1/status", json={"status": "CLOSED"})

        assert response.status_code == 200
        assert response.json()["message"] == "Status updated successfully"
        assert mock_collection.find_one_and_update.await_args.args[1] == {"$set": {"status": "CLOSED"}}

    def test_update_status_rejects_unknown_status(self, client, mock_collection):
        response = client.patch("/api/v1/problems/P-1/status", json={"status": "RESOLVED"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        mock_collection.find_one_and_update.assert_not_awaited()

    def test_add_comment_anonymous(self, client, mock_collection):
        mock_collection.find_one_and_update.return_value = {"problemId": "P-1"}

        response = client.post("/api/v1/problems/P-1/comments", json={"content": "GitHub Actions rollback"})

        assert response.status_code == 200
        update = mock_collection.find_one_and_update.await_args.args[1]
        assert update["$push"]["recentComments.comments"]["author"] == "Anonymous"
        assert update["$inc"] == {"recentComments.totalCount": 1}

    def test_add_comment_uses_authenticated_user(self, app, mock_collection):
        @app.middleware("http")
        async def attach_user(request, call_next):
            request.state.user = {"username": "alice"}
            return await call_next(request)

        mock_collection.find_one_and_update.return_value = {"problemId": "P-1"}

        with TestClient(app) as client:
            client.post("/api/v1/problems/P-1/comments", json={"content": "on it"})

        update = mock_collection.find_one_and_update.await_args.args[1]
        assert update["$push"]["recentComments.comments"]["author"] == "alice"

    def test_add_comment_not_found(self, client):
        response = client.post("/api/v1/problems/P-404/comments", json={"content": "hello"})

        assert response.status_code == 404

    def test_filter_options_empty(self, client):
        response = client.get("/api/v1/problems/filter-options")

        assert response.status_code == 200
        assert all(values == [] for values in response.json()["data"].values())


class TestAnalyticsEndpoints:
    def test_kpis(self, client, mock_collection, scenario_problems):
        mock_collection.find.return_value = make_cursor(scenario_problems)

        response = client.get("/api/v1/analytics/kpis")

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["totalProblems"] == 3
        assert body["data"]["criticalProblems"] == 2
        assert body["meta"] == {"recordCount": 3, "truncated": False}

    @pytest.mark.parametrize("path", ["kpis", "avg-resolution-time-series", "duration-distribution"])
    def test_nan_duration_does_not_fail_the_view(self, client, mock_collection, path):
        mock_collection.find.return_value = make_cursor([
            {"status": "CLOSED", "duration": float("nan"), "startTime": "2024-01-10T10:00:00Z"},
            {"status": "CLOSED", "duration": 4, "startTime": "2024-01-10T11:00:00Z"},
        ])

        response = client.get(f"/api/v1/analytics/{path}")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_time_series_granularity(self, client, mock_collection, scenario_problems):
        mock_collection.find.return_value = make_cursor(scenario_problems)

        response = client.get("/api/v1/analytics/time-series", params={"granularity": "month"})

        assert [p["timestamp"] for p in response.json()["data"]["data"]] == ["2024-01", "2024-02"]

    def test_invalid_granularity(self, client):
        response = client.get("/api/v1/analytics/time-series", params={"granularity": "year"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_top_entities_limit_is_not_a_filter(self, client, mock_collection, scenario_problems):
        mock_collection.find.return_value = make_cursor(scenario_problems)

        response = client.get("/api/v1/analytics/top-entities", params={"limit": 1, "severityLevel": "ERROR"})

        assert len(response.json()["data"]["entities"]) == 1
        assert mock_collection.find.call_args.args[0] == {"severityLevel": {"$in": ["ERROR"]}}

    @pytest.mark.parametrize("path", [
        "impact-severity-matrix",
        "management-zones",
        "remediation-funnel",
        "duration-distribution",
        "evidence-types",
        "root-cause-analysis",
        "root-cause-distribution",
        "impact-distribution",
        "severity-distribution",
        "has-root-cause-distribution",
        "autoremediado-distribution",
        "autoremediation-time-series",
        "avg-resolution-time-series",
    ])
    def test_views_respond(self, client, mock_collection, scenario_problems, path):
        mock_collection.find.return_value = make_cursor(scenario_problems)

        response = client.get(f"/api/v1/analytics/{path}")

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestServiceEndpoints:
    def test_store_failure_is_generic_internal_error(self, client, mock_collection):
        mock_collection.find.side_effect = RuntimeError("connection reset by peer")

        response = client.get("/api/v1/analytics/kpis")

        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "INTERNAL_ERROR",
            "message": "Internal server error",
            "statusCode": 500,
        }
        assert "connection reset" not in response.text

    def test_health_without_store(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["database"] == "not_configured"

    def test_metrics(self, client):
        client.get("/api/v1/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"
