"""HTTP shell tests."""

import json

import pytest
from fastapi.testclient import TestClient

from compliance_audit_router import server
from compliance_audit_router.server import create_app
from compliance_audit_router.utils.errors import GENERIC_ERROR_MSG, TrackerError
from compliance_audit_router.utils.metrics import REGISTRY

from conftest import FakeSearch, alert_result, make_issue

JSON = {"Content-Type": "application/json"}


def unknown_failures(name, process):
    return (
        REGISTRY.get_sample_value(
            f"compliance_audit_router_{name}_total", {"process": process, "error_type": "unknown"}
        )
        or 0.0
    )


def client_for(config, tracker, search=None, tracker_factory=None):
    app = create_app(
        config,
        search_client=search or FakeSearch(results=[alert_result()]),
        tracker_factory=tracker_factory or (lambda: tracker),
    )
    return TestClient(app)


def jira_payload(author_id="sre-1"):
    return {
        "webhookEvent": "comment_created",
        "issue": {"id": "42", "key": "OHSS-42", "fields": {"labels": []}},
        "comment": {"body": "justified", "author": {"accountId": author_id}},
    }


class TestProbes:
    @pytest.mark.parametrize("path", ["/healthz", "/readyz"])
    def test_ok(self, config, tracker, path):
        res = client_for(config, tracker).get(path)
        assert res.status_code == 200
        assert res.text == "ok"
        assert res.headers["content-type"].startswith("text/plain")

    def test_metrics(self, config, tracker):
        client = client_for(config, tracker)
        client.get("/healthz")
        client.post("/api/v1/alert", content=b"", headers=JSON)
        res = client.get("/metrics")
        assert res.status_code == 200
        assert "compliance_audit_router_http_responses_total" in res.text


class TestAlertRoute:
    def test_success(self, config, tracker):
        res = client_for(config, tracker).post("/api/v1/alert", json={"sid": "sid-1"})
        assert res.status_code == 200
        assert res.text == "ok"
        assert len(tracker.created) == 1

    def test_malformed_json(self, config, tracker):
        res = client_for(config, tracker).post("/api/v1/alert", content=b"{oops", headers=JSON)
        assert res.status_code == 400
        assert "badly-formed JSON" in res.text
        assert tracker.calls == []

    def test_wrong_content_type(self, config, tracker):
        res = client_for(config, tracker).post(
            "/api/v1/alert", content=json.dumps({"sid": "s"}), headers={"Content-Type": "text/plain"}
        )
        assert res.status_code == 415

    def test_missing_sid(self, config, tracker):
        res = client_for(config, tracker).post("/api/v1/alert", json={"search_name": "x"})
        assert res.status_code == 400
        assert "sid" in res.text

    def test_search_failure_is_generic_500(self, config, tracker):
        search = FakeSearch(error="error retrieving search results from Splunk: 401 Unauthorized")
        res = client_for(config, tracker, search=search).post("/api/v1/alert", json={"sid": "s"})
        assert res.status_code == 500
        assert res.text == GENERIC_ERROR_MSG
        assert "Unauthorized" not in res.text
        assert len(tracker.created) == 1

    def test_tracker_construction_failure_is_generic_500(self, config, tracker):
        def factory():
            raise TrackerError("jira.JiraClient(): no Jira host configured")

        res = client_for(config, tracker, tracker_factory=factory).post("/api/v1/alert", json={"sid": "s"})
        assert res.status_code == 500
        assert res.text == GENERIC_ERROR_MSG

    def test_deeply_nested_body_is_generic_500(self, config, tracker):
        before = unknown_failures("splunk_webhook_process_failures", "ProcessAlertHandler")
        res = client_for(config, tracker).post("/api/v1/alert", content=b"[" * 200000, headers=JSON)
        assert res.status_code == 500
        assert res.text == GENERIC_ERROR_MSG
        assert unknown_failures("splunk_webhook_process_failures", "ProcessAlertHandler") == before + 1
        assert tracker.calls == []


class TestJiraRoute:
    def test_transition_applied(self, config, tracker):
        tracker.issues["42"] = make_issue(assignee_id="sre-1")
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json=jira_payload("sre-1"))
        assert res.status_code == 204
        assert tracker.applied == [("42", "12")]

    def test_non_assignee_is_accepted_and_ignored(self, config, tracker):
        tracker.issues["42"] = make_issue(assignee_id="sre-1")
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json=jira_payload("mgr-1"))
        assert res.status_code == 204
        assert tracker.applied == []

    def test_tracker_failure_is_generic_500(self, config, tracker):
        tracker.fail_get_issue = True
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json=jira_payload())
        assert res.status_code == 500
        assert res.text == GENERIC_ERROR_MSG

    def test_malformed_payload(self, config, tracker):
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json={"issue": {"id": "1"}})
        assert res.status_code == 400
        assert "comment" in res.text

    def test_non_list_labels_is_rejected(self, config, tracker):
        payload = jira_payload()
        payload["issue"]["fields"]["labels"] = 5
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json=payload)
        assert res.status_code == 400
        assert "labels" in res.text
        assert tracker.calls == []

    def test_unexpected_decode_error_is_generic_500(self, config, tracker, monkeypatch):
        def broken(body, content_type):
            raise RecursionError("maximum recursion depth exceeded while decoding a JSON array")

        monkeypatch.setattr(server, "decode_notification", broken)
        before = unknown_failures("jira_webhook_process_failures", "ProcessJiraWebhook")
        res = client_for(config, tracker).post("/api/v1/jira_webhook", json=jira_payload())
        assert res.status_code == 500
        assert res.text == GENERIC_ERROR_MSG
        assert unknown_failures("jira_webhook_process_failures", "ProcessJiraWebhook") == before + 1
