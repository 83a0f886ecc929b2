"""Alert pipeline orchestration tests."""

import pytest

from compliance_audit_router.utils.errors import TrackerError
from compliance_audit_router.utils.metrics import REGISTRY
from compliance_audit_router.utils.models import AlertWebhook
from compliance_audit_router.utils.pipeline import AlertPipeline, process_notification

from conftest import FakeDirectory, FakeSearch, alert_result, comment_event, make_issue


def pipeline(config, tracker, search, directory=None):
    return AlertPipeline(config, search, directory, lambda: tracker)


def sample(name, process="ProcessAlertHandler"):
    return REGISTRY.get_sample_value(f"compliance_audit_router_{name}_total", {"process": process}) or 0.0


class TestProcess:
    def test_one_ticket_per_valid_alert_in_order(self, config, tracker):
        search = FakeSearch(
            results=[
                alert_result(user="jdoe", name="first"),
                alert_result(user="", name="invalid"),
                alert_result(user="asmith", name="second"),
            ]
        )
        result = pipeline(config, tracker, search).process(AlertWebhook(sid="sid-1"))

        assert result.success
        assert [ref.key for ref in result.tickets] == ["OHSS-1", "OHSS-2"]
        assert [f["description"].splitlines()[0] for f in tracker.created] == [
            "jdoe - first",
            "asmith - second",
        ]
        assert search.sids == ["sid-1"]
        assert result.diagnostic is None

    def test_no_valid_alerts_is_success(self, config, tracker):
        result = pipeline(config, tracker, FakeSearch(results=[{}])).process(AlertWebhook(sid="s"))
        assert result.success
        assert result.tickets == []
        assert tracker.created == []

    def test_search_failure_files_one_diagnostic(self, config, tracker):
        before = sample("jira_error_issues_created")
        search = FakeSearch(error="error retrieving search results from Splunk: 404 Not Found")
        result = pipeline(config, tracker, search).process(AlertWebhook(sid="sid-9"))

        assert not result.success
        assert result.tickets == []
        assert result.diagnostic is not None
        assert len(tracker.created) == 1
        fields = tracker.created[0]
        assert "assignee" not in fields
        assert "Splunk Webhook Search ID: sid-9" in fields["description"]
        assert "404 Not Found" in fields["description"]
        assert sample("jira_error_issues_created") == before + 1

    def test_diagnostic_creation_failure_still_reports_failure(self, config, tracker):
        tracker.fail_create_on = {1}
        result = pipeline(config, tracker, FakeSearch(error="down")).process(AlertWebhook(sid="s"))
        assert not result.success
        assert result.diagnostic is None

    def test_fail_fast_on_creation_error(self, config, tracker):
        tracker.fail_create_on = {2}
        search = FakeSearch(
            results=[
                alert_result(user="jdoe", name="a"),
                alert_result(user="asmith", name="b"),
                alert_result(user="jdoe", name="c"),
            ]
        )
        result = pipeline(config, tracker, search).process(AlertWebhook(sid="s"))

        assert not result.success
        assert [ref.key for ref in result.tickets] == ["OHSS-1"]
        assert len(tracker.called("create_issue")) == 2
        assert "500 Internal Server Error" in result.error

    def test_template_error_is_a_failure(self, config, tracker):
        config.message_template = "{{ nope }}"
        result = pipeline(config, tracker, FakeSearch(results=[alert_result()])).process(AlertWebhook(sid="s"))
        assert not result.success
        assert result.tickets == []

    def test_tracker_construction_failure_propagates(self, config):
        def factory():
            raise TrackerError("jira.JiraClient(): no Jira host configured")

        before = sample("jira_client_create_failures")
        p = AlertPipeline(config, FakeSearch(results=[alert_result()]), None, factory)
        with pytest.raises(TrackerError):
            p.process(AlertWebhook(sid="s"))
        assert sample("jira_client_create_failures") == before + 1

    def test_dry_run_writes_nothing(self, config, tracker):
        config.dry_run = True
        result = pipeline(config, tracker, FakeSearch(results=[alert_result()])).process(AlertWebhook(sid="s"))
        assert result.success
        assert [ref.key for ref in result.tickets] == ["DRY-RUN-0000"]
        assert tracker.called("find_user_by_name")
        assert tracker.called("create_issue") == []
        assert tracker.called("apply_transition") == []


class TestDirectory:
    def test_directory_identities_are_used(self, config, tracker):
        config.ldap.enabled = True
        directory = FakeDirectory(entries={"jdoe": ("jdoe", "boss")})
        result = pipeline(config, tracker, FakeSearch(results=[alert_result()]), directory).process(
            AlertWebhook(sid="s")
        )

        assert result.success
        assert directory.lookups == ["jdoe"]
        assert [c[1] for c in tracker.called("find_user_by_name")] == ["jdoe", "boss"]
        assert "compliance-audit-router/manager:mgr-1" in tracker.created[0]["labels"]

    def test_directory_failure_files_diagnostic_and_aborts(self, config, tracker):
        config.ldap.enabled = True
        directory = FakeDirectory(entries={"asmith": ("asmith", "boss")}, error_for={"jdoe"})
        search = FakeSearch(results=[alert_result(user="jdoe"), alert_result(user="asmith")])
        result = pipeline(config, tracker, search, directory).process(AlertWebhook(sid="s"))

        assert not result.success
        assert result.diagnostic is not None
        assert directory.lookups == ["jdoe"]
        assert len(tracker.created) == 1
        assert "could not be retrieved from LDAP" in tracker.created[0]["description"]

    def test_directory_unused_when_disabled(self, config, tracker):
        directory = FakeDirectory()
        result = pipeline(config, tracker, FakeSearch(results=[alert_result()]), directory).process(
            AlertWebhook(sid="s")
        )
        assert result.success
        assert directory.lookups == []


class TestProcessNotification:
    def test_applies_transition(self, config, tracker):
        tracker.issues["42"] = make_issue(assignee_id="sre-1")
        assert process_notification(config, lambda: tracker, comment_event("sre-1")) == "Pending Manager Approval"

    def test_update_failure_is_counted(self, config, tracker):
        tracker.issues["42"] = make_issue(assignee_id="nobody")
        before = sample("jira_issue_update_failures", "ProcessJiraWebhook")
        with pytest.raises(TrackerError):
            process_notification(config, lambda: tracker, comment_event("nobody"))
        assert sample("jira_issue_update_failures", "ProcessJiraWebhook") == before + 1
