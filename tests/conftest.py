"""Shared fixtures and fake collaborators for the compliance audit router tests."""

import os

import pytest

from compliance_audit_router.utils.common import set_verbose_enabled
from compliance_audit_router.utils.config import Config, JiraConfig, SplunkConfig
from compliance_audit_router.utils.errors import DirectoryError, SearchError, TrackerError
from compliance_audit_router.utils.models import (
    Issue,
    NotificationEvent,
    SearchResults,
    TicketRef,
    TrackerUser,
    Transition,
)

TRANSITIONS = {
    "initial": "Pending SRE Justification",
    "sre": "Pending Manager Approval",
    "manager": "Done",
}


class FakeTracker:
    """In-memory Jira stand-in that records every call."""

    def __init__(self, users=None, issues=None, transitions=None):
        self.reporter = TrackerUser(account_id="svc-1", name="svc-router")
        self.users = dict(users or {})
        self.issues = dict(issues or {})
        self.transitions = list(
            transitions
            if transitions is not None
            else [Transition(id=str(i), name=n) for i, n in enumerate(TRANSITIONS.values(), start=11)]
        )
        self.calls = []
        self.created = []
        self.comments = []
        self.applied = []
        self.fail_create_on = set()
        self.fail_comment = False
        self.fail_get_issue = False

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def whoami(self):
        self._record("whoami")
        return self.reporter

    def find_user_by_name(self, name):
        self._record("find_user_by_name", name)
        if name not in self.users:
            raise TrackerError(f"error finding user {name!r}: expected 1 user but found 0")
        return self.users[name]

    def create_issue(self, fields):
        self._record("create_issue", fields)
        n = len(self.created) + 1
        if n in self.fail_create_on:
            self.created.append(None)
            raise TrackerError("jira.create_issue(): 500 Internal Server Error")
        ref = TicketRef(id=str(1000 + n), key=f"OHSS-{n}")
        self.created.append(fields)
        return ref

    def add_comment(self, issue_id, body):
        self._record("add_comment", issue_id, body)
        if self.fail_comment:
            raise TrackerError("jira.add_comment(): 403 Forbidden")
        self.comments.append((issue_id, body))

    def get_issue(self, issue_id):
        self._record("get_issue", issue_id)
        if self.fail_get_issue:
            raise TrackerError("jira.get_issue(): 404 Not Found")
        for issue in self.issues.values():
            if issue_id in (issue.id, issue.key):
                return issue
        raise TrackerError(f"jira.get_issue(): 404 Not Found: {issue_id}")

    def list_transitions(self, issue_id):
        self._record("list_transitions", issue_id)
        return list(self.transitions)

    def apply_transition(self, issue_id, transition_id):
        self._record("apply_transition", issue_id, transition_id)
        self.applied.append((issue_id, transition_id))


class FakeSearch:
    def __init__(self, results=None, error=None):
        self.results = list(results or [])
        self.error = error
        self.sids = []

    def retrieve_results(self, sid):
        self.sids.append(sid)
        if self.error:
            raise SearchError(self.error)
        return SearchResults(results=self.results)


class FakeDirectory:
    def __init__(self, entries=None, error_for=()):
        self.entries = dict(entries or {})
        self.error_for = set(error_for)
        self.lookups = []

    def lookup_user(self, username):
        self.lookups.append(username)
        if username in self.error_for or username not in self.entries:
            raise DirectoryError(f"ldap.lookup_user(): expected 1 entry for {username!r} but found 0")
        return self.entries[username]


def alert_result(user="jdoe", name="cluster-admin elevation", **overrides):
    result = {
        "alertname": name,
        "username": user,
        "group": "osd-sre-admins",
        "timestamp": "2022-05-17T14:03:21.GMT",
        "clusterid": ["c-1", "c-2"],
        "cluster_text": "Clusters: c-1, c-2",
        "elevated_summary": "oc adm groups add-users",
        "elevated_summary_text": "Elevated via oc adm",
        "reason": ["incident"],
        "reason_text": "Reason: incident",
    }
    result.update(overrides)
    return result


def make_issue(assignee_id="sre-1", sre_id="sre-1", manager_id="mgr-1", key="OHSS-42", issue_id="42", labels=None):
    if labels is None:
        labels = [
            "compliance-audit-router/managed",
            f"compliance-audit-router/sre:{sre_id}",
            f"compliance-audit-router/manager:{manager_id}",
        ]
    return Issue(id=issue_id, key=key, labels=labels, assignee_id=assignee_id)


def comment_event(author_id, issue_id="42", key="OHSS-42", labels=None, assignee_id=""):
    return NotificationEvent(
        issue_id=issue_id,
        issue_key=key,
        labels=labels or [],
        assignee_id=assignee_id,
        author_id=author_id,
        author_name=author_id,
        comment_body="justification",
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CAR_"):
            monkeypatch.delenv(key, raising=False)
    set_verbose_enabled(False)
    yield
    set_verbose_enabled(False)


@pytest.fixture
def config():
    return Config(
        verbose=False,
        dry_run=False,
        splunk=SplunkConfig(host="https://splunk.example.com:8089", token="splunk-token"),
        jira=JiraConfig(
            host="https://issues.example.com",
            token="jira-token",
            key="OHSS",
            issue_type="Task",
            transitions=dict(TRANSITIONS),
        ),
    )


@pytest.fixture
def users():
    return {
        "jdoe": TrackerUser(account_id="sre-1", name="jdoe"),
        "asmith": TrackerUser(account_id="sre-2", name="asmith"),
        "boss": TrackerUser(account_id="mgr-1", name="boss"),
    }


@pytest.fixture
def tracker(users):
    return FakeTracker(users=users)
