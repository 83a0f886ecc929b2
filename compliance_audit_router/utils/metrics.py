#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Prometheus counters for webhook processing, Jira and LDAP activity.

Counters are labelled by the handling ``process`` only; per-request ids go
to the logs, not to metric labels.
"""

from prometheus_client import CollectorRegistry, Counter

REGISTRY = CollectorRegistry(auto_describe=True)

_PREFIX = "compliance_audit_router"


def _counter(name: str, doc: str, labels: tuple[str, ...] = ("process",)) -> Counter:
    return Counter(f"{_PREFIX}_{name}", doc, list(labels), registry=REGISTRY)


# Splunk webhook and alert processing
SPLUNK_WEBHOOK_RECEIVED = _counter(
    "splunk_webhook_received", "Number of Splunk alert webhooks received"
)
SPLUNK_WEBHOOK_PROCESS_FAILURES = _counter(
    "splunk_webhook_process_failures",
    "Number of Splunk alert webhooks that failed to be processed",
    ("process", "error_type"),
)
SPLUNK_ALERT_SID_RECEIVED = _counter(
    "splunk_alert_sid_received", "Number of Splunk alert SIDs received"
)
SPLUNK_SEARCH_RESULT_QUERY_FAILURES = _counter(
    "splunk_search_result_query_failures",
    "Number of Splunk search result queries that failed",
    ("process", "error_type"),
)

# Compliance event processing; one webhook may carry several events.
COMPLIANCE_EVENTS_FOUND = _counter(
    "compliance_events_found", "Number of compliance events found in Splunk webhook search results"
)
COMPLIANCE_EVENTS_PROCESSED = _counter(
    "compliance_events_processed", "Number of compliance events passed on to the next stage of processing"
)

# Jira issue creation
JIRA_CLIENT_CREATE_FAILURES = _counter(
    "jira_client_create_failures", "Number of failures to create a Jira client"
)
JIRA_ISSUES_CREATED = _counter("jira_issues_created", "Number of Jira issues created")
JIRA_ERROR_ISSUES_CREATED = _counter(
    "jira_error_issues_created", "Number of Jira issues created tracking errors in processing"
)
JIRA_ISSUE_CREATE_FAILURES = _counter(
    "jira_issue_create_failures", "Number of Jira issues that failed to be created"
)

# Jira webhook processing
JIRA_WEBHOOK_RECEIVED = _counter(
    "jira_webhook_received", "Number of Jira notification webhooks received"
)
JIRA_WEBHOOK_PROCESS_FAILURES = _counter(
    "jira_webhook_process_failures",
    "Number of Jira notification webhooks that failed to be processed",
    ("process", "error_type"),
)
JIRA_ISSUE_UPDATE_FAILURES = _counter(
    "jira_issue_update_failures", "Number of Jira issues that failed to be updated based on received webhook"
)

# LDAP
LDAP_LOOKUP_FAILURES = _counter("ldap_lookup_failures", "Number of LDAP lookups that failed")

# HTTP responses
HTTP_RESPONSES = _counter(
    "http_responses",
    "HTTP responses returned by the application with the status code as a label",
    ("process", "code"),
)
