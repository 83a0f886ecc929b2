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

"""Core alert orchestration – retrieves the search results named by an alert
webhook, enriches each valid alert with directory identities, and files one
ticket per alert.

Failure handling:
- search retrieval or directory lookup failure files a diagnostic ticket and
  reports failure; nothing is retried
- the first ticket creation failure stops the batch; tickets already filed
  stay in place
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .alert_parser import alert_details
from .common import vprint
from .config import Config
from .errors import DirectoryError, SearchError, TemplateError, TrackerError
from .issue_builder import build_directory_failure_body, build_search_failure_body
from .metrics import (
    COMPLIANCE_EVENTS_FOUND,
    COMPLIANCE_EVENTS_PROCESSED,
    JIRA_CLIENT_CREATE_FAILURES,
    JIRA_ERROR_ISSUES_CREATED,
    JIRA_ISSUE_CREATE_FAILURES,
    JIRA_ISSUE_UPDATE_FAILURES,
    JIRA_ISSUES_CREATED,
    LDAP_LOOKUP_FAILURES,
    SPLUNK_ALERT_SID_RECEIVED,
    SPLUNK_SEARCH_RESULT_QUERY_FAILURES,
)
from .models import AlertDetail, AlertWebhook, NotificationEvent, PipelineResult, TicketRef
from .ticket_lifecycle import TicketLifecycle

logger = logging.getLogger(__name__)

PROCESS = "ProcessAlertHandler"


class AlertPipeline:
    def __init__(
        self,
        config: Config,
        search_client: Any,
        directory_client: Any,
        tracker_factory: Callable[[], Any],
        *,
        process_name: str = PROCESS,
    ) -> None:
        self.config = config
        self.search_client = search_client
        self.directory_client = directory_client
        self.tracker_factory = tracker_factory
        self.process_name = process_name

    def _lifecycle(self) -> TicketLifecycle:
        try:
            tracker = self.tracker_factory()
        except TrackerError:
            JIRA_CLIENT_CREATE_FAILURES.labels(process=self.process_name).inc()
            raise
        return TicketLifecycle(
            self.config.jira,
            tracker,
            message_template=self.config.message_template,
            dry_run=self.config.dry_run,
        )

    def _file_diagnostic(self, lifecycle: TicketLifecycle, body: str) -> TicketRef | None:
        try:
            ref = lifecycle.create_ticket("", "", body)
        except (TrackerError, TemplateError) as exc:
            logger.error("failed creating Jira ticket: %s", exc)
            JIRA_ISSUE_CREATE_FAILURES.labels(process=self.process_name).inc()
            return None
        JIRA_ERROR_ISSUES_CREATED.labels(process=self.process_name).inc()
        return ref

    def _resolve_identity(self, detail: AlertDetail) -> tuple[str, str]:
        if not self.config.ldap.enabled:
            return detail.user, ""
        return self.directory_client.lookup_user(detail.user)

    def process(self, webhook: AlertWebhook) -> PipelineResult:
        """Turn one alert webhook into tickets.

        Raises :class:`TrackerError` only when the Jira client itself cannot be
        built; every other failure is reported through the result.
        """
        lifecycle = self._lifecycle()

        logger.info("retrieving alert from Splunk: %s", webhook.sid)
        SPLUNK_ALERT_SID_RECEIVED.labels(process=self.process_name).inc()

        try:
            search = self.search_client.retrieve_results(webhook.sid)
        except SearchError as exc:
            logger.error("error retrieving search results from Splunk: %s", exc)
            SPLUNK_SEARCH_RESULT_QUERY_FAILURES.labels(
                process=self.process_name, error_type="retrieval_error"
            ).inc()
            diagnostic = self._file_diagnostic(lifecycle, build_search_failure_body(webhook, str(exc)))
            return PipelineResult(success=False, diagnostic=diagnostic, error=str(exc))

        result = PipelineResult(success=True)
        for detail in alert_details(search.results):
            logger.info("processing compliance event: %s - %s", detail.user, detail.name)
            COMPLIANCE_EVENTS_FOUND.labels(process=self.process_name).inc()

            try:
                user, manager = self._resolve_identity(detail)
            except DirectoryError as exc:
                logger.error("failed ldap lookup: %s", exc)
                LDAP_LOOKUP_FAILURES.labels(process=self.process_name).inc()
                result.success = False
                result.error = str(exc)
                result.diagnostic = self._file_diagnostic(
                    lifecycle, build_directory_failure_body(detail, str(exc))
                )
                return result

            vprint(f"creating ticket for user={user!r} manager={manager!r}")
            try:
                ref = lifecycle.create_ticket(user, manager, detail.body())
            except (TrackerError, TemplateError) as exc:
                logger.error("failed creating Jira ticket: %s", exc)
                JIRA_ISSUE_CREATE_FAILURES.labels(process=self.process_name).inc()
                result.success = False
                result.error = str(exc)
                return result

            JIRA_ISSUES_CREATED.labels(process=self.process_name).inc()
            result.tickets.append(ref)

        COMPLIANCE_EVENTS_PROCESSED.labels(process=self.process_name).inc()
        return result


def process_notification(
    config: Config,
    tracker_factory: Callable[[], Any],
    event: NotificationEvent,
    *,
    process_name: str = "ProcessJiraWebhook",
) -> str | None:
    """Drive the workflow transition for one Jira comment notification."""
    try:
        tracker = tracker_factory()
    except TrackerError:
        JIRA_CLIENT_CREATE_FAILURES.labels(process=process_name).inc()
        raise

    lifecycle = TicketLifecycle(
        config.jira,
        tracker,
        message_template=config.message_template,
        dry_run=config.dry_run,
    )
    try:
        return lifecycle.handle_notification(event)
    except TrackerError:
        JIRA_ISSUE_UPDATE_FAILURES.labels(process=process_name).inc()
        raise
