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

"""Ticket lifecycle – creating compliance issues and advancing them through
the ``initial`` → ``sre`` | ``manager`` transitions.

Creation:
- reporter is the service account; SRE and manager are resolved independently
  and fall back to the ``unknown`` sentinel without aborting creation
- assignee and correlation labels are only set when the SRE resolved
- the guidance comment is rendered from the configured template; a render
  failure fails the creation even though the issue already exists
- the ``initial`` transition is looked up by name and applied

Notifications:
- the live issue is refetched; its labels are the source of truth
- only a comment by the current assignee can drive a transition
- the author is matched against the SRE / manager label ids to pick the role

Dry-run skips every mutating tracker call (create, comment, transition) and
logs it instead; reads and name resolution still run and can still fail.
"""

from __future__ import annotations

import logging
from typing import Any

from .common import vprint
from .config import JiraConfig
from .constants import (
    DRY_RUN_ISSUE_KEY,
    TRANSITION_INITIAL,
    TRANSITION_MANAGER,
    TRANSITION_SRE,
    UNKNOWN_USER,
)
from .errors import TrackerError, TransitionNotFound
from .issue_builder import build_issue_fields, render_guidance_comment
from .labels import is_managed, parse_labels
from .models import NotificationEvent, TicketRef, TrackerUser

logger = logging.getLogger(__name__)


class TicketLifecycle:
    def __init__(
        self,
        jira_config: JiraConfig,
        tracker: Any,
        *,
        message_template: str,
        dry_run: bool = False,
    ) -> None:
        self.jira_config = jira_config
        self.tracker = tracker
        self.message_template = message_template
        self.dry_run = dry_run

    # ------------------------------------------------------------------
    # Identity and transition resolution
    # ------------------------------------------------------------------

    def _resolve_user(self, username: str, role: str) -> TrackerUser | None:
        if not username:
            vprint(f"No {role} username given; using {UNKNOWN_USER!r}")
            return None
        try:
            return self.tracker.find_user_by_name(username)
        except TrackerError as exc:
            logger.warning("failed to fetch %s's Jira account %r: %s", role, username, exc)
            return None

    def transition_name(self, role: str) -> str:
        name = (self.jira_config.transitions.get(role) or "").strip() if role else ""
        if not name:
            raise TransitionNotFound(f"no transition configured for role {role or '<none>'!r}")
        return name

    def find_transition_id(self, issue_id: str, name: str, *, issue_exists: bool = True) -> str:
        """Return the id of the transition called *name* on *issue_id*."""
        if self.dry_run and not issue_exists:
            logger.info("dry-run: would have fetched transitions for issue %s", issue_id)
            return "dry-run-transition-id"

        for transition in self.tracker.list_transitions(issue_id):
            if transition.name == name:
                return transition.id
        raise TransitionNotFound(f"did not find status {name}")

    def _apply(self, ref: TicketRef, name: str, transition_id: str) -> None:
        if self.dry_run:
            logger.info("dry-run: would have transitioned issue %s to status %s", ref.key, name)
            return
        try:
            self.tracker.apply_transition(ref.id, transition_id)
        except TrackerError as exc:
            raise TrackerError(f"failed to transition issue {ref.key} to status {name}: {exc}") from exc

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_ticket(self, sre_username: str, manager_username: str, description: str) -> TicketRef:
        """Create an issue for one alert and move it to the ``initial`` state."""
        if self.dry_run:
            logger.info(
                "dry-run: creating ticket for user=%r manager=%r without writing to Jira",
                sre_username,
                manager_username,
            )

        try:
            reporter = self.tracker.whoami()
        except TrackerError as exc:
            raise TrackerError(f"failed to get Jira user for reporter: {exc}") from exc

        sre_user = self._resolve_user(sre_username, "SRE")
        if sre_user is None:
            logger.warning(
                "SRE account unresolved; the ticket will be created with no assignee "
                "and needs to be managed manually"
            )
        manager_user = self._resolve_user(manager_username, "manager")

        fields = build_issue_fields(
            project_key=self.jira_config.key,
            issue_type=self.jira_config.issue_type,
            description=description,
            reporter=reporter,
            assignee=sre_user,
            manager_id=manager_user.account_id if manager_user else UNKNOWN_USER,
        )

        if self.dry_run:
            logger.info("dry-run: would have created issue with fields: %s", fields)
            ref = TicketRef(id=DRY_RUN_ISSUE_KEY, key=DRY_RUN_ISSUE_KEY)
        else:
            try:
                ref = self.tracker.create_issue(fields)
            except TrackerError as exc:
                raise TrackerError(f"failed to create issue: {exc}") from exc
        logger.info("created new issue with key %s", ref.key)

        sre_account_id = sre_user.account_id if sre_user else UNKNOWN_USER
        comment = render_guidance_comment(self.message_template, sre_account_id)

        if self.dry_run:
            logger.info("dry-run: would have added comment to issue %s: %r", ref.key, comment)
        else:
            try:
                self.tracker.add_comment(ref.id, comment)
            except TrackerError as exc:
                raise TrackerError(
                    f"issue {ref.key} was successfully created but failed to apply initial comment: {exc}"
                ) from exc
        logger.info("initial comment successfully left on issue %s", ref.key)

        initial = self.transition_name(TRANSITION_INITIAL)
        try:
            transition_id = self.find_transition_id(ref.id, initial, issue_exists=not self.dry_run)
        except TrackerError as exc:
            raise type(exc)(f"failed to fetch ID for status {initial} on issue {ref.key}: {exc}") from exc
        self._apply(ref, initial, transition_id)
        logger.info("issue %s has been transitioned to state %s", ref.key, initial)

        return ref

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def role_for_author(self, labels: list[str], author_id: str) -> str:
        """Map a comment author to ``sre`` / ``manager`` via the correlation labels."""
        correlation = parse_labels(labels)
        if correlation.sre_id and author_id == correlation.sre_id:
            return TRANSITION_SRE
        if correlation.manager_id and author_id == correlation.manager_id:
            return TRANSITION_MANAGER
        return ""

    def handle_notification(self, event: NotificationEvent) -> str | None:
        """Advance the commented issue; returns the applied transition name or ``None``."""
        issue_ref = event.issue_id or event.issue_key
        try:
            issue = self.tracker.get_issue(issue_ref)
        except TrackerError as exc:
            raise TrackerError(f"failed to get issue {event.issue_key or issue_ref} from jira webhook: {exc}") from exc

        if not issue.assignee_id or event.author_id != issue.assignee_id:
            vprint(
                f"Ignoring comment on {issue.key} from {event.author_name or event.author_id!r}: "
                "author is not the current assignee"
            )
            return None

        if not is_managed(issue.labels):
            logger.warning("issue %s has no managed label; correlation labels may be missing", issue.key)

        role = self.role_for_author(issue.labels, event.author_id)
        ref = TicketRef(id=issue.id or issue_ref, key=issue.key or event.issue_key)
        try:
            name = self.transition_name(role)
            transition_id = self.find_transition_id(ref.id, name)
        except TrackerError as exc:
            raise type(exc)(f"failed to get transition ID for role {role or '<none>'} on issue {ref.key}: {exc}") from exc

        self._apply(ref, name, transition_id)
        logger.info(
            "successfully updated ticket %s to status %s after comment from %s",
            ref.key,
            name,
            event.author_name or event.author_id,
        )
        return name
