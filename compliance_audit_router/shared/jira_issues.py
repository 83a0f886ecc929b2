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

"""Jira Issues REST operations – current user, user search, create,
comment, fetch, list transitions and apply a transition, via the Jira
REST API v2.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ..utils.common import vprint
from ..utils.config import JiraConfig
from ..utils.errors import TrackerError
from ..utils.models import Issue, TicketRef, TrackerUser, Transition

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


def _user_from_json(obj: dict[str, Any]) -> TrackerUser:
    # Jira Cloud identifies users by accountId; Server/DC by key/name.
    account_id = str(obj.get("accountId") or obj.get("key") or obj.get("name") or "")
    return TrackerUser(
        account_id=account_id,
        name=str(obj.get("name") or ""),
        display_name=str(obj.get("displayName") or ""),
        cloud=bool(obj.get("accountId")),
    )


def issue_from_json(obj: dict[str, Any]) -> Issue:
    fields = obj.get("fields") or {}
    assignee = fields.get("assignee") or {}
    status = fields.get("status") or {}
    return Issue(
        id=str(obj.get("id") or ""),
        key=str(obj.get("key") or ""),
        labels=[str(lbl) for lbl in (fields.get("labels") or [])],
        assignee_id=_user_from_json(assignee).account_id if assignee else "",
        status=str(status.get("name") or "") if isinstance(status, dict) else "",
    )


class JiraClient:
    """Thin Jira REST client; every failure surfaces as :class:`TrackerError`."""

    def __init__(self, config: JiraConfig, session: requests.Session | None = None) -> None:
        if not config.host:
            raise TrackerError("jira.JiraClient(): no Jira host configured")
        self.base_url = config.host.rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = not config.allow_insecure
        self.session.headers.update({"Accept": "application/json"})
        if config.username:
            logger.warning("jira.JiraClient(): using basic auth for Jira client")
            self.session.auth = (config.username, config.token)
        else:
            self.session.headers.update({"Authorization": f"Bearer {config.token}"})

    def _request(self, op: str, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/rest/api/2/{path.lstrip('/')}"
        vprint(f"jira.{op}(): {method} {url}")
        try:
            resp = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            raise TrackerError(f"jira.{op}(): {exc}") from exc

        if resp.status_code >= 400:
            raise TrackerError(f"jira.{op}(): {resp.status_code} {resp.reason}: {resp.text}")

        if resp.status_code == 204 or not (resp.content or b"").strip():
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise TrackerError(f"jira.{op}(): could not decode response: {exc}") from exc

    def whoami(self) -> TrackerUser:
        return _user_from_json(self._request("whoami", "GET", "myself") or {})

    def find_user_by_name(self, name: str) -> TrackerUser:
        """Return the single user matching *name*; zero or several matches is an error."""
        users = self._request("find_user_by_name", "GET", "user/search", params={"query": name}) or []
        if len(users) != 1:
            raise TrackerError(f"error finding user {name!r}: expected 1 user but found {len(users)}")
        return _user_from_json(users[0])

    def create_issue(self, fields: dict[str, Any]) -> TicketRef:
        data = self._request("create_issue", "POST", "issue", json={"fields": fields}) or {}
        return TicketRef(id=str(data.get("id") or ""), key=str(data.get("key") or ""))

    def add_comment(self, issue_id: str, body: str) -> None:
        self._request("add_comment", "POST", f"issue/{issue_id}/comment", json={"body": body})

    def get_issue(self, issue_id: str) -> Issue:
        return issue_from_json(self._request("get_issue", "GET", f"issue/{issue_id}") or {})

    def list_transitions(self, issue_id: str) -> list[Transition]:
        data = self._request("list_transitions", "GET", f"issue/{issue_id}/transitions") or {}
        return [
            Transition(id=str(t.get("id") or ""), name=str(t.get("name") or ""))
            for t in data.get("transitions") or []
        ]

    def apply_transition(self, issue_id: str, transition_id: str) -> None:
        self._request(
            "apply_transition",
            "POST",
            f"issue/{issue_id}/transitions",
            json={"transition": {"id": transition_id}},
        )
