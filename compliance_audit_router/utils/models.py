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

"""Core dataclass definitions (alerts, webhooks, issues, pipeline results)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Stands in for "no timestamp"; mirrors the zero instant of the alert source.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class AlertDetail:
    """One normalized compliance alert extracted from a search result."""
    alert_name: str = ""
    user: str = ""
    group: str = ""
    timestamp: datetime = ZERO_TIME
    cluster_ids: tuple[str, ...] = ()
    cluster_text: str = ""
    elevated_summary: tuple[str, ...] = ()
    elevated_summary_text: str = ""
    reasons: tuple[str, ...] = ()
    reasons_text: str = ""

    def valid(self) -> bool:
        """True when the alert carries everything a compliance ticket needs."""
        return bool(self.alert_name and self.user and self.group and self.cluster_ids)

    @property
    def name(self) -> str:
        return self.alert_name

    def body(self) -> str:
        return "\n\n".join(
            [
                f"{self.user} - {self.name}",
                self.cluster_text,
                self.elevated_summary_text,
                self.reasons_text,
            ]
        )


@dataclass
class SearchResults:
    """Results document returned by the Splunk search jobs API."""
    init_offset: int = 0
    messages: list[dict[str, Any]] = field(default_factory=list)
    preview: bool = False
    results: list[dict[str, Any]] = field(default_factory=list)
    highlighted: dict[str, Any] = field(default_factory=dict)


@dataclass
class AlertWebhook:
    """Payload posted by a Splunk alert action."""
    sid: str
    search_name: str = ""
    app: str = ""
    owner: str = ""
    results_link: str = ""
    result: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TicketRef:
    id: str
    key: str


@dataclass(frozen=True)
class TrackerUser:
    """Jira user; Cloud users are addressed by accountId, Server/DC users by name."""
    account_id: str
    name: str = ""
    display_name: str = ""
    cloud: bool = True

    def reference(self) -> dict[str, str]:
        """User object for an issue field such as reporter or assignee."""
        if self.cloud:
            return {"accountId": self.account_id}
        return {"name": self.name or self.account_id}


@dataclass
class Issue:
    """Live issue state as fetched from Jira."""
    id: str
    key: str
    labels: list[str]
    assignee_id: str = ""
    status: str = ""


@dataclass(frozen=True)
class Transition:
    id: str
    name: str


@dataclass
class NotificationEvent:
    """Comment notification received from Jira; processed once, never stored."""
    issue_id: str
    issue_key: str
    labels: list[str]
    assignee_id: str
    author_id: str
    author_name: str = ""
    comment_body: str = ""


@dataclass
class PipelineResult:
    """Aggregated outcome of processing one alert webhook."""
    success: bool
    tickets: list[TicketRef] = field(default_factory=list)
    diagnostic: TicketRef | None = None
    error: str = ""
