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

"""Issue field / body construction – create-issue fields, the guidance
comment and diagnostic ticket descriptions.
"""

import json
from dataclasses import asdict
from typing import Any

from ..shared.templates import render_markdown_template
from .constants import TICKET_SUMMARY
from .labels import render_labels
from .models import AlertDetail, AlertWebhook, TrackerUser
from .templates import (
    DIRECTORY_FAILURE_TEMPLATE,
    SEARCH_FAILURE_TEMPLATE,
)


def build_issue_fields(
    *,
    project_key: str,
    issue_type: str,
    description: str,
    reporter: TrackerUser,
    assignee: TrackerUser | None = None,
    manager_id: str = "",
) -> dict[str, Any]:
    """Build the Jira ``fields`` object for a new compliance issue.

    Assignee and correlation labels are only attached when *assignee* is given.
    """
    fields: dict[str, Any] = {
        "project": {"key": project_key},
        "issuetype": {"name": issue_type},
        "summary": TICKET_SUMMARY,
        "description": description,
        "reporter": reporter.reference(),
    }
    if assignee is not None:
        fields["assignee"] = assignee.reference()
        fields["labels"] = render_labels(assignee.account_id, manager_id)
    return fields


def render_guidance_comment(template: str, sre_account_id: str) -> str:
    """Render the guidance comment; raises ``TemplateError`` on a bad template."""
    mention = f"[~accountid:{sre_account_id}]"
    return render_markdown_template(
        template,
        {"username": mention, "Username": mention},
        strict=True,
    )


def build_search_failure_body(webhook: AlertWebhook, error: str) -> str:
    """Describe a webhook whose search results could not be retrieved."""
    webhook_json = json.dumps(asdict(webhook), indent=2, default=str)
    return render_markdown_template(
        SEARCH_FAILURE_TEMPLATE,
        {"sid": webhook.sid, "webhook_json": webhook_json, "error": error},
    )


def build_directory_failure_body(detail: AlertDetail, error: str) -> str:
    """Describe an alert whose user could not be resolved in the directory."""
    alert_json = json.dumps(asdict(detail), indent=2, default=str)
    return render_markdown_template(
        DIRECTORY_FAILURE_TEMPLATE,
        {"alert_json": alert_json, "error": error},
    )
