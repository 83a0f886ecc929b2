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

"""Inbound webhook decoding – Splunk alert payloads and Jira comment
notifications. Client-side problems raise :class:`MalformedRequest`.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import MalformedRequest
from .models import AlertWebhook, NotificationEvent

MAX_BODY_BYTES = 1 << 20


def decode_json_body(body: bytes, content_type: str | None) -> dict[str, Any]:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type and media_type != "application/json":
        raise MalformedRequest(415, "Content-Type header is not application/json")

    if len(body or b"") > MAX_BODY_BYTES:
        raise MalformedRequest(413, "Request body must not be larger than 1MB")

    if not (body or b"").strip():
        raise MalformedRequest(400, "Request body must not be empty")

    try:
        data = json.loads(body)
    except UnicodeDecodeError:
        raise MalformedRequest(400, "Request body is not valid UTF-8")
    except json.JSONDecodeError as exc:
        raise MalformedRequest(400, f"Request body contains badly-formed JSON (at position {exc.pos})")

    if not isinstance(data, dict):
        raise MalformedRequest(400, "Request body must be a JSON object")
    return data


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRequest(400, f"Request body contains an invalid value for the {key!r} field")
    return value


def decode_alert_webhook(body: bytes, content_type: str | None) -> AlertWebhook:
    data = decode_json_body(body, content_type)

    result = data.get("result") or {}
    if not isinstance(result, dict):
        raise MalformedRequest(400, "Request body contains an invalid value for the 'result' field")

    sid = _str_field(data, "sid")
    if not sid:
        raise MalformedRequest(400, "Request body is missing the 'sid' field")

    return AlertWebhook(
        sid=sid,
        search_name=_str_field(data, "search_name"),
        app=_str_field(data, "app"),
        owner=_str_field(data, "owner"),
        results_link=_str_field(data, "results_link"),
        result=result,
    )


def _account_id(user: Any) -> str:
    if not isinstance(user, dict):
        return ""
    return str(user.get("accountId") or user.get("key") or user.get("name") or "")


def decode_notification(body: bytes, content_type: str | None) -> NotificationEvent:
    data = decode_json_body(body, content_type)

    issue = data.get("issue")
    comment = data.get("comment")
    if not isinstance(issue, dict):
        raise MalformedRequest(400, "Request body is missing the 'issue' object")
    if not isinstance(comment, dict):
        raise MalformedRequest(400, "Request body is missing the 'comment' object")

    issue_id = str(issue.get("id") or "")
    issue_key = str(issue.get("key") or "")
    if not (issue_id or issue_key):
        raise MalformedRequest(400, "Request body is missing the issue id and key")

    fields = issue.get("fields") or {}
    if not isinstance(fields, dict):
        fields = {}
    labels = fields.get("labels") or []
    if not isinstance(labels, list):
        raise MalformedRequest(400, "Request body contains an invalid value for the 'labels' field")
    author = comment.get("author") or {}

    return NotificationEvent(
        issue_id=issue_id,
        issue_key=issue_key,
        labels=[str(lbl) for lbl in labels],
        assignee_id=_account_id(fields.get("assignee")),
        author_id=_account_id(author),
        author_name=str(author.get("displayName") or author.get("name") or "") if isinstance(author, dict) else "",
        comment_body=str(comment.get("body") or ""),
    )
