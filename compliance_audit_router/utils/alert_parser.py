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

"""Alert data parsing – extracting structured fields from raw Splunk search
results (scalar strings, list fields, timestamps) into :class:`AlertDetail`.

Every extractor is total: missing or ill-typed fields degrade to empty
values and a log line, never to an exception.
"""

import json
import logging
import re
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from .common import vprint
from .models import ZERO_TIME, AlertDetail

logger = logging.getLogger(__name__)

# The trailing ".GMT" is literal text, not a zone directive.
SPLUNK_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.GMT"
SPLUNK_TIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.GMT")


# ---------------------------------------------------------------------------
# ResultField enum
# ---------------------------------------------------------------------------

class ResultField(StrEnum):
    """Field names emitted by the compliance search."""
    ALERT_NAME = "alertname"
    USERNAME = "username"
    GROUP = "group"
    TIMESTAMP = "timestamp"
    CLUSTER_ID = "clusterid"
    CLUSTER_TEXT = "cluster_text"
    ELEVATED_SUMMARY = "elevated_summary"
    ELEVATED_SUMMARY_TEXT = "elevated_summary_text"
    REASON = "reason"
    REASON_TEXT = "reason_text"


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def _render_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def result_string(result: dict[str, Any], field: str) -> str:
    """Return *field* rendered as a string, or ``""`` when absent."""
    if field not in result:
        logger.info("No such field: %s", field)
        return ""
    value = result[field]
    if value is None:
        logger.info("Null value for field: %s", field)
        return ""
    return _render_scalar(value)


def result_list(result: dict[str, Any], field: str) -> tuple[str, ...]:
    """Return *field* as a tuple of strings.

    A single string becomes a one-element tuple. Elements that cannot be
    rendered as a string (null, objects, nested lists) are skipped.
    """
    if field not in result:
        return ()

    value = result[field]
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (int, float)):
        return (_render_scalar(value),)
    if not isinstance(value, (list, tuple)):
        logger.warning("Unknown type for field %s: %s", field, type(value).__name__)
        return ()

    values: list[str] = []
    for element in value:
        if isinstance(element, str):
            values.append(element)
        elif isinstance(element, (int, float)):
            values.append(_render_scalar(element))
        else:
            logger.warning(
                "Skipping element of field %s with unsupported type %s",
                field,
                type(element).__name__,
            )
    return tuple(values)


def parse_splunk_time(raw: str) -> datetime:
    """Parse a Splunk timestamp; empty or malformed input yields ``ZERO_TIME``."""
    if not raw:
        return ZERO_TIME
    if not SPLUNK_TIME_RE.fullmatch(raw):
        logger.warning("Error parsing timestamp %r: does not match %s", raw, SPLUNK_TIME_FORMAT)
        return ZERO_TIME
    try:
        return datetime.strptime(raw, SPLUNK_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as exc:
        logger.warning("Error parsing timestamp %r: %s", raw, exc)
        return ZERO_TIME


def result_time(result: dict[str, Any], field: str) -> datetime:
    return parse_splunk_time(result_string(result, field))


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize(result: dict[str, Any]) -> AlertDetail:
    """Build an :class:`AlertDetail` from one raw search result.

    Validation is left to the caller (``AlertDetail.valid()``) so invalid
    alerts can still be inspected and logged.
    """
    if not isinstance(result, dict):
        logger.warning("Search result is not an object: %s", type(result).__name__)
        result = {}

    return AlertDetail(
        alert_name=result_string(result, ResultField.ALERT_NAME),
        user=result_string(result, ResultField.USERNAME),
        group=result_string(result, ResultField.GROUP),
        timestamp=result_time(result, ResultField.TIMESTAMP),
        cluster_ids=result_list(result, ResultField.CLUSTER_ID),
        cluster_text=result_string(result, ResultField.CLUSTER_TEXT),
        elevated_summary=result_list(result, ResultField.ELEVATED_SUMMARY),
        elevated_summary_text=result_string(result, ResultField.ELEVATED_SUMMARY_TEXT),
        reasons=result_list(result, ResultField.REASON),
        reasons_text=result_string(result, ResultField.REASON_TEXT),
    )


def alert_details(results: list[dict[str, Any]]) -> list[AlertDetail]:
    """Normalize *results* and keep only valid alerts, in encounter order."""
    details: list[AlertDetail] = []
    for idx, result in enumerate(results or []):
        detail = normalize(result)
        if not detail.valid():
            vprint(f"Dropping invalid alert at result index {idx}: {detail}")
            continue
        details.append(detail)

    vprint(f"Found {len(details)} valid alert(s) in {len(results or [])} search result(s)")
    return details
