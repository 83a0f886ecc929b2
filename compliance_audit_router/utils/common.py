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

"""Shared low-level utilities – verbose-logging control, logging setup,
per-request ids, boolean env parsing and token masking.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from typing import Any

logger = logging.getLogger("compliance_audit_router")

_verbose_enabled = False

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

SENSITIVE_KEY_PARTS = ("token", "password")


def parse_bool(raw: str | bool | None, *, name: str = "value") -> bool:
    if isinstance(raw, bool):
        return raw
    s = (raw or "").strip().lower()
    if s in _TRUE_VALUES:
        return True
    if s in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


def set_verbose_enabled(value: bool) -> None:
    global _verbose_enabled
    _verbose_enabled = bool(value)


def is_verbose() -> bool:
    """Return the current verbose-logging state."""
    return _verbose_enabled


def vprint(msg: str) -> None:
    if _verbose_enabled:
        logger.info(msg)


def new_request_id() -> str:
    """Assign a fresh uuid to the current context and return it."""
    rid = str(uuid.uuid4())
    _request_id.set(rid)
    return rid


def current_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Expose the current request id as ``%(request_id)s`` on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        rid = _request_id.get()
        record.request_id = f"{rid} " if rid else ""
        return True


def configure_logging(verbose: bool = False) -> None:
    set_verbose_enabled(verbose)
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(request_id)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.INFO)


def mask_sensitive(key: str, value: Any) -> Any:
    if any(part in key.lower() for part in SENSITIVE_KEY_PARTS) and value:
        return "*****"
    return value
