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

"""Correlation labels – rendering and parsing the ``key:value`` labels that
record the SRE and manager account ids on an issue.

The labels are the only persisted correlation state: the notification
handler reconstructs who is who from them on every event.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import LABEL_MANAGED, LABEL_MANAGER_KEY, LABEL_SRE_KEY


@dataclass(frozen=True)
class Correlation:
    sre_id: str = ""
    manager_id: str = ""


def render_labels(sre_id: str, manager_id: str) -> list[str]:
    return [
        LABEL_MANAGED,
        f"{LABEL_SRE_KEY}:{sre_id}",
        f"{LABEL_MANAGER_KEY}:{manager_id}",
    ]


def _label_value(label: str) -> str:
    _, _, value = label.partition(":")
    return value.strip()


def parse_labels(labels: list[str] | None) -> Correlation:
    sre_id = ""
    manager_id = ""
    for label in labels or []:
        s = (label or "").strip()
        if s.startswith(f"{LABEL_SRE_KEY}:"):
            sre_id = _label_value(s)
        elif s.startswith(f"{LABEL_MANAGER_KEY}:"):
            manager_id = _label_value(s)
    return Correlation(sre_id=sre_id, manager_id=manager_id)


def is_managed(labels: list[str] | None) -> bool:
    return LABEL_MANAGED in (labels or [])
