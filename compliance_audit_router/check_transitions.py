#!/usr/bin/env python3
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

"""Check that every transition configured for the router exists on a Jira issue.

Configured roles (``jira.transitions`` in the config file):

  initial
  sre
  manager

Jira only lists the transitions available from an issue's current status, so
run this against an issue in the status the router leaves new tickets in.

Usage:
  python3 -m compliance_audit_router.check_transitions --issue OHSS-1234
"""

from __future__ import annotations

import argparse
import sys

from .shared.jira_issues import JiraClient
from .utils.config import JiraConfig, load_config
from .utils.constants import TRANSITION_ROLES
from .utils.errors import ConfigError, TrackerError


def missing_transitions(jira_config: JiraConfig, available: set[str]) -> list[tuple[str, str]]:
    """Return ``(role, name)`` pairs whose configured name is not in *available*."""
    missing: list[tuple[str, str]] = []
    for role in TRANSITION_ROLES:
        name = (jira_config.transitions.get(role) or "").strip()
        if name not in available:
            missing.append((role, name))
    return missing


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Verify that the configured Jira transitions exist on an issue",
    )
    parser.add_argument(
        "--issue",
        required=True,
        help="Jira issue key or id to inspect",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to the YAML config file",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config, validate=False)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise SystemExit(1)

    try:
        available = {t.name for t in JiraClient(config.jira).list_transitions(args.issue)}
    except TrackerError as exc:
        print(f"ERROR: failed to list transitions for {args.issue}: {exc}", file=sys.stderr)
        raise SystemExit(1)

    missing = missing_transitions(config.jira, available)
    if not missing:
        print(f"All {len(TRANSITION_ROLES)} configured transitions exist on {args.issue}")
        raise SystemExit(0)

    print(f"ERROR: {len(missing)} configured transition(s) missing on {args.issue}\n", file=sys.stderr)
    print("Missing transitions:", file=sys.stderr)
    for role, name in missing:
        print(f"  - {role}: {name or '<not configured>'}", file=sys.stderr)
    print(f"\nAvailable transitions:\n  {', '.join(sorted(available)) or '-'}", file=sys.stderr)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
