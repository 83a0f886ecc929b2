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

"""Replay a saved Jira comment webhook and advance the ticket it names."""

from __future__ import annotations

import argparse

from .shared.clients import tracker_factory
from .utils.common import configure_logging, new_request_id
from .utils.config import load_config
from .utils.errors import ConfigError, MalformedRequest, TrackerError
from .utils.pipeline import process_notification
from .utils.webhooks import decode_notification


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Apply the workflow transition for a saved Jira comment webhook",
    )
    parser.add_argument("--event-file", "-f", required=True, help="Jira webhook JSON payload")
    parser.add_argument("--config", "-c", default=None, help="Path to the YAML config file")
    parser.add_argument("--dry-run", action="store_true", help="Resolve the transition but do not apply it")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logs")
    args = parser.parse_args()

    configure_logging(verbose=bool(args.verbose))
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"ERROR: {exc}")
    if args.dry_run:
        config.dry_run = True
    configure_logging(verbose=bool(args.verbose) or config.verbose)

    with open(args.event_file, "rb") as f:
        body = f.read()
    try:
        event = decode_notification(body, "application/json")
    except MalformedRequest as exc:
        raise SystemExit(f"ERROR: {args.event_file}: {exc.msg}")

    new_request_id()
    try:
        name = process_notification(config, tracker_factory(config), event)
    except TrackerError as exc:
        raise SystemExit(f"ERROR: {exc}")

    if name is None:
        print(f"no transition applied to {event.issue_key or event.issue_id}")
    else:
        print(f"{event.issue_key or event.issue_id} -> {name}")


if __name__ == "__main__":
    main()
