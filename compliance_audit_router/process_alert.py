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

"""Replay a Splunk alert by search id, outside of the HTTP server.

Input:
- the search id (``sid``) of a fired Splunk alert, or a saved alert webhook
  JSON file

Useful when a webhook delivery was lost or the server returned an error:
the search results are fetched again and one ticket is filed per alert.

Draft / debug (no writes):
    `python3 -m compliance_audit_router.process_alert --sid scheduler__admin__search__RMD5 --dry-run`
"""

from __future__ import annotations

import argparse
import logging

from .shared.clients import build_pipeline
from .utils.common import configure_logging, new_request_id
from .utils.config import load_config
from .utils.errors import ConfigError, MalformedRequest, TrackerError
from .utils.models import AlertWebhook
from .utils.webhooks import decode_alert_webhook

logger = logging.getLogger(__name__)


def load_webhook(args: argparse.Namespace) -> AlertWebhook:
    if args.file:
        with open(args.file, "rb") as fh:
            body = fh.read()
        try:
            return decode_alert_webhook(body, "application/json")
        except MalformedRequest as exc:
            raise SystemExit(f"ERROR: {args.file}: {exc.msg}")
    return AlertWebhook(sid=args.sid)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch a Splunk alert's search results and file Jira tickets")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--sid", help="Search id of the fired alert")
    src.add_argument("--file", "-f", help="Saved Splunk alert webhook JSON")
    p.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to the YAML config file (default: $CAR_CONFIG or the standard search paths)",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not create/comment/transition issues; only read and log intended actions",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logs",
    )
    return p.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"ERROR: {exc}")
    if args.dry_run:
        config.dry_run = True
    configure_logging(verbose=bool(args.verbose) or config.verbose)

    if config.dry_run:
        logger.warning("dry-run is enabled; no changes will be written to Jira")

    webhook = load_webhook(args)
    new_request_id()

    try:
        result = build_pipeline(config).process(webhook)
    except TrackerError as exc:
        raise SystemExit(f"ERROR: {exc}")

    for ref in result.tickets:
        print(f"created {ref.key}")
    if result.diagnostic is not None:
        print(f"filed diagnostic ticket {result.diagnostic.key}")
    if not result.success:
        raise SystemExit(f"ERROR: {result.error}")


if __name__ == "__main__":
    main()
