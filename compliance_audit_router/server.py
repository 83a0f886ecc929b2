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

"""HTTP shell for the compliance audit router.

Routes:
- ``GET /healthz``, ``GET /readyz`` – liveness / readiness, always ``ok``
- ``POST /api/v1/alert`` – Splunk alert webhook, files one ticket per alert
- ``POST /api/v1/jira_webhook`` – Jira comment notification, advances the ticket
- ``GET /metrics`` – Prometheus exposition

Every body is ``text/plain``. Malformed requests get their own 4xx message;
everything else that fails gets a 500 with the generic message only, the
detail goes to the log.

Run:
    `python3 -m compliance_audit_router.server --config compliance-audit-router.yaml`
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.concurrency import run_in_threadpool

from .shared.clients import directory_client as make_directory_client
from .shared.clients import tracker_factory as make_tracker_factory
from .shared.splunk_search import SplunkClient
from .utils.common import configure_logging, new_request_id, parse_bool
from .utils.config import Config, load_config
from .utils.errors import GENERIC_ERROR_MSG, ConfigError, MalformedRequest
from .utils.metrics import (
    HTTP_RESPONSES,
    JIRA_WEBHOOK_PROCESS_FAILURES,
    JIRA_WEBHOOK_RECEIVED,
    REGISTRY,
    SPLUNK_WEBHOOK_PROCESS_FAILURES,
    SPLUNK_WEBHOOK_RECEIVED,
)
from .utils.pipeline import AlertPipeline, process_notification
from .utils.webhooks import decode_alert_webhook, decode_notification

logger = logging.getLogger(__name__)

ALERT_PROCESS = "ProcessAlertHandler"
JIRA_PROCESS = "ProcessJiraWebhook"


def _text(process: str, status: int, body: str) -> Response:
    HTTP_RESPONSES.labels(process=process, code=str(status)).inc()
    if status == 204:
        return Response(status_code=204)
    return PlainTextResponse(body, status_code=status)


def create_app(
    config: Config,
    *,
    search_client: Any = None,
    directory_client: Any = None,
    tracker_factory: Callable[[], Any] | None = None,
) -> FastAPI:
    """Build the application; collaborators default to the real wire clients."""
    if tracker_factory is None:
        tracker_factory = make_tracker_factory(config)
    if search_client is None:
        search_client = SplunkClient(config.splunk)
    if directory_client is None:
        directory_client = make_directory_client(config)

    pipeline = AlertPipeline(
        config, search_client, directory_client, tracker_factory, process_name=ALERT_PROCESS
    )

    app = FastAPI(title="compliance-audit-router", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> str:
        return "ok"

    @app.get("/readyz", response_class=PlainTextResponse)
    async def readyz() -> str:
        return "ok"

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    @app.post("/api/v1/alert")
    async def alert(request: Request) -> Response:
        rid = new_request_id()
        SPLUNK_WEBHOOK_RECEIVED.labels(process=ALERT_PROCESS).inc()
        logger.info("received alert webhook (request %s)", rid)

        body = await request.body()
        try:
            webhook = decode_alert_webhook(body, request.headers.get("content-type"))
        except MalformedRequest as exc:
            logger.error("malformed alert webhook: %s", exc.msg)
            SPLUNK_WEBHOOK_PROCESS_FAILURES.labels(
                process=ALERT_PROCESS, error_type="malformed_request"
            ).inc()
            return _text(ALERT_PROCESS, exc.status, exc.msg)
        except Exception:
            logger.exception("failed decoding alert webhook")
            SPLUNK_WEBHOOK_PROCESS_FAILURES.labels(process=ALERT_PROCESS, error_type="unknown").inc()
            return _text(ALERT_PROCESS, 500, GENERIC_ERROR_MSG)

        try:
            result = await run_in_threadpool(pipeline.process, webhook)
        except Exception:
            logger.exception("failed processing alert webhook %s", webhook.sid)
            SPLUNK_WEBHOOK_PROCESS_FAILURES.labels(process=ALERT_PROCESS, error_type="unknown").inc()
            return _text(ALERT_PROCESS, 500, GENERIC_ERROR_MSG)

        if not result.success:
            logger.error("failed processing alert webhook %s: %s", webhook.sid, result.error)
            SPLUNK_WEBHOOK_PROCESS_FAILURES.labels(process=ALERT_PROCESS, error_type="processing").inc()
            return _text(ALERT_PROCESS, 500, GENERIC_ERROR_MSG)

        logger.info(
            "alert webhook %s processed; created %d ticket(s): %s",
            webhook.sid,
            len(result.tickets),
            ", ".join(ref.key for ref in result.tickets) or "-",
        )
        return _text(ALERT_PROCESS, 200, "ok")

    @app.post("/api/v1/jira_webhook")
    async def jira_webhook(request: Request) -> Response:
        rid = new_request_id()
        JIRA_WEBHOOK_RECEIVED.labels(process=JIRA_PROCESS).inc()
        logger.info("received jira webhook (request %s)", rid)

        body = await request.body()
        try:
            event = decode_notification(body, request.headers.get("content-type"))
        except MalformedRequest as exc:
            logger.error("malformed jira webhook: %s", exc.msg)
            JIRA_WEBHOOK_PROCESS_FAILURES.labels(
                process=JIRA_PROCESS, error_type="malformed_request"
            ).inc()
            return _text(JIRA_PROCESS, exc.status, exc.msg)
        except Exception:
            logger.exception("failed decoding jira webhook")
            JIRA_WEBHOOK_PROCESS_FAILURES.labels(process=JIRA_PROCESS, error_type="unknown").inc()
            return _text(JIRA_PROCESS, 500, GENERIC_ERROR_MSG)

        try:
            await run_in_threadpool(
                process_notification, config, tracker_factory, event, process_name=JIRA_PROCESS
            )
        except Exception:
            logger.exception("failed processing jira webhook for issue %s", event.issue_key or event.issue_id)
            JIRA_WEBHOOK_PROCESS_FAILURES.labels(process=JIRA_PROCESS, error_type="unknown").inc()
            return _text(JIRA_PROCESS, 500, GENERIC_ERROR_MSG)

        return _text(JIRA_PROCESS, 204, "")

    return app


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Route Splunk compliance alerts into Jira tickets")
    p.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to the YAML config file (default: $CAR_CONFIG or the standard search paths)",
    )
    p.add_argument(
        "--dry-run",
        default=None,
        help="Override dry_run from the config (true/false)",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logs regardless of the config",
    )
    return p.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"ERROR: {exc}")
    if args.dry_run is not None:
        config.dry_run = parse_bool(args.dry_run, name="--dry-run")
    configure_logging(verbose=bool(args.verbose) or config.verbose)

    if config.dry_run:
        logger.warning("dry-run is enabled; no changes will be written to Jira")

    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.listen_port, log_config=None)


if __name__ == "__main__":
    main()
