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

"""Splunk search jobs API – fetch the results of the search that fired an
alert, by search id.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from ..utils.common import vprint
from ..utils.config import SplunkConfig
from ..utils.errors import SearchError
from ..utils.models import SearchResults

REQUEST_TIMEOUT = 30


def search_results_from_json(data: Any) -> SearchResults:
    if not isinstance(data, dict):
        raise SearchError(f"splunk.retrieve_results(): unexpected response type {type(data).__name__}")
    results = data.get("results") or []
    if not isinstance(results, list):
        raise SearchError("splunk.retrieve_results(): 'results' is not a list")
    try:
        init_offset = int(data.get("init_offset") or 0)
    except (TypeError, ValueError):
        init_offset = 0
    return SearchResults(
        init_offset=init_offset,
        messages=list(data.get("messages") or []),
        preview=bool(data.get("preview")),
        results=results,
        highlighted=dict(data.get("highlighted") or {}),
    )


class SplunkClient:
    def __init__(self, config: SplunkConfig, session: requests.Session | None = None) -> None:
        self.base_url = config.host.rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = not config.allow_insecure
        self.session.headers.update({"Authorization": f"Bearer {config.token}"})

    def retrieve_results(self, sid: str) -> SearchResults:
        url = f"{self.base_url}/services/search/v2/jobs/{quote(sid, safe='')}/results"
        vprint(f"splunk.retrieve_results(): url: {url} (bearer token redacted)")
        try:
            resp = self.session.get(url, params={"output_mode": "json"}, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise SearchError(f"splunk.retrieve_results(): {exc}") from exc

        if resp.status_code != 200:
            raise SearchError(
                f"error retrieving search results from Splunk: {resp.status_code} {resp.reason}"
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise SearchError(f"splunk.retrieve_results(): could not decode response: {exc}") from exc

        results = search_results_from_json(data)
        vprint(f"splunk.retrieve_results(): retrieved {len(results.results)} result(s) for sid {sid}")
        return results
