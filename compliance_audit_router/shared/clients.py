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

"""Collaborator construction from configuration."""

from __future__ import annotations

from typing import Callable

from ..utils.config import Config
from ..utils.pipeline import AlertPipeline
from .jira_issues import JiraClient
from .ldap_directory import LDAPDirectory
from .splunk_search import SplunkClient


def tracker_factory(config: Config) -> Callable[[], JiraClient]:
    """Return a callable building a fresh Jira client per request."""
    return lambda: JiraClient(config.jira)


def directory_client(config: Config) -> LDAPDirectory | None:
    if not config.ldap.enabled:
        return None
    return LDAPDirectory(config.ldap)


def build_pipeline(config: Config) -> AlertPipeline:
    return AlertPipeline(
        config,
        SplunkClient(config.splunk),
        directory_client(config),
        tracker_factory(config),
    )
