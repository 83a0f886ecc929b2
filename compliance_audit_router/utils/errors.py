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

"""Exception taxonomy shared by the pipeline, the lifecycle engine and the
collaborator clients.
"""

# Returned to the client on every internal failure; details only go to logs.
GENERIC_ERROR_MSG = "The request could not be completed. Please contact the system administrator."


class MalformedRequest(Exception):
    """Inbound payload could not be decoded; ``msg`` is safe to show the caller."""

    def __init__(self, status: int, msg: str) -> None:
        super().__init__(msg)
        self.status = status
        self.msg = msg


class ComplianceRouterError(Exception):
    """Base class for all internal failures."""


class ConfigError(ComplianceRouterError):
    pass


class SearchError(ComplianceRouterError):
    """Splunk search results could not be retrieved or decoded."""


class DirectoryError(ComplianceRouterError):
    """LDAP lookup failed."""


class TrackerError(ComplianceRouterError):
    """A Jira call failed."""


class TemplateError(ComplianceRouterError):
    """The message template could not be rendered."""


class TransitionNotFound(TrackerError):
    pass
