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

"""Ticket body templates (guidance comment and diagnostic tickets)."""


DEFAULT_MESSAGE_TEMPLATE = (
    "{{ username }}\n\n"
    "This action requires justification. "
    "Please provide the justification in the comments section below."
)


SEARCH_FAILURE_TEMPLATE = """A Compliance Alert was received from Splunk, but the alert details could not be retrieved. Please review:
Splunk Webhook Search ID: {{ sid }}
Splunk Webhook Data: {{ webhook_json }}

Error: {{ error }}
"""


DIRECTORY_FAILURE_TEMPLATE = """A Compliance Alert was received from Splunk, but the user details could not be retrieved from LDAP. Please review and assign accordingly:
Compliance Data: {{ alert_json }}

Error: {{ error }}
"""
