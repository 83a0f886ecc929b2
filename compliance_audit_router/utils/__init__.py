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

"""Compliance alert routing utilities.

Modules
-------
common            Shared low-level utilities (verbose logging, logging setup, request ids, masking).
constants         Domain constants (label keys, transition roles, sentinels).
errors            Exception taxonomy and the generic caller-facing error message.
models            Core dataclass definitions (AlertDetail, AlertWebhook, Issue, TicketRef, ...).
alert_parser      Splunk result normalization (scalar/list coercion, timestamps, validity).
labels            Correlation label rendering / parsing.
templates         Guidance comment and diagnostic body templates.
issue_builder     Jira issue fields, guidance comment and diagnostic body construction.
config            YAML + environment configuration loading and validation.
metrics           Prometheus counters.
ticket_lifecycle  Ticket creation and comment-driven workflow transitions.
webhooks          Inbound Splunk / Jira webhook decoding.
pipeline          Core alert orchestration (search, directory, ticket fan-out).
"""
