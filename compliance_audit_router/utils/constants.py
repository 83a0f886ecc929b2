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

"""Domain constants (label names, transition role keys, ticket text)."""

APP_NAME = "compliance-audit-router"

LABEL_MANAGED = f"{APP_NAME}/managed"
LABEL_SRE_KEY = f"{APP_NAME}/sre"
LABEL_MANAGER_KEY = f"{APP_NAME}/manager"

UNKNOWN_USER = "unknown"

TRANSITION_INITIAL = "initial"
TRANSITION_SRE = "sre"
TRANSITION_MANAGER = "manager"
TRANSITION_ROLES = (TRANSITION_INITIAL, TRANSITION_SRE, TRANSITION_MANAGER)

TICKET_SUMMARY = "Compliance Alert: SRE Cluster Admin Elevation"

DRY_RUN_ISSUE_KEY = "DRY-RUN-0000"
