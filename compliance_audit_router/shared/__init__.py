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

"""Wire clients and helpers shared by the server and the CLI scripts.

Modules
-------
templates       ``{{ placeholder }}`` rendering.
jira_issues     Jira REST v2 client (users, issues, comments, transitions).
splunk_search   Splunk search jobs results client.
ldap_directory  LDAP uid / manager lookup.
clients         Collaborator construction from configuration.
"""
