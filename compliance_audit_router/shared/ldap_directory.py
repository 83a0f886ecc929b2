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

"""LDAP directory lookups – resolve a username to its directory uid and
the uid of its manager.
"""

from __future__ import annotations

import ssl

from ldap3 import BASE, LEVEL, NONE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException, LDAPInvalidDnError
from ldap3.utils.conv import escape_filter_chars
from ldap3.utils.dn import parse_dn

from ..utils.common import vprint
from ..utils.config import LDAPConfig
from ..utils.errors import DirectoryError

RECEIVE_TIMEOUT = 30

SCOPES = {
    "base": BASE,
    "one": LEVEL,
    "onelevel": LEVEL,
    "sub": SUBTREE,
    "subtree": SUBTREE,
}


def get_uid(dn: str) -> str:
    """Return the ``uid`` component of a distinguished name."""
    if not dn:
        raise DirectoryError("ldap.get_uid(): no uid field found for given ldap string")
    try:
        parts = parse_dn(dn)
    except LDAPInvalidDnError as exc:
        raise DirectoryError(f"ldap.get_uid(): error parsing dn: {exc}") from exc
    for attr, value, _sep in parts:
        if attr.lower() == "uid":
            return value
    raise DirectoryError("ldap.get_uid(): no uid field found for given ldap string")


def _first(attrs: dict[str, list], name: str) -> str:
    for key, values in attrs.items():
        if key.lower() == name and values:
            return str(values[0])
    return ""


class LDAPDirectory:
    def __init__(self, config: LDAPConfig) -> None:
        scope = SCOPES.get((config.scope or "sub").strip().lower())
        if scope is None:
            raise DirectoryError(f"ldap.LDAPDirectory(): unsupported search scope {config.scope!r}")
        self.config = config
        self.scope = scope
        tls = Tls(validate=ssl.CERT_NONE if config.allow_insecure else ssl.CERT_REQUIRED)
        self.server = Server(
            config.host,
            use_ssl=config.host.lower().startswith("ldaps://"),
            tls=tls,
            get_info=NONE,
        )

    def _connect(self) -> Connection:
        return Connection(
            self.server,
            user=self.config.username or None,
            password=self.config.password or None,
            auto_bind=True,
            read_only=True,
            receive_timeout=RECEIVE_TIMEOUT,
        )

    def lookup_user(self, username: str) -> tuple[str, str]:
        """Return ``(uid, manager_uid)`` for *username*."""
        if not username:
            raise DirectoryError("ldap.lookup_user(): empty username")

        search_filter = f"(uid={escape_filter_chars(username)})"
        vprint(f"ldap.lookup_user(): searching {self.config.search_base} for {search_filter}")
        try:
            conn = self._connect()
        except LDAPException as exc:
            raise DirectoryError(f"ldap.lookup_user(): failed to bind: {exc}") from exc

        try:
            conn.search(
                self.config.search_base,
                search_filter,
                search_scope=self.scope,
                attributes=self.config.attributes or ["uid", "manager"],
            )
            entries = list(conn.entries)
        except LDAPException as exc:
            raise DirectoryError(f"ldap.lookup_user(): search failed: {exc}") from exc
        finally:
            conn.unbind()

        if len(entries) != 1:
            raise DirectoryError(
                f"ldap.lookup_user(): expected 1 entry for {username!r} but found {len(entries)}"
            )

        attrs = entries[0].entry_attributes_as_dict
        user = _first(attrs, "uid") or username
        manager_dn = _first(attrs, "manager")
        if not manager_dn:
            raise DirectoryError(f"ldap.lookup_user(): no manager found for {username!r}")
        return user, get_uid(manager_dn)
