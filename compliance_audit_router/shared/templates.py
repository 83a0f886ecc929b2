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

"""Generic ``{{ placeholder }}`` template rendering engine."""

import json
import re
from typing import Any

from ..utils.errors import TemplateError


PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_\.]+)\s*\}\}")

_MISSING = object()


def _get_nested_value(data: dict[str, Any], dotted_key: str) -> Any:
    """Resolve a dot-separated key path against a nested dict.

    A leading dot is ignored so ``{{.Username}}`` and ``{{ Username }}``
    address the same value.
    """
    cur: Any = data
    for part in (dotted_key or "").split("."):
        if not part:
            continue
        if isinstance(cur, dict) and part in cur:
            cur = cur.get(part)
        else:
            return _MISSING
    if cur is None:
        return ""
    return cur


def render_markdown_template(template: str, values: dict[str, Any], *, strict: bool = False) -> str:
    """Replace ``{{ key }}`` placeholders in *template* with values from *values*.

    In non-strict mode unknown keys render as ``""``. In strict mode an
    unknown key or a stray ``{{`` left after substitution raises
    :class:`TemplateError`.
    """
    def repl(match: re.Match[str]) -> str:
        key = match.group(1)
        v = _get_nested_value(values, key)
        if v is _MISSING:
            if strict:
                raise TemplateError(f"template references unknown value {key!r}")
            return ""
        if isinstance(v, (dict, list)):
            return json.dumps(v)
        return str(v)

    rendered = PLACEHOLDER_RE.sub(repl, template or "")
    if strict:
        leftover = PLACEHOLDER_RE.sub("", template or "")
        if "{{" in leftover or "}}" in leftover:
            raise TemplateError("template contains an unterminated or invalid placeholder")
    return rendered
