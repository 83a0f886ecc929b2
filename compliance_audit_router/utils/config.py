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

"""Configuration loading – YAML file plus ``CAR_*`` environment overrides,
parsed into pydantic models and validated as a whole.

Lookup order for the file:
  1. ``$CAR_CONFIG``
  2. ``./compliance-audit-router.yaml``
  3. ``~/.config/compliance-audit-router/compliance-audit-router.yaml``

Every key can be overridden from the environment, e.g. ``CAR_JIRA_TOKEN``,
``CAR_DRY_RUN=false`` or ``CAR_JIRA_TRANSITIONS=initial=Open,sre=Review,manager=Done``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError

from .common import mask_sensitive, parse_bool
from .constants import APP_NAME, TRANSITION_ROLES
from .errors import ConfigError, TemplateError
from .issue_builder import render_guidance_comment
from .templates import DEFAULT_MESSAGE_TEMPLATE

logger = logging.getLogger(__name__)

ENV_PREFIX = "CAR_"
CONFIG_FILE_NAME = f"{APP_NAME}.yaml"

_URL_SCHEMES = {"http", "https", "ldaps"}


class SplunkConfig(BaseModel):
    host: str = ""
    token: str = ""
    allow_insecure: bool = False


class JiraConfig(BaseModel):
    host: str = ""
    token: str = ""
    username: str = ""
    allow_insecure: bool = False
    key: str = ""
    issue_type: str = ""
    transitions: dict[str, str] = Field(default_factory=dict)


class LDAPConfig(BaseModel):
    enabled: bool = False
    host: str = ""
    allow_insecure: bool = False
    username: str = ""
    password: str = ""
    search_base: str = ""
    scope: str = ""
    attributes: list[str] = Field(default_factory=lambda: ["uid", "manager"])


class Config(BaseModel):
    verbose: bool = True
    dry_run: bool = True
    listen_port: int = 8080
    message_template: str = DEFAULT_MESSAGE_TEMPLATE

    splunk: SplunkConfig = Field(default_factory=SplunkConfig)
    jira: JiraConfig = Field(default_factory=JiraConfig)
    ldap: LDAPConfig = Field(default_factory=LDAPConfig)


# Dotted key path -> converter for environment overrides.
ENV_KEYS: dict[str, Any] = {
    "verbose": parse_bool,
    "dry_run": parse_bool,
    "listen_port": int,
    "message_template": str,
    "splunk.host": str,
    "splunk.token": str,
    "splunk.allow_insecure": parse_bool,
    "jira.host": str,
    "jira.token": str,
    "jira.username": str,
    "jira.allow_insecure": parse_bool,
    "jira.key": str,
    "jira.issue_type": str,
    "jira.transitions": lambda raw: _parse_kv_pairs(raw),
    "ldap.enabled": parse_bool,
    "ldap.host": str,
    "ldap.allow_insecure": parse_bool,
    "ldap.username": str,
    "ldap.password": str,
    "ldap.search_base": str,
    "ldap.scope": str,
    "ldap.attributes": lambda raw: [a.strip() for a in raw.split(",") if a.strip()],
}


def _parse_kv_pairs(raw: str) -> dict[str, str]:
    """Parse a comma-separated ``key=value`` string into a dict."""
    mapping: dict[str, str] = {}
    for pair in (raw or "").split(","):
        pair = pair.strip()
        if not pair or "=" not in pair:
            continue
        k, v = pair.split("=", 1)
        if k.strip():
            mapping[k.strip()] = v.strip()
    return mapping


def env_var_name(dotted_key: str) -> str:
    return ENV_PREFIX + dotted_key.replace(".", "_").upper()


def apply_env_overrides(data: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    for dotted_key, convert in ENV_KEYS.items():
        raw = env.get(env_var_name(dotted_key))
        if raw is None:
            continue
        try:
            value = convert(raw)
        except ValueError as exc:
            raise ConfigError(f"invalid value for {env_var_name(dotted_key)}: {exc}") from exc
        cur = data
        *parents, leaf = dotted_key.split(".")
        for part in parents:
            cur = cur.setdefault(part, {})
        cur[leaf] = value
    return data


def find_config_file(config_path: str | None = None) -> Path | None:
    if config_path:
        return Path(config_path)
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
    if env_path:
        return Path(env_path)
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".config" / APP_NAME / CONFIG_FILE_NAME,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _missing_fields(config: Config) -> list[str]:
    required = {
        "splunk.host": config.splunk.host,
        "splunk.token": config.splunk.token,
        "jira.host": config.jira.host,
        "jira.token": config.jira.token,
        "jira.key": config.jira.key,
        "jira.issue_type": config.jira.issue_type,
    }
    if config.ldap.enabled:
        required.update(
            {
                "ldap.host": config.ldap.host,
                "ldap.search_base": config.ldap.search_base,
                "ldap.scope": config.ldap.scope,
            }
        )
    return [f"missing required configuration value: {name}" for name, value in required.items() if not value]


def _unparsable_hosts(config: Config) -> list[str]:
    errors: list[str] = []
    hosts = {
        "ldap.host": config.ldap.host,
        "splunk.host": config.splunk.host,
        "jira.host": config.jira.host,
    }
    for name, value in hosts.items():
        if not value:
            continue
        try:
            parsed = urlparse(value)
        except ValueError:
            errors.append(f"{name} failed to parse URL: {value}")
            continue
        if not parsed.netloc:
            errors.append(f"{name} invalid URL: {value}")
        if parsed.scheme not in _URL_SCHEMES:
            errors.append(f"{name} missing scheme: {value}")
    return errors


def _credentials_without_secret(config: Config) -> list[str]:
    errors: list[str] = []
    if config.ldap.username and not config.ldap.password:
        errors.append("ldap.username provided without ldap.password")
    if config.jira.username and not config.jira.token:
        errors.append("jira.username provided without jira.token")
    return errors


def _template_errors(config: Config) -> list[str]:
    try:
        render_guidance_comment(config.message_template, "config-check")
    except TemplateError as exc:
        return [f"message template failed to parse: {exc}"]
    return []


def _transition_errors(config: Config) -> list[str]:
    return [
        f"missing required configuration value: jira.transitions.{role}"
        for role in TRANSITION_ROLES
        if not (config.jira.transitions.get(role) or "").strip()
    ]


def validate_config(config: Config) -> list[str]:
    """Run every check and return all problems found (empty when valid)."""
    errors: list[str] = []
    for check in (
        _missing_fields,
        _unparsable_hosts,
        _credentials_without_secret,
        _template_errors,
        _transition_errors,
    ):
        errors.extend(check(config))
    return errors


def log_settings(config: Config) -> None:
    def walk(prefix: str, data: dict[str, Any]) -> None:
        for key, value in data.items():
            dotted = f"{prefix}{key}"
            if isinstance(value, dict) and key != "transitions":
                walk(f"{dotted}.", value)
            else:
                logger.info("found key %s: %s", dotted, mask_sensitive(dotted, value))

    walk("", config.model_dump())


def load_config(config_path: str | None = None, *, validate: bool = True) -> Config:
    """Load, override from the environment, and validate the configuration."""
    data: dict[str, Any] = {}
    path = find_config_file(config_path)
    if path is None:
        logger.info("no config file found; using environment variables")
    elif not path.exists():
        raise ConfigError(f"config file not found: {path}")
    else:
        with open(path, "r", encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        data = loaded
        logger.info("using config file: %s", path)

    data = apply_env_overrides(data)

    try:
        config = Config(**data)
    except ValidationError as exc:
        raise ConfigError(f"configuration invalid: {exc}") from exc

    log_settings(config)

    if validate:
        errors = validate_config(config)
        if errors:
            for err in errors:
                logger.error(err)
            raise ConfigError("configuration invalid: " + "; ".join(errors))

    return config
