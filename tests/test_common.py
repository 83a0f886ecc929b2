"""Logging helpers and CLI helper tests."""

import logging

import pytest

from compliance_audit_router.check_transitions import missing_transitions
from compliance_audit_router.utils.common import (
    RequestIdFilter,
    current_request_id,
    is_verbose,
    mask_sensitive,
    new_request_id,
    parse_bool,
    set_verbose_enabled,
    vprint,
)
from compliance_audit_router.utils.config import JiraConfig


class TestParseBool:
    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", " yes ", "on", True])
    def test_true(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "no", "off", "", None, False])
    def test_false(self, raw):
        assert parse_bool(raw) is False

    def test_invalid(self):
        with pytest.raises(ValueError, match="dry_run"):
            parse_bool("perhaps", name="dry_run")


class TestVerbose:
    def test_vprint_respects_flag(self, caplog):
        caplog.set_level(logging.INFO, logger="compliance_audit_router")
        vprint("hidden")
        set_verbose_enabled(True)
        assert is_verbose()
        vprint("shown")
        messages = [r.getMessage() for r in caplog.records]
        assert "shown" in messages
        assert "hidden" not in messages


class TestRequestId:
    def test_filter_prefixes_current_id(self):
        rid = new_request_id()
        assert current_request_id() == rid
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert RequestIdFilter().filter(record)
        assert record.request_id == f"{rid} "


class TestMaskSensitive:
    def test_masks_secrets_only(self):
        assert mask_sensitive("jira.token", "abc") == "*****"
        assert mask_sensitive("ldap.password", "abc") == "*****"
        assert mask_sensitive("jira.token", "") == ""
        assert mask_sensitive("jira.host", "https://x") == "https://x"


class TestMissingTransitions:
    def test_reports_missing_and_unconfigured(self):
        jira = JiraConfig(transitions={"initial": "Open", "sre": "Review"})
        assert missing_transitions(jira, {"Open", "Done"}) == [("sre", "Review"), ("manager", "")]

    def test_all_present(self):
        jira = JiraConfig(transitions={"initial": "Open", "sre": "Review", "manager": "Done"})
        assert missing_transitions(jira, {"Open", "Review", "Done", "Other"}) == []
