"""Tests for userssh.policy — allowlist and sudo/rm checks."""

import pytest

from userssh.config import SSHConfig
from userssh.policy import (
    DENIAL_MESSAGES,
    DENY_NOT_AUTHORIZED,
    DENY_RM,
    DENY_SUDO,
    authorize,
)


class TestAllowlist:
    def test_empty_allowlist_is_unrestricted(self, ssh_config):
        assert authorize("anyone", "ls", ssh_config).allowed is True

    def test_member_allowed(self, restricted_config):
        assert authorize("alice", "ls", restricted_config).allowed is True
        assert authorize("42", "ls", restricted_config).allowed is True

    @pytest.mark.parametrize("caller", ["bob", "", "Alice", "4"])
    def test_non_member_denied(self, restricted_config, caller):
        decision = authorize(caller, "ls", restricted_config)
        assert decision.allowed is False
        assert decision.reason == DENY_NOT_AUTHORIZED

    def test_allowlist_checked_before_sudo(self, restricted_config):
        decision = authorize("bob", "sudo ls", restricted_config)
        assert decision.reason == DENY_NOT_AUTHORIZED


class TestSudo:
    @pytest.mark.parametrize("command", [
        "sudo reboot",
        "ls && sudo reboot",
        "pseudo test",
        "echo sudoku",
        "/usr/bin/sudo -i",
    ])
    def test_substring_denied(self, ssh_config, command):
        decision = authorize("u", command, ssh_config)
        assert decision.allowed is False
        assert decision.reason == DENY_SUDO

    def test_case_sensitive(self, ssh_config):
        assert authorize("u", "SUDO reboot", ssh_config).allowed is True

    def test_disabled_check_allows(self):
        cfg = SSHConfig(host="h", username="u", password="p", disable_sudo=False)
        assert authorize("u", "sudo reboot", cfg).allowed is True

    def test_sudo_checked_before_rm(self, ssh_config):
        assert authorize("u", "rm -rf / && sudo ls", ssh_config).reason == DENY_SUDO


class TestRm:
    @pytest.mark.parametrize("command", [
        "rm -rf /tmp",
        "  rm -rf /tmp",
        "\trm file",
        "rmdir foo",
    ])
    def test_prefix_denied(self, ssh_config, command):
        decision = authorize("u", command, ssh_config)
        assert decision.allowed is False
        assert decision.reason == DENY_RM

    @pytest.mark.parametrize("command", [
        "format rm",
        "ls; rm -rf /tmp",
        "echo rm",
    ])
    def test_not_at_start_allowed(self, ssh_config, command):
        assert authorize("u", command, ssh_config).allowed is True

    def test_disabled_check_allows(self):
        cfg = SSHConfig(host="h", username="u", password="p", disable_rm=False)
        assert authorize("u", "rm -rf /tmp", cfg).allowed is True


class TestDecision:
    def test_allow_has_no_reason(self, ssh_config):
        decision = authorize("u", "uptime", ssh_config)
        assert decision.allowed is True
        assert decision.reason == ""

    def test_deny_messages(self, ssh_config, restricted_config):
        assert authorize("u", "sudo ls", ssh_config).message == DENIAL_MESSAGES[DENY_SUDO]
        assert authorize("u", "rm x", ssh_config).message == DENIAL_MESSAGES[DENY_RM]
        assert (authorize("bob", "ls", restricted_config).message
                == DENIAL_MESSAGES[DENY_NOT_AUTHORIZED])

    def test_deterministic(self, ssh_config):
        assert authorize("u", "sudo x", ssh_config) == authorize("u", "sudo x", ssh_config)
