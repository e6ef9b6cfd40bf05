"""Execution policy - caller allowlist and sudo/rm denylist checks."""

from dataclasses import dataclass

from .config import SSHConfig

DENY_NOT_AUTHORIZED = "not authorized"
DENY_SUDO = "sudo disabled"
DENY_RM = "rm disabled"

# Caller-facing text for each deny reason
DENIAL_MESSAGES = {
    DENY_NOT_AUTHORIZED: "You are not authorized to use SSH.",
    DENY_SUDO: "sudo commands are disabled.",
    DENY_RM: "rm commands are disabled.",
}


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of a policy check. ``reason`` is empty when allowed."""
    allowed: bool
    reason: str = ""

    @property
    def message(self) -> str:
        return DENIAL_MESSAGES.get(self.reason, self.reason)


ALLOW = PolicyDecision(allowed=True)


def authorize(caller_id: str, command: str, config: SSHConfig) -> PolicyDecision:
    """Decide whether ``caller_id`` may run ``command``. First matching rule wins.

    The sudo check is a plain substring match, so ``pseudo`` is denied too.
    The rm check only looks at the start of the stripped command.
    """
    if config.allowed_users and caller_id not in config.allowed_users:
        return PolicyDecision(allowed=False, reason=DENY_NOT_AUTHORIZED)

    if config.disable_sudo and "sudo" in command:
        return PolicyDecision(allowed=False, reason=DENY_SUDO)

    if config.disable_rm and command.strip().startswith("rm"):
        return PolicyDecision(allowed=False, reason=DENY_RM)

    return ALLOW
