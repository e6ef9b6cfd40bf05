"""Run shell commands on a single SSH server from chat, behind an allowlist and sudo/rm policy."""

__version__ = "0.1.0"
