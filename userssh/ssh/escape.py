"""Escaping for commands embedded in a double-quoted shell string."""

import re

_SPECIAL_RE = re.compile(r'(["$`\\])')


def escape_command(command: str) -> str:
    """Backslash-escape ``"``, ``$``, backtick and backslash.

    Only protects the surrounding double quotes. Separators such as ``;``,
    ``&&`` and ``|`` pass through and reach the remote shell unchanged.
    """
    return _SPECIAL_RE.sub(r"\\\1", command)
