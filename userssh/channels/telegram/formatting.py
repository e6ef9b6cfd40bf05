"""Telegram formatting utilities."""

import html
import re

TELEGRAM_MAX_MESSAGE_LEN = 4096

_PRE_OVERHEAD = len("<pre></pre>")


def strip_html_tags(text: str) -> str:
    """Remove HTML tags and unescape entities, for plain-text fallback."""
    return html.unescape(re.sub(r"<[^>]+>", "", text))


def split_escaped(text: str, max_len: int) -> list[str]:
    """HTML-escape text and split it into chunks of at most max_len characters.

    Chunks never end inside an entity such as ``&amp;``.
    """
    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for ch in text:
        esc = html.escape(ch)
        if current and size + len(esc) > max_len:
            chunks.append("".join(current))
            current, size = [], 0
        current.append(esc)
        size += len(esc)
    if current:
        chunks.append("".join(current))
    return chunks


def reply_to_html(reply: str, max_len: int = TELEGRAM_MAX_MESSAGE_LEN) -> list[str]:
    """Render a gateway reply as Telegram HTML messages.

    The first line is the heading ("Result:", "SSH command failed: ...") and
    stays outside the block; the rest is shown in ``<pre>`` blocks.
    """
    heading, sep, body = reply.partition("\n")
    if not sep or not body:
        return split_escaped(reply, max_len)

    heading_html = html.escape(heading)
    limit = max_len - _PRE_OVERHEAD - len(heading_html) - 1
    if limit < max_len // 4:
        # Heading too long to share a message (e.g. one huge stderr line)
        return [f"<pre>{part}</pre>" for part in split_escaped(reply, max_len - _PRE_OVERHEAD)]

    chunks = []
    for i, part in enumerate(split_escaped(body, limit)):
        block = f"<pre>{part}</pre>"
        if i == 0:
            block = f"{heading_html}\n{block}"
        chunks.append(block)
    return chunks
