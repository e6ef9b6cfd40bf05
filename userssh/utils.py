"""Shared utility functions."""

TRUNCATION_MARKER = "..."


def shape_output(text: str, max_length: int) -> tuple[str, bool]:
    """Cut text to max_length characters. Returns (text, truncated).

    A cut result is ``text[:max_length]`` followed by TRUNCATION_MARKER.
    """
    if len(text) <= max_length:
        return text, False
    return text[:max_length] + TRUNCATION_MARKER, True
