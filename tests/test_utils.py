"""Tests for userssh.utils — shape_output."""

import pytest

from userssh.utils import TRUNCATION_MARKER, shape_output


class TestShapeOutput:
    def test_short_text_unchanged(self):
        assert shape_output("hello", 10) == ("hello", False)

    def test_exact_length_unchanged(self):
        assert shape_output("a" * 10, 10) == ("a" * 10, False)

    def test_empty(self):
        assert shape_output("", 5) == ("", False)

    @pytest.mark.parametrize("length,limit", [(11, 10), (5000, 2000), (2, 1)])
    def test_long_text_cut(self, length, limit):
        text = "".join(chr(ord("a") + i % 26) for i in range(length))
        shaped, truncated = shape_output(text, limit)
        assert truncated is True
        assert len(shaped) == limit + len(TRUNCATION_MARKER)
        assert shaped.endswith(TRUNCATION_MARKER)
        assert text.startswith(shaped[:limit])
