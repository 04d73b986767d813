"""Test display helpers."""

import pytest
from pathlib import Path
from unittest.mock import patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shell_explorer.display import ask_selection, build_table, parse_selection, truncate


class TestTruncate:

    def test_short_text_unchanged(self):
        assert truncate("short", 10) == "short"

    def test_long_text_is_cut(self):
        assert truncate("abcdefghijkl", 10) == "abcdefg..."
        assert len(truncate("x" * 200, 40)) == 40


class TestParseSelection:
    """Test interactive selection answers."""

    @pytest.mark.parametrize("answer,expected", [
        ("1", [0]),
        ("1,3", [0, 2]),
        ("2-4", [1, 2, 3]),
        ("1, 3 5", [0, 2, 4]),
        ("5,1,1", [0, 4]),
        ("a", [0, 1, 2, 3, 4]),
        ("ALL", [0, 1, 2, 3, 4]),
        ("q", []),
        ("", []),
        ("0,6,99", []),
        ("4-9", [3, 4]),
        ("x,2,b-c", [1]),
        ("²", []),
        ("1-²,³,2", [1]),
        ("0-2", [0, 1]),
    ])
    def test_parse_selection(self, answer, expected):
        assert parse_selection(answer, 5) == expected

    def test_huge_range_is_clamped(self):
        assert parse_selection("1-999999999999999999", 3) == [0, 1, 2]
        assert parse_selection("4-999999999999999999", 3) == []

    @patch("shell_explorer.display.Prompt.ask", return_value="1-2")
    def test_ask_selection(self, mock_ask):
        assert ask_selection(3, "directories to delete") == [0, 1]
        mock_ask.assert_called_once()


class TestBuildTable:

    def test_columns_and_rows(self):
        table = build_table([("Name", "cyan", 10), ("Size", "yellow", None)], [("a", 1), ("b", 2)])

        assert [column.header for column in table.columns] == ["Name", "Size"]
        assert table.row_count == 2

    def test_plain_table_has_no_styles(self):
        table = build_table([("Name", "cyan", 10)], [], use_colors=False)

        assert table.columns[0].style == ""
        assert table.header_style == ""
