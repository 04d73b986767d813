"""Test alias discovery from the shell session and config files."""

import subprocess
import pytest
from pathlib import Path
from unittest.mock import patch, Mock

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shell_explorer.aliases import (
    AliasEntry,
    SESSION_SOURCE,
    filter_aliases,
    get_all_aliases,
    get_session_aliases,
    parse_alias_line,
    parse_config_aliases,
)
from tests.conftest import create_test_file


class TestParseAliasLine:
    """Test parsing of single alias definitions."""

    @pytest.mark.parametrize("line,expected", [
        ("alias ll='ls -la'", ("ll", "ls -la")),
        ('alias gs="git status"', ("gs", "git status")),
        ("alias k=kubectl", ("k", "kubectl")),
        ("ll='ls -la'", ("ll", "ls -la")),
        ("alias grep='grep --color=auto'", ("grep", "grep --color=auto")),
        ("  alias  x = y  ", ("x", "y")),
    ])
    def test_valid_lines(self, line, expected):
        assert parse_alias_line(line) == expected

    def test_mismatched_quotes_are_kept(self):
        assert parse_alias_line("alias a='echo\"") == ("a", "'echo\"")

    def test_line_without_equals(self):
        assert parse_alias_line("alias ll") is None
        assert parse_alias_line("export PATH") is None

    def test_empty_name(self):
        assert parse_alias_line("alias ='ls'") is None


class TestParseConfigAliases:
    """Test extracting aliases from config file content."""

    def test_only_alias_lines_are_used(self):
        content = """
# alias commented='nope'
export EDITOR=vim
alias ll='ls -la'
    alias gs="git status"
FOO=bar
"""
        assert parse_config_aliases(content) == [("ll", "ls -la"), ("gs", "git status")]

    def test_empty_content(self):
        assert parse_config_aliases("") == []


class TestSessionAliases:
    """Test querying the live shell for aliases."""

    @patch("shell_explorer.aliases.subprocess.run")
    def test_bash_and_zsh_output(self, mock_run):
        mock_run.return_value = Mock(
            returncode=0,
            stdout="alias ll='ls -la'\ngs='git status'\nnot an alias\n",
        )

        aliases = get_session_aliases("/bin/bash")

        assert aliases == {"ll": "ls -la", "gs": "git status"}
        args, kwargs = mock_run.call_args
        assert args[0] == ["/bin/bash", "-c", "alias"]
        assert kwargs["timeout"] == 5

    @patch("shell_explorer.aliases.subprocess.run")
    def test_missing_shell(self, mock_run):
        mock_run.side_effect = FileNotFoundError("no such shell")
        assert get_session_aliases("/nonexistent/shell") == {}

    @patch("shell_explorer.aliases.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="alias", timeout=5)
        assert get_session_aliases("/bin/bash") == {}

    @patch("shell_explorer.aliases.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = Mock(returncode=1, stdout="alias ll='ls'\n")
        assert get_session_aliases("/bin/bash") == {}


class TestGetAllAliases:
    """Test merging aliases from every source."""

    @patch("shell_explorer.aliases.get_session_aliases")
    def test_first_definition_wins(self, mock_session, test_config, home_dir):
        mock_session.return_value = {"ll": "ls -la"}
        create_test_file(home_dir, ".bashrc", "alias ll='ls -l'\nalias gs='git status'\n")
        create_test_file(home_dir, ".zshrc", "alias gs='git status -sb'\nalias k='kubectl'\n")

        aliases = get_all_aliases(test_config)

        assert aliases == [
            AliasEntry(alias="gs", command="git status", source=".bashrc"),
            AliasEntry(alias="k", command="kubectl", source=".zshrc"),
            AliasEntry(alias="ll", command="ls -la", source=SESSION_SOURCE),
        ]

    @patch("shell_explorer.aliases.get_session_aliases", return_value={})
    def test_no_config_files(self, mock_session, test_config):
        assert get_all_aliases(test_config) == []
        mock_session.assert_called_once_with(test_config.shell)


class TestFilterAliases:
    """Test alias filtering."""

    def setup_method(self):
        self.aliases = [
            AliasEntry(alias="gs", command="git status", source=".bashrc"),
            AliasEntry(alias="k", command="kubectl", source=".zshrc"),
            AliasEntry(alias="ll", command="ls -la", source=SESSION_SOURCE),
        ]

    def test_pattern_matches_name_or_command(self):
        assert [a.alias for a in filter_aliases(self.aliases, "GIT")] == ["gs"]
        assert [a.alias for a in filter_aliases(self.aliases, "ll")] == ["ll"]

    def test_source_filter(self):
        assert [a.alias for a in filter_aliases(self.aliases, source="zsh")] == ["k"]
        assert [a.alias for a in filter_aliases(self.aliases, source="Session")] == ["ll"]

    def test_no_filters(self):
        assert filter_aliases(self.aliases) == self.aliases
