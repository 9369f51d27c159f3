"""Tests for command chain splitting and root extraction.

These tests only parse command strings - no execution occurs.
"""

import pytest

from prompt_shell.shell import (
    detect_command_substitution,
    get_command_root,
    get_command_roots,
    normalize_command,
    split_commands,
    strip_shell_wrapper,
)


class TestGetCommandRoots:
    """Tests for root extraction across chain segments."""

    def test_single_command(self):
        assert get_command_roots("ls -l") == ["ls"]

    def test_path_prefix_is_stripped(self):
        assert get_command_roots("/usr/local/bin/node script.js") == ["node"]

    def test_windows_path_prefix_is_stripped(self):
        assert get_command_roots(r"C:\Tools\git.exe status") == ["git.exe"]

    def test_empty_string(self):
        assert get_command_roots("") == []

    def test_mix_of_operators(self):
        assert get_command_roots("a;b|c&&d||e&f") == ["a", "b", "c", "d", "e", "f"]

    def test_chained_command_with_quotes(self):
        result = get_command_roots('echo "hello" && git commit -m "feat"')
        assert result == ["echo", "git"]

    def test_operators_inside_quotes_do_not_split(self):
        assert get_command_roots("echo 'a;b|c' && grep \"x&&y\" file") == ["echo", "grep"]

    def test_quoted_program_name(self):
        assert get_command_root('"/opt/my tools/run" --fast') == "run"


class TestSplitCommands:
    """Tests for segment text extraction."""

    def test_segments_keep_their_arguments(self):
        assert split_commands("git status && ls -l | wc -l") == [
            "git status",
            "ls -l",
            "wc -l",
        ]

    def test_escaped_operator_stays_in_segment(self):
        assert split_commands(r"echo a\;b; ls") == [r"echo a\;b", "ls"]

    def test_redirection_ampersand_does_not_split(self):
        assert split_commands("make 2>&1 | tee log") == ["make 2>&1", "tee log"]
        assert split_commands("build &> out.txt") == ["build &> out.txt"]

    def test_newline_separates_commands(self):
        assert split_commands("echo hi\nrm -rf /\n\nls") == ["echo hi", "rm -rf /", "ls"]

    def test_quoted_newline_does_not_split(self):
        assert split_commands("echo 'a\nb'") == ["echo 'a\nb'"]

    def test_line_continuation_stays_in_segment(self):
        assert split_commands("make \\\n  all") == ["make \\\n  all"]

    def test_trailing_operator_is_ignored(self):
        assert split_commands("sleep 1 &") == ["sleep 1"]

    def test_normalize_collapses_whitespace(self):
        assert normalize_command("  git   status\t--short ") == "git status --short"


class TestStripShellWrapper:
    """Tests for removing `sh -c` style wrappers."""

    @pytest.mark.parametrize(
        "command,expected",
        [
            ('sh -c "ls -l"', "ls -l"),
            ('  bash  -c  "ls -l"  ', "ls -l"),
            ("zsh -c ls -l", "ls -l"),
            ('cmd.exe /c "dir"', "dir"),
            ("ls -l", "ls -l"),
        ],
    )
    def test_strip(self, command, expected):
        assert strip_shell_wrapper(command) == expected


class TestDetectCommandSubstitution:
    """Tests for substitution construct detection."""

    def test_dollar_paren(self):
        assert detect_command_substitution("echo $(rm -rf /)")

    def test_backticks(self):
        assert detect_command_substitution("echo `whoami`")

    def test_process_substitution(self):
        assert detect_command_substitution("diff <(ls) <(ls -a)")
        assert detect_command_substitution("tee >(wc -l)")

    def test_dollar_paren_inside_double_quotes(self):
        assert detect_command_substitution('echo "$(pwd)"')

    def test_single_quotes_are_literal(self):
        assert not detect_command_substitution("echo '$(pwd)'")
        assert not detect_command_substitution("echo '`pwd`'")

    def test_escaped_dollar(self):
        assert not detect_command_substitution(r"echo \$(pwd)")

    def test_plain_command(self):
        assert not detect_command_substitution("ls -la | grep foo")
