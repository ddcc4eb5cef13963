"""Tests for resolve_agent.core.extractor — command extraction."""

from __future__ import annotations

import pytest

from resolve_agent.core.extractor import COMMAND_PREFIXES, extract_commands


class TestExtractCommands:
    def test_keeps_recognized_lines_in_order(self):
        text = (
            "Here is what to run:\n"
            "pip install requests==2.31.0\n"
            "Then verify with:\n"
            "pip show requests\n"
        )
        assert extract_commands(text) == [
            "pip install requests==2.31.0",
            "pip show requests",
        ]

    def test_lines_are_trimmed(self):
        assert extract_commands("   npm install react@18.2.0   \n") == [
            "npm install react@18.2.0"
        ]

    def test_code_fences_are_skipped_not_terminating(self):
        text = (
            "```bash\n"
            "pip uninstall -y urllib3\n"
            "```\n"
            "```\n"
            "pip install urllib3==1.26.18\n"
            "```"
        )
        assert extract_commands(text) == [
            "pip uninstall -y urllib3",
            "pip install urllib3==1.26.18",
        ]

    def test_command_like_lines_outside_whitelist_are_excluded(self):
        text = (
            "sudo pip install requests\n"
            "apt-get install libssl-dev\n"
            "$ pip install requests\n"
            "1. pip install requests\n"
            "echo done\n"
        )
        assert extract_commands(text) == []

    def test_prefix_needs_trailing_space(self):
        assert extract_commands("pipx install black\nnpmrc\n") == []

    def test_multiword_prefixes(self):
        text = "python -m pip install --upgrade pip\nrm -rf node_modules\n"
        assert extract_commands(text) == [
            "python -m pip install --upgrade pip",
            "rm -rf node_modules",
        ]

    @pytest.mark.parametrize("prefix", COMMAND_PREFIXES)
    def test_every_prefix_is_recognized(self, prefix):
        line = f"{prefix}something"
        assert extract_commands(line) == [line]

    def test_no_commands_gives_empty_list(self):
        assert extract_commands("I could not find a solution.") == []
        assert extract_commands("") == []
