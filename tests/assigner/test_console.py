"""Tests for the console prompt and progress reporter."""

import pytest

from src.cartsync.assigner.adapters.console import ConsoleKeyPrompt, TqdmProgressReporter


class TestConsoleKeyPrompt:
    @pytest.mark.parametrize("key,expected", [("y", True), ("Y", True), ("n", False), ("\r", False), ("", False)])
    async def test_only_affirmative_key_continues(self, key, expected):
        prompt = ConsoleKeyPrompt(read_key=lambda: key)

        assert await prompt.confirm_continue() is expected


class TestTqdmProgressReporter:
    def test_lines_go_to_stdout_and_stderr(self, capsys):
        reporter = TqdmProgressReporter(disable=True)
        reporter.start(2)

        reporter.info("[SUCCESS] Updated device: 'SN1'")
        reporter.error("[ERROR] Device not found for serial 'SN2'")
        reporter.advance("SN1")
        reporter.advance("SN2")
        reporter.close()

        captured = capsys.readouterr()
        assert "[SUCCESS] Updated device: 'SN1'" in captured.out
        assert "[ERROR] Device not found for serial 'SN2'" in captured.err

    def test_close_without_start(self):
        TqdmProgressReporter(disable=True).close()
