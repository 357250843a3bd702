"""Tests for hfsupload.transfer.prompter module."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest

from hfsupload.core.exceptions import ValidationError
from hfsupload.transfer.prompter import AutoPrompter, ConsolePrompter, _Question


class TestQuestion:
    """Tests for the single-answer question helper."""

    def test_answers_once(self):
        on_answer = MagicMock()
        question = _Question(on_answer)

        question.answer(True)
        question.answer(False)

        on_answer.assert_called_once_with(True)

    def test_dismissed_never_answers(self):
        on_answer = MagicMock()
        question = _Question(on_answer)

        question.dismiss()
        question.answer(True)

        on_answer.assert_not_called()

    def test_expiry_answers_no(self):
        answered = threading.Event()
        answers = []

        def on_answer(value):
            answers.append(value)
            answered.set()

        _Question(on_answer).expire_after(0.01)

        assert answered.wait(2)
        assert answers == [False]


class TestAutoPrompter:
    """Tests for AutoPrompter."""

    def test_answers_immediately(self):
        on_answer = MagicMock()
        AutoPrompter(answer=True).confirm("Resume?", timeout=None, on_answer=on_answer)
        on_answer.assert_called_once_with(True)


class TestConsolePrompter:
    """Tests for ConsolePrompter."""

    @pytest.mark.parametrize("mode,expected", [("always", True), ("never", False), ("ALWAYS", True)])
    def test_fixed_modes(self, mode, expected):
        on_answer = MagicMock()
        ConsolePrompter(mode).confirm("Resume?", timeout=30, on_answer=on_answer)
        on_answer.assert_called_once_with(expected)

    def test_invalid_mode(self):
        with pytest.raises(ValidationError):
            ConsolePrompter("maybe")

    def test_ask_uses_confirm_prompt(self):
        answered = threading.Event()
        answers = []

        def on_answer(value):
            answers.append(value)
            answered.set()

        with patch("hfsupload.transfer.prompter.Confirm.ask", return_value=True) as ask:
            ConsolePrompter("ask").confirm("Resume?", timeout=None, on_answer=on_answer)
            assert answered.wait(2)

        assert answers == [True]
        assert ask.call_args.args[0] == "Resume?"

    def test_alert_levels(self):
        prompter = ConsolePrompter()
        with patch("hfsupload.transfer.prompter.print_error") as error, patch(
            "hfsupload.transfer.prompter.print_warning"
        ) as warning, patch("hfsupload.transfer.prompter.print_info") as info:
            prompter.alert("bad", "error")
            prompter.alert("hmm", "warning")
            prompter.alert("ok")

        error.assert_called_once_with("bad")
        warning.assert_called_once_with("hmm")
        info.assert_called_once_with("ok")
