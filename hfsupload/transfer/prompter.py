"""User-facing notices and confirmations raised by the transfer engine.

The engine never blocks on the user: ``confirm`` returns immediately and the
answer arrives later through ``on_answer``. The returned callable dismisses
the question; a dismissed question never answers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Optional, Protocol

from rich.prompt import Confirm

from hfsupload.core.output import err_console, print_error, print_info, print_warning
from hfsupload.core.validation import validate_resume_mode

logger = logging.getLogger(__name__)

AnswerCallback = Callable[[bool], None]
Dismiss = Callable[[], None]

LOG_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


class Prompter(Protocol):
    def alert(self, message: str, level: str = "info") -> None: ...

    def confirm(self, message: str, *, timeout: Optional[float], on_answer: AnswerCallback) -> Dismiss:
        """Ask a yes/no question; a timeout answers no."""
        ...


class _Question:
    """Delivers at most one answer, unless dismissed first."""

    def __init__(self, on_answer: AnswerCallback) -> None:
        self._on_answer = on_answer
        self._lock = threading.Lock()
        self._settled = False
        self._timer: Optional[threading.Timer] = None

    def answer(self, value: bool) -> None:
        with self._lock:
            if self._settled:
                return
            self._settled = True
        self._cancel_timer()
        self._on_answer(value)

    def dismiss(self) -> None:
        with self._lock:
            self._settled = True
        self._cancel_timer()

    def expire_after(self, timeout: float) -> None:
        self._timer = threading.Timer(timeout, self.answer, args=(False,))
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()


class AutoPrompter:
    """Answers every question the same way and logs notices."""

    def __init__(self, answer: bool = False) -> None:
        self.answer = answer

    def alert(self, message: str, level: str = "info") -> None:
        logger.log(LOG_LEVELS.get(level, logging.INFO), message)

    def confirm(self, message: str, *, timeout: Optional[float], on_answer: AnswerCallback) -> Dismiss:
        logger.info("%s -> %s", message, "yes" if self.answer else "no")
        on_answer(self.answer)
        return lambda: None


class ConsolePrompter:
    """Terminal prompter driven by the ``resume`` mode (ask, always, never)."""

    def __init__(self, mode: str = "ask") -> None:
        self.mode = validate_resume_mode(mode)

    def alert(self, message: str, level: str = "info") -> None:
        if level == "error":
            print_error(message)
        elif level == "warning":
            print_warning(message)
        else:
            print_info(message)

    def confirm(self, message: str, *, timeout: Optional[float], on_answer: AnswerCallback) -> Dismiss:
        question = _Question(on_answer)
        if self.mode != "ask":
            question.answer(self.mode == "always")
            return question.dismiss

        if timeout is not None:
            question.expire_after(timeout)
            message = f"{message} [dim]({int(timeout)}s)[/dim]"
        threading.Thread(
            target=lambda: question.answer(Confirm.ask(message, console=err_console, default=False)),
            name="confirm",
            daemon=True,
        ).start()
        return question.dismiss
