"""Pytest configuration and fixtures for hfsupload tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator, Optional

import pytest

from hfsupload.models.upload import PendingItem
from hfsupload.transfer.queue import UploadQueue
from hfsupload.transfer.transport import UploadRequest

# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeSend:
    """One request handed to FakeTransport; tests drive it by hand."""

    def __init__(self, request: UploadRequest, on_progress: Callable, on_complete: Callable) -> None:
        self.request = request
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.aborted = False

    def abort(self) -> None:
        self.aborted = True

    def progress(self, sent: int) -> None:
        self.on_progress(sent)

    def complete(self, status: int = 200, error: Optional[BaseException] = None) -> None:
        self.on_complete(status, error)


class FakeTransport:
    """Records requests instead of sending them."""

    def __init__(self) -> None:
        self.sends: list[FakeSend] = []

    def send(self, request: UploadRequest, on_progress: Callable, on_complete: Callable) -> FakeSend:
        send = FakeSend(request, on_progress, on_complete)
        self.sends.append(send)
        return send

    @property
    def last(self) -> FakeSend:
        return self.sends[-1]


class FakeSubscription:
    def __init__(self, channel: str, callback: Callable[[str, Any], None]) -> None:
        self.channel = channel
        self.callback = callback
        self.closed = False
        self.waits = 0

    def wait_connected(self) -> bool:
        self.waits += 1
        return True

    def close(self) -> None:
        self.closed = True


class FakeEventSource:
    """Lets tests push notification events into the open channel."""

    def __init__(self) -> None:
        self.subscriptions: list[FakeSubscription] = []

    def subscribe(self, channel: str, callback: Callable[[str, Any], None]) -> FakeSubscription:
        sub = FakeSubscription(channel, callback)
        self.subscriptions.append(sub)
        return sub

    def push(self, name: str, data: Any) -> None:
        for sub in self.subscriptions:
            if not sub.closed:
                sub.callback(name, data)


class FakeQuestion:
    def __init__(self, message: str, timeout: Optional[float], on_answer: Callable[[bool], None]) -> None:
        self.message = message
        self.timeout = timeout
        self.on_answer = on_answer
        self.dismissed = False

    def answer(self, value: bool) -> None:
        self.on_answer(value)

    def dismiss(self) -> None:
        self.dismissed = True


class FakePrompter:
    """Records alerts and questions; questions are answered by the test."""

    def __init__(self) -> None:
        self.alerts: list[tuple[str, str]] = []
        self.questions: list[FakeQuestion] = []

    def alert(self, message: str, level: str = "info") -> None:
        self.alerts.append((message, level))

    def confirm(self, message: str, *, timeout: Optional[float], on_answer: Callable[[bool], None]) -> Callable[[], None]:
        question = FakeQuestion(message, timeout, on_answer)
        self.questions.append(question)
        return question.dismiss

    def messages(self, level: Optional[str] = None) -> list[str]:
        return [m for m, lvl in self.alerts if level is None or lvl == level]


class FakeScheduler:
    """Collects delayed callbacks instead of starting timers."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], Any]]] = []

    def __call__(self, delay: float, callback: Callable[[], Any]) -> None:
        self.calls.append((delay, callback))

    def run(self) -> None:
        calls, self.calls = self.calls, []
        for _, callback in calls:
            callback()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://files-test.example.org
    verify_ssl: false
    timeout: 30
    skip_existing: true
    resume: always

  production:
    url: https://files.example.org
    verify_ssl: true
    timeout: 60
"""


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def events() -> FakeEventSource:
    return FakeEventSource()


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def queue(transport: FakeTransport, events: FakeEventSource, prompter: FakePrompter, scheduler: FakeScheduler) -> UploadQueue:
    """Upload queue wired to fakes; the estimator thread is not started."""
    return UploadQueue(transport, events, prompter, schedule=scheduler)


@pytest.fixture
def make_item() -> Callable[..., PendingItem]:
    """Factory for queue items that never touch the disk."""

    def _make(relative_path: str = "a.bin", size: int = 1000, mime_type: str = "application/octet-stream") -> PendingItem:
        return PendingItem(
            path=Path("/nonexistent") / relative_path,
            relative_path=relative_path,
            size=size,
            mime_type=mime_type,
        )

    return _make


@pytest.fixture
def make_file(temp_dir: Path) -> Callable[..., Path]:
    """Factory for real files under the temp directory."""

    def _make(relative_path: str, content: bytes = b"x" * 100) -> Path:
        path = temp_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make
