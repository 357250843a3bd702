"""Network transports for the transfer engine.

Two collaborators are abstracted so the queue can run against any backend:

- ``Transport`` sends one upload request and reports progress/completion
  through callbacks.
- ``EventSource`` subscribes to a notification channel and delivers
  ``(name, data)`` push events through a callback.

``HttpxTransport`` and ``HttpxEventSource`` implement them on top of
``HFSClient``; callbacks fire on their worker threads.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import quote

import httpx

from hfsupload.core.client import HFSClient
from hfsupload.core.exceptions import TransferAbortedError
from hfsupload.transfer.constants import (
    CHUNK_SIZE,
    FORM_FIELD,
    NOTIFICATIONS_PATH,
    SUBSCRIBE_TIMEOUT,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
CompleteCallback = Callable[[int, Optional[BaseException]], None]
EventCallback = Callable[[str, Any], None]


# =============================================================================
# Protocols
# =============================================================================


@dataclass
class UploadRequest:
    """Everything a transport needs to send one file tail."""

    destination: str
    params: dict[str, str]
    path: Path
    filename: str
    offset: int
    size: int
    # Called on the sending thread before the body goes out.
    wait_ready: Optional[Callable[[], Any]] = field(default=None, repr=False, compare=False)

    @property
    def body_size(self) -> int:
        """Bytes of file content carried by this request."""
        return self.size - self.offset


class TransferHandle(Protocol):
    def abort(self) -> None: ...


class Transport(Protocol):
    def send(
        self,
        request: UploadRequest,
        on_progress: ProgressCallback,
        on_complete: CompleteCallback,
    ) -> TransferHandle:
        """Start sending without blocking.

        ``on_progress`` receives the cumulative file bytes sent by this request.
        ``on_complete`` fires exactly once with the HTTP status, or 0 when the
        request never produced one, plus the transport error if any.
        """
        ...


class Subscription(Protocol):
    def wait_connected(self) -> bool:
        """Block (bounded) until the channel is listening."""
        ...

    def close(self) -> None: ...


class EventSource(Protocol):
    def subscribe(self, channel: str, callback: EventCallback) -> Subscription: ...


# =============================================================================
# Multipart Body
# =============================================================================


def _quote_filename(filename: str) -> str:
    return quote(filename, safe="/ ()[]{}!#$&'+,;=@^`~-._")


def encode_single_part(
    request: UploadRequest,
    *,
    should_abort: Callable[[], bool],
    on_progress: ProgressCallback,
    chunk_size: int = CHUNK_SIZE,
    boundary: Optional[str] = None,
) -> tuple[dict[str, str], Iterator[bytes]]:
    """Build headers and a streaming body for a one-file multipart form.

    The body reads ``request.path`` from ``request.offset`` to its end. Between
    chunks it checks ``should_abort`` and raises ``TransferAbortedError``.

    Returns:
        Tuple of (headers, body iterator).
    """
    boundary = boundary or uuid.uuid4().hex
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{FORM_FIELD}"; '
        f'filename="{_quote_filename(request.filename)}"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    ).encode()
    tail = f"\r\n--{boundary}--\r\n".encode()
    headers = {
        "Content-Type": f"multipart/form-data; boundary={boundary}",
        "Content-Length": str(len(head) + request.body_size + len(tail)),
    }

    def body() -> Iterator[bytes]:
        yield head
        sent = 0
        with open(request.path, "rb") as f:
            f.seek(request.offset)
            while sent < request.body_size:
                if should_abort():
                    raise TransferAbortedError(request.filename)
                chunk = f.read(min(chunk_size, request.body_size - sent))
                if not chunk:
                    break
                yield chunk
                sent += len(chunk)
                on_progress(sent)
        yield tail

    return headers, body()


# =============================================================================
# HTTPX Transport
# =============================================================================


@dataclass
class _RequestHandle:
    """Abort flag shared with the worker thread.

    Completion is reported at most once. An abort that arrives after the
    whole body went out reports status 0 right away instead of waiting
    for the server's reply, which is then dropped.
    """

    on_complete: CompleteCallback
    aborted: threading.Event = field(default_factory=threading.Event)
    body_sent: threading.Event = field(default_factory=threading.Event)
    future: Optional[Future] = None
    _reported: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def abort(self) -> None:
        self.aborted.set()
        if self.body_sent.is_set():
            self.report(0, None)

    def report(self, status: int, error: Optional[BaseException]) -> None:
        with self._lock:
            if self._reported:
                return
            self._reported = True
        self.on_complete(status, error)


class HttpxTransport:
    """Sends uploads one at a time on a single worker thread."""

    def __init__(self, client: HFSClient, *, chunk_size: int = CHUNK_SIZE) -> None:
        self.client = client
        self.chunk_size = chunk_size
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upload")

    def send(
        self,
        request: UploadRequest,
        on_progress: ProgressCallback,
        on_complete: CompleteCallback,
    ) -> _RequestHandle:
        handle = _RequestHandle(on_complete)
        handle.future = self._executor.submit(self._run, request, handle, on_progress)
        return handle

    def _run(
        self,
        request: UploadRequest,
        handle: _RequestHandle,
        on_progress: ProgressCallback,
    ) -> None:
        status = 0
        error: Optional[BaseException] = None
        try:
            if request.wait_ready is not None:
                request.wait_ready()
            headers, body = encode_single_part(
                request,
                should_abort=handle.aborted.is_set,
                on_progress=on_progress,
                chunk_size=self.chunk_size,
            )

            def tracked() -> Iterator[bytes]:
                yield from body
                handle.body_sent.set()

            status = self.client.upload(
                request.destination,
                params=request.params,
                content=tracked(),
                headers=headers,
            )
            if handle.aborted.is_set():
                logger.debug("Discarding status %d of aborted upload %s", status, request.filename)
                status = 0
        except TransferAbortedError:
            logger.debug("Upload of %s aborted by client", request.filename)
        except (httpx.HTTPError, OSError) as e:
            if handle.aborted.is_set():
                logger.debug("Upload of %s interrupted after abort: %s", request.filename, e)
            else:
                logger.warning("Upload of %s failed: %s", request.filename, e)
                error = e
        handle.report(status, error)

    def close(self) -> None:
        self._executor.shutdown(wait=False)


# =============================================================================
# Server-Sent Events
# =============================================================================


def parse_sse(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Parse ``text/event-stream`` lines into (event name, data) pairs."""
    event = "message"
    data: list[str] = []
    for line in lines:
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = "message", []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    if data:
        yield event, "\n".join(data)


def iter_notifications(payload: Any) -> Iterator[tuple[str, Any]]:
    """Unpack a notification message into ``(name, data)`` events.

    Accepts a list of ``[name, data]`` pairs, a single pair, or an object with
    ``name`` and ``data`` keys.
    """
    if isinstance(payload, dict) and "name" in payload:
        yield str(payload["name"]), payload.get("data")
    elif isinstance(payload, list) and len(payload) == 2 and isinstance(payload[0], str):
        yield payload[0], payload[1]
    elif isinstance(payload, list):
        for entry in payload:
            if isinstance(entry, (list, tuple)) and len(entry) == 2 and isinstance(entry[0], str):
                yield entry[0], entry[1]


class _StreamSubscription:
    def __init__(self, channel: str, connect_timeout: float = SUBSCRIBE_TIMEOUT) -> None:
        self.channel = channel
        self.connect_timeout = connect_timeout
        self.connected = threading.Event()
        self.closed = False
        self.response: Optional[httpx.Response] = None

    def wait_connected(self) -> bool:
        if self.connected.wait(self.connect_timeout):
            return True
        logger.warning("Notification channel %s not connected after %.1fs", self.channel, self.connect_timeout)
        return False

    def close(self) -> None:
        self.closed = True
        if self.response is not None:
            self.response.close()


class HttpxEventSource:
    """Reads the notification stream of a channel on a daemon thread."""

    def __init__(
        self,
        client: HFSClient,
        *,
        path: str = NOTIFICATIONS_PATH,
        connect_timeout: float = SUBSCRIBE_TIMEOUT,
    ) -> None:
        self.client = client
        self.path = path
        self.connect_timeout = connect_timeout

    def subscribe(self, channel: str, callback: EventCallback) -> _StreamSubscription:
        """Start listening on a daemon thread and return without waiting."""
        sub = _StreamSubscription(channel, self.connect_timeout)
        thread = threading.Thread(
            target=self._read,
            args=(sub, callback),
            name=f"notifications-{channel}",
            daemon=True,
        )
        thread.start()
        return sub

    def _read(self, sub: _StreamSubscription, callback: EventCallback) -> None:
        try:
            with self.client.stream_events(self.path, params={"channel": sub.channel}) as resp:
                sub.response = resp
                sub.connected.set()
                for name, data in parse_sse(resp.iter_lines()):
                    if sub.closed:
                        break
                    self._dispatch(name, data, callback)
        except (httpx.HTTPError, httpx.StreamError) as e:
            if sub.closed:
                logger.debug("Notification channel %s closed: %s", sub.channel, e)
            else:
                logger.warning("Notification channel %s failed: %s", sub.channel, e)
        finally:
            sub.connected.set()

    @staticmethod
    def _dispatch(name: str, data: str, callback: EventCallback) -> None:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed notification: %r", data[:200])
            return
        if name != "message":
            callback(name, payload)
            return
        for event, event_data in iter_notifications(payload):
            callback(event, event_data)
