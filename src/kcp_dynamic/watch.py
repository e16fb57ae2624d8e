"""Streaming decode of watch responses into ordered change events.

A watch response body is a sequence of newline-delimited JSON frames, each an
envelope ``{"type": "ADDED", "object": {...}}``. One daemon thread per
``Watcher`` reads and decodes frames and hands events to the consumer through
a queue holding at most one event, so a slow consumer stalls the socket read
instead of letting events pile up in memory.
"""

from __future__ import annotations

import asyncio
import json
import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType
from typing import Any, Final

import structlog

from kcp_dynamic.clients.transport import StreamResponse
from kcp_dynamic.codec import Unstructured, to_unstructured
from kcp_dynamic.errors import DecodeError, StreamError

log = structlog.get_logger()

# How often blocked hand-offs re-check for cancellation, in seconds
_POLL_INTERVAL: Final = 0.05
_JOIN_TIMEOUT: Final = 5.0

_END: Final = object()


class EventType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class WatchEvent:
    type: EventType
    object: Unstructured


def status_failure(message: str, reason: str = "InternalError", code: int = 500) -> Unstructured:
    """Build the Status document carried by client-side ERROR events."""
    return Unstructured(
        {
            "kind": "Status",
            "apiVersion": "v1",
            "metadata": {},
            "status": "Failure",
            "message": message,
            "reason": reason,
            "code": code,
        }
    )


def decode_event(frame: bytes) -> WatchEvent:
    """Decode one frame into a WatchEvent.

    Raises:
        StreamError: If the frame is not a well-formed watch envelope.
    """
    try:
        envelope: Any = json.loads(frame)
    except ValueError as e:
        msg = f"Malformed watch frame: {e}"
        raise StreamError(msg) from e
    if not isinstance(envelope, dict):
        msg = f"Watch frame must be a JSON object, got {type(envelope).__name__}."
        raise StreamError(msg)

    raw_type = envelope.get("type")
    try:
        event_type = EventType(raw_type)
    except ValueError:
        msg = f"Got invalid watch event type: {raw_type!r}"
        raise StreamError(msg) from None

    try:
        obj = to_unstructured(envelope.get("object"))
    except DecodeError as e:
        msg = f"Watch event {event_type} carries an invalid object: {e}"
        raise StreamError(msg) from e
    return WatchEvent(event_type, obj)


class FrameReader:
    """Split a chunked byte stream into newline-delimited frames.

    Frames may be split across chunks at any byte, including inside a
    multi-byte UTF-8 sequence; blank lines are skipped.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> list[bytes]:
        self._buffer.extend(chunk)
        frames: list[bytes] = []
        while True:
            index = self._buffer.find(b"\n")
            if index == -1:
                break
            line = bytes(self._buffer[:index]).strip()
            del self._buffer[: index + 1]
            if line:
                frames.append(line)
        return frames

    def finish(self) -> bytes | None:
        """Return a final unterminated frame, or None if the buffer is empty."""
        rest = bytes(self._buffer).strip()
        self._buffer.clear()
        return rest or None


def iter_frames(chunks: Iterator[bytes], stopped: threading.Event) -> Iterator[bytes]:
    """Yield frames from ``chunks`` until the stream ends or ``stopped`` is set."""
    reader = FrameReader()
    for chunk in chunks:
        if stopped.is_set():
            return
        yield from reader.feed(chunk)
    tail = reader.finish()
    if tail is not None and not stopped.is_set():
        yield tail


class Watcher:
    """An open watch: an ordered, cancellable sequence of WatchEvents.

    Iterate synchronously or with ``async for``. ``stop()`` closes the
    connection, ends the sequence without delivering further events, and
    releases the reader thread. A terminal ERROR event is delivered when the
    stream breaks; a clean end of stream just ends the sequence.
    """

    def __init__(self, response: StreamResponse, *, path: str = "") -> None:
        self._response = response
        self._path = path
        self._events: queue.Queue[Any] = queue.Queue(maxsize=1)
        self._stopped = threading.Event()
        self._finished = False
        self._close_lock = threading.Lock()
        self._closed = False
        self._pending: asyncio.Future[WatchEvent | None] | None = None
        self._thread = threading.Thread(target=self._run, name=f"watch{path}", daemon=True)
        self._thread.start()
        log.debug("watch_started", path=path)

    # producer side

    def _run(self) -> None:
        try:
            for frame in iter_frames(self._response.chunks(), self._stopped):
                if not self._offer(decode_event(frame)):
                    return
        except Exception as e:
            if not self._stopped.is_set():
                log.warning("watch_stream_failed", path=self._path, error=str(e))
                self._offer(WatchEvent(EventType.ERROR, status_failure(str(e))))
        finally:
            self._offer(_END)
            self._close_response()

    def _offer(self, item: Any) -> bool:
        while not self._stopped.is_set():
            try:
                self._events.put(item, timeout=_POLL_INTERVAL)
            except queue.Full:
                continue
            return True
        return False

    def _close_response(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._response.close()
        except Exception as e:
            log.debug("watch_close_failed", path=self._path, error=str(e))

    # consumer side

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def next_event(self) -> WatchEvent | None:
        """Block until the next event; return None once the sequence has ended."""
        while not self._finished and not self._stopped.is_set():
            try:
                item = self._events.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            if item is _END:
                self._finished = True
                break
            if self._stopped.is_set():
                break
            return item
        return None

    def stop(self) -> None:
        """Cancel the watch. Safe to call more than once and from any thread."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        self._close_response()
        if threading.current_thread() is not self._thread:
            self._thread.join(_JOIN_TIMEOUT)
        log.debug("watch_stopped", path=self._path)

    def __iter__(self) -> Iterator[WatchEvent]:
        while (event := self.next_event()) is not None:
            yield event

    def __aiter__(self) -> Watcher:
        return self

    async def __anext__(self) -> WatchEvent:
        # A cancelled await leaves the worker running; the next call picks up
        # its result instead of starting a second worker.
        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(self.next_event))
        pending = self._pending
        try:
            event = await asyncio.shield(pending)
        except Exception:
            self._pending = None
            raise
        self._pending = None
        if event is None:
            raise StopAsyncIteration
        return event

    def __enter__(self) -> Watcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    async def __aenter__(self) -> Watcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await asyncio.to_thread(self.stop)
