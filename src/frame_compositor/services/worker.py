"""Worker that runs a batch job off the host's thread.

The host posts one START message and reads engine messages from the outbox.
There is no cancel message: `terminate` tears the worker down, which is safe
because the engine keeps nothing outside memory.
"""

import asyncio
import logging
import queue
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import suppress
from dataclasses import dataclass, field

from frame_compositor.adapters.image_source import ImageSource
from frame_compositor.domain.messages import (
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    StartMessage,
    is_terminal,
)
from frame_compositor.services.archive import ArchiveBuilder
from frame_compositor.services.dispatcher import JobDispatcher
from frame_compositor.services.renderer import Renderer

_logger = logging.getLogger(__name__)

_TERMINATED = object()


@dataclass
class FrameWorker:
    """Hosts one dispatcher on a dedicated thread and event loop."""

    image_source_factory: Callable[[], ImageSource]
    renderer: Renderer
    archive_factory: Callable[[], ArchiveBuilder] = ArchiveBuilder
    _outbox: queue.Queue = field(init=False, default_factory=queue.Queue)
    _thread: threading.Thread | None = field(init=False, default=None)
    _loop: asyncio.AbstractEventLoop | None = field(init=False, default=None)
    _task: asyncio.Task | None = field(init=False, default=None)
    _terminated: threading.Event = field(init=False, default_factory=threading.Event)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)
    _finished: bool = field(init=False, default=False)

    def post_message(self, message: StartMessage) -> None:
        """Start the job described by a START message."""
        if self._terminated.is_set():
            raise RuntimeError("Worker has been terminated")
        if self._thread is not None:
            raise RuntimeError("Worker accepts a single START message")
        self._thread = threading.Thread(
            target=self._run, args=(message,), name="frame-worker", daemon=True
        )
        self._thread.start()

    def messages(
        self, timeout: float | None = None
    ) -> Iterator[ProgressMessage | CompleteMessage | ErrorMessage]:
        """Yield engine messages until the terminal one.

        Stops early if the worker is terminated. Raises `TimeoutError` when no
        message arrives within `timeout` seconds.
        """
        while (message := self.next_message(timeout)) is not None:
            yield message
            if is_terminal(message):
                return

    def next_message(
        self, timeout: float | None = None
    ) -> ProgressMessage | CompleteMessage | ErrorMessage | None:
        """Return the next message, or None once the worker is terminated."""
        try:
            item = self._outbox.get(timeout=timeout)
        except queue.Empty as exc:
            raise TimeoutError("No message from frame worker") from exc
        if item is _TERMINATED:
            # leave the marker for later readers
            self._outbox.put(_TERMINATED)
            return None
        return item

    def collect(
        self, timeout: float | None = None
    ) -> list[ProgressMessage | CompleteMessage | ErrorMessage]:
        """Block until the job ends and return every message it produced.

        `timeout` bounds the whole job, not each message.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        collected: list[ProgressMessage | CompleteMessage | ErrorMessage] = []
        while True:
            remaining = None
            if deadline is not None:
                remaining = max(0.0, deadline - time.monotonic())
            message = self.next_message(remaining)
            if message is None:
                return collected
            collected.append(message)
            if is_terminal(message):
                return collected

    def terminate(self) -> None:
        """Stop the worker. No further messages are delivered."""
        with self._lock:
            self._terminated.set()
            self._outbox.put(_TERMINATED)
        loop, task = self._loop, self._task
        if loop is not None and task is not None:
            with suppress(RuntimeError):
                loop.call_soon_threadsafe(task.cancel)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the worker thread to exit."""
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self, message: StartMessage) -> None:
        try:
            asyncio.run(self._drive(message))
        except asyncio.CancelledError:
            _logger.info("Frame worker terminated")
        except Exception as exc:
            _logger.exception("Frame worker crashed")
            self._deliver(ErrorMessage(payload=str(exc)))

    async def _drive(self, message: StartMessage) -> None:
        self._loop = asyncio.get_running_loop()
        self._task = asyncio.current_task()
        if self._terminated.is_set():
            return
        image_source = self.image_source_factory()
        dispatcher = JobDispatcher(
            image_source=image_source,
            renderer=self.renderer,
            archive_factory=self.archive_factory,
        )
        try:
            async for event in dispatcher.run(message):
                self._deliver(event)
        finally:
            await image_source.close()

    def _deliver(
        self, message: ProgressMessage | CompleteMessage | ErrorMessage
    ) -> None:
        with self._lock:
            if self._terminated.is_set() or self._finished:
                return
            self._finished = is_terminal(message)
            self._outbox.put(message)
