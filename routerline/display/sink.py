# display/sink.py

import asyncio
from typing import Callable, Optional

Update = Callable[[], None]

_STOP = object()


class DisplaySink:
    """
    Single-consumer queue that serializes every visual mutation.

    Producers (the network task, the loading indicator) enqueue callables and
    return at once; `run` applies them one at a time, in submission order, on
    the display-owning task and refreshes the surface after each one.
    """

    def __init__(self, refresh: Optional[Callable[[], None]] = None, logger=None):
        """
        Args:
            refresh: Called after each applied update to redraw the surface
            logger: Optional Logger instance
        """
        self._queue: asyncio.Queue = asyncio.Queue()
        self._refresh = refresh
        self.logger = logger
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.running = False

    def enqueue(self, update: Update) -> None:
        """Submit an update from the event loop thread. Never blocks."""
        self._queue.put_nowait(update)

    def enqueue_threadsafe(self, update: Update) -> None:
        """Submit an update from a thread other than the event loop's."""
        if self._loop is None:
            raise RuntimeError("DisplaySink is not running")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, update)

    def pending(self) -> int:
        return self._queue.qsize()

    def _apply(self, update: Update) -> None:
        try:
            update()
        except Exception as e:
            # keep draining
            if self.logger:
                self.logger.error(f"Display update failed: {e}", exc_info=True)
        if self._refresh:
            self._refresh()

    async def run(self) -> None:
        """Apply queued updates until `stop` is called."""
        self._loop = asyncio.get_running_loop()
        self.running = True
        try:
            while True:
                update = await self._queue.get()
                try:
                    if update is _STOP:
                        return
                    self._apply(update)
                finally:
                    self._queue.task_done()
        finally:
            self.running = False

    def apply_pending(self) -> int:
        """Apply everything queued so far on the calling task. Returns the count."""
        applied = 0
        while not self._queue.empty():
            update = self._queue.get_nowait()
            try:
                if update is _STOP:
                    continue
                self._apply(update)
                applied += 1
            finally:
                self._queue.task_done()
        return applied

    async def join(self) -> None:
        """Wait until every update submitted so far has been applied."""
        await self._queue.join()

    def stop(self) -> None:
        """Ask `run` to exit once the updates already queued are applied."""
        self._queue.put_nowait(_STOP)
