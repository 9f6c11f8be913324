# display/animations/spinner.py

import asyncio
import threading
from typing import Callable, Optional, Sequence

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⢰", "⣠", "⣄", "⣆", "⡆", "⠇")


class LoadingIndicator:
    """
    Animated status glyph shown while a turn is in flight.

    Every `interval` seconds a frame update is enqueued on the display sink.
    The active flag is guarded by the lock shared with the response
    accumulator; `stop` also sets an event so the task exits without waiting
    out its current sleep.
    """
    def __init__(
        self,
        sink,
        on_frame: Callable[[str], None],
        lock: Optional[threading.Lock] = None,
        interval: float = 0.1,
        frames: Sequence[str] = FRAMES,
        label: str = "Generating...",
    ):
        """
        Args:
            sink: DisplaySink that receives frame updates
            on_frame: Applied on the display task with the frame text ("" clears)
            lock: Lock guarding the active flag
            interval: Seconds between frames
            frames: Animation frames, cycled in order
            label: Text shown between the glyphs
        """
        self.sink = sink
        self.on_frame = on_frame
        self.lock = lock or threading.Lock()
        self.interval = interval
        self.frames = tuple(frames)
        self.label = label

        self._active = False
        self._stop_event: Optional[asyncio.Event] = None
        self.task: Optional[asyncio.Task] = None
        self.frames_shown = 0

    @property
    def active(self) -> bool:
        with self.lock:
            return self._active

    def format_frame(self, index: int) -> str:
        glyph = self.frames[index % len(self.frames)]
        return f" {glyph} {self.label} {glyph} "

    def start(self) -> None:
        """Set the active flag and spawn the animation task."""
        with self.lock:
            if self._active:
                return
            self._active = True
            self._stop_event = asyncio.Event()
            self.frames_shown = 0
        self.task = asyncio.create_task(self._animate(self._stop_event))

    def stop(self) -> None:
        """Clear the active flag and wake the task so it exits now."""
        with self.lock:
            if not self._active:
                return
            self._active = False
            stop_event = self._stop_event
        stop_event.set()
        self.sink.enqueue(lambda: self.on_frame(""))

    async def _animate(self, stop_event: asyncio.Event) -> None:
        """Enqueue frames until stopped."""
        index = 0
        while True:
            with self.lock:
                if not self._active or stop_event.is_set():
                    break
                text = self.format_frame(index)
                self.sink.enqueue(lambda text=text: self.on_frame(text))
                self.frames_shown += 1
            index += 1
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue

    async def wait_stopped(self) -> None:
        """Wait for the animation task to finish after `stop`."""
        if self.task:
            await self.task
