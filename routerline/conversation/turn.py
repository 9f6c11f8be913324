# conversation/turn.py

import asyncio
from enum import Enum
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, List, Optional

from ..errors import ChatClientError, TransportError, TurnInProgressError
from .accumulator import ResponseAccumulator
from .messages import ConversationLog, Role

EMPTY_RESPONSE_NOTICE = "Assistant returned an empty response"


class TurnState(Enum):
    IDLE = "idle"
    AWAITING_HEADERS = "awaiting_headers"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    ERRORED = "errored"


@dataclass
class TurnContext:
    """
    Everything one turn needs, handed to each task the turn spawns.

    `messages` is the request payload captured at submit time, so later log
    appends cannot leak into a request already in flight.
    """
    turn_number: int
    region_id: int
    messages: List[Dict[str, str]] = field(default_factory=list)
    deltas: int = 0
    finished: bool = False


class TurnController:
    """
    Runs one request/response turn at a time.

    The controller itself lives on the display-owning task. The network work
    of each turn runs in a spawned task that only talks to the display through
    the sink; the assistant message is recorded inside a queued update.
    """

    def __init__(self, client, display, log: ConversationLog,
                 accumulator: Optional[ResponseAccumulator] = None,
                 indicator=None, logger=None):
        """
        Args:
            client: ChatCompletionsClient (anything with `open_stream(messages)`)
            display: Display the turn renders into
            log: Conversation log, the source of every request payload
            accumulator: Response buffer, created if not given
            indicator: LoadingIndicator, created from the display if not given
            logger: Optional Logger instance
        """
        self.client = client
        self.display = display
        self.log = log
        self.logger = logger
        self.accumulator = accumulator or ResponseAccumulator()
        self.indicator = indicator or display.animations.create_loading_indicator(lock=self.accumulator.lock)

        self.state = TurnState.IDLE
        self.context: Optional[TurnContext] = None
        self.task: Optional[asyncio.Task] = None
        self.last_error: Optional[BaseException] = None
        self._turns = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def model(self) -> str:
        config = getattr(self.client, 'config', None)
        return getattr(config, 'model', '') or 'unknown'

    def status_text(self, status: str) -> str:
        return f"Model: {self.model} | Status: {status}"

    def _set_state(self, state: TurnState) -> None:
        if self.logger:
            self.logger.debug(f"Turn state: {self.state.value} -> {state.value}")
        self.state = state

    def submit(self, text: str) -> Optional[asyncio.Task]:
        """
        Start a turn for `text`.

        The user message is recorded before any network activity. Returns the
        spawned network task, or None when the input is blank.

        Raises:
            TurnInProgressError: If the previous turn has not returned to idle.
        """
        if not text or not text.strip():
            return None
        if self.state is not TurnState.IDLE:
            raise TurnInProgressError(f"Cannot start a turn while {self.state.value}")

        self._turns += 1
        self.log.append(Role.USER, text)
        self.display.sink.enqueue(partial(self.display.add_plain, 'user', text))

        self.accumulator.reset()
        ctx = TurnContext(
            turn_number=self._turns,
            region_id=self.display.transcript.reserve_id(),
            messages=self.log.to_payload(),
        )
        self.context = ctx
        self.last_error = None
        self._idle.clear()
        self._set_state(TurnState.AWAITING_HEADERS)

        self.display.sink.enqueue(partial(self.display.set_status, self.status_text("Generating...")))
        self.indicator.start()
        self.task = asyncio.create_task(self._run_turn(ctx))
        return self.task

    async def _run_turn(self, ctx: TurnContext) -> None:
        """Network side of a turn: stream deltas, then queue the finalize step."""
        try:
            async with self.client.open_stream(ctx.messages) as deltas:
                self._set_state(TurnState.STREAMING)
                async for delta in deltas:
                    self._on_delta(ctx, delta)
        except ChatClientError as e:
            self._fail(ctx, e)
            return
        except asyncio.CancelledError:
            self._fail(ctx, TransportError("Request cancelled"))
            raise
        except Exception as e:
            if self.logger:
                self.logger.error(f"Unexpected turn error: {e}", exc_info=True)
            self._fail(ctx, e)
            return

        self._set_state(TurnState.FINALIZING)
        self.display.sink.enqueue(partial(self._finalize, ctx))

    def _on_delta(self, ctx: TurnContext, delta: str) -> None:
        self.accumulator.append(delta)
        ctx.deltas += 1
        self.display.sink.enqueue(partial(self._render_partial, ctx))

    def _render_partial(self, ctx: TurnContext) -> None:
        if ctx.finished:
            return
        self.display.show_assistant(ctx.region_id, self.accumulator.snapshot(), partial=True)

    def _finalize(self, ctx: TurnContext) -> None:
        """Record and fully render the reply. Runs on the display task."""
        try:
            text = self.accumulator.snapshot()
            if text:
                self.log.append(Role.ASSISTANT, text)
                self.display.show_assistant(ctx.region_id, text, partial=False)
            else:
                self.display.add_notice(EMPTY_RESPONSE_NOTICE)
            if self.logger:
                self.logger.debug(f"Turn {ctx.turn_number} complete: {ctx.deltas} deltas, {len(text)} chars")
        finally:
            self._return_to_idle(ctx)

    def _fail(self, ctx: TurnContext, error: BaseException) -> None:
        self._set_state(TurnState.ERRORED)
        self.last_error = error
        if self.logger:
            self.logger.error(f"Turn {ctx.turn_number} failed: {error}")
        self.display.sink.enqueue(partial(self._report_error, ctx, error))

    def _report_error(self, ctx: TurnContext, error: BaseException) -> None:
        """Discard any partial reply and surface the error. Runs on the display task."""
        try:
            self.display.remove_region(ctx.region_id)
            self.display.add_notice(f"Error: {error}")
        finally:
            self._return_to_idle(ctx)

    def _return_to_idle(self, ctx: TurnContext) -> None:
        ctx.finished = True
        self.indicator.stop()
        self.display.set_status(self.status_text("Ready"))
        self._set_state(TurnState.IDLE)
        self._idle.set()

    async def wait_idle(self) -> None:
        """Wait until the current turn (if any) is back to idle."""
        await self._idle.wait()

    @property
    def is_idle(self) -> bool:
        return self.state is TurnState.IDLE

    def cancel(self) -> bool:
        """Cancel the network task of the turn in flight, if any."""
        if self.task and not self.task.done():
            self.task.cancel()
            return True
        return False
