# test_turn_controller.py

import asyncio
import json
import pytest
import httpx
from unittest.mock import Mock

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routerline.config import ClientConfig
from routerline.conversation import ConversationLog, Role, TurnController, TurnState
from routerline.conversation.turn import EMPTY_RESPONSE_NOTICE
from routerline.display import Display
from routerline.errors import TransportError, TurnInProgressError, UpstreamError
from routerline.stream.remote import ChatCompletionsClient


def sse_body(*contents, done=True) -> bytes:
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": c}}]}) + "\n\n"
        for c in contents
    ]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


class FailingStream(httpx.AsyncByteStream):
    def __init__(self, chunks):
        self.chunks = chunks

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        raise httpx.ReadError("connection reset by peer")


class RecordingDisplay(Display):
    """Display over a mock terminal that records assistant renders."""
    def __init__(self):
        super().__init__(terminal=Mock())
        self.assistant_renders = []

    def show_assistant(self, region_id, content, partial):
        self.assistant_renders.append((content, partial))
        super().show_assistant(region_id, content, partial)


class MockLogger:
    def __init__(self):
        self.debug = Mock()
        self.info = Mock()
        self.warning = Mock()
        self.error = Mock()


class TestTurnController:
    """Turn lifecycle against a stubbed API."""

    def setup_method(self):
        self.responses = []
        self.requests = []
        self.display = RecordingDisplay()
        self.log = ConversationLog()
        self.logger = MockLogger()

    def handler(self, request):
        self.requests.append(json.loads(request.content))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def make_controller(self):
        config = ClientConfig(api_key="sk-or-test-1234567890", model="test/model")
        client = ChatCompletionsClient(config, transport=httpx.MockTransport(self.handler))
        controller = TurnController(client, self.display, self.log, logger=self.logger)
        controller.indicator.interval = 0.01
        return controller

    async def run_turns(self, *texts):
        controller = self.make_controller()
        display_task = asyncio.create_task(self.display.sink.run())
        try:
            for text in texts:
                controller.submit(text)
                await controller.wait_idle()
                await self.display.sink.join()
            await controller.indicator.wait_stopped()
        finally:
            self.display.sink.stop()
            await display_task
        return controller

    def region_texts(self):
        return [(r.role, r.text.plain) for r in self.display.transcript.regions]

    @pytest.mark.asyncio
    async def test_successful_turn(self):
        self.responses.append(httpx.Response(200, content=sse_body("Hello", ", **world**")))
        controller = await self.run_turns("hi there")

        assert [m.to_dict() for m in self.log] == [
            {"role": "user", "content": "hi there"},
            {"role": "assistant", "content": "Hello, **world**"},
        ]
        assert self.region_texts() == [
            ("user", "You: hi there"),
            ("assistant", "Assistant: Hello, world"),
        ]
        assert controller.state is TurnState.IDLE
        assert not controller.indicator.active
        assert controller.last_error is None

    @pytest.mark.asyncio
    async def test_request_carries_full_history(self):
        self.responses.append(httpx.Response(200, content=sse_body("first reply")))
        self.responses.append(httpx.Response(200, content=sse_body("second reply")))
        await self.run_turns("one", "two")

        assert self.requests[0]["messages"] == [{"role": "user", "content": "one"}]
        assert self.requests[1]["messages"] == [
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "first reply"},
            {"role": "user", "content": "two"},
        ]
        assert self.requests[1]["model"] == "test/model"
        assert self.requests[1]["stream"] is True

    @pytest.mark.asyncio
    async def test_partial_renders_precede_final_render(self):
        self.responses.append(httpx.Response(200, content=sse_body("a", "b", "c")))
        await self.run_turns("go")

        renders = self.display.assistant_renders
        assert renders[-1] == ("abc", False)
        assert all(partial for _, partial in renders[:-1])
        assert len(renders) >= 2
        contents = [content for content, _ in renders[:-1]]
        assert all("abc".startswith(c) for c in contents)
        assert contents == sorted(contents, key=len)

    @pytest.mark.asyncio
    async def test_empty_response_adds_notice_only(self):
        self.responses.append(httpx.Response(200, content=sse_body()))
        await self.run_turns("anything?")

        assert [m.role for m in self.log] == [Role.USER]
        assert self.region_texts()[-1] == ("system", f"System: {EMPTY_RESPONSE_NOTICE}")
        assert self.display.assistant_renders == []

    @pytest.mark.asyncio
    async def test_upstream_error(self):
        self.responses.append(httpx.Response(429, text="rate limited"))
        controller = await self.run_turns("hello")

        assert isinstance(controller.last_error, UpstreamError)
        assert [m.role for m in self.log] == [Role.USER]
        role, text = self.region_texts()[-1]
        assert role == "system"
        assert "rate limited" in text
        assert controller.state is TurnState.IDLE
        assert not controller.indicator.active
        self.logger.error.assert_called()

    @pytest.mark.asyncio
    async def test_transport_error_discards_partial_content(self):
        stream = FailingStream([sse_body("half an ans", done=False)])
        self.responses.append(httpx.Response(200, stream=stream))
        controller = await self.run_turns("question")

        assert isinstance(controller.last_error, TransportError)
        assert [m.role for m in self.log] == [Role.USER]
        roles = [role for role, _ in self.region_texts()]
        assert roles == ["user", "system"]
        assert self.region_texts()[-1][1].startswith("System: Error:")

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        self.responses.append(httpx.ConnectError("connection refused"))
        controller = await self.run_turns("question")

        assert isinstance(controller.last_error, TransportError)
        assert "connection refused" in self.region_texts()[-1][1]

    @pytest.mark.asyncio
    async def test_error_keeps_prior_history(self):
        self.responses.append(httpx.Response(200, content=sse_body("fine")))
        self.responses.append(httpx.Response(500, text="upstream exploded"))
        await self.run_turns("first", "second")

        assert [m.to_dict() for m in self.log] == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "fine"},
            {"role": "user", "content": "second"},
        ]

    @pytest.mark.asyncio
    async def test_user_message_recorded_before_network(self):
        controller = self.make_controller()
        self.responses.append(httpx.Response(200, content=sse_body("x")))
        display_task = asyncio.create_task(self.display.sink.run())
        try:
            controller.submit("early")
            assert self.log.last().content == "early"
            assert controller.state is TurnState.AWAITING_HEADERS
            assert self.requests == []
            await controller.wait_idle()
            await self.display.sink.join()
        finally:
            self.display.sink.stop()
            await display_task

    @pytest.mark.asyncio
    async def test_second_submit_while_active_is_rejected(self):
        controller = self.make_controller()
        self.responses.append(httpx.Response(200, content=sse_body("x")))
        display_task = asyncio.create_task(self.display.sink.run())
        try:
            controller.submit("one")
            with pytest.raises(TurnInProgressError):
                controller.submit("two")
            await controller.wait_idle()
            await self.display.sink.join()
        finally:
            self.display.sink.stop()
            await display_task
        assert [m.content for m in self.log] == ["one", "x"]

    @pytest.mark.asyncio
    async def test_blank_input_is_ignored(self):
        controller = self.make_controller()
        assert controller.submit("   ") is None
        assert controller.submit("") is None
        assert len(self.log) == 0
        assert controller.state is TurnState.IDLE

    @pytest.mark.asyncio
    async def test_indicator_shares_accumulator_lock(self):
        controller = self.make_controller()
        assert controller.indicator.lock is controller.accumulator.lock

    @pytest.mark.asyncio
    async def test_cancel_returns_to_idle(self):
        release = asyncio.Event()

        async def slow_handler(request):
            await release.wait()
            return httpx.Response(200, content=sse_body("late"))

        config = ClientConfig(api_key="sk-or-test-1234567890")
        client = ChatCompletionsClient(config, transport=httpx.MockTransport(slow_handler))
        controller = TurnController(client, self.display, self.log)
        display_task = asyncio.create_task(self.display.sink.run())
        try:
            task = controller.submit("wait")
            await asyncio.sleep(0.01)
            assert controller.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await controller.wait_idle()
            await self.display.sink.join()
        finally:
            self.display.sink.stop()
            await display_task

        assert controller.state is TurnState.IDLE
        assert "cancelled" in self.region_texts()[-1][1]
        assert [m.role for m in self.log] == [Role.USER]

    @pytest.mark.asyncio
    async def test_status_bar_tracks_turn(self):
        self.responses.append(httpx.Response(200, content=sse_body("x")))
        await self.run_turns("status?")
        assert self.display.status == "Model: test/model | Status: Ready"
        assert self.display.loading == ""
