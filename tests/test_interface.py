# test_interface.py

import json
import pytest
import httpx
from unittest.mock import AsyncMock, Mock

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routerline.config import ClientConfig
from routerline.display import Display
from routerline.interface import Interface, WELCOME_MESSAGE


def sse_response(request):
    body = "".join(
        "data: " + json.dumps({"choices": [{"delta": {"content": c}}]}) + "\n\n"
        for c in ("Sure", ", here you go.")
    ) + "data: [DONE]\n\n"
    return httpx.Response(200, content=body.encode("utf-8"))


def make_interface(inputs, system_prompt=None):
    terminal = Mock()
    terminal.read_line = AsyncMock(side_effect=inputs)
    config = ClientConfig(api_key="sk-or-test-1234567890", system_prompt=system_prompt)
    return Interface(config, display=Display(terminal=terminal), transport=httpx.MockTransport(sse_response))


class TestInterface:

    @pytest.mark.asyncio
    async def test_conversation_loop_until_eof(self):
        chat = make_interface(["hello", EOFError()])
        await chat.run()

        assert [m.to_dict() for m in chat.log] == [
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "Sure, here you go."},
        ]
        chat.display.terminal.write.assert_called_once()
        assert chat.display.terminal.write.call_args.args[0].plain == WELCOME_MESSAGE
        final = chat.display.terminal.release.call_args.args[0]
        assert final.plain == "You: hello\nAssistant: Sure, here you go."
        assert chat.client.client.is_closed

    @pytest.mark.asyncio
    async def test_interrupt_before_input_stops_loop(self):
        chat = make_interface([KeyboardInterrupt()])
        await chat.run()
        assert len(chat.log) == 0
        chat.display.terminal.release.assert_not_called()

    @pytest.mark.asyncio
    async def test_exit_words_are_sent_to_the_model(self):
        chat = make_interface(["exit", EOFError()])
        await chat.run()
        assert chat.log.to_payload()[0] == {"role": "user", "content": "exit"}
        assert len(chat.log) == 2

    @pytest.mark.asyncio
    async def test_system_prompt_leads_the_log(self):
        chat = make_interface(["hi", KeyboardInterrupt()], system_prompt="Answer briefly.")
        await chat.run()
        assert chat.log.to_payload()[0] == {"role": "system", "content": "Answer briefly."}
        assert len(chat.log) == 3
