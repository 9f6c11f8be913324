# interface.py

import asyncio
from typing import Optional

from .config import ClientConfig
from .conversation import ConversationLog, TurnController
from .display import Display
from .logger import Logger
from .stream import ChatCompletionsClient

WELCOME_MESSAGE = "Welcome to OpenRouter Chat!\nEnter your message below and press Enter to send."


class Interface:
    """
    Main entry point that assembles Display, ChatCompletionsClient and TurnController.
    """

    def __init__(self, config: ClientConfig,
                 logging_enabled: bool = False,
                 log_file: Optional[str] = None,
                 display: Optional[Display] = None,
                 transport=None):
        """
        Initialize components with a validated config and optional logging.

        Args:
            config: Client configuration
            logging_enabled: Enable detailed logging.
            log_file: Path to log file. Use "-" for stdout.
            display: Display to use instead of a terminal-backed one
            transport: Optional httpx transport for the API client
        """
        self.config = config
        self.logger = Logger(__name__, logging_enabled, log_file)
        try:
            self.display = display or Display(logger=self.logger.child('display'))
            self.client = ChatCompletionsClient(config, logger=self.logger.child('stream'), transport=transport)
            self.log = ConversationLog(system_prompt=config.system_prompt)
            self.controller = TurnController(
                client=self.client,
                display=self.display,
                log=self.log,
                logger=self.logger.child('turn'),
            )
        except Exception as e:
            self.logger.error(f"Init error: {e}")
            raise

        self.logger.info(f"Using model: {config.model}")
        self.logger.info(f"Using API key: {config.masked_api_key()}")

    async def read_input(self) -> Optional[str]:
        """Read the next line of user text; None means the user wants to leave."""
        try:
            text = await self.display.terminal.read_line()
        except (EOFError, KeyboardInterrupt):
            return None
        return text

    async def run_turn(self, text: str) -> None:
        """Run one turn to completion and leave its output in the scrollback."""
        self.controller.submit(text)
        await self.controller.wait_idle()
        await self.controller.indicator.wait_stopped()
        await self.display.sink.join()
        self.display.commit()

    async def run(self) -> None:
        """Conversation loop: prompt, stream the reply, repeat until exit."""
        display_task = asyncio.create_task(self.display.sink.run())
        self.display.welcome(WELCOME_MESSAGE)
        self.display.set_status(self.controller.status_text("Ready"))
        try:
            while True:
                text = await self.read_input()
                if text is None:
                    break
                await self.run_turn(text)
        finally:
            self.controller.cancel()
            self.display.sink.stop()
            await display_task
            await self.client.aclose()

    def start(self) -> None:
        """Run the conversation loop until the user exits."""
        try:
            asyncio.run(self.run())
        except KeyboardInterrupt:
            self.display.terminal.write("\nExiting...")
        finally:
            self.display.terminal.reset()
