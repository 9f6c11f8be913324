# display/terminal.py

from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import Validator, ValidationError
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text


class DisplayTerminal:
    """
    Terminal surface and input source.

    Output goes through a rich Console: regions of the turn in progress are
    drawn in a Live view together with the loading line and status bar, and
    are left in the scrollback once the turn is committed. Input is read with
    a prompt_toolkit session.
    """

    class NonEmptyValidator(Validator):
        def validate(self, document):
            if not document.text.strip():
                raise ValidationError(message="", cursor_position=0)

    def __init__(self, console: Optional[Console] = None, prompt_session: Optional[PromptSession] = None):
        self.console = console or Console(highlight=False)
        self._live: Optional[Live] = None
        self._prompt_label = FormattedText([("ansigreen bold", "You: ")])
        self.prompt_session = prompt_session or PromptSession(
            key_bindings=self._setup_key_bindings(),
            complete_while_typing=False,
        )

    def _setup_key_bindings(self) -> KeyBindings:
        """Setup key shortcuts: Ctrl-L clears the screen."""
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            self.console.clear()
            event.app.renderer.clear()

        return kb

    @property
    def width(self) -> int:
        """Return terminal width."""
        return self.console.size.width

    def write(self, renderable) -> None:
        """Print directly to the scrollback."""
        self.console.print(renderable)

    def show(self, body: Text, loading: str = "", status: str = "") -> None:
        """Redraw the live area with the pending transcript, loading line and status."""
        parts = [body]
        if loading:
            parts.append(Text(loading, style="cyan", justify="center"))
        if status:
            parts.append(Text(status, style="yellow", justify="right"))
        group = Group(*parts)
        if self._live is None:
            self._live = Live(group, console=self.console, auto_refresh=False, transient=False)
            self._live.start()
        else:
            self._live.update(group)
        self._live.refresh()

    def release(self, final: Optional[Text] = None) -> None:
        """Stop the live area, leaving `final` (if given) as its last frame."""
        if self._live is None:
            return
        if final is not None:
            self._live.update(final)
            self._live.refresh()
        self._live.stop()
        self._live = None

    async def read_line(self) -> str:
        """Read one non-empty line of user input. Raises EOFError/KeyboardInterrupt on exit keys."""
        text = await self.prompt_session.prompt_async(
            self._prompt_label,
            validator=self.NonEmptyValidator(),
            validate_while_typing=False,
        )
        return text.strip()

    def reset(self) -> None:
        """Release the live area and restore the terminal."""
        self.release()
        self.console.show_cursor(True)
