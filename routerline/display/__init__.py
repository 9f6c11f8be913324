# display/__init__.py

from typing import Optional

from rich.text import Text

from .terminal import DisplayTerminal
from .style import DisplayStyle
from .sink import DisplaySink
from .transcript import Transcript
from .animations import DisplayAnimations


class Display:
    """
    Coordinates terminal display components.

    Component Hierarchy:
    DisplayTerminal (base) → DisplayStyle → Transcript → DisplaySink → DisplayAnimations

    Every method that mutates visible state must run on the display-owning
    task, which in practice means inside an update queued on `sink`.
    """
    def __init__(self, terminal=None, style: Optional[DisplayStyle] = None, logger=None):
        """Initialize components in dependency order."""
        self.terminal = terminal or DisplayTerminal()
        self.style = style or DisplayStyle()
        self.transcript = Transcript()
        self.sink = DisplaySink(refresh=self.refresh, logger=logger)
        self.animations = DisplayAnimations(self.sink, self.set_loading)
        self.loading = ""
        self.status = ""

    def add_plain(self, role: str, content: str) -> int:
        """Add a user or system message region."""
        return self.transcript.add(role, self.style.format_plain(role, content))

    def add_notice(self, content: str) -> int:
        return self.add_plain('system', content)

    def show_assistant(self, region_id: int, content: str, partial: bool) -> None:
        """Create or replace the assistant region with a fresh render of `content`."""
        text = self.style.format_assistant(content, partial=partial)
        self.transcript.upsert(region_id, 'assistant', text)

    def remove_region(self, region_id: int) -> bool:
        return self.transcript.remove(region_id)

    def set_loading(self, text: str) -> None:
        self.loading = text

    def set_status(self, text: str) -> None:
        self.status = text

    def refresh(self) -> None:
        """Redraw the regions of the turn in progress."""
        self.terminal.show(self.transcript.render(pending_only=True), self.loading, self.status)

    def commit(self) -> None:
        """Leave the current regions in the scrollback and start a fresh live area."""
        self.terminal.release(self.transcript.render(pending_only=True))
        self.transcript.commit()

    def welcome(self, text: str) -> None:
        self.terminal.write(Text(text, style=self.style.definitions.get_color('STATUS')))


__all__ = ['Display', 'DisplayTerminal', 'DisplayStyle', 'DisplaySink', 'Transcript', 'DisplayAnimations']
