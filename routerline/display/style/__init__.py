# display/style/__init__.py

from rich.text import Text

from .definitions import StyleDefinitions, RoleLabel
from .markdown import MarkdownRenderer, RendererState, filter_printable, render_plain


class DisplayStyle:
    """
    Style coordination layer: owns the definitions and the markdown renderer
    and turns role/content pairs into labelled transcript lines.
    """
    def __init__(self, definitions: StyleDefinitions = None):
        self.definitions = definitions or StyleDefinitions()
        self.renderer = MarkdownRenderer(self.definitions)

    def label(self, role: str) -> Text:
        label = self.definitions.get_label(role)
        return Text(label.text, style=label.color)

    def format_message(self, role: str, body: Text) -> Text:
        """Prefix already-styled body text with the role label."""
        return Text.assemble(self.label(role), " ", body)

    def format_plain(self, role: str, content: str) -> Text:
        """Format user/system text, which is shown without markup."""
        return self.format_message(role, render_plain(content, self.definitions.get_color('TEXT')))

    def format_assistant(self, content: str, partial: bool = False) -> Text:
        render = self.renderer.render_partial if partial else self.renderer.render_full
        return self.format_message('assistant', render(content))


__all__ = [
    'DisplayStyle', 'StyleDefinitions', 'RoleLabel', 'MarkdownRenderer',
    'RendererState', 'filter_printable', 'render_plain',
]
