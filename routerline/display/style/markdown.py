# display/style/markdown.py

from dataclasses import dataclass
from typing import List, Optional

from rich.text import Text

from .definitions import StyleDefinitions

FENCE = "```"
ESCAPE = "\\"


def filter_printable(text: str) -> str:
    """Drop non-printable code points (control characters, tabs, etc)."""
    return ''.join(ch for ch in text if ch.isprintable())


def render_plain(text: str, style: Optional[str] = None) -> Text:
    """Render user or system text verbatim, line by line, without markup."""
    return Text("\n").join(
        Text(filter_printable(line), style=style or "") for line in text.split('\n')
    )


@dataclass
class RendererState:
    """
    Transformation state for a single render call.

    Span flags live for one line; `in_quote` and `in_list` persist across
    lines until an empty line. There is one `active` toggle shared by every
    span kind, so spans cannot nest.
    """
    partial: bool = False
    bold: bool = False
    italic: bool = False
    underline: bool = False
    code: bool = False
    in_quote: bool = False
    in_list: bool = False
    active: bool = False
    span: Optional[str] = None

    def open_span(self, name: str) -> None:
        self.active = True
        self.span = name
        setattr(self, name, True)

    def close_span(self) -> None:
        self.active = False
        self.span = None
        self.bold = self.italic = self.underline = self.code = False


class MarkdownRenderer:
    """
    Minimal Markdown-like renderer for assistant replies.

    Both entry points re-render the whole text on every call and keep no state
    between calls, so emphasis split across stream chunks always resolves the
    same way once the text is complete.
    """

    def __init__(self, definitions: Optional[StyleDefinitions] = None):
        self.definitions = definitions or StyleDefinitions()

    def render_full(self, text: str) -> Text:
        """Render complete text, with inline code spans."""
        return self._render(text, partial=False)

    def render_partial(self, text: str) -> Text:
        """Render text still being streamed: no code spans, blank runs dropped."""
        return self._render(text, partial=True)

    def _render(self, text: str, partial: bool) -> Text:
        state = RendererState(partial=partial)
        lines = text.split('\n')
        out: List[Text] = []

        i = 0
        while i < len(lines):
            line = lines[i]
            trimmed = line.strip()

            if not trimmed:
                run_end = i
                while run_end < len(lines) and not lines[run_end].strip():
                    run_end += 1
                state.in_list = state.in_quote = False
                if not partial or run_end - i == 1:
                    out.append(Text())
                i = run_end
                continue

            if trimmed.startswith(FENCE):
                pass
            elif trimmed.startswith('|') and i > 0 and lines[i - 1].strip().startswith('|'):
                out.append(self._render_table_row(trimmed))
            elif trimmed.startswith('> '):
                rendered = Text()
                if not state.in_quote:
                    rendered.append(self.definitions.quote_bar, style=self.definitions.get_color('QUOTE'))
                    state.in_quote = True
                self._render_inline(filter_printable(trimmed[2:]), state, rendered)
                out.append(rendered)
            elif trimmed.startswith(('- ', '* ')):
                rendered = Text()
                if not state.in_list:
                    rendered.append(self.definitions.bullet)
                    state.in_list = True
                self._render_inline(filter_printable(trimmed[2:]), state, rendered)
                out.append(rendered)
            else:
                rendered = Text()
                self._render_inline(filter_printable(line), state, rendered)
                out.append(rendered)
            i += 1

        return Text("\n").join(out)

    def _render_table_row(self, row: str) -> Text:
        rendered = Text()
        for cell in row.split('|'):
            cell = filter_printable(cell.strip())
            if cell:
                rendered.append(cell, style=self.definitions.get_span('cell'))
                rendered.append(" ")
        return rendered

    def _render_inline(self, line: str, state: RendererState, out: Text) -> None:
        """Apply emphasis and code spans to one line, appending runs to `out`."""
        state.close_span()
        segment: List[str] = []

        def flush() -> None:
            if segment:
                style = self.definitions.get_span(state.span) if state.span else None
                out.append(''.join(segment), style=style)
                segment.clear()

        def toggle(name: str) -> None:
            flush()
            if state.active:
                state.close_span()
            else:
                state.open_span(name)

        i, n = 0, len(line)
        while i < n:
            ch = line[i]
            if ch == ESCAPE and i + 1 < n:
                segment.append(line[i + 1])
                i += 2
                continue

            if state.code:
                if ch == '`':
                    toggle('code')
                else:
                    segment.append(ch)
                i += 1
                continue

            if line.startswith('**', i):
                toggle('bold')
                i += 2
            elif line.startswith('__', i):
                toggle('underline')
                i += 2
            elif ch in '*_':
                toggle('italic')
                i += 1
            elif ch == '`' and not state.partial:
                toggle('code')
                i += 1
            else:
                segment.append(ch)
                i += 1

        # Unclosed spans end with the line
        flush()
        state.close_span()
