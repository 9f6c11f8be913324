# display/style/definitions.py

from dataclasses import dataclass
from typing import Dict, Optional

from rich.style import Style


@dataclass(frozen=True)
class RoleLabel:
    """How a transcript region is labelled for one speaker."""
    text: str
    color: str


class StyleDefinitions:
    """
    Core style definitions container: colors, span styles, glyphs and labels.
    Has no dependencies beyond rich's Style.
    """

    def __init__(
        self,
        colors: Optional[Dict[str, str]] = None,
        spans: Optional[Dict[str, Style]] = None,
        labels: Optional[Dict[str, RoleLabel]] = None,
    ):
        """
        Initialize style definitions with optional custom configurations.
        """
        self._default_colors = {
            'TEXT': 'white',
            'QUOTE': 'dark_cyan',
            'STATUS': 'yellow',
            'SPINNER': 'cyan',
            'BORDER': 'blue',
        }

        # Span styles applied by the markdown renderer
        self._default_spans = {
            'bold': Style(bold=True, color='white'),
            'underline': Style(underline=True, color='white'),
            'italic': Style(italic=True, color='white'),
            'code': Style(reverse=True),
            'cell': Style(bold=True),
        }

        self._default_labels = {
            'user': RoleLabel('You:', 'purple'),
            'assistant': RoleLabel('Assistant:', 'blue'),
            'system': RoleLabel('System:', 'red'),
        }

        self.colors = colors if colors is not None else self._default_colors.copy()
        self.spans = spans if spans is not None else self._default_spans.copy()
        self.labels = labels if labels is not None else self._default_labels.copy()

        self.quote_bar = "│ "
        self.bullet = " • "

    def get_color(self, name: str) -> str:
        """Get a color by name."""
        return self.colors.get(name, '')

    def get_span(self, name: str) -> Style:
        """Get a span style by name; unknown names give a null style."""
        return self.spans.get(name, Style())

    def get_label(self, role: str) -> RoleLabel:
        """Get the label for a role, falling back to the role name itself."""
        return self.labels.get(role, RoleLabel(f"{role}:", self.get_color('TEXT')))
