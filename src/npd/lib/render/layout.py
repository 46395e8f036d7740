"""Column bookkeeping for the left-hand prefix of rendered log lines."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

DEFAULT_ID_WIDTH = 13
DEFAULT_LABEL_WIDTH = 20
DEFAULT_SUMUP_INCREMENT = 5

ID_ALIASES: dict[str, str] = {
    "mutual": "conflict",
    "cached-entry": "cached",
}

LEVEL_STYLES: dict[str, str] = {
    "warn": "yellow",
    "error": "red",
    "conflict": "magenta",
    "debug": "bright_black",
}
DEFAULT_ID_STYLE = "cyan"
LABEL_STYLE = "green"


@dataclass(slots=True)
class LayoutState:
    """Id and label column widths for one renderer session.

    Widths only grow: a wide label or id widens the column for every later
    line so the output realigns to the widest value seen so far.
    """

    id_width: int = DEFAULT_ID_WIDTH
    label_width: int = DEFAULT_LABEL_WIDTH
    sumup_increment: int = DEFAULT_SUMUP_INCREMENT

    def fit_id(self, id_length: int) -> None:
        if id_length > self.id_width:
            self.id_width = id_length + self.sumup_increment

    def fit_label(self, label_length: int, id_length: int) -> int:
        """Grow columns as needed and return the spaces between label and id."""

        spaces = self._spaces(label_length, id_length)
        if spaces < 1:
            self.label_width = max(self.label_width, label_length + self.sumup_increment)
            self.id_width = max(self.id_width, id_length)
            spaces = self._spaces(label_length, id_length)
        return spaces

    def _spaces(self, label_length: int, id_length: int) -> int:
        return self.id_width + self.label_width - (id_length + label_length + 1)


def display_id(event_id: str) -> str:
    return ID_ALIASES.get(event_id, event_id)


def id_style(level: str) -> str:
    return LEVEL_STYLES.get(level, DEFAULT_ID_STYLE)


def build_prefix(
    state: LayoutState,
    *,
    event_id: str,
    level: str,
    origin: str | None,
    compact: bool,
) -> Text:
    """Return `<id><padding>` (compact) or `<label><padding><id>` (wide)."""

    shown_id = display_id(event_id)
    style = id_style(level)

    if compact:
        state.fit_id(len(shown_id))
        return Text(shown_id.ljust(state.id_width), style=style)

    label = origin or ""
    spaces = state.fit_label(len(label), len(shown_id))
    prefix = Text()
    prefix.append(label, style=LABEL_STYLE)
    prefix.append(" " * spaces)
    prefix.append(shown_id, style=style)
    return prefix
