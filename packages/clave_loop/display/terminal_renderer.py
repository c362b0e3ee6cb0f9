"""
Terminal Renderer

Draws the clave and metronome rows with rich inside a Live display:

    clave      ● ○ ● ○ ● ○ ○ ● ○ ● ○ ○
    metronome  ● · · · ● · · · ● · · ·

The highlighted step is drawn in yellow, but only on rows that have a
marker at that step.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

if TYPE_CHECKING:
    from clave_core.models import MetronomeSequence, StepSequence

logger = logging.getLogger(__name__)

CLAVE_ON = "●"
CLAVE_OFF = "○"
METRONOME_ON = "●"
METRONOME_OFF = "·"

HIGHLIGHT_STYLE = "bold yellow"
CLAVE_STYLE = "white"
METRONOME_STYLE = "red"
REST_STYLE = "dim"

LABEL_WIDTH = 11


def cell_width(length: int, console_width: int) -> int:
    """Characters per step: 2 (marker + gap) when the row fits, else 1."""
    if length <= 0:
        return 2
    return 2 if LABEL_WIDTH + 2 * length <= console_width else 1


def build_row(
    label: str,
    markers: StepSequence,
    on_char: str,
    off_char: str,
    on_style: str,
    highlight_index: int | None,
    width: int,
) -> Text:
    """One labelled row of markers as rich Text."""
    row = Text(label.ljust(LABEL_WIDTH))
    gap = " " * (width - 1)
    for i, marker in enumerate(markers):
        if marker == 1:
            style = HIGHLIGHT_STYLE if i == highlight_index else on_style
            row.append(on_char, style=style)
        else:
            row.append(off_char, style=REST_STYLE)
        if gap:
            row.append(gap)
    return row


class TerminalRenderer:
    """Renderer backed by rich.live.Live"""

    def __init__(self, console: Console | None = None, refresh_per_second: float = 30):
        self._console = console if console is not None else Console()
        self._refresh_per_second = refresh_per_second
        self._live: Live | None = None
        self._frame: Group | None = None
        self.frames_rendered = 0

    def connect(self) -> None:
        """Start the live display"""
        if self._live is not None:
            return
        self._live = Live(
            self._frame or Text(""),
            console=self._console,
            auto_refresh=False,
            refresh_per_second=self._refresh_per_second,
            transient=False,
        )
        self._live.start()
        logger.debug("Terminal display started")

    def disconnect(self) -> None:
        """Stop the live display (the last frame stays on screen)"""
        if self._live is not None:
            self._live.stop()
            self._live = None
            logger.debug("Terminal display stopped")

    def build(
        self,
        clave: StepSequence,
        metronome: MetronomeSequence,
        highlight_index: int | None,
    ) -> Group:
        """Build the two-row frame without drawing it."""
        width = cell_width(len(clave), self._console.width)
        return Group(
            build_row("clave", clave, CLAVE_ON, CLAVE_OFF, CLAVE_STYLE, highlight_index, width),
            build_row(
                "metronome", metronome, METRONOME_ON, METRONOME_OFF,
                METRONOME_STYLE, highlight_index, width,
            ),
        )

    def render(
        self,
        clave: StepSequence,
        metronome: MetronomeSequence,
        highlight_index: int | None,
    ) -> None:
        self._frame = self.build(clave, metronome, highlight_index)
        self.frames_rendered += 1
        if self._live is not None:
            self._live.update(self._frame, refresh=True)

    @property
    def frame(self) -> Group | None:
        """Most recent frame"""
        return self._frame

    @property
    def is_connected(self) -> bool:
        return self._live is not None
