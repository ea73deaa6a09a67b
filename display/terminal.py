"""
Terminal output for the spectrum.
Bars are drawn upwards from the bottom row using cursor movement and truecolor escape codes.
"""

import logging
import shutil
import sys
from typing import TextIO

from models import TerminalSize

logger = logging.getLogger(__name__)

CLEAR = '\033[2J'
HOME = '\033[H'
HIDE_CURSOR = '\033[?25l'
SHOW_CURSOR = '\033[?25h'
RESET_ATTRIBUTES = '\033[0m'
UP_AND_LEFT = '\033[1A\033[1D'


def query_terminal_size() -> TerminalSize:
    size = shutil.get_terminal_size()
    return TerminalSize(width=size.columns, height=size.lines)


def move_to(row: int, column: int) -> str:
    """ Cursor to a 1-based row and a 0-based column. """
    return f'\033[{row};{column + 1}H'


def truecolor(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f'\033[38;2;{r};{g};{b}m'


def bar(height: int, characters: str, peak_char: None | str = None) -> str:
    """
        Glyphs for a bar of the given height, drawn from the cursor upwards.
        The top glyph is peak_char when set, otherwise the characters keep cycling.
    """
    if height <= 0:
        return ""

    parts = []
    # print character, move cursor up 1, move cursor left 1
    for j in range(height - 1):
        parts.append(characters[j % len(characters)])
        parts.append(UP_AND_LEFT)

    parts.append(peak_char if peak_char else characters[(height - 1) % len(characters)])
    return "".join(parts)


class TerminalScreen:
    """
        Owns the terminal while the visualizer runs. Entering hides the cursor and clears the screen,
        leaving always restores it, whichever way the render loop ended.
    """

    def __init__(self, stream: None | TextIO = None):
        self.stream = stream if stream is not None else sys.stdout
        self._parts = []

    def __enter__(self):
        self.stream.write(HIDE_CURSOR + CLEAR + HOME)
        self.stream.flush()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._parts.clear()
        self.stream.write(RESET_ATTRIBUTES + CLEAR + HOME + SHOW_CURSOR)
        self.stream.flush()
        logger.debug("Terminal restored")

    def begin_frame(self) -> None:
        self._parts = [CLEAR]

    def set_color(self, rgb: tuple[int, int, int]) -> None:
        self._parts.append(truecolor(rgb))

    def draw_bar(self, column: int, height: int, bottom_row: int, characters: str,
                 peak_char: None | str = None) -> None:
        if height <= 0:
            return

        self._parts.append(move_to(bottom_row, column))
        self._parts.append(bar(height, characters, peak_char))

    def flush(self) -> None:
        """ Writes the buffered frame in one go. """
        self.stream.write("".join(self._parts))
        self.stream.flush()
        self._parts.clear()
