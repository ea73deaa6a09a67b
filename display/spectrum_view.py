from typing import Iterator

import numpy as np


def bar_height(amplitude: float, multiplier: float, height: int) -> int:
    """ Bar height in rows, clamped to the terminal. Negative spline overshoot draws nothing. """
    rows = int(multiplier * amplitude * height)
    return max(0, min(rows, height))


class SpectrumView:
    """
        Places amplitude arrays on terminal columns.

        Full layout: one spectrum across the whole width, low frequencies on the left.
        Mirrored layout: the first channel grows leftwards from the center and the second
        rightwards, so the lowest frequencies of both meet in the middle.
    """

    def __init__(self, width: int, mirrored: bool):
        self.resize(width, mirrored)

    def resize(self, width: int, mirrored: bool) -> None:
        self.width = width
        self.mirrored = mirrored
        self.half = width // 2

    @property
    def buffer_widths(self) -> list[int]:
        """ Amplitude buffer width for each part of the layout. """
        if self.mirrored:
            return [self.half, self.width - self.half]
        return [self.width]

    def place(self, part: int, spectrum: np.ndarray) -> Iterator[tuple[int, float, float]]:
        """ Yields (column, hue ratio, amplitude) for every value of the spectrum drawn in this part. """
        if not self.mirrored:
            for i, amplitude in enumerate(spectrum):
                yield i, i / self.width, amplitude
            return

        # hue follows the distance from the center on both sides
        half = max(self.half, 1)
        if part == 0:
            for j, amplitude in enumerate(spectrum):
                yield self.half - 1 - j, j / half, amplitude
        elif part == 1:
            for j, amplitude in enumerate(spectrum):
                yield self.half + j, j / half, amplitude
        else:
            raise RuntimeError(f"mirrored layout has two parts, got part {part}")
