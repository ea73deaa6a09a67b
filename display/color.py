import colorsys
from dataclasses import dataclass


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """ HSV in [0, 1] to 8-bit RGB. The hue wraps, so any float is a valid hue. """
    r, g, b = colorsys.hsv_to_rgb(h % 1.0, s, v)
    return int(r * 255), int(g * 255), int(b * 255)


@dataclass
class ColorWheel:
    """ Hue phase that turns by `rate` every frame. Never renormalized, hsv_to_rgb wraps it. """
    rate: float = 0.0
    phase: float = 0.0

    def advance(self) -> None:
        self.phase += self.rate

    def hue(self, ratio: float, base_hue: float) -> float:
        return ratio + base_hue + self.phase
