import math
from dataclasses import dataclass
from enum import Enum, unique


class InvalidArgument(ValueError):
    """ Raised when a configuration value is rejected. The previous value stays in effect. """


@unique
class Scale(Enum):
    """ Frequency-axis warp applied when mapping FFT bins onto terminal columns. """
    LINEAR = "linear"
    LOG = "log"
    NTH_ROOT = "nth-root"


@unique
class InterpType(Enum):
    """ Curve used to fill the columns no FFT bin landed on. """
    NONE = "none"
    LINEAR = "linear"
    CUBIC = "cubic"
    CUBIC_HERMITE = "cubic-hermite"


@unique
class Accumulation(Enum):
    """
        How several FFT bins collapsing into one column are combined. SUM exaggerates the treble
        but is what looks best, MAX is the physically honest one. Both are kept on purpose.
    """
    SUM = "sum"
    MAX = "max"


@unique
class WindowType(Enum):
    NONE = "none"
    HANNING = "hanning"
    HAMMING = "hamming"
    BLACKMAN = "blackman"


@unique
class ColorMode(Enum):
    NONE = "none"
    WHEEL = "wheel"
    SOLID = "solid"


@unique
class LoopState(Enum):
    """ States of the render loop. RESIZING always returns to RUNNING before the next read. """
    INIT = 0
    RUNNING = 1
    RESIZING = 2
    DRAINED = 3
    STOPPED = 4


@dataclass(frozen=True)
class TerminalSize:
    width: int
    height: int


@dataclass(frozen=True)
class AudioInfo:
    channels: int
    sample_rate: int


@dataclass
class Config:
    # Spectrum settings
    sample_size: int = 3000
    scale: Scale = Scale.LOG
    nth_root: float = 2.0
    interp: InterpType = InterpType.CUBIC
    accumulation: Accumulation = Accumulation.SUM
    window: WindowType = WindowType.NONE
    multiplier: float = 3.0

    # Glyphs
    characters: str = "#"
    peak_char: None | str = None

    # Color settings
    color_mode: ColorMode = ColorMode.WHEEL
    hsv: None | tuple[float, float, float] = (0.9, 0.7, 1.0)
    rgb: None | tuple[int, int, int] = (255, 0, 255)
    wheel_rate: float = 0.0

    # Layout
    stereo_mirrored: bool = True

    # Audio output
    device: None | int | str = None

    # Logging
    log_dir: str = "logs"
    log_file: str = "termviz.log"

    def validate(self) -> None:
        """ Checks every field, raising InvalidArgument on the first bad one. """
        validate_sample_size(self.sample_size)
        validate_nth_root(self.nth_root)
        validate_characters(self.characters, self.peak_char)
        validate_color(self.color_mode, self.hsv, self.rgb)


def validate_sample_size(sample_size: int) -> None:
    if sample_size <= 0:
        raise InvalidArgument(f"sample size must be positive, got {sample_size}")
    if sample_size % 2:
        raise InvalidArgument(f"sample size must be even, got {sample_size}")


def validate_nth_root(nth_root: float) -> None:
    if not math.isfinite(nth_root):
        raise InvalidArgument(f"nth root must be a finite number, got {nth_root}")
    if nth_root == 0:
        raise InvalidArgument("nth root must be nonzero")
    if nth_root < 0:
        raise InvalidArgument(f"nth root must be positive, got {nth_root}")


def validate_characters(characters: str, peak_char: None | str = None) -> None:
    if not characters:
        raise InvalidArgument("at least one spectrum character is required")
    if peak_char is not None and len(peak_char) != 1:
        raise InvalidArgument(f"peak character must be a single character, got {peak_char!r}")


def validate_color(mode: ColorMode,
                   hsv: None | tuple[float, float, float],
                   rgb: None | tuple[int, int, int]) -> None:
    """ Makes sure the parameters the given color mode needs are present and in range. """
    if mode == ColorMode.WHEEL:
        if hsv is None:
            raise InvalidArgument("wheel coloring requires an hsv base")
        _, s, v = hsv
        if not (0.0 <= s <= 1.0 and 0.0 <= v <= 1.0):
            raise InvalidArgument(f"saturation and value must be within [0, 1], got {hsv}")
    elif mode == ColorMode.SOLID:
        if rgb is None:
            raise InvalidArgument("solid coloring requires an rgb triple")
        if any(not 0 <= c <= 255 for c in rgb):
            raise InvalidArgument(f"rgb components must be within [0, 255], got {rgb}")
