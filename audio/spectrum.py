import logging
from dataclasses import dataclass

import numpy as np
from numpy.fft import rfft

from audio.interpolation import MIN_POINTS, fit
from models import (Accumulation, InterpType, InvalidArgument, Scale, WindowType,
                    validate_nth_root, validate_sample_size)

logger = logging.getLogger(__name__)

_WINDOW_FUNCTIONS = {
    WindowType.HANNING: np.hanning,
    WindowType.HAMMING: np.hamming,
    WindowType.BLACKMAN: np.blackman,
}


@dataclass(frozen=True)
class _ScaleMax:
    """ Ratio denominators for the current bin count and root. """
    log: float
    sqrt: float
    cbrt: float
    nth_root: float

    @classmethod
    def compute(cls, num_bins: int, nth_root: float) -> '_ScaleMax':
        return cls(
            log=float(np.log(num_bins)),
            sqrt=float(np.sqrt(num_bins)),
            cbrt=float(np.cbrt(num_bins)),
            nth_root=float(num_bins ** (1.0 / nth_root))
        )


class SpectrumEngine:
    """
        Turns a frame of time-domain samples into an amplitude array as wide as the output.

        Every FFT bin is mapped to a column through the configured frequency scale, bins sharing a
        column are combined with the accumulation policy, and columns no bin landed on can be
        filled in with a fitted curve.
    """

    def __init__(self, fft_size: int,
                 scale: Scale = Scale.LOG,
                 nth_root: float = 2.0,
                 interp: InterpType = InterpType.CUBIC,
                 accumulation: Accumulation = Accumulation.SUM,
                 window: WindowType = WindowType.NONE):
        validate_sample_size(fft_size)
        validate_nth_root(nth_root)

        self._fft_size = fft_size
        self._nth_root = float(nth_root)
        self._scale = scale
        self._interp = interp
        self._accumulation = accumulation
        self._window = window

        self._scale_max = _ScaleMax.compute(self.num_bins, self._nth_root)
        self._window_cache = dict()
        self._column_cache = dict()

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def nth_root(self) -> float:
        return self._nth_root

    @property
    def scale(self) -> Scale:
        return self._scale

    @property
    def interp(self) -> InterpType:
        return self._interp

    @property
    def accumulation(self) -> Accumulation:
        return self._accumulation

    @property
    def window(self) -> WindowType:
        return self._window

    @property
    def num_bins(self) -> int:
        """ Number of complex bins a real FFT of fft_size samples produces. """
        return self._fft_size // 2 + 1

    def set_fft_size(self, fft_size: int) -> None:
        """ Changes the number of samples consumed per render. Must be even. """
        validate_sample_size(fft_size)

        self._fft_size = fft_size
        self._scale_max = _ScaleMax.compute(self.num_bins, self._nth_root)
        self._column_cache.clear()
        logger.debug(f"FFT size set to {fft_size} ({self.num_bins} bins)")

    def set_scale(self, scale: Scale) -> None:
        self._scale = scale
        self._column_cache.clear()

    def set_nth_root(self, nth_root: float) -> None:
        """ Changes the root used by the NTH_ROOT scale. Zero would divide by zero, so it is rejected. """
        validate_nth_root(nth_root)

        self._nth_root = float(nth_root)
        self._scale_max = _ScaleMax.compute(self.num_bins, self._nth_root)
        self._column_cache.clear()

    def set_interp(self, interp: InterpType) -> None:
        self._interp = interp

    def set_accumulation(self, accumulation: Accumulation) -> None:
        self._accumulation = accumulation

    def set_window(self, window: WindowType) -> None:
        self._window = window

    def frequency_axis_ratio(self, i):
        """ Position of bin i along the warped frequency axis, within [0, 1]. Accepts arrays. """
        i = np.asarray(i, dtype=np.float64)

        if self.scale == Scale.LINEAR:
            return i / self.num_bins
        elif self.scale == Scale.LOG:
            return np.log(np.maximum(i, 1.0)) / self._scale_max.log
        elif self.scale == Scale.NTH_ROOT:
            if self._nth_root == 1:
                return i / self.num_bins
            elif self._nth_root == 2:
                return np.sqrt(i) / self._scale_max.sqrt
            elif self._nth_root == 3:
                return np.cbrt(i) / self._scale_max.cbrt
            return i ** (1.0 / self._nth_root) / self._scale_max.nth_root

        raise RuntimeError(f"unknown scale {self.scale!r}")

    def column_index(self, i, width: int):
        """ Destination column of bin i for an output of the given width, always within [0, width - 1]. """
        max_index = width - 1
        columns = np.floor(self.frequency_axis_ratio(i) * max_index + 0.5).astype(np.intp)
        return np.clip(columns, 0, max_index)

    def render(self, time_domain, output_width: int) -> np.ndarray:
        """ Renders fft_size samples into an amplitude array of output_width columns. """
        samples = np.asarray(time_domain, dtype=np.float64)

        if samples.ndim != 1 or len(samples) != self._fft_size:
            raise InvalidArgument(f"expected {self._fft_size} samples, got shape {samples.shape}")
        if output_width <= 0:
            raise InvalidArgument(f"output width must be positive, got {output_width}")

        window = self._get_window()
        if window is not None:
            samples = samples * window

        amplitudes = np.abs(rfft(samples))
        columns = self._get_columns(output_width)

        spectrum = np.zeros(output_width, dtype=np.float64)
        if self.accumulation == Accumulation.SUM:
            np.add.at(spectrum, columns, amplitudes)
        elif self.accumulation == Accumulation.MAX:
            np.maximum.at(spectrum, columns, amplitudes)
        else:
            raise RuntimeError(f"unknown accumulation {self.accumulation!r}")

        # Smaller transforms lump more frequencies into each bin, so scale them back down
        spectrum /= self._fft_size

        if self.interp != InterpType.NONE and self.scale != Scale.LINEAR:
            self._interpolate(spectrum)

        return spectrum

    def _get_window(self) -> None | np.ndarray:
        """ Returns the window coefficients for the current size, creating them if they do not exist. """
        if self.window == WindowType.NONE:
            return None

        key = (self.window, self._fft_size)
        if key not in self._window_cache:
            self._window_cache[key] = _WINDOW_FUNCTIONS[self.window](self._fft_size)
        return self._window_cache[key]

    def _get_columns(self, width: int) -> np.ndarray:
        if width not in self._column_cache:
            self._column_cache[width] = self.column_index(np.arange(self.num_bins), width)
        return self._column_cache[width]

    def _interpolate(self, spectrum: np.ndarray) -> None:
        """
            Fills columns that are exactly zero with a curve fitted through the nonzero ones, in place.
            A column whose amplitude really is zero looks the same as a gap and gets filled too.
        """
        filled = np.flatnonzero(spectrum)

        # Fewer points than this and there is nothing to smooth
        if len(filled) < MIN_POINTS:
            return

        gaps = np.flatnonzero(spectrum == 0)
        if not len(gaps):
            return

        curve = fit(self.interp, filled, spectrum[filled])
        spectrum[gaps] = curve(gaps)
