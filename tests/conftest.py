import io

import numpy as np
import pytest

from models import AudioInfo, Config, InterpType, TerminalSize


def sine(bin_index: int, size: int, amplitude: float = 1.0) -> np.ndarray:
    """ A tone that lands exactly on one FFT bin of a transform of `size` samples. """
    n = np.arange(size)
    return amplitude * np.sin(2 * np.pi * bin_index * n / size)


class FakeSource:
    """ Serves a prepared (frames, channels) array the way the file source does. """

    def __init__(self, frames: np.ndarray, sample_rate: int = 44100):
        if frames.ndim == 1:
            frames = frames[:, np.newaxis]
        self.frames = frames.astype(np.float32)
        self.sample_rate = sample_rate
        self.position = 0
        self.reads = []

    @property
    def info(self) -> AudioInfo:
        return AudioInfo(channels=self.frames.shape[1], sample_rate=self.sample_rate)

    def read_frames(self, n: int) -> np.ndarray:
        self.reads.append(n)
        chunk = self.frames[self.position:self.position + n]
        self.position += len(chunk)
        return chunk


class FakeSink:
    def __init__(self, fail_on_write: None | Exception = None, fail_on_reopen: None | Exception = None):
        self.written = []
        self.reopened = []
        self.fail_on_write = fail_on_write
        self.fail_on_reopen = fail_on_reopen

    def write(self, frames: np.ndarray) -> None:
        if self.fail_on_write is not None:
            raise self.fail_on_write
        self.written.append(len(frames))

    def reopen(self, frame_size: int) -> None:
        if self.fail_on_reopen is not None:
            raise self.fail_on_reopen
        self.reopened.append(frame_size)


class FakeTerminal:
    """ Terminal whose size the test can change between frames. """

    def __init__(self, width: int = 80, height: int = 24):
        self.size = TerminalSize(width, height)
        self.queries = 0

    def resize(self, width: int, height: None | int = None):
        self.size = TerminalSize(width, height if height is not None else self.size.height)

    def __call__(self) -> TerminalSize:
        self.queries += 1
        return self.size


@pytest.fixture
def config():
    return Config(sample_size=256, interp=InterpType.NONE)


@pytest.fixture
def terminal():
    return FakeTerminal()


@pytest.fixture
def output():
    return io.StringIO()


def stereo_tones(frame_count: int, size: int) -> np.ndarray:
    """ frame_count frames of a low tone on the left channel and a higher one on the right. """
    total = frame_count * size
    n = np.arange(total)
    left = 0.5 * np.sin(2 * np.pi * 4 * n / size)
    right = 0.5 * np.sin(2 * np.pi * 40 * n / size)
    return np.column_stack([left, right])
