from typing import Protocol

import numpy as np

from models import AudioInfo, TerminalSize


class AudioSource(Protocol):
    @property
    def info(self) -> AudioInfo:
        pass

    def read_frames(self, n: int) -> np.ndarray:
        """ Returns up to n frames shaped (frames, channels), empty at end of stream. """
        pass


class AudioSink(Protocol):
    def write(self, frames: np.ndarray) -> None:
        pass

    def reopen(self, frame_size: int) -> None:
        pass


class SizeProvider(Protocol):
    def __call__(self) -> TerminalSize:
        pass
