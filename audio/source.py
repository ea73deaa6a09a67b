import logging

import numpy as np
import soundfile as sf

from models import AudioInfo

logger = logging.getLogger(__name__)


class SoundFileSource:
    """ Reads an audio file frame by frame as interleaved float32, one column per channel. """

    def __init__(self, path: str):
        self.path = path
        self._file = None

    def __enter__(self):
        try:
            self._file = sf.SoundFile(self.path)
        except (sf.LibsndfileError, RuntimeError) as e:
            raise RuntimeError(f"Failed to open audio file {self.path}: {e}") from e

        logger.info(f"Opened {self.path}: {self._file.channels} channels at {self._file.samplerate} Hz")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()
            self._file = None

    @property
    def info(self) -> AudioInfo:
        return AudioInfo(channels=self._file.channels, sample_rate=self._file.samplerate)

    def read_frames(self, n: int) -> np.ndarray:
        """ Returns up to n frames shaped (frames, channels). An empty array means end of stream. """
        try:
            return self._file.read(n, dtype='float32', always_2d=True)
        except (sf.LibsndfileError, RuntimeError) as e:
            raise RuntimeError(f"Failed to read from {self.path}: {e}") from e
