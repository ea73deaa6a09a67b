import logging

import numpy as np
import sounddevice as sd

logger = logging.getLogger(__name__)

# PortAudio's paOutputUnderflowed error code
OUTPUT_UNDERFLOWED = -9980


class PlaybackStream:
    """ Blocking output stream the render loop writes every frame to as it is read. """

    def __init__(self, channels: int, sample_rate: int, frame_size: int, device: None | int | str = None):
        self.channels = channels
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.device = device

        self.stream = None
        self.underflows = 0

    def __enter__(self):
        self._open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._close()

    def _open(self):
        try:
            self.stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                blocksize=self.frame_size,
                dtype=np.float32,
                device=self.device
            )

            self.stream.start()

        except sd.PortAudioError as e:
            raise RuntimeError(f"Failed to open audio device: {e}") from e
        except Exception as e:
            raise RuntimeError(f"Audio initialization failed: {e}") from e

    def _close(self):
        if self.stream:
            self.stream.stop()
            self.stream.close()
            self.stream = None

    def reopen(self, frame_size: int) -> None:
        """ Reopens the stream with a new block size. On failure the old block size is restored. """
        previous = self.frame_size
        self._close()

        try:
            self.frame_size = frame_size
            self._open()
        except RuntimeError:
            logger.error(f"Could not reopen playback with {frame_size} frames per block, "
                         f"going back to {previous}")
            self.frame_size = previous
            self._open()
            raise

        logger.debug(f"Playback reopened with {frame_size} frames per block")

    def write(self, frames: np.ndarray) -> None:
        """ Blocks until the frames are accepted. Underflows are tolerated, anything else is fatal. """
        try:
            underflowed = self.stream.write(np.ascontiguousarray(frames, dtype=np.float32))
        except sd.PortAudioError as e:
            if len(e.args) > 1 and e.args[1] == OUTPUT_UNDERFLOWED:
                underflowed = True
            else:
                raise RuntimeError(f"Audio playback failed: {e}") from e

        if underflowed:
            self.underflows += 1
            logger.debug(f"Output underflow ({self.underflows} so far)")
