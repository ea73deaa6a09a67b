import logging
import threading

import numpy as np

from audio.spectrum import SpectrumEngine
from display.color import ColorWheel, hsv_to_rgb
from display.spectrum_view import SpectrumView, bar_height
from display.terminal import TerminalScreen, query_terminal_size
from models import (Accumulation, ColorMode, Config, InterpType, LoopState, Scale, WindowType,
                    validate_characters, validate_color, validate_sample_size)
import protocols as pr

logger = logging.getLogger(__name__)


class RenderLoop:
    """
        Reads the audio source one frame at a time, plays each frame and draws its spectrum.

        The lock is held for a whole render_frame call or a whole setter call, so settings changed
        from another thread (the keyboard controls) never land in the middle of a frame.
    """

    def __init__(self, config: Config, source: "pr.AudioSource", sink: "pr.AudioSink",
                 output=None, size_provider: "pr.SizeProvider" = query_terminal_size):
        config.validate()

        self.config = config
        self.source = source
        self.sink = sink
        self.size_provider = size_provider

        self.lock = threading.Lock()
        self.state = LoopState.INIT
        self._stop_requested = threading.Event()

        self.screen = TerminalScreen(output)
        self.engine = SpectrumEngine(
            config.sample_size,
            scale=config.scale,
            nth_root=config.nth_root,
            interp=config.interp,
            accumulation=config.accumulation,
            window=config.window
        )
        self.wheel = ColorWheel(rate=config.wheel_rate)

        self.channels = source.info.channels
        self.terminal_size = size_provider()
        self.view = SpectrumView(self.terminal_size.width, config.stereo_mirrored)
        self.spectra = [np.zeros(width) for width in self.view.buffer_widths]

        self.frames_rendered = 0

    def run(self) -> LoopState:
        """ Renders until the stream drains or a stop is requested. The terminal is restored on every exit. """
        with self.screen:
            try:
                self.state = LoopState.RUNNING
                while not self._stop_requested.is_set():
                    if not self.render_frame():
                        break
            finally:
                if self.state != LoopState.DRAINED:
                    self.state = LoopState.STOPPED

        logger.info(f"Render loop ended in {self.state.name} after {self.frames_rendered} frames")
        return self.state

    def stop(self) -> None:
        """ Asks the loop to stop after the current frame. Safe to call from any thread. """
        self._stop_requested.set()

    def render_frame(self) -> bool:
        """ Reads, plays and draws one frame. Returns False once there is nothing left to render. """
        with self.lock:
            self._check_terminal_size()

            sample_size = self.config.sample_size
            frames = self.source.read_frames(sample_size)
            if not len(frames):
                self.state = LoopState.DRAINED
                logger.info("End of stream")
                return False

            # play the audio as it is read, the partial tail included
            self.sink.write(frames)

            # anything shorter than a full frame would give a corrupted spectrum
            if len(frames) < sample_size:
                self.state = LoopState.DRAINED
                logger.info(f"End of stream, skipped final partial frame of {len(frames)} samples")
                return False

            self.screen.begin_frame()
            widths = self.view.buffer_widths
            for part, channel in enumerate(self._analysed_channels()):
                if widths[part] <= 0:
                    continue

                timedata = np.ascontiguousarray(frames[:, channel])
                self.spectra[part] = self.engine.render(timedata, widths[part])
                self._draw(part)

            self.screen.flush()
            self.wheel.advance()
            self.frames_rendered += 1
            return True

    def _check_terminal_size(self) -> None:
        new_size = self.size_provider()

        if new_size.width != self.terminal_size.width:
            self.state = LoopState.RESIZING
            logger.debug(f"Terminal width changed from {self.terminal_size.width} to {new_size.width}")
            self._resize_buffers(new_size.width)

        self.terminal_size = new_size
        self.state = LoopState.RUNNING

    def _resize_buffers(self, width: int) -> None:
        self.view.resize(width, self.config.stereo_mirrored)
        self.spectra = [np.zeros(w) for w in self.view.buffer_widths]

    def _analysed_channels(self) -> tuple[int, ...]:
        if not self.config.stereo_mirrored:
            return (0,)
        # a mono source mirrors its only channel
        return (0, 1) if self.channels >= 2 else (0, 0)

    def _draw(self, part: int) -> None:
        height = self.terminal_size.height

        for column, ratio, amplitude in self.view.place(part, self.spectra[part]):
            rows = bar_height(amplitude, self.config.multiplier, height)
            if not rows:
                continue

            self._apply_coloring(ratio)
            self.screen.draw_bar(column, rows, height, self.config.characters, self.config.peak_char)

    def _apply_coloring(self, ratio: float) -> None:
        mode = self.config.color_mode

        if mode == ColorMode.WHEEL:
            h, s, v = self.config.hsv
            self.screen.set_color(hsv_to_rgb(self.wheel.hue(ratio, h), s, v))
        elif mode == ColorMode.SOLID:
            # the screen is cleared every frame, which also clears the color
            self.screen.set_color(self.config.rgb)
        elif mode == ColorMode.NONE:
            pass
        else:
            raise RuntimeError(f"unknown color mode {mode!r}")

    # Setters, safe to call while another thread runs the loop

    def set_sample_size(self, sample_size: int) -> None:
        """ Changes the frame size. Nothing is committed unless playback reopened at the new size. """
        with self.lock:
            validate_sample_size(sample_size)
            self.sink.reopen(sample_size)
            self.engine.set_fft_size(sample_size)
            self.config.sample_size = sample_size
            logger.info(f"Sample size set to {sample_size}")

    def set_scale(self, scale: Scale) -> None:
        with self.lock:
            self.engine.set_scale(scale)
            self.config.scale = scale

    def set_nth_root(self, nth_root: float) -> None:
        with self.lock:
            self.engine.set_nth_root(nth_root)
            self.config.nth_root = float(nth_root)

    def set_interp(self, interp: InterpType) -> None:
        with self.lock:
            self.engine.set_interp(interp)
            self.config.interp = interp

    def set_accumulation(self, accumulation: Accumulation) -> None:
        with self.lock:
            self.engine.set_accumulation(accumulation)
            self.config.accumulation = accumulation

    def set_window(self, window: WindowType) -> None:
        with self.lock:
            self.engine.set_window(window)
            self.config.window = window

    def set_multiplier(self, multiplier: float) -> None:
        with self.lock:
            self.config.multiplier = multiplier

    def set_color_mode(self, mode: ColorMode,
                       hsv: None | tuple[float, float, float] = None,
                       rgb: None | tuple[int, int, int] = None) -> None:
        """ Switches the color mode. Parameters left out keep their current values. """
        with self.lock:
            hsv = hsv if hsv is not None else self.config.hsv
            rgb = rgb if rgb is not None else self.config.rgb
            validate_color(mode, hsv, rgb)

            self.config.color_mode = mode
            self.config.hsv = hsv
            self.config.rgb = rgb

    def set_wheel_rate(self, wheel_rate: float) -> None:
        with self.lock:
            self.wheel.rate = wheel_rate
            self.config.wheel_rate = wheel_rate

    def set_stereo_mirrored(self, mirrored: bool) -> None:
        with self.lock:
            self.config.stereo_mirrored = mirrored
            self._resize_buffers(self.terminal_size.width)

    def set_characters(self, characters: str, peak_char: None | str = None) -> None:
        with self.lock:
            validate_characters(characters, peak_char)
            self.config.characters = characters
            self.config.peak_char = peak_char
