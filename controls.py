import logging
import os
import select
import sys
import termios
import threading
import tty

from config.defaults import MIN_SAMPLE_SIZE, MULTIPLIER_STEP, SAMPLE_SIZE_STEP
from models import Accumulation, ColorMode, InvalidArgument, Scale, WindowType

logger = logging.getLogger(__name__)


def _next_member(member):
    """ The member after this one in its enum, wrapping around. """
    members = list(type(member))
    return members[(members.index(member) + 1) % len(members)]


class KeyboardControls:
    """
        Reads single key presses on a background thread and applies them to a running RenderLoop.

            +/-   louder / quieter (multiplier)
            ]/[   bigger / smaller sample size
            s     next frequency scale
            w     next analysis window
            a     toggle sum / max accumulation
            c     next color mode
            q     quit
    """

    def __init__(self, loop, stream=None):
        self.loop = loop
        self.stream = stream if stream is not None else sys.stdin

        self._thread = None
        self._stop = threading.Event()
        self._old_settings = None

        self.bindings = {
            '+': self.louder,
            '=': self.louder,
            '-': self.quieter,
            ']': self.grow_sample_size,
            '[': self.shrink_sample_size,
            's': self.cycle_scale,
            'w': self.cycle_window,
            'a': self.toggle_accumulation,
            'c': self.cycle_color_mode,
            'q': self.loop.stop,
        }

    def __enter__(self):
        fd = self.stream.fileno()
        self._old_settings = termios.tcgetattr(fd)
        # cbreak rather than raw so Ctrl+C still raises KeyboardInterrupt
        tty.setcbreak(fd)

        self._stop.clear()
        self._thread = threading.Thread(target=self._poll, args=(fd,), daemon=True)
        self._thread.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._old_settings is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._old_settings)
            self._old_settings = None

    def _poll(self, fd: int):
        while not self._stop.is_set():
            # wait up to 100ms so stop requests are noticed
            ready, _, _ = select.select([fd], [], [], 0.1)
            if not ready:
                continue

            key = os.read(fd, 1).decode(errors='ignore')
            self.handle_key(key)

    def handle_key(self, key: str) -> bool:
        """ Runs the action bound to key. Returns False for unbound keys. """
        action = self.bindings.get(key)
        if action is None:
            return False

        try:
            action()
        except InvalidArgument as e:
            logger.warning(f"Ignored key {key!r}: {e}")
        except RuntimeError as e:
            # the loop keeps its previous settings, so a failed change is not fatal here
            logger.error(f"Key {key!r} failed: {e}")
        return True

    def louder(self):
        self.loop.set_multiplier(self.loop.config.multiplier * MULTIPLIER_STEP)

    def quieter(self):
        self.loop.set_multiplier(self.loop.config.multiplier / MULTIPLIER_STEP)

    def grow_sample_size(self):
        self.loop.set_sample_size(self.loop.config.sample_size + SAMPLE_SIZE_STEP)

    def shrink_sample_size(self):
        sample_size = self.loop.config.sample_size - SAMPLE_SIZE_STEP
        if sample_size < MIN_SAMPLE_SIZE:
            logger.info(f"Sample size already at its minimum of {self.loop.config.sample_size}")
            return
        self.loop.set_sample_size(sample_size)

    def cycle_scale(self):
        scale: Scale = _next_member(self.loop.config.scale)
        self.loop.set_scale(scale)
        logger.info(f"Scale set to {scale.value}")

    def cycle_window(self):
        window: WindowType = _next_member(self.loop.config.window)
        self.loop.set_window(window)
        logger.info(f"Window set to {window.value}")

    def toggle_accumulation(self):
        accumulation: Accumulation = _next_member(self.loop.config.accumulation)
        self.loop.set_accumulation(accumulation)
        logger.info(f"Accumulation set to {accumulation.value}")

    def cycle_color_mode(self):
        mode: ColorMode = _next_member(self.loop.config.color_mode)
        self.loop.set_color_mode(mode)
        logger.info(f"Color mode set to {mode.value}")
