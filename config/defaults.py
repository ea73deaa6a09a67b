import os

from models import Accumulation, ColorMode, InterpType, Scale, WindowType

LOG_DIR = os.getenv('TERMVIZ_LOG_DIR', "logs")
LOG_FILE = "termviz.log"

# sounddevice accepts either a device index or a (partial) device name
_device = os.getenv('TERMVIZ_DEVICE')
OUTPUT_DEVICE = int(_device) if _device and _device.isdigit() else _device

# Choices exposed on the command line, keyed by their CLI spelling
SCALES = {scale.value: scale for scale in Scale}
INTERP_TYPES = {interp.value: interp for interp in InterpType}
ACCUMULATIONS = {acc.value: acc for acc in Accumulation}
WINDOWS = {window.value: window for window in WindowType}
COLOR_MODES = {mode.value: mode for mode in ColorMode}

# Live controls
SAMPLE_SIZE_STEP = 256
MIN_SAMPLE_SIZE = 256
MULTIPLIER_STEP = 1.25
