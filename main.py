import argparse
import logging
import signal
import sys
from pathlib import Path

from app import RenderLoop
from audio.playback import PlaybackStream
from audio.source import SoundFileSource
from config.defaults import (ACCUMULATIONS, COLOR_MODES, INTERP_TYPES, LOG_DIR, LOG_FILE,
                             OUTPUT_DEVICE, SCALES, WINDOWS)
from controls import KeyboardControls
from models import Config, InvalidArgument


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='termviz',
                                     description='Play an audio file and visualize its spectrum in the terminal')
    parser.add_argument('audio_file',
                        help='audio file to visualize and play')
    parser.add_argument('-n', '--sample-size', type=int, default=3000,
                        help='number of frames to process at a time, must be even; '
                             'higher is more accurate, lower is more responsive (default: 3000)')
    parser.add_argument('-s', '--scale', choices=SCALES, default='log',
                        help='spectrum frequency scale (default: log)')
    parser.add_argument('-r', '--nth-root', type=float, default=2.0,
                        help='root to use with --scale nth-root (default: 2)')
    parser.add_argument('-w', '--window', choices=WINDOWS, default='none',
                        help='window function applied before the FFT (default: none)')
    parser.add_argument('-a', '--accumulation', choices=ACCUMULATIONS, default='sum',
                        help='how frequency bins sharing a column are combined (default: sum)')
    parser.add_argument('-i', '--interpolation', choices=INTERP_TYPES, default='cubic',
                        help='curve used to fill empty columns (default: cubic)')
    parser.add_argument('-m', '--multiplier', type=float, default=3.0,
                        help='multiply spectrum amplitude by this amount (default: 3.0)')
    parser.add_argument('-c', '--characters', default='#',
                        help='characters to render the spectrum with, cycled upwards (default: #)')
    parser.add_argument('--peak-char',
                        help='character to print at the top of every bar')
    parser.add_argument('--color', choices=COLOR_MODES, default='wheel',
                        help='color mode (default: wheel)')
    parser.add_argument('--hsv', type=float, nargs=3, metavar=('H', 'S', 'V'), default=(0.9, 0.7, 1.0),
                        help='hue offset, saturation and value for --color wheel, within [0, 1]')
    parser.add_argument('--rgb', type=int, nargs=3, metavar=('R', 'G', 'B'), default=(255, 0, 255),
                        help='color for --color solid, within [0, 255]')
    parser.add_argument('--wheel-rate', type=float, default=0.0,
                        help='how far the color wheel turns every frame (default: 0)')
    parser.add_argument('--mono', action='store_true',
                        help='draw one full-width spectrum instead of mirrored stereo halves')
    parser.add_argument('--device', default=OUTPUT_DEVICE,
                        help='output device index or name (default: system default)')
    parser.add_argument('--keys', action='store_true',
                        help='enable live keyboard controls')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable verbose output')

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    device = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)

    return Config(
        sample_size=args.sample_size,
        scale=SCALES[args.scale],
        nth_root=args.nth_root,
        interp=INTERP_TYPES[args.interpolation],
        accumulation=ACCUMULATIONS[args.accumulation],
        window=WINDOWS[args.window],
        multiplier=args.multiplier,
        characters=args.characters,
        peak_char=args.peak_char,
        color_mode=COLOR_MODES[args.color],
        hsv=tuple(args.hsv),
        rgb=tuple(args.rgb),
        wheel_rate=args.wheel_rate,
        stereo_mirrored=not args.mono,
        device=device,
        log_dir=LOG_DIR,
        log_file=LOG_FILE
    )


def setup_logging(config: Config, verbose: bool):
    """ Create logs directory and configure logging. """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / config.log_file
    log_level = logging.DEBUG if verbose else logging.INFO

    # stderr shares the terminal with the spectrum, so it only gets logs when asked for
    handlers = [logging.FileHandler(log_file)]
    if verbose:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    if not verbose:
        logging.getLogger('audio').setLevel(logging.WARNING)
        logging.getLogger('display').setLevel(logging.WARNING)


def _terminate(signum, frame):
    """ Turns SIGTERM into the same clean exit as Ctrl+C. """
    raise KeyboardInterrupt


def play(audio_file: str, config: Config, keys: bool = False):
    with SoundFileSource(audio_file) as source:
        info = source.info
        with PlaybackStream(info.channels, info.sample_rate, config.sample_size, config.device) as sink:
            loop = RenderLoop(config, source, sink)

            if keys and sys.stdin.isatty():
                with KeyboardControls(loop):
                    return loop.run()
            return loop.run()


def main(argv=None) -> int:
    args = parse_args(argv)
    config = build_config(args)

    try:
        config.validate()
    except InvalidArgument as e:
        print(f'termviz: {e}', file=sys.stderr)
        return 1

    setup_logging(config, args.verbose)
    logger = logging.getLogger(__name__)

    signal.signal(signal.SIGTERM, _terminate)

    try:
        state = play(args.audio_file, config, keys=args.keys)
        logger.info(f'Finished playing {args.audio_file} ({state.name})')

    except KeyboardInterrupt:
        logger.info('Stopped by user')
    except InvalidArgument as e:
        print(f'termviz: {e}', file=sys.stderr)
        logger.error(f'Invalid configuration: {e}')
        return 1
    except RuntimeError as e:
        print(f'termviz: {e}', file=sys.stderr)
        if args.verbose:
            logger.exception('Audio failure')
        else:
            logger.error(f'Audio failure: {e}')
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
