import pytest

from models import ColorMode, Config, InvalidArgument


def test_default_config_is_valid():
    Config().validate()


@pytest.mark.parametrize("changes", [
    {'sample_size': 3001},
    {'sample_size': 0},
    {'sample_size': -2},
    {'nth_root': 0},
    {'nth_root': -1.5},
    {'nth_root': float('nan')},
    {'nth_root': float('inf')},
    {'characters': ''},
    {'peak_char': '^^'},
    {'hsv': (0.1, 1.5, 1.0)},
    {'hsv': None},
    {'color_mode': ColorMode.SOLID, 'rgb': (0, 0, 256)},
    {'color_mode': ColorMode.SOLID, 'rgb': None},
])
def test_invalid_config(changes):
    with pytest.raises(InvalidArgument):
        Config(**changes).validate()


def test_color_parameters_only_checked_for_their_mode():
    Config(color_mode=ColorMode.NONE, hsv=None, rgb=None).validate()
    Config(color_mode=ColorMode.SOLID, hsv=None).validate()
    Config(color_mode=ColorMode.WHEEL, rgb=None).validate()


def test_invalid_argument_is_a_value_error():
    assert issubclass(InvalidArgument, ValueError)
