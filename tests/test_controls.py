import pytest

from app import RenderLoop
from config.defaults import MIN_SAMPLE_SIZE, SAMPLE_SIZE_STEP
from conftest import FakeSink, FakeSource, stereo_tones
from controls import KeyboardControls
from models import Accumulation, ColorMode, Scale, WindowType


@pytest.fixture
def controls(config, terminal, output):
    loop = RenderLoop(config, FakeSource(stereo_tones(2, 256)), FakeSink(), output=output, size_provider=terminal)
    return KeyboardControls(loop)


def test_unbound_key(controls):
    assert not controls.handle_key('x')


def test_multiplier_keys(controls):
    controls.handle_key('+')
    assert controls.loop.config.multiplier == pytest.approx(3.75)

    controls.handle_key('-')
    controls.handle_key('-')
    assert controls.loop.config.multiplier == pytest.approx(2.4)


def test_sample_size_keys(controls):
    controls.handle_key(']')

    assert controls.loop.config.sample_size == 256 + SAMPLE_SIZE_STEP
    assert controls.loop.sink.reopened == [256 + SAMPLE_SIZE_STEP]


def test_sample_size_has_a_floor(controls):
    assert controls.loop.config.sample_size == MIN_SAMPLE_SIZE

    controls.handle_key('[')

    assert controls.loop.config.sample_size == MIN_SAMPLE_SIZE
    assert controls.loop.sink.reopened == []


def test_cycle_keys(controls):
    controls.handle_key('s')
    controls.handle_key('w')
    controls.handle_key('a')
    controls.handle_key('c')

    config = controls.loop.config
    assert config.scale == Scale.NTH_ROOT
    assert config.window == WindowType.HANNING
    assert config.accumulation == Accumulation.MAX
    assert config.color_mode == ColorMode.SOLID


def test_cycles_wrap_around(controls):
    for _ in range(3):
        controls.handle_key('s')

    assert controls.loop.config.scale == Scale.LOG


def test_rejected_setting_is_not_fatal(controls):
    controls.loop.config.rgb = None

    assert controls.handle_key('c')
    assert controls.loop.config.color_mode == ColorMode.WHEEL


def test_quit_key_stops_the_loop(controls):
    controls.handle_key('q')

    assert controls.loop.run().name == "STOPPED"


def test_failed_sample_size_change_is_not_fatal(config, terminal, output):
    sink = FakeSink(fail_on_reopen=RuntimeError("device busy"))
    loop = RenderLoop(config, FakeSource(stereo_tones(2, 256)), sink, output=output, size_provider=terminal)
    controls = KeyboardControls(loop)

    assert controls.handle_key(']')

    assert loop.config.sample_size == 256
    assert loop.render_frame()
