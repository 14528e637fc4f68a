import pytest
from PyQt6.QtCore import QTimer

from barreplay.data.models import PlaybackState
from barreplay.replay.controller import MIN_MS_PER_BAR, ReplayController

from conftest import make_bars


@pytest.fixture
def controller(qapp):
    c = ReplayController(ms_per_bar=1000)
    yield c
    c.stop()


def active_timers(c):
    return [t for t in c.findChildren(QTimer) if t.isActive()]


def test_start_with_no_bars_stays_stopped(controller):
    controller.load([])
    controller.start()
    assert controller.state is PlaybackState.STOPPED
    assert controller.cursor == 0
    assert not controller.is_timer_active()


def test_start_reveals_first_bar_and_arms_timer(controller, bars10):
    controller.load(bars10)
    controller.start()
    assert controller.state is PlaybackState.PLAYING
    assert controller.cursor == 1
    assert len(active_timers(controller)) == 1


def test_start_twice_resets_to_first_bar(controller, bars10):
    controller.load(bars10)
    controller.start()
    controller.seek(6)
    controller.start()
    assert controller.cursor == 1
    assert len(active_timers(controller)) == 1


@pytest.mark.parametrize("state", ["stopped", "playing", "paused"])
@pytest.mark.parametrize("index,expected", [(-5, 0), (0, 0), (4, 4), (10, 10), (99, 10)])
def test_seek_clamps_in_any_state(controller, bars10, state, index, expected):
    controller.load(bars10)
    if state != "stopped":
        controller.start()
    if state == "paused":
        controller.pause()
    controller.seek(index)
    assert controller.cursor == expected
    assert controller.state.value == state


def test_steps_move_cursor_by_one_and_clamp(controller, bars10):
    controller.load(bars10)
    controller.step_back()
    assert controller.cursor == 0
    controller.step_forward()
    controller.step_forward()
    assert controller.cursor == 2
    controller.seek(10)
    controller.step_forward()
    assert controller.cursor == 10


def test_ticks_advance_until_end_then_stop(controller, bars10):
    finished = []
    controller.finished.connect(lambda: finished.append(True))
    controller.load(bars10)
    controller.start()
    controller.seek(3)

    seen = []
    controller.cursorChanged.connect(seen.append)
    while controller.state is PlaybackState.PLAYING:
        controller.tick()

    # reaches N, then the implicit stop() rewinds to 0
    assert seen == [4, 5, 6, 7, 8, 9, 10, 0]
    assert controller.state is PlaybackState.STOPPED
    assert controller.cursor == 0
    assert not controller.is_timer_active()
    assert finished == [True]

    controller.tick()
    controller.tick()
    assert controller.cursor == 0
    assert seen[-1] == 0 and len(seen) == 8
    assert finished == [True]


def test_tick_is_noop_when_paused(controller, bars10):
    controller.load(bars10)
    controller.start()
    controller.pause()
    controller.tick()
    assert controller.cursor == 1
    assert controller.state is PlaybackState.PAUSED


def test_pause_and_resume_only_from_matching_state(controller, bars10):
    controller.load(bars10)
    controller.pause()
    assert controller.state is PlaybackState.STOPPED
    controller.resume()
    assert controller.state is PlaybackState.STOPPED
    assert not controller.is_timer_active()

    controller.start()
    controller.resume()
    assert controller.state is PlaybackState.PLAYING
    assert len(active_timers(controller)) == 1

    controller.pause()
    assert controller.state is PlaybackState.PAUSED
    assert not controller.is_timer_active()
    controller.pause()
    assert controller.state is PlaybackState.PAUSED

    controller.resume()
    assert controller.state is PlaybackState.PLAYING
    assert len(active_timers(controller)) == 1


def test_stop_is_idempotent(controller, bars10):
    controller.load(bars10)
    controller.stop()
    controller.start()
    controller.seek(5)
    controller.stop()
    controller.stop()
    assert controller.state is PlaybackState.STOPPED
    assert controller.cursor == 0
    assert active_timers(controller) == []


@pytest.mark.parametrize("size,cursor,expected", [
    (None, 7, 7), (4, 7, 4), (4, 2, 2), (4, 0, 0), (0, 7, 7), (-3, 7, 7), (20, 10, 10),
])
def test_visible_bars_is_trailing_window(qapp, bars10, size, cursor, expected):
    c = ReplayController(window_size=size)
    c.load(bars10)
    c.seek(cursor)
    visible = c.visible_bars()
    assert len(visible) == expected
    assert visible == bars10[cursor - expected:cursor]


def test_set_ms_per_bar_clamps(controller):
    controller.set_ms_per_bar(3)
    assert controller.ms_per_bar == MIN_MS_PER_BAR
    controller.set_ms_per_bar(250)
    assert controller.ms_per_bar == 250
    assert not controller.is_timer_active()


def test_set_ms_per_bar_while_playing_keeps_one_timer(controller, bars10):
    controller.load(bars10)
    controller.start()
    controller.set_ms_per_bar(40)
    controller.set_ms_per_bar(30)
    timers = active_timers(controller)
    assert len(timers) == 1
    assert timers[0].interval() == 30
    assert controller.state is PlaybackState.PLAYING


def test_set_ms_per_bar_while_paused_applies_on_resume(controller, bars10):
    controller.load(bars10)
    controller.start()
    controller.pause()
    controller.set_ms_per_bar(55)
    assert not controller.is_timer_active()
    controller.resume()
    assert active_timers(controller)[0].interval() == 55


def test_speed_change_takes_effect_on_running_playback(controller, spin):
    controller.load(make_bars([100.0] * 500))
    controller.start()
    spin(50)
    assert controller.cursor == 1   # 1000 ms cadence: nothing yet

    controller.set_ms_per_bar(20)
    spin(400)
    assert controller.cursor > 5
    assert len(active_timers(controller)) == 1


def test_timer_plays_to_end_and_stops(qapp, spin):
    c = ReplayController(ms_per_bar=10)
    bars = make_bars([1.0, 2.0, 3.0, 4.0, 5.0])
    reached = []
    c.cursorChanged.connect(reached.append)
    c.load(bars)
    c.start()
    for _ in range(50):
        if c.state is PlaybackState.STOPPED:
            break
        spin(20)
    assert c.state is PlaybackState.STOPPED
    assert reached[-2:] == [5, 0]
    assert c.cursor == 0
    assert c.visible_bars() == []
    assert not c.is_timer_active()


def test_load_cancels_playback(controller, bars10):
    controller.load(bars10)
    controller.start()
    controller.seek(5)
    controller.load(bars10[:3])
    assert controller.state is PlaybackState.STOPPED
    assert controller.cursor == 0
    assert len(controller.bars) == 3
    assert active_timers(controller) == []


def test_load_resets_cursor_without_cursor_signal(controller, bars10):
    cursors, states, loaded = [], [], []
    controller.load(bars10)
    controller.start()
    controller.seek(5)
    controller.cursorChanged.connect(cursors.append)
    controller.stateChanged.connect(states.append)
    controller.barsLoaded.connect(loaded.append)

    controller.load(bars10[:4])
    assert cursors == []
    assert states == ["stopped"]
    assert loaded == [4]
    assert controller.cursor == 0
    assert controller.visible_bars() == []


def test_load_accepts_dicts_and_rejects_unordered(controller):
    controller.load([{"time": 1, "open": 1, "high": 1, "low": 1, "close": 1}])
    assert controller.bars[0].volume is None

    with pytest.raises(ValueError):
        controller.load(make_bars([1.0, 2.0], step=0))
    assert len(controller.bars) == 1


def test_signals_follow_cursor_and_state(controller, bars10):
    cursors, states, loaded = [], [], []
    controller.cursorChanged.connect(cursors.append)
    controller.stateChanged.connect(states.append)
    controller.barsLoaded.connect(loaded.append)

    controller.load(bars10)
    controller.start()
    controller.tick()
    controller.pause()
    controller.seek(9)
    controller.stop()

    assert loaded == [10]
    assert cursors == [1, 2, 9, 0]
    assert states == ["playing", "paused", "stopped"]


def test_end_to_end_window_scenario(qapp, bars10):
    c = ReplayController(ms_per_bar=1000, window_size=4)
    c.load(bars10)
    c.start()
    for _ in range(6):
        c.tick()
    assert c.cursor == 7
    assert c.visible_bars() == bars10[3:7]

    c.stop()
    assert c.cursor == 0
    assert c.state is PlaybackState.STOPPED
    assert c.visible_bars() == []
