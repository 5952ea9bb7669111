import pytest

from dotmatrix.input import (
    Axis,
    AxisTracker,
    ButtonPoller,
    ControllerButton,
    Event,
    EventType,
    JoyConfig,
    Key,
    map_controller_button,
    rumble_level,
)


@pytest.mark.parametrize(
    "button, key",
    [
        (ControllerButton.A, Key.JOY0),
        (ControllerButton.B, Key.JOY1),
        (ControllerButton.BACK, Key.JOY2),
        (ControllerButton.START, Key.JOY3),
        (ControllerButton.DPAD_UP, Key.JOYUP),
        (ControllerButton.DPAD_LEFT, Key.JOYLEFT),
        (ControllerButton.RIGHTSTICK, Key.JOY9),
    ],
)
def test_controller_mapping(button, key):
    assert map_controller_button(button) is key


def test_guide_is_unbound():
    assert map_controller_button(ControllerButton.GUIDE) is None


def test_every_bound_key_is_distinct():
    keys = [map_controller_button(b) for b in ControllerButton]
    bound = [k for k in keys if k is not None]
    assert len(bound) == len(set(bound)) == 14


def test_rumble_inactive_is_zero():
    assert rumble_level(100, False) == 0


def test_rumble_full_strength_fits_16_bits():
    level = rumble_level(100, True)
    assert 0 < level <= 0xFFFF
    assert rumble_level(50, True) < level


def test_clamped_limits_percentages():
    cfg = JoyConfig(rumble_strength=150, deadzone=250).clamped()
    assert cfg.rumble_strength == 100
    assert cfg.deadzone == 100


def test_clamped_keeps_small_values():
    cfg = JoyConfig(rumble_strength=30, deadzone=10)
    assert cfg.clamped() == cfg


def test_axis_press_and_release():
    tracker = AxisTracker(deadzone=40)
    assert tracker.feed(Axis.LEFTX, -30000) == Event(EventType.PRESS, Key.JOYLEFT)
    assert tracker.feed(Axis.LEFTX, -30000) is None
    assert tracker.feed(Axis.LEFTX, 0) == Event(EventType.RELEASE, Key.JOYLEFT)
    assert tracker.feed(Axis.LEFTX, 0) is None


def test_axis_vertical_directions():
    tracker = AxisTracker(deadzone=40)
    assert tracker.feed(Axis.LEFTY, 30000) == Event(EventType.PRESS, Key.JOYDOWN)
    assert tracker.feed(Axis.LEFTY, 0) == Event(EventType.RELEASE, Key.JOYDOWN)
    assert tracker.feed(Axis.LEFTY, -30000) == Event(EventType.PRESS, Key.JOYUP)


def test_axis_hysteresis_band_holds_state():
    tracker = AxisTracker(deadzone=40)
    tracker.feed(Axis.LEFTX, 30000)
    between = tracker.threshold - tracker.hysteresis // 2
    assert tracker.feed(Axis.LEFTX, between) is None
    assert tracker.feed(Axis.LEFTX, 0) == Event(EventType.RELEASE, Key.JOYRIGHT)


def test_other_axes_ignored():
    tracker = AxisTracker()
    assert tracker.feed(Axis.RIGHTX, -30000) is None
    assert tracker.feed(Axis.TRIGGERLEFT, 30000) is None


def test_button_poller_reports_changes_only():
    poller = ButtonPoller()
    assert poller.update(Key.JOY0, False) is None
    assert poller.update(Key.JOY0, True) == Event(EventType.PRESS, Key.JOY0)
    assert poller.update(Key.JOY0, True) is None
    assert poller.update(Key.JOY1, True) == Event(EventType.PRESS, Key.JOY1)
    assert poller.update(Key.JOY0, False) == Event(EventType.RELEASE, Key.JOY0)