"""Input events: controller button mapping, stick-to-pad conversion and button polling."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace


class Key(enum.Enum):
    """Joypad keys that input sources report."""

    JOY0 = "joy0"
    JOY1 = "joy1"
    JOY2 = "joy2"
    JOY3 = "joy3"
    JOY4 = "joy4"
    JOY5 = "joy5"
    JOY6 = "joy6"
    JOY7 = "joy7"
    JOY8 = "joy8"
    JOY9 = "joy9"
    JOYUP = "joyup"
    JOYDOWN = "joydown"
    JOYLEFT = "joyleft"
    JOYRIGHT = "joyright"


class EventType(enum.Enum):
    """Whether a key went down or came up."""

    PRESS = "press"
    RELEASE = "release"


@dataclass(frozen=True)
class Event:
    """A key press or release."""

    type: EventType
    code: Key


class ControllerButton(enum.IntEnum):
    """Buttons of a standard game controller."""

    A = 0
    B = 1
    X = 2
    Y = 3
    BACK = 4
    GUIDE = 5
    START = 6
    LEFTSTICK = 7
    RIGHTSTICK = 8
    LEFTSHOULDER = 9
    RIGHTSHOULDER = 10
    DPAD_UP = 11
    DPAD_DOWN = 12
    DPAD_LEFT = 13
    DPAD_RIGHT = 14


class Axis(enum.IntEnum):
    """Analogue axes of a standard game controller."""

    LEFTX = 0
    LEFTY = 1
    RIGHTX = 2
    RIGHTY = 3
    TRIGGERLEFT = 4
    TRIGGERRIGHT = 5


_CONTROLLER_MAP: dict[ControllerButton, Key] = {
    ControllerButton.A: Key.JOY0,
    ControllerButton.B: Key.JOY1,
    ControllerButton.BACK: Key.JOY2,
    ControllerButton.START: Key.JOY3,
    ControllerButton.DPAD_UP: Key.JOYUP,
    ControllerButton.DPAD_DOWN: Key.JOYDOWN,
    ControllerButton.DPAD_LEFT: Key.JOYLEFT,
    ControllerButton.DPAD_RIGHT: Key.JOYRIGHT,
    ControllerButton.X: Key.JOY4,
    ControllerButton.Y: Key.JOY5,
    ControllerButton.LEFTSHOULDER: Key.JOY6,
    ControllerButton.RIGHTSHOULDER: Key.JOY7,
    ControllerButton.LEFTSTICK: Key.JOY8,
    ControllerButton.RIGHTSTICK: Key.JOY9,
}


def map_controller_button(button: ControllerButton) -> Key | None:
    """Joypad key bound to a controller button, or None when unbound."""
    return _CONTROLLER_MAP.get(button)


def rumble_level(strength: int, active: bool) -> int:
    """Motor intensity (0-65535) for a rumble strength in percent."""
    if not active:
        return 0
    return ((0xFFFF // 100) * strength) & 0xFFFF


@dataclass(frozen=True)
class JoyConfig:
    """Controller settings; strengths and dead zone are percentages."""

    enable: bool = True
    rumble_strength: int = 100
    deadzone: int = 40
    alert_on_quit: bool = False
    altenter: bool = False
    trace: bool = False

    def clamped(self) -> JoyConfig:
        """Copy with rumble strength and dead zone limited to 100%."""
        return replace(
            self,
            rumble_strength=min(self.rumble_strength, 100),
            deadzone=min(self.deadzone, 100),
        )


class _Hat(enum.IntFlag):
    UP = 1
    RIGHT = 2
    DOWN = 4
    LEFT = 8


_HAT_OF_KEY = {
    Key.JOYLEFT: _Hat.LEFT,
    Key.JOYRIGHT: _Hat.RIGHT,
    Key.JOYUP: _Hat.UP,
    Key.JOYDOWN: _Hat.DOWN,
}

HYSTERESIS = 2000


@dataclass
class AxisTracker:
    """Turns left-stick motion into directional pad presses and releases."""

    deadzone: int = 40
    hysteresis: int = HYSTERESIS
    _hat: _Hat = field(default=_Hat(0), repr=False)

    @property
    def threshold(self) -> int:
        """Axis magnitude beyond which a direction counts as pressed."""
        return self.deadzone * (0x7FFF // 100)

    def _press(self, axis: Axis, value: int) -> ControllerButton | None:
        limit = self.threshold
        hat = self._hat
        if axis is Axis.LEFTX and value < -limit and not hat & _Hat.LEFT:
            return ControllerButton.DPAD_LEFT
        if axis is Axis.LEFTX and value > limit and not hat & _Hat.RIGHT:
            return ControllerButton.DPAD_RIGHT
        if axis is Axis.LEFTY and value < -limit and not hat & _Hat.UP:
            return ControllerButton.DPAD_UP
        if axis is Axis.LEFTY and value > limit and not hat & _Hat.DOWN:
            return ControllerButton.DPAD_DOWN
        return None

    def _release(self, axis: Axis, value: int) -> ControllerButton | None:
        inner = self.threshold - self.hysteresis
        if not -inner <= value <= inner:
            return None
        hat = self._hat
        if axis is Axis.LEFTX and hat & _Hat.LEFT:
            return ControllerButton.DPAD_LEFT
        if axis is Axis.LEFTX and hat & _Hat.RIGHT:
            return ControllerButton.DPAD_RIGHT
        if axis is Axis.LEFTY and hat & _Hat.UP:
            return ControllerButton.DPAD_UP
        if axis is Axis.LEFTY and hat & _Hat.DOWN:
            return ControllerButton.DPAD_DOWN
        return None

    def feed(self, axis: Axis, value: int) -> Event | None:
        """Process one axis reading; return the pad event it causes, if any."""
        pressed = self._press(axis, value)
        button = pressed if pressed is not None else self._release(axis, value)
        if button is None:
            return None
        key = map_controller_button(button)
        if key is None:
            return None
        bit = _HAT_OF_KEY.get(key, _Hat(0))
        if pressed is not None:
            self._hat |= bit
            return Event(EventType.PRESS, key)
        self._hat &= ~bit
        return Event(EventType.RELEASE, key)


@dataclass
class ButtonPoller:
    """Remembers button states and reports only the changes."""

    _states: dict[Key, bool] = field(default_factory=dict, repr=False)

    def update(self, key: Key, pressed: bool) -> Event | None:
        """Record the current state of ``key``; return an event when it changed."""
        pressed = bool(pressed)
        if self._states.get(key, False) == pressed:
            return None
        self._states[key] = pressed
        return Event(EventType.PRESS if pressed else EventType.RELEASE, key)