"""Named configuration variables, integer parsing and small host helpers."""

from __future__ import annotations

import enum
import re
import time
from dataclasses import dataclass
from itertools import takewhile
from typing import Any, Callable, Iterable, Iterator, Sequence

_DEC_DIGITS = "0123456789"
_OCT_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_ATOI = re.compile(r"\s*([+-]?\d+)", re.ASCII)


class RcType(enum.Enum):
    """Kind of value a configuration variable holds."""

    INT = "int"
    STRING = "string"
    VECTOR = "vector"
    BOOL = "bool"


@dataclass
class RcVar:
    """A named configuration variable and its current value."""

    name: str
    type: RcType
    value: Any = None
    length: int = 1

    def __post_init__(self) -> None:
        if self.type is RcType.VECTOR:
            values = list(self.value or [])[: self.length]
            values.extend([0] * (self.length - len(values)))
            self.value = values
        elif self.type is RcType.INT and self.value is None:
            self.value = 0
        elif self.type is RcType.BOOL:
            self.value = bool(self.value)


def _leading(text: str, allowed: str) -> str:
    return "".join(takewhile(lambda ch: ch in allowed, text))


def parse_int(text: str) -> int:
    """Parse decimal, ``0x`` hexadecimal or ``0``-prefixed octal text.

    Parsing stops at the first character that does not fit the base;
    text without any digits yields 0.
    """
    if text.startswith("0"):
        rest = text[1:]
        if rest[:1] in ("x", "X") and rest:
            digits = _leading(rest[1:], _HEX_DIGITS)
            return int(digits, 16) if digits else 0
        digits = _leading(rest, _OCT_DIGITS)
        return int(digits, 8) if digits else 0
    if text.startswith("-"):
        digits = _leading(text[1:], _DEC_DIGITS)
        return -int(digits) if digits else 0
    digits = _leading(text, _DEC_DIGITS)
    return int(digits) if digits else 0


def _c_atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _parse_bool(values: Sequence[str]) -> bool:
    if not values:
        return True
    text = values[0]
    head = text[:1]
    # An empty string counts as true: its empty head is "in" every set.
    if _c_atoi(text) or head in "yYtT":
        return True
    if head in "0nNfF":
        return False
    raise ValueError(f"not a boolean: {text!r}")


class RcRegistry:
    """Ordered collection of exported configuration variables."""

    def __init__(self) -> None:
        self._vars: list[RcVar] = []

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[RcVar]:
        return iter(self._vars)

    def __contains__(self, name: object) -> bool:
        return any(var.name == name for var in self._vars)

    def export(self, var: RcVar | None) -> None:
        """Register one variable; ``None`` is ignored."""
        if var is not None:
            self._vars.append(var)

    def export_all(self, variables: Iterable[RcVar]) -> None:
        """Register every variable in ``variables`` in order."""
        for var in variables:
            self.export(var)

    def find(self, name: str) -> RcVar | None:
        """Return the first variable registered under ``name``."""
        return next((var for var in self._vars if var.name == name), None)

    def set(self, name: str, values: Sequence[str]) -> None:
        """Assign textual ``values`` to the variable ``name``.

        Raises KeyError for an unknown name and ValueError when the values
        do not suit the variable's type.
        """
        var = self.find(name)
        if var is None:
            raise KeyError(name)
        values = list(values)
        if var.type is RcType.INT:
            if not values:
                raise ValueError(f"{name} needs a value")
            var.value = parse_int(values[0])
        elif var.type is RcType.STRING:
            if not values:
                raise ValueError(f"{name} needs a value")
            var.value = values[0]
        elif var.type is RcType.VECTOR:
            for index, text in enumerate(values[: var.length]):
                var.value[index] = parse_int(text)
        elif var.type is RcType.BOOL:
            var.value = _parse_bool(values)

    def get_int(self, name: str) -> int:
        """Integer value of an int or bool variable, else 0."""
        var = self.find(name)
        if var is not None and var.type in (RcType.INT, RcType.BOOL):
            return int(var.value)
        return 0

    def get_vector(self, name: str) -> list[int] | None:
        """Integer values of an int, bool or vector variable, else None."""
        var = self.find(name)
        if var is None:
            return None
        if var.type is RcType.VECTOR:
            return list(var.value)
        if var.type in (RcType.INT, RcType.BOOL):
            return [int(var.value)]
        return None

    def get_str(self, name: str) -> str | None:
        """Value of a string variable, else None."""
        var = self.find(name)
        if var is not None and var.type is RcType.STRING:
            return var.value
        return None


def sanitize_path(path: str) -> str:
    """Normalise directory separators to forward slashes."""
    return path.replace("\\", "/")


def init_paths(registry: RcRegistry) -> None:
    """Default ``rcpath`` and ``savedir`` to the current directory."""
    for name in ("rcpath", "savedir"):
        if registry.find(name) is not None and registry.get_str(name) is None:
            registry.set(name, ["."])


def _microseconds() -> int:
    return time.monotonic_ns() // 1000


class Stopwatch:
    """Measures microseconds between successive readings."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _microseconds
        self._last = self._clock()

    def elapsed(self) -> int:
        """Microseconds since the previous reading; restarts the count."""
        now = self._clock()
        delta = now - self._last
        self._last = now
        return delta