"""Cartridge real-time clock."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import IO


def _wrap(value: int, limit: int) -> int:
    return value % limit if value >= limit else value


def _carry(value: int, add: int, limit: int) -> tuple[int, int]:
    total = value + add
    if total < limit:
        return total, 0
    return total % limit, total // limit


@dataclass
class Rtc:
    """Clock counters, latched registers and the selected register."""

    sel: int = 0
    latched: int = 0
    carry: int = 0
    stop: int = 0
    d: int = 0
    h: int = 0
    m: int = 0
    s: int = 0
    t: int = 0
    regs: list[int] = field(default_factory=lambda: [0] * 8)
    sync: bool = True

    def latch(self, value: int) -> None:
        """Copy the counters into the registers on a rising bit 0."""
        if (self.latched ^ value) & value & 1:
            self.regs[0] = self.s & 0xFF
            self.regs[1] = self.m & 0xFF
            self.regs[2] = self.h & 0xFF
            self.regs[3] = self.d & 0xFF
            self.regs[4] = ((self.d >> 9) | (self.stop << 6) | (self.carry << 7)) & 0xFF
            self.regs[5] = self.regs[6] = self.regs[7] = 0xFF
        self.latched = value

    def write(self, value: int) -> None:
        """Write ``value`` to the selected clock register."""
        if not self.sel & 8:
            return
        value &= 0xFF
        reg = self.sel & 7
        if reg == 0:
            self.regs[0] = value
            self.s = _wrap(value, 60)
        elif reg == 1:
            self.regs[1] = value
            self.m = _wrap(value, 60)
        elif reg == 2:
            self.regs[2] = value
            self.h = _wrap(value, 24)
        elif reg == 3:
            self.regs[3] = value
            self.d = (self.d & 0x100) | value
        elif reg == 4:
            self.regs[4] = value
            self.d = (self.d & 0xFF) | ((value & 1) << 9)
            self.stop = (value >> 6) & 1
            self.carry = (value >> 7) & 1

    def tick(self) -> None:
        """Advance by one sixtieth of a second unless stopped."""
        if self.stop:
            return
        self.t += 1
        if self.t == 60:
            self.s += 1
            if self.s == 60:
                self.m += 1
                if self.m == 60:
                    self.h += 1
                    if self.h == 24:
                        self.d += 1
                        if self.d == 365:
                            self.d = 0
                            self.carry = 1
                        self.h = 0
                    self.m = 0
                self.s = 0
            self.t = 0

    def _advance(self, ticks: int) -> None:
        if self.stop or ticks <= 0:
            return
        self.t, up = _carry(self.t, ticks, 60)
        self.s, up = _carry(self.s, up, 60)
        self.m, up = _carry(self.m, up, 60)
        self.h, up = _carry(self.h, up, 24)
        self.d, up = _carry(self.d, up, 365)
        if up:
            self.carry = 1

    def save(self, stream: IO[str], now: int | None = None) -> None:
        """Write the clock state and the wall-clock time to ``stream``."""
        if now is None:
            now = int(time.time())
        stream.write(
            f"{self.carry} {self.stop} {self.d} "
            f"{self.h:02d} {self.m:02d} {self.s:02d} {self.t:02d}\n{int(now)}\n"
        )

    def load(self, stream: IO[str], now: int | None = None) -> None:
        """Read state written by :meth:`save`, catching up on elapsed time."""
        if now is None:
            now = int(time.time())
        fields: list[int] = []
        for token in stream.read().split():
            try:
                fields.append(int(token))
            except ValueError:
                break
            if len(fields) == 8:
                break
        for name, value in zip(("carry", "stop", "d", "h", "m", "s", "t"), fields):
            setattr(self, name, value)
        saved = fields[7] if len(fields) > 7 else 0
        self.t = _wrap(self.t, 60)
        self.s = _wrap(self.s, 60)
        self.m = _wrap(self.m, 60)
        self.h = _wrap(self.h, 24)
        self.d = _wrap(self.d, 365)
        self.stop &= 1
        self.carry &= 1
        if saved and self.sync:
            self._advance((int(now) - saved) * 60)