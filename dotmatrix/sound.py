"""Four-channel sound generator driven by the memory-mapped sound registers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from dotmatrix.pcm import Pcm

NR10, NR11, NR12, NR13, NR14 = 0x10, 0x11, 0x12, 0x13, 0x14
NR21, NR22, NR23, NR24 = 0x16, 0x17, 0x18, 0x19
NR30, NR31, NR32, NR33, NR34 = 0x1A, 0x1B, 0x1C, 0x1D, 0x1E
NR41, NR42, NR43, NR44 = 0x20, 0x21, 0x22, 0x23
NR50, NR51, NR52 = 0x24, 0x25, 0x26
WAVE_START = 0x30

_MASK32 = 0xFFFFFFFF

_DMG_WAVE = bytes(
    [
        0xAC, 0xDD, 0xDA, 0x48,
        0x36, 0x02, 0xCF, 0x16,
        0x2C, 0x04, 0xE5, 0x2C,
        0xAC, 0xDD, 0xDA, 0x48,
    ]
)
_CGB_WAVE = bytes([0x00, 0xFF] * 8)

# Duty patterns: True where the square wave is high.
_SQUARE = (
    (False, False, True, False, False, False, False, False),
    (False, True, True, False, False, False, False, False),
    (True, True, True, True, False, False, False, False),
    (True, False, False, True, True, True, True, True),
)

_NOISE_PERIODS = (
    (1 << 14) * 2,
    1 << 14,
    (1 << 14) // 2,
    (1 << 14) // 3,
    (1 << 14) // 4,
    (1 << 14) // 5,
    (1 << 14) // 6,
    (1 << 14) // 7,
)

_POWER_ON = {
    NR10: 0x80,
    NR11: 0xBF,
    NR12: 0xF3,
    NR14: 0xBF,
    NR21: 0x3F,
    NR22: 0x00,
    NR24: 0xBF,
    NR30: 0x7F,
    NR31: 0xFF,
    NR32: 0x9F,
    NR33: 0xBF,
    NR41: 0xFF,
    NR42: 0x00,
    NR43: 0x00,
    NR44: 0xBF,
    NR50: 0x77,
    NR51: 0xF3,
    NR52: 0xF1,
}

_WRITABLE = frozenset(
    {
        NR10, NR11, NR12, NR13, NR14,
        NR21, NR22, NR23, NR24,
        NR30, NR31, NR32, NR33, NR34,
        NR41, NR42, NR43, NR44,
        NR50, NR51, NR52,
    }
)


def _lfsr_table(width: int, size: int) -> bytes:
    """Pseudo-random bits of a ``width``-bit shift register, packed MSB first."""
    state = (1 << width) - 1
    out = bytearray()
    for _ in range(size):
        byte = 0
        for _ in range(8):
            byte = (byte << 1) | (state & 1)
            feedback = (state ^ (state >> 1)) & 1
            state = (state >> 1) | (feedback << (width - 1))
        out.append(byte)
    return bytes(out)


@dataclass
class Channel:
    """Running state of one sound channel."""

    on: bool = False
    pos: int = 0
    cnt: int = 0
    encnt: int = 0
    swcnt: int = 0
    length: int = 0
    enlen: int = 0
    swlen: int = 0
    swfreq: int = 0
    freq: int = 0
    envol: int = 0
    endir: int = 0

    def _envelope(self, reg: int) -> None:
        self.envol = reg >> 4
        self.endir = 1 if reg & 8 else -1
        self.enlen = (reg & 7) << 15

    def _step_envelope(self, rate: int) -> None:
        if not self.enlen:
            return
        self.encnt += rate
        if self.encnt >= self.enlen:
            self.encnt -= self.enlen
            self.envol = min(15, max(0, self.envol + self.endir))

    def _step_length(self, counting: int, rate: int) -> None:
        if counting:
            self.cnt += rate
            if self.cnt >= self.length:
                self.on = False

    def _advance(self) -> None:
        self.pos = (self.pos + self.freq) & _MASK32


class Sound:
    """Sound registers, channels and sample mixing into a :class:`Pcm` buffer."""

    def __init__(
        self,
        pcm: Pcm | None = None,
        hi: bytearray | None = None,
        cgb: bool = False,
        noise7: Sequence[int] | None = None,
        noise15: Sequence[int] | None = None,
    ) -> None:
        self.pcm = pcm if pcm is not None else Pcm()
        self.hi = hi if hi is not None else bytearray(256)
        if len(self.hi) < 0x41:
            raise ValueError("high memory page must hold at least 0x41 bytes")
        self.cgb = cgb
        self.noise7 = bytes(noise7) if noise7 is not None else _lfsr_table(7, 16)
        self.noise15 = bytes(noise15) if noise15 is not None else _lfsr_table(15, 4096)
        if len(self.noise7) < 16 or len(self.noise15) < 4096:
            raise ValueError("noise tables must hold 16 and 4096 bytes")
        self.channels = [Channel() for _ in range(4)]
        self.wave = bytearray(16)
        self.rate = 0
        self.cycles = 0
        self.reset()

    def reset(self) -> None:
        """Clear all channels, load the start-up wave pattern and power on."""
        self.channels[:] = [Channel() for _ in range(4)]
        self.rate = (1 << 21) // self.pcm.hz if self.pcm.hz else 0
        self.wave[:] = _CGB_WAVE if self.cgb else _DMG_WAVE
        self.hi[WAVE_START:WAVE_START + 16] = self.wave
        self.off()

    def off(self) -> None:
        """Silence every channel and restore the power-on register values."""
        self.channels[:] = [Channel() for _ in range(4)]
        for reg, value in _POWER_ON.items():
            self.hi[reg] = value
        self.dirty()

    def dirty(self) -> None:
        """Recompute channel parameters from the registers."""
        hi = self.hi
        s1, s2, s3, s4 = self.channels
        s1.swlen = ((hi[NR10] >> 4) & 7) << 14
        s1.length = (64 - (hi[NR11] & 63)) << 13
        s1._envelope(hi[NR12])
        self._s1_freq()
        s2.length = (64 - (hi[NR21] & 63)) << 13
        s2._envelope(hi[NR22])
        self._s2_freq()
        s3.length = (256 - hi[NR31]) << 20
        self._s3_freq()
        s4.length = (64 - (hi[NR41] & 63)) << 13
        s4._envelope(hi[NR42])
        self._s4_freq()

    def advance(self, cycles: int) -> None:
        """Add elapsed machine cycles for the next :meth:`mix` to consume."""
        self.cycles += cycles

    def _period(self, lo: int, hi_reg: int) -> int:
        return 2048 - (((self.hi[hi_reg] & 7) << 8) + self.hi[lo])

    def _square_freq(self, period: int) -> int:
        if self.rate > (period << 4):
            return 0
        return (self.rate << 17) // period

    def _s1_freq(self) -> None:
        self.channels[0].freq = self._square_freq(self._period(NR13, NR14))

    def _s2_freq(self) -> None:
        self.channels[1].freq = self._square_freq(self._period(NR23, NR24))

    def _s3_freq(self) -> None:
        period = self._period(NR33, NR34)
        if self.rate > (period << 3):
            self.channels[2].freq = 0
        else:
            self.channels[2].freq = (self.rate << 21) // period

    def _s4_freq(self) -> None:
        nr43 = self.hi[NR43]
        freq = (_NOISE_PERIODS[nr43 & 7] >> (nr43 >> 4)) * self.rate
        self.channels[3].freq = 1 << 18 if freq >> 18 else freq

    def _sweep(self) -> None:
        s1 = self.channels[0]
        hi = self.hi
        s1.swcnt -= s1.swlen
        f = s1.swfreq
        shift = hi[NR10] & 7
        if hi[NR10] & 8:
            f -= f >> shift
        else:
            f += f >> shift
        if f > 2047:
            s1.on = False
        else:
            s1.swfreq = f
            hi[NR13] = f & 0xFF
            hi[NR14] = (hi[NR14] & 0xF8) | (f >> 8)
            s1.freq = self._square_freq(2048 - f)

    def _sample(self) -> tuple[int, int]:
        hi = self.hi
        rate = self.rate
        pan = hi[NR51]
        s1, s2, s3, s4 = self.channels
        left = right = 0

        if s1.on:
            s = s1.envol if _SQUARE[hi[NR11] >> 6][(s1.pos >> 18) & 7] else 0
            s1._advance()
            s1._step_length(hi[NR14] & 64, rate)
            s1._step_envelope(rate)
            if s1.swlen:
                s1.swcnt += rate
                if s1.swcnt >= s1.swlen:
                    self._sweep()
            s <<= 2
            if pan & 1:
                right += s
            if pan & 16:
                left += s

        if s2.on:
            s = s2.envol if _SQUARE[hi[NR21] >> 6][(s2.pos >> 18) & 7] else 0
            s2._advance()
            s2._step_length(hi[NR24] & 64, rate)
            s2._step_envelope(rate)
            s <<= 2
            if pan & 2:
                right += s
            if pan & 32:
                left += s

        if s3.on:
            byte = self.wave[(s3.pos >> 22) & 15]
            s = (byte & 15 if s3.pos & (1 << 21) else byte >> 4) - 8
            s3._advance()
            s3._step_length(hi[NR34] & 64, rate)
            level = hi[NR32]
            s = s << (3 - ((level >> 5) & 3)) if level & 96 else 0
            if pan & 4:
                right += s
            if pan & 64:
                left += s

        if s4.on:
            bit = 7 - ((s4.pos >> 17) & 7)
            if hi[NR43] & 8:
                source = self.noise7[(s4.pos >> 20) & 15]
            else:
                source = self.noise15[(s4.pos >> 20) & 4095]
            s = s4.envol if (source >> bit) & 1 else 0
            s4._advance()
            s4._step_length(hi[NR44] & 64, rate)
            s4._step_envelope(rate)
            s *= 3
            if pan & 8:
                right += s
            if pan & 128:
                left += s

        left = (left * (hi[NR50] & 0x07)) >> 4
        right = (right * ((hi[NR50] & 0x70) >> 4)) >> 4
        return max(-128, min(127, left)), max(-128, min(127, right))

    def _emit(self, left: int, right: int) -> None:
        pcm = self.pcm
        if pcm.buf is None:
            return
        if pcm.stereo:
            pcm.put(left + 128)
            pcm.put(right + 128)
        else:
            pcm.put(((left + right) >> 1) + 128)

    def mix(self) -> None:
        """Generate one sample for every ``rate`` cycles accumulated."""
        rate = self.rate
        if not rate or self.cycles < rate:
            return
        while self.cycles >= rate:
            self.cycles -= rate
            self._emit(*self._sample())
        s1, s2, s3, s4 = self.channels
        self.hi[NR52] = (
            (self.hi[NR52] & 0xF0)
            | int(s1.on)
            | (int(s2.on) << 1)
            | (int(s3.on) << 2)
            | (int(s4.on) << 3)
        )

    def read(self, register: int) -> int:
        """Bring output up to date and return a sound register."""
        self.mix()
        return self.hi[register]

    def _trigger_s1(self) -> None:
        s1 = self.channels[0]
        hi = self.hi
        s1.swcnt = 0
        s1.swfreq = ((hi[NR14] & 7) << 8) + hi[NR13]
        s1._envelope(hi[NR12])
        if not s1.on:
            s1.pos = 0
        s1.on = True
        s1.cnt = 0
        s1.encnt = 0

    def _trigger_s2(self) -> None:
        s2 = self.channels[1]
        s2._envelope(self.hi[NR22])
        if not s2.on:
            s2.pos = 0
        s2.on = True
        s2.cnt = 0
        s2.encnt = 0

    def _trigger_s3(self) -> None:
        s3 = self.channels[2]
        hi = self.hi
        if not s3.on:
            s3.pos = 0
        s3.cnt = 0
        s3.on = bool(hi[NR30] >> 7)
        if s3.on:
            hi[WAVE_START:WAVE_START + 16] = bytes(
                0x13 ^ value for value in hi[WAVE_START + 1:WAVE_START + 17]
            )

    def _trigger_s4(self) -> None:
        s4 = self.channels[3]
        s4._envelope(self.hi[NR42])
        s4.on = True
        s4.pos = 0
        s4.cnt = 0
        s4.encnt = 0

    def write(self, register: int, value: int) -> None:
        """Write a sound register or a byte of wave memory."""
        hi = self.hi
        value &= 0xFF
        if not hi[NR52] & 128 and register != NR52:
            return
        if register & 0xF0 == WAVE_START:
            s3 = self.channels[2]
            if s3.on:
                self.mix()
            if not s3.on:
                self.wave[register - WAVE_START] = value
                hi[register] = value
            return
        self.mix()
        if register not in _WRITABLE:
            return
        hi[register] = value
        s1, s2, s3, s4 = self.channels
        if register == NR10:
            s1.swlen = ((value >> 4) & 7) << 14
            s1.swfreq = ((hi[NR14] & 7) << 8) + hi[NR13]
        elif register == NR11:
            s1.length = (64 - (value & 63)) << 13
        elif register == NR12:
            s1._envelope(value)
        elif register == NR13:
            self._s1_freq()
        elif register == NR14:
            self._s1_freq()
            if value & 128:
                self._trigger_s1()
        elif register == NR21:
            s2.length = (64 - (value & 63)) << 13
        elif register == NR22:
            s2._envelope(value)
        elif register == NR23:
            self._s2_freq()
        elif register == NR24:
            self._s2_freq()
            if value & 128:
                self._trigger_s2()
        elif register == NR30:
            if not value & 128:
                s3.on = False
        elif register == NR31:
            s3.length = (256 - value) << 13
        elif register == NR33:
            self._s3_freq()
        elif register == NR34:
            self._s3_freq()
            if value & 128:
                self._trigger_s3()
        elif register == NR41:
            s4.length = (64 - (value & 63)) << 13
        elif register == NR42:
            s4._envelope(value)
        elif register == NR43:
            self._s4_freq()
        elif register == NR44:
            if value & 128:
                self._trigger_s4()
        elif register == NR52:
            if not value & 128:
                self.off()