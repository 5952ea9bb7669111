"""PCM output buffer that sound generation writes unsigned 8-bit samples into."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

SILENT_RATE = 11025
SILENT_BUFFER = 4096


@dataclass(frozen=True)
class AudioSpec:
    """Requested output format."""

    samplerate: int = 44100
    stereo: bool = True

    @property
    def channels(self) -> int:
        return 1 + int(self.stereo)


def buffer_samples(samplerate: int) -> int:
    """Smallest power of two holding a sixtieth of a second of samples."""
    wanted = samplerate // 60
    size = 1
    while size < wanted:
        size <<= 1
    return size


@dataclass
class Pcm:
    """Sample buffer handed to ``sink`` each time it fills."""

    hz: int = 0
    stereo: bool = False
    buf: bytearray | None = None
    length: int = 0
    pos: int = 0
    sink: Callable[[bytes], None] | None = field(default=None, repr=False)

    def open(self, spec: AudioSpec | None = None) -> None:
        """Allocate the buffer; without a spec, a mono silent-output buffer."""
        if spec is None:
            self.hz = SILENT_RATE
            self.stereo = False
            self.length = SILENT_BUFFER
        else:
            self.hz = spec.samplerate
            self.stereo = spec.stereo
            self.length = buffer_samples(spec.samplerate) * spec.channels
        self.buf = bytearray(self.length)
        self.pos = 0

    def close(self) -> None:
        """Release the buffer and clear the format."""
        self.hz = 0
        self.stereo = False
        self.buf = None
        self.length = 0
        self.pos = 0

    def put(self, value: int) -> None:
        """Append one sample, flushing first if the buffer is full."""
        if self.buf is None:
            return
        if self.pos >= self.length:
            self.submit()
        self.buf[self.pos] = value & 0xFF
        self.pos += 1

    def submit(self) -> bool:
        """Deliver a full buffer to the sink; False when output is closed."""
        if self.buf is None:
            return False
        if self.pos < self.length:
            return True
        if self.sink is not None:
            self.sink(bytes(self.buf))
        self.pos = 0
        return True