"""Frame buffer layout and window sizing for the video output."""

from __future__ import annotations

from dataclasses import dataclass, field

SCREEN_WIDTH = 160
SCREEN_HEIGHT = 144

PANEL_WIDTH = 240
PANEL_HEIGHT = 240
SCALED_WIDTH = 240
SCALED_HEIGHT = 216


@dataclass(frozen=True)
class ChannelShift:
    """How one colour component is placed: drop ``right`` bits, shift ``left``."""

    right: int = 0
    left: int = 0

    def place(self, component: int) -> int:
        """Position a 0-255 component inside a pixel value."""
        return ((component & 0xFF) >> self.right) << self.left


@dataclass
class FrameBuffer:
    """Pixel memory and the bit layout of its pixels."""

    w: int
    h: int
    pelsize: int
    channels: tuple[ChannelShift, ChannelShift, ChannelShift, ChannelShift]
    ptr: bytearray = field(default_factory=bytearray)
    enabled: bool = True
    dirty: bool = False
    fullscreen: bool = False

    def __post_init__(self) -> None:
        if self.w < 1 or self.h < 1 or self.pelsize < 1:
            raise ValueError("frame buffer dimensions must be positive")
        if len(self.ptr) < self.pitch * self.h:
            self.ptr.extend(bytes(self.pitch * self.h - len(self.ptr)))

    @property
    def pitch(self) -> int:
        """Bytes per row."""
        return self.w * self.pelsize

    @property
    def indexed(self) -> bool:
        """True when pixels are palette indices."""
        return self.pelsize == 1

    def pack(self, r: int, g: int, b: int) -> int:
        """Combine red, green and blue components into one pixel value."""
        red, green, blue, _ = self.channels
        return red.place(r) | green.place(g) | blue.place(b)

    def toggle_fullscreen(self) -> bool:
        """Switch between windowed and full-screen output; return the new state."""
        self.fullscreen = not self.fullscreen
        return self.fullscreen


def make_rgb32_framebuffer(
    width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT
) -> FrameBuffer:
    """A 4-byte-per-pixel buffer with red, green and blue in bits 16, 8 and 0."""
    return FrameBuffer(
        w=width,
        h=height,
        pelsize=4,
        channels=(ChannelShift(0, 16), ChannelShift(0, 8), ChannelShift(0, 0), ChannelShift(0, 0)),
    )


def make_rgb565_framebuffer(
    width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT
) -> FrameBuffer:
    """A 2-byte-per-pixel buffer: 5 bits red low, 6 bits green, 5 bits blue high."""
    return FrameBuffer(
        w=width,
        h=height,
        pelsize=2,
        channels=(ChannelShift(3, 0), ChannelShift(2, 5), ChannelShift(3, 11), ChannelShift(0, 0)),
    )


@dataclass
class VideoConfig:
    """Video settings: mode, full-screen, renderer choice and tracing."""

    vmode: list[int] = field(default_factory=lambda: [0, 0, 32])
    fullscreen: bool = False
    integer_scale: bool = True
    render_type: int = 1
    trace: bool = False


def window_size(config: VideoConfig, scale: int) -> tuple[int, int]:
    """Window size for ``config``.

    Without an explicit video mode the native screen is used, enlarged by
    ``scale`` (at least 1); an explicit mode is used as it is.
    """
    width, height = config.vmode[0], config.vmode[1]
    if not width or not height:
        factor = max(scale, 1)
        return SCREEN_WIDTH * factor, SCREEN_HEIGHT * factor
    return width, height