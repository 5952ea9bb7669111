"""Conversion of indexed scanlines into palette colours."""

from __future__ import annotations

from itertools import chain, repeat
from typing import Iterable, Sequence


def _check_scale(scale: int) -> None:
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")


def refresh(src: Iterable[int], palette: Sequence[int], scale: int = 1) -> list[int]:
    """Map palette indices to colours, repeating each pixel ``scale`` times."""
    _check_scale(scale)
    return list(chain.from_iterable(repeat(palette[index], scale) for index in src))


def refresh_packed24(src: Iterable[int], palette: Sequence[int], scale: int = 1) -> bytes:
    """Map palette indices to 3-byte little-endian colours, ``scale`` times each."""
    _check_scale(scale)
    return b"".join(
        (palette[index] & 0xFFFFFF).to_bytes(3, "little") * scale for index in src
    )