"""Reading and writing machine snapshots in the block-structured state format."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

from dotmatrix.sound import (
    NR10, NR11, NR12, NR13, NR14,
    NR21, NR22, NR23, NR24,
    NR30, NR31, NR32, NR33, NR34,
    NR41, NR42, NR43, NR44,
    NR50, NR51, NR52,
)

BLOCK = 4096
VERSION = 0x105

HI_SIZE = 256
PAL_SIZE = 128
OAM_SIZE = 160
WAVE_SIZE = 16
IRAM_SIZE = 8 * BLOCK
VRAM_SIZE = 4 * BLOCK

WAVE_OFFSET = BLOCK - 784
HI_OFFSET = BLOCK - 768
PAL_OFFSET = BLOCK - 512
OAM_OFFSET = BLOCK - 256

_MASKS = {1: 0xFF, 2: 0xFFFF, 4: 0xFFFFFFFF}
_TERMINATOR = b"\0\0\0\0"

# Machine values in the order they are saved: (key, width in bytes).
_MACHINE_FIELDS: tuple[tuple[str, int], ...] = (
    ("PC  ", 2), ("SP  ", 2), ("BC  ", 2), ("DE  ", 2), ("HL  ", 2), ("AF  ", 2),
    ("IME ", 4), ("ima ", 4), ("spd ", 4), ("halt", 4), ("div ", 4), ("tim ", 4),
    ("lcdc", 4), ("snd ", 4),
    ("ints", 1), ("pad ", 1), ("cgb ", 4), ("gba ", 4),
    ("mbcm", 4), ("romb", 4), ("ramb", 4), ("enab", 4), ("batt", 4),
    ("rtcR", 4), ("rtcL", 4), ("rtcC", 4), ("rtcS", 4), ("rtcd", 4),
    ("rtch", 4), ("rtcm", 4), ("rtcs", 4), ("rtct", 4),
    ("rtR8", 1), ("rtR9", 1), ("rtRA", 1), ("rtRB", 1), ("rtRC", 1),
    ("S1on", 4), ("S1p ", 4), ("S1c ", 4), ("S1ec", 4), ("S1sc", 4), ("S1sf", 4),
    ("S2on", 4), ("S2p ", 4), ("S2c ", 4), ("S2ec", 4),
    ("S3on", 4), ("S3p ", 4), ("S3c ", 4),
    ("S4on", 4), ("S4p ", 4), ("S4c ", 4), ("S4ec", 4),
    ("hdma", 4),
)

# Layout entries written after the machine values.
_LAYOUT_FIELDS = ("sram", "iram", "vram", "hi  ", "pal ", "oam ", "wav ")

# Registers stored individually by older versions of the format.
_LEGACY_REGISTERS: dict[str, int] = {
    "P1": 0x00, "SB": 0x01, "SC": 0x02,
    "DIV": 0x04, "TIMA": 0x05, "TMA": 0x06, "TAC": 0x07,
    "IE": 0xFF, "IF": 0x0F,
    "LCDC": 0x40, "STAT": 0x41, "LY": 0x44, "LYC": 0x45,
    "SCX": 0x43, "SCY": 0x42, "WX": 0x4B, "WY": 0x4A,
    "BGP": 0x47, "OBP0": 0x48, "OBP1": 0x49,
    "DMA": 0x46,
    "VBK": 0x4F, "SVBK": 0x70, "KEY1": 0x4D,
    "BCPS": 0x68, "BCPD": 0x69, "OCPS": 0x6A, "OCPD": 0x6B,
    "NR10": NR10, "NR11": NR11, "NR12": NR12, "NR13": NR13, "NR14": NR14,
    "NR21": NR21, "NR22": NR22, "NR23": NR23, "NR24": NR24,
    "NR30": NR30, "NR31": NR31, "NR32": NR32, "NR33": NR33, "NR34": NR34,
    "NR41": NR41, "NR42": NR42, "NR43": NR43, "NR44": NR44,
    "NR50": NR50, "NR51": NR51, "NR52": NR52,
}
_LEGACY_HDMA = {"DMA1": 0x51, "DMA2": 0x52, "DMA3": 0x53, "DMA4": 0x54, "DMA5": 0x55}


def _name(key: str) -> str:
    return key.rstrip(" ")


VALUE_NAMES: tuple[str, ...] = tuple(_name(key) for key, _ in _MACHINE_FIELDS)


def _build_load_table() -> dict[bytes, tuple[str, int, object]]:
    table: dict[bytes, tuple[str, int, object]] = {
        b"GbSs": ("layout", 4, "GbSs"),
    }
    for key, width in _MACHINE_FIELDS:
        table[key.encode("ascii")] = ("value", width, _name(key))
    for key in (*_LAYOUT_FIELDS, "hram"):
        table[key.encode("ascii")] = ("layout", 4, _name(key))
    for name, address in _LEGACY_REGISTERS.items():
        table[name.encode("ascii").ljust(4, b"\0")] = ("register", 1, address)
    for name, address in _LEGACY_HDMA.items():
        table[name.encode("ascii")] = ("register", 1, address)
    return table


_LOAD_TABLE = _build_load_table()


@dataclass
class MachineState:
    """Everything a snapshot holds: named values and memory areas."""

    values: dict[str, int] = field(default_factory=lambda: dict.fromkeys(VALUE_NAMES, 0))
    ram_banks: int = 0
    hi: bytearray = field(default_factory=lambda: bytearray(HI_SIZE))
    pal: bytearray = field(default_factory=lambda: bytearray(PAL_SIZE))
    oam: bytearray = field(default_factory=lambda: bytearray(OAM_SIZE))
    wave: bytearray = field(default_factory=lambda: bytearray(WAVE_SIZE))
    ibank: bytearray = field(default_factory=lambda: bytearray(IRAM_SIZE))
    vbank: bytearray = field(default_factory=lambda: bytearray(VRAM_SIZE))
    sbank: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        needed = self.ram_banks * 2 * BLOCK
        if len(self.sbank) < needed:
            self.sbank.extend(bytes(needed - len(self.sbank)))

    @property
    def cgb(self) -> bool:
        """True when the machine runs in colour mode."""
        return bool(self.values.get("cgb", 0))

    def _block_counts(self) -> tuple[int, int, int]:
        if self.cgb:
            return 8, 4, self.ram_banks * 2
        return 2, 2, self.ram_banks * 2


def _iter_header(header: bytes) -> Iterator[tuple[bytes, int]]:
    for offset in range(0, len(header) - 7, 8):
        key = bytes(header[offset:offset + 4])
        if key == _TERMINATOR:
            return
        yield key, int.from_bytes(header[offset + 4:offset + 8], "little")


def _copy_into(dest: bytearray, data: bytes, start: int = 0) -> None:
    data = data[: max(0, len(dest) - start)]
    dest[start:start + len(data)] = data


def load_state(stream: BinaryIO, state: MachineState) -> None:
    """Fill ``state`` from a snapshot read from the seekable ``stream``."""
    iram_blocks, vram_blocks, sram_blocks = state._block_counts()
    layout = {"GbSs": 0, "hram": 0, "hi": 0, "pal": 0, "oam": 0, "wav": 0,
              "sram": 0, "iram": 0, "vram": 0}

    stream.seek(0)
    header = stream.read(BLOCK).ljust(BLOCK, b"\0")

    for key, raw in _iter_header(header):
        entry = _LOAD_TABLE.get(key)
        if entry is None:
            continue
        kind, width, target = entry
        value = raw & _MASKS[width]
        if kind == "value":
            state.values[target] = value
        elif kind == "layout":
            layout[target] = value
        else:
            state.hi[target] = value

    if layout["hram"]:
        _copy_into(state.hi, header[layout["hram"]:layout["hram"] + 127], 128)
    if layout["hi"]:
        _copy_into(state.hi, header[layout["hi"]:layout["hi"] + HI_SIZE])
    if layout["pal"]:
        _copy_into(state.pal, header[layout["pal"]:layout["pal"] + PAL_SIZE])
    if layout["oam"]:
        _copy_into(state.oam, header[layout["oam"]:layout["oam"] + OAM_SIZE])
    if layout["wav"]:
        _copy_into(state.wave, header[layout["wav"]:layout["wav"] + WAVE_SIZE])
    else:
        _copy_into(state.wave, bytes(state.hi[0x30:0x40]))

    for block, count, dest in (
        (layout["iram"], iram_blocks, state.ibank),
        (layout["vram"], vram_blocks, state.vbank),
        (layout["sram"], sram_blocks, state.sbank),
    ):
        stream.seek(block * BLOCK)
        _copy_into(dest, stream.read(count * BLOCK))


def save_state(stream: BinaryIO, state: MachineState) -> None:
    """Write ``state`` as a snapshot to the seekable ``stream``."""
    iram_blocks, vram_blocks, sram_blocks = state._block_counts()
    layout = {
        "GbSs": VERSION,
        "iram": 1,
        "vram": 1 + iram_blocks,
        "sram": 1 + iram_blocks + vram_blocks,
        "hi  ": HI_OFFSET,
        "pal ": PAL_OFFSET,
        "oam ": OAM_OFFSET,
        "wav ": WAVE_OFFSET,
    }
    entries = [("GbSs", 4), *_MACHINE_FIELDS, *((key, 4) for key in _LAYOUT_FIELDS)]

    header = bytearray(BLOCK)
    for index, (key, width) in enumerate(entries):
        if key in layout:
            value = layout[key]
        else:
            value = state.values.get(_name(key), 0)
        offset = index * 8
        header[offset:offset + 4] = key.encode("ascii")
        header[offset + 4:offset + 8] = (value & _MASKS[width]).to_bytes(4, "little")

    header[HI_OFFSET:HI_OFFSET + HI_SIZE] = bytes(state.hi[:HI_SIZE]).ljust(HI_SIZE, b"\0")
    header[PAL_OFFSET:PAL_OFFSET + PAL_SIZE] = bytes(state.pal[:PAL_SIZE]).ljust(PAL_SIZE, b"\0")
    header[OAM_OFFSET:OAM_OFFSET + OAM_SIZE] = bytes(state.oam[:OAM_SIZE]).ljust(OAM_SIZE, b"\0")
    header[WAVE_OFFSET:WAVE_OFFSET + WAVE_SIZE] = bytes(state.wave[:WAVE_SIZE]).ljust(
        WAVE_SIZE, b"\0"
    )

    stream.seek(0)
    stream.write(bytes(header))
    for block, count, source in (
        (layout["iram"], iram_blocks, state.ibank),
        (layout["vram"], vram_blocks, state.vbank),
        (layout["sram"], sram_blocks, state.sbank),
    ):
        size = count * BLOCK
        stream.seek(block * BLOCK)
        stream.write(bytes(source[:size]).ljust(size, b"\0"))