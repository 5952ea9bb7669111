import io

from dotmatrix.savestate import (
    BLOCK,
    VALUE_NAMES,
    VERSION,
    MachineState,
    load_state,
    save_state,
)
from dotmatrix.sound import NR50, WAVE_START


def _pattern(size, seed):
    return bytearray((index * 7 + seed) & 0xFF for index in range(size))


def _filled_state(cgb=False, ram_banks=1):
    state = MachineState(ram_banks=ram_banks)
    for index, name in enumerate(VALUE_NAMES):
        state.values[name] = (index * 3 + 1) & 0xFF
    state.values["cgb"] = int(cgb)
    state.hi[:] = _pattern(len(state.hi), 1)
    state.pal[:] = _pattern(len(state.pal), 2)
    state.oam[:] = _pattern(len(state.oam), 3)
    state.wave[:] = _pattern(len(state.wave), 4)
    state.ibank[:] = _pattern(len(state.ibank), 5)
    state.vbank[:] = _pattern(len(state.vbank), 6)
    state.sbank[:] = _pattern(len(state.sbank), 8)
    return state


def _header(*entries):
    data = b"".join(key + value.to_bytes(4, "little") for key, value in entries)
    return io.BytesIO(data.ljust(BLOCK, b"\0"))


def test_header_starts_with_signature_and_version():
    stream = io.BytesIO()
    save_state(stream, MachineState())
    data = stream.getvalue()
    assert data[:4] == b"GbSs"
    assert int.from_bytes(data[4:8], "little") == VERSION


def test_round_trip_monochrome():
    original = _filled_state(cgb=False)
    stream = io.BytesIO()
    save_state(stream, original)
    restored = MachineState(ram_banks=1)
    load_state(stream, restored)
    assert restored.values == original.values
    assert restored.hi == original.hi
    assert restored.pal == original.pal
    assert restored.oam == original.oam
    assert restored.wave == original.wave
    assert restored.ibank[: 2 * BLOCK] == original.ibank[: 2 * BLOCK]
    assert restored.vbank[: 2 * BLOCK] == original.vbank[: 2 * BLOCK]
    assert restored.sbank == original.sbank


def test_round_trip_colour_uses_all_banks():
    original = _filled_state(cgb=True, ram_banks=2)
    stream = io.BytesIO()
    save_state(stream, original)
    restored = MachineState(ram_banks=2)
    restored.values["cgb"] = 1
    load_state(stream, restored)
    assert restored.ibank == original.ibank
    assert restored.vbank == original.vbank
    assert restored.sbank == original.sbank
    assert restored.cgb


def test_internal_ram_follows_header_block():
    state = _filled_state()
    stream = io.BytesIO()
    save_state(stream, state)
    data = stream.getvalue()
    assert data[BLOCK:3 * BLOCK] == bytes(state.ibank[: 2 * BLOCK])


def test_values_are_truncated_to_their_width():
    state = MachineState()
    load_state(_header((b"ints", 0x1FF), (b"PC  ", 0x12345)), state)
    assert state.values["ints"] == 0xFF
    assert state.values["PC"] == 0x2345


def test_legacy_register_entry_lands_in_high_memory():
    state = MachineState()
    load_state(_header((b"NR50", 0x5A)), state)
    assert state.hi[NR50] == 0x5A


def test_missing_wave_offset_copies_wave_from_high_memory():
    state = MachineState()
    state.hi[WAVE_START:WAVE_START + 16] = bytes(range(16))
    load_state(_header((b"PC  ", 1)), state)
    assert state.wave == bytearray(range(16))


def test_unknown_keys_are_ignored():
    state = MachineState()
    before = dict(state.values)
    load_state(_header((b"zzzz", 77)), state)
    assert state.values == before