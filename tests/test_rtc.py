import io

import pytest

from dotmatrix.rtc import Rtc

FIELDS = ("carry", "stop", "d", "h", "m", "s", "t")


def snapshot(rtc):
    return tuple(getattr(rtc, name) for name in FIELDS)


def test_tick_rolls_seconds():
    rtc = Rtc(s=4, t=59)
    rtc.tick()
    assert (rtc.s, rtc.t) == (5, 0)


def test_tick_wraps_year():
    rtc = Rtc(d=364, h=23, m=59, s=59, t=59)
    rtc.tick()
    assert snapshot(rtc) == (1, 0, 0, 0, 0, 0, 0)


def test_stopped_clock_does_not_tick():
    rtc = Rtc(stop=1, t=10)
    rtc.tick()
    assert rtc.t == 10


def test_latch_on_rising_edge():
    rtc = Rtc(s=5, m=6, h=7, d=8, stop=1, carry=1)
    rtc.latch(0)
    rtc.latch(1)
    assert rtc.regs[:4] == [5, 6, 7, 8]
    assert rtc.regs[4] == 0xC0
    assert rtc.regs[5:] == [0xFF, 0xFF, 0xFF]


def test_latch_without_edge_keeps_registers():
    rtc = Rtc(s=5)
    rtc.latch(1)
    rtc.s = 9
    rtc.latch(1)
    assert rtc.regs[0] == 5
    rtc.latch(0)
    rtc.latch(1)
    assert rtc.regs[0] == 9


def test_write_ignored_when_not_selected():
    rtc = Rtc(sel=0)
    rtc.write(30)
    assert rtc.s == 0
    assert rtc.regs[0] == 0


def test_write_seconds_wraps():
    rtc = Rtc(sel=8)
    rtc.write(75)
    assert rtc.regs[0] == 75
    assert rtc.s == 15


def test_write_control_register():
    rtc = Rtc(sel=0xC)
    rtc.write(0xC1)
    assert rtc.regs[4] == 0xC1
    assert (rtc.stop, rtc.carry) == (1, 1)


def test_write_day_low():
    rtc = Rtc(sel=0xB)
    rtc.write(200)
    assert rtc.d == 200
    assert rtc.regs[3] == 200


def test_save_format():
    rtc = Rtc(carry=1, d=12, h=3, m=4, s=5, t=6)
    stream = io.StringIO()
    rtc.save(stream, now=1234)
    first, second = stream.getvalue().splitlines()
    assert [int(x) for x in first.split()] == [1, 0, 12, 3, 4, 5, 6]
    assert first.split()[3] == "03"
    assert second == "1234"


def test_save_load_round_trip():
    rtc = Rtc(carry=1, stop=0, d=100, h=20, m=30, s=40, t=50)
    stream = io.StringIO()
    rtc.save(stream, now=5000)
    stream.seek(0)
    other = Rtc()
    other.load(stream, now=5000)
    assert snapshot(other) == snapshot(rtc)


@pytest.mark.parametrize("gap", [1, 59, 3700])
def test_load_catches_up_like_ticking(gap):
    rtc = Rtc(d=364, h=23, m=58, s=30, t=10)
    stream = io.StringIO()
    rtc.save(stream, now=1000)
    stream.seek(0)
    loaded = Rtc()
    loaded.load(stream, now=1000 + gap)
    for _ in range(gap * 60):
        rtc.tick()
    assert snapshot(loaded) == snapshot(rtc)


def test_load_without_sync_does_not_advance():
    rtc = Rtc(h=1, m=2, s=3, t=4)
    stream = io.StringIO()
    rtc.save(stream, now=10)
    stream.seek(0)
    loaded = Rtc(sync=False)
    loaded.load(stream, now=100)
    assert snapshot(loaded) == snapshot(rtc)


def test_load_stopped_clock_does_not_advance():
    rtc = Rtc(stop=1, s=7)
    stream = io.StringIO()
    rtc.save(stream, now=10)
    stream.seek(0)
    loaded = Rtc()
    loaded.load(stream, now=1000)
    assert snapshot(loaded) == snapshot(rtc)


def test_load_normalises_values():
    rtc = Rtc()
    rtc.load(io.StringIO("3 3 400 30 70 70 70\n0\n"), now=0)
    assert rtc.carry in (0, 1) and rtc.stop in (0, 1)
    assert 0 <= rtc.d < 365
    assert 0 <= rtc.h < 24
    assert all(0 <= v < 60 for v in (rtc.m, rtc.s, rtc.t))