import pytest

from dotmatrix.rcvars import (
    RcRegistry,
    RcType,
    RcVar,
    Stopwatch,
    init_paths,
    parse_int,
    sanitize_path,
)


@pytest.mark.parametrize("n", [0, 1, 7, 31, 255, 4096, 123456])
def test_parse_int_round_trips(n):
    assert parse_int(str(n)) == n
    assert parse_int(hex(n)) == n
    assert parse_int("0X" + format(n, "X")) == n
    assert parse_int("0" + format(n, "o")) == n


@pytest.mark.parametrize("n", [1, 42, 99999])
def test_parse_int_negative(n):
    assert parse_int(str(-n)) == -n


def test_parse_int_stops_at_invalid_character():
    assert parse_int("12abc") == parse_int("12")
    assert parse_int("0x1fz") == parse_int("0x1f")
    assert parse_int("0178") == parse_int("017")


def test_parse_int_without_digits():
    assert parse_int("") == 0
    assert parse_int("abc") == 0
    assert parse_int("09") == parse_int("0")


def make_registry():
    registry = RcRegistry()
    registry.export_all(
        [
            RcVar("scale", RcType.INT),
            RcVar("title", RcType.STRING),
            RcVar("vmode", RcType.VECTOR, [0, 0, 32], length=3),
            RcVar("sound", RcType.BOOL),
        ]
    )
    return registry


def test_int_set_and_get():
    registry = make_registry()
    registry.set("scale", ["0x10"])
    assert registry.get_int("scale") == parse_int("0x10")
    registry.set("scale", ["42"])
    assert registry.get_int("scale") == 42
    assert registry.get_vector("scale") == [42]


def test_int_needs_value():
    registry = make_registry()
    with pytest.raises(ValueError):
        registry.set("scale", [])


def test_unknown_variable():
    registry = make_registry()
    with pytest.raises(KeyError):
        registry.set("nosuch", ["1"])
    assert registry.get_int("nosuch") == 0
    assert registry.get_str("nosuch") is None
    assert registry.get_vector("nosuch") is None


def test_string_variable():
    registry = make_registry()
    assert registry.get_str("title") is None
    registry.set("title", ["hello", "ignored"])
    assert registry.get_str("title") == "hello"
    assert registry.get_int("title") == 0
    assert registry.get_vector("title") is None


def test_vector_is_clamped_and_partial():
    registry = make_registry()
    registry.set("vmode", ["1", "2", "3", "4"])
    assert registry.get_vector("vmode") == [1, 2, 3]
    registry.set("vmode", ["7"])
    assert registry.get_vector("vmode") == [7, 2, 3]


@pytest.mark.parametrize("text", ["yes", "true", "T", "1", "2", " 5", ""])
def test_bool_true(text):
    registry = make_registry()
    registry.set("sound", [text])
    assert registry.get_int("sound") == 1


@pytest.mark.parametrize("text", ["no", "false", "0", "F", "N"])
def test_bool_false(text):
    registry = make_registry()
    registry.set("sound", ["yes"])
    registry.set("sound", [text])
    assert registry.get_int("sound") == 0


def test_bool_without_values_is_true():
    registry = make_registry()
    registry.set("sound", [])
    assert registry.get_int("sound") == 1


def test_bool_rejects_garbage():
    registry = make_registry()
    with pytest.raises(ValueError):
        registry.set("sound", ["maybe"])


def test_export_order_and_none():
    registry = RcRegistry()
    first = RcVar("x", RcType.INT, 1)
    registry.export(first)
    registry.export(None)
    registry.export(RcVar("x", RcType.INT, 2))
    assert len(registry) == 2
    assert registry.find("x") is first
    assert "x" in registry
    assert "y" not in registry


def test_init_paths_defaults_and_keeps():
    registry = RcRegistry()
    registry.export(RcVar("rcpath", RcType.STRING))
    registry.export(RcVar("savedir", RcType.STRING, "saves"))
    init_paths(registry)
    assert registry.get_str("rcpath") == "."
    assert registry.get_str("savedir") == "saves"


def test_init_paths_skips_missing():
    registry = RcRegistry()
    init_paths(registry)
    assert len(registry) == 0


def test_sanitize_path():
    assert sanitize_path("a\\b\\c.gb") == "a/b/c.gb"
    assert sanitize_path("a/b") == "a/b"


def test_stopwatch_measures_deltas():
    readings = iter([100, 350, 1350])
    watch = Stopwatch(clock=lambda: next(readings))
    assert watch.elapsed() == 350 - 100
    assert watch.elapsed() == 1350 - 350