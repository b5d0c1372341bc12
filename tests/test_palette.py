import pytest

from feldspar.palette import Palette8


def test_get_returns_value_at_id():
    palette = Palette8(["stone", "dirt", "grass"])
    assert palette[0] == "stone"
    assert palette[2] == "grass"
    assert len(palette) == 3


def test_set_then_get_round_trip():
    palette = Palette8(["stone", "dirt"])
    palette[1] = "sand"
    assert palette[1] == "sand"
    assert list(palette) == ["stone", "sand"]


def test_full_palette_is_allowed():
    palette = Palette8(range(256))
    assert len(palette) == 256
    assert palette[255] == 255


def test_too_many_values_rejected():
    with pytest.raises(ValueError):
        Palette8(range(257))


@pytest.mark.parametrize("bad_id", [-1, 256])
def test_id_outside_eight_bits_raises(bad_id):
    palette = Palette8(range(256))
    with pytest.raises(IndexError):
        palette[bad_id]
    assert len(palette) == 256
    assert palette[0] == 0


def test_missing_entry_raises():
    palette = Palette8(["only"])
    with pytest.raises(IndexError):
        palette[1]
    with pytest.raises(IndexError):
        palette[3] = "x"
    assert len(palette) == 1
    assert list(palette) == ["only"]


def test_non_integer_id_raises():
    palette = Palette8(["only"])
    with pytest.raises(TypeError):
        palette["0"]
    assert palette[0] == "only"