import math

import pytest

from feldspar.sdf import FixedPrecision, Sd8, fixed_precision_type

F8 = fixed_precision_type("F8", 8, 1.0)
F16 = fixed_precision_type("F16", 16, 2.0)


def test_f8():
    assert F8.MIN.to_float() == -1.0
    assert F8.ZERO.to_float() == 0.0
    assert F8.MAX.to_float() == 1.0

    assert F8.from_float(-1.0) == F8.MIN
    assert F8.from_float(0.0) == F8.ZERO
    assert F8.from_float(1.0) == F8.MAX


def test_f16():
    assert F16.MIN.to_float() == -2.0
    assert F16.ZERO.to_float() == 0.0
    assert F16.MAX.to_float() == 2.0

    assert F16.from_float(-2.0) == F16(-32768)

    assert F16.from_float(0.0) == F16.ZERO
    assert F16.from_float(2.0) == F16.MAX


def test_sd8_limits_match_f8():
    assert Sd8.MAX.value == F8.MAX.value
    assert Sd8.MIN.value == F8.MIN.value
    assert float(Sd8.MAX) == 1.0
    assert float(Sd8.MIN) == -1.0


def test_out_of_range_inputs_are_clamped():
    assert Sd8.from_float(5.0) == Sd8.MAX
    assert Sd8.from_float(-5.0) == Sd8.MIN
    assert Sd8.from_float(math.inf) == Sd8.MAX
    assert Sd8.from_float(-math.inf) == Sd8.MIN


def test_nan_maps_to_max():
    assert Sd8.from_float(math.nan) == Sd8.MAX


def test_value_outside_storage_is_rejected():
    with pytest.raises(ValueError):
        Sd8(128)
    with pytest.raises(ValueError):
        Sd8(-129)


def test_non_integer_value_is_rejected():
    with pytest.raises(TypeError):
        Sd8(0.5)


def test_base_type_cannot_be_instantiated():
    with pytest.raises(TypeError):
        FixedPrecision(0)


def test_invalid_type_parameters():
    with pytest.raises(ValueError):
        fixed_precision_type("Bad", 1, 1.0)
    with pytest.raises(ValueError):
        fixed_precision_type("Bad", 8, 0.0)