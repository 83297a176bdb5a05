import pytest

from circuitsim.utils.consts import ConstUtils, period_from_freq


def test_impedance_constants_are_ordered():
    assert ConstUtils.CERO_DOUB == pytest.approx(1.0 / ConstUtils.HIGH_IMP)
    assert ConstUtils.HIGH_IMP < ConstUtils.OPEN_IMP


def test_period_from_freq_rounds_to_picoseconds():
    assert period_from_freq(1e6) == 1_000_000
    assert period_from_freq(9600) == 104_166_667
    assert period_from_freq(ConstUtils.PS_PER_SECOND) == 1


def test_period_from_freq_rejects_non_positive():
    with pytest.raises(ValueError):
        period_from_freq(0)
