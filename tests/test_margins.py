"""Tests for margin instances: validation, accessors and immutability."""

import numpy as np
import pytest

from Margins import FixedInstance, IntervalInstance, InvalidInstance


class TestFixedInstance:

    def test_dimensions_and_bounds(self):
        inst = FixedInstance([2, 1, 1], [1, 2, 1])
        assert (inst.M, inst.N) == (3, 3)
        assert inst.is_fixed
        lo, hi = inst.row_bounds()
        assert lo.tolist() == [2, 1, 1] and hi.tolist() == [2, 1, 1]
        lo, hi = inst.col_bounds()
        assert lo.tolist() == [1, 2, 1] and hi.tolist() == [1, 2, 1]

    def test_accepts_integral_floats(self):
        inst = FixedInstance([2.0, 1.0], [1.0, 1.0, 1.0])
        assert inst.r.dtype.kind == 'i'
        assert inst.r.tolist() == [2, 1]

    def test_total_mismatch_is_not_a_construction_error(self):
        inst = FixedInstance([2], [0, 0])
        assert inst.r.sum() != inst.c.sum()

    def test_empty_margins(self):
        inst = FixedInstance([], [])
        assert (inst.M, inst.N) == (0, 0)

    @pytest.mark.parametrize('r, c', [
        ([-1, 1], [0, 0]),
        ([3], [1, 1]),
        ([1, 1], [3]),
        ([1.5], [1, 1]),
        ([[1]], [1]),
        (['a'], [1]),
        ([np.nan], [1]),
    ])
    def test_invalid(self, r, c):
        with pytest.raises(InvalidInstance):
            FixedInstance(r, c)

    def test_read_only(self):
        inst = FixedInstance([1, 1], [1, 1])
        with pytest.raises(ValueError):
            inst.r[0] = 0

    def test_input_not_aliased(self):
        r = np.array([1, 1])
        inst = FixedInstance(r, [1, 1])
        r[0] = 0
        assert inst.r.tolist() == [1, 1]

    def test_admits(self):
        inst = FixedInstance([1, 1], [1, 1])
        assert inst.admits([[1, 0], [0, 1]])
        assert inst.admits(np.array([[0, 1], [1, 0]]))
        assert not inst.admits([[1, 1], [0, 0]])
        assert not inst.admits([[1, 0, 0], [0, 1, 0]])
        assert not inst.admits([[2, 0], [0, 0]])


class TestIntervalInstance:

    def test_dimensions_and_bounds(self):
        inst = IntervalInstance([0, 1], [2, 2], [1, 0, 0], [2, 1, 2])
        assert (inst.M, inst.N) == (2, 3)
        assert not inst.is_fixed
        lo, hi = inst.row_bounds()
        assert lo.tolist() == [0, 1] and hi.tolist() == [2, 2]
        lo, hi = inst.col_bounds()
        assert lo.tolist() == [1, 0, 0] and hi.tolist() == [2, 1, 2]

    @pytest.mark.parametrize('bounds', [
        ([2], [1], [0], [1]),
        ([0], [1], [1], [0]),
        ([0, 0], [1], [0], [1]),
        ([0], [1], [0, 0], [1]),
        ([-1], [1], [0], [1]),
        ([2], [2], [0], [0]),
        ([0], [1], [0], [2]),
    ])
    def test_invalid(self, bounds):
        with pytest.raises(InvalidInstance):
            IntervalInstance(*bounds)

    def test_admits(self):
        inst = IntervalInstance([0, 1], [1, 2], [1, 0], [2, 1])
        assert inst.admits([[0, 0], [1, 1]])
        assert inst.admits([[1, 0], [1, 0]])
        assert not inst.admits([[1, 1], [1, 1]])
        assert not inst.admits([[0, 0], [0, 0]])
