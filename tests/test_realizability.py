"""Tests for realizability checks and the constructive realizations."""

import itertools

import numpy as np
import pytest

from BinaryMatrix import (
    arbitrary_from_margins,
    conjugate,
    is_realizable,
    is_realizable_fixed,
    is_realizable_interval,
    realize,
    realize_interval,
)
from Margins import FixedInstance, IntervalInstance, Infeasible


def realized_margins(M, N):
    """Margin pairs of every (M x N) binary matrix."""
    seen = set()
    for bits in itertools.product([0, 1], repeat=M * N):
        A = np.array(bits).reshape((M, N))
        seen.add((tuple(A.sum(1).tolist()), tuple(A.sum(0).tolist())))
    return seen


class TestConjugate:

    def test_counts_entries_above_each_level(self):
        cc = conjugate([1, 1, 1, 1, 2, 8], 10)
        assert cc.tolist() == [6, 2, 1, 1, 1, 1, 1, 1, 0, 0]

    def test_partial_sums_are_capped_column_sums(self):
        c = np.array([3, 0, 2, 5, 1])
        cc = conjugate(c, 4)
        for k in range(1, 5):
            assert np.cumsum(cc)[k - 1] == np.minimum(c, k).sum()


class TestFixedRealizability:

    @pytest.mark.parametrize('r, c, expected', [
        ([1, 1], [1, 1], True),
        ([2, 2], [2, 2], True),
        ([2, 1, 1], [1, 2, 1], True),
        ([2], [0, 0], False),
        ([3, 1], [2, 2, 0], False),
        ([2, 2], [3, 1, 0], False),
        ([], [], True),
        ([], [0, 0], True),
        ([0, 0], [], True),
    ])
    def test_examples(self, r, c, expected):
        assert is_realizable_fixed(r, c) is expected

    @pytest.mark.parametrize('M, N', [(2, 3), (3, 3), (3, 2)])
    def test_agrees_with_enumeration(self, M, N):
        seen = realized_margins(M, N)
        for r in itertools.product(range(N + 1), repeat=M):
            for c in itertools.product(range(M + 1), repeat=N):
                assert is_realizable_fixed(r, c) == ((r, c) in seen)

    def test_repeatable(self):
        inst = FixedInstance([3, 2, 2, 1], [2, 2, 2, 1, 1])
        answers = {is_realizable(inst) for _ in range(5)}
        assert answers == {True}

    @pytest.mark.parametrize('M, N', [(3, 3), (3, 4)])
    def test_realization_has_margins(self, M, N):
        for bits in itertools.product([0, 1], repeat=M * N):
            A = np.array(bits).reshape((M, N))
            r, c = A.sum(1), A.sum(0)
            B = arbitrary_from_margins(r, c)
            assert B.sum(1).tolist() == r.tolist()
            assert B.sum(0).tolist() == c.tolist()

    def test_realization_of_infeasible_raises(self):
        with pytest.raises(Infeasible):
            arbitrary_from_margins([2], [0, 0])
        with pytest.raises(Infeasible):
            realize(FixedInstance([3, 1], [2, 2, 0]))

    def test_larger_realization(self, rng):
        A = rng.random((40, 30)) < 0.3
        r, c = A.sum(1), A.sum(0)
        B = realize(FixedInstance(r, c))
        assert B.dtype == np.int8
        assert B.sum(1).tolist() == r.tolist()
        assert B.sum(0).tolist() == c.tolist()


class TestIntervalRealizability:

    def test_single_cell_infeasible(self):
        assert not is_realizable(IntervalInstance([1], [1], [0], [0]))

    def test_all_zero_lower_bounds(self):
        inst = IntervalInstance([0, 0], [1, 2], [0, 0, 0], [1, 1, 1])
        assert is_realizable(inst)
        assert not realize(inst).any()

    def test_fixed_bounds_match_gale_ryser(self):
        for r, c in [([1, 1], [1, 1]), ([2, 2], [2, 2]), ([3, 1], [2, 2, 0]),
                     ([2, 1, 1], [1, 2, 1]), ([1, 1], [2, 1])]:
            if max(r) > len(c) or max(c) > len(r):
                continue
            inst = IntervalInstance(r, r, c, c)
            assert is_realizable(inst) == is_realizable_fixed(r, c)

    def test_agrees_with_enumeration(self, rng, brute_force):
        for trial in range(60):
            M, N = rng.integers(1, 4, size=2)
            r_lo = rng.integers(0, N + 1, size=M)
            r_hi = np.minimum(r_lo + rng.integers(0, 2, size=M), N)
            c_lo = rng.integers(0, M + 1, size=N)
            c_hi = np.minimum(c_lo + rng.integers(0, 2, size=N), M)
            inst = IntervalInstance(r_lo, r_hi, c_lo, c_hi)

            feasible = len(brute_force(inst)) > 0
            assert is_realizable(inst) == feasible
            if feasible:
                assert inst.admits(realize(inst))
            else:
                with pytest.raises(Infeasible):
                    realize(inst)

    def test_realization_respects_bounds(self, rng):
        A = rng.random((25, 20)) < 0.4
        r, c = A.sum(1), A.sum(0)
        inst = IntervalInstance(np.maximum(r - 2, 0), np.minimum(r + 1, 20),
                                c, np.minimum(c + 3, 25))
        B = realize(inst)
        assert B.shape == (25, 20)
        assert inst.admits(B)

    def test_realize_interval_raises(self):
        with pytest.raises(Infeasible):
            realize_interval([2], [2], [0], [0])

    def test_upper_bounds_beyond_dimension(self):
        big = 2 ** 40
        A = realize_interval([1, 0], [big, big], [0, 1, 0], [big] * 3)
        assert A.shape == (2, 3)
        assert A.sum(1)[0] >= 1 and A.sum(0)[1] >= 1
        assert is_realizable_interval([0], [big], [0], [big])
        assert is_realizable_interval([1, 1], [big, big], [2], [big])

    def test_lower_bounds_beyond_dimension(self):
        big = 2 ** 40
        assert not is_realizable_interval([big], [big], [0], [big])
        assert not is_realizable_interval([0], [1], [2], [2])
        with pytest.raises(Infeasible):
            realize_interval([0, 0], [1, 1], [big], [big])
