"""
Tests for the incremental state primitives.

Validates that:
1. RingBuffer evicts the oldest value once full and corrects the newest in place
2. MonotonicDeque matches a brute-force sliding min/max, including corrections
3. Lookback exposes the state a new tick or a correction builds on
"""

from decimal import Decimal

import numpy as np
import pytest

from streamind.structures import Lookback, MonotonicDeque, RingBuffer
from streamind.utils.numeric import DecimalBackend


# =============================================================================
# RingBuffer
# =============================================================================

class TestRingBuffer:
    """Test fixed-capacity window behaviour."""

    def test_push_until_full(self):
        """Buffer reports full only after `size` pushes."""
        buf = RingBuffer(3)
        assert buf.push(1.0) is None
        assert buf.push(2.0) is None
        assert not buf.is_full()
        assert buf.push(3.0) is None
        assert buf.is_full()
        assert len(buf) == 3

    def test_push_evicts_oldest(self):
        """Once full, each push returns the evicted oldest value."""
        buf = RingBuffer(3)
        for value in (1.0, 2.0, 3.0):
            buf.push(value)
        assert buf.push(4.0) == 1.0
        assert buf.push(5.0) == 2.0
        assert list(buf) == [3.0, 4.0, 5.0]
        assert len(buf) == 3

    def test_indexing_oldest_to_newest(self):
        buf = RingBuffer(3)
        for value in (1.0, 2.0, 3.0, 4.0):
            buf.push(value)
        assert buf[0] == 2.0
        assert buf[2] == 4.0
        assert buf[-1] == 4.0
        assert buf.newest == 4.0
        with pytest.raises(IndexError):
            buf[3]

    def test_replace_last_overwrites_newest(self):
        """replace_last changes only the newest value and keeps evictions."""
        buf = RingBuffer(2)
        for value in (1.0, 2.0, 3.0):
            buf.push(value)
        assert buf.replace_last(9.0) == 3.0
        assert list(buf) == [2.0, 9.0]
        assert len(buf) == 2

    def test_replace_last_on_empty_raises(self):
        with pytest.raises(IndexError, match="empty"):
            RingBuffer(2).replace_last(1.0)

    def test_aggregates(self):
        buf = RingBuffer(4)
        for value in (2.0, 4.0, 4.0, 6.0):
            buf.push(value)
        assert buf.min() == 2.0
        assert buf.max() == 6.0
        assert buf.mean() == pytest.approx(4.0)
        assert buf.standard_deviation() == pytest.approx(np.std([2.0, 4.0, 4.0, 6.0]))
        assert buf.mean_absolute_deviation() == pytest.approx(1.0)

    def test_aggregates_on_empty_return_none(self):
        buf = RingBuffer(3)
        assert buf.min() is None
        assert buf.max() is None
        assert buf.mean() is None
        assert buf.standard_deviation() is None
        assert buf.newest is None

    def test_decimal_aggregates(self):
        num = DecimalBackend()
        buf = RingBuffer(2)
        buf.push(Decimal("1.5"))
        buf.push(Decimal("2.5"))
        assert buf.mean(num=num) == Decimal("2")
        assert buf.mean_absolute_deviation(num=num) == Decimal("0.5")

    def test_to_array(self):
        buf = RingBuffer(3)
        for value in (1.0, 2.0, 3.0, 4.0):
            buf.push(value)
        arr = buf.to_array()
        assert arr.dtype == np.float64
        np.testing.assert_array_equal(arr, [2.0, 3.0, 4.0])

    def test_clear(self):
        buf = RingBuffer(2)
        buf.push(1.0)
        buf.clear()
        assert len(buf) == 0
        assert list(buf) == []

    @pytest.mark.parametrize("size", [0, -1, 1.5])
    def test_invalid_size_raises(self, size):
        with pytest.raises(ValueError, match="Fix:"):
            RingBuffer(size)


# =============================================================================
# MonotonicDeque
# =============================================================================

class TestMonotonicDeque:
    """Test sliding-window min/max with corrections."""

    def test_sliding_min_matches_brute_force(self, random_walk):
        window = 5
        dq = MonotonicDeque(window, "min")
        for idx, value in enumerate(random_walk):
            dq.push(idx, value)
            expected = min(random_walk[max(0, idx - window + 1):idx + 1])
            assert dq.get() == expected

    def test_sliding_max_matches_brute_force(self, random_walk):
        window = 7
        dq = MonotonicDeque(window, "max")
        for idx, value in enumerate(random_walk):
            dq.push(idx, value)
            expected = max(random_walk[max(0, idx - window + 1):idx + 1])
            assert dq.get() == expected

    def test_replace_last_matches_direct_push(self, random_walk):
        """Pushing garbage then correcting yields the same deque as a direct push."""
        window = 4
        direct = MonotonicDeque(window, "min")
        corrected = MonotonicDeque(window, "min")
        for idx, value in enumerate(random_walk[:60]):
            direct.push(idx, value)
            corrected.push(idx, value - 50.0)
            corrected.replace_last(value + 50.0)
            corrected.replace_last(value)
            assert corrected == direct
            assert corrected.get() == direct.get()

    def test_replace_restores_evicted_front(self):
        """A correction of the tick that evicted the old minimum restores it first."""
        dq = MonotonicDeque(2, "min")
        dq.push(0, 1.0)
        dq.push(1, 5.0)
        dq.push(2, 7.0)  # evicts index 0
        assert dq.get() == 5.0
        dq.replace_last(3.0)
        assert dq.get() == 3.0
        assert len(dq) == 1

    def test_replace_before_push_raises(self):
        with pytest.raises(ValueError, match="before any push"):
            MonotonicDeque(3, "max").replace_last(1.0)

    def test_get_or_raise_on_empty(self):
        dq = MonotonicDeque(3, "min")
        assert dq.get() is None
        with pytest.raises(ValueError, match="empty"):
            dq.get_or_raise()

    def test_invalid_mode_raises(self):
        with pytest.raises(ValueError, match="mode"):
            MonotonicDeque(3, "median")


# =============================================================================
# Lookback
# =============================================================================

class TestLookback:
    """Test named-slot history used by the replace protocol."""

    def test_slots_shift_on_push(self):
        hist = Lookback(depth=2)
        for value in (1, 2, 3, 4):
            hist.push(value)
        assert (hist.two_previous, hist.previous, hist.current) == (2, 3, 4)
        assert len(hist) == 3

    def test_prior_for_new_tick_and_correction(self):
        hist = Lookback(depth=2)
        for value in (1, 2, 3):
            hist.push(value)
        assert hist.prior(replace=False) == 3
        assert hist.prior(replace=False, steps=2) == 2
        assert hist.prior(replace=True) == 2
        assert hist.prior(replace=True, steps=2) == 1

    def test_consecutive_replaces_keep_prior(self):
        hist = Lookback(depth=1)
        hist.push(10)
        hist.push(11)
        for correction in (12, 13, 14):
            assert hist.prior(replace=True) == 10
            hist.push(correction, replace=True)
        assert (hist.previous, hist.current) == (10, 14)

    def test_replace_on_empty_acts_as_push(self):
        hist = Lookback()
        assert hist.prior(replace=True) is None
        hist.push(5, replace=True)
        assert hist.current == 5
        assert hist.previous is None

    def test_depth_one_has_no_two_previous(self):
        hist = Lookback(depth=1)
        for value in (1, 2, 3):
            hist.push(value)
        assert hist.two_previous is None
        assert hist.previous == 2

    @pytest.mark.parametrize("depth", [0, 3])
    def test_invalid_depth_raises(self, depth):
        with pytest.raises(ValueError, match="Fix:"):
            Lookback(depth=depth)

    def test_steps_beyond_depth_raises(self):
        with pytest.raises(ValueError):
            Lookback(depth=1).prior(replace=False, steps=2)
