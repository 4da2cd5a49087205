"""Unit tests for schedule entries and the schedule set.

Tests verify:
- Insertion rules (shape, past start, overlap in every configuration)
- Sorted, non-overlapping order after insertions
- Truncation and past/future split used by migration
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import numpy as np

from xstake.engine.errors import InvalidSchedule
from xstake.engine.schedule import ScheduleEntry, ScheduleSet


def make_set():
    return ScheduleSet.from_tuples([(100, 200, 1_000_000), (200, 300, 10_000_000)])


class TestScheduleEntry:
    """Tests for a single emission interval."""

    def test_emitted_between_full_and_partial(self):
        entry = ScheduleEntry(100, 200, 10_000_000)
        assert entry.emitted_between(0, 1000) == 10_000_000
        assert entry.emitted_between(100, 150) == 5_000_000
        assert entry.emitted_between(190, 250) == 1_000_000

    def test_emitted_between_outside_window(self):
        entry = ScheduleEntry(100, 200, 10)
        assert entry.emitted_between(0, 100) == 0
        assert entry.emitted_between(200, 300) == 0

    def test_emitted_between_floors(self):
        entry = ScheduleEntry(0, 3, 10)
        assert entry.emitted_between(0, 1) == 3
        assert entry.emitted_between(0, 2) == 6

    def test_overlap_is_half_open(self):
        """Contiguous intervals do not overlap."""
        assert not ScheduleEntry(0, 100, 1).overlaps(ScheduleEntry(100, 200, 1))
        assert ScheduleEntry(0, 101, 1).overlaps(ScheduleEntry(100, 200, 1))


class TestScheduleInsert:
    """Tests for ScheduleSet.insert validation."""

    def test_rejects_inverted_interval(self):
        schedule = make_set()
        with pytest.raises(InvalidSchedule, match="end must be greater than begin"):
            schedule.insert(ScheduleEntry(1000, 900, 1), current_time=0)

    def test_rejects_empty_interval(self):
        schedule = make_set()
        with pytest.raises(InvalidSchedule, match="end must be greater than begin"):
            schedule.insert(ScheduleEntry(1000, 1000, 1), current_time=0)

    def test_rejects_zero_amount(self):
        schedule = make_set()
        with pytest.raises(InvalidSchedule, match="reward must be greater than zero"):
            schedule.insert(ScheduleEntry(1000, 2000, 0), current_time=0)

    def test_rejects_started_schedule(self):
        schedule = make_set()
        with pytest.raises(InvalidSchedule, match="already passed"):
            schedule.insert(ScheduleEntry(500, 600, 1), current_time=500)
        with pytest.raises(InvalidSchedule, match="already passed"):
            schedule.insert(ScheduleEntry(400, 600, 1), current_time=500)

    def test_rejects_every_overlap_configuration(self):
        """Contained, containing, left, right and exact overlaps are rejected."""
        candidates = [
            (120, 180),  # contained
            (50, 350),   # containing both
            (50, 150),   # overlaps from the left
            (250, 400),  # overlaps from the right
            (100, 200),  # exact match
            (199, 201),  # straddles the boundary
        ]
        for start, end in candidates:
            schedule = make_set()
            with pytest.raises(InvalidSchedule, match="overtakes an existing"):
                schedule.insert(ScheduleEntry(start, end, 1), current_time=10)
            assert schedule.to_tuples() == [(100, 200, 1_000_000), (200, 300, 10_000_000)]

    def test_contiguous_insert_is_not_merged(self):
        schedule = make_set()
        schedule.insert(ScheduleEntry(300, 400, 5), current_time=10)
        assert schedule.to_tuples()[-1] == (300, 400, 5)
        assert len(schedule) == 3

    def test_insert_keeps_sorted_order(self):
        schedule = make_set()
        schedule.insert(ScheduleEntry(50, 100, 7), current_time=10)
        schedule.insert(ScheduleEntry(500, 600, 9), current_time=10)
        schedule.insert(ScheduleEntry(350, 400, 8), current_time=10)
        starts = [entry.start for entry in schedule]
        assert starts == sorted(starts)
        assert schedule.total_amount() == 11_000_000 + 7 + 8 + 9

    def test_random_insertions_never_overlap(self):
        """Whatever is accepted, the set stays sorted and disjoint."""
        rng = np.random.default_rng(7)
        schedule = ScheduleSet()
        for _ in range(300):
            start = int(rng.integers(1, 5000))
            end = start + int(rng.integers(1, 300))
            try:
                schedule.insert(ScheduleEntry(start, end, int(rng.integers(1, 1000))), current_time=0)
            except InvalidSchedule:
                pass
        entries = schedule.entries
        assert len(entries) > 1
        for prev, curr in zip(entries, entries[1:]):
            assert prev.start < curr.start
            assert prev.end <= curr.start


class TestScheduleFromEntries:
    """Tests for building the initial schedule."""

    def test_past_entries_allowed_and_sorted(self):
        schedule = ScheduleSet.from_tuples([(200, 300, 2), (0, 100, 1)])
        assert schedule.to_tuples() == [(0, 100, 1), (200, 300, 2)]
        assert schedule.last_end() == 300

    def test_overlapping_initial_schedule_rejected(self):
        with pytest.raises(InvalidSchedule):
            ScheduleSet.from_tuples([(0, 100, 1), (50, 150, 1)])

    def test_malformed_initial_entry_rejected(self):
        with pytest.raises(InvalidSchedule):
            ScheduleSet.from_tuples([(0, 100, 0)])


class TestTruncateAndSplit:
    """Tests for the past/future split at a cutoff."""

    def test_split_midway_through_second_entry(self):
        schedule = ScheduleSet.from_tuples([(0, 100, 1_000_000), (100, 200, 10_000_000)])
        distributed, remaining = schedule.truncate_and_split(150)
        assert distributed == 6_000_000
        assert remaining == 5_000_000
        assert schedule.to_tuples() == [(0, 100, 1_000_000), (100, 150, 5_000_000)]

    def test_future_entries_removed(self):
        schedule = ScheduleSet.from_tuples([(0, 100, 1), (100, 200, 2), (300, 400, 4)])
        distributed, remaining = schedule.truncate_and_split(100)
        assert (distributed, remaining) == (1, 6)
        assert schedule.to_tuples() == [(0, 100, 1)]

    def test_split_floors_truncated_amount(self):
        schedule = ScheduleSet.from_tuples([(0, 3, 10)])
        distributed, remaining = schedule.truncate_and_split(1)
        assert (distributed, remaining) == (3, 7)
        assert schedule.to_tuples() == [(0, 1, 3)]

    def test_zero_truncated_amount_drops_entry(self):
        schedule = ScheduleSet.from_tuples([(0, 100, 1)])
        distributed, remaining = schedule.truncate_and_split(1)
        assert (distributed, remaining) == (0, 1)
        assert len(schedule) == 0

    def test_split_conserves_total(self):
        rng = np.random.default_rng(11)
        for _ in range(50):
            entries = []
            start = 0
            for _ in range(5):
                start += int(rng.integers(0, 20))
                end = start + int(rng.integers(1, 100))
                entries.append((start, end, int(rng.integers(1, 10**9))))
                start = end
            schedule = ScheduleSet.from_tuples(entries)
            total = schedule.total_amount()
            distributed, remaining = schedule.truncate_and_split(int(rng.integers(0, start + 10)))
            assert distributed + remaining == total
            assert schedule.total_amount() == distributed
