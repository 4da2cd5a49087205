"""Schedule set - Ordered, non-overlapping reward emission intervals.

Key Concepts:
- An entry emits `amount` uniformly across [start, end)
- Emission over a window: amount * overlap / duration (floor)
- Entries never intersect; the set is kept sorted by start
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple

from .errors import InvalidSchedule
from .fixed_point import check_amount, checked_add, checked_sub, mul_div_floor


@dataclass(frozen=True)
class ScheduleEntry:
    """A linear emission of `amount` reward tokens over [start, end)."""
    start: int
    end: int
    amount: int

    @classmethod
    def from_tuple(cls, item: Tuple[int, int, int]) -> 'ScheduleEntry':
        start, end, amount = item
        return cls(start=start, end=end, amount=amount)

    def to_tuple(self) -> Tuple[int, int, int]:
        return (self.start, self.end, self.amount)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def validate(self):
        """
        Check the entry's shape.

        Raises:
            InvalidSchedule: If end <= start or amount is zero
        """
        if self.end <= self.start:
            raise InvalidSchedule("end must be greater than begin")
        check_amount(self.amount)
        if self.amount == 0:
            raise InvalidSchedule("reward must be greater than zero")

    def overlaps(self, other: 'ScheduleEntry') -> bool:
        return self.start < other.end and self.end > other.start

    def emitted_between(self, begin: int, end: int) -> int:
        """
        Reward emitted by this entry during [begin, end).

        Args:
            begin: Window start
            end: Window end

        Returns:
            amount * overlap / duration, floor-rounded
        """
        overlap = min(self.end, end) - max(self.start, begin)
        if overlap <= 0:
            return 0
        return mul_div_floor(self.amount, overlap, self.duration)


@dataclass
class ScheduleSet:
    """Sorted collection of non-overlapping schedule entries."""
    entries: List[ScheduleEntry] = field(default_factory=list)

    @classmethod
    def from_entries(cls, entries: Iterable[ScheduleEntry]) -> 'ScheduleSet':
        """
        Build the initial schedule.

        Entries may lie in the past; only shape and mutual overlap are checked.
        """
        ordered = sorted(entries, key=lambda e: e.start)
        for i, entry in enumerate(ordered):
            entry.validate()
            if i > 0 and ordered[i - 1].overlaps(entry):
                raise InvalidSchedule(
                    "schedule period overtakes an existing upcoming schedule period"
                )
        return cls(entries=ordered)

    @classmethod
    def from_tuples(cls, items: Iterable[Tuple[int, int, int]]) -> 'ScheduleSet':
        return cls.from_entries(ScheduleEntry.from_tuple(item) for item in items)

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_tuples(self) -> List[Tuple[int, int, int]]:
        return [entry.to_tuple() for entry in self.entries]

    def total_amount(self) -> int:
        total = 0
        for entry in self.entries:
            total = checked_add(total, entry.amount)
        return total

    def last_end(self) -> int:
        """End of the latest entry, or 0 for an empty set."""
        return max((entry.end for entry in self.entries), default=0)

    def insert(self, new_entry: ScheduleEntry, current_time: int):
        """
        Insert a future emission interval.

        Args:
            new_entry: Entry to add
            current_time: Current height; the entry must start after it

        Raises:
            InvalidSchedule: If the entry is malformed, already started,
                or intersects an existing entry
        """
        new_entry.validate()
        if new_entry.start <= current_time:
            raise InvalidSchedule("cannot add a schedule that was already passed")
        for entry in self.entries:
            if new_entry.overlaps(entry):
                raise InvalidSchedule(
                    "schedule period overtakes an existing upcoming schedule period"
                )

        position = len(self.entries)
        for i, entry in enumerate(self.entries):
            if new_entry.start < entry.start:
                position = i
                break
        self.entries.insert(position, new_entry)

    def truncate_and_split(self, cutoff_time: int) -> Tuple[int, int]:
        """
        Split every entry at the cutoff, dropping what lies after it.

        Past entries are kept whole, future entries are removed and
        straddling entries are cut to [start, cutoff_time).

        Args:
            cutoff_time: Split height

        Returns:
            (distributed, remaining) summed across all entries
        """
        distributed = 0
        remaining = 0
        kept: List[ScheduleEntry] = []

        for entry in self.entries:
            if entry.end <= cutoff_time:
                kept.append(entry)
                distributed = checked_add(distributed, entry.amount)
            elif entry.start >= cutoff_time:
                remaining = checked_add(remaining, entry.amount)
            else:
                truncated = entry.emitted_between(entry.start, cutoff_time)
                # entries keep amount > 0
                if truncated > 0:
                    kept.append(ScheduleEntry(entry.start, cutoff_time, truncated))
                distributed = checked_add(distributed, truncated)
                remaining = checked_add(remaining, checked_sub(entry.amount, truncated))

        self.entries = kept
        return distributed, remaining
