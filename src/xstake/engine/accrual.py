"""Reward accrual - Integrate the emission schedule into the global reward index.

Key Concepts:
- global_reward_index accumulates reward units per bonded unit
- delta = emitted(last_distributed, target) / total_bond_amount
- Emission while nothing is bonded is forfeit (never credited to the index)
"""

import logging
from dataclasses import dataclass, field

from .errors import Unauthorized
from .fixed_point import FixedPoint, checked_add
from .schedule import ScheduleSet

logger = logging.getLogger(__name__)


@dataclass
class GlobalState:
    """Global accrual state shared by all stakers."""
    last_distributed: int  # Height up to which the schedule is integrated
    owner: str
    total_bond_amount: int = 0
    global_reward_index: FixedPoint = field(default_factory=FixedPoint.zero)

    def assert_owner(self, caller: str):
        """Raise Unauthorized unless caller is the registered owner."""
        if caller != self.owner:
            raise Unauthorized()


class RewardAccrualEngine:
    """Advances GlobalState along the distribution schedule."""

    @staticmethod
    def emitted_between(schedule: ScheduleSet, begin: int, end: int) -> int:
        """
        Total reward the schedule emits during [begin, end).

        Each entry contributes amount * overlap / duration, floor-rounded
        per entry.
        """
        emitted = 0
        if end <= begin:
            return emitted
        for entry in schedule:
            if entry.start >= end or entry.end <= begin:
                continue
            emitted = checked_add(emitted, entry.emitted_between(begin, end))
        return emitted

    def advance(self, state: GlobalState, schedule: ScheduleSet, target_time: int) -> FixedPoint:
        """
        Bring the global reward index up to target_time.

        Args:
            state: Global state, mutated in place
            schedule: Distribution schedule
            target_time: Height to integrate up to

        Returns:
            Index delta applied by this call (zero when nothing moved)
        """
        if target_time <= state.last_distributed:
            return FixedPoint.zero()

        emitted = self.emitted_between(schedule, state.last_distributed, target_time)

        if state.total_bond_amount > 0:
            delta = FixedPoint.from_ratio(emitted, state.total_bond_amount)
        else:
            delta = FixedPoint.zero()
            if emitted > 0:
                logger.debug(
                    f"Forfeited {emitted} emitted between {state.last_distributed} "
                    f"and {target_time}: nothing bonded"
                )

        state.global_reward_index = state.global_reward_index + delta
        logger.debug(
            f"Advanced {state.last_distributed} -> {target_time}: emitted={emitted}, "
            f"index={state.global_reward_index}"
        )
        state.last_distributed = target_time
        return delta
