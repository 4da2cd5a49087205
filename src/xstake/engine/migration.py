"""Migration planner - Hand the undistributed schedule to a new custodian."""

import logging
from dataclasses import dataclass
from typing import Optional

from .accrual import GlobalState, RewardAccrualEngine
from .errors import InvariantViolation
from .fixed_point import checked_add
from .messages import TransferMsg
from .schedule import ScheduleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of splitting the schedule at a cutoff height."""
    distributed: int
    remaining: int
    transfer: Optional[TransferMsg]


class MigrationPlanner:
    """Splits the schedule at a cutoff and forwards the future part."""

    def __init__(self, engine: Optional[RewardAccrualEngine] = None):
        self.engine = engine or RewardAccrualEngine()

    def migrate(
        self,
        state: GlobalState,
        schedule: ScheduleSet,
        new_custodian: str,
        at_time: int,
        reward_token: str
    ) -> MigrationResult:
        """
        Finalize accrual at at_time and split the schedule there.

        The cutoff never lies before last_distributed: reward already
        integrated into the index stays on the distributed side.

        The staking token reference is left as it is; only the reward
        schedule and the forwarded amount change.

        Args:
            state: Global state, advanced in place
            schedule: Distribution schedule, truncated in place
            new_custodian: Recipient of the undistributed reward
            at_time: Requested cutoff height
            reward_token: Token the schedule emits

        Returns:
            MigrationResult with the distributed/remaining split
        """
        total_before = schedule.total_amount()
        cutoff = max(at_time, state.last_distributed)
        self.engine.advance(state, schedule, cutoff)
        distributed, remaining = schedule.truncate_and_split(cutoff)

        if checked_add(distributed, remaining) != total_before:
            raise InvariantViolation(
                f"Conservation violation in schedule split: {distributed} + {remaining} != {total_before}"
            )

        transfer = None
        if remaining > 0:
            transfer = TransferMsg(token=reward_token, recipient=new_custodian, amount=remaining)

        logger.info(
            f"Migrated to {new_custodian} at {cutoff}: "
            f"distributed={distributed}, remaining={remaining}"
        )
        return MigrationResult(
            distributed=distributed,
            remaining=remaining,
            transfer=transfer,
        )
