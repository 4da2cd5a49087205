"""Staker ledger - Per-staker bond and reward bookkeeping.

Every mutation follows the same order: advance the global state, reconcile
the staker against the new index, then change the bond or pending reward.
Work happens on copies that are written back only once all checks pass.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from .accrual import GlobalState, RewardAccrualEngine
from .errors import InsufficientBond
from .fixed_point import FixedPoint, check_amount, checked_add, checked_sub
from .messages import TransferMsg
from .schedule import ScheduleSet

logger = logging.getLogger(__name__)


@dataclass
class StakerRecord:
    """Bond and reward bookkeeping for one staker."""
    bond_amount: int = 0
    reward_index: FixedPoint = field(default_factory=FixedPoint.zero)
    pending_reward: int = 0


@dataclass(frozen=True)
class StakerInfo:
    """Read-only projection of a staker record."""
    staker: str
    reward_index: FixedPoint
    pending_reward: int
    bond_amount: int


class StakerLedger:
    """Mapping of staker address to StakerRecord with reconciliation."""

    def __init__(
        self,
        stakers: Optional[Dict[str, StakerRecord]] = None,
        engine: Optional[RewardAccrualEngine] = None
    ):
        self.stakers: Dict[str, StakerRecord] = stakers if stakers is not None else {}
        self.engine = engine or RewardAccrualEngine()

    def get(self, staker: str) -> StakerRecord:
        """Copy of the stored record, or a zero record for unknown stakers."""
        record = self.stakers.get(staker)
        if record is None:
            return StakerRecord()
        return replace(record)

    @staticmethod
    def reconcile(record: StakerRecord, state: GlobalState):
        """Credit reward accrued since the staker's last touch-point."""
        index_diff = state.global_reward_index - record.reward_index
        record.pending_reward = checked_add(
            record.pending_reward, index_diff.mul_floor(record.bond_amount)
        )
        record.reward_index = state.global_reward_index

    def _touch(
        self,
        state: GlobalState,
        schedule: ScheduleSet,
        staker: str,
        at_time: int
    ) -> Tuple[GlobalState, StakerRecord]:
        projected = replace(state)
        self.engine.advance(projected, schedule, at_time)
        record = self.get(staker)
        self.reconcile(record, projected)
        return projected, record

    def _commit(
        self,
        state: GlobalState,
        projected: GlobalState,
        staker: str,
        record: StakerRecord,
        create: bool = False
    ):
        state.last_distributed = projected.last_distributed
        state.total_bond_amount = projected.total_bond_amount
        state.global_reward_index = projected.global_reward_index
        if create or staker in self.stakers:
            self.stakers[staker] = record

    def bond(self, state: GlobalState, schedule: ScheduleSet, staker: str, amount: int, at_time: int):
        """
        Add `amount` to the staker's bond.

        Zero amounts are accepted here; rejecting them is the caller's concern.
        """
        check_amount(amount)
        projected, record = self._touch(state, schedule, staker, at_time)
        record.bond_amount = checked_add(record.bond_amount, amount)
        projected.total_bond_amount = checked_add(projected.total_bond_amount, amount)
        self._commit(state, projected, staker, record, create=True)
        logger.info(f"{staker} bonded {amount} at {at_time} (bond={record.bond_amount})")

    def unbond(
        self,
        state: GlobalState,
        schedule: ScheduleSet,
        staker: str,
        amount: int,
        at_time: int,
        staking_token: str
    ) -> Optional[TransferMsg]:
        """
        Remove `amount` from the staker's bond and return it.

        Returns:
            Transfer of the bonded token back to the staker, or None for zero

        Raises:
            InsufficientBond: If amount exceeds the current bond
        """
        check_amount(amount)
        projected, record = self._touch(state, schedule, staker, at_time)
        if amount > record.bond_amount:
            raise InsufficientBond("cannot unbond more than bond amount")

        record.bond_amount = checked_sub(record.bond_amount, amount)
        projected.total_bond_amount = checked_sub(projected.total_bond_amount, amount)
        self._commit(state, projected, staker, record)
        logger.info(f"{staker} unbonded {amount} at {at_time} (bond={record.bond_amount})")

        if amount == 0:
            return None
        return TransferMsg(token=staking_token, recipient=staker, amount=amount)

    def withdraw(
        self,
        state: GlobalState,
        schedule: ScheduleSet,
        staker: str,
        at_time: int,
        reward_token: str
    ) -> Optional[TransferMsg]:
        """Pay out the staker's pending reward; None when nothing is pending."""
        projected, record = self._touch(state, schedule, staker, at_time)
        amount = record.pending_reward
        record.pending_reward = 0
        self._commit(state, projected, staker, record)

        if amount == 0:
            return None
        logger.info(f"{staker} withdrew {amount} at {at_time}")
        return TransferMsg(token=reward_token, recipient=staker, amount=amount)

    def query_staker_info(
        self,
        state: GlobalState,
        schedule: ScheduleSet,
        staker: str,
        at_time: int
    ) -> StakerInfo:
        """Project the staker's record at at_time without touching stored state."""
        _, record = self._touch(state, schedule, staker, at_time)
        return StakerInfo(
            staker=staker,
            reward_index=record.reward_index,
            pending_reward=record.pending_reward,
            bond_amount=record.bond_amount,
        )
