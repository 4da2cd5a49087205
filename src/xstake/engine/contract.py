"""Staking contract - The operations exposed to the dispatch layer.

Every execute operation runs against a deep copy of the storage and commits
it only when the whole operation succeeds, so a rejected call leaves the
stored config, schedule, state and staker records unchanged. Execute heights
never go backward.
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .accrual import GlobalState, RewardAccrualEngine
from .errors import StaleHeight, Unauthorized
from .fixed_point import FixedPoint
from .ledger import StakerInfo, StakerLedger, StakerRecord
from .messages import Response
from .migration import MigrationPlanner
from .schedule import ScheduleEntry, ScheduleSet

logger = logging.getLogger(__name__)


@dataclass
class TokenConfig:
    """Token addresses the contract pays out in."""
    reward_token: str
    staking_token: str


@dataclass
class ContractStorage:
    """Everything the contract persists between calls."""
    config: TokenConfig
    schedule: ScheduleSet
    state: GlobalState
    stakers: Dict[str, StakerRecord] = field(default_factory=dict)
    height: int = 0  # Latest height observed by an execute call

    def snapshot(self) -> 'ContractStorage':
        return copy.deepcopy(self)


@dataclass(frozen=True)
class ConfigInfo:
    reward_token: str
    staking_token: str
    distribution_schedule: List[Tuple[int, int, int]]


@dataclass(frozen=True)
class StateInfo:
    last_distributed: int
    total_bond_amount: int
    global_reward_index: FixedPoint
    owner: str


def _require_address(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty address")
    return value


class StakingContract:
    """Bond/unbond/withdraw plus owner-gated schedule management and migration."""

    def __init__(self, storage: ContractStorage, engine: Optional[RewardAccrualEngine] = None):
        """
        Wrap existing storage.

        Args:
            storage: Persisted contract storage
            engine: Accrual engine (defaults to a fresh RewardAccrualEngine)
        """
        self.storage = storage
        self.engine = engine or RewardAccrualEngine()

    @classmethod
    def initialize(
        cls,
        reward_token: str,
        staking_token: str,
        distribution_schedule: Iterable[Tuple[int, int, int]],
        owner: str,
        height: int
    ) -> 'StakingContract':
        """
        Create a contract whose accrual starts at `height`.

        The initial schedule may already be running; only its shape and
        mutual overlap are validated.

        Raises:
            InvalidSchedule: If the initial schedule is malformed
        """
        storage = ContractStorage(
            config=TokenConfig(
                reward_token=_require_address(reward_token, "reward_token"),
                staking_token=_require_address(staking_token, "staking_token"),
            ),
            schedule=ScheduleSet.from_tuples(distribution_schedule),
            state=GlobalState(last_distributed=height, owner=_require_address(owner, "owner")),
            height=height,
        )
        logger.info(
            f"Initialized staking at height {height}: {len(storage.schedule)} schedule entries, "
            f"{storage.schedule.total_amount()} reward allotted"
        )
        return cls(storage)

    @contextmanager
    def _transaction(self, height: int):
        if height < self.storage.height:
            raise StaleHeight(
                f"height {height} is below the last observed height {self.storage.height}"
            )
        store = self.storage.snapshot()
        store.height = height
        yield store
        self.storage = store

    def _ledger(self, store: ContractStorage) -> StakerLedger:
        return StakerLedger(store.stakers, engine=self.engine)

    # --- Execute ---

    def bond(self, sender: str, staker: str, amount: int, height: int) -> Response:
        """
        Bond tokens delivered by the staking token contract.

        Args:
            sender: Token contract that delivered the tokens
            staker: Owner of the delivered tokens
            amount: Amount delivered
            height: Current height

        Raises:
            Unauthorized: If sender is not the configured staking token
        """
        with self._transaction(height) as store:
            if sender != store.config.staking_token:
                raise Unauthorized()
            _require_address(staker, "staker")
            self._ledger(store).bond(store.state, store.schedule, staker, amount, height)
        return (Response()
                .add_attribute("action", "bond")
                .add_attribute("owner", staker)
                .add_attribute("amount", amount))

    def unbond(self, sender: str, amount: int, height: int) -> Response:
        """Unbond `amount` of the sender's bond and send it back."""
        with self._transaction(height) as store:
            transfer = self._ledger(store).unbond(
                store.state, store.schedule, sender, amount, height, store.config.staking_token
            )
        return (Response()
                .add_message(transfer)
                .add_attribute("action", "unbond")
                .add_attribute("owner", sender)
                .add_attribute("amount", amount))

    def withdraw(self, sender: str, height: int) -> Response:
        """Send the sender's pending reward."""
        with self._transaction(height) as store:
            transfer = self._ledger(store).withdraw(
                store.state, store.schedule, sender, height, store.config.reward_token
            )
        amount = transfer.amount if transfer else 0
        return (Response()
                .add_message(transfer)
                .add_attribute("action", "withdraw")
                .add_attribute("owner", sender)
                .add_attribute("amount", amount))

    def add_schedule(self, sender: str, schedule: Tuple[int, int, int], height: int) -> Response:
        """
        Owner-only: append a future emission interval.

        Raises:
            Unauthorized: If sender is not the owner
            InvalidSchedule: If the interval is malformed, past or overlapping
            StaleHeight: If height is below the last observed height
        """
        entry = ScheduleEntry.from_tuple(schedule)
        with self._transaction(height) as store:
            store.state.assert_owner(sender)
            # the integrated window is closed to new entries
            store.schedule.insert(entry, max(height, store.state.last_distributed))
        logger.info(f"Added schedule {entry.to_tuple()} at {height}")
        return (Response()
                .add_attribute("action", "add_schedule")
                .add_attribute("start", entry.start)
                .add_attribute("end", entry.end)
                .add_attribute("amount", entry.amount))

    def change_owner(self, sender: str, new_owner: str, height: int) -> Response:
        """Owner-only: hand ownership to new_owner."""
        with self._transaction(height) as store:
            store.state.assert_owner(sender)
            store.state.owner = _require_address(new_owner, "new_owner")
        logger.info(f"Owner changed from {sender} to {new_owner}")
        return (Response()
                .add_attribute("action", "change_owner")
                .add_attribute("new_owner", new_owner))

    def migrate(self, sender: str, new_custodian: str, height: int) -> Response:
        """
        Owner-only: forward the undistributed schedule to new_custodian.

        The staking token address stays as configured; later bonds and
        unbonds keep using it.
        """
        with self._transaction(height) as store:
            store.state.assert_owner(sender)
            _require_address(new_custodian, "new_custodian")
            result = MigrationPlanner(self.engine).migrate(
                store.state, store.schedule, new_custodian, height, store.config.reward_token
            )
        return (Response()
                .add_message(result.transfer)
                .add_attribute("action", "migrate_staking")
                .add_attribute("distributed_amount", result.distributed)
                .add_attribute("remaining_amount", result.remaining))

    # --- Queries ---

    def query_config(self) -> ConfigInfo:
        config = self.storage.config
        return ConfigInfo(
            reward_token=config.reward_token,
            staking_token=config.staking_token,
            distribution_schedule=self.storage.schedule.to_tuples(),
        )

    def query_state(self, height: Optional[int] = None) -> StateInfo:
        """Global state, projected to `height` when given."""
        state = copy.deepcopy(self.storage.state)
        if height is not None:
            self.engine.advance(state, self.storage.schedule, height)
        return StateInfo(
            last_distributed=state.last_distributed,
            total_bond_amount=state.total_bond_amount,
            global_reward_index=state.global_reward_index,
            owner=state.owner,
        )

    def query_staker_info(self, staker: str, height: Optional[int] = None) -> StakerInfo:
        """Staker record projected to `height` (default: latest observed height)."""
        if height is None:
            height = self.storage.height
        store = self.storage.snapshot()
        return self._ledger(store).query_staker_info(store.state, store.schedule, staker, height)
