"""Scenario runner - Replay scripted operations against a fresh contract.

Key Features:
- One StateSnapshot per operation (rejected operations included)
- Tracks schedule emission per accrual window, forfeited emission and payouts
- Rejected operations are recorded, never retried
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.schema import Config, Operation, Staking
from ..engine.contract import StakingContract
from ..engine.errors import StakingError
from ..engine.ledger import StakerInfo
from ..engine.messages import Response, TransferMsg

logger = logging.getLogger(__name__)


@dataclass
class StateSnapshot:
    """Contract state after one operation."""
    step: int
    op: str
    height: int
    accepted: bool
    last_distributed: int
    total_bond_amount: int
    global_reward_index: str
    schedule_entries: int
    emitted_cumulative: int  # Schedule emission integrated so far
    forfeited_cumulative: int  # Emission while nothing was bonded
    withdrawn_cumulative: int
    owed_rewards: int  # Pending plus unreconciled reward of all stakers


@dataclass
class Rejection:
    """An operation the contract refused."""
    step: int
    op: str
    height: int
    error: str
    message: str


@dataclass
class SimulationResult:
    """Complete scenario result."""
    config: Config
    snapshots: List[StateSnapshot]
    transfers: List[TransferMsg]
    rejections: List[Rejection]
    final_stakers: Dict[str, StakerInfo]
    final_schedule: List[tuple]
    allotted_total: int  # Initial schedule plus every accepted addition
    migrated_total: int = 0
    attributes: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def final_snapshot(self) -> Optional[StateSnapshot]:
        return self.snapshots[-1] if self.snapshots else None


def contract_from_config(staking: Staking) -> StakingContract:
    """Instantiate a contract from the `staking` config section."""
    return StakingContract.initialize(
        reward_token=staking.reward_token,
        staking_token=staking.staking_token,
        distribution_schedule=staking.distribution_schedule,
        owner=staking.owner,
        height=staking.start_height,
    )


class ScenarioRunner:
    """Replays a list of operations and records what happened."""

    def __init__(self, config: Config):
        """
        Initialize scenario runner.

        Args:
            config: Configuration with `staking` and `scenario` sections
        """
        self.config = config
        self.contract = contract_from_config(config.staking)

    def _apply(self, operation: Operation) -> Response:
        contract = self.contract
        if operation.op == "bond":
            return contract.bond(operation.sender, operation.staker, operation.amount, operation.height)
        if operation.op == "unbond":
            return contract.unbond(operation.sender, operation.amount, operation.height)
        if operation.op == "withdraw":
            return contract.withdraw(operation.sender, operation.height)
        if operation.op == "add_schedule":
            return contract.add_schedule(operation.sender, operation.schedule, operation.height)
        if operation.op == "change_owner":
            return contract.change_owner(operation.sender, operation.new_owner, operation.height)
        if operation.op == "migrate":
            return contract.migrate(operation.sender, operation.new_custodian, operation.height)
        raise ValueError(f"Unknown operation: {operation.op}")

    def _owed_rewards(self) -> int:
        storage = self.contract.storage
        total = 0
        for staker in storage.stakers:
            # last_distributed keeps the projection from advancing
            info = self.contract.query_staker_info(staker, storage.state.last_distributed)
            total += info.pending_reward
        return total

    def run(self, operations: Optional[List[Operation]] = None) -> SimulationResult:
        """
        Run the scenario.

        Args:
            operations: Operations to replay (defaults to config.scenario)

        Returns:
            SimulationResult
        """
        if operations is None:
            operations = self.config.scenario

        snapshots: List[StateSnapshot] = []
        transfers: List[TransferMsg] = []
        rejections: List[Rejection] = []
        attributes: List[Dict[str, Any]] = []

        allotted = self.contract.storage.schedule.total_amount()
        emitted = 0
        forfeited = 0
        withdrawn = 0
        migrated = 0

        for step, operation in enumerate(operations):
            before = self.contract.storage
            schedule_before = before.schedule
            last_before = before.state.last_distributed
            bonded_before = before.state.total_bond_amount

            accepted = True
            try:
                response = self._apply(operation)
            except StakingError as e:
                accepted = False
                rejections.append(Rejection(
                    step=step,
                    op=operation.op,
                    height=operation.height,
                    error=type(e).__name__,
                    message=str(e),
                ))
                logger.warning(f"Step {step} {operation.op} at {operation.height} rejected: {e}")
            else:
                transfers.extend(response.messages)
                attributes.append(dict(response.attributes))
                if operation.op == "withdraw":
                    withdrawn += sum(m.amount for m in response.messages)
                elif operation.op == "migrate":
                    migrated += sum(m.amount for m in response.messages)
                elif operation.op == "add_schedule":
                    allotted += operation.schedule[2]

            state = self.contract.storage.state
            if state.last_distributed > last_before:
                window = self.contract.engine.emitted_between(
                    schedule_before, last_before, state.last_distributed
                )
                emitted += window
                if bonded_before == 0:
                    forfeited += window

            snapshots.append(StateSnapshot(
                step=step,
                op=operation.op,
                height=operation.height,
                accepted=accepted,
                last_distributed=state.last_distributed,
                total_bond_amount=state.total_bond_amount,
                global_reward_index=str(state.global_reward_index),
                schedule_entries=len(self.contract.storage.schedule),
                emitted_cumulative=emitted,
                forfeited_cumulative=forfeited,
                withdrawn_cumulative=withdrawn,
                owed_rewards=self._owed_rewards(),
            ))

        storage = self.contract.storage
        final_stakers = {
            staker: self.contract.query_staker_info(staker, storage.state.last_distributed)
            for staker in storage.stakers
        }

        logger.info(
            f"Scenario finished: {len(operations)} operations, {len(rejections)} rejected, "
            f"emitted={emitted}, withdrawn={withdrawn}, migrated={migrated}"
        )

        return SimulationResult(
            config=self.config,
            snapshots=snapshots,
            transfers=transfers,
            rejections=rejections,
            final_stakers=final_stakers,
            final_schedule=storage.schedule.to_tuples(),
            allotted_total=allotted,
            migrated_total=migrated,
            attributes=attributes,
        )
