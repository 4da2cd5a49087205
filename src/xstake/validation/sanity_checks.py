"""Sanity checks and invariant validation for scenarios and their results."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config.schema import Config
from ..engine.fixed_point import FixedPoint
from ..simulation.runner import SimulationResult, StateSnapshot


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "schedule", "conservation", "monotonicity"
    message: str
    details: Optional[str] = None


class InvariantChecker:
    """Run sanity checks on configuration, schedules and simulation history."""

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        staking = self.config.staking
        warnings = self.check_schedule(staking.distribution_schedule)

        if not staking.distribution_schedule:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Distribution schedule is empty; nothing will be emitted",
            ))

        for start, end, amount in staking.distribution_schedule:
            if end <= staking.start_height:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="input",
                    message=f"Schedule ({start}, {end}) ends before the start height",
                    details=f"{amount:,} reward will never be credited to stakers"
                ))
            elif start < staking.start_height:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="input",
                    message=f"Schedule ({start}, {end}) started before the start height",
                    details="Emission before the start height is never credited"
                ))

        if staking.reward_token == staking.staking_token:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Reward token and staking token are the same address",
                details="Bonded principal and rewards would share one balance"
            ))

        return warnings

    def check_schedule(self, entries: Sequence[Tuple[int, int, int]]) -> List[ValidationWarning]:
        """Check a schedule is well formed, sorted and non-overlapping."""
        warnings = []
        ordered = sorted(entries, key=lambda e: e[0])
        if list(entries) != ordered:
            warnings.append(ValidationWarning(
                severity="warning",
                category="schedule",
                message="Schedule entries are not sorted by start",
            ))

        for start, end, amount in entries:
            if end <= start or amount <= 0:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="schedule",
                    message=f"Malformed schedule entry ({start}, {end}, {amount})",
                ))

        for prev, curr in zip(ordered, ordered[1:]):
            if curr[0] < prev[1]:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="schedule",
                    message=f"Schedule entries overlap: {prev} and {curr}",
                ))

        return warnings

    def check_snapshot(self, snapshot: StateSnapshot) -> List[ValidationWarning]:
        """
        Check conservation at one point in time.

        Rewards owed plus rewards withdrawn can never exceed what the
        schedule emitted while someone was bonded.
        """
        warnings = []
        credited_budget = snapshot.emitted_cumulative - snapshot.forfeited_cumulative
        paid_or_owed = snapshot.owed_rewards + snapshot.withdrawn_cumulative
        if paid_or_owed > credited_budget:
            warnings.append(ValidationWarning(
                severity="error",
                category="conservation",
                message=f"Rewards exceed emission at step {snapshot.step}",
                details=(
                    f"Owed={snapshot.owed_rewards:,}, withdrawn={snapshot.withdrawn_cumulative:,}, "
                    f"emitted={snapshot.emitted_cumulative:,}, forfeited={snapshot.forfeited_cumulative:,}"
                )
            ))

        if snapshot.total_bond_amount < 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message=f"Total bond went negative at step {snapshot.step}",
                details=f"Value: {snapshot.total_bond_amount}"
            ))

        return warnings

    def check_history(self, snapshots: Sequence[StateSnapshot]) -> List[ValidationWarning]:
        """Check the reward index and last_distributed never move backward."""
        warnings = []
        for prev, curr in zip(snapshots, snapshots[1:]):
            if curr.last_distributed < prev.last_distributed:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="monotonicity",
                    message=f"last_distributed moved backward at step {curr.step}",
                    details=f"{prev.last_distributed} -> {curr.last_distributed}"
                ))
            if FixedPoint.from_str(curr.global_reward_index) < FixedPoint.from_str(prev.global_reward_index):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="monotonicity",
                    message=f"Global reward index decreased at step {curr.step}",
                    details=f"{prev.global_reward_index} -> {curr.global_reward_index}"
                ))
        return warnings

    def check_result(self, result: SimulationResult) -> List[ValidationWarning]:
        """Check end-of-run totals."""
        warnings = self.check_schedule(result.final_schedule)
        final = result.final_snapshot

        if final is not None:
            bonded = sum(info.bond_amount for info in result.final_stakers.values())
            if bonded != final.total_bond_amount:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="conservation",
                    message="Total bond does not match the sum of staker bonds",
                    details=f"Total={final.total_bond_amount:,}, sum={bonded:,}"
                ))

            if final.emitted_cumulative + result.migrated_total > result.allotted_total:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="conservation",
                    message="Emission plus migrated reward exceeds the allotted reward",
                    details=(
                        f"Emitted={final.emitted_cumulative:,}, migrated={result.migrated_total:,}, "
                        f"allotted={result.allotted_total:,}"
                    )
                ))

        return warnings


def validate_simulation_results(result: SimulationResult) -> List[ValidationWarning]:
    """
    Validate a complete scenario result.

    Args:
        result: Output of ScenarioRunner.run

    Returns:
        List of all validation warnings
    """
    checker = InvariantChecker(result.config)
    warnings = []

    # Check config first
    warnings.extend(checker.check_config_inputs())

    for snapshot in result.snapshots:
        warnings.extend(checker.check_snapshot(snapshot))

    warnings.extend(checker.check_history(result.snapshots))
    warnings.extend(checker.check_result(result))

    return warnings
