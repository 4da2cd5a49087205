"""Monte Carlo simulation - Random operation sequences for invariant testing."""

from typing import List

import numpy as np

from ..config.schema import Config, Operation
from .runner import ScenarioRunner, SimulationResult

# Relative weights of the non-migration operations
OPERATION_WEIGHTS = {
    "bond": 0.40,
    "unbond": 0.25,
    "withdraw": 0.20,
    "add_schedule": 0.10,
    "change_owner": 0.05,
}


class MonteCarloRunner:
    """Run many random scenarios derived from one base configuration."""

    def __init__(self, config: Config):
        """
        Initialize Monte Carlo runner.

        Args:
            config: Base configuration; `simulation` drives the generator
        """
        self.config = config

    def generate_operations(self, rng: np.random.Generator) -> List[Operation]:
        """
        Draw a random operation sequence.

        The running height never decreases, but an occasional operation is
        sent below it. Amounts and schedules are drawn wide enough that some
        operations are rejected (over-unbonding, overlapping or
        past schedules, calls from non-owners, stale heights).
        """
        sim = self.config.simulation
        staking = self.config.staking
        stakers = [f"staker{i:04d}" for i in range(sim.num_stakers)]
        callers = stakers + [staking.owner]

        names = list(OPERATION_WEIGHTS)
        weights = np.array([OPERATION_WEIGHTS[name] for name in names])
        weights = weights / weights.sum()

        height = staking.start_height
        operations = []
        for _ in range(sim.num_operations):
            height += int(rng.integers(0, sim.max_height_step + 1))
            op_height = height
            if rng.random() < sim.stale_height_probability:
                op_height = max(0, height - int(rng.integers(1, sim.max_height_step + 2)))

            if rng.random() < sim.migrate_probability:
                operations.append(Operation(
                    op="migrate",
                    height=op_height,
                    sender=staking.owner,
                    new_custodian="custodian0000",
                ))
                continue

            op = str(rng.choice(names, p=weights))
            staker = stakers[int(rng.integers(0, len(stakers)))]

            if op == "bond":
                operations.append(Operation(
                    op=op,
                    height=op_height,
                    sender=staking.staking_token,
                    staker=staker,
                    amount=int(rng.integers(0, sim.max_bond_amount + 1)),
                ))
            elif op == "unbond":
                operations.append(Operation(
                    op=op,
                    height=op_height,
                    sender=staker,
                    amount=int(rng.integers(0, sim.max_bond_amount + 1)),
                ))
            elif op == "withdraw":
                operations.append(Operation(op=op, height=op_height, sender=staker))
            elif op == "add_schedule":
                start = height + int(rng.integers(-5, 200))
                end = start + int(rng.integers(1, 200))
                amount = int(rng.integers(0, 10_000_000))
                operations.append(Operation(
                    op=op,
                    height=op_height,
                    sender=callers[int(rng.integers(0, len(callers)))],
                    schedule=(start, end, amount),
                ))
            else:
                # ownership always returns to the configured owner
                operations.append(Operation(
                    op=op,
                    height=op_height,
                    sender=callers[int(rng.integers(0, len(callers)))],
                    new_owner=staking.owner,
                ))

        return operations

    def run(
        self,
        num_runs: int = None,
        random_seed: int = None
    ) -> List[SimulationResult]:
        """
        Run Monte Carlo simulation.

        Args:
            num_runs: Number of runs (defaults to config value)
            random_seed: Random seed (defaults to config value)

        Returns:
            List of simulation results
        """
        if num_runs is None:
            num_runs = self.config.simulation.monte_carlo_runs

        if random_seed is None:
            random_seed = self.config.simulation.random_seed

        results = []
        for run_idx in range(num_runs):
            rng = np.random.default_rng(random_seed + run_idx)
            operations = self.generate_operations(rng)
            runner = ScenarioRunner(self.config)
            results.append(runner.run(operations))

        return results
