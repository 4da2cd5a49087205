"""Export functionality for CSV and JSON."""

import json
from dataclasses import asdict

import pandas as pd

from ..simulation.runner import SimulationResult


def snapshots_frame(result: SimulationResult) -> pd.DataFrame:
    """One row per operation with the state it left behind."""
    columns = [
        'step', 'op', 'height', 'accepted', 'last_distributed', 'total_bond_amount',
        'global_reward_index', 'schedule_entries', 'emitted_cumulative',
        'forfeited_cumulative', 'withdrawn_cumulative', 'owed_rewards',
    ]
    data = [asdict(snapshot) for snapshot in result.snapshots]
    return pd.DataFrame(data, columns=columns)


def stakers_frame(result: SimulationResult) -> pd.DataFrame:
    """Final staker records, sorted by address."""
    data = [
        {
            'staker': info.staker,
            'bond_amount': info.bond_amount,
            'pending_reward': info.pending_reward,
            'reward_index': str(info.reward_index),
        }
        for _, info in sorted(result.final_stakers.items())
    ]
    return pd.DataFrame(data, columns=['staker', 'bond_amount', 'pending_reward', 'reward_index'])


def export_csv(result: SimulationResult, filepath: str):
    """Export per-operation snapshots to CSV."""
    snapshots_frame(result).to_csv(filepath, index=False)


def export_json(result: SimulationResult, filepath: str):
    """Export config, snapshots, transfers and rejections to JSON."""
    export_data = {
        'config': result.config.model_dump(mode="json"),
        'config_hash': result.config.compute_hash(),
        'snapshots': [asdict(snapshot) for snapshot in result.snapshots],
        'transfers': [asdict(transfer) for transfer in result.transfers],
        'rejections': [asdict(rejection) for rejection in result.rejections],
        'stakers': {
            staker: {
                'bond_amount': info.bond_amount,
                'pending_reward': info.pending_reward,
                'reward_index': str(info.reward_index),
            }
            for staker, info in sorted(result.final_stakers.items())
        },
        'final_schedule': [list(entry) for entry in result.final_schedule],
        'totals': {
            'allotted': result.allotted_total,
            'migrated': result.migrated_total,
        },
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2, default=str)
