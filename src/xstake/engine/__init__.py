"""Reward-accrual engine for scheduled staking rewards."""

from .accrual import GlobalState, RewardAccrualEngine
from .contract import ConfigInfo, ContractStorage, StakingContract, StateInfo, TokenConfig
from .errors import (
    ArithmeticOverflow,
    InsufficientBond,
    InvalidSchedule,
    InvariantViolation,
    StakingError,
    StaleHeight,
    Unauthorized,
)
from .fixed_point import DECIMAL_FRACTIONAL, U128_MAX, FixedPoint
from .ledger import StakerInfo, StakerLedger, StakerRecord
from .messages import Response, TransferMsg
from .migration import MigrationPlanner, MigrationResult
from .schedule import ScheduleEntry, ScheduleSet

__all__ = [
    # Arithmetic
    "FixedPoint",
    "DECIMAL_FRACTIONAL",
    "U128_MAX",
    # Errors
    "StakingError",
    "InvalidSchedule",
    "InsufficientBond",
    "Unauthorized",
    "ArithmeticOverflow",
    "StaleHeight",
    "InvariantViolation",
    # Core
    "ScheduleEntry",
    "ScheduleSet",
    "GlobalState",
    "RewardAccrualEngine",
    "StakerRecord",
    "StakerInfo",
    "StakerLedger",
    "MigrationPlanner",
    "MigrationResult",
    # Contract surface
    "TransferMsg",
    "Response",
    "TokenConfig",
    "ContractStorage",
    "ConfigInfo",
    "StateInfo",
    "StakingContract",
]
