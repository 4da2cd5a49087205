"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

U128_MAX = 2 ** 128 - 1


class Staking(BaseModel):
    """Contract instantiation parameters."""
    reward_token: str = Field(min_length=1, description="Address of the reward token")
    staking_token: str = Field(min_length=1, description="Address of the bonded token")
    owner: str = Field(min_length=1, description="Owner allowed to add schedules and migrate")
    start_height: int = Field(ge=0, description="Height at which accrual starts")
    distribution_schedule: List[Tuple[int, int, int]] = Field(
        default_factory=list,
        description="Emission intervals as [start, end, amount]"
    )

    @field_validator("distribution_schedule")
    @classmethod
    def validate_schedule_shape(cls, v):
        """Each interval must have end > start >= 0 and 0 < amount <= U128_MAX."""
        for start, end, amount in v:
            if start < 0:
                raise ValueError(f"schedule start must be non-negative, got {start}")
            if end <= start:
                raise ValueError(f"schedule end must be greater than start: ({start}, {end})")
            if not 0 < amount <= U128_MAX:
                raise ValueError(f"schedule amount out of range: {amount}")
        return v


class Simulation(BaseModel):
    """Random scenario generation parameters."""
    random_seed: int = Field(default=42, description="Random seed for reproducibility")
    monte_carlo_runs: int = Field(default=20, gt=0, description="Number of random runs")
    num_stakers: int = Field(default=5, gt=0, description="Distinct staker addresses")
    num_operations: int = Field(default=200, gt=0, description="Operations per run")
    max_bond_amount: int = Field(default=1000, gt=0, description="Upper bound for a single bond")
    max_height_step: int = Field(default=5, ge=0, description="Max height increase between operations")
    migrate_probability: float = Field(
        default=0.01, ge=0, le=1,
        description="Chance that an operation is a migration"
    )
    stale_height_probability: float = Field(
        default=0.02, ge=0, le=1,
        description="Chance that an operation is sent below the current height"
    )


class Logging(BaseModel):
    """Logging setup for the CLI."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: str = Field(default="%(asctime)s %(levelname)s %(name)s: %(message)s")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v


class Operation(BaseModel):
    """One scripted contract call."""
    op: Literal["bond", "unbond", "withdraw", "add_schedule", "change_owner", "migrate"]
    height: int = Field(ge=0)
    sender: str = Field(min_length=1, description="Caller (token contract for bond)")
    staker: Optional[str] = None
    amount: Optional[int] = Field(default=None, ge=0)
    schedule: Optional[Tuple[int, int, int]] = None
    new_owner: Optional[str] = None
    new_custodian: Optional[str] = None

    @model_validator(mode="after")
    def validate_arguments(self):
        """Ensure each operation carries the arguments it needs."""
        required = {
            "bond": ("staker", "amount"),
            "unbond": ("amount",),
            "withdraw": (),
            "add_schedule": ("schedule",),
            "change_owner": ("new_owner",),
            "migrate": ("new_custodian",),
        }[self.op]
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.op} at height {self.height} missing: {', '.join(missing)}")
        return self


class Config(BaseModel):
    """Complete configuration for an xstake deployment and its simulations."""
    staking: Staking
    simulation: Simulation = Field(default_factory=Simulation)
    logging: Logging = Field(default_factory=Logging)
    scenario: List[Operation] = Field(default_factory=list)

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
