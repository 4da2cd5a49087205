"""Error kinds raised by the staking engine."""


class StakingError(ValueError):
    """Base class for every terminal staking error."""


class InvalidSchedule(StakingError):
    """Malformed or overlapping distribution schedule."""


class InsufficientBond(StakingError):
    """Unbond amount exceeds the staker's bond."""


class Unauthorized(StakingError):
    """Caller is not allowed to perform the operation."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class ArithmeticOverflow(StakingError):
    """Checked arithmetic left the representable range."""


class StaleHeight(StakingError):
    """Execute call at a height below one already processed."""


class InvariantViolation(StakingError):
    """Internal accounting no longer adds up."""
