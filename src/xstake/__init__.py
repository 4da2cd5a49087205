"""xstake - scheduled reward distribution for bonded-token stakers."""

__version__ = "0.3.0"
