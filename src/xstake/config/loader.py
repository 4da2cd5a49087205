"""Configuration loading and saving as YAML."""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .schema import Config

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_config(yaml_path: Union[str, Path] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        yaml_path: Path to YAML file (defaults to the packaged defaults.yaml)

    Returns:
        Validated Config

    Raises:
        ValueError: If the file is empty or not a mapping
        pydantic.ValidationError: If a section fails validation
    """
    path = Path(yaml_path) if yaml_path is not None else DEFAULTS_PATH

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Validate a plain dictionary into a Config."""
    return Config.from_dict(data)


def save_config(config: Config, yaml_path: Union[str, Path]):
    """Write config back out as YAML (tuples become lists)."""
    with open(yaml_path, 'w') as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)
