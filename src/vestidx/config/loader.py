"""Configuration loader from YAML."""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml

from .schema import Config

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_config(yaml_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from YAML file.

    An empty file yields the schema defaults.

    Args:
        yaml_path: Path to YAML file (defaults to the packaged defaults.yaml)

    Returns:
        Validated Config

    Raises:
        ValueError: If the document is not a mapping
        pydantic.ValidationError: If a value fails schema validation
    """
    path = Path(yaml_path) if yaml_path is not None else DEFAULTS_PATH
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")

    config = Config.from_dict(data)
    logger.debug("Loaded config %s (hash %s)", path, config.compute_hash())
    return config
