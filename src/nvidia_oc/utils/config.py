from pathlib import Path
from typing import Type, TypeVar

import yaml
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def load_config(path: str | Path, config_cls: Type[T]) -> T:
    """
    Load a YAML (or JSON) config file and convert to a Pydantic config object.

    JSON is a subset of YAML, so the boot-time `/etc/nvidia_oc.json` file is
    read by the same loader.

    Args:
        path: Path to the config file
        config_cls: Pydantic config class to instantiate (e.g., TuneConfig)

    Returns:
        Instantiated and validated config object

    Example:
        >>> from nvidia_oc.configs import OverclockConfig
        >>> config = load_config("/etc/nvidia_oc.json", OverclockConfig)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        config_dict = yaml.safe_load(f) or {}

    return config_cls(**config_dict)


def save_config(config: BaseModel, path: str | Path) -> Path:
    """
    Save a Pydantic config to a YAML file.

    Args:
        config: Pydantic config object (e.g., TuneConfig)
        path: Path to write the YAML config file

    Returns:
        The path written to (for chaining)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    return path
