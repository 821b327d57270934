from .config import load_config, save_config

__all__ = ["load_config", "save_config"]
