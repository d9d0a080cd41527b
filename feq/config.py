import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "target": ".",
    "log": "events_log.jsonl",
    "exclude": [],
    "drain_interval": 1.0,
    "polling": False,
}


class ConfigError(Exception):
    """Raised when the configuration file is not a YAML mapping."""


def load_config(path: Path) -> dict:
    # If config file missing → return defaults
    if not path.exists():
        return DEFAULT_CONFIG.copy()

    # Load YAML
    try:
        with path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration {path}: {exc}") from exc

    if not isinstance(user_config, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    # Merge defaults with user config
    final_config = DEFAULT_CONFIG.copy()
    final_config.update(user_config)

    return final_config
