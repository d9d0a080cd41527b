from pathlib import Path
from typing import Any, Dict, List, Optional
from .config import DEFAULT_CONFIG, ConfigError, load_config

def _to_list_arg(value: Optional[List[str]]) -> Optional[List[str]]:
    """
    Normalize CLI exclude arg handling.
    argparse may give None, a list of single string, or multiple entries.
    We want either None or a flat list.
    """
    if value is None:
        return None
    # if user passed multiple --exclude arguments, flatten them
    flat = []
    for v in value:
        if isinstance(v, list):
            flat.extend(v)
        else:
            flat.append(v)
    return flat

def build_settings(args: Any, config_path: Optional[str]) -> Dict[str, Any]:
    """
    Build final settings using priority:
      DEFAULTS <- config file <- CLI args (non-None)
    Args:
      args: argparse.Namespace (CLI arguments)
      config_path: explicit config file path (string) or None
    Returns:
      dict with keys: target, log, exclude, drain_interval, polling
    """
    # 1) Load defaults and config file
    cfg_path = Path(config_path) if config_path else Path("config.yml")
    user_cfg = load_config(cfg_path) if cfg_path.exists() else DEFAULT_CONFIG.copy()

    final = DEFAULT_CONFIG.copy()
    final.update(user_cfg)  # config overrides defaults

    # 2) CLI overrides (only if provided / not None)
    if getattr(args, "target", None):
        final["target"] = args.target

    if getattr(args, "log", None):
        final["log"] = args.log

    if getattr(args, "interval", None) is not None:
        final["drain_interval"] = args.interval

    if getattr(args, "polling", False):
        final["polling"] = True

    # normalize exclude
    cli_excludes = _to_list_arg(getattr(args, "exclude", None))
    if cli_excludes is not None:
        final["exclude"] = cli_excludes

    # ensure types
    final["exclude"] = final.get("exclude") or []
    try:
        final["drain_interval"] = float(final["drain_interval"])
    except (TypeError, ValueError) as exc:
        raise ConfigError("drain_interval must be numeric") from exc
    if final["drain_interval"] <= 0:
        raise ConfigError("drain_interval must be positive")
    final["polling"] = bool(final.get("polling"))

    return final
