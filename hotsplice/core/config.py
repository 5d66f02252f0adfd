"""Settings for hotsplice.

Settings live in an optional ``hotsplice.json`` in the working directory.
Any setting missing from the file can come from an environment variable
named after its key path, e.g. ``inject.register_source`` reads
``INJECT_REGISTER_SOURCE``.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_CONFIG_PATH = "hotsplice.json"

_FALSE_STRINGS = ("0", "false", "no", "off", "")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Read the JSON settings file.

    Args:
        config_path: Settings file location (default: "hotsplice.json")

    Returns:
        The parsed settings, or {} when the file is absent, unreadable or not
        a JSON object
    """
    path = Path(config_path)
    if not path.is_file():
        return {}

    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError):
        return {}

    return data if isinstance(data, dict) else {}


def env_var_name(keys: List[str]) -> str:
    """Environment variable consulted for a key path, e.g. "IDS_SUFFIX_LENGTH"."""
    return "_".join(k.upper() for k in keys)


def _lookup(config: Dict[str, Any], keys: List[str]) -> Any:
    node: Any = config
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


def get_config_value(
    keys: List[str], default: Any = None, config: Optional[Dict[str, Any]] = None
) -> Any:
    """Look up a setting by key path.

    Args:
        keys: Key path, e.g. ["ids", "suffix_length"]
        default: Returned when neither the file nor the environment sets it
        config: Settings to search instead of the file

    Returns:
        The file value, else the environment value, else ``default``
    """
    if config is None:
        config = load_config()

    value = _lookup(config, keys)
    if value is None:
        value = os.environ.get(env_var_name(keys))
    return default if value is None else value


def get_int(keys: List[str], default: int, config: Optional[Dict[str, Any]] = None) -> int:
    """Integer setting; unparsable values yield ``default``."""
    value = get_config_value(keys, default, config)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_bool(keys: List[str], default: bool, config: Optional[Dict[str, Any]] = None) -> bool:
    """Boolean setting.

    Strings such as "0", "false", "no" and "off" (any case) read as False.
    """
    value = get_config_value(keys, default, config)
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)
