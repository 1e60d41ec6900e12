from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from reltable.index.base import NONE, normalize_index_kind

logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = "store"
DEFAULT_FILE_EXT = ".dbf"
CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".reltable.json")

ENV_STORE_DIR = "RELTABLE_STORE_DIR"
ENV_INDEX = "RELTABLE_INDEX"


@dataclass(frozen=True)
class EngineConfig:
    store_dir: str = DEFAULT_STORE_DIR
    file_ext: str = DEFAULT_FILE_EXT
    index_kind: str = NONE

    def with_overrides(self, **changes: Any) -> "EngineConfig":
        clean = {k: v for k, v in changes.items() if v is not None}
        if "index_kind" in clean:
            clean["index_kind"] = normalize_index_kind(clean["index_kind"])
        return replace(self, **clean)


_config: Optional[EngineConfig] = None


def _read_config_file(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def load_config(path: str | None = None, environ: Dict[str, str] | None = None) -> EngineConfig:
    env = os.environ if environ is None else environ
    data = _read_config_file(path or CONFIG_FILE)

    config = EngineConfig()
    try:
        config = config.with_overrides(
            store_dir=data.get("store_dir"),
            file_ext=data.get("file_ext"),
            index_kind=data.get("index_kind"),
        )
    except ValueError as exc:
        logger.warning("Ignoring invalid config values: %s", exc)

    try:
        config = config.with_overrides(
            store_dir=env.get(ENV_STORE_DIR) or None,
            index_kind=env.get(ENV_INDEX) or None,
        )
    except ValueError as exc:
        logger.warning("Ignoring invalid environment override: %s", exc)
    return config


def get_config() -> EngineConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: EngineConfig | None) -> None:
    """Replace the process-wide config; ``None`` forces a reload on next use."""
    global _config
    _config = config
