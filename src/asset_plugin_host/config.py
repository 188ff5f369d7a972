import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

PLUGINS_DIR_KEY = "PLUGINS_DIR"
LOG_LEVEL_KEY = "LOG_LEVEL"

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "asset-plugin-host"
DEFAULT_PLUGINS_DIR = "plugins"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class HostConfig:
    plugins_dir: Path
    config_dir: Path
    log_level: str


def get_env_path(config_dir: Path) -> Path:
    return config_dir / ".env"


def load_env_file(path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    if not path.exists():
        return data
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            data[k.strip()] = v.strip()
    except Exception as exc:
        print(f"Failed to read .env: {exc}", file=sys.stderr)
    return data


def get_env_value(key: str, env_file: Dict[str, str]) -> Optional[str]:
    return os.environ.get(key) or env_file.get(key)


def load_config(config_dir: Path, plugins_dir: Optional[str] = None) -> HostConfig:
    """Resolve host settings from the environment, then ``<config_dir>/.env``.

    An explicit ``plugins_dir`` argument wins over both.
    """
    config_dir = Path(config_dir).expanduser().resolve()
    env_file = load_env_file(get_env_path(config_dir))
    raw_dir = plugins_dir or get_env_value(PLUGINS_DIR_KEY, env_file) or DEFAULT_PLUGINS_DIR
    log_level = (get_env_value(LOG_LEVEL_KEY, env_file) or DEFAULT_LOG_LEVEL).strip().upper()
    return HostConfig(
        plugins_dir=Path(raw_dir).expanduser().resolve(),
        config_dir=config_dir,
        log_level=log_level or DEFAULT_LOG_LEVEL,
    )
