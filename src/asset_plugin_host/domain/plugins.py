from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_PLUGIN_NAME = "Unknown"
DEFAULT_PLUGIN_VERSION = "0.0.0"


@dataclass(frozen=True)
class PluginDescriptor:
    name: str
    version: str
    author: Optional[str]
    description: Optional[str]
    path: Path
    enabled: bool = True


def descriptor_to_dict(descriptor: PluginDescriptor) -> Dict[str, Any]:
    return {
        "name": descriptor.name,
        "version": descriptor.version,
        "author": descriptor.author,
        "description": descriptor.description,
        "path": str(descriptor.path),
        "enabled": descriptor.enabled,
    }
