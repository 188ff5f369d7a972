"""Events the host forwards to plugins.

Each event knows the conventional hook name it is delivered to and the
arguments marshalled across the host/guest boundary. Structured payloads
cross as JSON text so every plugin sees the same self-describing shape.
"""

import json
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Tuple, Union

from asset_plugin_host.domain.assets import Asset, asset_to_dict

CUSTOM_EVENT_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def encode_payload(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class AssetCreated:
    asset: Asset
    handler_name = "on_asset_created"

    def arguments(self) -> Tuple[Any, ...]:
        return (encode_payload(asset_to_dict(self.asset)),)


@dataclass(frozen=True)
class AssetUpdated:
    asset: Asset
    handler_name = "on_asset_updated"

    def arguments(self) -> Tuple[Any, ...]:
        return (encode_payload(asset_to_dict(self.asset)),)


@dataclass(frozen=True)
class AssetDeleted:
    asset_id: uuid.UUID
    handler_name = "on_asset_deleted"

    def arguments(self) -> Tuple[Any, ...]:
        return (str(self.asset_id),)


@dataclass(frozen=True)
class AppStarted:
    handler_name = "on_app_started"

    def arguments(self) -> Tuple[Any, ...]:
        return ()


@dataclass(frozen=True)
class AppClosing:
    handler_name = "on_app_closing"

    def arguments(self) -> Tuple[Any, ...]:
        return ()


@dataclass(frozen=True)
class CustomEvent:
    name: str
    data: Any = field(default=None)

    def __post_init__(self) -> None:
        if not CUSTOM_EVENT_NAME_RE.match(self.name or ""):
            raise ValueError(f"Invalid custom event name: {self.name!r}")

    @property
    def handler_name(self) -> str:
        return f"on_{self.name}"

    def arguments(self) -> Tuple[Any, ...]:
        return (encode_payload(self.data),)


PluginEvent = Union[AssetCreated, AssetUpdated, AssetDeleted, AppStarted, AppClosing, CustomEvent]
