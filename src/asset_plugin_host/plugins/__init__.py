from asset_plugin_host.plugins.errors import (
    PluginDisabled,
    PluginError,
    PluginInterpreterError,
    PluginIOError,
    PluginLoadError,
    PluginNotFound,
)
from asset_plugin_host.plugins.sandbox import ENTRY_SCRIPT, PluginSession

__all__ = [
    "ENTRY_SCRIPT",
    "PluginDisabled",
    "PluginError",
    "PluginInterpreterError",
    "PluginIOError",
    "PluginLoadError",
    "PluginNotFound",
    "PluginSession",
]
