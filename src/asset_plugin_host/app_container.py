import logging
from typing import List

from asset_plugin_host.config import HostConfig
from asset_plugin_host.domain.events import AppStarted
from asset_plugin_host.domain.plugins import PluginDescriptor
from asset_plugin_host.plugins.errors import PluginError
from asset_plugin_host.services.plugin_registry import PluginRegistry

logger = logging.getLogger(__name__)


def build_plugin_registry(config: HostConfig, announce_start: bool = True) -> PluginRegistry:
    registry = PluginRegistry(plugins_dir=config.plugins_dir)
    try:
        loaded = registry.load_all()
    except PluginError as exc:
        logger.warning("Failed to load plugins: %s", exc)
        loaded = []
    _log_loaded(loaded)
    if announce_start:
        registry.broadcast(AppStarted())
    return registry


def _log_loaded(loaded: List[PluginDescriptor]) -> None:
    for descriptor in sorted(loaded, key=lambda d: d.name):
        logger.info("Plugin available: %s v%s (%s)", descriptor.name, descriptor.version, descriptor.path)
