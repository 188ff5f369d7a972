import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from asset_plugin_host.domain.events import AppClosing, PluginEvent
from asset_plugin_host.domain.plugins import PluginDescriptor
from asset_plugin_host.observability.structured_log import log_json
from asset_plugin_host.plugins.errors import PluginDisabled, PluginError, PluginIOError, PluginNotFound
from asset_plugin_host.plugins.sandbox import PluginSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], PluginSession]


class PluginRegistry:
    """Name-keyed set of loaded plugins and the entry point for event fan-out.

    Every operation runs under one re-entrant lock, so a broadcast never sees
    a half-inserted entry and guest code is never entered concurrently.
    Plugin calls are synchronous and unbounded in time.
    """

    def __init__(self, plugins_dir: Path = Path("plugins"), session_factory: Optional[SessionFactory] = None):
        self._plugins_dir = Path(plugins_dir)
        self._session_factory: SessionFactory = session_factory or PluginSession
        self._plugins: Dict[str, Tuple[PluginDescriptor, PluginSession]] = {}
        self._lock = threading.RLock()

    @property
    def plugins_dir(self) -> Path:
        return self._plugins_dir

    def load_all(self, base_dir: Optional[Path] = None) -> List[PluginDescriptor]:
        root = Path(base_dir) if base_dir is not None else self._plugins_dir
        loaded: List[PluginDescriptor] = []
        with self._lock:
            if not root.exists():
                logger.info("Creating plugins directory: %s", root)
                try:
                    root.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise PluginIOError(f"Failed to create plugins directory {root}: {exc}") from exc
                return loaded
            try:
                entries = sorted(p for p in root.iterdir() if p.is_dir())
            except OSError as exc:
                raise PluginIOError(f"Failed to scan plugins directory {root}: {exc}") from exc
            for path in entries:
                try:
                    loaded.append(self.load_plugin(path))
                except PluginError as exc:
                    logger.warning("Failed to load plugin from %s: %s", path, exc)
            log_json(logger, "plugins.loaded", root=str(root), count=len(loaded))
        return loaded

    def load_plugin(self, plugin_dir: Path) -> PluginDescriptor:
        session = self._session_factory()
        descriptor = session.load(Path(plugin_dir))
        self._run_lifecycle_hook(descriptor.name, session, "on_load")
        with self._lock:
            previous = self._plugins.get(descriptor.name)
            self._plugins[descriptor.name] = (descriptor, session)
            if previous is not None:
                previous[1].close()
        if previous is not None:
            logger.warning(
                "Plugin %s from %s replaced the one loaded from %s",
                descriptor.name,
                descriptor.path,
                previous[0].path,
            )
        log_json(
            logger,
            "plugin.loaded",
            plugin=descriptor.name,
            version=descriptor.version,
            path=str(descriptor.path),
        )
        return descriptor

    def unload_plugin(self, name: str) -> None:
        with self._lock:
            entry = self._plugins.pop(name, None)
            if entry is None:
                raise PluginNotFound(name)
            descriptor, session = entry
            self._run_lifecycle_hook(name, session, "on_unload")
            session.close()
        log_json(logger, "plugin.unloaded", plugin=descriptor.name)

    def list(self) -> List[PluginDescriptor]:
        with self._lock:
            return [descriptor for descriptor, _ in self._plugins.values()]

    def get(self, name: str) -> Optional[PluginDescriptor]:
        with self._lock:
            entry = self._plugins.get(name)
            return entry[0] if entry else None

    def set_enabled(self, name: str, enabled: bool) -> PluginDescriptor:
        with self._lock:
            entry = self._plugins.get(name)
            if entry is None:
                raise PluginNotFound(name)
            descriptor = replace(entry[0], enabled=bool(enabled))
            self._plugins[name] = (descriptor, entry[1])
        log_json(logger, "plugin.enabled" if enabled else "plugin.disabled", plugin=name)
        return descriptor

    def call(self, name: str, function_name: str, *args: Any) -> Any:
        with self._lock:
            entry = self._plugins.get(name)
            if entry is None:
                raise PluginNotFound(name)
            descriptor, session = entry
            if not descriptor.enabled:
                raise PluginDisabled(name)
            return session.call(function_name, *args)

    def broadcast(self, event: PluginEvent) -> None:
        handler = event.handler_name
        args = event.arguments()
        with self._lock:
            for descriptor, session in list(self._plugins.values()):
                if not descriptor.enabled:
                    continue
                try:
                    session.call(handler, *args)
                except PluginNotFound:
                    continue
                except Exception as exc:
                    logger.warning("Plugin %s event error in %s: %s", descriptor.name, handler, exc)

    def shutdown(self) -> None:
        with self._lock:
            self.broadcast(AppClosing())
            for name in list(self._plugins):
                self.unload_plugin(name)

    def _run_lifecycle_hook(self, name: str, session: PluginSession, hook: str) -> None:
        try:
            session.call(hook)
        except PluginNotFound:
            logger.debug("Plugin %s does not define %s", name, hook)
        except Exception as exc:
            logger.warning("Plugin %s %s error: %s", name, hook, exc)
