"""Sandboxed Lua session hosting a single plugin.

A session owns one ``LuaRuntime``. Capabilities that reach the filesystem,
the process or arbitrary code loading are removed before any plugin code
runs, and only two host functions are exposed to the guest: ``log`` and
``print``. There is no instruction or memory quota: a plugin that loops
forever blocks the calling thread.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from lupa import LuaRuntime, lua_type

from asset_plugin_host.domain.plugins import DEFAULT_PLUGIN_NAME, DEFAULT_PLUGIN_VERSION, PluginDescriptor
from asset_plugin_host.observability.structured_log import log_json
from asset_plugin_host.plugins.errors import (
    PluginDisabled,
    PluginError,
    PluginInterpreterError,
    PluginIOError,
    PluginLoadError,
    PluginNotFound,
)

ENTRY_SCRIPT = "init.lua"

STRIPPED_GLOBALS = (
    "os",
    "io",
    "loadfile",
    "dofile",
    "load",
    "loadstring",
    "require",
    "package",
    "debug",
    "collectgarbage",
    "python",
)

MAX_CONVERT_DEPTH = 32

logger = logging.getLogger(__name__)
guest_logger = logging.getLogger("asset_plugin_host.plugins.guest")


def _deny_attribute_access(obj: Any, attr_name: Any, is_setting: bool) -> Any:
    raise AttributeError(f"access to attribute {attr_name!r} is not permitted")


class PluginSession:
    def __init__(self) -> None:
        self._label = ""
        self._plugin_table: Any = None
        self._rawget: Any = None
        try:
            self._lua: Optional[LuaRuntime] = LuaRuntime(
                register_eval=False,
                register_builtins=False,
                attribute_filter=_deny_attribute_access,
            )
            self._install_sandbox(self._lua)
        except Exception as exc:
            raise PluginInterpreterError(f"Failed to create Lua runtime: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self._lua is None

    def _install_sandbox(self, lua: LuaRuntime) -> None:
        globals_ = lua.globals()
        for name in STRIPPED_GLOBALS:
            globals_[name] = None
        globals_["log"] = self._guest_log
        globals_["print"] = self._guest_print
        self._rawget = lua.eval("rawget")
        # _G keeps a locked metatable: global reads never reach guest metamethods.
        lua.execute("setmetatable(_G, {__metatable = false})")

    def _guest_log(self, message: Any = None) -> None:
        text = message if isinstance(message, str) else _describe(message)
        log_json(guest_logger, "plugin.log", plugin=self._label, message=text)

    def _guest_print(self, *args: Any) -> None:
        text = "\t".join(_describe(a) for a in args)
        log_json(guest_logger, "plugin.print", level=logging.DEBUG, plugin=self._label, message=text)

    def load(self, plugin_dir: Path) -> PluginDescriptor:
        """Evaluate ``init.lua`` from ``plugin_dir`` and snapshot its metadata.

        Missing or mistyped metadata fields fall back to defaults; only a
        missing entry script, an evaluation failure or a non-table result
        are errors.
        """
        lua = self._require_runtime()
        plugin_dir = Path(plugin_dir)
        entry = plugin_dir / ENTRY_SCRIPT
        if not entry.is_file():
            raise PluginNotFound(f"{ENTRY_SCRIPT} not found in {plugin_dir}")
        try:
            code = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PluginIOError(f"Failed to read {entry}: {exc}") from exc

        self._label = plugin_dir.name
        try:
            result = lua.execute(code)
        except Exception as exc:
            raise PluginLoadError(f"Failed to load plugin from {plugin_dir}: {exc}") from exc
        if lua_type(result) != "table":
            kind = lua_type(result) or ("nil" if result is None else type(result).__name__)
            raise PluginLoadError(f"{entry} must return a table (got {kind})")

        self._plugin_table = result
        name = _string_field(result, "name")
        if name is None:
            name = DEFAULT_PLUGIN_NAME
        version = _string_field(result, "version")
        if version is None:
            version = DEFAULT_PLUGIN_VERSION
        self._label = name
        logger.debug("Evaluated %s as plugin %s v%s", entry, name, version)
        return PluginDescriptor(
            name=name,
            version=version,
            author=_string_field(result, "author"),
            description=_string_field(result, "description"),
            path=plugin_dir,
            enabled=True,
        )

    def has_function(self, function_name: str) -> bool:
        return self._lua is not None and self._resolve(function_name) is not None

    def call(self, function_name: str, *args: Any) -> Any:
        """Invoke a guest function by name.

        Raises ``PluginNotFound`` when no function of that name exists, which
        callers treat as "hook not implemented".
        """
        lua = self._require_runtime()
        func = self._resolve(function_name)
        if func is None:
            raise PluginNotFound(function_name)
        lua_args = [_to_lua(lua, a) for a in args]
        try:
            result = func(*lua_args)
        except PluginError:
            raise
        except Exception as exc:
            raise PluginInterpreterError(f"{function_name}: {exc}") from exc
        return from_lua(result)

    def close(self) -> None:
        self._plugin_table = None
        self._lua = None

    def _require_runtime(self) -> LuaRuntime:
        if self._lua is None:
            raise PluginDisabled(f"session for {self._label or 'plugin'} is closed")
        return self._lua

    def _resolve(self, function_name: str) -> Any:
        lua = self._require_runtime()
        try:
            candidate = self._rawget(lua.globals(), function_name)
        except Exception:
            candidate = None
        if lua_type(candidate) == "function":
            return candidate
        if self._plugin_table is not None:
            try:
                candidate = self._plugin_table[function_name]
            except Exception:
                return None
            if lua_type(candidate) == "function":
                return candidate
        return None


def _string_field(table: Any, key: str) -> Optional[str]:
    try:
        value = table[key]
    except Exception:
        return None
    return value if isinstance(value, str) else None


def _describe(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return lua_type(value) or "userdata"


def _to_lua(lua: LuaRuntime, value: Any) -> Any:
    if isinstance(value, dict):
        return lua.table_from({k: _to_lua(lua, v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return lua.table_from([_to_lua(lua, v) for v in value])
    return value


def from_lua(value: Any, depth: int = 0) -> Any:
    """Convert a Lua return value into plain Python data.

    Array-like tables (keys 1..n) become lists, other tables dicts. Functions,
    coroutines and host objects are dropped to ``None``.
    """
    kind = lua_type(value)
    if kind is None:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, tuple):
            return [from_lua(v, depth) for v in value]
        return None
    if kind != "table" or depth >= MAX_CONVERT_DEPTH:
        return None
    items = list(value.items())
    keys = [k for k, _ in items]
    if items and all(isinstance(k, int) and not isinstance(k, bool) for k in keys):
        if sorted(keys) == list(range(1, len(keys) + 1)):
            return [from_lua(v, depth + 1) for _, v in sorted(items, key=lambda kv: kv[0])]
    out = {}
    for k, v in items:
        key = k if isinstance(k, (str, int, float, bool)) else _describe(k)
        out[key] = from_lua(v, depth + 1)
    return out
