#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

from asset_plugin_host.plugins.errors import PluginError
from asset_plugin_host.plugins.sandbox import PluginSession

KNOWN_HOOKS = (
    "on_load",
    "on_unload",
    "on_app_started",
    "on_app_closing",
    "on_asset_created",
    "on_asset_updated",
    "on_asset_deleted",
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Load a Lua plugin directory in a sandbox and report it")
    parser.add_argument("plugin_dir", help="Directory containing init.lua")
    args = parser.parse_args()

    try:
        session = PluginSession()
        descriptor = session.load(Path(args.plugin_dir))
    except PluginError as exc:
        print(f"Plugin validation failed: {exc}", file=sys.stderr)
        return 1

    print(f"name: {descriptor.name}")
    print(f"version: {descriptor.version}")
    print(f"author: {descriptor.author or '-'}")
    print(f"description: {descriptor.description or '-'}")
    hooks = [h for h in KNOWN_HOOKS if session.has_function(h)]
    print(f"hooks: {', '.join(hooks) if hooks else '-'}")
    session.close()
    print("Plugin validation passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
