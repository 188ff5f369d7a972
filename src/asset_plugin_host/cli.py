import argparse
import json
import logging
import os
import sys
from pathlib import Path

from asset_plugin_host.app_container import build_plugin_registry
from asset_plugin_host.config import DEFAULT_CONFIG_DIR, load_config
from asset_plugin_host.domain.events import CustomEvent


def _configure_logging(level: str) -> None:
    level = (level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_plugins(registry) -> None:
    plugins = sorted(registry.list(), key=lambda d: d.name)
    if not plugins:
        print(f"No plugins found in {registry.plugins_dir}")
        return
    for p in plugins:
        state = "enabled" if p.enabled else "disabled"
        author = f" by {p.author}" if p.author else ""
        print(f"{p.name} v{p.version}{author} [{state}] {p.path}")
        if p.description:
            print(f"    {p.description}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Asset manager Lua plugin host")
    parser.add_argument(
        "--config-dir",
        default=str(DEFAULT_CONFIG_DIR),
        help="Directory holding the .env config (default: ~/.config/asset-plugin-host)",
    )
    parser.add_argument("--plugins-dir", default=None, help="Plugin root directory (overrides PLUGINS_DIR)")
    parser.add_argument("--list", action="store_true", help="List loaded plugins")
    parser.add_argument("--emit", default="", help="Broadcast a custom event with this name")
    parser.add_argument("--data", default="null", help="JSON payload for --emit")
    parser.add_argument("--control-center", action="store_true", help="Serve the plugin HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="Control Center bind host")
    parser.add_argument("--port", type=int, default=8766, help="Control Center bind port")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", ""))

    args = parser.parse_args()
    config = load_config(Path(args.config_dir), plugins_dir=args.plugins_dir)
    log_level = args.log_level or config.log_level
    _configure_logging(log_level)

    registry = build_plugin_registry(config)

    if args.control_center:
        from asset_plugin_host.control_center.app import create_app
        import uvicorn

        app = create_app(registry)
        try:
            uvicorn.run(app, host=args.host, port=args.port, log_level=log_level.lower())
        finally:
            registry.shutdown()
        return

    if args.emit:
        try:
            data = json.loads(args.data)
            event = CustomEvent(name=args.emit, data=data)
        except ValueError as exc:
            print(f"Invalid event: {exc}", file=sys.stderr)
            registry.shutdown()
            sys.exit(2)
        registry.broadcast(event)

    if args.list or not args.emit:
        _print_plugins(registry)

    registry.shutdown()


if __name__ == "__main__":
    main()
