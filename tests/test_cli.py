import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from asset_plugin_host import cli
from asset_plugin_host.app_container import build_plugin_registry
from asset_plugin_host.config import HostConfig

PLUGIN = """
local p = {name = 'Greeter', version = '0.3.0', description = 'Says hello'}
local started = false
local pings = {}
function p.on_app_started() started = true end
function p.on_ping(data) table.insert(pings, data); log('ping ' .. data) end
function p.was_started() return started end
return p
"""


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.plugins_dir = self.root / "plugins"
        (self.plugins_dir / "greeter").mkdir(parents=True)
        (self.plugins_dir / "greeter" / "init.lua").write_text(PLUGIN, encoding="utf-8")

    def tearDown(self):
        self.tmp.cleanup()

    def _argv(self, *extra):
        return [
            "asset-plugin-host",
            "--config-dir",
            str(self.root),
            "--plugins-dir",
            str(self.plugins_dir),
            *extra,
        ]

    def test_build_plugin_registry_announces_start(self):
        config = HostConfig(plugins_dir=self.plugins_dir, config_dir=self.root, log_level="INFO")
        registry = build_plugin_registry(config)
        self.assertTrue(registry.call("Greeter", "was_started"))
        quiet = build_plugin_registry(config, announce_start=False)
        self.assertFalse(quiet.call("Greeter", "was_started"))

    def test_build_plugin_registry_creates_missing_root(self):
        missing = self.root / "fresh"
        config = HostConfig(plugins_dir=missing, config_dir=self.root, log_level="INFO")
        registry = build_plugin_registry(config)
        self.assertEqual(registry.list(), [])
        self.assertTrue(missing.is_dir())

    def test_list_prints_plugins(self):
        out = io.StringIO()
        with patch("sys.argv", self._argv("--list")), redirect_stdout(out):
            cli.main()
        text = out.getvalue()
        self.assertIn("Greeter v0.3.0 [enabled]", text)
        self.assertIn("Says hello", text)

    def test_emit_broadcasts_custom_event(self):
        out = io.StringIO()
        with patch("sys.argv", self._argv("--emit", "ping", "--data", '"hi"')), redirect_stdout(out):
            with self.assertLogs("asset_plugin_host.plugins.guest", level="INFO") as cm:
                cli.main()
        self.assertTrue(any('ping \\"hi\\"' in line for line in cm.output))

    def test_emit_rejects_invalid_event(self):
        with patch("sys.argv", self._argv("--emit", "bad name")):
            with self.assertRaises(SystemExit) as ctx:
                cli.main()
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
