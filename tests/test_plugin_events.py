import json
import unittest
import uuid
from datetime import datetime, timezone

from asset_plugin_host.domain.assets import Asset, AssetType, Currency, asset_to_dict
from asset_plugin_host.domain.events import (
    AppClosing,
    AppStarted,
    AssetCreated,
    AssetDeleted,
    AssetUpdated,
    CustomEvent,
)


def _asset(**overrides) -> Asset:
    data = dict(
        name="Flat",
        asset_type=AssetType.REAL_ESTATE,
        value=500000,
        currency=Currency.EUR,
        tags=["home"],
        metadata={"rooms": 3},
        id=uuid.UUID("12345678-1234-5678-1234-567812345678"),
        created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        updated_at=datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return Asset(**data)


class TestAssetEncoding(unittest.TestCase):
    def test_known_kinds_encode_as_tags(self):
        encoded = asset_to_dict(_asset())
        self.assertEqual(encoded["id"], "12345678-1234-5678-1234-567812345678")
        self.assertEqual(encoded["asset_type"], "real_estate")
        self.assertEqual(encoded["currency"], "EUR")
        self.assertEqual(encoded["value"], 500000.0)
        self.assertIsNone(encoded["description"])
        self.assertEqual(encoded["created_at"], "2024-01-02T03:04:05Z")
        self.assertEqual(encoded["updated_at"], "2024-02-03T04:05:06Z")

    def test_free_form_kinds_encode_as_other(self):
        encoded = asset_to_dict(_asset(asset_type="art", currency="CHF"))
        self.assertEqual(encoded["asset_type"], {"other": "art"})
        self.assertEqual(encoded["currency"], {"Other": "CHF"})

    def test_plain_strings_matching_known_kinds(self):
        encoded = asset_to_dict(_asset(asset_type="stock", currency="JPY"))
        self.assertEqual(encoded["asset_type"], "stock")
        self.assertEqual(encoded["currency"], "JPY")

    def test_defaults(self):
        asset = Asset(name="Wallet", asset_type=AssetType.CASH, value=10)
        encoded = asset_to_dict(asset)
        self.assertEqual(encoded["currency"], "CNY")
        self.assertEqual(encoded["tags"], [])
        self.assertEqual(encoded["metadata"], {})
        self.assertTrue(encoded["created_at"].endswith("Z"))


class TestEventDispatchTable(unittest.TestCase):
    def test_handler_names(self):
        asset = _asset()
        self.assertEqual(AssetCreated(asset).handler_name, "on_asset_created")
        self.assertEqual(AssetUpdated(asset).handler_name, "on_asset_updated")
        self.assertEqual(AssetDeleted(asset.id).handler_name, "on_asset_deleted")
        self.assertEqual(AppStarted().handler_name, "on_app_started")
        self.assertEqual(AppClosing().handler_name, "on_app_closing")
        self.assertEqual(CustomEvent("backup_done").handler_name, "on_backup_done")

    def test_arguments(self):
        asset = _asset()
        (created,) = AssetCreated(asset).arguments()
        self.assertEqual(json.loads(created), asset_to_dict(asset))
        self.assertEqual(AssetDeleted(asset.id).arguments(), ("12345678-1234-5678-1234-567812345678",))
        self.assertEqual(AppStarted().arguments(), ())
        self.assertEqual(AppClosing().arguments(), ())
        self.assertEqual(CustomEvent("ping", {"n": 1}).arguments(), ('{"n": 1}',))
        self.assertEqual(CustomEvent("ping").arguments(), ("null",))

    def test_custom_event_name_must_be_identifier(self):
        for bad in ("", "with space", "1st", "dash-ed", "on.dot"):
            with self.assertRaises(ValueError):
                CustomEvent(bad)


if __name__ == "__main__":
    unittest.main()
