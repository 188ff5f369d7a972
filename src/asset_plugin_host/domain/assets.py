import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class AssetType(str, Enum):
    CASH = "cash"
    BANK_DEPOSIT = "bank_deposit"
    STOCK = "stock"
    FUND = "fund"
    BOND = "bond"
    REAL_ESTATE = "real_estate"
    VEHICLE = "vehicle"
    CRYPTO = "crypto"
    PRECIOUS_METAL = "precious_metal"


class Currency(str, Enum):
    CNY = "CNY"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    HKD = "HKD"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Asset:
    """Asset record as handed over by the storage layer.

    ``asset_type`` and ``currency`` accept a plain string for kinds outside
    the known enums; those are encoded as the "other" variant.
    """

    name: str
    asset_type: Union[AssetType, str]
    value: float
    currency: Union[Currency, str] = Currency.CNY
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


def asset_to_dict(asset: Asset) -> Dict[str, Any]:
    return {
        "id": str(asset.id),
        "name": asset.name,
        "asset_type": _encode_asset_type(asset.asset_type),
        "value": float(asset.value),
        "currency": _encode_currency(asset.currency),
        "description": asset.description,
        "tags": [str(t) for t in asset.tags],
        "metadata": dict(asset.metadata or {}),
        "created_at": _encode_ts(asset.created_at),
        "updated_at": _encode_ts(asset.updated_at),
    }


def _encode_asset_type(value: Union[AssetType, str]) -> Any:
    if isinstance(value, AssetType):
        return value.value
    try:
        return AssetType(str(value)).value
    except ValueError:
        return {"other": str(value)}


def _encode_currency(value: Union[Currency, str]) -> Any:
    if isinstance(value, Currency):
        return value.value
    try:
        return Currency(str(value)).value
    except ValueError:
        return {"Other": str(value)}


def _encode_ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
