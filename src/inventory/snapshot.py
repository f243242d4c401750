"""Inventory backed by a JSON snapshot exported from a resource inventory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from jsonschema import ValidationError, validate

from .models import AzureResource, DiagnosticCategory, InventoryError, Subscription

SNAPSHOT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["subscriptions"],
    "properties": {
        "subscriptions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "resources": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["ResourceId", "Name", "ResourceType"],
                            "properties": {
                                "ResourceId": {"type": "string", "minLength": 1},
                                "Name": {"type": "string"},
                                "ResourceType": {"type": "string"},
                                "ResourceGroup": {"type": "string"},
                                "DiagnosticCategories": {
                                    "type": "array",
                                    "items": {
                                        "type": "object",
                                        "required": ["Name", "CategoryType"],
                                        "properties": {
                                            "Name": {"type": "string"},
                                            "CategoryType": {"enum": ["Logs", "Metrics"]},
                                        },
                                    },
                                },
                                "EnabledCategories": {
                                    "type": "array",
                                    "items": {"type": "string"},
                                },
                            },
                        },
                    },
                },
            },
        }
    },
}


class SnapshotInventory:
    """Serve subscriptions, resources and diagnostic settings from a snapshot mapping."""

    def __init__(self, payload: Mapping[str, Any]) -> None:
        try:
            validate(instance=payload, schema=SNAPSHOT_SCHEMA)
        except ValidationError as exc:
            location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
            raise InventoryError(f"Invalid inventory snapshot at {location}: {exc.message}") from exc

        self._subscriptions: list[Subscription] = []
        self._resources: dict[str, list[AzureResource]] = {}
        self._categories: dict[str, list[DiagnosticCategory]] = {}
        self._enabled: dict[str, list[str]] = {}

        for item in payload["subscriptions"]:
            subscription = Subscription(subscription_id=item["id"], name=item.get("name", ""))
            self._subscriptions.append(subscription)
            resources = self._resources.setdefault(subscription.subscription_id, [])
            for raw in item.get("resources", []):
                resource = AzureResource(
                    resource_id=raw["ResourceId"],
                    name=raw["Name"],
                    resource_type=raw["ResourceType"],
                    resource_group=raw.get("ResourceGroup", ""),
                )
                resources.append(resource)
                self._categories[resource.resource_id] = [
                    DiagnosticCategory(name=entry["Name"], category_type=entry["CategoryType"])
                    for entry in raw.get("DiagnosticCategories", [])
                ]
                self._enabled[resource.resource_id] = list(raw.get("EnabledCategories", []))

    @classmethod
    def from_path(cls, path: Path) -> "SnapshotInventory":
        resolved = Path(path).expanduser()
        if not resolved.exists():
            raise InventoryError(f"Inventory snapshot '{resolved}' does not exist")
        try:
            payload = json.loads(resolved.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise InventoryError(f"Inventory snapshot '{resolved}' is not valid JSON: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise InventoryError("Inventory snapshot must be a JSON object")
        return cls(payload)

    def list_subscriptions(self) -> Sequence[Subscription]:
        return list(self._subscriptions)

    def list_resources(self, subscription_id: str) -> Sequence[AzureResource]:
        return list(self._resources.get(subscription_id, []))

    def list_diagnostic_categories(self, resource_id: str) -> Sequence[DiagnosticCategory]:
        return list(self._categories.get(resource_id, []))

    def list_enabled_categories(self, resource_id: str) -> Sequence[str]:
        return list(self._enabled.get(resource_id, []))


__all__ = ["SNAPSHOT_SCHEMA", "SnapshotInventory"]
