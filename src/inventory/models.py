"""Data contracts for the cloud resource inventory collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

CATEGORY_TYPES = ("Logs", "Metrics")


class InventoryError(RuntimeError):
    """Raised when an inventory source cannot be read."""


@dataclass(frozen=True)
class Subscription:
    subscription_id: str
    name: str


@dataclass(frozen=True)
class AzureResource:
    resource_id: str
    name: str
    resource_type: str
    resource_group: str


@dataclass(frozen=True)
class DiagnosticCategory:
    name: str
    category_type: str


class ResourceInventory(Protocol):
    """Contract for anything that can enumerate resources and their diagnostic settings."""

    def list_subscriptions(self) -> Sequence[Subscription]:
        ...

    def list_resources(self, subscription_id: str) -> Sequence[AzureResource]:
        ...

    def list_diagnostic_categories(self, resource_id: str) -> Sequence[DiagnosticCategory]:
        ...

    def list_enabled_categories(self, resource_id: str) -> Sequence[str]:
        ...
