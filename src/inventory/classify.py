"""Classify every diagnostic category of every resource into a log table."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from src.mapping.resolver import TableResolver

from .models import ResourceInventory, Subscription
from .report import ReportRow

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PacingPolicy:
    """Pauses between inventory calls to stay under upstream throttling limits."""

    resource_delay_seconds: float = 0.0
    category_delay_seconds: float = 0.0


def classify_subscription(
    inventory: ResourceInventory,
    subscription: Subscription,
    resolver: TableResolver,
    *,
    pacing: PacingPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ReportRow]:
    pacing = pacing or PacingPolicy()
    rows: list[ReportRow] = []

    resources = inventory.list_resources(subscription.subscription_id)
    logger.info("Classifying %s resource(s) in %s", len(resources), subscription.name or subscription.subscription_id)

    for position, resource in enumerate(resources):
        if position and pacing.resource_delay_seconds > 0:
            sleep(pacing.resource_delay_seconds)

        categories = inventory.list_diagnostic_categories(resource.resource_id)
        if not categories:
            logger.debug("%s exposes no diagnostic categories", resource.resource_id)
            continue
        if pacing.category_delay_seconds > 0:
            sleep(pacing.category_delay_seconds)
        enabled = set(inventory.list_enabled_categories(resource.resource_id))

        for category in categories:
            result = resolver.resolve(resource.resource_type, category.name, category.category_type)
            rows.append(
                ReportRow(
                    subscription_name=subscription.name,
                    subscription_id=subscription.subscription_id,
                    resource_name=resource.name,
                    resource_type=resource.resource_type,
                    resource_group=resource.resource_group,
                    category_name=category.name,
                    category_type=category.category_type,
                    log_analytics_table=result.display(),
                    enabled=category.name in enabled,
                    resource_id=resource.resource_id,
                )
            )
    return rows


def classify_inventory(
    inventory: ResourceInventory,
    resolver: TableResolver,
    *,
    subscription_ids: Sequence[str] | None = None,
    pacing: PacingPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ReportRow]:
    """Classify the selected subscriptions (all of them when none are named)."""

    wanted = set(subscription_ids or ())
    rows: list[ReportRow] = []
    for subscription in inventory.list_subscriptions():
        if wanted and subscription.subscription_id not in wanted and subscription.name not in wanted:
            continue
        rows.extend(classify_subscription(inventory, subscription, resolver, pacing=pacing, sleep=sleep))
    return rows


__all__ = ["PacingPolicy", "classify_inventory", "classify_subscription"]
