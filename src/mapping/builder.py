"""Build the resource type -> table index from extracted documentation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from src.parsing import utils
from src.parsing.base import DocumentStructure
from src.parsing.structure import (
    HeadingSpan,
    find_resource_type,
    is_navigation_heading,
    parse_markup,
    segment_headings,
    select_content_region,
)
from src.parsing.validation import DiagnosticLog, filter_valid_tables

from .index import MappingIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """Infers a resource type when a section title matches ``pattern``."""

    pattern: re.Pattern[str]
    resource_type: str

    @classmethod
    def of(cls, pattern: str, resource_type: str) -> "KeywordRule":
        return cls(re.compile(pattern, re.IGNORECASE), resource_type)

    def matches(self, title: str) -> bool:
        return bool(self.pattern.search(title))


# Evaluated in order; the first matching rule wins, so specific titles go first.
KEYWORD_RESOURCE_TYPES: tuple[KeywordRule, ...] = (
    KeywordRule.of(r"\bapi management\b", "Microsoft.ApiManagement/service"),
    KeywordRule.of(r"\bapplication gateway", "Microsoft.Network/applicationGateways"),
    KeywordRule.of(r"\bapplication insights\b", "Microsoft.Insights/components"),
    KeywordRule.of(r"\bkey ?vault", "Microsoft.KeyVault/vaults"),
    KeywordRule.of(r"\b(?:aks|kubernetes service)\b", "Microsoft.ContainerService/managedClusters"),
    KeywordRule.of(r"\bcontainer registr", "Microsoft.ContainerRegistry/registries"),
    KeywordRule.of(r"\bcosmos ?db\b", "Microsoft.DocumentDB/databaseAccounts"),
    KeywordRule.of(r"\bsql database", "Microsoft.Sql/servers/databases"),
    KeywordRule.of(r"\bstorage account|\bblob storage\b|^storage$", "Microsoft.Storage/storageAccounts"),
    KeywordRule.of(r"\bevent hubs?\b", "Microsoft.EventHub/namespaces"),
    KeywordRule.of(r"\bservice bus\b", "Microsoft.ServiceBus/namespaces"),
    KeywordRule.of(r"\bevent grid\b", "Microsoft.EventGrid/topics"),
    KeywordRule.of(r"\blogic apps?\b", "Microsoft.Logic/workflows"),
    KeywordRule.of(r"\bfunction apps?\b|\bazure functions\b|\bapp service\b", "Microsoft.Web/sites"),
    KeywordRule.of(r"\bfirewall\b", "Microsoft.Network/azureFirewalls"),
    KeywordRule.of(r"\bfront ?door\b", "Microsoft.Network/frontDoors"),
    KeywordRule.of(r"\bdata factory\b", "Microsoft.DataFactory/factories"),
    KeywordRule.of(r"\bautomation\b", "Microsoft.Automation/automationAccounts"),
    KeywordRule.of(r"\brecovery services\b", "Microsoft.RecoveryServices/vaults"),
    KeywordRule.of(r"\bsignalr\b", "Microsoft.SignalRService/SignalR"),
)

# Hand-curated tables for resource types whose documentation sections have
# historically been unreliable to parse.
KNOWN_TABLE_OVERRIDES: Mapping[str, tuple[str, ...]] = {
    "Microsoft.KeyVault/vaults": ("AZKVAuditLogs", "AZKVPolicyEvaluationDetailsLogs", "AzureDiagnostics"),
    "Microsoft.Storage/storageAccounts": (
        "StorageBlobLogs",
        "StorageFileLogs",
        "StorageQueueLogs",
        "StorageTableLogs",
    ),
    "Microsoft.Network/applicationGateways": ("AGWAccessLogs", "AGWFirewallLogs", "AGWPerformanceLogs"),
    "Microsoft.Network/azureFirewalls": (
        "AZFWApplicationRule",
        "AZFWDnsQuery",
        "AZFWNatRule",
        "AZFWNetworkRule",
        "AZFWThreatIntel",
    ),
    "Microsoft.Web/sites": (
        "AppServiceAppLogs",
        "AppServiceAuditLogs",
        "AppServiceConsoleLogs",
        "AppServiceHTTPLogs",
        "AppServiceIPSecAuditLogs",
        "AppServicePlatformLogs",
    ),
    "Microsoft.ContainerService/managedClusters": ("AKSAudit", "AKSAuditAdmin", "AKSControlPlane"),
    "Microsoft.ApiManagement/service": ("ApiManagementGatewayLogs", "ApiManagementWebSocketConnectionLogs"),
}

_LEADING_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def infer_resource_type(title: str, rules: Sequence[KeywordRule] = KEYWORD_RESOURCE_TYPES) -> str:
    """Return the resource type implied by a section title, or an empty string."""

    for rule in rules:
        if rule.matches(title):
            return rule.resource_type
    return ""


def list_item_table_names(span: HeadingSpan) -> list[str]:
    """Return the table name candidate from each ``<li>`` in ``span``."""

    names: list[str] = []
    for item in span.tags("li"):
        anchor = item.find("a")
        text = utils.clean_html_text(anchor if anchor is not None else item)
        match = _LEADING_IDENTIFIER_PATTERN.match(text)
        names.append(match.group(0) if match else text)
    return names


class MappingBuilder:
    """Collect table candidates per resource type and produce a validated index."""

    def __init__(
        self,
        *,
        diagnostics: DiagnosticLog | None = None,
        overrides: Mapping[str, Iterable[str]] | None = None,
        keyword_rules: Sequence[KeywordRule] = KEYWORD_RESOURCE_TYPES,
    ) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self.overrides = KNOWN_TABLE_OVERRIDES if overrides is None else overrides
        self.keyword_rules = keyword_rules
        self._candidates: dict[str, list[str]] = {}
        self._folded_keys: dict[str, str] = {}

    def add_tables(self, resource_type: str, tables: Iterable[str]) -> None:
        key = self._folded_keys.setdefault(resource_type.lower(), resource_type)
        self._candidates.setdefault(key, []).extend(tables)

    def add_structure(self, structure: DocumentStructure) -> None:
        """Add every provider that established a resource type."""

        for category, provider in structure.providers():
            if not provider.resource_type:
                logger.debug(
                    "Provider %s/%s has no resource type; skipping %s table(s)",
                    category.name,
                    provider.name,
                    len(provider.tables),
                )
                continue
            self.add_tables(provider.resource_type, provider.table_names())

    def add_list_document(self, markup: str) -> int:
        """Add a heading + ``<ul>/<li>`` shaped page; return the sections used."""

        region, _recognised = select_content_region(parse_markup(markup))
        used = 0
        for span in segment_headings(region):
            title = span.text
            if not title or is_navigation_heading(title):
                continue
            names = list_item_table_names(span)
            if not names:
                continue
            resource_type = find_resource_type(span) or infer_resource_type(title, self.keyword_rules)
            if not resource_type:
                logger.debug("Section %r has no resource type; skipping", title)
                continue
            self.add_tables(resource_type, names)
            used += 1
        return used

    def build(self) -> MappingIndex:
        validated: dict[str, list[str]] = {
            resource_type: filter_valid_tables(
                candidates,
                diagnostics=self.diagnostics,
                resource_type=resource_type,
            )
            for resource_type, candidates in self._candidates.items()
        }

        for resource_type, tables in self.overrides.items():
            key = self._folded_keys.get(resource_type.lower(), resource_type)
            if validated.get(key):
                continue
            validated[key] = filter_valid_tables(tables, diagnostics=self.diagnostics, resource_type=key)
            self.diagnostics.add(
                "override-applied",
                f"Using curated tables for {key}",
                resource_type=key,
            )

        index = MappingIndex()
        for resource_type, tables in validated.items():
            if not tables:
                self.diagnostics.add(
                    "resource-type-dropped",
                    f"Dropped {resource_type}: no valid table names",
                    resource_type=resource_type,
                )
                continue
            index.set(resource_type, tables)

        logger.info("Built mapping for %s resource types (%s tables)", len(index), index.table_count())
        return index


def build_mapping(
    structure: DocumentStructure | None,
    *,
    list_documents: Iterable[str] = (),
    diagnostics: DiagnosticLog | None = None,
    overrides: Mapping[str, Iterable[str]] | None = None,
) -> MappingIndex:
    """Build a validated index from a category tree and optional list-shaped pages."""

    builder = MappingBuilder(diagnostics=diagnostics, overrides=overrides)
    if structure is not None:
        builder.add_structure(structure)
    for markup in list_documents:
        builder.add_list_document(markup)
    return builder.build()


__all__ = [
    "KEYWORD_RESOURCE_TYPES",
    "KNOWN_TABLE_OVERRIDES",
    "KeywordRule",
    "MappingBuilder",
    "build_mapping",
    "infer_resource_type",
    "list_item_table_names",
]
