"""Tests for building the resource type -> table index."""

from __future__ import annotations

from src.mapping.builder import (
    KNOWN_TABLE_OVERRIDES,
    MappingBuilder,
    build_mapping,
    infer_resource_type,
    list_item_table_names,
)
from src.parsing.base import DocumentStructure
from src.parsing.structure import DocumentStructureExtractor, parse_markup, segment_headings
from src.parsing.validation import DiagnosticLog


def _structure(markup: str, source_url: str = "") -> DocumentStructure:
    return DocumentStructureExtractor(source_url=source_url).extract(markup)


def test_build_from_structure_uses_providers_with_resource_types(sample_page, source_url) -> None:
    index = build_mapping(_structure(sample_page, source_url), overrides={})

    assert index.to_dict() == {
        "Microsoft.Databricks/workspaces": ["DatabricksAccounts", "DatabricksClusters", "DatabricksJobs"],
        "Microsoft.KeyVault/vaults": ["AZKVAuditLogs", "AZKVPolicyEvaluationDetailsLogs", "AzureDiagnostics"],
        "microsoft.storage/storageaccounts": ["StorageBlobLogs", "StorageFileLogs", "StorageQueueLogs"],
    }


def test_invalid_tables_dropped_and_empty_types_removed() -> None:
    markup = """
    <h2>Misc</h2>
    <h3>Broken</h3>
    <p>Microsoft.Broken/things</p>
    <a href="tables/ab">AB</a>
    <a href="tables/num">12345</a>
    <h3>Mixed</h3>
    <p>Microsoft.Mixed/things</p>
    <a href="tables/x">X</a>
    <a href="tables/mixedlogs">MixedLogs</a>
    <a href="tables/mixedlogs">MixedLogs</a>
    """
    diagnostics = DiagnosticLog()

    index = build_mapping(_structure(markup), diagnostics=diagnostics, overrides={})

    assert index.to_dict() == {"Microsoft.Mixed/things": ["MixedLogs"]}
    assert diagnostics.counts() == {"invalid-table-name": 3, "resource-type-dropped": 1}


def test_overrides_fill_missing_types_without_replacing_documented_ones(sample_page, source_url) -> None:
    diagnostics = DiagnosticLog()
    overrides = {
        "Microsoft.KeyVault/vaults": ("ShouldNotAppear",),
        "Microsoft.Storage/storageAccounts": ("ShouldNotAppearEither",),
        "Microsoft.Network/applicationGateways": ("AGWAccessLogs", "AB"),
    }

    index = build_mapping(_structure(sample_page, source_url), diagnostics=diagnostics, overrides=overrides)

    assert "ShouldNotAppear" not in index.lookup("Microsoft.KeyVault/vaults")
    assert "ShouldNotAppearEither" not in index.lookup("Microsoft.Storage/storageAccounts")
    assert index.get("Microsoft.Network/applicationGateways") == ("AGWAccessLogs",)
    assert [record.context["resource_type"] for record in diagnostics.of("override-applied")] == [
        "Microsoft.Network/applicationGateways"
    ]


def test_override_replaces_entry_with_no_valid_tables() -> None:
    builder = MappingBuilder(overrides={"Microsoft.KeyVault/vaults": ("AzureDiagnostics",)})
    builder.add_tables("Microsoft.KeyVault/vaults", ["AB", "42"])

    index = builder.build()

    assert index.get("Microsoft.KeyVault/vaults") == ("AzureDiagnostics",)


def test_default_overrides_are_valid() -> None:
    index = build_mapping(None)

    for resource_type, tables in KNOWN_TABLE_OVERRIDES.items():
        assert index.get(resource_type) == tuple(sorted(tables))


def test_list_document_infers_resource_types_from_titles(list_page) -> None:
    diagnostics = DiagnosticLog()
    builder = MappingBuilder(diagnostics=diagnostics, overrides={})

    used = builder.add_list_document(list_page)
    index = builder.build()

    assert used == 2
    assert index.to_dict() == {
        "Microsoft.ApiManagement/service": [
            "ApiManagementGatewayLogs",
            "ApiManagementWebSocketConnectionLogs",
        ],
        "Microsoft.RecoveryServices/vaults": ["AddonAzureBackupJobs"],
    }
    assert diagnostics.counts() == {"invalid-table-name": 1}


def test_structure_and_list_documents_merge(sample_page, source_url, list_page) -> None:
    index = build_mapping(
        _structure(sample_page, source_url),
        list_documents=[list_page],
        overrides={},
    )

    assert "Microsoft.Databricks/workspaces" in index
    assert "Microsoft.ApiManagement/service" in index


def test_infer_resource_type_uses_first_matching_rule() -> None:
    assert infer_resource_type("API Management") == "Microsoft.ApiManagement/service"
    assert infer_resource_type("Azure Key Vault") == "Microsoft.KeyVault/vaults"
    assert infer_resource_type("Azure Kubernetes Service (AKS)") == "Microsoft.ContainerService/managedClusters"
    assert infer_resource_type("Something unrelated") == ""


def test_list_item_table_names_prefers_anchor_text() -> None:
    markup = "<h2>Application Insights</h2><ul><li><a href='x'>AppTraces</a> trace data</li><li>AppEvents - events</li><li></li></ul>"
    span = segment_headings(parse_markup(markup))[0]

    assert list_item_table_names(span) == ["AppTraces", "AppEvents", ""]
