"""CLI commands for documentation extraction, table mapping and classification."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from src.inventory.classify import classify_inventory
from src.inventory.models import InventoryError
from src.inventory.report import write_report
from src.inventory.snapshot import SnapshotInventory
from src.parsing.base import FetchError, ParserError
from src.parsing.storage import StructureStorage
from src.parsing.validation import DiagnosticLog
from src.pipeline.config import ConfigError, TableMapConfig, load_config
from src.pipeline.run import (
    MappingOutcome,
    RunContext,
    create_resolver,
    extract_documentation,
    load_or_build_mapping,
)

# Failures that stop a command from producing a mapping.
_MAPPING_ERRORS = (FetchError, ParserError, FileNotFoundError)


def register_commands(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Add table mapping subcommands to the main CLI parser."""
    _register_structure_command(subparsers)
    _register_mapping_command(subparsers)
    _register_resolve_command(subparsers)
    _register_classify_command(subparsers)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML config (default: config/tablemap.yaml when present).",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        help="Delay in milliseconds after each successful documentation fetch.",
    )


def _add_mapping_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore the mapping cache and rebuild it from the documentation.",
    )
    parser.add_argument(
        "--cache-ttl-hours",
        type=float,
        help="Maximum cache age in hours before it is rebuilt.",
    )
    parser.add_argument(
        "--source",
        help="Documentation URL or saved HTML file (default: configured base URL).",
    )
    parser.add_argument(
        "--structure",
        type=Path,
        help="Build the mapping from a saved structure artifact instead of the documentation page.",
    )


def _single_character(value: str) -> str:
    """argparse type for a one-character delimiter; ``\\t`` stands for a tab."""
    if value == "\\t":
        return "\t"
    if len(value) != 1:
        raise argparse.ArgumentTypeError(f"delimiter must be a single character, got {value!r}")
    return value


def _register_structure_command(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "structure",
        help="Extract the ordered category/provider/table tree to JSON.",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--source",
        help="Documentation URL or saved HTML file (default: configured base URL).",
    )
    parser.add_argument(
        "--category",
        help="Only extract the category with this exact name.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Path for the structure JSON (default: <output_root>/tables-by-category.json).",
    )
    parser.set_defaults(func=structure_cli, command="structure")


def _register_mapping_command(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "mapping",
        help="Build (or load from cache) the resource type to table mapping.",
    )
    _add_common_arguments(parser)
    _add_mapping_arguments(parser)
    parser.add_argument(
        "--output",
        type=Path,
        help="Also write the mapping as JSON to this path.",
    )
    parser.set_defaults(func=mapping_cli, command="mapping")


def _register_resolve_command(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "resolve",
        help="Resolve one diagnostic category to its log table.",
    )
    _add_common_arguments(parser)
    _add_mapping_arguments(parser)
    parser.add_argument("resource_type", help="Resource type, e.g. Microsoft.KeyVault/vaults.")
    parser.add_argument("category_name", help="Diagnostic category name, e.g. AuditEvent.")
    parser.add_argument(
        "--category-type",
        choices=["Logs", "Metrics"],
        default="Logs",
        help="Diagnostic category type (default: Logs).",
    )
    parser.set_defaults(func=resolve_cli, command="resolve")


def _register_classify_command(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "classify",
        help="Classify every diagnostic category in an inventory snapshot.",
    )
    _add_common_arguments(parser)
    _add_mapping_arguments(parser)
    parser.add_argument(
        "--inventory",
        type=Path,
        required=True,
        help="JSON inventory snapshot of subscriptions, resources and diagnostic settings.",
    )
    parser.add_argument(
        "--subscription",
        action="append",
        default=[],
        help="Subscription id or name to include. Repeat for multiple; default is all.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Report path (default: <output_root>/diagnostic-tables.csv).",
    )
    parser.add_argument(
        "--delimiter",
        type=_single_character,
        default=",",
        help="Report field delimiter, one character or \\t for tab (default: ',').",
    )
    parser.set_defaults(func=classify_cli, command="classify")


def structure_cli(args: argparse.Namespace) -> int:
    """Fetch the documentation page and write its structure artifact."""
    context = _build_context(args)
    if context is None:
        return 1

    try:
        structure = extract_documentation(context, args.source, category_filter=args.category)
    except (FetchError, ParserError) as exc:
        print(f"Extraction failed: {exc}", file=sys.stderr)
        _emit_diagnostics(context.diagnostics)
        return 1

    storage = StructureStorage(context.config.output_root)
    path = storage.save(structure, args.output)
    stats = structure.statistics()
    print(
        f"✓ {stats['categories']} categories, {stats['providers']} providers, "
        f"{stats['tables']} tables → {path}"
    )
    if stats["providers_without_resource_type"]:
        print(f"  {stats['providers_without_resource_type']} provider(s) without a resource type")
    _emit_diagnostics(context.diagnostics)
    return 0


def mapping_cli(args: argparse.Namespace) -> int:
    """Build or load the mapping and report where it came from."""
    context = _build_context(args)
    if context is None:
        return 1

    try:
        outcome = _load_mapping(context, args)
    except _MAPPING_ERRORS as exc:
        print(f"Mapping failed: {exc}", file=sys.stderr)
        _emit_diagnostics(context.diagnostics)
        return 1

    index = outcome.index
    print(f"✓ {len(index)} resource types, {index.table_count()} tables ({outcome.source})")
    if outcome.cache_path:
        print(f"  cache → {outcome.cache_path}")
    if args.output:
        output = Path(args.output).expanduser()
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(index.to_dict(), indent=2), encoding="utf-8")
        print(f"  mapping → {output}")
    _emit_diagnostics(context.diagnostics)
    return 0


def resolve_cli(args: argparse.Namespace) -> int:
    """Resolve a single resource type / category pair."""
    context = _build_context(args)
    if context is None:
        return 1

    try:
        outcome = _load_mapping(context, args)
    except _MAPPING_ERRORS as exc:
        print(f"Mapping failed: {exc}", file=sys.stderr)
        _emit_diagnostics(context.diagnostics)
        return 1

    resolver = create_resolver(context, outcome.index)
    result = resolver.resolve(args.resource_type, args.category_name, args.category_type)
    print(result.display())
    _emit_diagnostics(context.diagnostics)
    return 0


def classify_cli(args: argparse.Namespace) -> int:
    """Classify an inventory snapshot and write the report."""
    context = _build_context(args)
    if context is None:
        return 1

    try:
        inventory = SnapshotInventory.from_path(args.inventory)
    except InventoryError as exc:
        print(f"Inventory error: {exc}", file=sys.stderr)
        return 1

    try:
        outcome = _load_mapping(context, args)
    except _MAPPING_ERRORS as exc:
        print(f"Mapping failed: {exc}", file=sys.stderr)
        _emit_diagnostics(context.diagnostics)
        return 1

    resolver = create_resolver(context, outcome.index)
    rows = classify_inventory(
        inventory,
        resolver,
        subscription_ids=args.subscription,
        pacing=context.config.pacing.to_policy(),
    )
    output = args.output or context.config.output_root / "diagnostic-tables.csv"
    count = write_report(rows, output, delimiter=args.delimiter)
    unknown = sum(1 for row in rows if row.log_analytics_table.startswith("Unknown"))
    print(f"✓ {count} row(s) → {output}")
    if unknown:
        print(f"  {unknown} row(s) without a known table")
    _emit_diagnostics(context.diagnostics)
    return 0


def _build_context(args: argparse.Namespace) -> RunContext | None:
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return None
    _apply_overrides(config, args)
    return RunContext.create(config)


def _apply_overrides(config: TableMapConfig, args: argparse.Namespace) -> None:
    if getattr(args, "delay_ms", None) is not None:
        config.fetch.request_delay_ms = max(0, args.delay_ms)
    if getattr(args, "cache_ttl_hours", None) is not None:
        config.cache.ttl_hours = max(0.0, args.cache_ttl_hours)
    if getattr(args, "force_refresh", False):
        config.cache.force_refresh = True


def _load_mapping(context: RunContext, args: argparse.Namespace) -> MappingOutcome:
    structure = None
    if getattr(args, "structure", None) is not None:
        structure = StructureStorage(context.config.output_root).load(args.structure)
    return load_or_build_mapping(context, structure=structure, source=getattr(args, "source", None))


def _emit_diagnostics(diagnostics: DiagnosticLog) -> None:
    if not len(diagnostics):
        return
    print(f"\nDiagnostics ({len(diagnostics)}):", file=sys.stderr)
    for line in diagnostics.summary_lines():
        print(f"  {line}", file=sys.stderr)
