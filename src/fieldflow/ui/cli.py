from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from fieldflow.app import (
    enrich_staff,
    flow_graph_from_database,
    flow_graph_from_payload,
    staff_lineage,
)
from fieldflow.config import ConfigurationError, configure_logging
from fieldflow.config.flow_map import FlowMapConfig, get_flow_map_config
from fieldflow.domain.enrichment import parse_source_ref
from fieldflow.domain.model import AuthorityRule, EntityType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

ENTITY_CHOICES = [entity.value for entity in EntityType]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Field lineage flow maps and staff enrichment")
    subparsers = parser.add_subparsers(dest="command", required=True)

    graph = subparsers.add_parser("flow-graph", help="Print the source/entity flow graph as JSON")
    graph.add_argument(
        "--input",
        type=Path,
        help="Flow-map JSON document to render (defaults to the configured database)",
    )
    graph.add_argument(
        "--expand",
        action="append",
        choices=ENTITY_CHOICES,
        default=[],
        help="Entity whose field groups are shown; may be repeated",
    )
    graph.add_argument(
        "--authority-rule",
        choices=[rule.value for rule in AuthorityRule],
        help="Authority fold rule (defaults to FIELDFLOW_AUTHORITY_RULE or first_seen)",
    )

    enrich = subparsers.add_parser(
        "enrich-staff", help="Enrich mapped staff from the directory snapshot"
    )
    enrich.add_argument(
        "--fields",
        nargs="*",
        help="Fields to enrich (avatar_url is always evaluated); defaults to config",
    )
    enrich.add_argument(
        "--sync-run-id",
        type=str,
        help="Identifier stored on every lineage row of this run",
    )

    lineage = subparsers.add_parser("lineage", help="Show the latest lineage per staff field")
    lineage.add_argument("staff_id", type=str, help="Staff member id")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _flow_map_config(args: argparse.Namespace) -> FlowMapConfig:
    config = get_flow_map_config()
    if args.authority_rule is None:
        return config
    return FlowMapConfig(authority_rule=AuthorityRule(args.authority_rule), layout=config.layout)


def _run_flow_graph(args: argparse.Namespace) -> dict[str, Any]:
    expanded = frozenset(EntityType(value) for value in args.expand)
    config = _flow_map_config(args)
    if args.input is not None:
        with args.input.open(encoding="utf-8") as handle:
            raw = json.load(handle)
        graph = flow_graph_from_payload(raw, expanded=expanded, config=config)
    else:
        graph = flow_graph_from_database(expanded=expanded, config=config)
    return graph.to_dict()


def _run_enrich_staff(args: argparse.Namespace) -> dict[str, Any]:
    request = {"fields": args.fields} if args.fields is not None else None
    result = enrich_staff(request=request, sync_run_id=args.sync_run_id)
    return result.to_dict()


def _run_lineage(args: argparse.Namespace) -> dict[str, Any]:
    latest = staff_lineage(_parse_uuid(args.staff_id))
    payload: dict[str, Any] = {}
    for field_name, row in latest.items():
        parts = parse_source_ref(row.source_ref)
        payload[field_name] = {
            "sourceType": row.source_type.value,
            "sourceRef": row.source_ref,
            "sheetName": parts.sheet_name,
            "tabName": parts.tab_name,
            "columnName": parts.column_name,
            "previousValue": row.previous_value,
            "newValue": row.new_value,
            "changedAt": row.changed_at.isoformat(),
            "syncRunId": row.sync_run_id,
        }
    return payload


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        configure_logging()
    except ConfigurationError:
        configure_logging(level=logging.INFO)
        log.exception("Invalid logging configuration")
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "flow-graph":
            output = _run_flow_graph(parsed_args)
        elif parsed_args.command == "enrich-staff":
            output = _run_enrich_staff(parsed_args)
        elif parsed_args.command == "lineage":
            output = _run_lineage(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    sys.stdout.write(json.dumps(output, indent=2) + "\n")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
