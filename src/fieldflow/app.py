"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from fieldflow.adapters.flow_map import parse_flow_map
from fieldflow.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    SqlAlchemyFlowMapUnitOfWork,
    is_started,
    startup,
)
from fieldflow.config.enrichment import get_enrichment_config
from fieldflow.config.flow_map import FlowMapConfig, get_flow_map_config
from fieldflow.domain.enrichment import (
    enrich_staff_from_directory,
    latest_lineage_by_field,
    parse_field_selection,
)
from fieldflow.domain.flow_map import assemble_flow_map, build_flow_graph
from fieldflow.domain.model import EntityType
from fieldflow.domain.ports import EnrichmentUnitOfWork, FlowMapUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Collection
    from uuid import UUID

    from fieldflow.domain.enrichment import EnrichmentRunResult
    from fieldflow.domain.flow_map import FieldRegistry, FlowGraphCache
    from fieldflow.domain.model import EnrichmentChange, FlowGraph, FlowMapDocument

FlowMapUnitOfWorkFactory = Callable[[], FlowMapUnitOfWork]
EnrichmentUnitOfWorkFactory = Callable[[], EnrichmentUnitOfWork]

log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def load_flow_map_document(
    *,
    unit_of_work_factory: FlowMapUnitOfWorkFactory | None = None,
    registry: FieldRegistry | None = None,
) -> FlowMapDocument:
    """Fetch sources, tabs and columns in three batched reads and assemble the document."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyFlowMapUnitOfWork
    with effective_uow() as uow:
        repository = uow.repositories.flow_map
        sources = list(repository.list_sources())
        tabs = list(repository.list_tabs([source.id for source in sources]))
        columns = list(repository.list_columns([tab.id for tab in tabs]))
    log.debug(
        "Loaded flow-map configuration: %s sources, %s tabs, %s columns",
        len(sources),
        len(tabs),
        len(columns),
    )
    return assemble_flow_map(sources, tabs, columns, registry=registry)


def render_flow_graph(
    document: FlowMapDocument,
    *,
    expanded: Collection[EntityType] = frozenset(),
    config: FlowMapConfig | None = None,
    cache: FlowGraphCache | None = None,
) -> FlowGraph:
    effective_config = config or get_flow_map_config()
    if cache is not None:
        return cache.get_or_build(
            document,
            expanded=expanded,
            rule=effective_config.authority_rule,
            layout=effective_config.layout,
        )
    return build_flow_graph(
        document,
        expanded=expanded,
        rule=effective_config.authority_rule,
        layout=effective_config.layout,
    )


def flow_graph_from_database(
    *,
    expanded: Collection[EntityType] = frozenset(),
    config: FlowMapConfig | None = None,
    cache: FlowGraphCache | None = None,
    unit_of_work_factory: FlowMapUnitOfWorkFactory | None = None,
) -> FlowGraph:
    document = load_flow_map_document(unit_of_work_factory=unit_of_work_factory)
    return render_flow_graph(document, expanded=expanded, config=config, cache=cache)


def flow_graph_from_payload(
    raw: object,
    *,
    expanded: Collection[EntityType] = frozenset(),
    config: FlowMapConfig | None = None,
    cache: FlowGraphCache | None = None,
) -> FlowGraph:
    """Build the graph from an already decoded JSON flow-map document."""

    document = parse_flow_map(raw)
    return render_flow_graph(document, expanded=expanded, config=config, cache=cache)


def enrich_staff(
    *,
    request: object | None = None,
    unit_of_work_factory: EnrichmentUnitOfWorkFactory | None = None,
    sync_run_id: str | None = None,
) -> EnrichmentRunResult:
    """Enrich mapped staff from the directory snapshot.

    ``request`` is the decoded selection request (``{"fields": [...]}``). A
    missing or malformed request falls back to the configured default selection.
    """

    default_selection = get_enrichment_config().default_selection
    selection = default_selection
    if request is not None:
        parsed = parse_field_selection(request)
        if parsed.error is not None:
            log.warning("Ignoring field selection (%s); using defaults", parsed.error)
        selection = parsed.unwrap_or(default_selection)

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyEnrichmentUnitOfWork
    log.info("Starting staff enrichment: fields=%s", ",".join(selection.as_list()) or "-")
    return enrich_staff_from_directory(
        unit_of_work_factory=effective_uow,
        selection=selection,
        sync_run_id=sync_run_id,
    )


def staff_lineage(
    staff_id: UUID,
    *,
    unit_of_work_factory: EnrichmentUnitOfWorkFactory | None = None,
) -> dict[str, EnrichmentChange]:
    """Most recent lineage row per field of one staff member."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyEnrichmentUnitOfWork
    with effective_uow() as uow:
        rows = uow.repositories.lineage.list_for_entity(EntityType.STAFF, staff_id)
    return latest_lineage_by_field(rows)
