from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from fieldflow.domain.flow_map import (
    build_flow_graph,
    entity_node_id,
    group_node_id,
    source_node_id,
)
from fieldflow.domain.model import (
    AuthorityRule,
    EdgeKind,
    EntityType,
    FieldRef,
    NodeKind,
    Relationship,
    RelationshipType,
)
from tests.helpers.flow_map import (
    REF,
    SOT,
    fed_by,
    make_document,
    make_entity,
    make_field,
    make_source,
    relationship,
)

if TYPE_CHECKING:
    from fieldflow.domain.model import FlowMapDocument


def _three_entity_document() -> FlowMapDocument:
    partner = make_entity(
        EntityType.PARTNER,
        {
            "Core Info": [
                make_field("brand_name", fed_by("sheet", SOT)),
                make_field("status", fed_by("sheet", REF)),
            ],
            "Contact": [make_field("client_email", fed_by("form", SOT))],
        },
    )
    staff = make_entity(
        EntityType.STAFF, {"Core Info": [make_field("full_name", fed_by("form", SOT))]}
    )
    asin = make_entity(EntityType.ASIN, {"Core Info": [make_field("asin_code")]})
    return make_document(
        [partner, staff, asin],
        sources=[make_source("form", tabs=2), make_source("sheet")],
        relationships=[
            relationship(EntityType.PARTNER, EntityType.STAFF, RelationshipType.REFERENCE),
            relationship(EntityType.PARTNER, EntityType.STAFF, RelationshipType.JUNCTION),
            relationship(EntityType.STAFF, EntityType.ASIN, RelationshipType.REFERENCE),
        ],
    )


def test_empty_document_builds_empty_graph() -> None:
    graph = build_flow_graph(make_document([]))

    assert graph.is_empty
    assert graph.to_dict() == {"nodes": [], "edges": []}


def test_collapsed_graph_has_sources_and_entities_only() -> None:
    graph = build_flow_graph(_three_entity_document())

    assert [node.id for node in graph.nodes_of(NodeKind.SOURCE)] == [
        source_node_id("form"),
        source_node_id("sheet"),
    ]
    assert [node.id for node in graph.nodes_of(NodeKind.ENTITY)] == [
        entity_node_id(EntityType.PARTNER),
        entity_node_id(EntityType.STAFF),
        entity_node_id(EntityType.ASIN),
    ]
    assert graph.nodes_of(NodeKind.GROUP) == ()


def test_mapping_edges_carry_weight_authority_and_stroke() -> None:
    graph = build_flow_graph(_three_entity_document())

    mapping = {edge.id: edge for edge in graph.edges_of(EdgeKind.MAPPING)}
    assert set(mapping) == {"mapping-form-partner", "mapping-form-staff", "mapping-sheet-partner"}

    sheet_partner = mapping["mapping-sheet-partner"]
    assert sheet_partner.source == source_node_id("sheet")
    assert sheet_partner.target == entity_node_id(EntityType.PARTNER)
    assert sheet_partner.weight == 2
    assert sheet_partner.data["authority"] == "mixed"
    assert sheet_partner.data["strokeWidth"] == 1.5 + 0.3 * 2

    form_staff = mapping["mapping-form-staff"]
    assert form_staff.weight == 1
    assert form_staff.data["authority"] == "source_of_truth"


def test_reference_edges_dedup_unordered_pairs_keeping_first_type() -> None:
    graph = build_flow_graph(_three_entity_document())

    references = graph.edges_of(EdgeKind.REFERENCE)
    assert [(edge.source, edge.target) for edge in references] == [
        (entity_node_id(EntityType.PARTNER), entity_node_id(EntityType.STAFF)),
        (entity_node_id(EntityType.STAFF), entity_node_id(EntityType.ASIN)),
    ]
    assert [edge.data["relationshipType"] for edge in references] == ["reference", "reference"]


def test_reverse_direction_relationship_counts_as_same_pair() -> None:
    document = _three_entity_document()
    reversed_first = make_document(
        document.entities,
        sources=document.sources,
        relationships=[
            relationship(EntityType.STAFF, EntityType.PARTNER, RelationshipType.JUNCTION),
            *document.relationships,
        ],
    )

    references = build_flow_graph(reversed_first).edges_of(EdgeKind.REFERENCE)

    assert len(references) == 2
    assert references[0].id == "ref-staff-partner"
    assert references[0].data["referenceType"] == "junction"


def test_relationship_to_unknown_entity_is_dropped() -> None:
    document = _three_entity_document()
    unknown = Relationship(
        origin=FieldRef(entity=EntityType.PARTNER, field="vendor_id"),
        target=FieldRef(entity="vendor", field="name"),  # type: ignore[arg-type]
        type=RelationshipType.REFERENCE,
    )
    with_unknown = make_document(
        document.entities, sources=document.sources, relationships=[unknown]
    )

    assert build_flow_graph(with_unknown).edges_of(EdgeKind.REFERENCE) == ()


def test_expanded_entity_emits_group_nodes_in_declaration_order() -> None:
    graph = build_flow_graph(_three_entity_document(), expanded={EntityType.PARTNER})

    groups = graph.nodes_of(NodeKind.GROUP)
    assert [node.id for node in groups] == [
        group_node_id(EntityType.PARTNER, "Core Info"),
        group_node_id(EntityType.PARTNER, "Contact"),
    ]
    partner = graph.node(entity_node_id(EntityType.PARTNER))
    assert partner is not None
    assert partner.data["isExpanded"] is True
    assert all(node.parent_id == partner.id for node in groups)
    assert groups[0].data["mappedFieldCount"] == 2
    assert groups[0].position.y > partner.position.y


def test_expansion_moves_lower_entities_down() -> None:
    document = _three_entity_document()

    collapsed = build_flow_graph(document)
    expanded = build_flow_graph(document, expanded={EntityType.PARTNER})

    staff_id = entity_node_id(EntityType.STAFF)
    before = collapsed.node(staff_id)
    after = expanded.node(staff_id)
    assert before is not None
    assert after is not None
    assert after.position.y > before.position.y


def test_source_node_payload_describes_tabs_and_primary_entity() -> None:
    graph = build_flow_graph(_three_entity_document())

    form = graph.node(source_node_id("form"))
    assert form is not None
    payload = form.to_dict()
    assert payload["type"] == "source"
    assert payload["data"]["tabCount"] == 2
    assert payload["data"]["primaryEntity"] == "partner"
    assert [tab["tabName"] for tab in payload["data"]["tabs"]] == ["Tab 0", "Tab 1"]


def test_entity_node_lists_feeding_sources() -> None:
    graph = build_flow_graph(_three_entity_document())

    partner = graph.node(entity_node_id(EntityType.PARTNER))
    assert partner is not None
    assert partner.data["fieldCount"] == 3
    assert partner.data["mappedFieldCount"] == 3
    feeding = {entry["sourceId"]: entry["authority"] for entry in partner.data["sources"]}
    assert feeding == {"sheet": "mixed", "form": "source_of_truth"}


def test_rule_changes_authority_but_not_structure() -> None:
    document = _three_entity_document()

    first_seen = build_flow_graph(document, rule=AuthorityRule.FIRST_SEEN)
    seeded = build_flow_graph(document, rule=AuthorityRule.SEEDED_REFERENCE)

    assert [node.id for node in first_seen.nodes] == [node.id for node in seeded.nodes]
    seeded_edge = seeded.edge("mapping-sheet-partner")
    assert seeded_edge is not None
    assert seeded_edge.data["authority"] == "source_of_truth"


def test_graph_construction_is_deterministic() -> None:
    document = _three_entity_document()

    assert build_flow_graph(document).to_dict() == build_flow_graph(document).to_dict()


def test_document_rejects_repeated_entity_type() -> None:
    first = make_entity(EntityType.STAFF, {"Core Info": [make_field("full_name")]})
    second = make_entity(EntityType.STAFF, {"Contact": [make_field("email")]})

    with pytest.raises(ValueError, match="entity types must be unique"):
        make_document([first, second])
