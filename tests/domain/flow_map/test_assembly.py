from __future__ import annotations

from fieldflow.domain.flow_map import assemble_flow_map, default_registry, registry_relationships
from fieldflow.domain.flow_map.registry import FieldDefinition
from fieldflow.domain.model import (
    Authority,
    ColumnCategory,
    ColumnMapping,
    DataSource,
    EntityType,
    FieldType,
    RelationshipType,
    TabMapping,
)

SOURCES = [
    DataSource(id="master", name="Master Client Sheet", type="google_sheet"),
    DataSource(id="hr", name="HR Roster", type="google_sheet"),
]
TABS = [
    TabMapping(
        id="master-clients",
        data_source_id="master",
        tab_name="Clients",
        primary_entity=EntityType.PARTNER,
    ),
    TabMapping(
        id="hr-staff", data_source_id="hr", tab_name="Staff", primary_entity=EntityType.STAFF
    ),
]


def _column(
    tab: str,
    column: str,
    target: str | None,
    *,
    authority: Authority = Authority.SOURCE_OF_TRUTH,
    category: ColumnCategory | None = None,
) -> ColumnMapping:
    return ColumnMapping(
        tab_mapping_id=tab,
        source_column=column,
        authority=authority,
        category=category,
        target_field=target,
    )


def test_assemble_groups_columns_into_registry_fields() -> None:
    columns = [
        _column("master-clients", "Brand", "brand_name"),
        _column("master-clients", "Status", "status", authority=Authority.REFERENCE),
        _column("master-clients", "POD Leader", "full_name", category=ColumnCategory.STAFF),
        _column("hr-staff", "Name", "full_name"),
        _column("hr-staff", "Email", "email"),
    ]

    document = assemble_flow_map(SOURCES, TABS, columns)

    assert [entity.type for entity in document.entities] == [
        EntityType.PARTNER,
        EntityType.STAFF,
        EntityType.ASIN,
    ]
    partner = document.entity(EntityType.PARTNER)
    assert partner is not None
    assert partner.mapped_field_count == 2
    assert [group.name for group in partner.groups][:2] == ["Core Info", "Contact"]
    brand = next(field for field in partner.fields if field.name == "brand_name")
    assert brand.is_key
    assert [(source.source_id, source.tab_name) for source in brand.sources] == [
        ("master", "Clients")
    ]

    staff = document.entity(EntityType.STAFF)
    assert staff is not None
    full_name = next(field for field in staff.fields if field.name == "full_name")
    assert [source.source_id for source in full_name.sources] == ["master", "hr"]


def test_assemble_ignores_skip_weekly_computed_and_unknown_fields() -> None:
    columns = [
        _column("master-clients", "Brand", "brand_name", category=ColumnCategory.SKIP),
        _column("master-clients", "Week 1", "status", category=ColumnCategory.WEEKLY),
        _column("master-clients", "Total", "base_fee", category=ColumnCategory.COMPUTED),
        _column("master-clients", "Mystery", "not_a_field"),
        _column("master-clients", "Blank", None),
    ]

    document = assemble_flow_map(SOURCES, TABS, columns)

    assert document.stats.mapped_fields == 0
    source = document.sources[0]
    assert source.tabs[0].column_count == 5
    # Only SKIP columns and columns without a target count as unmapped in the tab summary.
    assert source.tabs[0].mapped_count == 3


def test_assemble_keeps_source_order_and_computes_stats() -> None:
    document = assemble_flow_map(SOURCES, TABS, [_column("hr-staff", "Name", "full_name")])

    assert [source.id for source in document.sources] == ["master", "hr"]
    registry = default_registry()
    assert document.stats.total_fields == sum(len(fields) for fields in registry.values())
    assert document.stats.mapped_fields == 1
    assert document.stats.total_sources == 2
    assert document.stats.total_tabs == 2


def test_assemble_leaves_out_inactive_sources() -> None:
    legacy = DataSource(id="legacy", name="Legacy Sheet", type="google_sheet", status="inactive")
    legacy_tab = TabMapping(
        id="legacy-clients",
        data_source_id="legacy",
        tab_name="Clients",
        primary_entity=EntityType.PARTNER,
    )
    columns = [
        _column("master-clients", "Brand", "brand_name"),
        _column("legacy-clients", "Brand", "brand_name"),
        _column("legacy-clients", "Tier", "tier"),
    ]

    document = assemble_flow_map([legacy, *SOURCES], [legacy_tab, *TABS], columns)

    assert [source.id for source in document.sources] == ["master", "hr"]
    partner = document.entity(EntityType.PARTNER)
    assert partner is not None
    assert partner.mapped_field_count == 1
    brand = next(field for field in partner.fields if field.name == "brand_name")
    assert [source.source_id for source in brand.sources] == ["master"]
    assert document.stats.total_sources == 2
    assert document.stats.total_tabs == 2


def test_assemble_uses_custom_registry() -> None:
    registry = {
        EntityType.PARTNER: (
            FieldDefinition(
                name="brand_name",
                label="Brand",
                description="Brand",
                type=FieldType.TEXT,
                group="Core",
                is_key=True,
            ),
        )
    }

    document = assemble_flow_map(
        SOURCES, TABS, [_column("master-clients", "Brand", "brand_name")], registry=registry
    )

    partner = document.entity(EntityType.PARTNER)
    staff = document.entity(EntityType.STAFF)
    assert partner is not None
    assert partner.field_count == 1
    assert staff is not None
    assert staff.field_count == 0
    assert document.relationships == ()


def test_registry_relationships_follow_reference_fields() -> None:
    relationships = registry_relationships(default_registry())

    pairs = [
        (relationship.origin.entity, relationship.target.entity, relationship.type)
        for relationship in relationships
    ]
    assert pairs[0] == (EntityType.PARTNER, EntityType.STAFF, RelationshipType.JUNCTION)
    assert (EntityType.STAFF, EntityType.STAFF, RelationshipType.REFERENCE) in pairs
    assert pairs[-1] == (EntityType.ASIN, EntityType.PARTNER, RelationshipType.REFERENCE)
    assert relationships[0].junction_table == "partner_assignments"
    assert relationships[0].junction_role == "pod_leader"
