"""Static registry of entity field definitions.

The registry is the single list of fields each entity exposes, with their UI
group, key flag and cross-entity reference configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, assert_never

from fieldflow.domain.model import (
    CANONICAL_ENTITY_ORDER,
    EntityType,
    FieldType,
    ReferenceConfig,
    ReferenceStorage,
    RelationshipType,
)
from fieldflow.domain.model.mapping import FieldRef, Relationship


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldDefinition:
    name: str
    label: str
    description: str
    type: FieldType
    group: str
    is_key: bool = False
    reference: ReferenceConfig | None = None


type FieldRegistry = dict[EntityType, tuple[FieldDefinition, ...]]


def _field(
    name: str,
    label: str,
    description: str,
    type_: FieldType,
    group: str,
    *,
    is_key: bool = False,
) -> FieldDefinition:
    return FieldDefinition(
        name=name,
        label=label,
        description=description,
        type=type_,
        group=group,
        is_key=is_key,
    )


def _staff_assignment(name: str, label: str, role: str) -> FieldDefinition:
    return FieldDefinition(
        name=name,
        label=label,
        description=f"Assigned {label}",
        type=FieldType.REFERENCE,
        group="Staff Assignments",
        reference=ReferenceConfig(
            entity=EntityType.STAFF,
            match_field="full_name",
            storage=ReferenceStorage.JUNCTION,
            junction_table="partner_assignments",
            junction_role=role,
        ),
    )


PARTNER_FIELDS: Final[tuple[FieldDefinition, ...]] = (
    _field("brand_name", "Brand Name", "The brand/company name", FieldType.TEXT, "Core Info",
           is_key=True),
    _field("status", "Status", "Active, Churned, Onboarding, etc.", FieldType.TEXT, "Core Info"),
    _field("tier", "Tier", "Service tier level", FieldType.TEXT, "Core Info"),
    _field("notes", "Notes", "General notes about the partner", FieldType.TEXT, "Core Info"),
    _field("client_name", "Client Name", "Primary contact person name", FieldType.TEXT,
           "Contact"),
    _field("client_email", "Client Email", "Primary contact email address", FieldType.TEXT,
           "Contact"),
    _field("client_phone", "Client Phone", "Primary contact phone number", FieldType.TEXT,
           "Contact"),
    _field("base_fee", "Base Fee", "Monthly base fee amount", FieldType.NUMBER, "Financial"),
    _field("commission_rate", "Commission Rate", "Commission percentage", FieldType.NUMBER,
           "Financial"),
    _field("billing_day", "Billing Day", "Day of month for billing", FieldType.NUMBER,
           "Financial"),
    _field("onboarding_date", "Onboarding Date", "When onboarding started", FieldType.DATE,
           "Dates"),
    _field("contract_start_date", "Contract Start", "Contract start date", FieldType.DATE,
           "Dates"),
    _field("contract_end_date", "Contract End", "Contract end date", FieldType.DATE, "Dates"),
    _field("churned_date", "Churned Date", "Date partner churned", FieldType.DATE, "Dates"),
    _field("parent_asin_count", "Parent ASIN Count", "Number of parent ASINs",
           FieldType.NUMBER, "Metrics"),
    _field("child_asin_count", "Child ASIN Count", "Number of child ASINs", FieldType.NUMBER,
           "Metrics"),
    _staff_assignment("pod_leader_id", "POD Leader", "pod_leader"),
    _staff_assignment("account_manager_id", "Account Manager", "account_manager"),
    _staff_assignment("brand_manager_id", "Brand Manager", "brand_manager"),
    _staff_assignment("sales_rep_id", "Sales Rep", "sales_rep"),
    _staff_assignment("ppc_specialist_id", "PPC Specialist", "ppc_specialist"),
)

STAFF_FIELDS: Final[tuple[FieldDefinition, ...]] = (
    _field("full_name", "Full Name", "Staff member full name", FieldType.TEXT, "Core Info",
           is_key=True),
    _field("email", "Email", "Work email address", FieldType.TEXT, "Contact"),
    _field("phone", "Phone", "Phone number", FieldType.TEXT, "Contact"),
    _field("slack_id", "Slack ID", "Slack username or ID", FieldType.TEXT, "Contact"),
    _field("role", "Role", "Job role", FieldType.TEXT, "Status & Role"),
    _field("department", "Department", "Team or department", FieldType.TEXT, "Status & Role"),
    _field("title", "Title", "Job title", FieldType.TEXT, "Status & Role"),
    _field("status", "Status", "Active, On Leave, Departed, etc.", FieldType.TEXT,
           "Status & Role"),
    _field("max_clients", "Max Clients", "Maximum client capacity", FieldType.NUMBER,
           "Metrics"),
    _field("current_client_count", "Current Client Count", "Currently assigned clients",
           FieldType.NUMBER, "Metrics"),
    _field("services", "Services", "Services offered", FieldType.ARRAY, "Metrics"),
    _field("hire_date", "Hire Date", "Employment start date", FieldType.DATE, "Dates"),
    _field("probation_end_date", "Probation End", "End of probation period", FieldType.DATE,
           "Dates"),
    _field("departure_date", "Departure Date", "Employment end date", FieldType.DATE, "Dates"),
    _field("dashboard_url", "Dashboard URL", "Link to staff dashboard", FieldType.TEXT,
           "Links"),
    _field("calendly_url", "Calendly URL", "Calendly scheduling link", FieldType.TEXT, "Links"),
    FieldDefinition(
        name="manager_id",
        label="Manager",
        description="Direct manager (another staff member)",
        type=FieldType.REFERENCE,
        group="Staff Assignments",
        reference=ReferenceConfig(
            entity=EntityType.STAFF,
            match_field="full_name",
            storage=ReferenceStorage.DIRECT,
        ),
    ),
)

ASIN_FIELDS: Final[tuple[FieldDefinition, ...]] = (
    _field("asin_code", "ASIN Code", "Amazon Standard Identification Number", FieldType.TEXT,
           "Core Info", is_key=True),
    _field("title", "Title", "Product title", FieldType.TEXT, "Core Info"),
    _field("sku", "SKU", "Stock Keeping Unit", FieldType.TEXT, "Core Info"),
    _field("category", "Category", "Product category", FieldType.TEXT, "Core Info"),
    _field("status", "Status", "Active, Suppressed, etc.", FieldType.TEXT, "Core Info"),
    FieldDefinition(
        name="brand_name",
        label="Brand Name",
        description="Partner brand this ASIN belongs to",
        type=FieldType.REFERENCE,
        group="Core Info",
        reference=ReferenceConfig(
            entity=EntityType.PARTNER,
            match_field="brand_name",
            storage=ReferenceStorage.DIRECT,
        ),
    ),
    _field("parent_asin", "Parent ASIN", "Parent product ASIN code", FieldType.TEXT,
           "Product Info"),
    _field("is_parent", "Is Parent", "Whether this is a parent ASIN", FieldType.BOOLEAN,
           "Product Info"),
    _field("cogs", "COGS", "Cost of goods sold", FieldType.NUMBER, "Financial"),
    _field("price", "Price", "Selling price", FieldType.NUMBER, "Financial"),
)


def default_registry() -> FieldRegistry:
    return {
        EntityType.PARTNER: PARTNER_FIELDS,
        EntityType.STAFF: STAFF_FIELDS,
        EntityType.ASIN: ASIN_FIELDS,
    }


def registry_relationships(registry: FieldRegistry) -> tuple[Relationship, ...]:
    """Relationships declared by reference fields, in canonical entity order."""

    relationships: list[Relationship] = []
    for entity_type in CANONICAL_ENTITY_ORDER:
        for definition in registry.get(entity_type, ()):
            reference = definition.reference
            if reference is None:
                continue
            relationships.append(
                Relationship(
                    origin=FieldRef(entity=entity_type, field=definition.name),
                    target=FieldRef(entity=reference.entity, field=reference.match_field),
                    type=_relationship_type(reference.storage),
                    junction_table=reference.junction_table,
                    junction_role=reference.junction_role,
                )
            )
    return tuple(relationships)


def _relationship_type(storage: ReferenceStorage) -> RelationshipType:
    match storage:
        case ReferenceStorage.JUNCTION:
            return RelationshipType.JUNCTION
        case ReferenceStorage.DIRECT:
            return RelationshipType.REFERENCE
        case _:
            assert_never(storage)
