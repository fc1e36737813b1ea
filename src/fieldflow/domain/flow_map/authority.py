"""Authority resolution for (source, entity) pairs.

A source may supply several fields of one entity, each with its own authority.
The per-pair aggregate is a left fold over those field authorities, consumed in
declaration order (groups, fields, then each field's sources). Two fold rules
exist; see ``AuthorityRule``:

- ``FIRST_SEEN``: the first authority seeds the aggregate and any later,
  different authority makes it ``MIXED`` (absorbing).
- ``SEEDED_REFERENCE``: the aggregate starts as ``REFERENCE``; ``REFERENCE``
  contributions leave it untouched and ``SOURCE_OF_TRUTH`` upgrades
  ``REFERENCE`` while keeping ``SOURCE_OF_TRUTH`` and ``MIXED`` as they are.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, assert_never

from fieldflow.domain.model import (
    CANONICAL_ENTITY_ORDER,
    Authority,
    AuthorityAggregate,
    AuthorityRule,
    EntityType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fieldflow.domain.model import EntityNode


type PairKey = tuple[str, EntityType]


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceEntityAuthority:
    """Resolved authority of one source over one entity."""

    source_id: str
    entity_type: EntityType
    authority: AuthorityAggregate
    mapped_field_count: int


@dataclass(slots=True)
class AuthorityResolution:
    """Lookup surface over all resolved (source, entity) pairs."""

    rule: AuthorityRule
    _pairs: dict[PairKey, SourceEntityAuthority] = field(
        default_factory=dict["PairKey", "SourceEntityAuthority"], repr=False
    )

    @property
    def pairs(self) -> tuple[SourceEntityAuthority, ...]:
        return tuple(self._pairs.values())

    def get(self, source_id: str, entity_type: EntityType) -> SourceEntityAuthority | None:
        return self._pairs.get((source_id, entity_type))

    def authority(self, source_id: str, entity_type: EntityType) -> AuthorityAggregate | None:
        pair = self.get(source_id, entity_type)
        return pair.authority if pair is not None else None

    def mapped_field_count(self, source_id: str, entity_type: EntityType) -> int:
        pair = self.get(source_id, entity_type)
        return pair.mapped_field_count if pair is not None else 0

    def for_source(self, source_id: str) -> tuple[SourceEntityAuthority, ...]:
        """Pairs fed by ``source_id`` in canonical entity order."""

        resolved: list[SourceEntityAuthority] = []
        for entity_type in CANONICAL_ENTITY_ORDER:
            pair = self.get(source_id, entity_type)
            if pair is not None:
                resolved.append(pair)
        return tuple(resolved)

    def primary_entity(self, source_id: str) -> EntityType | None:
        """Entity receiving the most mapped fields from ``source_id``.

        Ties go to the entity that comes first in canonical order.
        """

        best: EntityType | None = None
        best_count = 0
        for pair in self.for_source(source_id):
            if pair.mapped_field_count > best_count:
                best = pair.entity_type
                best_count = pair.mapped_field_count
        return best

    def _put(self, pair: SourceEntityAuthority) -> None:
        self._pairs[(pair.source_id, pair.entity_type)] = pair


def fold_authority(
    current: AuthorityAggregate | None,
    incoming: Authority,
    *,
    rule: AuthorityRule,
) -> AuthorityAggregate:
    """Fold one field authority into the running aggregate for a pair.

    ``current`` is ``None`` before the first contribution has been seen.
    """

    match rule:
        case AuthorityRule.FIRST_SEEN:
            observed = _as_aggregate(incoming)
            if current is None or current is observed:
                return observed
            return AuthorityAggregate.MIXED
        case AuthorityRule.SEEDED_REFERENCE:
            seeded = AuthorityAggregate.REFERENCE if current is None else current
            match incoming:
                case Authority.REFERENCE:
                    return seeded
                case Authority.SOURCE_OF_TRUTH:
                    if seeded is AuthorityAggregate.REFERENCE:
                        return AuthorityAggregate.SOURCE_OF_TRUTH
                    return seeded
                case _:
                    assert_never(incoming)
        case _:
            assert_never(rule)


def fold_authorities(
    authorities: Iterable[Authority],
    *,
    rule: AuthorityRule = AuthorityRule.FIRST_SEEN,
) -> AuthorityAggregate | None:
    """Fold a full sequence; ``None`` when the sequence is empty."""

    aggregate: AuthorityAggregate | None = None
    for authority in authorities:
        aggregate = fold_authority(aggregate, authority, rule=rule)
    return aggregate


def resolve_authority(
    entities: Iterable[EntityNode],
    *,
    rule: AuthorityRule = AuthorityRule.FIRST_SEEN,
) -> AuthorityResolution:
    """Resolve authority aggregates and mapped-field counts for every fed pair."""

    aggregates: dict[PairKey, AuthorityAggregate] = {}
    counts: dict[PairKey, int] = {}

    for entity in entities:
        for group in entity.groups:
            for entity_field in group.fields:
                counted: set[str] = set()
                for field_source in entity_field.sources:
                    key = (field_source.source_id, entity.type)
                    aggregates[key] = fold_authority(
                        aggregates.get(key),
                        field_source.authority,
                        rule=rule,
                    )
                    # A field mapped twice by one source (two tabs) still counts once.
                    if field_source.source_id not in counted:
                        counted.add(field_source.source_id)
                        counts[key] = counts.get(key, 0) + 1

    resolution = AuthorityResolution(rule=rule)
    for (source_id, entity_type), aggregate in aggregates.items():
        resolution._put(  # noqa: SLF001
            SourceEntityAuthority(
                source_id=source_id,
                entity_type=entity_type,
                authority=aggregate,
                mapped_field_count=counts[(source_id, entity_type)],
            )
        )
    return resolution


def _as_aggregate(authority: Authority) -> AuthorityAggregate:
    match authority:
        case Authority.SOURCE_OF_TRUTH:
            return AuthorityAggregate.SOURCE_OF_TRUTH
        case Authority.REFERENCE:
            return AuthorityAggregate.REFERENCE
        case _:
            assert_never(authority)
