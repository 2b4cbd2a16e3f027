"""
Field-level change tracking and merging.

Every entity type goes through the same routine: compare the tracked fields
of the stored entity with the incoming one, apply what is allowed to change,
and report {field: {"old": ..., "new": ...}} for the audit log. What differs
per type is described by an EntitySpec (key function + field rules) rather
than a separate diff function per entity.

Field rules:
- Values the provider did not supply (None or "") never overwrite.
- List fields with a `combine` function (alt names) are merged, not replaced.
- Image fields carry a source tag. They are only overwritten when the stored
  image is empty or was supplied by the importing provider, so a curated
  logo from one provider is not clobbered by another. The source tag is
  stamped with the importing provider when the image changes.

An empty change map on an existing entity means nothing needs writing, and
merging the same incoming record twice always yields an empty map the
second time.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from rugbylive.entities import COUNTRY, LEAGUE, MATCH, SEASON, TEAM

_NOT_SUPPLIED = (None, "")


def union(old: Optional[list], new: Optional[list]) -> list:
    """Order-preserving union of two lists."""
    combined = list(old or [])
    for value in new or []:
        if value not in combined:
            combined.append(value)
    return combined


@dataclass(frozen=True)
class FieldRule:
    name: str
    source_field: Optional[str] = None
    combine: Optional[Callable[[Any, Any], Any]] = None


@dataclass(frozen=True)
class EntitySpec:
    entity_type: str
    key: Callable[[Any], str]
    fields: tuple[FieldRule, ...]


@dataclass
class MergeResult:
    entity: Any
    changes: dict[str, dict[str, Any]] = field(default_factory=dict)
    is_new: bool = False

    @property
    def needs_write(self) -> bool:
        return self.is_new or bool(self.changes)


def merge(existing: Any, incoming: Any, importing_provider: str, spec: EntitySpec) -> MergeResult:
    """
    Merge an incoming entity into the stored one.

    Args:
        existing: Stored entity, or None if this is the first encounter
        incoming: Entity built from the provider record
        importing_provider: Provider the incoming record came from
        spec: Per-type field rules

    Returns:
        MergeResult with the merged entity (a new object; inputs are not
        mutated), the change map, and whether the entity is new
    """
    if existing is None:
        return MergeResult(entity=incoming, changes={}, is_new=True)

    if spec.key(existing) != spec.key(incoming):
        raise ValueError(
            f"Cannot merge {spec.entity_type} {spec.key(incoming)!r} into {spec.key(existing)!r}"
        )

    updates: dict[str, Any] = {}
    changes: dict[str, dict[str, Any]] = {}

    for rule in spec.fields:
        old = getattr(existing, rule.name)
        new = getattr(incoming, rule.name)

        if rule.combine is not None:
            new = rule.combine(old, new)
        elif new in _NOT_SUPPLIED:
            continue

        if old == new:
            continue

        if rule.source_field is not None:
            source = getattr(existing, rule.source_field)
            if old not in _NOT_SUPPLIED and source != importing_provider:
                continue
            if source != importing_provider:
                updates[rule.source_field] = importing_provider
                changes[rule.source_field] = {"old": source, "new": importing_provider}

        updates[rule.name] = new
        changes[rule.name] = {"old": old, "new": new}

    return MergeResult(entity=dataclasses.replace(existing, **updates), changes=changes)


# =============================================================================
# Per-type specs
# =============================================================================

COUNTRY_SPEC = EntitySpec(
    entity_type=COUNTRY,
    key=lambda c: c.code,
    fields=(
        FieldRule("name"),
        FieldRule("flag_url", source_field="flag_source"),
    ),
)

LEAGUE_SPEC = EntitySpec(
    entity_type=LEAGUE,
    key=lambda league: league.id,
    fields=(
        FieldRule("name"),
        FieldRule("alt_names", combine=union),
        FieldRule("parent_id"),
        FieldRule("successor_id"),
        FieldRule("tier"),
        FieldRule("format"),
        FieldRule("phases"),
        FieldRule("gender"),
        FieldRule("international"),
        FieldRule("logo_url", source_field="logo_source"),
    ),
)

SEASON_SPEC = EntitySpec(
    entity_type=SEASON,
    key=lambda s: s.id,
    fields=(
        FieldRule("year_range"),
        FieldRule("start_date"),
        FieldRule("end_date"),
        FieldRule("current"),
    ),
)

TEAM_SPEC = EntitySpec(
    entity_type=TEAM,
    key=lambda t: t.id,
    fields=(
        FieldRule("name"),
        FieldRule("alt_names", combine=union),
        FieldRule("logo_url", source_field="logo_source"),
    ),
)

MATCH_SPEC = EntitySpec(
    entity_type=MATCH,
    key=lambda m: m.id,
    fields=(
        FieldRule("kick_off"),
        FieldRule("status"),
        FieldRule("home_score"),
        FieldRule("away_score"),
    ),
)

SPECS: dict[str, EntitySpec] = {
    spec.entity_type: spec
    for spec in (COUNTRY_SPEC, LEAGUE_SPEC, SEASON_SPEC, TEAM_SPEC, MATCH_SPEC)
}


def merge_entity(entity_type: str, existing: Any, incoming: Any, importing_provider: str) -> MergeResult:
    """merge() with the spec registered for entity_type."""
    try:
        spec = SPECS[entity_type]
    except KeyError as exc:
        raise KeyError(f"No merge spec for entity type: {entity_type}") from exc
    return merge(existing, incoming, importing_provider, spec)
