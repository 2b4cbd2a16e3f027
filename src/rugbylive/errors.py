"""
Error taxonomy for catalog reconciliation.

Only whole-run problems (a provider that cannot be reached at all, a storage
layer that cannot be read) are allowed to abort an import. Everything else is
caught per record by the ingestion services and turned into a Failure entry
on the run report.

Matching ambiguity is never raised: TeamMatcher and LeagueMatcher return an
explicit no-match value and the caller records it.
"""

from dataclasses import dataclass
from typing import Any, Optional


class ReconciliationError(Exception):
    """Base class for all reconciliation errors."""

    kind = "error"


class NotFound(ReconciliationError):
    """Entity absent from the store. Expected; triggers the creation path."""

    kind = "not_found"


class AmbiguousMatch(ReconciliationError):
    """A strict-match name that could not be resolved through the nickname table."""

    kind = "ambiguous"


class ProviderUnavailable(ReconciliationError):
    """A provider could not be reached after all retry attempts."""

    kind = "provider_unavailable"

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} unavailable: {reason}")


class MappingConflict(ReconciliationError):
    """A cross-reference write replaced a different internal id."""

    kind = "mapping_conflict"

    def __init__(
        self,
        provider: str,
        provider_id: str,
        entity_type: str,
        existing_id: str,
        new_id: str,
    ):
        self.provider = provider
        self.provider_id = provider_id
        self.entity_type = entity_type
        self.existing_id = existing_id
        self.new_id = new_id
        super().__init__(
            f"{provider}:{entity_type}:{provider_id} was mapped to {existing_id}, now {new_id}"
        )


class ValidationGap(ReconciliationError):
    """A record is missing something required (e.g. a country on a team)."""

    kind = "validation_gap"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


@dataclass
class Failure:
    """One record that could not be reconciled during a run."""

    entity_type: str
    provider: str
    name: str
    kind: str
    reason: str
    provider_id: Optional[str] = None

    @classmethod
    def from_error(
        cls,
        error: Exception,
        entity_type: str,
        provider: str,
        name: str,
        provider_id: Optional[str] = None,
    ) -> "Failure":
        kind = getattr(error, "kind", "storage_error")
        return cls(
            entity_type=entity_type,
            provider=provider,
            name=name,
            kind=kind,
            reason=str(error),
            provider_id=provider_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "provider": self.provider,
            "provider_id": self.provider_id,
            "name": self.name,
            "kind": self.kind,
            "reason": self.reason,
        }
