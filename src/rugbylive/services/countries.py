"""
Country ingestion.

API-Sports is the authoritative country source. Its two-letter codes
("NZ", "GB-ENG") are translated to internal three-letter codes through the
country code table; a country whose code is not in the table is reported
as a ValidationGap rather than being given an invented code.

The three regional buckets (WLD, EUR, OCE) are not real countries and no
provider lists them, so seed_regions() writes them from the static table.
International competitions hang off these.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import COUNTRY, Country
from rugbylive.errors import ReconciliationError, ValidationGap
from rugbylive.providers.base import CountryRecord
from rugbylive.reconcile.names import NameNormalizer
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.services.base import IngestionStats, persist

logger = logging.getLogger(__name__)

STATIC_SOURCE = "static"


def internal_country_code(record: CountryRecord, tables: ReferenceTables = DEFAULT_TABLES) -> str:
    """
    Three-letter internal code for a provider country.

    Raises:
        ValidationGap: the provider code is missing or not mapped
    """
    code = (record.code or "").strip().upper()
    if not code:
        raise ValidationGap(f"country {record.name!r} has no code")
    if code in tables.country_codes:
        return tables.country_codes[code]
    if len(code) == 3 and code in set(tables.country_codes.values()):
        return code
    raise ValidationGap(f"no internal code for country {record.name!r} ({code})")


def seed_regions(
    store: SqlCatalogStore,
    tables: ReferenceTables = DEFAULT_TABLES,
) -> IngestionStats:
    """Create or refresh the WLD/EUR/OCE region rows."""
    stats = IngestionStats(entity_type=COUNTRY, provider=STATIC_SOURCE)
    for code, name in tables.regions.items():
        stats.total += 1
        existing = store.get_by_canonical_id(COUNTRY, code)
        persist(store, COUNTRY, existing, Country(code=code, name=name), STATIC_SOURCE, stats)
    return stats


def ingest_countries(
    store: SqlCatalogStore,
    records: list[CountryRecord],
    provider: str,
    tables: ReferenceTables = DEFAULT_TABLES,
    normalizer: Optional[NameNormalizer] = None,
) -> IngestionStats:
    """
    Upsert provider countries and map their provider ids.

    Args:
        store: Catalog store (caller owns the transaction)
        records: Countries as decoded by the provider client
        provider: Provider name, used for cross-references and flag sources
        tables: Static reference tables

    Returns:
        IngestionStats with counts and per-record failures
    """
    normalizer = normalizer or NameNormalizer(tables)
    stats = IngestionStats(entity_type=COUNTRY, provider=provider)

    for record in records:
        stats.total += 1
        try:
            with store.atomic():
                code = internal_country_code(record, tables)
                incoming = Country(
                    code=code,
                    name=normalizer.normalize_country(record.name),
                    flag_url=record.flag_url,
                    flag_source=provider if record.flag_url else "",
                )
                existing = store.get_by_canonical_id(COUNTRY, code)
                persist(store, COUNTRY, existing, incoming, provider, stats)

                previous = store.upsert_cross_reference(provider, record.provider_id, COUNTRY, code)
                stats.record_conflict(record.provider_id, previous, code)
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.record_failure(e, record.name, record.provider_id)

    logger.info(stats.summary())
    return stats
