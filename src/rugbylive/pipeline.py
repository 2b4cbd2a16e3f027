"""
Staged catalog import.

Runs the ingestion services against a set of provider clients in dependency
order:

    countries -> leagues -> seasons -> teams -> matches

Each stage fetches from every provider that supports it, then ingests the
records in one transaction per provider. Per-record failures end up in the
stage metrics and mark the stage "partial". A provider missing one of its
required fetch options (rugbydatabase competitions without a year) is
skipped for that stage. An unreachable provider fails the stage, as does a
storage error outside the per-record savepoints; the stats of providers
that finished before the failure stay in the stage metrics. A failed stage
stops the run: later stages depend on the cross-references the earlier
ones write.

Usage:
    importer = CatalogImporter({"api_sports": ApiSportsClient()})
    results = await importer.run()
"""

import inspect
import logging
import uuid
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rugbylive.db.session import get_session
from rugbylive.db.store import SqlCatalogStore
from rugbylive.errors import ReconciliationError
from rugbylive.providers.base import LeagueRecord, ProviderClient
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.services import (
    IngestionStats,
    ingest_countries,
    ingest_leagues,
    ingest_matches,
    ingest_seasons,
    ingest_teams,
    seed_regions,
)
from rugbylive.tasks import (
    StageContext,
    StageDefinition,
    StageRegistry,
    StageResult,
    status_from_failures,
)

logger = logging.getLogger(__name__)

# Providers whose unmatched teams are created rather than queued for review
DEFAULT_AUTHORITATIVE = frozenset({"api_sports"})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def supports(client: ProviderClient, method: str) -> bool:
    """True if the client overrides ProviderClient.<method>."""
    return getattr(type(client), method) is not getattr(ProviderClient, method)


async def execute_stage(stage: StageDefinition, ctx: StageContext) -> StageResult:
    outcome = stage.runner(ctx)
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


class CatalogImporter:
    """
    Imports the catalog from a set of provider clients.

    Args:
        clients: Provider name -> client, in the order providers should be
                 consulted within a stage (authoritative provider first)
        session_factory: Callable returning a session context manager that
                         commits on success (db.session.get_session)
        tables: Static reference tables
    """

    def __init__(
        self,
        clients: dict[str, ProviderClient],
        session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
        tables: ReferenceTables = DEFAULT_TABLES,
    ):
        self.clients = clients
        self.session_factory = session_factory
        self.tables = tables
        self._league_records: dict[str, list[LeagueRecord]] = {}

    # =========================================================================
    # Helpers
    # =========================================================================

    def _providers_supporting(self, method: str) -> list[tuple[str, ProviderClient]]:
        return [(name, client) for name, client in self.clients.items() if supports(client, method)]

    def _ready_providers(self, ctx: StageContext, method: str) -> list[tuple[str, ProviderClient]]:
        """Providers supporting a method, minus those missing a required fetch option."""
        ready = []
        for name, client in self._providers_supporting(method):
            options = self._fetch_options(ctx, name)
            missing = [key for key in client.required_options.get(method, ()) if not options.get(key)]
            if missing:
                logger.warning("Skipping %s for %s: missing %s", name, ctx.stage_name, ", ".join(missing))
                continue
            ready.append((name, client))
        return ready

    @staticmethod
    def _fetch_options(ctx: StageContext, provider: str) -> dict[str, Any]:
        return dict((ctx.options.get("provider_options") or {}).get(provider) or {})

    async def _fetch(self, client: ProviderClient, method: str, **kwargs: Any) -> list:
        async with client:
            return await getattr(client, method)(**kwargs)

    def _ingest(self, ingest: Callable[[SqlCatalogStore], IngestionStats]) -> IngestionStats:
        with self.session_factory() as session:
            return ingest(SqlCatalogStore(session, self.tables))

    async def _run_stage(
        self,
        ctx: StageContext,
        body: Callable[[list[IngestionStats]], Awaitable[None]],
    ) -> StageResult:
        started_at = _utc_now()
        stats: list[IngestionStats] = []
        try:
            await body(stats)
        except (ReconciliationError, SQLAlchemyError) as e:
            logger.error("Stage %s failed: %s", ctx.stage_name, e)
            return StageResult(
                stage_name=ctx.stage_name,
                status="failed",
                started_at=started_at,
                ended_at=_utc_now(),
                metrics={"providers": [s.to_dict() for s in stats]},
                error=str(e),
            )

        if not stats:
            status = "skipped"
        else:
            status = status_from_failures(len(s.failures) for s in stats)
        return StageResult(
            stage_name=ctx.stage_name,
            status=status,
            started_at=started_at,
            ended_at=_utc_now(),
            metrics={"providers": [s.to_dict() for s in stats]},
        )

    # =========================================================================
    # Stages
    # =========================================================================

    async def import_countries(self, ctx: StageContext) -> StageResult:
        async def body(results: list[IngestionStats]) -> None:
            results.append(self._ingest(lambda store: seed_regions(store, self.tables)))
            for name, client in self._providers_supporting("fetch_countries"):
                records = await self._fetch(client, "fetch_countries")
                results.append(
                    self._ingest(lambda store: ingest_countries(store, records, name, self.tables))
                )

        return await self._run_stage(ctx, body)

    async def _league_records_for(self, ctx: StageContext, name: str, client: ProviderClient) -> list[LeagueRecord]:
        if name not in self._league_records:
            self._league_records[name] = await self._fetch(
                client, "fetch_leagues", **self._fetch_options(ctx, name)
            )
        return self._league_records[name]

    async def import_leagues(self, ctx: StageContext) -> StageResult:
        async def body(results: list[IngestionStats]) -> None:
            for name, client in self._ready_providers(ctx, "fetch_leagues"):
                records = await self._league_records_for(ctx, name, client)
                results.append(
                    self._ingest(lambda store: ingest_leagues(store, records, name, self.tables))
                )

        return await self._run_stage(ctx, body)

    async def import_seasons(self, ctx: StageContext) -> StageResult:
        async def body(results: list[IngestionStats]) -> None:
            for name, client in self._ready_providers(ctx, "fetch_leagues"):
                records = await self._league_records_for(ctx, name, client)
                results.append(
                    self._ingest(lambda store: ingest_seasons(store, records, name, self.tables))
                )

        return await self._run_stage(ctx, body)

    async def import_teams(self, ctx: StageContext) -> StageResult:
        authoritative = set(ctx.options.get("authoritative_providers") or DEFAULT_AUTHORITATIVE)
        priority = list(ctx.options.get("priority_teams") or [])

        async def body(results: list[IngestionStats]) -> None:
            for name, client in self._ready_providers(ctx, "fetch_teams"):
                records = await self._fetch(client, "fetch_teams", **self._fetch_options(ctx, name))
                results.append(
                    self._ingest(
                        lambda store: ingest_teams(
                            store,
                            records,
                            name,
                            priority_names=priority,
                            create_unmatched=name in authoritative,
                            tables=self.tables,
                        )
                    )
                )

        return await self._run_stage(ctx, body)

    async def import_matches(self, ctx: StageContext) -> StageResult:
        async def body(results: list[IngestionStats]) -> None:
            for name, client in self._ready_providers(ctx, "fetch_matches"):
                fetch_options = self._fetch_options(ctx, name)
                if not fetch_options:
                    # Fixture endpoints need a league, season or date filter
                    logger.info("No fixture filter for %s; skipping", name)
                    continue
                records = await self._fetch(client, "fetch_matches", **fetch_options)
                results.append(self._ingest(lambda store: ingest_matches(store, records, name)))

        return await self._run_stage(ctx, body)

    # =========================================================================
    # Orchestration
    # =========================================================================

    def build_registry(self) -> StageRegistry:
        registry = StageRegistry()
        registry.register(StageDefinition(
            name="countries",
            runner=self.import_countries,
            description="Seed regions and import provider countries.",
        ))
        registry.register(StageDefinition(
            name="leagues",
            runner=self.import_leagues,
            description="Match or create competitions.",
        ))
        registry.register(StageDefinition(
            name="seasons",
            runner=self.import_seasons,
            description="Normalize competition seasons and current-season flags.",
        ))
        registry.register(StageDefinition(
            name="teams",
            runner=self.import_teams,
            description="Match, create or queue teams for review.",
        ))
        registry.register(StageDefinition(
            name="matches",
            runner=self.import_matches,
            description="Import fixtures for reconciled leagues and teams.",
        ))
        return registry

    async def run(
        self,
        include: Optional[list[str]] = None,
        skip: Optional[set[str]] = None,
        options: Optional[dict[str, Any]] = None,
        registry: Optional[StageRegistry] = None,
    ) -> list[StageResult]:
        """
        Run the selected stages in order, stopping at the first failed one.

        Returns:
            One StageResult per stage that ran
        """
        registry = registry or self.build_registry()
        run_id = _utc_now().strftime("%Y%m%dT%H%M%SZ") + "-" + uuid.uuid4().hex[:8]
        results: list[StageResult] = []

        for stage in registry.resolve(include=include, skip=skip):
            ctx = StageContext(
                run_id=run_id,
                stage_name=stage.name,
                started_at=_utc_now(),
                options=dict(options or {}),
            )
            logger.info("[Run %s] Stage %s starting", run_id, stage.name)
            result = await execute_stage(stage, ctx)
            results.append(result)
            logger.info(
                "[Run %s] Stage %s finished: %s (%.1fs)",
                run_id, stage.name, result.status, result.duration_s,
            )
            if result.status == "failed":
                logger.error("[Run %s] Stopping after failed stage %s", run_id, stage.name)
                break

        return results
