"""Stage registry primitives for import pipeline orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from rugbylive.tasks.runtime import StageContext, StageResult

StageRunner = Callable[[StageContext], StageResult | Awaitable[StageResult]]


@dataclass(frozen=True)
class StageDefinition:
    """Registered stage metadata and runner implementation."""

    name: str
    runner: StageRunner
    description: str = ""
    enabled_by_default: bool = True


class StageRegistry:
    """
    In-memory registry for named import stages.

    Stages run in registration order, so register them in dependency
    order (countries before leagues before seasons...).
    """

    def __init__(self) -> None:
        self._stages: dict[str, StageDefinition] = {}

    def register(self, stage: StageDefinition) -> None:
        if stage.name in self._stages:
            raise ValueError(f"Stage already registered: {stage.name}")
        self._stages[stage.name] = stage

    def get(self, stage_name: str) -> StageDefinition:
        try:
            return self._stages[stage_name]
        except KeyError as exc:
            raise KeyError(f"Unknown stage: {stage_name}") from exc

    def names(self) -> list[str]:
        return list(self._stages)

    def default_stage_names(self) -> list[str]:
        return [name for name, stage in self._stages.items() if stage.enabled_by_default]

    def resolve(
        self,
        include: list[str] | None = None,
        skip: set[str] | None = None,
    ) -> list[StageDefinition]:
        """
        Stages to run, always in registration order.

        An explicit include list selects stages but cannot reorder them:
        ["teams", "countries"] still runs countries first.
        """
        wanted = set(include) if include else set(self.default_stage_names())
        for name in wanted:
            self.get(name)
        skipped = skip or set()
        return [
            stage for name, stage in self._stages.items()
            if name in wanted and name not in skipped
        ]
