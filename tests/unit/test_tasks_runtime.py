"""Unit tests for task runtime primitives."""

from datetime import datetime, timedelta

import pytest

from rugbylive.tasks.runtime import StageResult, status_from_failures
from rugbylive.tasks.stages import StageDefinition, StageRegistry


def _noop_stage(_ctx):
    raise NotImplementedError


def test_stage_registry_register_and_get():
    registry = StageRegistry()
    stage = StageDefinition(name="alpha", runner=_noop_stage)
    registry.register(stage)

    loaded = registry.get("alpha")
    assert loaded.name == "alpha"
    assert loaded.runner is _noop_stage


def test_stage_registry_duplicate_registration_raises():
    registry = StageRegistry()
    stage = StageDefinition(name="dup", runner=_noop_stage)
    registry.register(stage)
    with pytest.raises(ValueError):
        registry.register(stage)


def test_stage_registry_unknown_stage_raises():
    registry = StageRegistry()
    with pytest.raises(KeyError):
        registry.get("missing")
    with pytest.raises(KeyError):
        registry.resolve(include=["missing"])


def test_stage_registry_resolve_default_and_skip():
    registry = StageRegistry()
    registry.register(StageDefinition(name="a", runner=_noop_stage, enabled_by_default=True))
    registry.register(StageDefinition(name="b", runner=_noop_stage, enabled_by_default=True))
    registry.register(StageDefinition(name="c", runner=_noop_stage, enabled_by_default=False))

    default_names = [s.name for s in registry.resolve()]
    assert default_names == ["a", "b"]

    include_names = [s.name for s in registry.resolve(include=["c", "a"], skip={"a"})]
    assert include_names == ["c"]


def test_stage_registry_include_keeps_registration_order():
    registry = StageRegistry()
    for name in ["countries", "leagues", "teams"]:
        registry.register(StageDefinition(name=name, runner=_noop_stage))

    names = [s.name for s in registry.resolve(include=["teams", "countries"])]
    assert names == ["countries", "teams"]


def test_stage_result_duration_and_payload():
    started = datetime(2026, 2, 14, 10, 0, 0)
    ended = started + timedelta(seconds=12.5)
    result = StageResult(
        stage_name="example",
        status="success",
        started_at=started,
        ended_at=ended,
        metrics={"rows": 123},
    )

    assert result.duration_s == 12.5
    payload = result.to_dict()
    assert payload["stage_name"] == "example"
    assert payload["status"] == "success"
    assert payload["duration_s"] == 12.5
    assert payload["metrics"] == {"rows": 123}
    assert payload["error"] is None


def test_status_from_failures():
    assert status_from_failures([0, 0]) == "success"
    assert status_from_failures([0, 2]) == "partial"
    assert status_from_failures([]) == "success"
