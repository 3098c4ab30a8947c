"""
Unit tests for the company-context TTL cache.
"""

from __future__ import annotations

from portfolio.api.services.ai_service import ContextCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_value_is_reused_within_ttl() -> None:
    clock = FakeClock()
    cache = ContextCache(ttl_seconds=60, clock=clock)
    loads: list[int] = []

    def loader() -> str:
        loads.append(1)
        return f"context-{len(loads)}"

    assert cache.get_or_refresh(loader) == "context-1"
    clock.now += 59
    assert cache.get_or_refresh(loader) == "context-1"
    clock.now += 2
    assert cache.get_or_refresh(loader) == "context-2"
    assert len(loads) == 2


def test_invalidate_forces_reload() -> None:
    cache = ContextCache(ttl_seconds=60, clock=FakeClock())
    cache.get_or_refresh(lambda: "old")
    cache.invalidate()
    assert cache.get_or_refresh(lambda: "new") == "new"
