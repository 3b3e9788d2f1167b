from __future__ import annotations

import random

from gridsim.catalog import ALL_EVENTS, EventDefinition
from gridsim.core import ActiveEvent
from gridsim.events import EventManager, conflicts_with


def _event(event_id: str, impact: str = "demand", duration: int = 5, conflicts=()) -> EventDefinition:
    return EventDefinition(event_id, event_id.title(), "", impact, 1.1, duration, 0.1, frozenset(conflicts))


def _assert_invariants(manager: EventManager) -> None:
    active = manager.active
    assert len(active) <= manager.max_active
    ids = [e.event_id for e in active]
    assert len(ids) == len(set(ids))
    for i, a in enumerate(active):
        for b in active[i + 1:]:
            assert b.event_id not in a.definition.conflicts
            assert a.event_id not in b.definition.conflicts


def test_full_catalog_never_exceeds_cap_or_conflicts() -> None:
    for seed in range(20):
        manager = EventManager(random.Random(seed), ALL_EVENTS, check_interval=1)
        for tick in range(1, 1500):
            manager.update(tick)
            _assert_invariants(manager)


def test_mutual_conflicts_never_coexist() -> None:
    catalog = (
        _event("storm", duration=50, conflicts={"calm"}),
        _event("calm", duration=50, conflicts={"storm"}),
    )
    for seed in range(50):
        manager = EventManager(random.Random(seed), catalog, check_interval=1)
        for tick in range(1, 200):
            manager.update(tick)
            assert {e.event_id for e in manager.active} != {"storm", "calm"}


def test_one_directional_conflict_is_honoured_both_ways() -> None:
    catalog = (
        _event("a", duration=100, conflicts={"b"}),
        _event("b", duration=100),
    )
    for seed in range(30):
        manager = EventManager(random.Random(seed), catalog, check_interval=1)
        for tick in range(1, 100):
            manager.update(tick)
        assert len(manager.active) == 1


def test_admission_only_on_cadence() -> None:
    manager = EventManager(random.Random(1), ALL_EVENTS, check_interval=5)
    for tick in (1, 2, 3, 4):
        update = manager.update(tick)
        assert not update.attempted
        assert manager.active == []
    update = manager.update(5)
    assert update.attempted
    assert update.admitted is not None
    assert update.admitted.start_tick == 5
    assert update.admitted.end_tick == 5 + update.admitted.definition.duration


def test_expiry_drops_events_at_end_tick() -> None:
    definition = _event("short", duration=3)
    manager = EventManager(random.Random(0), (definition,), check_interval=100)
    manager.active = [ActiveEvent.materialize(definition, 10)]
    assert manager.update(12).expired == []
    assert len(manager.active) == 1
    update = manager.update(13)
    assert [e.event_id for e in update.expired] == ["short"]
    assert manager.active == []


def test_exhausted_attempts_add_nothing_silently() -> None:
    definition = _event("only", duration=1000)
    manager = EventManager(random.Random(2), (definition,), check_interval=1, max_attempts=10)
    manager.update(1)
    assert [e.event_id for e in manager.active] == ["only"]
    update = manager.update(2)
    assert update.attempted
    assert update.admitted is None
    assert len(manager.active) == 1


def test_no_attempt_when_cap_reached() -> None:
    catalog = tuple(_event(f"e{i}", duration=1000) for i in range(6))
    manager = EventManager(random.Random(4), catalog, check_interval=1, max_active=2, max_attempts=50)
    for tick in range(1, 20):
        manager.update(tick)
    assert len(manager.active) == 2
    assert not manager.update(20).attempted


def test_conflicts_with_checks_active_declarations() -> None:
    a = _event("a", conflicts={"b"})
    b = _event("b")
    c = _event("c")
    assert conflicts_with(b, [ActiveEvent.materialize(a, 0)])
    assert conflicts_with(a, [ActiveEvent.materialize(b, 0)])
    assert not conflicts_with(c, [ActiveEvent.materialize(a, 0)])


def test_multiplier_composes_per_impact() -> None:
    manager = EventManager(random.Random(0), ALL_EVENTS)
    demand = EventDefinition("d", "D", "", "demand", 1.3, 5, 0.1)
    demand2 = EventDefinition("d2", "D2", "", "demand", 0.85, 5, 0.1)
    supply = EventDefinition("s", "S", "", "supply", 0.7, 5, 0.1)
    manager.active = [ActiveEvent.materialize(e, 1) for e in (demand, supply, demand2)]
    assert manager.multiplier("demand") == 1.3 * 0.85
    assert manager.multiplier("supply") == 0.7


def test_catalog_conflicts_reference_known_events() -> None:
    ids = {e.event_id for e in ALL_EVENTS}
    for e in ALL_EVENTS:
        assert e.conflicts <= ids
        assert e.duration > 0
