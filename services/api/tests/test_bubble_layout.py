"""
Tests for the discovery network bubble layout.

Run with: pytest tests/test_bubble_layout.py -v
"""
import itertools
import math
import random

import pytest

from core.bubble_layout import (
    BUBBLE_SIZE_MAX,
    BUBBLE_SIZE_MIN,
    BubbleLayoutEngine,
    RelationshipEdge,
    StudioInfo,
    bubble_radius,
    derive_relationship_edges,
)

DEPARTMENTS = ["Architecture", "Interior Design", "Industrial Design"]
YEARS = ["Year 1", "Year 2", "Year 3", "Year 4", "Masters"]


def _studios(n, seed=7):
    rng = random.Random(seed)
    return [
        StudioInfo(
            id=f"workspace-{i}",
            member_count=rng.randint(0, 25),
            name=f"Studio {i}",
            instructor=f"Prof. {i % 4}",
            year=YEARS[i % len(YEARS)],
            department=DEPARTMENTS[i % len(DEPARTMENTS)],
        )
        for i in range(n)
    ]


class TestBubbleRadius:
    """Tests for member count -> radius."""

    def test_empty_studio_gets_floor(self):
        assert bubble_radius(0) == BUBBLE_SIZE_MIN
        assert bubble_radius(None) == BUBBLE_SIZE_MIN

    def test_grows_with_members(self):
        assert bubble_radius(10) == pytest.approx(60.0)
        assert bubble_radius(20) == pytest.approx(75.0)

    def test_capped(self):
        assert bubble_radius(500) == BUBBLE_SIZE_MAX

    def test_monotonic(self):
        radii = [bubble_radius(n) for n in range(0, 40)]
        assert radii == sorted(radii)


class TestRelationshipEdges:
    """Tests for edge derivation between studios."""

    def test_instructor_beats_year_and_department(self):
        a = StudioInfo("a", instructor="Prof. Lee", year="Year 2", department="Architecture")
        b = StudioInfo("b", instructor="prof. lee ", year="Year 2", department="Architecture")
        edges = derive_relationship_edges([a, b])
        assert edges == [RelationshipEdge("a", "b", "instructor")]

    def test_year_then_department(self):
        a = StudioInfo("a", year="Year 2", department="Architecture")
        b = StudioInfo("b", year="Year 2", department="Interior Design")
        c = StudioInfo("c", year="Year 3", department="Architecture")
        kinds = {(e.source, e.target): e.kind for e in derive_relationship_edges([a, b, c])}
        assert kinds == {("a", "b"): "year", ("a", "c"): "department"}

    def test_unrelated_studios(self):
        a = StudioInfo("a", year="Year 1", department="Architecture")
        b = StudioInfo("b", year="Year 4", department="Industrial Design")
        assert derive_relationship_edges([a, b]) == []

    def test_degree_cap(self):
        studios = [StudioInfo(f"s{i}", department="Architecture") for i in range(30)]
        edges = derive_relationship_edges(studios, max_per_node=15)
        degree = {}
        for e in edges:
            degree[e.source] = degree.get(e.source, 0) + 1
            degree[e.target] = degree.get(e.target, 0) + 1
        assert max(degree.values()) <= 15

    def test_one_edge_per_pair(self):
        edges = derive_relationship_edges(_studios(12))
        pairs = [frozenset((e.source, e.target)) for e in edges]
        assert len(pairs) == len(set(pairs))


class TestBubbleLayoutEngine:
    """Tests for the force simulation."""

    def test_settles_without_overlap(self):
        """After 300 ticks nearly every pair of bubbles is apart."""
        studios = _studios(12)
        engine = BubbleLayoutEngine(1600, 1200, rng=random.Random(1))
        engine.set_nodes(studios, derive_relationship_edges(studios))
        bubbles = engine.run(300)

        pairs = list(itertools.combinations(bubbles, 2))
        apart = sum(
            1 for a, b in pairs if math.hypot(a.x - b.x, a.y - b.y) >= a.radius + b.radius
        )
        assert apart / len(pairs) >= 0.95

    def test_stays_in_viewport(self):
        studios = _studios(8)
        engine = BubbleLayoutEngine(1200, 900, rng=random.Random(2))
        engine.set_nodes(studios)
        for b in engine.run(200):
            assert 80 <= b.x <= 1200 - 80
            assert 80 <= b.y <= 900 - 80

    def test_never_finishes(self):
        engine = BubbleLayoutEngine(900, 600, rng=random.Random(3))
        engine.set_nodes(_studios(5))
        engine.run(500)
        assert engine.alpha == pytest.approx(engine.alpha_min)
        before = engine.ticks
        engine.step()
        assert engine.ticks == before + 1

    def test_zero_dt_is_a_no_op(self):
        engine = BubbleLayoutEngine(900, 600, rng=random.Random(4))
        engine.set_nodes(_studios(5))
        before = [(b.x, b.y) for b in engine.positions()]
        after = [(b.x, b.y) for b in engine.step(0)]
        assert before == after
        assert engine.ticks == 0

    @pytest.mark.parametrize("dt", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_dt_is_a_no_op(self, dt):
        engine = BubbleLayoutEngine(900, 600, rng=random.Random(4))
        engine.set_nodes(_studios(5))
        before = [(b.x, b.y) for b in engine.positions()]
        after = [(b.x, b.y) for b in engine.step(dt)]
        assert after == before
        assert all(math.isfinite(v) for point in after for v in point)
        assert engine.ticks == 0

    def test_empty(self):
        engine = BubbleLayoutEngine()
        assert engine.step() == []
        assert engine.run(10) == []

    def test_deterministic_with_seeded_rng(self):
        studios = _studios(10)
        edges = derive_relationship_edges(studios)
        a = BubbleLayoutEngine(1600, 1200, rng=random.Random(42))
        b = BubbleLayoutEngine(1600, 1200, rng=random.Random(42))
        a.set_nodes(studios, edges)
        b.set_nodes(studios, edges)
        assert [(n.x, n.y) for n in a.run(50)] == [(n.x, n.y) for n in b.run(50)]

    def test_set_nodes_keeps_existing_positions(self):
        studios = _studios(6)
        engine = BubbleLayoutEngine(1600, 1200, rng=random.Random(5))
        engine.set_nodes(studios)
        settled = {b.id: (b.x, b.y) for b in engine.run(100)}

        newcomer = StudioInfo("workspace-new", member_count=3)
        engine.set_nodes(studios + [newcomer])
        current = {b.id: (b.x, b.y) for b in engine.positions()}
        for studio in studios:
            assert current[studio.id] == settled[studio.id]
        assert "workspace-new" in current
        assert engine.alpha == pytest.approx(1.0)

    def test_radius_follows_member_count(self):
        engine = BubbleLayoutEngine()
        engine.set_nodes([StudioInfo("a", member_count=0), StudioInfo("b", member_count=100)])
        radii = {b.id: b.radius for b in engine.positions()}
        assert radii == {"a": BUBBLE_SIZE_MIN, "b": BUBBLE_SIZE_MAX}
