# services/api/core/bubble_layout.py
"""
Force-directed layout for the studio discovery network.

Each studio is a bubble whose radius grows with member count. Every tick
applies:
  - many-body repulsion between all pairs (inverse to distance, weighted by
    radius),
  - springs along relationship edges,
  - a weak pull toward the viewport centre plus a re-centring translation,
  - soft collision that pushes overlapping bubbles apart,
then damps velocities and integrates positions.

The engine is a plain stepping function. Whoever owns the render loop (or a
server request) calls step(dt) once per frame; there is no thread, timer or
UI dependency here, and dropping the engine discards all state.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

BUBBLE_SIZE_MIN = 55.0
BUBBLE_SIZE_MAX = 75.0
MAX_CONNECTIONS = 15

EDGE_PRIORITY = ("instructor", "year", "department")

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


def bubble_radius(member_count: Optional[int]) -> float:
    """Monotonic in member count, floored so empty studios stay clickable."""
    count = max(0, member_count or 0)
    return max(BUBBLE_SIZE_MIN, min(BUBBLE_SIZE_MAX, count * 1.5 + 45))


@dataclass(frozen=True)
class StudioInfo:
    """Input row for the network: one public studio."""
    id: str
    member_count: int = 0
    name: str = ""
    instructor: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class RelationshipEdge:
    source: str
    target: str
    kind: str = "instructor"


@dataclass
class StudioBubble:
    """Rendered bubble. Recomputed every layout session, never persisted."""
    id: str
    member_count: int
    x: float
    y: float
    radius: float


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def _relationship(a: StudioInfo, b: StudioInfo) -> Optional[str]:
    if _same_text(a.instructor, b.instructor):
        return "instructor"
    if a.year and b.year and a.year == b.year:
        return "year"
    if _same_text(a.department, b.department):
        return "department"
    return None


def derive_relationship_edges(
    studios: Sequence[StudioInfo],
    max_per_node: int = MAX_CONNECTIONS,
) -> List[RelationshipEdge]:
    """
    Connect studios that share an instructor, else a year, else a department.

    Each pair gets at most one edge (strongest relationship) and each studio
    keeps at most `max_per_node` edges, stronger kinds first.
    """
    candidates: List[Tuple[int, int, int, RelationshipEdge]] = []
    for i in range(len(studios)):
        for j in range(i + 1, len(studios)):
            kind = _relationship(studios[i], studios[j])
            if kind is None:
                continue
            edge = RelationshipEdge(source=studios[i].id, target=studios[j].id, kind=kind)
            candidates.append((EDGE_PRIORITY.index(kind), i, j, edge))

    candidates.sort(key=lambda c: (c[0], c[1], c[2]))
    degree: Dict[str, int] = {}
    edges: List[RelationshipEdge] = []
    for _, _, _, edge in candidates:
        if degree.get(edge.source, 0) >= max_per_node or degree.get(edge.target, 0) >= max_per_node:
            continue
        degree[edge.source] = degree.get(edge.source, 0) + 1
        degree[edge.target] = degree.get(edge.target, 0) + 1
        edges.append(edge)
    return edges


@dataclass
class _Node:
    id: str
    member_count: int
    radius: float
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


class BubbleLayoutEngine:
    """
    Interactive force simulation over studio bubbles.

    Usage:
        engine = BubbleLayoutEngine(width=1200, height=800)
        engine.set_nodes(studios, edges)
        while view_is_open:
            bubbles = engine.step()

    There is no "finished" state: alpha decays toward alpha_min and the
    layout looks settled after a few dozen ticks, but step() always runs.
    """

    def __init__(
        self,
        width: float = 900.0,
        height: float = 600.0,
        *,
        charge_strength: float = -200.0,
        center_strength: float = 0.05,
        position_strength: float = 0.02,
        collision_strength: float = 0.9,
        collision_padding: float = 15.0,
        link_distance: float = 220.0,
        link_strength: float = 0.1,
        alpha_decay: float = 0.1,
        alpha_min: float = 0.001,
        velocity_decay: float = 0.8,
        bounds_padding: float = 80.0,
        rng: Optional[random.Random] = None,
    ):
        self.width = float(width)
        self.height = float(height)
        self.charge_strength = charge_strength
        self.center_strength = center_strength
        self.position_strength = position_strength
        self.collision_strength = collision_strength
        self.collision_padding = collision_padding
        self.link_distance = link_distance
        self.link_strength = link_strength
        self.alpha_decay = alpha_decay
        self.alpha_min = alpha_min
        self.velocity_decay = velocity_decay
        self.bounds_padding = bounds_padding
        self.rng = rng or random.Random()

        self.alpha = 1.0
        self.ticks = 0
        self._nodes: List[_Node] = []
        self._index: Dict[str, int] = {}
        self._edges: List[Tuple[int, int]] = []

    # --------------------
    # Node management
    # --------------------
    def set_nodes(
        self,
        studios: Iterable[StudioInfo],
        edges: Iterable[RelationshipEdge] = (),
        reheat: float = 1.0,
    ) -> None:
        """
        Replace the node set. Studios already on screen keep their position
        and velocity; new ones are seeded on a golden-angle spiral.
        """
        studios = list(studios)
        previous = {n.id: n for n in self._nodes}
        cx, cy = self.width / 2, self.height / 2
        spread = min(self.width, self.height) * 0.4
        total = max(len(studios), 1)

        nodes: List[_Node] = []
        for i, studio in enumerate(studios):
            radius = bubble_radius(studio.member_count)
            old = previous.get(studio.id)
            if old is not None:
                old.member_count = studio.member_count
                old.radius = radius
                nodes.append(old)
                continue
            angle = i * GOLDEN_ANGLE
            r = math.sqrt(i / total) * spread
            nodes.append(
                _Node(
                    id=studio.id,
                    member_count=studio.member_count,
                    radius=radius,
                    x=cx + math.cos(angle) * r,
                    y=cy + math.sin(angle) * r,
                )
            )

        self._nodes = nodes
        self._index = {n.id: i for i, n in enumerate(nodes)}
        self.set_edges(edges)
        self.alpha = max(self.alpha, reheat)

    def set_edges(self, edges: Iterable[RelationshipEdge]) -> None:
        pairs = []
        for e in edges:
            s = self._index.get(e.source)
            t = self._index.get(e.target)
            if s is not None and t is not None and s != t:
                pairs.append((s, t))
        self._edges = pairs

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.alpha = max(self.alpha, 0.3)

    # --------------------
    # Simulation
    # --------------------
    def step(self, dt: float = 1.0) -> List[StudioBubble]:
        """Advance one tick (dt=1.0 is one display frame) and return positions."""
        if not math.isfinite(dt) or dt <= 0 or not self._nodes:
            return self.positions()

        self.alpha = max(self.alpha_min, self.alpha * (1.0 - self.alpha_decay) ** dt)
        alpha = self.alpha

        self._apply_charge(alpha)
        self._apply_links(alpha)
        self._apply_position(alpha)
        self._apply_collision()

        keep = 1.0 - self.velocity_decay
        for n in self._nodes:
            n.vx *= keep
            n.vy *= keep
            n.x += n.vx * dt
            n.y += n.vy * dt

        self._apply_center()
        self._apply_bounds()
        self.ticks += 1
        return self.positions()

    def run(self, ticks: int, dt: float = 1.0) -> List[StudioBubble]:
        for _ in range(max(0, ticks)):
            self.step(dt)
        return self.positions()

    def positions(self) -> List[StudioBubble]:
        return [
            StudioBubble(id=n.id, member_count=n.member_count, x=n.x, y=n.y, radius=n.radius)
            for n in self._nodes
        ]

    def _jiggle(self) -> float:
        return (self.rng.random() - 0.5) * 1e-6

    def _apply_charge(self, alpha: float) -> None:
        nodes = self._nodes
        mean_r = sum(n.radius for n in nodes) / len(nodes)
        for i in range(len(nodes)):
            a = nodes[i]
            for j in range(i + 1, len(nodes)):
                b = nodes[j]
                dx = b.x - a.x
                dy = b.y - a.y
                if dx == 0:
                    dx = self._jiggle()
                if dy == 0:
                    dy = self._jiggle()
                l2 = max(dx * dx + dy * dy, 1.0)
                w = self.charge_strength * alpha / l2
                # Bigger bubbles push harder
                a.vx += dx * w * (b.radius / mean_r)
                a.vy += dy * w * (b.radius / mean_r)
                b.vx -= dx * w * (a.radius / mean_r)
                b.vy -= dy * w * (a.radius / mean_r)

    def _apply_links(self, alpha: float) -> None:
        if not self._edges:
            return
        degree = [0] * len(self._nodes)
        for s, t in self._edges:
            degree[s] += 1
            degree[t] += 1
        for s, t in self._edges:
            src = self._nodes[s]
            tgt = self._nodes[t]
            dx = (tgt.x + tgt.vx) - (src.x + src.vx)
            dy = (tgt.y + tgt.vy) - (src.y + src.vy)
            if dx == 0:
                dx = self._jiggle()
            if dy == 0:
                dy = self._jiggle()
            dist = math.sqrt(dx * dx + dy * dy)
            rest = max(self.link_distance, src.radius + tgt.radius + 2 * self.collision_padding)
            strength = self.link_strength / min(degree[s], degree[t])
            k = (dist - rest) / dist * alpha * strength
            dx *= k
            dy *= k
            bias = degree[s] / (degree[s] + degree[t])
            tgt.vx -= dx * bias
            tgt.vy -= dy * bias
            src.vx += dx * (1 - bias)
            src.vy += dy * (1 - bias)

    def _apply_position(self, alpha: float) -> None:
        cx, cy = self.width / 2, self.height / 2
        k = self.position_strength * alpha
        for n in self._nodes:
            n.vx += (cx - n.x) * k
            n.vy += (cy - n.y) * k

    def _apply_collision(self) -> None:
        nodes = self._nodes
        pad = self.collision_padding
        for i in range(len(nodes)):
            a = nodes[i]
            ra = a.radius + pad
            ax = a.x + a.vx
            ay = a.y + a.vy
            for j in range(i + 1, len(nodes)):
                b = nodes[j]
                rb = b.radius + pad
                r = ra + rb
                dx = ax - (b.x + b.vx)
                dy = ay - (b.y + b.vy)
                l2 = dx * dx + dy * dy
                if l2 >= r * r:
                    continue
                if dx == 0:
                    dx = self._jiggle()
                if dy == 0:
                    dy = self._jiggle()
                l = math.sqrt(dx * dx + dy * dy)
                push = (r - l) / l * self.collision_strength
                dx *= push
                dy *= push
                share = (rb * rb) / (ra * ra + rb * rb)
                a.vx += dx * share
                a.vy += dy * share
                b.vx -= dx * (1 - share)
                b.vy -= dy * (1 - share)

    def _apply_center(self) -> None:
        n = len(self._nodes)
        mx = sum(node.x for node in self._nodes) / n - self.width / 2
        my = sum(node.y for node in self._nodes) / n - self.height / 2
        mx *= self.center_strength
        my *= self.center_strength
        for node in self._nodes:
            node.x -= mx
            node.y -= my

    def _apply_bounds(self) -> None:
        pad = self.bounds_padding
        if self.width <= 2 * pad or self.height <= 2 * pad:
            return
        for n in self._nodes:
            n.x = max(pad, min(self.width - pad, n.x))
            n.y = max(pad, min(self.height - pad, n.y))
