"""
starfield.py
============
Star placement and intra-constellation edge building.

Stages
------
1. ``place_stars``            – rejection-sample star positions in a disk.
2. ``nearest_neighbor_pairs`` – pair each unconsumed star with its nearest
                                neighbour (fragments into small groups).
3. ``group_connected``        – single-pass grouping of the pair edges.
4. ``repair_components``      – join groups with the shortest edge that does
                                not cross an existing one.

All stages draw randomness only through an injected ``RandomSource``; nothing
here seeds, stores or prints.
"""

from __future__ import annotations

import dataclasses
import enum
import math
from typing import Protocol, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from galaxygeom import segments_intersect


# Hard cap on attempts for every rejection-sampling loop.
MAX_ITERATIONS = 1000


class RandomSource(Protocol):
    """Uniform random draws required by the generator.

    ``random.Random`` satisfies this protocol directly.
    """

    def uniform(self, low: float, high: float) -> float:
        """Float in ``[low, high)``."""

    def randint(self, low: int, high: int) -> int:
        """Integer in ``[low, high]``."""

    def random(self) -> float:
        """Float in ``[0, 1)``."""


class EdgeKind(enum.Enum):
    NEAREST = "nearest"
    GROUP_MERGE = "group_merge"


@dataclasses.dataclass(frozen=True)
class Edge:
    """Undirected star-to-star edge inside one constellation."""

    a: int
    b: int
    distance: float
    kind: EdgeKind = EdgeKind.NEAREST


# ---------------------------------------------------------------------------
# Stage 1: star placement
# ---------------------------------------------------------------------------

def place_stars(
    center,
    min_count: int,
    max_count: int,
    max_radius: float,
    min_distance: float,
    rng: RandomSource,
) -> Tuple[np.ndarray, float]:
    """Rejection-sample star positions inside a disk around *center*.

    A target count is drawn from ``[min_count, max_count]``.  Candidates are
    drawn with uniform radius and angle (not area-uniform, so stars bunch
    toward the centre) and accepted when at least *min_distance* from every
    star accepted so far.  Sampling stops at the target or after
    ``MAX_ITERATIONS`` attempts, in which case fewer stars are returned.

    Returns
    -------
    stars         : (N, 2) read-only array of positions
    actual_radius : largest sampled radius among accepted stars
    """
    target = rng.randint(min_count, max_count)
    cx, cy = float(center[0]), float(center[1])

    # at most one star is accepted per attempt
    stars = np.empty((min(target, MAX_ITERATIONS), 2), dtype=np.float64)
    n_placed = 0
    actual_radius = 0.0

    for _ in range(MAX_ITERATIONS):
        if n_placed >= target:
            break
        radius = rng.uniform(0.0, max_radius)
        angle = rng.uniform(0.0, 2.0 * math.pi)
        candidate = (cx + radius * math.cos(angle), cy + radius * math.sin(angle))

        if n_placed > 0:
            d = np.hypot(stars[:n_placed, 0] - candidate[0],
                         stars[:n_placed, 1] - candidate[1])
            if np.any(d < min_distance):
                continue

        stars[n_placed] = candidate
        n_placed += 1
        actual_radius = max(actual_radius, radius)

    stars = stars[:n_placed].copy()
    stars.flags.writeable = False
    return stars, actual_radius


# ---------------------------------------------------------------------------
# Stage 2: nearest-neighbour pairing
# ---------------------------------------------------------------------------

def nearest_neighbor_pairs(stars: np.ndarray) -> list[Edge]:
    """Pair every not-yet-consumed star with its nearest other star.

    Stars are visited in index order.  A star consumed as the target of an
    earlier pair is skipped as a source, but may still be picked again as a
    target, so the result usually splits into several small groups.
    """
    n = len(stars)
    if n < 2:
        return []

    dist = cdist(stars, stars)
    np.fill_diagonal(dist, np.inf)

    edges: list[Edge] = []
    consumed: set[int] = set()
    for i in range(n):
        if i in consumed:
            continue
        # argmin returns the first minimum, i.e. first found in a linear scan
        j = int(np.argmin(dist[i]))
        edges.append(Edge(i, j, float(dist[i, j]), EdgeKind.NEAREST))
        consumed.add(i)
        consumed.add(j)
    return edges


# ---------------------------------------------------------------------------
# Stage 3: grouping
# ---------------------------------------------------------------------------

def group_connected(edges: list[Edge]) -> list[set[int]]:
    """Group edge endpoints into index sets in a single pass.

    An edge whose endpoints have never been seen starts a new set.  Otherwise
    the edge is folded into the *first* set (in creation order) holding either
    endpoint.  Two sets bridged by a later edge are not fused, so a connected
    graph can still come back as several sets.
    """
    groups: list[set[int]] = []
    seen: set[int] = set()
    for edge in edges:
        if edge.a in seen or edge.b in seen:
            for group in groups:
                if edge.a in group:
                    group.add(edge.b)
                    break
                if edge.b in group:
                    group.add(edge.a)
                    break
        else:
            groups.append({edge.a, edge.b})
        seen.add(edge.a)
        seen.add(edge.b)
    return groups


# ---------------------------------------------------------------------------
# Stage 4: planar repair
# ---------------------------------------------------------------------------

def edge_crosses_existing(
    stars: np.ndarray, edges: list[Edge], a: int, b: int
) -> bool:
    """True if segment a→b intersects an edge that shares no endpoint with it."""
    pa, pb = stars[a], stars[b]
    for edge in edges:
        if edge.a in (a, b) or edge.b in (a, b):
            continue
        if segments_intersect(stars[edge.a], stars[edge.b], pa, pb):
            return True
    return False


def merge_components(
    stars: np.ndarray,
    edges: list[Edge],
    group_a: set[int],
    group_b: set[int],
) -> bool:
    """Join two star groups with their shortest non-crossing cross edge.

    Candidates are every (a, b) pair with a in *group_a* and b in *group_b*,
    tried in ascending length.  The first one that crosses no existing edge
    is appended to *edges* as ``GROUP_MERGE``.

    Returns
    -------
    True if an edge was added, False if every candidate crossed.
    """
    pairs = np.array(
        [(a, b) for a in sorted(group_a) for b in sorted(group_b) if a != b],
        dtype=np.int64,
    ).reshape(-1, 2)
    if len(pairs) == 0:
        return False

    lengths = np.linalg.norm(stars[pairs[:, 0]] - stars[pairs[:, 1]], axis=1)
    for k in np.argsort(lengths, kind="stable"):
        a, b = int(pairs[k, 0]), int(pairs[k, 1])
        if not edge_crosses_existing(stars, edges, a, b):
            edges.append(Edge(a, b, float(lengths[k]), EdgeKind.GROUP_MERGE))
            return True
    return False


def repair_components(
    stars: np.ndarray,
    edges: list[Edge],
    components: list[set[int]],
) -> int:
    """Try once to merge every pair of components, in index order.

    A pair is skipped only when both of its components are already marked
    merged.  This is a single bounded pass, not a fixed point, so a
    constellation may stay split when every candidate edge of some pair
    crosses.  *edges* is extended in place.

    Returns
    -------
    Number of merge edges added.
    """
    merged: set[int] = set()
    added = 0
    for i in range(len(components)):
        for j in range(i + 1, len(components)):
            if i in merged and j in merged:
                continue
            if merge_components(stars, edges, components[i], components[j]):
                merged.add(i)
                merged.add(j)
                added += 1
    return added
