"""
galaxygen.py
============
Procedural constellation-galaxy generator.

Generates a two-level spatial graph: a galaxy of non-overlapping
constellations, each one a small best-effort planar graph of stars.  The
constellations are then linked into one connected graph by nearest-fragment
growth over their centres, plus a sprinkling of extra links whose chance
falls off linearly with distance.

Guarantees
----------
1. Non-overlap:  constellation centres are farther apart than the sum of
   their radii.
2. Spacing:      stars in one constellation are at least MIN_STAR_DISTANCE
   apart.
3. Connectivity: every constellation is reachable from every other via the
   inter-constellation edges.

Star and constellation counts are best-effort: every rejection-sampling loop
gives up after ``MAX_ITERATIONS`` attempts and returns what it has.

Usage (importable)
------------------
    import random
    from galaxygen import GalaxyConfig, generate
    galaxy = generate(GalaxyConfig(), random.Random(7))

    from galaxygen import GalaxyGenerator
    stars_df, edges_df = GalaxyGenerator(GalaxyConfig(seed=7)).run()

Usage (script, uses all defaults)
----------------------------------
    python galaxygen.py
"""

from __future__ import annotations

import dataclasses
import math
import numbers
import os
import time
from typing import Iterator, Tuple

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial.distance import cdist

from starfield import (
    MAX_ITERATIONS,
    Edge,
    RandomSource,
    group_connected,
    nearest_neighbor_pairs,
    place_stars,
    repair_components,
)


class GalaxyConfigError(ValueError):
    """Raised when a GalaxyConfig describes an impossible sampling range."""


class EmptyGalaxyError(RuntimeError):
    """Raised when placement could not fit a single constellation."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class GalaxyConfig:
    """All tunable parameters for galaxy generation.

    Spatial units
    -------------
    All distances share an arbitrary unit; the defaults are sized for a
    canvas a few hundred pixels across.

    Only the first block of fields is read by ``generate``.  ``seed``,
    ``out_dir`` and ``write_gexf`` are used by ``GalaxyGenerator``.
    """

    # ---- stars ----
    min_star_distance: float = 20.0
    min_stars: int = 5              # inclusive
    max_stars: int = 10             # inclusive

    # ---- constellations ----
    min_constellation_radius: float = 80.0    # inclusive
    max_constellation_radius: float = 160.0   # exclusive
    min_constellations: int = 5     # inclusive
    max_constellations: int = 10    # inclusive

    # ---- galaxy ----
    galaxy_radius: float = 300.0
    # beyond this centre distance supplemental links never form
    connection_threshold: float = 300.0

    # ---- reproducibility ----
    seed: int = 7

    # ---- output ----
    out_dir: str = "output"
    write_gexf: bool = True      # attempt GEXF export (requires networkx)

    def validate(self) -> None:
        """Raise GalaxyConfigError if any sampling range is unusable."""
        if self.min_star_distance < 0:
            raise GalaxyConfigError(
                f"min_star_distance must be >= 0, got {self.min_star_distance}"
            )
        _check_range("stars", self.min_stars, self.max_stars,
                     lowest=1, integer=True)
        _check_range("constellations", self.min_constellations,
                     self.max_constellations, lowest=1, integer=True)
        if self.min_constellation_radius <= 0:
            raise GalaxyConfigError(
                "min_constellation_radius must be > 0, "
                f"got {self.min_constellation_radius}"
            )
        _check_range("constellation_radius", self.min_constellation_radius,
                     self.max_constellation_radius)
        if self.galaxy_radius <= 0:
            raise GalaxyConfigError(
                f"galaxy_radius must be > 0, got {self.galaxy_radius}"
            )
        if self.connection_threshold <= 0:
            raise GalaxyConfigError(
                f"connection_threshold must be > 0, got {self.connection_threshold}"
            )


def _check_range(name: str, low, high, lowest=None, integer=False) -> None:
    if integer:
        for bound, value in (("min", low), ("max", high)):
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise GalaxyConfigError(
                    f"{bound}_{name} must be an integer, got {value!r}"
                )
    if lowest is not None and low < lowest:
        raise GalaxyConfigError(f"min_{name} must be >= {lowest}, got {low}")
    if low > high:
        raise GalaxyConfigError(
            f"min_{name} ({low}) is greater than max_{name} ({high})"
        )


# ---------------------------------------------------------------------------
# Random source adapter
# ---------------------------------------------------------------------------

class NumpyRandomSource:
    """Adapt a ``numpy.random.Generator`` to the ``RandomSource`` protocol."""

    def __init__(self, rng: np.random.Generator) -> None:
        self._rng = rng

    def uniform(self, low: float, high: float) -> float:
        return float(self._rng.uniform(low, high))

    def randint(self, low: int, high: int) -> int:
        return int(self._rng.integers(low, high, endpoint=True))

    def random(self) -> float:
        return float(self._rng.random())


# ---------------------------------------------------------------------------
# Generated entities
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True, eq=False)
class Constellation:
    """One cluster of stars and its internal edges.

    ``radius`` is the largest sampled offset of any placed star, which is
    never more than the radius the constellation was sampled with.  It is
    the exclusion radius used when placing further constellations.
    """

    stars: np.ndarray
    internal_edges: Tuple[Edge, ...]
    center: Tuple[float, float]
    radius: float


@dataclasses.dataclass(frozen=True)
class InterConstellationEdge:
    """Link between star *star1* of constellation *c1* and star *star2* of *c2*.

    ``c1``/``c2`` index into ``Galaxy.constellations``.
    """

    c1: int
    c2: int
    star1: int
    star2: int


@dataclasses.dataclass(frozen=True, eq=False)
class Galaxy:
    constellations: Tuple[Constellation, ...]
    inter_edges: Tuple[InterConstellationEdge, ...]

    @property
    def n_stars(self) -> int:
        return sum(len(c.stars) for c in self.constellations)

    def segments(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        """Yield every edge as a pair of points: internal edges, then links."""
        for constellation in self.constellations:
            for edge in constellation.internal_edges:
                yield constellation.stars[edge.a], constellation.stars[edge.b]
        for link in self.inter_edges:
            yield (self.constellations[link.c1].stars[link.star1],
                   self.constellations[link.c2].stars[link.star2])

    def star_offsets(self) -> np.ndarray:
        """Global id of the first star of each constellation."""
        sizes = [len(c.stars) for c in self.constellations]
        return np.concatenate([[0], np.cumsum(sizes)[:-1]]).astype(np.int64)

    def to_frames(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Flatten the galaxy into star and edge tables with global star ids.

        Returns
        -------
        stars_df : DataFrame  (id, constellation, index, x, y)
        edges_df : DataFrame  (source, target, length, kind)
        """
        offsets = self.star_offsets()
        star_rows = []
        edge_rows = []
        for ci, constellation in enumerate(self.constellations):
            base = int(offsets[ci])
            for si, (x, y) in enumerate(constellation.stars):
                star_rows.append((base + si, ci, si, float(x), float(y)))
            for edge in constellation.internal_edges:
                edge_rows.append((base + edge.a, base + edge.b,
                                  edge.distance, edge.kind.value))
        for link in self.inter_edges:
            p1 = self.constellations[link.c1].stars[link.star1]
            p2 = self.constellations[link.c2].stars[link.star2]
            edge_rows.append((int(offsets[link.c1]) + link.star1,
                              int(offsets[link.c2]) + link.star2,
                              float(np.linalg.norm(p1 - p2)), "inter"))

        stars_df = pd.DataFrame(
            star_rows, columns=["id", "constellation", "index", "x", "y"]
        )
        edges_df = pd.DataFrame(
            edge_rows, columns=["source", "target", "length", "kind"]
        )
        return stars_df, edges_df


# ---------------------------------------------------------------------------
# Constellation builder
# ---------------------------------------------------------------------------

def build_constellation(center, cfg: GalaxyConfig, rng: RandomSource) -> Constellation:
    """Place stars around *center* and connect them into a planar-ish graph."""
    max_radius = rng.uniform(cfg.min_constellation_radius,
                             cfg.max_constellation_radius)
    stars, actual_radius = place_stars(
        center, cfg.min_stars, cfg.max_stars,
        max_radius, cfg.min_star_distance, rng,
    )
    edges = nearest_neighbor_pairs(stars)
    components = group_connected(edges)
    repair_components(stars, edges, components)
    return Constellation(
        stars=stars,
        internal_edges=tuple(edges),
        center=(float(center[0]), float(center[1])),
        radius=actual_radius,
    )


# ---------------------------------------------------------------------------
# Galaxy builder
# ---------------------------------------------------------------------------

def place_constellations(cfg: GalaxyConfig, rng: RandomSource) -> list[Constellation]:
    """Rejection-sample non-overlapping constellations inside the galaxy disk.

    Each candidate is fully built before it is tested, because its actual
    radius is part of the overlap test; rejected candidates are discarded.
    Gives up after ``MAX_ITERATIONS`` attempts.
    """
    target = rng.randint(cfg.min_constellations, cfg.max_constellations)
    constellations: list[Constellation] = []

    for _ in range(MAX_ITERATIONS):
        if len(constellations) >= target:
            break
        r = rng.uniform(0.0, cfg.galaxy_radius)
        phi = rng.uniform(0.0, 2.0 * math.pi)
        center = (r * math.cos(phi), r * math.sin(phi))

        candidate = build_constellation(center, cfg, rng)
        if all(
            math.dist(center, existing.center) > existing.radius + candidate.radius
            for existing in constellations
        ):
            constellations.append(candidate)

    return constellations


def closest_star_pair(a: Constellation, b: Constellation) -> Tuple[int, int]:
    """Indices (i, j) of the closest star of *a* to a star of *b*."""
    dist = cdist(a.stars, b.stars)
    i, j = np.unravel_index(int(np.argmin(dist)), dist.shape)
    return int(i), int(j)


def _link(constellations, i: int, j: int) -> InterConstellationEdge:
    s1, s2 = closest_star_pair(constellations[i], constellations[j])
    return InterConstellationEdge(i, j, s1, s2)


def connect_nearest_constellations(
    constellations: list[Constellation],
) -> list[InterConstellationEdge]:
    """Connect all constellations by nearest-fragment growth (Prim's algorithm).

    Starting from constellation 0, repeatedly attach the unconnected
    constellation whose centre is closest to any connected one.  Each link
    is anchored at the closest pair of stars.  Returns exactly ``n - 1``
    edges.
    """
    n = len(constellations)
    if n == 0:
        return []

    centers = np.array([c.center for c in constellations], dtype=np.float64)
    connected = [0]
    is_connected = np.zeros(n, dtype=bool)
    is_connected[0] = True
    edges: list[InterConstellationEdge] = []

    while len(connected) < n:
        unconnected = np.flatnonzero(~is_connected)
        dist = cdist(centers[connected], centers[unconnected])
        # Row-major argmin: first pair found scanning connected × unconnected
        row, col = np.unravel_index(int(np.argmin(dist)), dist.shape)
        src = connected[row]
        dst = int(unconnected[col])

        connected.append(dst)
        is_connected[dst] = True
        edges.append(_link(constellations, src, dst))

    return edges


def are_directly_connected(
    edges: list[InterConstellationEdge], i: int, j: int
) -> bool:
    return any(
        (e.c1 == i and e.c2 == j) or (e.c1 == j and e.c2 == i) for e in edges
    )


def add_supplemental_connections(
    constellations: list[Constellation],
    edges: list[InterConstellationEdge],
    distance_threshold: float,
    rng: RandomSource,
) -> int:
    """Randomly add extra links, more likely between nearby constellations.

    Every ordered pair (A, B) not yet directly linked is an independent
    trial that succeeds when ``rng.random() > distance / threshold``.  (A, B)
    and (B, A) are both tried, but a success on the first makes the second
    skip.  *edges* is extended in place.

    Returns
    -------
    Number of links added.
    """
    added = 0
    for i, a in enumerate(constellations):
        for j, b in enumerate(constellations):
            if i == j or are_directly_connected(edges, i, j):
                continue
            center_distance = math.dist(a.center, b.center)
            if rng.random() > center_distance / distance_threshold:
                edges.append(_link(constellations, i, j))
                added += 1
    return added


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate(cfg: GalaxyConfig, rng: RandomSource) -> Galaxy:
    """Generate a complete galaxy.

    Parameters
    ----------
    cfg : GalaxyConfig  – validated here; raises GalaxyConfigError
    rng : RandomSource  – all randomness is drawn from it, in a fixed order

    Raises
    ------
    EmptyGalaxyError if not a single constellation could be placed.
    """
    cfg.validate()

    constellations = place_constellations(cfg, rng)
    if not constellations:
        raise EmptyGalaxyError(
            f"No constellation fits in galaxy_radius={cfg.galaxy_radius} "
            f"after {MAX_ITERATIONS} attempts."
        )

    links = connect_nearest_constellations(constellations)
    add_supplemental_connections(
        constellations, links, cfg.connection_threshold, rng
    )
    return Galaxy(constellations=tuple(constellations), inter_edges=tuple(links))


# ---------------------------------------------------------------------------
# Acceptance checks
# ---------------------------------------------------------------------------

def count_galaxy_components(galaxy: Galaxy) -> int:
    """Number of connected components of the constellation link graph."""
    n = len(galaxy.constellations)
    if n == 0:
        return 0
    src = np.array([e.c1 for e in galaxy.inter_edges], dtype=np.int64)
    tgt = np.array([e.c2 for e in galaxy.inter_edges], dtype=np.int64)
    adj = csr_matrix(
        (np.ones(len(src), dtype=np.float64), (src, tgt)), shape=(n, n)
    )
    n_components, _ = connected_components(adj, directed=False)
    return int(n_components)


def run_checks(galaxy: Galaxy, cfg: GalaxyConfig, tol: float = 1e-6) -> dict:
    """Print acceptance test results to stdout and return them.

    Returns
    -------
    dict mapping check name → bool
    """
    sep = "─" * 52
    results: dict[str, bool] = {}

    print(f"\n{sep}")
    print("  ACCEPTANCE TESTS")
    print(sep)

    n_const = len(galaxy.constellations)
    print(f"  Constellations : {n_const:>4}  "
          f"(target {cfg.min_constellations}-{cfg.max_constellations})")
    print(f"  Stars          : {galaxy.n_stars:>4}")

    # Non-overlap
    overlaps = 0
    for i in range(n_const):
        for j in range(i + 1, n_const):
            a, b = galaxy.constellations[i], galaxy.constellations[j]
            if math.dist(a.center, b.center) <= a.radius + b.radius:
                overlaps += 1
    results["non_overlap"] = overlaps == 0
    print(f"  Overlaps       : {overlaps:>4}  "
          f"{'✓' if results['non_overlap'] else '✗ FAIL'}")

    # Star spacing and radius consistency
    too_close = 0
    bad_radius = 0
    for c in galaxy.constellations:
        if len(c.stars) > 1:
            d = cdist(c.stars, c.stars)
            iu = np.triu_indices(len(c.stars), k=1)
            too_close += int((d[iu] < cfg.min_star_distance - tol).sum())
        reach = float(np.max(np.linalg.norm(c.stars - np.asarray(c.center), axis=1)))
        if abs(reach - c.radius) > tol or c.radius > cfg.max_constellation_radius:
            bad_radius += 1
    results["min_spacing"] = too_close == 0
    results["radius"] = bad_radius == 0
    print(f"  Close pairs    : {too_close:>4}  "
          f"{'✓' if results['min_spacing'] else '✗ FAIL'}")
    print(f"  Bad radii      : {bad_radius:>4}  "
          f"{'✓' if results['radius'] else '✗ FAIL'}")

    # Index validity
    bad_index = 0
    for c in galaxy.constellations:
        n = len(c.stars)
        for e in c.internal_edges:
            if e.a == e.b or not (0 <= e.a < n and 0 <= e.b < n):
                bad_index += 1
    for e in galaxy.inter_edges:
        if e.c1 == e.c2 or not (0 <= e.c1 < n_const and 0 <= e.c2 < n_const):
            bad_index += 1
        elif not (0 <= e.star1 < len(galaxy.constellations[e.c1].stars)
                  and 0 <= e.star2 < len(galaxy.constellations[e.c2].stars)):
            bad_index += 1
    results["indices"] = bad_index == 0
    print(f"  Bad indices    : {bad_index:>4}  "
          f"{'✓' if results['indices'] else '✗ FAIL'}")

    # Connectivity
    n_components = count_galaxy_components(galaxy)
    results["connected"] = n_components == 1
    n_internal = sum(len(c.internal_edges) for c in galaxy.constellations)
    print(f"\n    internal edges={n_internal}  "
          f"links={len(galaxy.inter_edges)}  "
          f"(spanning {max(n_const - 1, 0)})")
    print(f"    connected components: {n_components}  "
          f"{'✓' if results['connected'] else '✗ FAIL'}")

    print(sep + "\n")
    return results


# ---------------------------------------------------------------------------
# Host driver
# ---------------------------------------------------------------------------

class GalaxyGenerator:
    """Seeded driver around ``generate`` that reports and writes its output.

    Parameters
    ----------
    cfg : GalaxyConfig
        All tunable parameters.  ``cfg.seed`` seeds a numpy Generator that
        lives as long as this object, so repeated ``regenerate`` calls give
        a fresh layout each time.
    """

    def __init__(self, cfg: GalaxyConfig) -> None:
        self.cfg = cfg
        self._rng = NumpyRandomSource(np.random.default_rng(cfg.seed))

    def regenerate(self) -> Galaxy:
        """Produce a new galaxy and print how long it took."""
        t0 = time.perf_counter()
        galaxy = generate(self.cfg, self._rng)
        print(f"Regeneration took {(time.perf_counter() - t0) * 1000.0:.2f} ms")
        return galaxy

    # ------------------------------------------------------------------
    # GEXF export
    # ------------------------------------------------------------------

    def _write_gexf(self, stars: pd.DataFrame, edges: pd.DataFrame) -> None:
        """Export a GEXF file for Gephi (requires networkx ≥ 2.0)."""
        try:
            import networkx as nx
        except ImportError:
            print("  networkx not found – skipping GEXF export.  "
                  "Install with: pip install networkx")
            return

        G = nx.Graph()
        for row in stars.itertuples(index=False):
            G.add_node(
                int(row.id),
                constellation=int(row.constellation),
                x=float(row.x),
                y=float(row.y),
            )
        for row in edges.itertuples(index=False):
            G.add_edge(
                int(row.source),
                int(row.target),
                length=float(row.length),
                kind=str(row.kind),
            )

        gexf_path = os.path.join(self.cfg.out_dir, "graph.gexf")
        nx.write_gexf(G, gexf_path)
        print(f"  Wrote {gexf_path}")

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Generate a galaxy, print acceptance checks, write outputs.

        Returns
        -------
        stars_df : DataFrame  (id, constellation, index, x, y)
        edges_df : DataFrame  (source, target, length, kind)
        """
        cfg = self.cfg
        cfg.validate()
        os.makedirs(cfg.out_dir, exist_ok=True)

        print("Generating galaxy …")
        galaxy = self.regenerate()
        print(f"  {len(galaxy.constellations)} constellations, "
              f"{galaxy.n_stars} stars, {len(galaxy.inter_edges)} links")

        run_checks(galaxy, cfg)

        stars, edges = galaxy.to_frames()
        stars_path = os.path.join(cfg.out_dir, "stars.csv")
        edges_path = os.path.join(cfg.out_dir, "edges.csv")
        stars.to_csv(stars_path, index=False)
        edges.to_csv(edges_path, index=False)
        print(f"Wrote {stars_path}")
        print(f"Wrote {edges_path}")

        if cfg.write_gexf:
            self._write_gexf(stars, edges)

        return stars, edges


# ---------------------------------------------------------------------------
# Script entry point (uses all GalaxyConfig defaults)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    GalaxyGenerator(GalaxyConfig()).run()
