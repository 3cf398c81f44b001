"""
galaxygeom.py
=============
2-D segment geometry for the constellation generator.

Provides the orientation-based segment intersection predicate used as the
planarity guard when disconnected star groups inside a constellation are
joined (see ``starfield.merge_components``).

Points are anything indexable as ``p[0], p[1]`` – tuples or rows of an
``(N, 2)`` numpy array.
"""

from __future__ import annotations

import enum


class Orientation(enum.IntEnum):
    COLINEAR = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2


def orientation(p, q, r) -> Orientation:
    """Orientation of the ordered triplet (p, q, r).

    The cross product is rounded to the nearest integer before its sign is
    taken, so near-colinear floating-point triplets count as colinear.
    """
    val = round(
        float((q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1]))
    )
    if val == 0:
        return Orientation.COLINEAR
    return Orientation.CLOCKWISE if val > 0 else Orientation.COUNTER_CLOCKWISE


def on_segment(p, q, r) -> bool:
    """True if *q* lies inside the bounding box of segment p→r.

    Only meaningful when p, q and r are already known to be colinear.
    """
    return (
        min(p[0], r[0]) <= q[0] <= max(p[0], r[0])
        and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])
    )


def segments_intersect(p1, q1, p2, q2) -> bool:
    """True if segment p1→q1 and segment p2→q2 intersect (touching counts).

    Parameters
    ----------
    p1, q1 : endpoints of the first segment
    p2, q2 : endpoints of the second segment
    """
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    # General case
    if o1 != o2 and o3 != o4:
        return True

    # Colinear cases: the third point lies on the other segment
    if o1 == Orientation.COLINEAR and on_segment(p1, p2, q1):
        return True
    if o2 == Orientation.COLINEAR and on_segment(p1, q2, q1):
        return True
    if o3 == Orientation.COLINEAR and on_segment(p2, p1, q2):
        return True
    if o4 == Orientation.COLINEAR and on_segment(p2, q1, q2):
        return True

    return False
