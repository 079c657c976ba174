"""Intersection and distance tests shared by routing and obstacle detection."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import NodeBounds, Point, Rect


def point_in_rect(point: Point, rect: Rect, margin: float = 0.0) -> bool:
    """Check if a point lies inside a rectangle grown by margin.

    Half-open box: the min edges are inside, the max edges are not.
    """
    return (
        rect.x - margin <= point.x < rect.x + rect.width + margin
        and rect.y - margin <= point.y < rect.y + rect.height + margin
    )


def orientation(p1: Point, p2: Point, p3: Point) -> float:
    """Cross product sign of p3 relative to the directed line p1 -> p2."""
    return (p3.x - p1.x) * (p2.y - p1.y) - (p2.x - p1.x) * (p3.y - p1.y)


def on_segment(p1: Point, p2: Point, p: Point) -> bool:
    """Check if p lies within the bounding box of segment p1 -> p2."""
    return (
        min(p1.x, p2.x) <= p.x <= max(p1.x, p2.x)
        and min(p1.y, p2.y) <= p.y <= max(p1.y, p2.y)
    )


def segments_intersect(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    """Check if segment a1-a2 intersects segment b1-b2 (touching counts)."""
    d1 = orientation(b1, b2, a1)
    d2 = orientation(b1, b2, a2)
    d3 = orientation(a1, a2, b1)
    d4 = orientation(a1, a2, b2)

    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True

    # Collinear cases
    if d1 == 0 and on_segment(b1, b2, a1):
        return True
    if d2 == 0 and on_segment(b1, b2, a2):
        return True
    if d3 == 0 and on_segment(a1, a2, b1):
        return True
    if d4 == 0 and on_segment(a1, a2, b2):
        return True

    return False


def segment_intersects_rect(
    p1: Point,
    p2: Point,
    rect: Rect,
    margin: float = 0.0,
) -> bool:
    """Check if segment p1 -> p2 touches a rectangle grown by margin."""
    expanded = rect.expanded(margin)

    if point_in_rect(p1, expanded) or point_in_rect(p2, expanded):
        return True

    corners = expanded.corners()
    for i in range(4):
        if segments_intersect(p1, p2, corners[i], corners[(i + 1) % 4]):
            return True

    return False


def is_point_blocked(
    point: Point,
    obstacles: Iterable[NodeBounds],
    margin: float,
) -> bool:
    """Check if a point lies inside any margin-expanded obstacle."""
    return any(point_in_rect(point, o.bounds, margin) for o in obstacles)


def is_segment_blocked(
    p1: Point,
    p2: Point,
    obstacles: Iterable[NodeBounds],
    margin: float,
) -> bool:
    """Check if a segment crosses any margin-expanded obstacle."""
    return any(segment_intersects_rect(p1, p2, o.bounds, margin) for o in obstacles)


def manhattan_distance(a: Point, b: Point) -> float:
    return abs(a.x - b.x) + abs(a.y - b.y)


def segment_length(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)
