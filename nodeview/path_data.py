"""Path commands and their SVG path-data serialization.

Routes are built as lists of commands, ``{'type': 'M'|'L'|'C'|'Q',
'points': [...]}``, and serialized to the path mini-language understood by
any 2-D vector surface::

    M x,y   L x,y   C cx1,cy1 cx2,cy2 x,y   Q cx,cy x,y
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .geometry import segment_length
from .models import Point

if TYPE_CHECKING:
    from collections.abc import Sequence

# Below this much room a corner is left sharp
MIN_CORNER_RADIUS = 0.1


def format_number(value: float) -> str:
    """Format a coordinate, dropping the fraction for integral values."""
    if value == int(value):
        return str(int(value))
    return repr(float(value))


def format_point(point: Point) -> str:
    return f"{format_number(point.x)},{format_number(point.y)}"


def commands_to_path_data(commands: Sequence[dict]) -> str:
    """Serialize path commands to a path-data string.

    Args:
        commands: List of {'type': ..., 'points': [...]} commands

    Returns:
        Space-separated path data, e.g. ``"M0,0 L10,0"``
    """
    return " ".join(
        cmd["type"] + " ".join(format_point(p) for p in cmd["points"])
        for cmd in commands
    )


def compute_polyline(points: Sequence[Point]) -> list[dict]:
    """Straight segments through every point."""
    if not points:
        return []
    commands = [{"type": "M", "points": [points[0]]}]
    commands.extend({"type": "L", "points": [p]} for p in points[1:])
    return commands


def compute_rounded_polyline(
    points: Sequence[Point],
    corner_radius: float = 5.0,
) -> list[dict]:
    """Convert path points to a polyline with rounded corners.

    Each interior corner becomes a quadratic curve whose control point is the
    corner itself. The radius is limited to half of each adjacent segment.

    Args:
        points: List of waypoints
        corner_radius: Radius for rounded corners

    Returns:
        List of path commands
    """
    if len(points) < 3:
        return compute_polyline(points)

    commands = [{"type": "M", "points": [points[0]]}]

    for i in range(1, len(points) - 1):
        prev = points[i - 1]
        curr = points[i]
        next_pt = points[i + 1]

        len1 = segment_length(prev, curr)
        len2 = segment_length(curr, next_pt)

        max_radius = min(corner_radius, len1 / 2, len2 / 2)

        if max_radius < MIN_CORNER_RADIUS:
            commands.append({"type": "L", "points": [curr]})
            continue

        v1x, v1y = (curr.x - prev.x) / len1, (curr.y - prev.y) / len1
        v2x, v2y = (next_pt.x - curr.x) / len2, (next_pt.y - curr.y) / len2

        arc_start = Point(curr.x - v1x * max_radius, curr.y - v1y * max_radius)
        arc_end = Point(curr.x + v2x * max_radius, curr.y + v2y * max_radius)

        commands.append({"type": "L", "points": [arc_start]})
        commands.append({"type": "Q", "points": [curr, arc_end]})

    commands.append({"type": "L", "points": [points[-1]]})

    return commands


def compute_cubic_curve(
    start: Point,
    end: Point,
    tension: float,
    dominant_axis: bool = True,
) -> list[dict]:
    """Single cubic curve from start to end.

    Control points sit ``tension`` of the way along the travel direction from
    each end. With ``dominant_axis`` the curve bows along whichever axis has
    the larger delta; otherwise it always bows horizontally.
    """
    dx = end.x - start.x
    dy = end.y - start.y

    if not dominant_axis or abs(dx) > abs(dy):
        c1 = Point(start.x + dx * tension, start.y)
        c2 = Point(end.x - dx * tension, end.y)
    else:
        c1 = Point(start.x, start.y + dy * tension)
        c2 = Point(end.x, end.y - dy * tension)

    return [
        {"type": "M", "points": [start]},
        {"type": "C", "points": [c1, c2, end]},
    ]
