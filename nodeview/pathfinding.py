"""Grid-based A* pathfinding for edge routing using NetworkX."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

import networkx as nx

from .geometry import is_point_blocked, is_segment_blocked, manhattan_distance
from .models import NodeBounds, Point, Rect
from .path_data import (
    commands_to_path_data,
    compute_cubic_curve,
    compute_polyline,
    compute_rounded_polyline,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .models import Node

logger = logging.getLogger(__name__)

# Default node size when no size lookup is given (world units)
DEFAULT_NODE_WIDTH = 15.0
DEFAULT_NODE_HEIGHT = 5.0

DIRECT_CURVE_TENSION = 0.4
TWO_POINT_BEZIER_TENSION = 0.3
COLLINEAR_EPSILON = 0.001

# Free cells kept around the obstacles inside the search window
WINDOW_PADDING_CELLS = 2

# Slightly overweights the heuristic so equal-cost ties favour cells nearer the goal
TIE_BREAK_WEIGHT = 1.001

GridKey = tuple[int, int]
SizeLookup = Union[
    Mapping[Any, tuple[float, float]],
    Callable[[Any], Optional[tuple[float, float]]],
]


class RoutingMode(Enum):
    """Edge path styles."""

    ORTHOGONAL = "orthogonal"
    BEZIER = "bezier"
    DIRECT = "direct"


@dataclass
class RoutingConfig:
    """Configuration for edge routing, passed per call."""

    mode: RoutingMode = RoutingMode.ORTHOGONAL
    # Clearance kept around every obstacle
    margin: float = 2.0
    # Cell size of the A* grid
    grid_size: float = 5.0
    # Fillet radius for bezier mode
    corner_radius: float = 5.0
    # A* node expansions before falling back to a direct line
    max_iterations: int = 10_000
    # Largest search window (in grid cells) the graph is built for
    max_window_cells: int = 100_000

    def __post_init__(self) -> None:
        self.mode = RoutingMode(self.mode)
        if self.margin < 0:
            raise ValueError(f"margin must be non-negative, got {self.margin}")
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if self.corner_radius < 0:
            raise ValueError(f"corner_radius must be non-negative, got {self.corner_radius}")
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.max_window_cells <= 0:
            raise ValueError(f"max_window_cells must be positive, got {self.max_window_cells}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoutingConfig:
        """Build a config from a plain mapping (mode may be a string)."""
        return cls(**data)


class _SearchBudgetExceeded(Exception):
    """Raised from inside A* once max_iterations nodes have been expanded."""


def _snap_index(value: float, spacing: float) -> int:
    """Index of the nearest grid line, rounding halves up."""
    return math.floor(value / spacing + 0.5)


class RoutingGrid:
    """Bounded routing grid with a NetworkX graph for A* pathfinding.

    Grid nodes are keyed by absolute (col, row) indices, so the node at
    (c, r) sits at world position (c * grid_size, r * grid_size).

    The graph holds the full window; obstacles are tested lazily during the
    search, so only the cells A* actually expands are checked.
    """

    def __init__(
        self,
        min_key: GridKey,
        max_key: GridKey,
        config: RoutingConfig,
    ):
        """Initialize the grid.

        Args:
            min_key: (col, row) of the top-left grid node
            max_key: (col, row) of the bottom-right grid node
            config: Routing configuration
        """
        self.min_key = min_key
        self.max_key = max_key
        self.config = config
        self.graph: nx.Graph = nx.Graph()
        self.obstacles: list[NodeBounds] = []
        # Nodes expanded by the last find_path() call
        self.expanded = 0
        self._current: GridKey | None = None

    @property
    def cols(self) -> int:
        return self.max_key[0] - self.min_key[0] + 1

    @property
    def rows(self) -> int:
        return self.max_key[1] - self.min_key[1] + 1

    @property
    def cell_count(self) -> int:
        return self.cols * self.rows

    @classmethod
    def generate(
        cls,
        start: Point,
        end: Point,
        obstacles: Sequence[NodeBounds],
        config: RoutingConfig,
    ) -> RoutingGrid | None:
        """Build the search window around start, end and the obstacles in the way.

        Args:
            start: Route start in world coordinates
            end: Route end in world coordinates
            obstacles: Obstacle rectangles
            config: Routing configuration

        Returns:
            Populated RoutingGrid, or None if the window exceeds max_window_cells
        """
        window = cls._compute_window(start, end, obstacles, config)
        spacing = config.grid_size

        min_key = (
            math.floor(window.x / spacing) - WINDOW_PADDING_CELLS,
            math.floor(window.y / spacing) - WINDOW_PADDING_CELLS,
        )
        max_key = (
            math.ceil(window.right / spacing) + WINDOW_PADDING_CELLS,
            math.ceil(window.bottom / spacing) + WINDOW_PADDING_CELLS,
        )
        grid = cls(min_key, max_key, config)

        if grid.cell_count > config.max_window_cells:
            logger.debug(
                "Search window of %d cells exceeds limit of %d",
                grid.cell_count,
                config.max_window_cells,
            )
            return None

        area = grid.world_rect
        grid._build_graph([
            o for o in obstacles
            if area.overlaps(o.bounds.expanded(config.margin))
        ])
        return grid

    @staticmethod
    def _compute_window(
        start: Point,
        end: Point,
        obstacles: Sequence[NodeBounds],
        config: RoutingConfig,
    ) -> Rect:
        """Grow the start/end bounding box over every obstacle it reaches.

        An obstacle is reached when its expanded bounds overlap the padded
        window; reached obstacles enlarge the window, which may reach more.
        """
        pad = config.grid_size * WINDOW_PADDING_CELLS
        window = Rect.from_points(start, end)
        remaining = list(obstacles)

        grew = True
        while grew:
            grew = False
            for obstacle in list(remaining):
                expanded = obstacle.bounds.expanded(config.margin)
                if window.expanded(pad).overlaps(expanded):
                    window = window.union(expanded)
                    remaining.remove(obstacle)
                    grew = True

        return window

    @property
    def world_rect(self) -> Rect:
        """World-space rectangle spanned by the grid nodes."""
        top_left = self.to_world(self.min_key)
        bottom_right = self.to_world(self.max_key)
        return Rect.from_points(top_left, bottom_right)

    def _build_graph(self, obstacles: Sequence[NodeBounds]) -> None:
        """Create the 4-connected grid graph over the window."""
        self.obstacles = list(obstacles)
        self.graph = nx.grid_2d_graph(
            range(self.min_key[0], self.max_key[0] + 1),
            range(self.min_key[1], self.max_key[1] + 1),
        )

    def is_blocked(self, key: GridKey) -> bool:
        """True if the grid node lies inside a margin-expanded obstacle."""
        return is_point_blocked(self.to_world(key), self.obstacles, self.config.margin)

    def _edge_cost(self, u: GridKey, v: GridKey, data: dict) -> float | None:
        """A* weight callback; None hides a step that crosses an obstacle.

        NetworkX asks for the cost of every neighbour of the node it is
        expanding, so a change of ``u`` marks one more expansion.
        """
        if u != self._current:
            self._current = u
            self.expanded += 1
            if self.expanded > self.config.max_iterations:
                raise _SearchBudgetExceeded

        if is_segment_blocked(self.to_world(u), self.to_world(v), self.obstacles, self.config.margin):
            return None
        return self.config.grid_size

    def to_world(self, key: GridKey) -> Point:
        spacing = self.config.grid_size
        return Point(key[0] * spacing, key[1] * spacing)

    def nearest_key(self, point: Point) -> GridKey:
        """Grid key of the grid point nearest to a world position."""
        spacing = self.config.grid_size
        return (_snap_index(point.x, spacing), _snap_index(point.y, spacing))

    def _heuristic(self, a: GridKey, b: GridKey) -> float:
        """Manhattan distance in world units, weighted for tie-breaking."""
        return manhattan_distance(self.to_world(a), self.to_world(b)) * TIE_BREAK_WEIGHT

    def find_path(self, start: GridKey, end: GridKey) -> list[Point] | None:
        """Find path using A* with NetworkX.

        Args:
            start: Grid key of start
            end: Grid key of end

        Returns:
            List of world coordinates, or None if no path was found within
            max_iterations expansions
        """
        for key in (start, end):
            if key not in self.graph or self.is_blocked(key):
                return None

        if start == end:
            return [self.to_world(start)]

        self.expanded = 0
        self._current = None
        try:
            path = nx.astar_path(
                self.graph,
                start,
                end,
                heuristic=self._heuristic,
                weight=self._edge_cost,
            )
        except nx.NetworkXNoPath:
            return None
        except _SearchBudgetExceeded:
            logger.debug(
                "A* gave up after %d expansions", self.config.max_iterations
            )
            return None

        return [self.to_world(key) for key in path]


def find_path_astar(
    start: Point,
    end: Point,
    obstacles: Sequence[NodeBounds],
    config: RoutingConfig,
) -> list[Point]:
    """Waypoints from start to end that avoid the obstacles.

    Returns the direct line when it is already clear, and falls back to it
    when the grid search is over budget or finds no path.
    """
    if not is_segment_blocked(start, end, obstacles, config.margin):
        return [start, end]

    grid = RoutingGrid.generate(start, end, obstacles, config)
    if grid is None:
        return [start, end]

    path = grid.find_path(grid.nearest_key(start), grid.nearest_key(end))
    if path is None or len(path) < 2:
        logger.debug("No grid path from %s to %s, using direct line", start, end)
        return [start, end]

    # Grid-aligned endpoints give way to the true connector positions
    path[0] = start
    path[-1] = end
    return path


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def simplify_path(path: Sequence[Point]) -> list[Point]:
    """Remove interior points that do not change the path direction."""
    if len(path) <= 2:
        return list(path)

    simplified = [path[0]]

    for i in range(1, len(path) - 1):
        prev = simplified[-1]
        curr = path[i]
        next_pt = path[i + 1]

        dx1 = curr.x - prev.x
        dy1 = curr.y - prev.y
        dx2 = next_pt.x - curr.x
        dy2 = next_pt.y - curr.y

        cross = abs(dx1 * dy2 - dx2 * dy1)

        is_collinear = (
            (dx1 == 0 and dx2 == 0)
            or (dy1 == 0 and dy2 == 0 and _sign(dx1) == _sign(dx2))
            or (dx1 == 0 and dy1 == 0)
            or (
                cross < COLLINEAR_EPSILON
                and _sign(dx1) == _sign(dx2)
                and _sign(dy1) == _sign(dy2)
            )
        )

        if not is_collinear:
            simplified.append(curr)

    simplified.append(path[-1])

    return simplified


def calculate_simple_orthogonal_route(
    start: Point,
    end: Point,
    obstacles: Sequence[NodeBounds],
    margin: float,
) -> list[Point]:
    """Right-angle route with at most two bends, without a grid search.

    Candidates are tried in order: horizontal first, vertical first, a
    horizontal jog at the vertical midpoint, a vertical jog at the horizontal
    midpoint. The first fully clear candidate wins; otherwise the direct line.
    """
    mid_y = start.y + (end.y - start.y) / 2
    mid_x = start.x + (end.x - start.x) / 2

    candidates = [
        [start, Point(end.x, start.y), end],
        [start, Point(start.x, end.y), end],
        [start, Point(start.x, mid_y), Point(end.x, mid_y), end],
        [start, Point(mid_x, start.y), Point(mid_x, end.y), end],
    ]

    for candidate in candidates:
        if _is_route_clear(candidate, obstacles, margin):
            return candidate

    return [start, end]


def _is_route_clear(
    points: Sequence[Point],
    obstacles: Sequence[NodeBounds],
    margin: float,
) -> bool:
    return not any(
        is_segment_blocked(a, b, obstacles, margin)
        for a, b in zip(points, points[1:])
    )


def get_node_bounds(
    nodes: Iterable[Node],
    exclude_nodes: Iterable[str] | None = None,
    size_lookup: SizeLookup | None = None,
) -> list[NodeBounds]:
    """Extract bounding boxes from nodes for obstacle detection.

    Each box is centered on the node position.

    Args:
        nodes: Diagram nodes
        exclude_nodes: Node ids to leave out (typically the edge's endpoints)
        size_lookup: Mapping from node type to (width, height), or a callable
            returning (width, height) for a node. Unknown types use the
            default 15 x 5 size.

    Returns:
        One NodeBounds per included node
    """
    excluded = set(exclude_nodes or ())
    default_size = (DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT)

    result = []
    for node in nodes:
        if node.id in excluded:
            continue

        if size_lookup is None:
            size = None
        elif callable(size_lookup):
            size = size_lookup(node)
        else:
            size = size_lookup.get(node.type)
        width, height = size or default_size

        result.append(NodeBounds(
            id=node.id,
            bounds=Rect(node.x - width / 2, node.y - height / 2, width, height),
        ))

    return result


def render_waypoints(points: Sequence[Point], config: RoutingConfig) -> str:
    """Turn simplified waypoints into path data for the configured mode."""
    if config.mode is RoutingMode.ORTHOGONAL:
        commands = compute_polyline(points)
    elif len(points) == 2:
        commands = compute_cubic_curve(
            points[0], points[1], TWO_POINT_BEZIER_TENSION, dominant_axis=False
        )
    else:
        commands = compute_rounded_polyline(points, config.corner_radius)
    return commands_to_path_data(commands)


def calculate_route(
    start: Point,
    end: Point,
    obstacles: Sequence[NodeBounds],
    config: RoutingConfig,
) -> str:
    """Main routing function - path data from start to end avoiding obstacles.

    Args:
        start: Source connector position (world units)
        end: Target connector position (world units)
        obstacles: Obstacles the route must not cross
        config: Routing configuration

    Returns:
        Path data string, e.g. ``"M0,0 L20,0 L20,10"``
    """
    if config.mode is RoutingMode.DIRECT:
        return commands_to_path_data(
            compute_cubic_curve(start, end, DIRECT_CURVE_TENSION)
        )

    path = find_path_astar(start, end, obstacles, config)
    return render_waypoints(simplify_path(path), config)
