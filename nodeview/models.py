"""Data models for nodeview diagrams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator


class EdgeType(Enum):
    """How an edge between two connectors is drawn."""

    BEZIER = "bezier"
    LINE = "line"


@dataclass(frozen=True)
class Point:
    """A 2-D point in world or screen coordinates."""

    x: float
    y: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def offset(self, dx: float, dy: float) -> Point:
        """Return this point moved by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle. (x, y) is the min corner."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rect size must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def expanded(self, margin: float) -> Rect:
        """Return the rectangle grown by margin on every side."""
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + margin * 2,
            self.height + margin * 2,
        )

    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Corners in drawing order, starting at the min corner."""
        return (
            Point(self.x, self.y),
            Point(self.right, self.y),
            Point(self.right, self.bottom),
            Point(self.x, self.bottom),
        )

    def union(self, other: Rect) -> Rect:
        """Smallest rectangle containing both rectangles."""
        min_x = min(self.x, other.x)
        min_y = min(self.y, other.y)
        return Rect(
            min_x,
            min_y,
            max(self.right, other.right) - min_x,
            max(self.bottom, other.bottom) - min_y,
        )

    def overlaps(self, other: Rect) -> bool:
        """True if the two rectangles share any area or boundary."""
        return (
            self.x <= other.right
            and other.x <= self.right
            and self.y <= other.bottom
            and other.y <= self.bottom
        )

    @classmethod
    def from_points(cls, *points: Point) -> Rect:
        """Bounding rectangle of the given points."""
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


@dataclass(frozen=True)
class NodeBounds:
    """Obstacle rectangle derived from a node for one routing call."""

    id: str
    bounds: Rect


@dataclass
class Connector:
    """A connection point on a node, offset from the node position."""

    id: str
    x: float
    y: float


@dataclass
class Node:
    """A node in the diagram, positioned at its center."""

    id: str
    x: float
    y: float
    type: str | None = None
    connectors: list[Connector] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def get_connector(self, connector_id: str) -> Connector | None:
        for connector in self.connectors:
            if connector.id == connector_id:
                return connector
        return None


@dataclass(frozen=True)
class EdgeEnd:
    """One end of an edge: a node and one of its connectors."""

    node: str
    connector: str


@dataclass
class Edge:
    """An edge connecting two connectors."""

    id: str
    source: EdgeEnd
    target: EdgeEnd
    type: EdgeType = EdgeType.BEZIER


@dataclass
class Diagram:
    """The root diagram container."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def move_node(self, node_id: str, x: float, y: float) -> Node | None:
        """Set a node's position, returning the node (None if unknown)."""
        node = self.get_node(node_id)
        if node is not None:
            node.x = x
            node.y = y
        return node
