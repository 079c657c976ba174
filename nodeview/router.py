"""Routes every edge of a diagram between its connectors."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from .exceptions import ConnectorNotFoundError, NodeNotFoundError
from .models import EdgeType, Point
from .pathfinding import RoutingConfig, RoutingMode, calculate_route, get_node_bounds

if TYPE_CHECKING:
    from .models import Diagram, Edge, EdgeEnd, Node
    from .pathfinding import SizeLookup

logger = logging.getLogger(__name__)


class EdgeRouter:
    """Computes path data for the edges of a diagram.

    Connector positions are node positions plus connector offsets. Every
    node other than an edge's own two endpoints is an obstacle for that edge.
    """

    def __init__(
        self,
        diagram: Diagram,
        config: RoutingConfig,
        size_lookup: SizeLookup | None = None,
    ):
        self.diagram = diagram
        self.config = config
        self.size_lookup = size_lookup

    def _require_node(self, node_id: str) -> Node:
        node = self.diagram.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def connector_position(self, node_id: str, connector_id: str) -> Point:
        """World position of a connector.

        Raises:
            NodeNotFoundError: If the node is not in the diagram
            ConnectorNotFoundError: If the node has no such connector
        """
        node = self._require_node(node_id)
        connector = node.get_connector(connector_id)
        if connector is None:
            raise ConnectorNotFoundError(node_id, connector_id)
        return Point(node.x + connector.x, node.y + connector.y)

    def _end_position(self, end: EdgeEnd) -> Point:
        return self.connector_position(end.node, end.connector)

    def _config_for(self, edge: Edge) -> RoutingConfig:
        """Line edges are drawn with straight segments whatever the configured mode."""
        if edge.type is EdgeType.LINE and self.config.mode is not RoutingMode.ORTHOGONAL:
            return dataclasses.replace(self.config, mode=RoutingMode.ORTHOGONAL)
        return self.config

    def route_edge(self, edge: Edge) -> str:
        """Path data for one edge."""
        start = self._end_position(edge.source)
        end = self._end_position(edge.target)

        obstacles = get_node_bounds(
            self.diagram.nodes,
            exclude_nodes=(edge.source.node, edge.target.node),
            size_lookup=self.size_lookup,
        )

        return calculate_route(start, end, obstacles, self._config_for(edge))

    def route_all(self) -> dict[str, str]:
        """Path data for every edge, keyed by edge id in diagram order."""
        paths = {edge.id: self.route_edge(edge) for edge in self.diagram.edges}
        logger.debug("Routed %d edges", len(paths))
        return paths
