"""nodeview - viewport transforms, edge routing and connection validation for node diagrams.

Example usage:
    from nodeview import NodeBounds, Point, Rect, RoutingConfig, calculate_route

    obstacle = NodeBounds(id="U1", bounds=Rect(25, -5, 10, 10))
    path = calculate_route(
        Point(0, 0),
        Point(60, 0),
        [obstacle],
        RoutingConfig(mode="orthogonal", margin=2, grid_size=5),
    )
    # an orthogonal detour around U1, e.g. "M0,0 L0,-10 L40,-10 L40,0 L60,0"
"""

from .exceptions import (
    ConnectorNotFoundError,
    DiagramError,
    NodeNotFoundError,
    NodeViewError,
    ViewportConfigError,
)
from .logging_config import disable_logging, setup_logging
from .models import (
    Connector,
    Diagram,
    Edge,
    EdgeEnd,
    EdgeType,
    Node,
    NodeBounds,
    Point,
    Rect,
)
from .pathfinding import (
    RoutingConfig,
    RoutingMode,
    calculate_route,
    calculate_simple_orthogonal_route,
    find_path_astar,
    get_node_bounds,
    simplify_path,
)
from .ports import (
    DEFAULT_CONNECTION_RULES,
    Connection,
    ConnectionRule,
    ConnectionType,
    ConnectionValidator,
    Port,
    PortDirection,
    PortRef,
    PortType,
    RuleResult,
    Severity,
    ValidationMessage,
    ValidationResult,
    count_port_connections,
    create_connection,
    create_port,
    max_connections_rule,
)
from .router import EdgeRouter
from .viewport import (
    GRID_LEVELS,
    CoordinateOrigin,
    GridConfig,
    GridDot,
    GridLevel,
    GridLine,
    Units,
    Viewport,
    ViewportConfig,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "Point",
    "Rect",
    "NodeBounds",
    "Node",
    "Connector",
    "Edge",
    "EdgeEnd",
    "EdgeType",
    "Diagram",
    # Viewport
    "Viewport",
    "ViewportConfig",
    "GridConfig",
    "GridLevel",
    "GridDot",
    "GridLine",
    "GRID_LEVELS",
    "CoordinateOrigin",
    "Units",
    # Routing
    "RoutingConfig",
    "RoutingMode",
    "calculate_route",
    "calculate_simple_orthogonal_route",
    "find_path_astar",
    "simplify_path",
    "get_node_bounds",
    "EdgeRouter",
    # Validation
    "Port",
    "PortRef",
    "PortType",
    "PortDirection",
    "Connection",
    "ConnectionType",
    "ConnectionRule",
    "ConnectionValidator",
    "RuleResult",
    "Severity",
    "ValidationMessage",
    "ValidationResult",
    "DEFAULT_CONNECTION_RULES",
    "create_port",
    "create_connection",
    "max_connections_rule",
    "count_port_connections",
    # Errors
    "NodeViewError",
    "ViewportConfigError",
    "DiagramError",
    "NodeNotFoundError",
    "ConnectorNotFoundError",
    # Logging
    "setup_logging",
    "disable_logging",
    # Version
    "__version__",
]
