"""
Exceptions for the nodeview package.
"""


class NodeViewError(Exception):
    """Base exception for all nodeview errors."""

    pass


class ViewportConfigError(NodeViewError, ValueError):
    """Raised when a viewport configuration cannot produce a valid transform."""

    pass


class DiagramError(NodeViewError):
    """Base exception for diagram lookup errors."""

    pass


class NodeNotFoundError(DiagramError, KeyError):
    """Raised when an edge references a node that is not in the diagram."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id!r}")
        self.node_id = node_id

    def __str__(self) -> str:
        return self.args[0]


class ConnectorNotFoundError(DiagramError, KeyError):
    """Raised when an edge references a connector its node does not have."""

    def __init__(self, node_id: str, connector_id: str):
        super().__init__(f"Connector {connector_id!r} not found on node {node_id!r}")
        self.node_id = node_id
        self.connector_id = connector_id

    def __str__(self) -> str:
        return self.args[0]
