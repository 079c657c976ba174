"""
Shared pytest fixtures for nodeview tests
"""

import pytest

from nodeview import NodeBounds, Point, Rect, RoutingConfig


@pytest.fixture
def routing_config():
    """Orthogonal routing on a 5-unit grid with a 1-unit margin"""
    return RoutingConfig(mode="orthogonal", margin=1, grid_size=5)


@pytest.fixture
def blocking_obstacle():
    """Obstacle spanning x in [25, 35], centered between (0, 0) and (60, 0)"""
    return NodeBounds(id="blocker", bounds=Rect(25, -5, 10, 10))


@pytest.fixture
def route_endpoints():
    return Point(0, 0), Point(60, 0)
