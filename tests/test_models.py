"""Tests for the diagram data models."""

import pytest

from nodeview.models import Connector, Diagram, Node, Point, Rect


class TestRect:
    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Rect(0, 0, -1, 5)

    def test_edges_and_center(self):
        rect = Rect(10, 20, 30, 40)
        assert rect.right == 40
        assert rect.bottom == 60
        assert rect.center == Point(25, 40)

    def test_expanded(self):
        assert Rect(10, 10, 5, 5).expanded(2) == Rect(8, 8, 9, 9)

    def test_union(self):
        assert Rect(0, 0, 10, 10).union(Rect(20, -5, 5, 5)) == Rect(0, -5, 25, 15)

    def test_touching_rects_overlap(self):
        assert Rect(0, 0, 10, 10).overlaps(Rect(10, 0, 5, 5))
        assert not Rect(0, 0, 10, 10).overlaps(Rect(11, 0, 5, 5))

    def test_from_points(self):
        assert Rect.from_points(Point(5, 1), Point(-5, 3)) == Rect(-5, 1, 10, 2)


class TestDiagram:
    def make_diagram(self):
        return Diagram(nodes=[
            Node("a", 0, 0, connectors=[Connector("out", 7.5, 0)]),
            Node("b", 50, 0),
        ])

    def test_get_node(self):
        diagram = self.make_diagram()
        assert diagram.get_node("b").x == 50
        assert diagram.get_node("zz") is None

    def test_move_node(self):
        diagram = self.make_diagram()
        node = diagram.move_node("a", 5, 6)

        assert node.position == Point(5, 6)
        assert diagram.move_node("zz", 1, 1) is None

    def test_get_connector(self):
        node = self.make_diagram().get_node("a")
        assert node.get_connector("out") == Connector("out", 7.5, 0)
        assert node.get_connector("in") is None

    def test_point_unpacks(self):
        x, y = Point(3, 4)
        assert (x, y) == (3, 4)
