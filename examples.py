"""Examples demonstrating viewport transforms, edge routing and connection validation."""

import logging

from nodeview import (
    Connector,
    ConnectionValidator,
    Diagram,
    Edge,
    EdgeEnd,
    EdgeRouter,
    EdgeType,
    GridConfig,
    Node,
    Point,
    PortRef,
    Rect,
    RoutingConfig,
    Viewport,
    ViewportConfig,
    count_port_connections,
    create_connection,
    create_port,
    max_connections_rule,
    setup_logging,
)


def sample_diagram():
    """A small schematic: a sensor and an MCU with a regulator in between."""
    return Diagram(
        nodes=[
            Node("sensor", 0, 0, type="sensor", connectors=[Connector("out", 7.5, 0)]),
            Node("ldo", 40, 0, type="regulator"),
            Node("mcu", 80, 0, type="chip", connectors=[
                Connector("adc", -10, 0),
                Connector("gpio", -10, 5),
            ]),
        ],
        edges=[
            Edge("signal", EdgeEnd("sensor", "out"), EdgeEnd("mcu", "adc")),
            Edge("enable", EdgeEnd("sensor", "out"), EdgeEnd("mcu", "gpio"), type=EdgeType.LINE),
        ],
    )


# Node sizes by node type (width, height)
NODE_SIZES = {
    "sensor": (15, 5),
    "regulator": (10, 10),
    "chip": (20, 20),
}


def routing_modes():
    """Route the same diagram in every mode."""
    diagram = sample_diagram()

    for mode in ("orthogonal", "bezier", "direct"):
        router = EdgeRouter(diagram, RoutingConfig(mode=mode, margin=2, grid_size=5), NODE_SIZES)
        for edge_id, path in router.route_all().items():
            print(f"  {mode:<10} {edge_id:<7} {path}")


def drag_node():
    """Re-route after moving a node out of the way."""
    diagram = sample_diagram()
    router = EdgeRouter(diagram, RoutingConfig(margin=2, grid_size=5), NODE_SIZES)

    print(f"  before: {router.route_all()['signal']}")
    diagram.move_node("ldo", 40, 30)
    print(f"  after:  {router.route_all()['signal']}")


def viewport_navigation():
    """Screen/world conversion, grid snapping and fit-to-view."""
    viewport = Viewport(ViewportConfig(
        width=800,
        height=600,
        world_bounds=Rect(0, 0, 200, 150),
        origin="bottom-left",
        units="mm",
        grid=GridConfig(size=2.54, snap=True),
    ))

    cursor = viewport.screen_to_world(412, 288)
    snapped = viewport.snap_to_grid(cursor)
    print(f"  cursor:  {viewport.format_coordinate(cursor.x)}, {viewport.format_coordinate(cursor.y)}")
    print(f"  snapped: {viewport.format_coordinate(snapped.x)}, {viewport.format_coordinate(snapped.y)}")

    viewport.zoom_in()
    viewport.pan_by(0.05, 0)
    print(f"  viewBox after zoom/pan: {viewport.get_view_box()}")

    viewport.fit_to_view(Rect(-10, -5, 100, 10))
    print(f"  viewBox after fit:      {viewport.get_view_box()}")
    print(f"  grid dots visible:      {len(viewport.generate_grid_dots())}")


def validate_connections():
    """Default rules plus an enforcing max-connections rule."""
    vout = create_port("vout", "electrical", "output", Point(7.5, 0), properties={"voltage": 5})
    vin = create_port("vin", "electrical", "input", Point(-10, 0), properties={"voltage": 3.3})
    clk = create_port("clk", "data", "output", Point(0, 5), max_connections=1)
    din = create_port("din", "mechanical", "input", Point(0, -5))

    validator = ConnectionValidator()
    for source, target in ((vout, vin), (clk, din), (vin, vout)):
        result = validator.validate(source, target)
        print(f"  {source.id} -> {target.id}: valid={result.valid}")
        for message in result.errors:
            print(f"    error   [{message.rule}] {message.message}")
        for message in result.warnings:
            print(f"    warning [{message.rule}] {message.message}")

    existing = [create_connection("c1", "trace", PortRef("osc", "clk"), PortRef("mcu", "xin"))]
    validator.remove_rule("max-connections")
    validator.add_rule(max_connections_rule(count_port_connections(existing)))

    xin = create_port("xin", "data", "input", Point(0, 0))
    proposed = create_connection("c2", "trace", PortRef("osc", "clk"), PortRef("mcu2", "xin"))
    result = validator.validate(clk, xin, proposed)
    print(f"  clk -> xin with live counts: valid={result.valid}")
    for message in result.errors:
        print(f"    error   [{message.rule}] {message.message}")


if __name__ == "__main__":
    setup_logging(logging.INFO)

    print("=== nodeview examples ===\n")

    print("1. Routing modes:")
    routing_modes()
    print()

    print("2. Dragging a node:")
    drag_node()
    print()

    print("3. Viewport navigation:")
    viewport_navigation()
    print()

    print("4. Connection validation:")
    validate_connections()
    print()

    print("=== Done ===")
