"""Tests for ports, connections and connection validation."""

import pytest

from nodeview.models import Point
from nodeview.ports import (
    DEFAULT_CONNECTION_RULES,
    FALLBACK_COLOR,
    ConnectionRule,
    ConnectionType,
    ConnectionValidator,
    PortDirection,
    PortRef,
    PortType,
    RuleResult,
    Severity,
    count_port_connections,
    create_connection,
    create_port,
    default_connection_color,
    default_port_color,
    max_connections_rule,
)


def make_port(id="p", type="electrical", direction="output", **options):
    return create_port(id, type, direction, Point(0, 0), **options)


def make_connection(id, source_port, target_port, type="wire", source_node="n1", target_node="n2"):
    return create_connection(id, type, PortRef(source_node, source_port), PortRef(target_node, target_port))


def rule(name, validate):
    return ConnectionRule(name=name, description=name, validate=validate)


class TestDefaultRules:
    """Tests for the built-in rule set."""

    def test_rule_order(self):
        assert [r.name for r in DEFAULT_CONNECTION_RULES] == [
            "port-type-compatibility",
            "direction-compatibility",
            "max-connections",
            "voltage-compatibility",
        ]

    def test_output_to_input_is_valid(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="output"),
            make_port("b", direction="input"),
        )
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_incompatible_types(self):
        result = ConnectionValidator().validate(
            make_port("a", type="electrical", direction="output"),
            make_port("b", type="mechanical", direction="input"),
        )
        assert not result.valid
        assert [(e.rule, e.message) for e in result.errors] == [
            ("port-type-compatibility", "Cannot connect electrical to mechanical"),
        ]

    @pytest.mark.parametrize("source,target", [("electrical", "data"), ("data", "electrical")])
    def test_electrical_and_data_compatible(self, source, target):
        result = ConnectionValidator().validate(
            make_port("a", type=source, direction="output"),
            make_port("b", type=target, direction="input"),
        )
        assert result.valid

    def test_input_to_output_rejected(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="input"),
            make_port("b", direction="output"),
        )
        assert not result.valid
        assert result.errors[0].message == "Cannot connect input to output"

    def test_same_direction_warns(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="output"),
            make_port("b", direction="output"),
        )
        assert result.valid
        assert [(w.rule, w.message) for w in result.warnings] == [
            ("direction-compatibility", "Connecting output to output"),
        ]

    def test_bidirectional_accepts_anything(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="input"),
            make_port("b", direction="bidirectional"),
        )
        assert result.valid
        assert result.warnings == []

    def test_single_connection_port_warns(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="output", max_connections=1),
            make_port("b", direction="input"),
        )
        assert result.valid
        assert [w.message for w in result.warnings] == ["Source port allows limited connections"]

    def test_voltage_mismatch_warns(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="output", properties={"voltage": 5}),
            make_port("b", direction="input", properties={"voltage": 3.3}),
        )
        assert result.valid
        assert [(w.rule, w.message) for w in result.warnings] == [
            ("voltage-compatibility", "Voltage mismatch: 5V to 3.3V"),
        ]

    @pytest.mark.parametrize("target_voltage,warns", [(12, True), (5.05, False), (5, False)])
    def test_voltage_tolerance_boundary(self, target_voltage, warns):
        result = ConnectionValidator().validate(
            make_port("a", direction="output", properties={"voltage": 5}),
            make_port("b", direction="input", properties={"voltage": target_voltage}),
        )
        assert bool(result.warnings) is warns

    def test_voltage_within_tolerance(self):
        result = ConnectionValidator().validate(
            make_port("a", direction="output", properties={"voltage": 3.3}),
            make_port("b", direction="input", properties={"voltage": 3.35}),
        )
        assert result.warnings == []

    def test_voltage_ignored_for_data_ports(self):
        result = ConnectionValidator().validate(
            make_port("a", type="data", direction="output", properties={"voltage": 5}),
            make_port("b", type="data", direction="input", properties={"voltage": 1.8}),
        )
        assert result.warnings == []

    @pytest.mark.parametrize("source_voltage,target_voltage", [
        ("5V", "12V"),
        (5, "3.3"),
        (None, 12),
    ])
    def test_non_numeric_voltages_skipped(self, source_voltage, target_voltage):
        result = ConnectionValidator().validate(
            make_port("a", direction="output", properties={"voltage": source_voltage}),
            make_port("b", direction="input", properties={"voltage": target_voltage}),
        )
        assert result.valid
        assert result.warnings == []

    def test_errors_and_warnings_together(self):
        result = ConnectionValidator().validate(
            make_port("a", type="optical", direction="output", max_connections=1),
            make_port("b", type="electrical", direction="output"),
        )
        assert not result.valid
        assert [e.rule for e in result.errors] == ["port-type-compatibility"]
        assert [w.rule for w in result.warnings] == ["direction-compatibility", "max-connections"]


class TestValidatorRules:
    """Tests for rule management and outcome handling."""

    def test_validators_do_not_share_rules(self):
        first = ConnectionValidator()
        second = ConnectionValidator()
        first.add_rule(rule("extra", lambda s, t, c: True))

        assert first.get_rule("extra") is not None
        assert second.get_rule("extra") is None
        assert len(DEFAULT_CONNECTION_RULES) == 4

    def test_remove_rule(self):
        validator = ConnectionValidator()
        assert validator.remove_rule("direction-compatibility") is True
        assert validator.remove_rule("direction-compatibility") is False

        result = validator.validate(make_port("a", direction="input"), make_port("b", direction="output"))
        assert result.valid

    def test_empty_rules_always_valid(self):
        result = ConnectionValidator(rules=[]).validate(
            make_port("a", type="optical"), make_port("b", type="mechanical")
        )
        assert result.valid

    def test_rules_run_in_order(self):
        calls = []

        def recorder(name):
            def validate(source, target, connection):
                calls.append(name)
                return RuleResult()
            return validate

        validator = ConnectionValidator(rules=[rule("one", recorder("one")), rule("two", recorder("two"))])
        validator.validate(make_port("a"), make_port("b"))

        assert calls == ["one", "two"]

    def test_connection_passed_to_rules(self):
        seen = []
        connection = make_connection("c1", "a", "b")
        validator = ConnectionValidator(rules=[rule("spy", lambda s, t, c: seen.append(c))])

        validator.validate(make_port("a"), make_port("b"), connection)

        assert seen == [connection]

    @pytest.mark.parametrize("outcome,valid", [
        (False, False),
        (True, True),
        ({"valid": False, "message": "nope"}, False),
        ({"message": "fine"}, True),
        (None, True),
        ("unexpected", True),
    ])
    def test_outcome_normalization(self, outcome, valid):
        validator = ConnectionValidator(rules=[rule("custom", lambda s, t, c: outcome)])
        assert validator.validate(make_port("a"), make_port("b")).valid is valid

    def test_mapping_warning(self):
        validator = ConnectionValidator(rules=[
            rule("custom", lambda s, t, c: {"valid": True, "message": "hmm", "severity": "warning"}),
        ])
        result = validator.validate(make_port("a"), make_port("b"))
        assert [(w.rule, w.message) for w in result.warnings] == [("custom", "hmm")]

    @pytest.mark.parametrize("outcome,valid", [
        ({"valid": True, "severity": "info"}, True),
        ({"valid": False, "message": "bad", "severity": "fatal"}, False),
    ])
    def test_unknown_severity_ignored(self, outcome, valid):
        validator = ConnectionValidator(rules=[rule("custom", lambda s, t, c: outcome)])
        result = validator.validate(make_port("a"), make_port("b"))

        assert result.valid is valid
        assert result.warnings == []

    def test_result_is_truthy_when_valid(self):
        assert ConnectionValidator(rules=[]).validate(make_port("a"), make_port("b"))
        assert not ConnectionValidator(rules=[rule("no", lambda s, t, c: False)]).validate(
            make_port("a"), make_port("b")
        )


class TestMaxConnectionsRule:
    """Tests for the enforcing max-connections rule."""

    def make_validator(self, existing):
        return ConnectionValidator(rules=[max_connections_rule(count_port_connections(existing))])

    def test_full_port_rejected(self):
        existing = [make_connection("c1", "a", "x"), make_connection("c2", "a", "y")]
        validator = ConnectionValidator()
        validator.remove_rule("max-connections")
        validator.add_rule(max_connections_rule(count_port_connections(existing)))

        result = validator.validate(
            make_port("a", direction="output", max_connections=2),
            make_port("b", direction="input"),
            make_connection("c3", "a", "b"),
        )

        assert not result.valid
        assert result.errors[0].rule == "max-connections"
        assert "'a'" in result.errors[0].message

    def test_port_with_room_accepted(self):
        validator = self.make_validator([make_connection("c1", "a", "x")])

        result = validator.validate(
            make_port("a", max_connections=2),
            make_port("b", max_connections=1),
            make_connection("c2", "a", "b"),
        )
        assert result.valid

    def test_same_port_id_on_other_node_not_counted(self):
        """Counts belong to (node, port), not to the bare port id."""
        existing = [make_connection("c1", "in", "out", source_node="n1", target_node="n2")]
        validator = self.make_validator(existing)

        result = validator.validate(
            make_port("out", max_connections=1),
            make_port("in", max_connections=1),
            make_connection("c2", "out", "in", source_node="n3", target_node="n4"),
        )
        assert result.valid

    def test_same_node_and_port_is_counted(self):
        existing = [make_connection("c1", "in", "out", source_node="n1", target_node="n2")]
        validator = self.make_validator(existing)

        result = validator.validate(
            make_port("out", max_connections=1),
            make_port("in", max_connections=1),
            make_connection("c2", "out", "in", source_node="n3", target_node="n1"),
        )
        assert not result.valid
        assert result.errors[0].message.startswith("Target port 'in'")

    def test_counter_keyed_by_port_ref(self):
        count = count_port_connections([
            make_connection("c1", "in", "out", source_node="n1", target_node="n2"),
            make_connection("c2", "in", "in", source_node="n1", target_node="n3"),
        ])
        assert count(PortRef("n1", "in")) == 2
        assert count(PortRef("n3", "in")) == 1
        assert count(PortRef("n2", "in")) == 0

    def test_without_connection_not_counted(self):
        def fail(ref):
            raise AssertionError("count should not be requested")

        validator = ConnectionValidator(rules=[max_connections_rule(fail)])
        assert validator.validate(make_port("a", max_connections=1), make_port("b")).valid

    def test_unlimited_ports_never_counted(self):
        def fail(ref):
            raise AssertionError("count should not be requested")

        validator = ConnectionValidator(rules=[max_connections_rule(fail)])
        assert validator.validate(make_port("a"), make_port("b"), make_connection("c1", "a", "b")).valid


class TestFactories:
    """Tests for create_port() and create_connection()."""

    def test_create_port_defaults(self):
        port = create_port("vcc", "electrical", "input", Point(0, -5))

        assert port.type is PortType.ELECTRICAL
        assert port.direction is PortDirection.INPUT
        assert port.shape == "circle"
        assert port.size == 4
        assert port.color == "#ff6b6b"

    def test_create_port_overrides(self):
        port = create_port("d0", "data", "output", Point(5, 0), shape="square", color="#000000", label="D0")
        assert port.shape == "square"
        assert port.color == "#000000"
        assert port.label == "D0"

    def test_custom_port_color(self):
        assert default_port_color("custom", "bidirectional") == FALLBACK_COLOR

    def test_create_connection_style(self):
        connection = create_connection("c1", "bus", PortRef("u1", "d0"), PortRef("u2", "d0"))
        assert connection.type is ConnectionType.BUS
        assert connection.style == {"stroke": "#0984e3", "stroke_width": 3}

    def test_create_connection_style_merged(self):
        connection = create_connection(
            "c1", "trace", PortRef("u1", "a"), PortRef("u2", "b"),
            style={"stroke_dasharray": "4 2"}, properties={"net": "GND"},
        )
        assert connection.style == {
            "stroke": default_connection_color("trace"),
            "stroke_width": 1.5,
            "stroke_dasharray": "4 2",
        }
        assert connection.properties == {"net": "GND"}

    def test_severity_values(self):
        assert Severity("warning") is Severity.WARNING
