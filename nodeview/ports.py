"""Ports, connections and rule-based connection validation.

A :class:`ConnectionValidator` runs an ordered list of
:class:`ConnectionRule` objects against a proposed source/target port pair
and aggregates their verdicts. Rules are plain functions; each validator
owns its own copy of the rule list.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Optional

from .models import Point

logger = logging.getLogger(__name__)

VOLTAGE_TOLERANCE = 0.1
FALLBACK_COLOR = "#636e72"


class PortType(str, Enum):
    ELECTRICAL = "electrical"
    DATA = "data"
    MECHANICAL = "mechanical"
    OPTICAL = "optical"
    CUSTOM = "custom"


class PortDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    BIDIRECTIONAL = "bidirectional"


class ConnectionType(str, Enum):
    WIRE = "wire"
    BUS = "bus"
    TRACE = "trace"
    FIBER = "fiber"
    MECHANICAL = "mechanical"
    CUSTOM = "custom"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Port:
    """A typed, directional attachment point on a node."""

    id: str
    type: PortType
    direction: PortDirection
    position: Point
    properties: dict[str, Any] = field(default_factory=dict)
    max_connections: int | None = None
    allowed_connection_types: list[ConnectionType] | None = None

    # Visual properties
    shape: str = "circle"
    size: float = 4
    color: str | None = None

    label: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        self.type = PortType(self.type)
        self.direction = PortDirection(self.direction)


@dataclass(frozen=True)
class PortRef:
    """A port addressed by node id and port id."""

    node_id: str
    port_id: str


@dataclass
class Connection:
    """A connection between two ports, referenced by identity."""

    id: str
    type: ConnectionType
    source: PortRef
    target: PortRef
    properties: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = ConnectionType(self.type)


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one rule."""

    valid: bool = True
    message: str | None = None
    severity: Severity | None = None


RuleFunc = Callable[[Port, Port, Optional[Connection]], Any]


@dataclass(frozen=True)
class ConnectionRule:
    """A named validation rule over a source/target port pair."""

    name: str
    description: str
    validate: RuleFunc


@dataclass(frozen=True)
class ValidationMessage:
    rule: str
    message: str | None


@dataclass
class ValidationResult:
    """Aggregate verdict of all rules."""

    valid: bool
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def _normalize_result(rule: ConnectionRule, outcome: Any) -> RuleResult:
    """Read a rule outcome as a RuleResult.

    Only an explicit ``valid=False`` blocks; anything unrecognized is
    treated as a pass.
    """
    if isinstance(outcome, RuleResult):
        return outcome
    if isinstance(outcome, bool):
        return RuleResult(valid=outcome)
    if isinstance(outcome, Mapping):
        return RuleResult(
            valid=outcome.get("valid") is not False,
            message=outcome.get("message"),
            severity=_read_severity(rule, outcome.get("severity")),
        )
    logger.debug("Rule %r returned %r, treating as valid", rule.name, outcome)
    return RuleResult()


def _read_severity(rule: ConnectionRule, value: Any) -> Severity | None:
    """Severity from a rule mapping; unknown values carry no severity."""
    if value is None:
        return None
    try:
        return Severity(value)
    except ValueError:
        logger.debug("Rule %r returned unknown severity %r, ignoring", rule.name, value)
        return None


# Built-in rules

# Cross-type pairs that may be connected (source type, target type)
COMPATIBLE_TYPE_PAIRS = frozenset({
    (PortType.ELECTRICAL, PortType.DATA),
    (PortType.DATA, PortType.ELECTRICAL),
})


def check_type_compatibility(source: Port, target: Port, connection: Connection | None = None) -> RuleResult:
    if source.type == target.type:
        return RuleResult()

    if (source.type, target.type) in COMPATIBLE_TYPE_PAIRS:
        return RuleResult()

    return RuleResult(
        valid=False,
        message=f"Cannot connect {source.type.value} to {target.type.value}",
        severity=Severity.ERROR,
    )


def check_direction_compatibility(source: Port, target: Port, connection: Connection | None = None) -> RuleResult:
    if source.direction is PortDirection.OUTPUT and target.direction is PortDirection.INPUT:
        return RuleResult()

    if PortDirection.BIDIRECTIONAL in (source.direction, target.direction):
        return RuleResult()

    if source.direction is PortDirection.INPUT and target.direction is PortDirection.OUTPUT:
        return RuleResult(
            valid=False,
            message="Cannot connect input to output",
            severity=Severity.ERROR,
        )

    # Same direction is allowed but suspicious
    return RuleResult(
        message=f"Connecting {source.direction.value} to {target.direction.value}",
        severity=Severity.WARNING,
    )


def check_max_connections(source: Port, target: Port, connection: Connection | None = None) -> RuleResult:
    """Warn about single-connection ports.

    Only the static ``max_connections`` flag is visible here; use
    :func:`max_connections_rule` to enforce limits against live counts.
    """
    if source.max_connections is not None and source.max_connections <= 1:
        return RuleResult(
            message="Source port allows limited connections",
            severity=Severity.WARNING,
        )

    if target.max_connections is not None and target.max_connections <= 1:
        return RuleResult(
            message="Target port allows limited connections",
            severity=Severity.WARNING,
        )

    return RuleResult()


def check_voltage_compatibility(source: Port, target: Port, connection: Connection | None = None) -> RuleResult:
    if source.type is not PortType.ELECTRICAL or target.type is not PortType.ELECTRICAL:
        return RuleResult()

    source_voltage = source.properties.get("voltage")
    target_voltage = target.properties.get("voltage")

    # Properties are free-form; only numeric voltages are compared
    if not isinstance(source_voltage, Real) or not isinstance(target_voltage, Real):
        return RuleResult()

    if abs(source_voltage - target_voltage) > VOLTAGE_TOLERANCE:
        return RuleResult(
            message=f"Voltage mismatch: {source_voltage}V to {target_voltage}V",
            severity=Severity.WARNING,
        )

    return RuleResult()


def max_connections_rule(connection_count: Callable[[PortRef], int]) -> ConnectionRule:
    """Build a max-connections rule that enforces limits.

    Port ids are only unique within a node, so the ports are located through
    the proposed connection's source and target refs. Without a connection
    the rule cannot count and passes.

    Args:
        connection_count: Returns how many connections the referenced port
            already has, e.g. from :func:`count_port_connections`

    Returns:
        A rule named ``max-connections`` that fails when either port is full
    """
    def validate(source: Port, target: Port, connection: Connection | None = None) -> RuleResult:
        if connection is None:
            logger.debug("No connection given for %s -> %s, not counting", source.id, target.id)
            return RuleResult()

        ends = (
            ("Source", source, connection.source),
            ("Target", target, connection.target),
        )
        for role, port, ref in ends:
            if port.max_connections is None:
                continue
            count = connection_count(ref)
            if count >= port.max_connections:
                return RuleResult(
                    valid=False,
                    message=(
                        f"{role} port {port.id!r} already has {count} of "
                        f"{port.max_connections} allowed connections"
                    ),
                    severity=Severity.ERROR,
                )
        return RuleResult()

    return ConnectionRule(
        name="max-connections",
        description="Port cannot exceed maximum connections",
        validate=validate,
    )


def count_port_connections(connections: Iterable[Connection]) -> Callable[[PortRef], int]:
    """Connection counter keyed by (node id, port id), for :func:`max_connections_rule`."""
    counts: Counter[PortRef] = Counter()
    for connection in connections:
        counts[connection.source] += 1
        counts[connection.target] += 1
    return lambda ref: counts[ref]


DEFAULT_CONNECTION_RULES: tuple[ConnectionRule, ...] = (
    ConnectionRule(
        name="port-type-compatibility",
        description="Source and target ports must be compatible types",
        validate=check_type_compatibility,
    ),
    ConnectionRule(
        name="direction-compatibility",
        description="Connection direction must be valid",
        validate=check_direction_compatibility,
    ),
    ConnectionRule(
        name="max-connections",
        description="Port cannot exceed maximum connections",
        validate=check_max_connections,
    ),
    ConnectionRule(
        name="voltage-compatibility",
        description="Electrical ports should have compatible voltages",
        validate=check_voltage_compatibility,
    ),
)


class ConnectionValidator:
    """Runs connection rules in order and aggregates their results."""

    def __init__(self, rules: Iterable[ConnectionRule] | None = None):
        self._rules: list[ConnectionRule] = list(
            DEFAULT_CONNECTION_RULES if rules is None else rules
        )

    @property
    def rules(self) -> tuple[ConnectionRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: ConnectionRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, name: str) -> bool:
        """Remove every rule with this name. Returns True if any was removed."""
        before = len(self._rules)
        self._rules = [rule for rule in self._rules if rule.name != name]
        return len(self._rules) != before

    def get_rule(self, name: str) -> ConnectionRule | None:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def validate(
        self,
        source: Port,
        target: Port,
        connection: Connection | None = None,
    ) -> ValidationResult:
        """Validate a proposed connection from source to target.

        Returns:
            ValidationResult; ``valid`` is False iff some rule returned
            ``valid=False``. Warnings come from passing rules with warning
            severity.
        """
        errors = []
        warnings = []

        for rule in self._rules:
            result = _normalize_result(rule, rule.validate(source, target, connection))

            if not result.valid:
                errors.append(ValidationMessage(rule.name, result.message))
            elif result.severity is Severity.WARNING:
                warnings.append(ValidationMessage(rule.name, result.message))

        if errors:
            logger.debug(
                "Connection %s -> %s rejected by %s",
                source.id, target.id, ", ".join(e.rule for e in errors),
            )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


# Port and connection factories

PORT_COLORS: dict[PortType, dict[PortDirection, str]] = {
    PortType.ELECTRICAL: {
        PortDirection.INPUT: "#ff6b6b",
        PortDirection.OUTPUT: "#4ecdc4",
        PortDirection.BIDIRECTIONAL: "#45b7d1",
    },
    PortType.DATA: {
        PortDirection.INPUT: "#96ceb4",
        PortDirection.OUTPUT: "#feca57",
        PortDirection.BIDIRECTIONAL: "#ff9ff3",
    },
    PortType.MECHANICAL: {
        PortDirection.INPUT: "#74b9ff",
        PortDirection.OUTPUT: "#fd79a8",
        PortDirection.BIDIRECTIONAL: "#fdcb6e",
    },
    PortType.OPTICAL: {
        PortDirection.INPUT: "#a29bfe",
        PortDirection.OUTPUT: "#fd79a8",
        PortDirection.BIDIRECTIONAL: "#e17055",
    },
    PortType.CUSTOM: {
        PortDirection.INPUT: FALLBACK_COLOR,
        PortDirection.OUTPUT: FALLBACK_COLOR,
        PortDirection.BIDIRECTIONAL: FALLBACK_COLOR,
    },
}

CONNECTION_COLORS: dict[ConnectionType, str] = {
    ConnectionType.WIRE: "#2d3436",
    ConnectionType.BUS: "#0984e3",
    ConnectionType.TRACE: "#00b894",
    ConnectionType.FIBER: "#e17055",
    ConnectionType.MECHANICAL: "#74b9ff",
    ConnectionType.CUSTOM: FALLBACK_COLOR,
}

CONNECTION_WIDTHS: dict[ConnectionType, float] = {
    ConnectionType.WIRE: 1,
    ConnectionType.BUS: 3,
    ConnectionType.TRACE: 1.5,
    ConnectionType.FIBER: 2,
    ConnectionType.MECHANICAL: 2,
    ConnectionType.CUSTOM: 1,
}


def default_port_color(port_type: PortType | str, direction: PortDirection | str) -> str:
    return PORT_COLORS[PortType(port_type)][PortDirection(direction)]


def default_connection_color(connection_type: ConnectionType | str) -> str:
    return CONNECTION_COLORS[ConnectionType(connection_type)]


def default_connection_width(connection_type: ConnectionType | str) -> float:
    return CONNECTION_WIDTHS[ConnectionType(connection_type)]


def create_port(
    id: str,
    type: PortType | str,
    direction: PortDirection | str,
    position: Point,
    **options: Any,
) -> Port:
    """Create a port with default shape, size and colour.

    Args:
        id: Port id
        type: Port type
        direction: Port direction
        position: Position relative to the node
        **options: Any other Port field; overrides the defaults

    Returns:
        New Port
    """
    values: dict[str, Any] = {
        "shape": "circle",
        "size": 4,
        "color": default_port_color(type, direction),
    }
    values.update(options)
    return Port(id=id, type=type, direction=direction, position=position, **values)


def create_connection(
    id: str,
    type: ConnectionType | str,
    source: PortRef,
    target: PortRef,
    **options: Any,
) -> Connection:
    """Create a connection with default stroke colour and width.

    A ``style`` option is merged over the defaults rather than replacing them.
    """
    style = {
        "stroke": default_connection_color(type),
        "stroke_width": default_connection_width(type),
    }
    style.update(options.pop("style", None) or {})
    return Connection(id=id, type=type, source=source, target=target, style=style, **options)
