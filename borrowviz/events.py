"""Turning annotation texts into events of a visualization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Optional

from borrowviz.data import ExternalEvent, ExternalEventKind, ResourceAccessPoint
from borrowviz.definitions import ParseError
from borrowviz.visualization import VisualizationData

EVENT_USAGE = (
    "ExternalEvents Usage:"
    "\n\tFormat: <event_name>(<from> -> <to>)"
    "\n\t    e.g.: // !{ PassByMutableReference(a->Some_Function()), ... }"
    "\n\tNote: GoOutOfScope and InitRefParam require only the <from> parameter"
    "\n\t    e.g.: // !{ GoOutOfScope(x) }"
)

_TWO_PARTY = {
    kind.value: kind
    for kind in (
        ExternalEventKind.COPY,
        ExternalEventKind.MOVE,
        ExternalEventKind.STATIC_BORROW,
        ExternalEventKind.MUTABLE_BORROW,
        ExternalEventKind.STATIC_DIE,
        ExternalEventKind.MUTABLE_DIE,
        ExternalEventKind.PASS_BY_STATIC_REFERENCE,
        ExternalEventKind.PASS_BY_MUTABLE_REFERENCE,
    )
}


def _split_fields(text: str) -> list[str]:
    """Split ``Event(from->to)`` or ``Event(name)`` into its fields."""
    parts = [p.strip() for p in text.split("->") if p.strip()]
    if len(parts) not in (1, 2):
        raise ParseError(EVENT_USAGE)
    head = parts[0]
    paren = head.find("(")
    if paren < 0:
        raise ParseError(EVENT_USAGE)
    if len(parts) == 1:
        fields = [head[:paren], head[paren + 1:len(head) - 1]]
    else:
        fields = [head[:paren], head[paren + 1:], parts[1][:-1]]
    if any(not f for f in fields):
        raise ParseError(EVENT_USAGE)
    return fields


def _resource(
    variables: Mapping[str, ResourceAccessPoint], name: str
) -> Optional[ResourceAccessPoint]:
    if name == "None":
        return None
    try:
        return variables[name]
    except KeyError:
        raise ParseError(
            f"Variable '{name}' does not exist! Name must match definition."
        ) from None


def _required(
    variables: Mapping[str, ResourceAccessPoint], name: str
) -> ResourceAccessPoint:
    rap = _resource(variables, name)
    if rap is None:
        raise ParseError("Expected Some variable, found None!")
    return rap


def _to_event(
    fields: list[str], variables: Mapping[str, ResourceAccessPoint]
) -> ExternalEvent:
    name = fields[0]
    if name == "Bind":
        return ExternalEvent(ExternalEventKind.BIND, None, _resource(variables, fields[1]))
    if name == "InitOwnerParam":
        return ExternalEvent(ExternalEventKind.MOVE, None, _resource(variables, fields[1]))
    if name == "InitRefParam":
        return ExternalEvent(
            ExternalEventKind.INIT_REF_PARAM, ro=_required(variables, fields[1])
        )
    if name == "GoOutOfScope":
        return ExternalEvent(
            ExternalEventKind.GO_OUT_OF_SCOPE, ro=_required(variables, fields[1])
        )
    kind = _TWO_PARTY.get(name)
    if kind is None:
        raise ParseError(f"{name} is not a valid event.\n{EVENT_USAGE}")
    if len(fields) < 3:
        raise ParseError(EVENT_USAGE)
    return ExternalEvent(
        kind, _resource(variables, fields[1]), _resource(variables, fields[2])
    )


def add_events(
    visualization_data: VisualizationData,
    variables: Mapping[str, ResourceAccessPoint],
    events: Iterable[tuple[int, str]],
) -> None:
    """Parse (line number, event text) pairs and record them in the visualization."""
    for line_number, text in events:
        event = _to_event(_split_fields(text), variables)
        visualization_data.append_external_event(event, line_number)