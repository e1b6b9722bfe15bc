"""Vertical state lines and reference lines of the timeline panel."""

from __future__ import annotations

from dataclasses import dataclass, replace

from borrowviz.data import (
    Function,
    MutRef,
    ResourceAccessPoint,
    State,
    StateKind,
    StaticRef,
)
from borrowviz.line_styles import OwnerLine
from borrowviz.timeline_layout import (
    NON_STRUCT,
    PanelOutput,
    PanelSection,
    TimelineColumn,
    _panel_section,
    get_y_axis_pos,
)
from borrowviz.visualization import VisualizationData

_VERTICAL_LINE_TEMPLATE = (
    '        <line data-hash="{hash}" class="{line_class} tooltip-trigger" '
    'x1="{x1}" x2="{x2}" y1="{y1}" y2="{y2}" data-tooltip-text="{title}"/>\n'
)
_HOLLOW_LINE_TEMPLATE = (
    '        <path data-hash="{hash}" class="hollow tooltip-trigger" '
    'style="fill:transparent;" d="M {x1},{y1} V {y2} h 3.5 V {y1} h -3.5" '
    'data-tooltip-text="{title}"/>\n'
)
_SOLID_REF_LINE_TEMPLATE = (
    '        <path data-hash="{hash}" class="mutref {line_class} tooltip-trigger" '
    'style="fill:transparent; stroke-width: 2px !important;" '
    'd="M {x1} {y1} l {dx} {dy} v {v} l -{dx} {dy}" '
    'data-tooltip-text="{title}"/>\n'
)
_HOLLOW_REF_LINE_TEMPLATE = (
    '        <path data-hash="{hash}" class="staticref tooltip-trigger" '
    'style="fill: transparent;" stroke-width="2px" stroke-dasharray="3" '
    'd="M {x1} {y1} l {dx} {dy} v {v} l -{dx} {dy}" '
    'data-tooltip-text="{title}"/>\n'
)

# Horizontal offset of the bulge drawn for reference lines.
_REF_LINE_DX = 15
# Shift that centres a hollow path on the event dots.
_HOLLOW_SHIFT = 1.8


@dataclass
class _VerticalLine:
    hash: int
    x1: float
    x2: int
    y1: int
    y2: int
    title: str
    line_class: str = ""

    def render(self, template: str) -> str:
        return template.format(
            hash=self.hash,
            line_class=self.line_class,
            x1=repr(float(self.x1)),
            x2=self.x2,
            y1=self.y1,
            y2=self.y2,
            title=self.title,
        )

    def hollow(self) -> str:
        shifted = replace(self, x1=self.x1 - _HOLLOW_SHIFT)
        return shifted.render(_HOLLOW_LINE_TEMPLATE)


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


def determine_owner_line_styles(rap: ResourceAccessPoint, state: State) -> OwnerLine:
    """Line style of an owner's column in the given state."""
    if state.kind is StateKind.FULL_PRIVILEGE:
        return OwnerLine.SOLID if rap.is_mut else OwnerLine.HOLLOW
    if state.kind is StateKind.PARTIAL_PRIVILEGE:
        return OwnerLine.HOLLOW
    return OwnerLine.EMPTY


_PRIVILEGED = (StateKind.FULL_PRIVILEGE, StateKind.PARTIAL_PRIVILEGE)


def _owner_line(rap: ResourceAccessPoint, state: State, line: _VerticalLine) -> str:
    style = determine_owner_line_styles(rap, state)
    if state.kind not in _PRIVILEGED:
        return ""
    if style is OwnerLine.SOLID:
        line.line_class = "solid"
        line.title += ". The binding can be reassigned."
        return line.render(_VERTICAL_LINE_TEMPLATE)
    if style is OwnerLine.HOLLOW:
        line.title += ". The binding cannot be reassigned."
        return line.hollow()
    return ""


def _reference_line(
    rap: ResourceAccessPoint, state: State, line: _VerticalLine
) -> str:
    kind = state.kind
    if kind is StateKind.FULL_PRIVILEGE and rap.is_mut:
        line.line_class = "solid"
        if rap.is_ref():
            line.title += "; can read and write data; can point to another piece of data."
        else:
            line.title += "; can read and write data"
        return line.render(_VERTICAL_LINE_TEMPLATE)
    if kind is StateKind.FULL_PRIVILEGE:
        if rap.is_ref():
            line.title += (
                "; can read and write data; cannot point to another piece of data."
            )
        else:
            line.title += "; can only read data"
        return line.hollow()
    if kind is StateKind.PARTIAL_PRIVILEGE:
        line.line_class = "solid"
        line.title += "; can only read data."
        return line.hollow()
    if kind is StateKind.RESOURCE_MOVED and rap.is_mut:
        line.line_class = "extend"
        line.title += "; cannot access data."
        return line.render(_VERTICAL_LINE_TEMPLATE)
    return ""


def _non_struct_section(output: PanelOutput) -> PanelSection:
    return output.setdefault(NON_STRUCT, (PanelSection(), PanelSection()))[0]


def render_timelines(
    output: PanelOutput,
    visualization_data: VisualizationData,
    layout: dict[int, TimelineColumn],
) -> None:
    """Add a vertical line for every state span of every variable."""
    for hash_, timeline in sorted(visualization_data.timelines.items()):
        rap = timeline.resource_access_point
        if isinstance(rap, Function):
            continue
        column = layout[hash_]
        for line_start, line_end, state in visualization_data.get_states(hash_):
            line = _VerticalLine(
                hash=hash_,
                x1=float(column.x_val),
                x2=column.x_val,
                y1=get_y_axis_pos(line_start),
                y2=get_y_axis_pos(line_end),
                title=state.print_message_with_name(rap.name),
            )
            if rap.is_ref():
                _non_struct_section(output).timelines += _reference_line(
                    rap, state, line
                )
            else:
                _panel_section(output, column).timelines += _owner_line(
                    rap, state, line
                )


def render_ref_lines(
    output: PanelOutput,
    visualization_data: VisualizationData,
    layout: dict[int, TimelineColumn],
) -> None:
    """Add lines telling whether a reference can mutate what it points to."""
    for hash_, timeline in sorted(visualization_data.timelines.items()):
        rap = timeline.resource_access_point
        if isinstance(rap, MutRef):
            template = _SOLID_REF_LINE_TEMPLATE
        elif isinstance(rap, StaticRef):
            template = _HOLLOW_REF_LINE_TEMPLATE
        else:
            continue
        name = visualization_data.get_name_from_hash(hash_)
        alive = False
        x1 = y1 = 0
        title = ""
        for line_start, _line_end, state in visualization_data.get_states(hash_):
            kind = state.kind
            if kind in (StateKind.OUT_OF_SCOPE, StateKind.RESOURCE_MOVED):
                if alive:
                    dv = get_y_axis_pos(line_start) - y1
                    _non_struct_section(output).ref_line += template.format(
                        hash=hash_,
                        line_class="solid",
                        x1=x1,
                        y1=y1,
                        dx=_REF_LINE_DX,
                        dy=_trunc_div(dv, 5),
                        v=dv - _trunc_div(2 * dv, 5),
                        title=title,
                    )
                    alive = False
            elif kind in _PRIVILEGED and not alive:
                x1 = layout[hash_].x_val
                y1 = get_y_axis_pos(line_start)
                verb = "can" if kind is StateKind.FULL_PRIVILEGE else "cannot"
                title = f"{verb} mutate *{name}"
                alive = True