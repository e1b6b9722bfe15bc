"""Arrows, struct boxes and assembly of the timeline panel."""

from __future__ import annotations

import math
from typing import Optional

from borrowviz.data import (
    LINE_SPACE,
    ExternalEvent,
    ExternalEventKind,
    Function,
    ResourceAccessPoint,
    VisualizationError,
)
from borrowviz.timeline_layout import (
    NON_STRUCT,
    SPAN_BEGIN,
    SPAN_END,
    PanelOutput,
    PanelSection,
    TimelineColumn,
    _panel_section,
    compute_column_layout,
    get_y_axis_pos,
    render_dots,
    render_labels,
)
from borrowviz.timeline_lines import render_ref_lines, render_timelines
from borrowviz.visualization import StructsInfo, VisualizationData

_TIMELINE_PANEL_TEMPLATE = (
    '    <g id="labels">\n{labels}    </g>\n\n'
    '    <g id="timelines">\n{timelines}    </g>\n\n'
    '    <g id="ref_line">\n{ref_line}    </g>\n\n'
    '    <g id="events">\n{dots}    </g>\n\n'
    '    <g id="arrows">\n{arrows}    </g>'
)
_STRUCT_TEMPLATE = (
    '    <g id="{struct_name}">\n'
    '\t<g class="struct_instance">\n{struct_instance}</g>\n'
    '\t<g class="struct_members">\n{struct_members}</g>\n'
    "\t</g>\n    "
)
_FUNCTION_DOT_TEMPLATE = (
    '        <use xlink:href="#functionDot" data-hash="{hash}" x="{x}" y="{y}" '
    'class="tooltip-trigger" data-tooltip-text="{title}"/>\n'
)
_FUNCTION_LOGO_TEMPLATE = (
    '        <text x="{x}" y="{y}" data-hash="{hash}" '
    'class="functionLogo tooltip-trigger fn-trigger" '
    'data-tooltip-text="{title}">f</text>\n'
)
_ARROW_TEMPLATE = (
    '        <polyline stroke-width="5px" stroke="gray" points="{points}" '
    'marker-end="url(#arrowHead)" class="tooltip-trigger" '
    'data-tooltip-text="{title}" style="fill: none;"/> \n'
)
_BOX_TEMPLATE = (
    '        <rect id="{name}" x="{x}" y="{y}" rx="20" ry="20" width="{w}" '
    'height="{h}" style="fill:white;stroke:black;stroke-width:3;opacity:0.1" '
    'pointer-events="none" />\n'
)

_ARROW_TITLES = {
    ExternalEventKind.BIND: "Bind",
    ExternalEventKind.COPY: "Copy",
    ExternalEventKind.MOVE: "Move",
    ExternalEventKind.STATIC_BORROW: "Immutable borrow",
    ExternalEventKind.STATIC_DIE: "Return immutably borrowed resource",
    ExternalEventKind.MUTABLE_BORROW: "Mutable borrow",
    ExternalEventKind.MUTABLE_DIE: "Return mutably borrowed resource",
    ExternalEventKind.PASS_BY_MUTABLE_REFERENCE: "Pass by mutable reference",
    ExternalEventKind.PASS_BY_STATIC_REFERENCE: "Pass by immutable reference",
}

_ARROW_LENGTH = 20
# Distance the arrow head is pulled back from the target dot.
_HEAD_GAP = 10.0


def _styled(name: str) -> str:
    return SPAN_BEGIN + name + SPAN_END


def _fmt_coord(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def _non_struct(output: PanelOutput) -> PanelSection:
    return output.setdefault(NON_STRUCT, (PanelSection(), PanelSection()))[0]


def _arrow_title(event: ExternalEvent) -> str:
    title = _ARROW_TITLES.get(event.kind, "")
    if event.kind in _ARROW_TITLES:
        if event.from_ is not None:
            title = f"{title} from {_styled(event.from_.name)}"
        if event.to is not None:
            title = f"{title} to {_styled(event.to.name)}"
    return title


def _pull_back_head(coords: list[list[float]]) -> None:
    """Shorten the first segment so the arrow head stops short of its dot."""
    first, second, last = coords[0], coords[1], coords[-1]
    if len(coords) == 2:
        first[0] += _HEAD_GAP if first[0] < last[0] else -_HEAD_GAP
        return
    dy = second[1] - first[1]
    if first[0] < last[0]:
        dx = second[0] - first[0]
        hypotenuse = math.sqrt(dx * dx + dy * dy)
        first[0] += dx / hypotenuse * _HEAD_GAP
    else:
        dx = first[0] - second[0]
        hypotenuse = math.sqrt(dx * dx + dy * dy)
        first[0] -= dx / hypotenuse * _HEAD_GAP
    first[1] += dy / hypotenuse * _HEAD_GAP


def _variable_arrow(
    visualization_data: VisualizationData,
    layout: dict[int, TimelineColumn],
    line_number: int,
    event: ExternalEvent,
    from_ro: ResourceAccessPoint,
    to_ro: ResourceAccessPoint,
) -> list[list[float]]:
    line_events = visualization_data.event_line_map.get(line_number, [])
    if event not in line_events:
        raise VisualizationError(
            f"No arrow recorded on line {line_number} for this event!"
        )
    order = line_events.index(event)
    x1 = layout[to_ro.hash].x_val
    x2 = layout[from_ro.hash].x_val
    y = get_y_axis_pos(line_number)
    if order > 0:
        lower = y + LINE_SPACE * order
        if x2 <= x1:
            x3, x4 = x2 + 20, x1 - 20
        else:
            x3, x4 = x2 - 20, x1 + 20
        points = [(x1, y), (x4, lower), (x3, lower), (x2, y)]
    else:
        points = [(x1, y), (x2, y)]
    return [[float(px), float(py)] for px, py in points]


def render_arrows(
    output: PanelOutput,
    visualization_data: VisualizationData,
    layout: dict[int, TimelineColumn],
) -> None:
    """Add arrows, function dots and function logos for every recorded event."""
    for line_number, event in visualization_data.external_events:
        title = _arrow_title(event)
        from_ro: Optional[ResourceAccessPoint]
        to_ro: Optional[ResourceAccessPoint]
        if event.kind in _ARROW_TITLES:
            from_ro, to_ro = event.from_, event.to
        else:
            from_ro, to_ro = None, None
        coords: list[list[float]] = []
        y = get_y_axis_pos(line_number)

        if from_ro is None or to_ro is None:
            pass
        elif isinstance(from_ro, Function) and isinstance(to_ro, Function):
            pass
        elif isinstance(from_ro, Function):
            column = layout[to_ro.hash]
            x1 = column.x_val + 3
            x2 = x1 + _ARROW_LENGTH
            coords = [[float(x1), float(y)], [float(x2), float(y)]]
            _panel_section(output, column).dots += _FUNCTION_LOGO_TEMPLATE.format(
                x=x2 + 3, y=y + 5, hash=from_ro.hash, title=_styled(from_ro.name)
            )
        elif isinstance(to_ro, Function):
            column = layout[from_ro.hash]
            if event.kind in (
                ExternalEventKind.PASS_BY_STATIC_REFERENCE,
                ExternalEventKind.PASS_BY_MUTABLE_REFERENCE,
            ):
                verb = (
                    " reads from "
                    if event.kind is ExternalEventKind.PASS_BY_STATIC_REFERENCE
                    else " reads from/writes to "
                )
                _panel_section(output, column).dots += _FUNCTION_DOT_TEMPLATE.format(
                    x=column.x_val,
                    y=y,
                    hash=from_ro.hash,
                    title=_styled(to_ro.name) + verb + _styled(from_ro.name),
                )
            else:
                x2 = column.x_val - 5
                x1 = x2 - _ARROW_LENGTH
                coords = [[float(x1), float(y)], [float(x2), float(y)]]
                _panel_section(output, column).dots += _FUNCTION_LOGO_TEMPLATE.format(
                    x=x1 - 10, y=y + 5, hash=to_ro.hash, title=_styled(to_ro.name)
                )
        else:
            coords = _variable_arrow(
                visualization_data, layout, line_number, event, from_ro, to_ro
            )

        if not coords or from_ro is None:
            continue
        _pull_back_head(coords)
        points = "".join(
            f"{_fmt_coord(px)} {_fmt_coord(py)} " for px, py in reversed(coords)
        )
        arrow = _ARROW_TEMPLATE.format(points=points, title=title)
        column = layout.get(from_ro.hash)
        if column is not None and column.is_struct_group:
            _panel_section(output, column).arrows += arrow
        else:
            _non_struct(output).arrows += arrow


def render_struct_boxes(output: PanelOutput, structs_info: StructsInfo) -> None:
    """Draw a box around the columns of every struct instance and its members."""
    for owner, owner_x, last_x in structs_info.structs:
        box = _BOX_TEMPLATE.format(
            name=owner, x=owner_x - 20, y=50, w=last_x - owner_x + 60, h=30
        )
        output.setdefault(owner, (PanelSection(), PanelSection()))[1].arrows += box


def _render_section(section: PanelSection) -> str:
    return _TIMELINE_PANEL_TEMPLATE.format(
        labels=section.labels,
        timelines=section.timelines,
        ref_line=section.ref_line,
        dots=section.dots,
        arrows=section.arrows,
    )


def render_timeline_panel(visualization_data: VisualizationData) -> tuple[str, int]:
    """Render the whole timeline panel; return the SVG fragment and its width."""
    structs_info = StructsInfo()
    layout, width = compute_column_layout(visualization_data, structs_info)
    output: PanelOutput = {NON_STRUCT: (PanelSection(), PanelSection())}

    render_timelines(output, visualization_data, layout)
    render_labels(output, layout)
    render_dots(output, visualization_data, layout)
    render_ref_lines(output, visualization_data, layout)
    render_arrows(output, visualization_data, layout)
    render_struct_boxes(output, structs_info)

    parts = []
    for key, (instance, members) in sorted(output.items()):
        if key == NON_STRUCT:
            struct_name = "non-struct"
        else:
            found = visualization_data.get_name_from_hash(key)
            if found is None:
                raise VisualizationError(f"no matching resource owner for hash {key}")
            struct_name = found
        parts.append(
            _STRUCT_TEMPLATE.format(
                struct_name=struct_name,
                struct_instance=_render_section(instance),
                struct_members=_render_section(members),
            )
        )
    return "".join(parts), width