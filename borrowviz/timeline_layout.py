"""Column layout, labels and event dots of the timeline panel."""

from __future__ import annotations

from dataclasses import dataclass

from borrowviz.data import LINE_SPACE, EventKind, Function
from borrowviz.visualization import StructsInfo, VisualizationData

SPAN_BEGIN = (
    "&lt;span style=&quot;font-family: 'Source Code Pro', Consolas, "
    "'Ubuntu Mono', Menlo, 'DejaVu Sans Mono', monospace, monospace "
    "!important;&quot;&gt;"
)
SPAN_END = "&lt;/span&gt;"

# Key of the panel output that holds every column outside a struct box.
NON_STRUCT = -1

_LABEL_TEMPLATE = (
    '        <text x="{x_val}" y="70" style="text-anchor:middle" '
    'data-hash="{hash}" class="label tooltip-trigger" '
    'data-tooltip-text="{title}">{name}</text>\n'
)
_DOT_TEMPLATE = (
    '        <circle cx="{dot_x}" cy="{dot_y}" r="5" data-hash="{hash}" '
    'class="tooltip-trigger" data-tooltip-text="{title}"/>\n'
)


@dataclass
class TimelineColumn:
    """Position and description of one access point's column."""

    name: str
    x_val: int
    title: str
    is_ref: bool
    is_struct_group: bool
    is_member: bool
    owner: int


@dataclass
class PanelSection:
    """SVG fragments collected for one part of the timeline panel."""

    labels: str = ""
    dots: str = ""
    timelines: str = ""
    ref_line: str = ""
    arrows: str = ""


PanelOutput = dict[int, tuple[PanelSection, PanelSection]]


def _empty_output() -> PanelOutput:
    return {NON_STRUCT: (PanelSection(), PanelSection())}


def _panel_section(output: PanelOutput, column: TimelineColumn) -> PanelSection:
    """Section a column draws into: a struct's instance or members, or the rest."""
    if column.is_struct_group:
        pair = output.setdefault(column.owner, (PanelSection(), PanelSection()))
        return pair[1] if column.is_member else pair[0]
    return output.setdefault(NON_STRUCT, (PanelSection(), PanelSection()))[0]


def _styled(name: str) -> str:
    return SPAN_BEGIN + name + SPAN_END


def get_y_axis_pos(line_number: int) -> int:
    """Vertical position of a source line in the timeline panel."""
    return 85 - LINE_SPACE + LINE_SPACE * line_number


def compute_column_layout(
    visualization_data: VisualizationData, structs_info: StructsInfo
) -> tuple[dict[int, TimelineColumn], int]:
    """Lay out a column for every non-function access point.

    Struct boxes found along the way are appended to ``structs_info``.
    Returns the columns keyed by hash and the width of the panel.
    """
    layout: dict[int, TimelineColumn] = {}
    x = 0
    owner = -1
    owner_x = 0
    last_x = 0
    for hash_, timeline in sorted(visualization_data.timelines.items()):
        rap = timeline.resource_access_point
        if isinstance(rap, Function):
            continue
        name = rap.name
        if rap.is_ref():
            shown = name + "|*" + name
            x_space = max(90, (len(shown.encode("utf-8")) - 1) * 7)
        else:
            x_space = max(70, (len(name.encode("utf-8")) - 1) * 13)
        x += x_space
        mutability = "mutable" if visualization_data.is_mut(hash_) else "immutable"

        if owner == -1 and rap.is_struct_group() and not rap.is_member:
            owner = rap.hash
            owner_x = x
        elif owner != -1 and rap.is_struct_group() and rap.is_member:
            last_x = x
        elif owner != -1 and not rap.is_struct_group():
            structs_info.structs.append((owner, owner_x, last_x))
            owner = -1
            owner_x = 0
            last_x = 0

        layout[hash_] = TimelineColumn(
            name=name,
            x_val=x,
            title=f"{_styled(name)}, {mutability}",
            is_ref=rap.is_ref(),
            is_struct_group=rap.is_struct_group(),
            is_member=rap.is_member,
            owner=rap.get_owner(),
        )
    return layout, x + 100


def render_labels(output: PanelOutput, layout: dict[int, TimelineColumn]) -> None:
    """Add a name label on top of every column."""
    for hash_, column in sorted(layout.items()):
        name = column.name
        if column.is_ref:
            name = f'{column.name}<tspan stroke="none">|</tspan>*{column.name}'
        _panel_section(output, column).labels += _LABEL_TEMPLATE.format(
            x_val=column.x_val, hash=hash_, title=column.title, name=name
        )


def render_dots(
    output: PanelOutput,
    visualization_data: VisualizationData,
    layout: dict[int, TimelineColumn],
) -> None:
    """Add a dot for every event on every variable's timeline."""
    for hash_, timeline in sorted(visualization_data.timelines.items()):
        if isinstance(timeline.resource_access_point, Function):
            continue
        column = layout[hash_]
        resource_hold = False
        for line_number, event in timeline.history:
            if event.kind in (EventKind.ACQUIRE, EventKind.COPY):
                resource_hold = True
            elif event.kind is EventKind.MOVE:
                resource_hold = False

            title = "Unknown Resource Owner Value"
            name = visualization_data.get_name_from_hash(hash_)
            if name is not None:
                title = event.print_message_with_name(name)
                if event.kind is EventKind.OWNER_GO_OUT_OF_SCOPE:
                    title += (
                        ". Its resource is dropped."
                        if resource_hold
                        else ". No resource is dropped."
                    )
            _panel_section(output, column).dots += _DOT_TEMPLATE.format(
                dot_x=column.x_val,
                dot_y=get_y_axis_pos(line_number),
                hash=hash_,
                title=title,
            )