"""Rendering of the code panel of the visualization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

LINE_SPACE = 30

_X = 20
_FIRST_Y = 90
_LINE_TEMPLATE = '        <text class="code" x="{x}" y="{y}"> {line} </text>\n'


def render_code_panel(
    annotated_lines: Iterable[str],
    lines: Iterable[str],
    event_line_map: Mapping[int, Sequence[Any]],
) -> tuple[str, int, int]:
    """Render annotated source lines as SVG text elements.

    Lines that carry several arrow events get extra empty numbered lines.
    Returns the SVG group, the next line number after the last rendered one,
    and the byte length of the longest plain source line.
    """
    max_x_space = max((len(line.encode("utf-8")) for line in lines), default=0)

    parts = ['    <g id="code">\n']
    y = _FIRST_Y
    line_of_code = 1
    for line in annotated_lines:
        numbered = f'<tspan fill="#AAA">{line_of_code}  </tspan>{line}'
        parts.append(_LINE_TEMPLATE.format(x=_X, y=y, line=numbered))
        y += LINE_SPACE

        extra = len(event_line_map.get(line_of_code, ()))
        for _ in range(extra - 1):
            line_of_code += 1
            empty = f'<tspan fill="#AAA">{line_of_code}</tspan>'
            parts.append(_LINE_TEMPLATE.format(x=_X, y=y, line=empty))
            y += LINE_SPACE
        line_of_code += 1
    parts.append("    </g>\n")
    return "".join(parts), line_of_code, max_x_space