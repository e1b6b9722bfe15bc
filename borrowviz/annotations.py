"""Extraction of event annotations from the body of an annotated example."""

from __future__ import annotations

from collections.abc import Iterable

from borrowviz.definitions import ParseError

_OPEN = "!{"
_CLOSE = "}"


def _delimitation_error(line_number: int) -> ParseError:
    return ParseError(
        f"Found unterminated delimitation on line {line_number}! "
        "Please close with }."
    )


def extract_events(lines: Iterable[str], main_line: int) -> list[tuple[int, str]]:
    """Collect ``!{ ... }`` annotations as (line number, event text) pairs.

    ``lines`` are the lines after the definition header, which ends at
    ``main_line``. An annotation may span several lines; such a block
    counts as the line it starts on, and the lines it covers do not count
    towards later line numbers. Raises ParseError for an unclosed block.
    """
    raw: list[tuple[int, str]] = []
    block_parts: list[str] = []
    in_block = False
    line_begin = 0
    line_end = 0

    for index, line in enumerate(lines):
        if in_block:
            if _OPEN in line:
                raise _delimitation_error(line_begin + main_line)
            close = line.find(_CLOSE)
            if close >= 0:
                block_parts.append(line[:close])
                raw.extend(
                    (line_begin, part.strip())
                    for part in "".join(block_parts).split(",")
                )
                block_parts.clear()
                in_block = False
                line_end = index + 1
            else:
                block_parts.append(line.strip())
            continue

        start = line.rfind(_OPEN)
        if start < 0:
            continue
        close = line[start:].rfind(_CLOSE)
        if close >= 0:
            skipped = line_end - line_begin
            raw.append((index - skipped + 1, line[start + 2:start + close].strip()))
        else:
            in_block = True
            line_begin = index + 1
            block_parts.append(line[start + 2:])

    if in_block:
        raise _delimitation_error(line_begin + main_line)

    return [
        (line_number, part.strip())
        for line_number, text in raw
        for part in text.split(",")
        if part.strip()
    ]