"""Parsing of the variable definition header of an annotated example."""

from __future__ import annotations

import re

from borrowviz.data import (
    Function,
    MutRef,
    Owner,
    ResourceAccessPoint,
    StaticRef,
    Struct,
)
from borrowviz.utils import PathLike, read_lines

BEGIN_LINE = "/* --- BEGIN Variable Definitions ---"
END_LINE = "--- END Variable Definitions --- */"

_FIELD_SEPARATORS = re.compile(r"[ ,{}]")


class ParseError(ValueError):
    """Raised when an annotated example is not well formed."""


def _usage_error(fields: list[str]) -> ParseError:
    return ParseError(
        f"Incorrect variable formatting '{' '.join(fields)}'!"
        "\nUsage (':' denotes optional field):"
        "\n\tOwner <:mut> <name>"
        "\n\tMutRef <:mut> <name>"
        "\n\tStaticRef <:mut> <name>"
        "\n\tFunction <name>"
    )


def parse_vars_to_map(
    fpath: PathLike,
) -> tuple[list[str], int, dict[str, ResourceAccessPoint]]:
    """Read the definition header of a file.

    Returns the lines after the header, the line number the header ends at,
    and the defined access points by name.
    """
    lines = iter(read_lines(fpath))
    first = next(lines, None)
    if first is None:
        raise ParseError("Could not read the first line. Empty file maybe?")
    if first != BEGIN_LINE:
        raise ParseError("Do not change the first line!")

    definitions = []
    num_lines = 2
    for line in lines:
        if line == END_LINE:
            break
        num_lines += 1
        definitions.append(line)
    else:
        raise ParseError("Do not remove BEGIN and END statements!")

    return list(lines), num_lines, parse_variables("".join(definitions))


def _mut_qualifier(fields: list[str]) -> bool:
    if len(fields) == 2:
        return False
    if fields[1] == "mut":
        return True
    raise ParseError(
        f"Did not understand qualifier '{fields[1]}' of variable '{fields[2]}'! "
        "Field must either be empty or 'mut'."
    )


def _parse_struct(
    next_hash: int, fields: list[str], variables: dict[str, ResourceAccessPoint]
) -> int:
    """Add a struct and its members; return the last hash used."""
    is_mut = fields[1] == "mut"
    if is_mut and len(fields) < 3:
        raise _usage_error(fields)
    parent = fields[2] if is_mut else fields[1]
    owner_hash = next_hash
    variables[parent] = Struct(
        name=parent, hash=owner_hash, owner=owner_hash, is_mut=is_mut, is_member=False
    )

    members = iter(fields[3 if is_mut else 2:])
    for member in members:
        next_hash += 1
        member_mut = member == "mut"
        if member_mut:
            member = next(members, None)
            if member is None:
                raise ParseError(
                    "Expected variable name after 'mut' qualifier, found nothing!"
                )
        name = f"{parent}.{member}"
        variables[name] = Struct(
            name=name, hash=next_hash, owner=owner_hash, is_mut=member_mut, is_member=True
        )
    return next_hash


def parse_variables(definitions: str) -> dict[str, ResourceAccessPoint]:
    """Build access points from ';'-separated definitions such as ``Owner mut x``.

    Hashes are given out from 1 in order of definition; struct members
    take the hashes right after their struct.
    """
    variables: dict[str, ResourceAccessPoint] = {}
    next_hash = 1
    for definition in (d.strip() for d in definitions.split(";")):
        if not definition:
            continue
        fields = [
            f.strip() for f in _FIELD_SEPARATORS.split(definition) if f.strip()
        ]
        if len(fields) < 2:
            raise _usage_error(fields)

        kind, count = fields[0], len(fields)
        name = fields[2] if count > 2 else fields[1]
        if kind in ("Owner", "MutRef", "StaticRef") and count in (2, 3):
            cls = {"Owner": Owner, "MutRef": MutRef, "StaticRef": StaticRef}[kind]
            variables[name] = cls(
                name=name, hash=next_hash, is_mut=_mut_qualifier(fields)
            )
        elif kind == "Function" and count == 2:
            variables[name] = Function(name=fields[1], hash=next_hash)
        elif kind == "Struct":
            next_hash = _parse_struct(next_hash, fields, variables)
        else:
            raise _usage_error(fields)
        next_hash += 1
    return variables