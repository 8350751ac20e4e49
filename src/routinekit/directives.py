"""Directive and signature extraction from routine sources.

Directives are SQL comments placed between the routine's signature and its
``begin`` line:

    create procedure tst_insert_orders()
    modifies sql data
    -- param: p_tags csv
    -- type: bulk_insert tmp_orders order_id,customer_id
    begin
      ...
    end

Only lines strictly before the first line equal to ``begin`` are scanned.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from .base import (
    DuplicateExtendedParamError,
    MalformedBulkInsertDirectiveError,
    MalformedParamDirectiveError,
    MissingDesignationTypeError,
    NameMismatchError,
    SignatureNotFoundError,
    UnexpectedDesignationArgsError,
)
from .models import SCALAR_DESIGNATIONS, DesignationType, Directives, ExtendedParam

log = logging.getLogger(__name__)

TYPE_PATTERN = re.compile(r"^\s*--\s+type:\s*(\w+)\s*(.+)?\s*$")
RETURN_PATTERN = re.compile(r"^\s*--\s+return:\s*((?:\w|\|)+)\s*$")
PARAM_PREFIX_PATTERN = re.compile(r"^\s*--\s+param:")
PARAM_PATTERN = re.compile(
    r"^\s*--\s+param:\s*(\w+)\s+(\w+)(?:\s+([^\s-])\s+([^\s-])\s+([^\s-]))?\s*$"
)
BULK_INSERT_ARGS_PATTERN = re.compile(r"^([a-zA-Z0-9_]+)\s+([a-zA-Z0-9_,]+)$")
SIGNATURE_PATTERN = re.compile(
    r"create\s+(procedure|function)\s+([a-zA-Z0-9_]+)", re.IGNORECASE
)

DEFAULT_RETURN_TYPE = "mixed"


def find_begin(lines: list[str]) -> int | None:
    """Index of the first line equal to 'begin', or None."""
    for index, line in enumerate(lines):
        if line.rstrip("\r") == "begin":
            return index
    return None


def _header(lines: list[str]) -> list[str] | None:
    """Lines strictly before the begin line, or None without a begin line."""
    key = find_begin(lines)
    if key is None:
        return None
    return lines[:key]


def _nearest(header: list[str], pattern: re.Pattern[str]) -> re.Match[str] | None:
    """Match of the line nearest to the begin line, scanning upwards."""
    for line in reversed(header):
        match = pattern.match(line)
        if match:
            return match
    return None


def _column_list(args: str) -> list[str]:
    return [column.strip() for column in args.split(",") if column.strip()]


def _bulk_insert(kind: str, args: str, routine_name: str | None) -> DesignationType:
    match = BULK_INSERT_ARGS_PATTERN.match(args)
    if not match:
        raise MalformedBulkInsertDirectiveError(
            "Expected: -- type: bulk_insert <table_name> <columns>", routine_name
        )
    return DesignationType(kind, table_name=match.group(1), columns=_column_list(match.group(2)))


def _keyed_rows(kind: str, args: str, routine_name: str | None) -> DesignationType:
    return DesignationType(kind, columns=_column_list(args))


# Designation types that take arguments, and how to parse them
_DESIGNATION_ARGUMENTS: dict[str, Callable[[str, str, str | None], DesignationType]] = {
    "bulk_insert": _bulk_insert,
    "rows_with_key": _keyed_rows,
    "rows_with_index": _keyed_rows,
}


def parse_designation_type(lines: list[str], routine_name: str | None = None) -> DesignationType:
    """Extract the designation type of the stored routine.

    Raises:
        MissingDesignationTypeError: No begin line, or no '-- type:' before it
        MalformedBulkInsertDirectiveError: bulk_insert without table and columns
        UnexpectedDesignationArgsError: Arguments for a type that takes none
    """
    header = _header(lines)
    match = _nearest(header, TYPE_PATTERN) if header is not None else None
    if match is None:
        raise MissingDesignationTypeError(
            "Unable to find the designation type of the stored routine", routine_name
        )

    kind = match.group(1)
    args = (match.group(2) or "").strip()

    parser = _DESIGNATION_ARGUMENTS.get(kind)
    if parser is not None:
        return parser(kind, args, routine_name)
    if args:
        raise UnexpectedDesignationArgsError(
            f"Designation type '{kind}' takes no arguments, found '{args}'", routine_name
        )
    return DesignationType(kind)


def parse_return_type(
    lines: list[str], designation: DesignationType, routine_name: str | None = None
) -> str | None:
    """Extract the return type for designation types returning a scalar.

    Returns None for other designation types. Falls back to 'mixed' when the
    directive is absent.
    """
    if designation.kind not in SCALAR_DESIGNATIONS:
        return None

    header = _header(lines) or []
    match = _nearest(header, RETURN_PATTERN)
    if match is None:
        log.warning("%s: unable to find the return type of stored routine", routine_name)
        return DEFAULT_RETURN_TYPE
    return match.group(1)


def parse_extended_params(
    lines: list[str], routine_name: str | None = None
) -> dict[str, ExtendedParam]:
    """Extract '-- param: <name> <type> [delimiter enclosure escape]' directives.

    Raises:
        MalformedParamDirectiveError: A '-- param:' line that does not parse
        DuplicateExtendedParamError: Two directives for the same parameter
    """
    params: dict[str, ExtendedParam] = {}
    for line in _header(lines) or []:
        if not PARAM_PREFIX_PATTERN.match(line):
            continue

        match = PARAM_PATTERN.match(line)
        if not match:
            raise MalformedParamDirectiveError(
                "Expected: -- param: <field_name> <type_of_list> [delimiter enclosure escape]",
                routine_name,
            )

        name, data_type, delimiter, enclosure, escape = match.groups()
        if name in params:
            raise DuplicateExtendedParamError(f"Duplicate parameter '{name}'", routine_name)

        if delimiter is None:
            params[name] = ExtendedParam(name, data_type)
        else:
            params[name] = ExtendedParam(name, data_type, delimiter, enclosure, escape)
    return params


def parse_directives(lines: list[str], routine_name: str | None = None) -> Directives:
    """Parse all directives of a routine source."""
    designation = parse_designation_type(lines, routine_name)
    return Directives(
        designation=designation,
        return_type=parse_return_type(lines, designation, routine_name),
        extended_params=parse_extended_params(lines, routine_name),
    )


def extract_signature(text: str, expected_name: str) -> tuple[str, str]:
    """Extract routine type and name from the CREATE statement.

    Args:
        text: Routine source
        expected_name: Routine name derived from the source file name

    Returns:
        Tuple of (routine type, routine name); routine type is 'procedure' or
        'function'

    Raises:
        SignatureNotFoundError: No 'create procedure|function <name>' found
        NameMismatchError: The routine name differs from expected_name
    """
    match = SIGNATURE_PATTERN.search(text)
    if not match:
        raise SignatureNotFoundError("Unable to find the stored routine name and type", expected_name)

    routine_type, name = match.group(1).lower(), match.group(2)
    if name != expected_name:
        raise NameMismatchError(
            f"Stored routine name '{name}' does not correspond with filename", expected_name
        )
    return routine_type, name
