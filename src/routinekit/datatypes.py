"""MySQL data type helpers."""

from __future__ import annotations

import re

from .models import RoutineParameter

_WORD = re.compile(r"\w+")

_PYTHON_TYPES: dict[str, str] = {
    "tinyint": "int",
    "smallint": "int",
    "mediumint": "int",
    "int": "int",
    "integer": "int",
    "bigint": "int",
    "year": "int",
    "bit": "int",
    "float": "float",
    "double": "float",
    "real": "float",
    "decimal": "Decimal",
    "numeric": "Decimal",
    "char": "str",
    "varchar": "str",
    "tinytext": "str",
    "text": "str",
    "mediumtext": "str",
    "longtext": "str",
    "enum": "str",
    "set": "str",
    "json": "str",
    "date": "str",
    "datetime": "str",
    "timestamp": "str",
    "time": "str",
    "binary": "bytes",
    "varbinary": "bytes",
    "tinyblob": "bytes",
    "blob": "bytes",
    "mediumblob": "bytes",
    "longblob": "bytes",
}


def base_type(column_type: str) -> str:
    """The type keyword of a declared column type.

    Strips length, precision and qualifiers: 'int(10) unsigned' -> 'int'.
    """
    match = _WORD.search(column_type)
    return match.group(0) if match else ""


def column_type_to_python_type(parameter: RoutineParameter) -> str:
    """Python type hint for a routine parameter, for the wrapper generator."""
    if parameter.extended is not None:
        # Lists passed in a single string, e.g. csv
        return "list[str]"
    return _PYTHON_TYPES.get(parameter.data_type.lower(), "Any")
