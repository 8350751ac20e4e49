"""Data models for routine loading and metadata extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Designation types whose stored routine returns a single scalar value
SCALAR_DESIGNATIONS = frozenset({"function", "singleton0", "singleton1"})


@dataclass
class RoutineSource:
    """One annotated SQL source file."""

    path: Path
    routine_name: str  # File base name without extension
    text: str
    lines: list[str]
    mtime: int  # Last modification time, whole seconds


@dataclass
class DesignationType:
    """Parsed '-- type:' directive."""

    kind: str  # "row0" | "rows_with_key" | "bulk_insert" | ...
    table_name: str | None = None  # bulk_insert only
    columns: list[str] | None = None  # bulk_insert, rows_with_key, rows_with_index


@dataclass
class ExtendedParam:
    """Parsed '-- param:' directive for a parameter with a specific format."""

    name: str
    data_type: str  # e.g. "csv"
    delimiter: str = ","
    enclosure: str = '"'
    escape: str = "\\"

    def as_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "data_type": self.data_type,
            "delimiter": self.delimiter,
            "enclosure": self.enclosure,
            "escape": self.escape,
        }


@dataclass
class Directives:
    """All directives found before the begin line."""

    designation: DesignationType
    return_type: str | None = None  # Only for function, singleton0, singleton1
    extended_params: dict[str, ExtendedParam] = field(default_factory=dict)


@dataclass
class RoutineParameter:
    """A routine parameter as declared in information_schema.PARAMETERS."""

    parameter_name: str
    data_type: str  # "int", "varchar", ...
    dtd_identifier: str  # "int(11)", "varchar(40)", ...
    numeric_precision: int | None = None
    numeric_scale: int | None = None
    character_set_name: str | None = None
    collation_name: str | None = None
    extended: ExtendedParam | None = None  # From a '-- param:' directive

    @property
    def data_type_descriptor(self) -> str:
        """Declared type including character set and collation, if any."""
        descriptor = self.dtd_identifier
        if self.character_set_name:
            descriptor += f" character set {self.character_set_name}"
        if self.collation_name:
            descriptor += f" collation {self.collation_name}"
        return descriptor

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "parameter_name": self.parameter_name,
            "data_type": self.data_type,
            "numeric_precision": self.numeric_precision,
            "numeric_scale": self.numeric_scale,
            "character_set_name": self.character_set_name,
            "collation_name": self.collation_name,
            "dtd_identifier": self.dtd_identifier,
            "data_type_descriptor": self.data_type_descriptor,
        }
        if self.extended is not None:
            result["extended_data_type"] = self.extended.data_type
            result["delimiter"] = self.extended.delimiter
            result["enclosure"] = self.extended.enclosure
            result["escape"] = self.extended.escape
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutineParameter:
        extended = None
        if "extended_data_type" in data:
            extended = ExtendedParam(
                name=data["parameter_name"],
                data_type=data["extended_data_type"],
                delimiter=data["delimiter"],
                enclosure=data["enclosure"],
                escape=data["escape"],
            )
        return cls(
            parameter_name=data["parameter_name"],
            data_type=data["data_type"],
            dtd_identifier=data["dtd_identifier"],
            numeric_precision=data.get("numeric_precision"),
            numeric_scale=data.get("numeric_scale"),
            character_set_name=data.get("character_set_name"),
            collation_name=data.get("collation_name"),
            extended=extended,
        )


@dataclass
class CatalogRoutineInfo:
    """A stored routine as found in information_schema.ROUTINES."""

    routine_name: str
    routine_type: str  # "procedure" | "function"
    sql_mode: str
    character_set_client: str
    collation_connection: str


@dataclass
class TableColumn:
    """A column of the bulk insert table as reported by DESCRIBE."""

    field: str
    type: str  # Full declared type, e.g. "int(10) unsigned"


@dataclass
class ParamDoc:
    """A '@param' entry of a routine's doc block."""

    name: str
    description: str = ""


@dataclass
class DocBlock:
    """Parsed doc block from the routine's leading comment."""

    short_description: str = ""
    long_description: str = ""
    parameters: list[ParamDoc] = field(default_factory=list)

    def description_of(self, name: str) -> str | None:
        for param in self.parameters:
            if param.name == name:
                return param.description
        return None


@dataclass
class ValidationResult:
    """Results from advisory validation."""

    warnings: list[str] = field(default_factory=list)  # Logged but allowed


@dataclass
class RoutineMetadata:
    """The metadata of a loaded stored routine.

    Handed to the wrapper generator and persisted; the persisted record is the
    prior metadata of the next load of the same routine.
    """

    routine_name: str
    routine_type: str
    designation: str
    timestamp: int
    return_type: str | None = None
    table_name: str | None = None
    parameters: list[RoutineParameter] = field(default_factory=list)
    columns: list[str] | None = None
    fields: list[str] | None = None
    column_types: list[str] | None = None
    replace: dict[str, str] = field(default_factory=dict)  # Placeholder -> value
    docblock: dict[str, Any] = field(default_factory=dict)  # Parts for the generator
    extended_params: dict[str, dict[str, str]] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "routine_name": self.routine_name,
            "routine_type": self.routine_type,
            "designation": self.designation,
            "return": self.return_type,
            "table_name": self.table_name,
            "parameters": [p.as_dict() for p in self.parameters],
            "columns": self.columns,
            "fields": self.fields,
            "column_types": self.column_types,
            "timestamp": self.timestamp,
            "replace": dict(self.replace),
            "docblock": self.docblock,
            "extended_params": self.extended_params,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutineMetadata:
        return cls(
            routine_name=data["routine_name"],
            routine_type=data.get("routine_type", ""),
            designation=data["designation"],
            timestamp=data["timestamp"],
            return_type=data.get("return"),
            table_name=data.get("table_name"),
            parameters=[RoutineParameter.from_dict(p) for p in data.get("parameters") or []],
            columns=data.get("columns"),
            fields=data.get("fields"),
            column_types=data.get("column_types"),
            replace=dict(data.get("replace") or {}),
            docblock=data.get("docblock") or {},
            extended_params=data.get("extended_params") or {},
        )


@dataclass
class SessionSettings:
    """Session settings under which stored routines are loaded and run."""

    sql_mode: str
    character_set: str
    collation: str
