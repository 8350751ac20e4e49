"""Reconciles directives with the database catalog after a routine is loaded."""

from __future__ import annotations

from .base import (
    ColumnCountMismatchError,
    InvalidReturnTypeError,
    UnknownExtendedParameterError,
)
from .datalayer import RoutineDataLayer
from .datatypes import base_type
from .models import (
    SCALAR_DESIGNATIONS,
    DesignationType,
    DocBlock,
    ExtendedParam,
    RoutineParameter,
    ValidationResult,
)

SCALAR_RETURN_TYPES = frozenset({"string", "int", "float", "double", "null"})


def validate_return_type(
    designation: DesignationType, return_type: str | None, routine_name: str | None = None
) -> None:
    """Validate the return type of a routine returning a scalar.

    The return type must be 'mixed', 'bool', or a '|' separated combination of
    string, int, float, double and null.

    Raises:
        InvalidReturnTypeError: Any other return type
    """
    if designation.kind not in SCALAR_DESIGNATIONS:
        return
    if return_type in ("mixed", "bool"):
        return
    types = (return_type or "").split("|")
    if all(t in SCALAR_RETURN_TYPES for t in types):
        return
    raise InvalidReturnTypeError(
        f"Return type must be 'mixed', 'bool', or a combination of int, double (or float), "
        f"string, and null, found '{return_type}'",
        routine_name,
    )


def resolve_table_columns(
    data_layer: RoutineDataLayer, routine_name: str, designation: DesignationType
) -> tuple[list[str], list[str]]:
    """Column names and base column types of the bulk insert table.

    A table that does not exist as a regular table is assumed to be a
    temporary table created by the routine itself: the routine is called once,
    the table described, and the temporary table dropped again.

    Returns:
        Tuple of (field names, column types)

    Raises:
        ColumnCountMismatchError: The directive lists a different number of
            columns than the table has
    """
    table_name = designation.table_name
    is_permanent = data_layer.check_table_exists(table_name)

    if is_permanent:
        columns = data_layer.describe_table(table_name)
    else:
        data_layer.call_procedure(routine_name)
        try:
            columns = data_layer.describe_table(table_name)
        finally:
            data_layer.drop_temporary_table(table_name)

    expected = len(designation.columns or [])
    if expected != len(columns):
        raise ColumnCountMismatchError(
            f"Number of fields {expected} and number of columns {len(columns)} don't match",
            routine_name,
        )

    fields = [column.field for column in columns]
    column_types = [base_type(column.type) for column in columns]
    return fields, column_types


def resolve_parameters(
    data_layer: RoutineDataLayer,
    routine_name: str,
    extended_params: dict[str, ExtendedParam],
) -> list[RoutineParameter]:
    """Declared parameters of the routine, merged with '-- param:' directives.

    Raises:
        UnknownExtendedParameterError: A directive names an undeclared parameter
    """
    parameters = []
    for row in data_layer.get_routine_parameters(routine_name):
        # Skip the return value of functions and routines without parameters
        if not row.get("parameter_name"):
            continue
        parameters.append(
            RoutineParameter(
                parameter_name=row["parameter_name"],
                data_type=row["data_type"],
                dtd_identifier=row["dtd_identifier"],
                numeric_precision=row.get("numeric_precision"),
                numeric_scale=row.get("numeric_scale"),
                character_set_name=row.get("character_set_name"),
                collation_name=row.get("collation_name"),
            )
        )

    by_name = {p.parameter_name: p for p in parameters}
    for name, extended in extended_params.items():
        parameter = by_name.get(name)
        if parameter is None:
            raise UnknownExtendedParameterError(
                f"Specific parameter '{name}' does not exist", routine_name
            )
        parameter.extended = extended

    return parameters


def validate_parameter_lists(
    parameters: list[RoutineParameter], docblock: DocBlock
) -> ValidationResult:
    """Compare declared parameters with the parameters of the doc block.

    Only warnings are produced: undocumented parameters and documented
    parameters the routine doesn't declare.
    """
    result = ValidationResult()

    declared = [p.parameter_name for p in parameters]
    documented = [p.name for p in docblock.parameters]

    for name in declared:
        if name not in documented:
            result.warnings.append(f"Parameter {name} is missing from doc block")
    for name in documented:
        if name not in declared:
            result.warnings.append(f"Unknown parameter {name} found in doc block")

    return result
