"""Exceptions for routinekit.

Two families live here:

- RoutineLoaderError and its subclasses: one per way a routine source can
  fail to load. Raised by the parsing, loading and reconciling stages.
- DataLayerError and its subclasses: database errors converted once by the
  data layer, preserving the MySQL error number.
"""

from __future__ import annotations

# MySQL error number to exception class mapping
# Reference: https://dev.mysql.com/doc/mysql-errors/8.0/en/server-error-reference.html
_ERRNO_EXCEPTIONS: dict[int, type[DataLayerError]] = {}  # Populated after class definitions


class RoutineLoaderError(Exception):
    """Base exception for loading a stored routine."""

    def __init__(self, message: str, routine_name: str | None = None):
        super().__init__(message)
        self.routine_name = routine_name

    def __str__(self) -> str:
        message = super().__str__()
        if self.routine_name:
            return f"{self.routine_name}: {message}"
        return message


class SourceUnreadableError(RoutineLoaderError):
    """Raised when a routine source file is missing or unreadable."""

    pass


class UnknownPlaceholderError(RoutineLoaderError):
    """Raised when the source references placeholders with no value."""

    def __init__(self, placeholders: list[str], routine_name: str | None = None):
        self.placeholders = sorted(set(placeholders))
        super().__init__(
            f"Unknown placeholder(s) found: {', '.join(self.placeholders)}",
            routine_name,
        )


class MissingDesignationTypeError(RoutineLoaderError):
    """Raised when no '-- type:' directive precedes the begin line."""

    pass


class MalformedBulkInsertDirectiveError(RoutineLoaderError):
    """Raised when a bulk_insert directive lacks '<table_name> <columns>'."""

    pass


class UnexpectedDesignationArgsError(RoutineLoaderError):
    """Raised when a designation type that takes no arguments has some."""

    pass


class SignatureNotFoundError(RoutineLoaderError):
    """Raised when no 'create procedure|function <name>' is found."""

    pass


class NameMismatchError(RoutineLoaderError):
    """Raised when the routine name differs from the source file name."""

    pass


class DuplicateExtendedParamError(RoutineLoaderError):
    """Raised when two '-- param:' directives name the same parameter."""

    pass


class MalformedParamDirectiveError(RoutineLoaderError):
    """Raised when a '-- param:' directive does not parse."""

    pass


class LoadFailedError(RoutineLoaderError):
    """Raised when the database rejects loading the routine."""

    def __init__(self, error: DataLayerError, routine_name: str | None = None):
        super().__init__(f"Loading failed: {error}", routine_name)
        self.error = error


class ColumnCountMismatchError(RoutineLoaderError):
    """Raised when bulk insert columns don't match the table's columns."""

    pass


class UnknownExtendedParameterError(RoutineLoaderError):
    """Raised when a '-- param:' directive names an undeclared parameter."""

    pass


class InvalidReturnTypeError(RoutineLoaderError):
    """Raised when the '-- return:' directive holds an unsupported type."""

    pass


class DataLayerError(Exception):
    """Base exception for database operations."""

    def __init__(self, message: str, errno: int | None = None):
        super().__init__(message)
        self.errno = errno


class RoutineNotFoundError(DataLayerError):
    """Raised when a stored routine does not exist (e.g., on drop)."""

    pass


class TableNotFoundError(DataLayerError):
    """Raised when a table does not exist (e.g., on describe)."""

    pass


class SqlSyntaxError(DataLayerError):
    """Raised when MySQL rejects a statement as a syntax error."""

    pass


class AccessDeniedError(DataLayerError):
    """Raised when the current user lacks a required privilege."""

    pass


# Populate errno mapping after classes are defined
_ERRNO_EXCEPTIONS.update(
    {
        1305: RoutineNotFoundError,  # ER_SP_DOES_NOT_EXIST
        1146: TableNotFoundError,  # ER_NO_SUCH_TABLE
        1064: SqlSyntaxError,  # ER_PARSE_ERROR
        1044: AccessDeniedError,  # ER_DBACCESS_DENIED_ERROR
        1045: AccessDeniedError,  # ER_ACCESS_DENIED_ERROR
        1142: AccessDeniedError,  # ER_TABLEACCESS_DENIED_ERROR
        1370: AccessDeniedError,  # ER_PROCACCESS_DENIED_ERROR
    }
)


def error_class_for(errno: int | None) -> type[DataLayerError]:
    """Return the most specific DataLayerError subclass for a MySQL errno."""
    if errno is None:
        return DataLayerError
    return _ERRNO_EXCEPTIONS.get(errno, DataLayerError)
