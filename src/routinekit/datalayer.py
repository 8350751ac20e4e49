"""Database access used by the routine loader.

The loader never talks to a driver directly. It is handed a RoutineDataLayer,
which makes the database swappable (the MySQL implementation lives in
routinekit.mysql; tests use an in-memory implementation).

All implementations raise DataLayerError (or a subclass) on database errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import CatalogRoutineInfo, SessionSettings, TableColumn


class RoutineDataLayer(ABC):
    """Abstract database facade for loading stored routines."""

    @abstractmethod
    def execute_none(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        """Execute a statement that returns no rows."""
        ...

    @abstractmethod
    def execute_rows(
        self, sql: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return all rows as dicts."""
        ...

    @abstractmethod
    def execute_row0(
        self, sql: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Execute a query returning 0 or 1 row."""
        ...

    @abstractmethod
    def escape_string(self, value: str) -> str:
        """Escape a string for use inside a quoted SQL literal."""
        ...

    @abstractmethod
    def get_routines(self) -> list[CatalogRoutineInfo]:
        """All stored routines of the current schema."""
        ...

    @abstractmethod
    def get_routine_parameters(self, routine_name: str) -> list[dict[str, Any]]:
        """Declared parameters of a stored routine, in declaration order.

        Each row has parameter_name, data_type, numeric_precision,
        numeric_scale, character_set_name, collation_name and dtd_identifier.
        A row with an empty parameter_name may be returned for a function's
        return value or a routine without parameters.
        """
        ...

    @abstractmethod
    def check_table_exists(self, table_name: str) -> bool:
        """True if a non-temporary table exists in the current schema."""
        ...

    @abstractmethod
    def describe_table(self, table_name: str) -> list[TableColumn]:
        """Columns of a (possibly temporary) table, in table order."""
        ...

    @abstractmethod
    def drop_routine(self, routine_type: str, routine_name: str) -> None:
        """Drop a stored routine; a routine that doesn't exist is not an error."""
        ...

    @abstractmethod
    def drop_temporary_table(self, table_name: str) -> None:
        """Drop a temporary table."""
        ...

    @abstractmethod
    def call_procedure(self, routine_name: str) -> None:
        """Call a stored procedure without arguments."""
        ...

    @abstractmethod
    def set_sql_mode(self, sql_mode: str) -> None:
        """Set the SQL mode of the session."""
        ...

    @abstractmethod
    def set_character_set(self, character_set: str, collation: str) -> None:
        """Set the character set and collation of the session."""
        ...

    @abstractmethod
    def load_routine(self, source: str) -> None:
        """Execute the source of a stored routine."""
        ...

    @abstractmethod
    def apply_session(self, settings: SessionSettings) -> SessionSettings:
        """Set the session settings and return them as the server reports them.

        The server normalizes what it is given: the SQL mode comes back in its
        own order and character set aliases are resolved (utf8 -> utf8mb3).
        The catalog records these normalized values.
        """
        ...
