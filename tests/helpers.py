"""Test helpers: an in-memory data layer and sample routine sources."""

from __future__ import annotations

from typing import Any

from routinekit.base import DataLayerError, TableNotFoundError
from routinekit.datalayer import RoutineDataLayer
from routinekit.directives import SIGNATURE_PATTERN
from routinekit.models import CatalogRoutineInfo, SessionSettings, TableColumn


class FakeDataLayer(RoutineDataLayer):
    """
    In-memory RoutineDataLayer that records every call.

    Use cases:
    - Serving catalog data (routines, parameters, tables) set up by a test
    - Verifying which statements the loader issued, and in which order
    - Injecting database errors with fail_on
    """

    def __init__(self):
        self.calls: list[tuple[Any, ...]] = []
        self.routines: dict[str, CatalogRoutineInfo] = {}
        self.parameters: dict[str, list[dict[str, Any]]] = {}
        self.tables: dict[str, list[TableColumn]] = {}
        self.temporary_tables: dict[str, list[TableColumn]] = {}
        # Routine name -> (temporary table name, columns) created when called
        self.creates_temporary: dict[str, tuple[str, list[TableColumn]]] = {}
        self.fail_on: dict[str, DataLayerError] = {}
        self.session = {"sql_mode": "", "character_set": "", "collation": ""}
        # Setting -> the form the server stores it in, e.g. reordered SQL modes
        self.canonical: dict[str, str] = {}
        self.sources: dict[str, str] = {}

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def operations(self) -> list[str]:
        """Names of the operations called so far."""
        return [call[0] for call in self.calls]

    def add_parameter(
        self,
        routine_name: str,
        parameter_name: str | None,
        data_type: str,
        dtd_identifier: str,
        **kwargs: Any,
    ) -> None:
        row = {
            "parameter_name": parameter_name,
            "data_type": data_type,
            "dtd_identifier": dtd_identifier,
            "numeric_precision": None,
            "numeric_scale": None,
            "character_set_name": None,
            "collation_name": None,
        }
        row.update(kwargs)
        self.parameters.setdefault(routine_name, []).append(row)

    def execute_none(self, sql, params=None):
        self._record("execute_none", sql, params)

    def execute_rows(self, sql, params=None):
        self._record("execute_rows", sql, params)
        return []

    def execute_row0(self, sql, params=None):
        self._record("execute_row0", sql, params)
        return None

    def escape_string(self, value):
        return value.replace("\\", "\\\\").replace("'", "\\'")

    def get_routines(self):
        self._record("get_routines")
        return list(self.routines.values())

    def get_routine_parameters(self, routine_name):
        self._record("get_routine_parameters", routine_name)
        return [dict(row) for row in self.parameters.get(routine_name, [])]

    def check_table_exists(self, table_name):
        self._record("check_table_exists", table_name)
        return table_name in self.tables

    def describe_table(self, table_name):
        self._record("describe_table", table_name)
        if table_name in self.tables:
            return list(self.tables[table_name])
        if table_name in self.temporary_tables:
            return list(self.temporary_tables[table_name])
        raise TableNotFoundError(f"Table '{table_name}' doesn't exist", 1146)

    def drop_routine(self, routine_type, routine_name):
        self._record("drop_routine", routine_type, routine_name)
        self.routines.pop(routine_name, None)

    def drop_temporary_table(self, table_name):
        self._record("drop_temporary_table", table_name)
        if self.temporary_tables.pop(table_name, None) is None:
            raise TableNotFoundError(f"Unknown table '{table_name}'", 1051)

    def call_procedure(self, routine_name):
        self._record("call_procedure", routine_name)
        if routine_name in self.creates_temporary:
            table_name, columns = self.creates_temporary[routine_name]
            self.temporary_tables[table_name] = list(columns)

    def set_sql_mode(self, sql_mode):
        self._record("set_sql_mode", sql_mode)
        self.session["sql_mode"] = self.canonical.get(sql_mode, sql_mode)

    def set_character_set(self, character_set, collation):
        self._record("set_character_set", character_set, collation)
        self.session["character_set"] = self.canonical.get(character_set, character_set)
        self.session["collation"] = self.canonical.get(collation, collation)

    def apply_session(self, settings):
        self._record("apply_session", settings)
        self.session["sql_mode"] = self.canonical.get(settings.sql_mode, settings.sql_mode)
        self.session["character_set"] = self.canonical.get(settings.character_set, settings.character_set)
        self.session["collation"] = self.canonical.get(settings.collation, settings.collation)
        return SessionSettings(
            self.session["sql_mode"], self.session["character_set"], self.session["collation"]
        )

    def load_routine(self, source):
        self._record("load_routine", source)
        match = SIGNATURE_PATTERN.search(source)
        routine_type, name = match.group(1).lower(), match.group(2)
        self.sources[name] = source
        self.routines[name] = CatalogRoutineInfo(
            routine_name=name,
            routine_type=routine_type,
            sql_mode=self.session["sql_mode"],
            character_set_client=self.session["character_set"],
            collation_connection=self.session["collation"],
        )


ROW1_SOURCE = """\
/**
 * Selects the details of an order.
 *
 * Returns exactly one row.
 *
 * @param p_ord_id The ID of the order.
 */
create procedure ord_get_details(in p_ord_id @tbl_order.ord_id%type@)
reads sql data
-- type: row1
begin
  select ord_id, ord_total, __LINE__ as line
  from   tbl_order
  where  ord_id = p_ord_id
  limit  @MAX_ROWS@;
end
"""

SINGLETON_SOURCE = """\
/**
 * Counts the orders of a customer.
 *
 * @param p_cst_id The ID of the customer.
 */
create function ord_count(p_cst_id int)
returns int
reads sql data
-- type: function
-- return: int
begin
  return (select count(*) from tbl_order where cst_id = p_cst_id);
end
"""

BULK_INSERT_SOURCE = """\
/**
 * Creates the temporary table for importing orders.
 *
 * @param p_tags Tags of the imported orders.
 */
create procedure ord_import(in p_tags varchar(1000))
modifies sql data
-- param: p_tags csv
-- type: bulk_insert tmp_order order_id,customer_id
begin
  create temporary table tmp_order(
    order_id    int(10) unsigned not null,
    customer_id int(10) unsigned not null
  );
end
"""
