"""Pytest fixtures for routinekit tests."""

import pytest

from routinekit.models import SessionSettings, TableColumn

from tests.helpers import FakeDataLayer

SQL_MODE = "STRICT_ALL_TABLES,ONLY_FULL_GROUP_BY"
CHARACTER_SET = "utf8mb4"
COLLATION = "utf8mb4_general_ci"


@pytest.fixture
def data_layer():
    """
    In-memory data layer.

    Example:
        def test_load(data_layer):
            data_layer.add_parameter("ord_count", "p_cst_id", "int", "int(11)")
    """
    return FakeDataLayer()


@pytest.fixture
def settings():
    """Session settings used for loading routines."""
    return SessionSettings(SQL_MODE, CHARACTER_SET, COLLATION)


@pytest.fixture
def placeholders():
    """Placeholder map matching the sample sources."""
    return {"@TBL_ORDER.ORD_ID%TYPE@": "int(10) unsigned", "@MAX_ROWS@": "1"}


@pytest.fixture
def write_routine(tmp_path):
    """
    Factory fixture writing a routine source file under a temporary directory.

    Example:
        def test_read(write_routine):
            path = write_routine("ord_count", SINGLETON_SOURCE)
    """

    def _write(name: str, text: str, extension: str = ".psql"):
        path = tmp_path / f"{name}{extension}"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def bulk_data_layer(data_layer):
    """Data layer knowing the parameters and temporary table of ord_import."""
    data_layer.add_parameter("ord_import", "p_tags", "varchar", "varchar(1000)",
                             character_set_name="utf8mb4", collation_name="utf8mb4_general_ci")
    data_layer.creates_temporary["ord_import"] = (
        "tmp_order",
        [TableColumn("order_id", "int(10) unsigned"), TableColumn("customer_id", "int(10) unsigned")],
    )
    return data_layer
