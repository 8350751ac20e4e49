"""routinekit.mysql - MySQL data layer."""

from routinekit.mysql.client import MySqlDataLayer, connect

__all__ = [
    "MySqlDataLayer",
    "connect",
]
