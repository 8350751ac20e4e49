"""Decides whether a routine source must be (re)loaded."""

from __future__ import annotations

from typing import Mapping

from .models import CatalogRoutineInfo, RoutineMetadata
from .placeholders import normalize_placeholders


def must_reload(
    prior: RoutineMetadata | None,
    mtime: int,
    placeholders: Mapping[str, str],
    catalog_info: CatalogRoutineInfo | None,
    sql_mode: str,
    character_set: str,
    collation: str,
) -> bool:
    """Return True if the routine source must be loaded into the database.

    Args:
        prior: Metadata persisted by the previous load, if any
        mtime: Current modification time of the source file
        placeholders: Current placeholder map, matched case-insensitively
        catalog_info: The routine as currently present in the database, if any
        sql_mode: Configured SQL mode
        character_set: Configured character set
        collation: Configured collation
    """
    # First time we see the source file
    if prior is None:
        return True

    # Source file has changed
    if prior.timestamp != mtime:
        return True

    # Value of a placeholder has changed
    placeholders = normalize_placeholders(placeholders)
    for token, old_value in prior.replace.items():
        if placeholders.get(token.upper()) != old_value:
            return True

    # Routine does not exist in the database
    if catalog_info is None:
        return True

    # Session settings have changed
    if catalog_info.sql_mode != sql_mode:
        return True
    if catalog_info.character_set_client != character_set:
        return True
    if catalog_info.collation_connection != collation:
        return True

    return False
