"""Loads stored routines from pseudo-SQL source files into MySQL.

Loading a single routine runs these stages, each taking and returning a
RoutineState:

    read source -> resolve placeholders -> parse directives -> extract signature
    -> load into database -> reconcile with catalog -> assemble metadata

Nothing is loaded when the source file, its placeholders and the session
settings are unchanged since the previous load; the prior metadata is
returned as-is.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .base import (
    DataLayerError,
    LoadFailedError,
    RoutineLoaderError,
    SourceUnreadableError,
    UnknownPlaceholderError,
)
from .datalayer import RoutineDataLayer
from .directives import extract_signature, parse_directives
from .docblock import parse_docblock
from .metadata import MetadataStore, assemble_metadata
from .models import (
    CatalogRoutineInfo,
    Directives,
    DocBlock,
    RoutineMetadata,
    RoutineParameter,
    RoutineSource,
    SessionSettings,
)
from .placeholders import (
    find_placeholders,
    magic_constants,
    normalize_placeholders,
    substitute,
    unknown_placeholder_lines,
)
from .reconcile import (
    resolve_parameters,
    resolve_table_columns,
    validate_parameter_lists,
    validate_return_type,
)
from .reload import must_reload

log = logging.getLogger(__name__)


@dataclass
class RoutineState:
    """State of a single routine while it is being loaded."""

    source: RoutineSource
    replace: dict[str, str] = field(default_factory=dict)
    directives: Directives | None = None
    routine_type: str | None = None
    parameters: list[RoutineParameter] = field(default_factory=list)
    fields: list[str] | None = None
    column_types: list[str] | None = None
    docblock: DocBlock = field(default_factory=DocBlock)

    @property
    def routine_name(self) -> str:
        return self.source.routine_name


def routine_mtime(path: Path) -> int:
    """Modification time of a source file, in whole seconds."""
    try:
        return int(Path(path).stat().st_mtime)
    except OSError as e:
        raise SourceUnreadableError(f"Unable to get mtime of file '{path}': {e}", Path(path).stem) from e


def read_source(path: Path) -> RoutineSource:
    """Read a routine source file.

    Raises:
        SourceUnreadableError: The file is missing, unreadable, or not UTF-8
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadableError(f"Unable to read file '{path}': {e}", path.stem) from e
    return RoutineSource(
        path=path,
        routine_name=path.stem,
        text=text,
        lines=text.split("\n"),
        mtime=routine_mtime(path),
    )


def extract_placeholders(state: RoutineState, placeholders: Mapping[str, str]) -> RoutineState:
    """Record the value of every placeholder used in the source.

    Raises:
        UnknownPlaceholderError: One or more placeholders have no value
    """
    replace, unknown = find_placeholders(state.source.text, placeholders)
    if unknown:
        log.error("%s: unknown placeholder(s): %s", state.routine_name, ", ".join(unknown))
        for number, line in unknown_placeholder_lines(state.source.text, unknown):
            log.error("%s:%d: %s", state.source.path, number, line)
        raise UnknownPlaceholderError(unknown, state.routine_name)
    return dataclasses.replace(state, replace=replace)


def extract_directives(state: RoutineState) -> RoutineState:
    """Parse directives and the signature, and validate the return type."""
    directives = parse_directives(state.source.lines, state.routine_name)
    routine_type, _ = extract_signature(state.source.text, state.routine_name)
    validate_return_type(directives.designation, directives.return_type, state.routine_name)
    return dataclasses.replace(state, directives=directives, routine_type=routine_type)


def load_into_database(
    state: RoutineState,
    data_layer: RoutineDataLayer,
    catalog_info: CatalogRoutineInfo | None,
    settings: SessionSettings,
) -> RoutineState:
    """Substitute placeholders and (re)create the routine in the database.

    Raises:
        LoadFailedError: The database rejected any of the statements
    """
    try:
        magic = magic_constants(state.source.path, state.routine_name, data_layer.escape_string)
        source = substitute(state.source.lines, state.replace, magic)

        if catalog_info is not None:
            data_layer.drop_routine(catalog_info.routine_type, state.routine_name)

        data_layer.set_sql_mode(settings.sql_mode)
        data_layer.set_character_set(settings.character_set, settings.collation)
        data_layer.load_routine(source)
    except DataLayerError as e:
        raise LoadFailedError(e, state.routine_name) from e
    return state


def reconcile(state: RoutineState, data_layer: RoutineDataLayer) -> RoutineState:
    """Fetch table columns and parameters from the catalog."""
    designation = state.directives.designation
    fields = column_types = None
    try:
        if designation.kind == "bulk_insert":
            fields, column_types = resolve_table_columns(data_layer, state.routine_name, designation)
        parameters = resolve_parameters(
            data_layer, state.routine_name, state.directives.extended_params
        )
    except DataLayerError as e:
        raise LoadFailedError(e, state.routine_name) from e

    docblock = parse_docblock(state.source.text)
    for warning in validate_parameter_lists(parameters, docblock).warnings:
        log.warning("%s: %s", state.routine_name, warning)

    return dataclasses.replace(
        state,
        parameters=parameters,
        fields=fields,
        column_types=column_types,
        docblock=docblock,
    )


def load_stored_routine(
    path: Path,
    data_layer: RoutineDataLayer,
    settings: SessionSettings,
    placeholders: Mapping[str, str],
    prior: RoutineMetadata | None = None,
    catalog_info: CatalogRoutineInfo | None = None,
) -> RoutineMetadata:
    """Load a stored routine from its source file if needed.

    Args:
        path: Source file; its base name is the routine name
        data_layer: Database facade
        settings: SQL mode, character set and collation for the routine, as
            returned by data_layer.apply_session()
        placeholders: Placeholder map, matched case-insensitively
        prior: Metadata of the previous load, if any
        catalog_info: The routine as currently present in the database, if any

    Returns:
        The routine's metadata; `prior` itself when no reload was needed

    Raises:
        RoutineLoaderError: The routine could not be loaded
    """
    path = Path(path)
    placeholders = normalize_placeholders(placeholders)

    mtime = routine_mtime(path)
    if not must_reload(
        prior,
        mtime,
        placeholders,
        catalog_info,
        settings.sql_mode,
        settings.character_set,
        settings.collation,
    ):
        log.debug("Routine %s is up to date", path.stem)
        return prior

    log.info("Loading routine %s", path.stem)

    state = RoutineState(source=read_source(path))
    state = extract_placeholders(state, placeholders)
    state = extract_directives(state)
    state = load_into_database(state, data_layer, catalog_info, settings)
    state = reconcile(state, data_layer)

    return assemble_metadata(
        routine_name=state.routine_name,
        routine_type=state.routine_type,
        directives=state.directives,
        timestamp=state.source.mtime,
        replace=state.replace,
        parameters=state.parameters,
        docblock=state.docblock,
        fields=state.fields,
        column_types=state.column_types,
    )


@dataclass
class LoadResult:
    """Outcome of loading a batch of routine sources."""

    loaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # Up to date
    failed: dict[str, str] = field(default_factory=dict)  # Routine name -> error

    @property
    def ok(self) -> bool:
        return not self.failed


class RoutineLoader:
    """Loads a batch of routine sources over a single data layer.

    Routines are loaded one after the other. A routine that fails is reported
    and its metadata removed from the store, so it is reloaded on the next
    run; the remaining routines are still loaded.

    Example:
        loader = RoutineLoader(data_layer, store, settings, {"@MAX_LEN@": "80"})
        result = loader.load(loader.find_sources(Path("lib/psql")))
        if not result.ok:
            sys.exit(1)
    """

    def __init__(
        self,
        data_layer: RoutineDataLayer,
        store: MetadataStore,
        settings: SessionSettings,
        placeholders: Mapping[str, str],
        source_extension: str = ".psql",
    ):
        self.data_layer = data_layer
        self.store = store
        self.settings = settings
        self.placeholders = normalize_placeholders(placeholders)
        self.source_extension = source_extension

    def find_sources(self, source_dir: Path) -> list[Path]:
        """Routine source files under source_dir, sorted."""
        return sorted(Path(source_dir).rglob(f"*{self.source_extension}"))

    def load(self, paths: list[Path]) -> LoadResult:
        """Load routine sources and persist the metadata store."""
        result = LoadResult()
        # Compare with the catalog in the form the server stores settings in
        settings = self.data_layer.apply_session(self.settings)
        log.debug(
            "Session settings: sql_mode=%s, character set %s, collation %s",
            settings.sql_mode,
            settings.character_set,
            settings.collation,
        )
        catalog = {info.routine_name: info for info in self.data_layer.get_routines()}
        seen: dict[str, Path] = {}

        for path in paths:
            path = Path(path)
            name = path.stem

            if name in seen:
                message = f"Routine also defined in '{seen[name]}'"
                log.error("%s: %s", name, message)
                result.failed[f"{name} ({path})"] = message
                continue
            seen[name] = path

            prior = self.store.get(name)
            try:
                metadata = load_stored_routine(
                    path,
                    self.data_layer,
                    settings,
                    self.placeholders,
                    prior=prior,
                    catalog_info=catalog.get(name),
                )
            except RoutineLoaderError as e:
                log.error("%s", e)
                result.failed[name] = str(e)
                self.store.remove(name)
                continue

            if metadata is prior:
                result.skipped.append(name)
            else:
                self.store.put(metadata)
                result.loaded.append(name)

        self.store.save()
        return result
