"""routinekit - Load annotated stored routine sources into MySQL and extract their metadata."""

from routinekit.base import (
    AccessDeniedError,
    ColumnCountMismatchError,
    DataLayerError,
    DuplicateExtendedParamError,
    InvalidReturnTypeError,
    LoadFailedError,
    MalformedBulkInsertDirectiveError,
    MalformedParamDirectiveError,
    MissingDesignationTypeError,
    NameMismatchError,
    RoutineLoaderError,
    RoutineNotFoundError,
    SignatureNotFoundError,
    SourceUnreadableError,
    SqlSyntaxError,
    TableNotFoundError,
    UnexpectedDesignationArgsError,
    UnknownExtendedParameterError,
    UnknownPlaceholderError,
)
from routinekit.datalayer import RoutineDataLayer
from routinekit.loader import LoadResult, RoutineLoader, load_stored_routine
from routinekit.metadata import MetadataStore, assemble_metadata
from routinekit.models import RoutineMetadata, SessionSettings
from routinekit.reload import must_reload

__all__ = [
    "RoutineLoader",
    "LoadResult",
    "load_stored_routine",
    "must_reload",
    "assemble_metadata",
    "MetadataStore",
    "RoutineMetadata",
    "SessionSettings",
    "RoutineDataLayer",
    "RoutineLoaderError",
    "SourceUnreadableError",
    "UnknownPlaceholderError",
    "MissingDesignationTypeError",
    "MalformedBulkInsertDirectiveError",
    "UnexpectedDesignationArgsError",
    "SignatureNotFoundError",
    "NameMismatchError",
    "DuplicateExtendedParamError",
    "MalformedParamDirectiveError",
    "LoadFailedError",
    "ColumnCountMismatchError",
    "UnknownExtendedParameterError",
    "InvalidReturnTypeError",
    "DataLayerError",
    "RoutineNotFoundError",
    "TableNotFoundError",
    "SqlSyntaxError",
    "AccessDeniedError",
]
