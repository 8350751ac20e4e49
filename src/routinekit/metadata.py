"""Routine metadata assembly and persistence."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterator, Mapping

from .datatypes import column_type_to_python_type
from .models import DocBlock, Directives, RoutineMetadata, RoutineParameter
from .placeholders import MAGIC_CONSTANTS

log = logging.getLogger(__name__)


def docblock_parts(parameters: list[RoutineParameter], docblock: DocBlock) -> dict[str, Any]:
    """Doc block parts to be used by the wrapper generator."""
    return {
        "short_description": docblock.short_description,
        "long_description": docblock.long_description,
        "parameters": [
            {
                "parameter_name": p.parameter_name,
                "python_type": column_type_to_python_type(p),
                "data_type_descriptor": p.data_type_descriptor,
                "description": docblock.description_of(p.parameter_name),
            }
            for p in parameters
        ],
    }


def assemble_metadata(
    routine_name: str,
    routine_type: str,
    directives: Directives,
    timestamp: int,
    replace: Mapping[str, str],
    parameters: list[RoutineParameter],
    docblock: DocBlock,
    fields: list[str] | None = None,
    column_types: list[str] | None = None,
) -> RoutineMetadata:
    """Combine the outputs of all loading stages into the routine's metadata.

    Magic constants never end up in the persisted placeholder snapshot.
    """
    designation = directives.designation
    return RoutineMetadata(
        routine_name=routine_name,
        routine_type=routine_type,
        designation=designation.kind,
        timestamp=timestamp,
        return_type=directives.return_type,
        table_name=designation.table_name,
        parameters=parameters,
        columns=designation.columns,
        fields=fields,
        column_types=column_types,
        replace={k: v for k, v in replace.items() if k not in MAGIC_CONSTANTS},
        docblock=docblock_parts(parameters, docblock),
        extended_params={
            name: param.as_dict() for name, param in directives.extended_params.items()
        },
    )


class MetadataStore:
    """Routine metadata persisted in a JSON file, keyed by routine name.

    Example:
        store = MetadataStore(Path("etc/routines.json"))
        store.load()
        prior = store.get("ord_get_details")
        ...
        store.put(metadata)
        store.save()
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._routines: dict[str, dict[str, Any]] = {}

    def load(self) -> None:
        """Read the metadata file; a missing file is an empty store."""
        if not self.path.exists():
            log.debug("Metadata file %s not found, starting empty", self.path)
            self._routines = {}
            return
        self._routines = json.loads(self.path.read_text(encoding="utf-8"))

    def save(self) -> None:
        """Write the metadata file, replacing the previous one atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps(self._routines, indent=2, sort_keys=True) + "\n", encoding="utf-8"
        )
        os.replace(tmp, self.path)

    def get(self, routine_name: str) -> RoutineMetadata | None:
        data = self._routines.get(routine_name)
        return RoutineMetadata.from_dict(data) if data is not None else None

    def put(self, metadata: RoutineMetadata) -> None:
        self._routines[metadata.routine_name] = metadata.as_dict()

    def remove(self, routine_name: str) -> None:
        self._routines.pop(routine_name, None)

    def __contains__(self, routine_name: str) -> bool:
        return routine_name in self._routines

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._routines))

    def __len__(self) -> int:
        return len(self._routines)
