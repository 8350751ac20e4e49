"""Placeholder resolution for routine sources.

A placeholder is a token such as ``@MAX_NAME_LENGTH@`` or
``@tbl_user.usr_name%type@``. Lookup is case-insensitive: the token is
upper-cased before it is looked up in the placeholder map.

Magic constants (``__FILE__``, ``__ROUTINE__``, ``__DIR__`` and ``__LINE__``)
are bare words computed from the source file. ``__LINE__`` is the 1-based line
number of the original source line it appears on.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

PLACEHOLDER_PATTERN = re.compile(r"@[A-Za-z0-9_.]+(?:%type)?@")

MAGIC_CONSTANTS = ("__FILE__", "__ROUTINE__", "__DIR__", "__LINE__")


def normalize_placeholders(pairs: Mapping[str, Any]) -> dict[str, str]:
    """Upper-case placeholder tokens and stringify their values."""
    return {str(name).upper(): str(value) for name, value in pairs.items()}


def find_placeholders(
    text: str, placeholders: Mapping[str, str]
) -> tuple[dict[str, str], list[str]]:
    """Find the placeholders used in text.

    Args:
        text: Source text
        placeholders: Normalized placeholder map (upper-case tokens)

    Returns:
        Tuple of (replace pairs keyed by the token as written in the source,
        sorted list of distinct unknown tokens)
    """
    replace: dict[str, str] = {}
    unknown: set[str] = set()
    for match in PLACEHOLDER_PATTERN.finditer(text):
        token = match.group(0)
        value = placeholders.get(token.upper())
        if value is None:
            unknown.add(token)
        else:
            replace[token] = value
    return replace, sorted(unknown)


def magic_constants(
    path: Path, routine_name: str, escape: Callable[[str], str]
) -> dict[str, str]:
    """Magic constants that are constant for the whole file.

    ``__LINE__`` is not included; it is computed per line by substitute().

    Args:
        path: Path of the routine source file
        routine_name: Name of the stored routine
        escape: Escapes a string for use inside a quoted SQL literal
    """
    real_path = os.path.realpath(path)
    return {
        "__FILE__": f"'{escape(real_path)}'",
        "__ROUTINE__": f"'{routine_name}'",
        "__DIR__": f"'{escape(os.path.dirname(real_path))}'",
    }


def _compile(tokens: Iterable[str]) -> re.Pattern[str] | None:
    # Longest tokens first, so a token never shadows a longer one it prefixes
    ordered = sorted((t for t in tokens if t), key=len, reverse=True)
    if not ordered:
        return None
    return re.compile("|".join(re.escape(t) for t in ordered))


def substitute(
    lines: list[str], replace: Mapping[str, str], magic: Mapping[str, str] | None = None
) -> str:
    """Replace placeholders and magic constants line by line.

    All tokens are replaced in a single pass per line, so a replacement value
    is never itself scanned for tokens.
    """
    pairs = dict(replace)
    if magic is not None:
        pairs.update(magic)
        pairs["__LINE__"] = ""
    pattern = _compile(pairs)
    if pattern is None:
        return "\n".join(lines)

    result = []
    for number, line in enumerate(lines, start=1):
        if magic is not None:
            pairs["__LINE__"] = str(number)
        result.append(pattern.sub(lambda m: pairs[m.group(0)], line))
    return "\n".join(result)


def resolve(
    text: str, placeholders: Mapping[str, str], magic: Mapping[str, str] | None = None
) -> tuple[str, list[str]]:
    """Substitute placeholders in text.

    Args:
        text: Source text
        placeholders: Placeholder map; keys are matched case-insensitively
        magic: Magic constants; when given, ``__LINE__`` is substituted too

    Returns:
        Tuple of (substituted text, sorted list of distinct unknown tokens)
    """
    replace, unknown = find_placeholders(text, normalize_placeholders(placeholders))
    return substitute(text.split("\n"), replace, magic), unknown


def unknown_placeholder_lines(text: str, unknown: Iterable[str]) -> list[tuple[int, str]]:
    """Return (line number, line) for each source line using an unknown token."""
    tokens = set(unknown)
    found = []
    for number, line in enumerate(text.split("\n"), start=1):
        if any(m.group(0) in tokens for m in PLACEHOLDER_PATTERN.finditer(line)):
            found.append((number, line))
    return found
