"""Doc block parser for routine sources.

The doc block is the ``/** ... */`` comment preceding the CREATE statement:

    /**
     * Selects the details of an order.
     *
     * Longer explanation, possibly spanning
     * several lines.
     *
     * @param p_ord_id The ID of the order.
     */
    create procedure ord_get_details(in p_ord_id int)
"""

from __future__ import annotations

import re

from .directives import SIGNATURE_PATTERN
from .models import DocBlock, ParamDoc

_BLOCK_PATTERN = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
_TAG_PATTERN = re.compile(r"^@(\w+)\s*(.*)$")


def _comment_lines(block: str) -> list[str]:
    """Strip the leading '*' decoration of each comment line."""
    lines = []
    for line in block.split("\n"):
        line = line.strip()
        if line.startswith("*"):
            line = line[1:]
            if line.startswith(" "):
                line = line[1:]
        lines.append(line.rstrip())
    # Drop leading and trailing blank lines
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def _split_description(lines: list[str]) -> tuple[str, str]:
    """Split description lines into short (first paragraph) and long parts."""
    short: list[str] = []
    i = 0
    while i < len(lines) and lines[i].strip():
        short.append(lines[i].strip())
        i += 1
    long = "\n".join(lines[i:]).strip()
    return " ".join(short), long


def parse_docblock(text: str) -> DocBlock:
    """Parse the doc block of a routine source.

    Only the text before the CREATE statement is considered. A source without
    a doc block yields an empty DocBlock.
    """
    signature = SIGNATURE_PATTERN.search(text)
    head = text[: signature.start()] if signature else text

    match = _BLOCK_PATTERN.search(head)
    if not match:
        return DocBlock()

    description: list[str] = []
    tags: list[tuple[str, list[str]]] = []
    for line in _comment_lines(match.group(1)):
        tag = _TAG_PATTERN.match(line.strip())
        if tag:
            tags.append((tag.group(1), [tag.group(2).strip()]))
        elif tags:
            # Continuation of the previous tag
            if line.strip():
                tags[-1][1].append(line.strip())
        else:
            description.append(line)

    short, long = _split_description(description)
    result = DocBlock(short_description=short, long_description=long)

    for name, parts in tags:
        if name != "param":
            continue
        content = " ".join(p for p in parts if p)
        param_name, _, param_description = content.partition(" ")
        if param_name:
            result.parameters.append(ParamDoc(param_name, param_description.strip()))

    return result
