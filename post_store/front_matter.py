"""Reading and writing the YAML metadata header of a post document.

A document looks like::

    ---
    title: Processes and threads
    date: 2025-06-02 10:00:00
    tags: [os, scheduling]
    ---
    Markdown body...

The header must start on the very first line.
"""

from typing import Any

import yaml

from post_store.exceptions import FrontMatterException

DELIMITER = "---"


def parse_document(text: str) -> tuple[dict[str, Any], str]:
    lines = text.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].rstrip() != DELIMITER:
        raise FrontMatterException("Document does not start with a metadata header")
    for idx, line in enumerate(lines[1:], start=1):
        if line.rstrip() == DELIMITER:
            break
    else:
        raise FrontMatterException("Metadata header is not terminated")
    try:
        header = yaml.safe_load("".join(lines[1:idx]))
    except (yaml.YAMLError, ValueError) as exc:
        raise FrontMatterException(f"Metadata header is malformed: {exc}") from exc
    if header is None:
        header = {}
    if not isinstance(header, dict):
        raise FrontMatterException("Metadata header must be a mapping")
    return header, "".join(lines[idx + 1 :])


def serialize_document(header: dict[str, Any], body: str) -> str:
    dumped = (
        yaml.safe_dump(header, sort_keys=False, allow_unicode=True) if header else ""
    )
    return f"{DELIMITER}\n{dumped}{DELIMITER}\n{body}"
