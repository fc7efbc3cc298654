"""
Character Data Loading for the Character Encounter Network

Reads the three external inputs of a run:
- the narrative text
- the character list (canonical names + aliases)
- the optional character metadata table used by the node list export

============================================================
CHARACTER LIST FORMAT
============================================================

CSV, one character per row. Column 0 is the canonical name, every
further non-empty column is an extra alias:

    Jon Snow,Jon,Lord Snow
    Samwell Tarly,Sam,Samwell
    # comment lines and blank lines are ignored

Row order defines the character slot order.

============================================================
METADATA FORMAT
============================================================

CSV with a header row. Column 0 is the canonical name used as the
lookup key; the whole row is kept for the node list export.
"""

import csv
import os
from typing import Optional

from alias_index import AliasIndex


def load_text(path: str) -> str:
    """Read the narrative text, collapsing line breaks into spaces."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Text file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f]
    return " ".join(line for line in lines if line)


def parse_character_rows(lines: list[str]) -> list[tuple[str, list[str]]]:
    rows = []
    for record in csv.reader(lines):
        cells = [cell.strip() for cell in record]
        if not cells or not cells[0] or cells[0].startswith("#"):
            continue
        rows.append((cells[0], [cell for cell in cells[1:] if cell]))
    return rows


def load_characters(path: str) -> tuple[list[str], AliasIndex]:
    """
    Load the character list.

    Returns:
        (canonical names in slot order, alias index)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If it has no characters, or an alias is shared
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Character list not found: {path}")
    with open(path, 'r', encoding='utf-8', newline='') as f:
        rows = parse_character_rows(f.read().splitlines())
    if not rows:
        raise ValueError(f"No characters found in: {path}")
    return [name for name, _ in rows], AliasIndex.from_characters(rows)


def load_character_metadata(path: Optional[str]) -> Optional[dict[str, list[str]]]:
    """
    Load the metadata table keyed by canonical name, or None when no path
    is given. Later rows win on duplicate names.
    """
    if path is None:
        return None
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Character metadata file not found: {path}")
    with open(path, 'r', encoding='utf-8', newline='') as f:
        records = list(csv.reader(f))
    table = {}
    for record in records[1:]:
        if record and record[0]:
            table[record[0]] = record
    return table
