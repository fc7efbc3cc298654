"""
Network Export for the Character Encounter Network

Renders an EncounterMatrix as text blocks for graph tools (Gephi, d3,
spreadsheets). Every function returns a RunLog; writing it to disk is
the caller's job.

============================================================
FORMATS
============================================================

Matrix CSV
    Header of character names, then one comma-joined row per character.

JSON matrix
    Array-of-arrays in a caller-chosen character order:
        [
        [0, 2, 1],
        [2, 0, 0],
        [1, 0, 0]
        ]

Edge list CSV
    One row per unordered pair with positive weight. Template tokens:
        #C1  first character (quoted)
        #C2  second character (quoted)
        #W   weight as a decimal ("3.0")

Node list CSV
    One row per character, looked up in a metadata table keyed by
    canonical name. Template tokens:
        #ID  id (column 0)       #LA  label (column 1)
        #AL  allegiance (col 5)  #RH  royal house (col 6)
        #C   culture (col 7)
    Missing trailing columns render as "". Characters absent from the
    table render as "<name>,missing".
"""

from typing import Mapping, Optional, Sequence

from encounter_matrix import EncounterMatrix
from run_log import RunLog

DEFAULT_EDGE_HEADER = "Source,Target,Weight,Type"
DEFAULT_EDGE_TEMPLATE = "#C1,#C2,#W,undirected"

DEFAULT_NODE_HEADER = "Id,Label,Allegiance,Royal House,Culture"
DEFAULT_NODE_TEMPLATE = "#ID,#LA,#AL,#RH,#C"

# Metadata column positions
ALLEGIANCE_COLUMN = 5
ROYAL_HOUSE_COLUMN = 6
CULTURE_COLUMN = 7


def _quoted(value: str) -> str:
    return f'"{value}"'


def _column(row: Sequence[str], index: int) -> str:
    return row[index] if len(row) > index else ""


def to_matrix_csv(matrix: EncounterMatrix) -> RunLog:
    log = RunLog()
    log.log(",".join(matrix.characters))
    for row in matrix.matrix:
        log.log(",".join(str(value) for value in row))
    return log


def to_matrix_json(
    matrix: EncounterMatrix,
    ordered_characters: Optional[Sequence[str]] = None,
) -> RunLog:
    """
    Render the matrix as an array of arrays, rows and columns following
    `ordered_characters` (a subset or reordering of the matrix's names).
    None falls back to the matrix's own order.
    """
    ordered = list(matrix.characters if ordered_characters is None else ordered_characters)
    indices = [matrix.index_of_character(name) for name in ordered]

    length = len(ordered)
    reordered = [[0] * length for _ in range(length)]
    for i in range(length):
        for j in range(i + 1, length):
            weight = matrix.cell(indices[i], indices[j])
            reordered[i][j] = weight
            reordered[j][i] = weight

    log = RunLog()
    log.log("[")
    for i, row in enumerate(reordered):
        line = "[" + ", ".join(str(value) for value in row) + "]"
        log.log(line if i == length - 1 else line + ",")
    log.log("]")
    return log


def to_edge_list_csv(
    matrix: EncounterMatrix,
    header: str = DEFAULT_EDGE_HEADER,
    template: str = DEFAULT_EDGE_TEMPLATE,
) -> RunLog:
    """
    One templated line per positive-weight pair (i < j).

    Quote plain template text yourself; the #C1/#C2 tokens are quoted
    for you.
    """
    log = RunLog()
    log.log(header)
    characters = matrix.characters
    for i in range(matrix.size):
        for j in range(i + 1, matrix.size):
            weight = matrix.cell(i, j)
            if weight > 0:
                line = (
                    template
                    .replace("#C1", _quoted(characters[i]))
                    .replace("#C2", _quoted(characters[j]))
                    .replace("#W", str(float(weight)))
                )
                log.log(line)
    return log


def to_node_list_csv(
    matrix: EncounterMatrix,
    metadata: Optional[Mapping[str, Sequence[str]]],
    header: str = DEFAULT_NODE_HEADER,
    template: str = DEFAULT_NODE_TEMPLATE,
) -> RunLog:
    """
    One templated line per character using external metadata rows.

    Args:
        matrix: Source matrix (its current characters are exported)
        metadata: canonical name -> row of columns, or None when no
                  metadata table is available
    """
    log = RunLog()
    if metadata is None:
        log.log("Error: no character metadata table supplied")
        return log

    log.log(header)
    for character in matrix.characters:
        row = metadata.get(character)
        if row is None:
            log.log(f"{character},missing")
            continue
        line = (
            template
            .replace("#ID", _quoted(_column(row, 0)))
            .replace("#LA", _quoted(_column(row, 1)))
            .replace("#AL", _quoted(_column(row, ALLEGIANCE_COLUMN)))
            .replace("#RH", _quoted(_column(row, ROYAL_HOUSE_COLUMN)))
            .replace("#C", _quoted(_column(row, CULTURE_COLUMN)))
        )
        log.log(line)
    return log


def to_encounter_log(matrix: EncounterMatrix, name: Optional[str] = None) -> RunLog:
    """Encounters in text order, optionally only those involving `name`."""
    log = RunLog()
    for encounter in matrix.get_encounter_list(name):
        log.log(
            f"{encounter.position}: "
            f"{encounter.character1} ({encounter.alias1}) - "
            f"{encounter.character2} ({encounter.alias2})"
        )
    return log
