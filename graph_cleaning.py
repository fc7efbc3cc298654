"""
Graph Cleaning for the Character Encounter Network

PURPOSE:
Post-processing passes that prune a built EncounterMatrix. Each pass is
independent, can be run in any order, and returns a RunLog naming what
it removed.

============================================================
PASSES
============================================================

1. NOISE
   - Cells with 0 < weight < threshold are zeroed (both halves)
   - The diagonal is forced to zero
   - The log has one "A, B, weight" line per zeroed pair: the mirror
     cell is already zero when the scan reaches it
   - Characters left without any positive edge ("loners") are removed

2. FLOATERS
   - Breadth-first search over positive edges from an entry point
   - Everyone never reached is removed
   - The entry point itself always survives

3. SINGLETONS
   - Characters with fewer than two positive-weight neighbours are
     removed, and the degrees recomputed
   - Unbounded: repeat until a round removes nobody
   - Bounded: exactly `iterations` rounds
   - Degree counts neighbours, not weight

============================================================
LIFECYCLE
============================================================

Every pass ends in a row/column removal, which FREEZES the matrix even
when nothing was removed. Cleaning is one-way: build first, then clean.
"""

from collections import deque
from typing import Optional

from encounter_matrix import EncounterMatrix
from run_log import RunLog


def _removal_line(label: str, removed: list[str]) -> str:
    return f"Removing {label}: " + " ".join(removed)


def clean_noise(matrix: EncounterMatrix, threshold: int) -> RunLog:
    """Zero edges weaker than `threshold`, then drop characters left with no edges."""
    log = RunLog()
    log.log("Removing noisy connections:")
    characters = matrix.characters
    for i in range(matrix.size):
        for j in range(matrix.size):
            weight = matrix.cell(i, j)
            if 0 < weight < threshold:
                log.log(f"{characters[i]}, {characters[j]}, {weight}")
                matrix.set_cell(i, j, 0)
        matrix.set_cell(i, i, 0)

    loners = [i for i in range(matrix.size) if matrix.degree(i) == 0]
    log.log(_removal_line("loners", matrix.remove_characters(loners)))
    return log


def clean_floaters(matrix: EncounterMatrix, entry_point: int = 0) -> RunLog:
    """Remove every character not reachable from `entry_point`."""
    if matrix.size and not 0 <= entry_point < matrix.size:
        raise ValueError(
            f"Entry point {entry_point} out of range for {matrix.size} characters"
        )

    floaters = set(range(matrix.size))
    if matrix.size:
        floaters.discard(entry_point)
        queue = deque([entry_point])
        while queue:
            index = queue.popleft()
            for neighbour in range(matrix.size):
                if matrix.cell(index, neighbour) > 0 and neighbour in floaters:
                    floaters.discard(neighbour)
                    queue.append(neighbour)

    log = RunLog()
    log.log(_removal_line("floating characters", matrix.remove_characters(floaters)))
    return log


def _singletons(matrix: EncounterMatrix) -> list[int]:
    return [i for i in range(matrix.size) if matrix.degree(i) < 2]


def clean_singletons(matrix: EncounterMatrix, iterations: Optional[int] = None) -> RunLog:
    """
    Remove characters with fewer than two neighbours.

    Args:
        matrix: The matrix to clean (frozen afterwards)
        iterations: Number of rounds to run. None repeats until a round
                    removes nobody.
    """
    log = RunLog()
    if iterations is None:
        while True:
            singletons = _singletons(matrix)
            log.log(_removal_line("singletons", matrix.remove_characters(singletons)))
            if not singletons:
                break
    else:
        for _ in range(iterations):
            singletons = _singletons(matrix)
            log.log(_removal_line("singletons", matrix.remove_characters(singletons)))
    return log
