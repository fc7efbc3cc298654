"""
Encounter Matrix for the Character Encounter Network

PURPOSE:
This module builds a SYMMETRIC CHARACTER ADJACENCY MATRIX from raw
narrative text. Two characters "encounter" each other when mentions of
them fall within a bounded number of words. Every encounter increments
the pair's cell and is kept in an ordered encounter log.

============================================================
CONSTRUCTION PASS
============================================================

The text is read ONCE, character by character, with no backtracking:

1. A trailing context (radius + 2 spaces long) is kept.
2. At every word end, the longest alias ending the context is the
   PRIMARY candidate (or the invalid sentinel).
3. Undecided candidates wait in a PENDING buffer. It is drained when
   the primary is valid, or when it holds more than PENDING_FLUSH_LIMIT
   entries.
4. Drained candidates that are invalid, or that are a strict substring
   of the primary ("Mirri" before "Mirri Maz Duur"), become empty
   window slots. The rest are TALLIED against the window and pushed
   into it.
5. A lone non-name with nothing pending goes straight into the window
   as an empty slot; anything else joins the pending buffer.

Candidates still pending when the text ends are never tallied.

============================================================
TALLY RULES
============================================================

For a mention M and the current window:
- at most ONE encounter per distinct character (last alias wins)
- a slot naming M's own character discards every neighbour collected
  so far in the scan ("...Dany asked her. 'I am named Mirri Maz Duur'")
- add_encounter ignores pairs where one alias contains the other, and
  pairs resolving to the same character

============================================================
LIFECYCLE
============================================================

CONSTRUCTION: add_encounter / build may be called.
CLEANED: after the first row/column removal the matrix is frozen for
good, and any further add_encounter raises FrozenMatrixError.
"""

import os
from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Iterable, Optional
from dotenv import load_dotenv

from alias_index import AliasIndex
from name_matching import (
    DEFAULT_PENDING_FLUSH_LIMIT,
    ContextBuffer,
    MentionWindow,
    NameCandidate,
    PendingBuffer,
    find_primary,
    is_word_end,
)
load_dotenv()

# --------------------------------------------------
# Configuration
# --------------------------------------------------

def int_setting(name: str, default: int, minimum: int) -> int:
    """Read an integer setting from the environment, rejecting values below `minimum`."""
    value = int(os.getenv(name, str(default)))
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


# Word radius: how many resolved slots count as "nearby"
DEFAULT_RADIUS = int_setting("NETWORK_RADIUS", 15, minimum=1)

# Pending-buffer drain threshold (see name_matching.PendingBuffer)
PENDING_FLUSH_LIMIT = int_setting("NETWORK_PENDING_FLUSH_LIMIT", DEFAULT_PENDING_FLUSH_LIMIT, minimum=0)

# How often (in characters) the progress callback fires during build
PROGRESS_INTERVAL = int_setting("NETWORK_PROGRESS_INTERVAL", 100000, minimum=1)

ProgressCallback = Callable[[int, int], None]


class FrozenMatrixError(RuntimeError):
    """Raised when a cleaned matrix is asked to record new encounters."""


# --------------------------------------------------
# Data structures
# --------------------------------------------------

@dataclass(frozen=True)
class Encounter:
    """
    One observed co-mention. `character1`/`character2` are canonical
    names; `alias1`/`alias2` are the strings actually matched.
    Encounters order by position in the text.
    """
    character1: str
    alias1: str
    character2: str
    alias2: str
    position: int
    context: str = ""

    def __lt__(self, other: "Encounter") -> bool:
        if not isinstance(other, Encounter):
            return NotImplemented
        return self.position < other.position

    def involves(self, name: str) -> bool:
        return name in (self.character1, self.character2, self.alias1, self.alias2)


class EncounterMatrix:
    """
    Symmetric n x n encounter counts plus the encounter log.

    Invariants: matrix[i][j] == matrix[j][i] and matrix[i][i] == 0.
    """

    def __init__(self, characters: Iterable[str], alias_index: AliasIndex):
        self._characters = list(characters)
        self.alias_index = alias_index
        for alias, index in alias_index.items():
            if index >= len(self._characters):
                raise ValueError(
                    f"Alias {alias!r} points at slot {index}, "
                    f"but only {len(self._characters)} characters exist"
                )
        self._matrix = [[0] * self.size for _ in range(self.size)]
        self._encounters: list[Encounter] = []
        self._modifiable = True

    @classmethod
    def from_text(
        cls,
        characters: Iterable[str],
        alias_index: AliasIndex,
        text: str,
        radius: int = DEFAULT_RADIUS,
        progress: Optional[ProgressCallback] = None,
    ) -> "EncounterMatrix":
        matrix = cls(characters, alias_index)
        matrix.build(text, radius, progress=progress)
        return matrix

    # --------------------------------------------------
    # Accessors
    # --------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._characters)

    @property
    def characters(self) -> tuple[str, ...]:
        return tuple(self._characters)

    @property
    def matrix(self) -> list[list[int]]:
        """A copy of the current counts."""
        return [list(row) for row in self._matrix]

    @property
    def is_modifiable(self) -> bool:
        return self._modifiable

    def cell(self, i: int, j: int) -> int:
        return self._matrix[i][j]

    def index_of_character(self, name: str) -> int:
        try:
            return self._characters.index(name)
        except ValueError:
            raise ValueError(f"Unknown character: {name!r}") from None

    def weight(self, name_a: str, name_b: str) -> int:
        """Encounter count between two canonical names."""
        return self._matrix[self.index_of_character(name_a)][self.index_of_character(name_b)]

    def degree(self, i: int) -> int:
        """Number of positive-weight neighbours of slot i."""
        return sum(1 for value in self._matrix[i] if value > 0)

    def get_encounter_list(self, name: Optional[str] = None) -> list[Encounter]:
        """
        Encounters ordered by position. With `name`, only those where it is
        either canonical character or either matched alias.
        """
        encounters = self._encounters
        if name is not None:
            encounters = [e for e in encounters if e.involves(name)]
        return sorted(encounters, key=attrgetter("position"))

    # --------------------------------------------------
    # Construction
    # --------------------------------------------------

    def build(
        self,
        text: str,
        radius: int = DEFAULT_RADIUS,
        progress: Optional[ProgressCallback] = None,
        pending_limit: int = PENDING_FLUSH_LIMIT,
    ) -> None:
        """Run the streaming construction pass over `text`."""
        self._check_modifiable()
        window = MentionWindow(radius)
        pending = PendingBuffer(pending_limit)
        context = ContextBuffer(radius)
        if len(text) < 2:
            return

        aliases = self.alias_index.aliases_longest_first()
        total = len(text)
        context.append(text[0])
        for i in range(1, total):
            c = text[i]
            if progress is not None and i % PROGRESS_INTERVAL == 0:
                progress(i, total)

            if is_word_end(text, i):
                primary = find_primary(context.text, i, aliases)
                if pending.should_flush(primary):
                    for candidate in pending.drain():
                        self._resolve(candidate, primary, window)
                # no need to buffer a non-name behind nothing
                if not pending and not primary.is_valid:
                    window.push("")
                else:
                    pending.add(primary)

            context.append(c)

    def _resolve(
        self,
        candidate: NameCandidate,
        primary: NameCandidate,
        window: MentionWindow,
    ) -> None:
        nested = candidate.text in primary.text and candidate.text != primary.text
        if not candidate.is_valid or nested:
            window.push("")
        else:
            self.tally_neighbors(candidate, window)
            window.push(candidate.text)

    def tally_neighbors(self, mention: NameCandidate, window: Iterable[str]) -> None:
        """Record one encounter between `mention` and each character in the window."""
        index1 = self.alias_index.index_of(mention.text)
        secondaries: dict[int, str] = {}
        for secondary in window:
            if not secondary:
                continue
            index2 = self.alias_index.index_of(secondary)
            if index1 == index2:
                # self-reference: drop everything seen before it
                secondaries.clear()
            else:
                secondaries[index2] = secondary
        for secondary in secondaries.values():
            self.add_encounter(mention.text, secondary, mention.position, mention.context)

    def add_encounter(self, name1: str, name2: str, position: int, context: str = "") -> None:
        """
        Count one encounter between two aliases.

        Silently ignored when one alias contains the other or both resolve
        to the same character.

        Raises:
            FrozenMatrixError: if the matrix has been cleaned
            UnknownAliasError: if either alias is not in the index
        """
        self._check_modifiable()
        if name1 in name2 or name2 in name1:
            return
        index1 = self.alias_index.index_of(name1)
        index2 = self.alias_index.index_of(name2)
        if index1 == index2:
            return
        self._matrix[index1][index2] += 1
        self._matrix[index2][index1] += 1
        self._encounters.append(Encounter(
            character1=self._characters[index1],
            alias1=name1,
            character2=self._characters[index2],
            alias2=name2,
            position=position,
            context=context,
        ))

    # --------------------------------------------------
    # Cleaning support
    # --------------------------------------------------

    def set_cell(self, i: int, j: int, value: int) -> None:
        """Set a cell and its mirror. Only zeroing is used by the cleaners."""
        self._matrix[i][j] = value
        self._matrix[j][i] = value

    def remove_characters(self, removed: Iterable[int]) -> list[str]:
        """
        Drop the given slots' rows and columns, keeping the relative order
        of the survivors. Always freezes the matrix, even for an empty set.

        Returns:
            Canonical names of the removed characters, in slot order
        """
        self._modifiable = False
        removed = set(removed)
        if not removed:
            return []
        keep = [i for i in range(self.size) if i not in removed]
        names = [self._characters[i] for i in range(self.size) if i in removed]
        self._matrix = [[self._matrix[i][j] for j in keep] for i in keep]
        self._characters = [self._characters[i] for i in keep]
        return names

    def _check_modifiable(self) -> None:
        if not self._modifiable:
            raise FrozenMatrixError("This matrix has been cleaned and can no longer be modified.")
