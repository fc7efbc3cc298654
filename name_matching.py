"""
Streaming Name Matching for the Character Encounter Network

PURPOSE:
Supplies the pieces the construction pass is assembled from:
- word-boundary rules
- the longest-alias-suffix matcher
- the three bounded buffers used during the single pass over the text

============================================================
WORD BOUNDARIES
============================================================

A word ends at position i when text[i] is NOT a word character and
text[i-1] IS one. Word characters are letters and digits, so
punctuation, apostrophes and hyphens all end a word ("Jon's" ends
"Jon" at the apostrophe).

============================================================
BUFFERS
============================================================

ContextBuffer
    Trailing characters of the text, cut to at most radius + 2 spaces.
    Bounds the suffix search.

PendingBuffer
    Boundary candidates (names or not) whose fate is undecided. Drained
    when a valid name arrives or when it grows past its limit.

MentionWindow
    The last `radius` resolved slots (an alias or "" for no name).
    This is the neighbourhood a mention is tallied against.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional

# A run of more than this many undecided candidates is drained
# without waiting for a valid name
DEFAULT_PENDING_FLUSH_LIMIT = 7


# --------------------------------------------------
# Word rules
# --------------------------------------------------

def is_word_character(c: str) -> bool:
    return c.isalnum()


def is_word_end(text: str, i: int) -> bool:
    """True when a word finishes just before position i."""
    if i <= 0 or i >= len(text):
        return False
    return not is_word_character(text[i]) and is_word_character(text[i - 1])


def ends_with_word(context: str, alias: str) -> bool:
    """True when `context` ends with `alias` as a whole word."""
    if not alias or not context.endswith(alias):
        return False
    start = len(context) - len(alias)
    return start == 0 or not is_word_character(context[start - 1])


# --------------------------------------------------
# Candidates
# --------------------------------------------------

@dataclass(frozen=True)
class NameCandidate:
    """
    A word-boundary candidate. `position` is the character offset of the
    boundary; -1 marks the invalid sentinel (no name ended here).
    """
    text: str
    position: int
    context: str

    @classmethod
    def invalid(cls) -> "NameCandidate":
        return cls("", -1, "")

    @property
    def is_valid(self) -> bool:
        return self.position > -1


def find_primary(
    context: str,
    position: int,
    aliases_longest_first: tuple[str, ...],
) -> NameCandidate:
    """
    Return the longest alias that ends `context` as a whole word.

    `aliases_longest_first` must be sorted by descending length, so the
    first hit is the longest; equal lengths resolve to the earlier alias.
    """
    for alias in aliases_longest_first:
        if len(alias) > len(context):
            continue
        if ends_with_word(context, alias):
            return NameCandidate(alias, position, context)
    return NameCandidate.invalid()


# --------------------------------------------------
# Buffers
# --------------------------------------------------

class ContextBuffer:
    """Trailing text context holding at most radius + 2 spaces."""

    def __init__(self, radius: int):
        self.max_spaces = radius + 2
        self._text = ""
        self._spaces = 0

    def append(self, c: str) -> None:
        self._text += c
        if c == " ":
            self._spaces += 1
            if self._spaces > self.max_spaces:
                self._text = self._text[self._text.index(" ") + 1:]
                self._spaces -= 1

    @property
    def text(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text


class PendingBuffer:
    """FIFO of undecided boundary candidates."""

    def __init__(self, limit: int = DEFAULT_PENDING_FLUSH_LIMIT):
        if limit < 0:
            raise ValueError(f"Pending flush limit must be >= 0, got {limit}")
        self.limit = limit
        self._queue: deque[NameCandidate] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def add(self, candidate: NameCandidate) -> None:
        self._queue.append(candidate)

    def should_flush(self, primary: NameCandidate) -> bool:
        return primary.is_valid or len(self._queue) > self.limit

    def drain(self) -> Iterator[NameCandidate]:
        """Yield and remove candidates, oldest first."""
        while self._queue:
            yield self._queue.popleft()


class MentionWindow:
    """
    Fixed-capacity FIFO of resolved slots. "" marks a position where no
    name appeared.
    """

    def __init__(self, radius: int):
        if radius < 1:
            raise ValueError(f"Radius must be >= 1, got {radius}")
        self.radius = radius
        self._slots: deque[str] = deque()

    def push(self, slot: str) -> Optional[str]:
        """Append a slot, returning the evicted oldest slot if over capacity."""
        self._slots.append(slot)
        if len(self._slots) > self.radius:
            return self._slots.popleft()
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def snapshot(self) -> list[str]:
        return list(self._slots)
