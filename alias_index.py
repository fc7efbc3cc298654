"""
Alias Index for the Character Encounter Network

PURPOSE:
Maps every known alias string ("Jon", "Jon Snow", "Lord Snow") to the
canonical character slot it refers to. The index is built once from the
character list and is READ-ONLY afterwards: the matcher and the matrix
only ever look things up.

============================================================
ORDERING
============================================================

Iteration follows REGISTRATION ORDER. The matcher asks for the aliases
longest-first; among aliases of equal length the one registered first
comes first, so the first-registered alias wins a tie at a boundary.
"""

from collections.abc import Iterable, Mapping
from typing import Iterator


class UnknownAliasError(KeyError):
    """Raised when an alias that was never registered is looked up."""

    def __init__(self, alias: str):
        super().__init__(alias)
        self.alias = alias

    def __str__(self) -> str:
        return f"Unknown alias: {self.alias!r}"


class AliasIndex(Mapping):
    """
    Immutable alias -> character slot mapping.
    """

    def __init__(self, aliases: Mapping[str, int]):
        entries = {}
        for alias, index in aliases.items():
            if not alias:
                raise ValueError("Aliases must be non-empty strings")
            if index < 0:
                raise ValueError(f"Negative character index for alias {alias!r}: {index}")
            entries[alias] = index
        self._entries = entries
        # Stable sort keeps registration order among equal lengths
        self._longest_first = tuple(sorted(entries, key=len, reverse=True))

    @classmethod
    def from_characters(
        cls,
        rows: Iterable[tuple[str, Iterable[str]]],
    ) -> "AliasIndex":
        """
        Build an index from (canonical_name, aliases) rows.

        Row order defines the slot index. The canonical name is always
        registered as an alias of its own slot, before its extra aliases.
        """
        entries: dict[str, int] = {}
        for index, (name, aliases) in enumerate(rows):
            for alias in (name, *aliases):
                if not alias:
                    continue
                owner = entries.get(alias)
                if owner is not None and owner != index:
                    raise ValueError(
                        f"Alias {alias!r} registered for two characters "
                        f"(slots {owner} and {index})"
                    )
                entries.setdefault(alias, index)
        return cls(entries)

    def __getitem__(self, alias: str) -> int:
        return self._entries[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AliasIndex({self._entries!r})"

    def index_of(self, alias: str) -> int:
        """Return the slot for an alias, raising UnknownAliasError if absent."""
        try:
            return self._entries[alias]
        except KeyError:
            raise UnknownAliasError(alias) from None

    def aliases_longest_first(self) -> tuple[str, ...]:
        """Aliases by descending length, ties in registration order."""
        return self._longest_first
