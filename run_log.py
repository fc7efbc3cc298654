"""
Run Log for the Character Encounter Network

A RunLog is an ordered list of human-readable lines. The cleaning passes
return one describing what they removed, and every exporter returns one
holding the rendered text block. Printing and saving are left to the
caller; nothing here touches the console on its own.
"""

import os
from dataclasses import dataclass, field


@dataclass
class RunLog:
    lines: list[str] = field(default_factory=list)

    def log(self, line: str) -> None:
        self.lines.append(line)

    def extend(self, other: "RunLog") -> None:
        self.lines.extend(other.lines)

    def __iter__(self):
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __str__(self) -> str:
        return "\n".join(self.lines)

    def print(self, prefix: str = "") -> None:
        for line in self.lines:
            print(f"{prefix}{line}")

    def save(self, path: str) -> str:
        """Write the lines to `path` (one per line) and return the path."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            for line in self.lines:
                f.write(line + "\n")
        return path
