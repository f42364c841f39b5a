"""Tabular row payloads produced by SQL-protocol backends."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TabularRows:
    """Rows returned by a tabular protocol; the last column is relevance."""

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...] = field(default_factory=tuple)

    @classmethod
    def from_text(cls, text: str, delimiter: str = "\t") -> "TabularRows":
        """Parse delimited text whose first line is the column header."""
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            return cls(columns=())
        columns = tuple(lines[0].split(delimiter))
        rows = tuple(tuple(line.split(delimiter)) for line in lines[1:])
        return cls(columns=columns, rows=rows)
