"""Dataclasses representing parsed spreadsheet rows and shared strings."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

Record = dict[str, str]
"""Header label to cell value, in header order."""


class CellType(str, Enum):
    """How a cell value was obtained."""

    SHARED_STRING = "shared_string"
    INLINE = "inline"
    LITERAL = "literal"


@dataclass(frozen=True)
class Cell:
    """A single cell positioned by its 0-based column index."""

    column: int
    value: str
    cell_type: CellType = CellType.LITERAL


@dataclass
class Row:
    """Sparse row of cells keyed by column index.

    Reading by position returns an empty string for columns that were
    never addressed.
    """

    cells: dict[int, Cell] = field(default_factory=dict)

    @classmethod
    def from_values(cls, values: Iterable[str]) -> Row:
        """Build a dense row from positional values."""
        return cls(
            cells={index: Cell(index, value) for index, value in enumerate(values)}
        )

    def set(self, cell: Cell) -> None:
        """Place a cell, replacing any earlier cell in the same column."""
        self.cells[cell.column] = cell

    def value_at(self, column: int) -> str:
        cell = self.cells.get(column)
        return cell.value if cell is not None else ""

    def values(self) -> list[str]:
        """Positional values with gaps filled by empty strings."""
        return [self.value_at(index) for index in range(len(self))]

    def is_blank(self) -> bool:
        return all(not cell.value.strip() for cell in self.cells.values())

    def __len__(self) -> int:
        return max(self.cells) + 1 if self.cells else 0

    def __iter__(self) -> Iterator[Cell]:
        return iter(sorted(self.cells.values(), key=lambda cell: cell.column))


@dataclass
class SharedStringTable:
    """Workbook-wide string table referenced by 0-based index."""

    strings: list[str] = field(default_factory=list)

    def resolve(self, index: int) -> str | None:
        """Return the string at ``index`` or None when out of range."""
        if 0 <= index < len(self.strings):
            return self.strings[index]
        return None

    def __len__(self) -> int:
        return len(self.strings)
