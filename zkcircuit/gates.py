"""Gates, cells, wiring and witness tables of the kimchi backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from zkcircuit.field import VESTA
from zkcircuit.values import Span

NUM_REGISTERS = 15
"""Number of columns in the execution trace."""

GENERIC_REGISTERS = 3
"""Number of registers used by one generic gate."""

GENERIC_COEFFS = 5
"""Number of coefficients used by one generic gate."""


class GateKind(Enum):
    """The kinds of gates a circuit can contain."""

    ZERO = "Zero"
    DOUBLE_GENERIC = "DoubleGeneric"
    POSEIDON = "Poseidon"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DebugInfo:
    """Where a row of the circuit comes from, and why it was added."""

    span: Span
    note: str


@dataclass
class Gate:
    """A gate: its kind and its coefficients."""

    typ: GateKind
    coeffs: list[int] = field(default_factory=list)


@dataclass(frozen=True, order=True)
class Cell:
    """A position in the execution trace."""

    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


@dataclass(frozen=True, order=True)
class AnnotatedCell:
    """A cell with debug information; compared by cell only."""

    cell: Cell
    debug: DebugInfo = field(compare=False)


@dataclass
class Wiring:
    """The cells a variable occupies; wired once it appears in more than one."""

    cells: list[AnnotatedCell]

    def __post_init__(self) -> None:
        if not self.cells:
            raise ValueError("a wiring needs at least one cell")

    def add(self, annotated_cell: AnnotatedCell) -> None:
        """Record another cell holding the same variable."""
        self.cells.append(annotated_cell)

    def is_wired(self) -> bool:
        return len(self.cells) > 1


@dataclass
class PendingGate:
    """A generic gate waiting to be paired into a double generic gate."""

    label: str
    coeffs: list[int] = field(default_factory=list)
    vars: list[Any] = field(default_factory=list)
    span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class KimchiCellVar:
    """A cell variable of the kimchi backend."""

    index: int
    span: Span = field(default_factory=Span)


@dataclass
class Witness:
    """The execution trace: one row of ``NUM_REGISTERS`` values per gate."""

    rows: list[list[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        for row, values in enumerate(self.rows):
            if len(values) != NUM_REGISTERS:
                raise ValueError(
                    f"row {row} has {len(values)} values, expected {NUM_REGISTERS}"
                )

    def to_kimchi_witness(self) -> list[list[int]]:
        """Return the witness column by column."""
        return [[row[col] for row in self.rows] for col in range(NUM_REGISTERS)]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[list[int]]:
        return iter(self.rows)

    def __getitem__(self, idx: int) -> list[int]:
        return self.rows[idx]

    def debug(self) -> None:
        """Print the witness row by row."""
        for row, values in enumerate(self.rows):
            print(f"{row} - " + " | ".join(VESTA.pretty(v) for v in values))


@dataclass
class GeneratedWitness:
    """A full witness with its public inputs and public outputs."""

    all_witness: Witness
    full_public_inputs: list[int] = field(default_factory=list)
    public_outputs: list[int] = field(default_factory=list)