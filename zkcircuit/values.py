"""Circuit variables, spans, deferred values and the witness environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class Span:
    """A region of a source file."""

    filename_id: int = 0
    start: int = 0
    length: int = 0

    @property
    def end(self) -> int:
        return self.start + self.length

    def merge_with(self, other: Span) -> Span:
        """Return the smallest span covering both spans."""
        if self.filename_id != other.filename_id:
            raise ValueError("cannot merge spans from different files")
        start = min(self.start, other.start)
        end = max(self.end, other.end)
        return Span(self.filename_id, start, end - start)


@dataclass(frozen=True)
class ConstOrCell:
    """Either a constant field element or a backend cell variable."""

    const: int | None = None
    cell: Any = None

    def __post_init__(self) -> None:
        if (self.const is None) == (self.cell is None):
            raise ValueError("exactly one of const and cell must be set")

    def is_const(self) -> bool:
        return self.cell is None

    def cvar(self) -> Any:
        """The cell variable, or None for a constant."""
        return self.cell


@dataclass
class Var:
    """A value in the circuit made of one or more constants or cells."""

    cvars: list[ConstOrCell]
    span: Span = field(default_factory=Span)

    def __len__(self) -> int:
        return len(self.cvars)

    def __getitem__(self, idx):
        return self.cvars[idx]

    def range(self, start: int, length: int) -> list[ConstOrCell]:
        if start < 0 or length < 0 or start + length > len(self.cvars):
            raise IndexError(
                f"range {start}..{start + length} out of bounds for length {len(self.cvars)}"
            )
        return list(self.cvars[start : start + length])


@dataclass(frozen=True)
class Hint:
    """A value computed by a function of the backend and the witness environment."""

    func: Callable[[Any, "WitnessEnv"], int]


@dataclass(frozen=True)
class Constant:
    value: int


@dataclass(frozen=True)
class LinearValue:
    """``constant + sum(coeff * var)``."""

    terms: tuple[tuple[int, Any], ...]
    constant: int = 0


@dataclass(frozen=True)
class MulValue:
    lhs: Any
    rhs: Any


@dataclass(frozen=True)
class InverseValue:
    """The inverse of a variable, or zero if the variable is zero."""

    var: Any


@dataclass(frozen=True)
class External:
    """The ``index``-th element of a named input."""

    name: str
    index: int


@dataclass(frozen=True)
class PublicOutput:
    """A public output, bound to the returned variable once the circuit is finalized."""

    var: Any = None


@dataclass(frozen=True)
class ScaleValue:
    scalar: int
    var: Any


@dataclass
class WitnessEnv:
    """Inputs and cached values used while generating a witness."""

    var_values: dict[str, list[int]] = field(default_factory=dict)
    cached_values: dict[int, int] = field(default_factory=dict)

    def get_external(self, name: str) -> list[int]:
        try:
            return list(self.var_values[name])
        except KeyError:
            raise KeyError(f"no value given for input `{name}`") from None