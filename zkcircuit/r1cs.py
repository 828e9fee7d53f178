"""A rank-1 constraint system backend: every constraint has the form a * b = c."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from zkcircuit.backend import Backend
from zkcircuit.errors import CircuitBug, CircuitError, ErrorKind
from zkcircuit.field import PrimeField
from zkcircuit.gates import DebugInfo
from zkcircuit.values import Constant, MulValue, PublicOutput, Span, Var, WitnessEnv

ASM_HEADER = "@ noname.0.7.0\n\n"


def _describe_span(span: Span) -> str:
    return f"    at file {span.filename_id}, bytes {span.start}..{span.end}\n"


@dataclass(frozen=True)
class CellVar:
    """A variable of the witness vector, identified by its index."""

    index: int
    span: Span = field(default_factory=Span)


@dataclass
class LinearCombination:
    """``constant + sum(factor * var)``; the constant multiplies the variable at index 0."""

    terms: dict[CellVar, int] = field(default_factory=dict)
    constant: int = 0
    span: Span = field(default_factory=Span)
    field: PrimeField | None = field(default=None, compare=False, repr=False)

    def _reduce(self, value: int, other_field: PrimeField | None = None) -> int:
        f = self.field or other_field
        return value % f.modulus if f is not None else value

    @classmethod
    def from_var(cls, var: CellVar) -> LinearCombination:
        return cls({var: 1}, 0, var.span)

    @classmethod
    def from_const(cls, cst: int, span: Span) -> LinearCombination:
        return cls({}, cst, span)

    @classmethod
    def from_vars(cls, vars: list[CellVar], span: Span) -> LinearCombination:
        return cls({var: 1 for var in vars}, 0, span)

    def to_cell_var(self) -> CellVar:
        """The single variable this combination is made of, with factor one."""
        if len(self.terms) != 1:
            raise CircuitBug("linear combination is not a single variable")
        if self._reduce(self.constant) != 0:
            raise CircuitBug("linear combination has a non-zero constant")
        ((var, factor),) = self.terms.items()
        if self._reduce(factor) != 1:
            raise CircuitBug("linear combination variable has a factor other than one")
        return var

    def evaluate(self, witness: list[int]) -> int:
        total = sum(witness[var.index] * factor for var, factor in self.terms.items())
        return self._reduce(total + self.constant)

    def add(self, other: LinearCombination, span: Span) -> LinearCombination:
        f = self.field or other.field
        terms = dict(self.terms)
        for var, coeff in other.terms.items():
            terms[var] = self._reduce(terms.get(var, 0) + coeff, f)
        return LinearCombination(
            terms, self._reduce(self.constant + other.constant, f), span, f
        )

    def scale(self, coeff: int, span: Span) -> LinearCombination:
        terms = {var: self._reduce(factor * coeff) for var, factor in self.terms.items()}
        return LinearCombination(terms, self._reduce(self.constant * coeff), span, self.field)


@dataclass
class Constraint:
    """One constraint ``a * b = c``."""

    a: LinearCombination
    b: LinearCombination
    c: LinearCombination

    def as_array(self) -> tuple[LinearCombination, LinearCombination, LinearCombination]:
        return (self.a, self.b, self.c)


@dataclass
class R1CSWitness:
    """The full witness vector and the values of the public outputs."""

    witness: list[int]
    outputs: list[int] = field(default_factory=list)


class R1CS(Backend):
    """Builds rank-1 constraints over a prime field and generates their witness."""

    def __init__(self, field: PrimeField):
        super().__init__(field)
        self.constraints: list[Constraint] = []
        self.witness_vector: list[Any] = []
        self.debug_info: list[DebugInfo] = []
        self.public_inputs: list[CellVar] = []
        self.private_input_indices: list[tuple[int, Span]] = []
        self.public_outputs: list[CellVar] = []
        self.finalized = False

    def num_constraints(self) -> int:
        return len(self.constraints)

    def prime(self) -> int:
        return self.field.modulus

    def add_constraint(self, note: str, constraint: Constraint, span: Span) -> None:
        self.debug_info.append(DebugInfo(span, note))
        self.constraints.append(constraint)

    def private_input_number(self) -> int:
        """Number of witness variables that are neither public inputs nor outputs."""
        return len(self.witness_vector) - len(self.public_inputs) - len(self.public_outputs)

    def enforce_constraint(
        self,
        a: LinearCombination,
        b: LinearCombination,
        c: LinearCombination,
        span: Span,
    ) -> None:
        self.add_constraint("enforce constraint", Constraint(a, b, c), span)

    def _const(self, cst: int, span: Span) -> LinearCombination:
        return LinearCombination({}, self.field.element(cst), span, self.field)

    # circuit construction

    def init_circuit(self) -> None:
        """Create the first variable, which is always one."""
        self.new_internal_var(Constant(1), Span())

    def new_internal_var(self, val: Any, span: Span) -> LinearCombination:
        var = CellVar(len(self.witness_vector), span)
        self.witness_vector.append(val)
        return LinearCombination({var: 1}, 0, span, self.field)

    def add_constant(self, label: str | None, value: int, span: Span) -> LinearCombination:
        x = self.new_internal_var(Constant(value), span)
        self.assert_eq_const(x, value, span)
        return x

    def finalize_circuit(
        self,
        public_output: Var | None,
        returned_cells: list[LinearCombination] | None,
        main_span: Span,
    ) -> None:
        if public_output is not None:
            if returned_cells is None:
                raise CircuitBug("a public output needs returned cells")
            for pub_var, ret_var in zip(public_output.cvars, returned_cells):
                lc = pub_var.cvar()
                if lc is None:
                    raise CircuitBug("public output is a constant")
                idx = lc.to_cell_var().index
                if self.witness_vector[idx] != PublicOutput(None):
                    raise CircuitBug("public output variable is already bound")
                self.witness_vector[idx] = PublicOutput(ret_var)

        written_vars = {
            var.index
            for constraint in self.constraints
            for lc in constraint.as_array()
            for var in lc.terms
        }
        private_spans = dict(self.private_input_indices)
        # index 0 is the constant one and never needs to appear in a constraint
        for index in range(1, len(self.witness_vector)):
            if index in written_vars:
                continue
            if index in private_spans:
                raise CircuitError(
                    "constraint-finalization",
                    ErrorKind.PRIVATE_INPUT_NOT_USED,
                    private_spans[index],
                )
            raise CircuitBug(
                "there's a bug in the circuit writer, some cellvar does not end up "
                "being a cellvar in the circuit!"
            )

        self.finalized = True

    # witness generation

    def compute_var(self, env: WitnessEnv, lc: LinearCombination) -> int:
        f = self.field
        val = f.element(lc.constant)
        for var, factor in lc.terms.items():
            try:
                var_val = self.witness_vector[var.index]
            except IndexError:
                raise CircuitBug(f"unknown cell variable {var.index}") from None
            val = f.add(val, f.mul(self.compute_val(env, var_val, var.index), factor))
        return val

    def generate_witness(self, witness_env: WitnessEnv) -> R1CSWitness:
        if not self.finalized:
            raise CircuitBug("the circuit is not finalized yet!")

        # public outputs are computed last to avoid deep recursion from the first rows
        witness = [
            0 if isinstance(val, PublicOutput) else self.compute_val(witness_env, val, index)
            for index, val in enumerate(self.witness_vector)
        ]

        for var in self.public_outputs:
            lc = LinearCombination({var: 1}, 0, var.span, self.field)
            witness[var.index] = self.compute_var(witness_env, lc)

        f = self.field
        for index, (constraint, debug_info) in enumerate(zip(self.constraints, self.debug_info)):
            ab = f.mul(constraint.a.evaluate(witness), constraint.b.evaluate(witness))
            c = f.element(constraint.c.evaluate(witness))
            if ab != c:
                raise CircuitError(
                    "runtime", ErrorKind.INVALID_WITNESS, debug_info.span, index
                )

        outputs = [witness[var.index] for var in self.public_outputs]
        return R1CSWitness(witness, outputs)

    # text form

    def _format_lc(self, lc: LinearCombination) -> str:
        terms = []
        for var, factor in sorted(lc.terms.items(), key=lambda item: item[0].index):
            pretty = self.field.pretty(factor)
            terms.append(f"v_{var.index}" if pretty == "1" else f"{pretty} * v_{var.index}")
        if self.field.element(lc.constant) != 0:
            terms.append(self.field.pretty(lc.constant))
        return " + ".join(terms) if terms else "0"

    def generate_asm(self, debug: bool = False) -> str:
        parts = [ASM_HEADER]
        for row, (constraint, debug_info) in enumerate(zip(self.constraints, self.debug_info)):
            if debug:
                parts.append("╭" + "─" * 80 + "\n")
                parts.append(f"│ {row} │ ")
            a, b, c = (self._format_lc(lc) for lc in constraint.as_array())
            parts.append(f"{c} == ({a}) * ({b})\n")
            if debug:
                parts.append(_describe_span(debug_info.span))
        return "".join(parts)

    # arithmetic

    def neg(self, x: LinearCombination, span: Span) -> LinearCombination:
        return x.scale(self.field.neg(1), span)

    def add(
        self, lhs: LinearCombination, rhs: LinearCombination, span: Span
    ) -> LinearCombination:
        return lhs.add(rhs, span)

    def add_const(self, x: LinearCombination, cst: int, span: Span) -> LinearCombination:
        return x.add(self._const(cst, span), span)

    def mul(
        self, lhs: LinearCombination, rhs: LinearCombination, span: Span
    ) -> LinearCombination:
        res = self.new_internal_var(MulValue(lhs, rhs), span)
        self.enforce_constraint(lhs, rhs, res, span)
        return res

    def mul_const(self, x: LinearCombination, cst: int, span: Span) -> LinearCombination:
        return x.scale(cst, span)

    def assert_eq_const(self, x: LinearCombination, cst: int, span: Span) -> None:
        self.enforce_constraint(x, self._const(1, span), self._const(cst, span), span)

    def assert_eq_var(
        self, lhs: LinearCombination, rhs: LinearCombination, span: Span
    ) -> None:
        self.enforce_constraint(lhs, self._const(1, span), rhs, span)

    # inputs and outputs

    def add_public_input(self, val: Any, span: Span) -> LinearCombination:
        var = self.new_internal_var(val, span)
        self.public_inputs.append(var.to_cell_var())
        return var

    def add_private_input(self, val: Any, span: Span) -> LinearCombination:
        var = self.new_internal_var(val, span)
        self.private_input_indices.append((var.to_cell_var().index, span))
        return var

    def add_public_output(self, val: Any, span: Span) -> LinearCombination:
        var = self.new_internal_var(val, span)
        self.public_outputs.append(var.to_cell_var())
        return var