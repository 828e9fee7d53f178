"""A PLONK-style backend over the Vesta scalar field using generic and Poseidon gates."""

from __future__ import annotations

from typing import Any

from zkcircuit.asm import OrderedHashSet, extract_vars_from_coeffs, parse_coeffs
from zkcircuit.backend import Backend
from zkcircuit.errors import CircuitBug, CircuitError, ErrorKind
from zkcircuit.field import VESTA
from zkcircuit.gates import (
    GENERIC_COEFFS,
    GENERIC_REGISTERS,
    NUM_REGISTERS,
    AnnotatedCell,
    Cell,
    DebugInfo,
    Gate,
    GateKind,
    GeneratedWitness,
    KimchiCellVar,
    PendingGate,
    Wiring,
    Witness,
)
from zkcircuit.values import (
    Constant,
    LinearValue,
    MulValue,
    PublicOutput,
    ScaleValue,
    Span,
    Var,
    WitnessEnv,
)

ASM_HEADER = "@ noname.0.7.0\n\n"


def _title(name: str) -> str:
    return f"# {name.lower()}\n\n"


def _describe_span(span: Span) -> str:
    return f"    at file {span.filename_id}, bytes {span.start}..{span.end}\n"


class KimchiVesta(Backend):
    """Builds a circuit of gates with copy constraints and generates its witness."""

    def __init__(self, double_generic_gate_optimization: bool = False):
        super().__init__(VESTA)
        self.next_variable = 0
        self.vars_to_value: dict[int, Any] = {}
        self.witness_table: list[list[KimchiCellVar | None]] = []
        self.cached_constants: dict[int, KimchiCellVar] = {}
        self.gates: list[Gate] = []
        self.wiring: dict[int, Wiring] = {}
        self.double_generic_gate_optimization = double_generic_gate_optimization
        self.pending_generic_gate: PendingGate | None = None
        self.debug_info: list[DebugInfo] = []
        self.finalized = False
        self.public_input_size = 0
        self.private_input_indices: list[tuple[int, Span]] = []

    # circuit construction

    def new_internal_var(self, val: Any, span: Span) -> KimchiCellVar:
        var = KimchiCellVar(self.next_variable, span)
        self.next_variable += 1
        self.vars_to_value[var.index] = val
        return var

    def add_gate(
        self,
        note: str,
        typ: GateKind,
        vars: list[KimchiCellVar | None],
        coeffs: list[int],
        span: Span,
    ) -> None:
        """Append a gate, its row of the execution trace and its wiring."""
        if len(coeffs) > NUM_REGISTERS:
            raise CircuitBug(f"a gate takes at most {NUM_REGISTERS} coefficients")
        if len(vars) > NUM_REGISTERS:
            raise CircuitBug(f"a gate takes at most {NUM_REGISTERS} variables")

        self.witness_table.append(list(vars))
        row = len(self.gates)
        self.gates.append(Gate(typ, list(coeffs)))

        debug_info = DebugInfo(span, note)
        self.debug_info.append(debug_info)

        for col, var in enumerate(vars):
            if var is None:
                continue
            annotated = AnnotatedCell(Cell(row, col), debug_info)
            wiring = self.wiring.get(var.index)
            if wiring is None:
                self.wiring[var.index] = Wiring([annotated])
            else:
                wiring.add(annotated)

    def add_generic_gate(
        self,
        label: str,
        vars: list[KimchiCellVar | None],
        coeffs: list[int],
        span: Span,
    ) -> None:
        """Add a generic gate, pairing two of them per row when optimizing."""
        if len(coeffs) > GENERIC_COEFFS:
            raise CircuitBug(f"a generic gate takes at most {GENERIC_COEFFS} coefficients")
        if len(vars) > GENERIC_REGISTERS:
            raise CircuitBug(f"a generic gate takes at most {GENERIC_REGISTERS} variables")

        coeffs = list(coeffs) + [0] * (GENERIC_COEFFS - len(coeffs))
        vars = list(vars) + [None] * (GENERIC_REGISTERS - len(vars))

        if not self.double_generic_gate_optimization:
            self.add_gate(label, GateKind.DOUBLE_GENERIC, vars, coeffs, span)
            return

        pending = self.pending_generic_gate
        if pending is not None:
            self.pending_generic_gate = None
            self.add_gate(
                label,
                GateKind.DOUBLE_GENERIC,
                vars + pending.vars,
                coeffs + pending.coeffs,
                span,
            )
        else:
            self.pending_generic_gate = PendingGate(label, coeffs, vars, span)

    def add_constant(self, label: str | None, value: int, span: Span) -> KimchiCellVar:
        cached = self.cached_constants.get(value)
        if cached is not None:
            return cached

        var = self.new_internal_var(Constant(value), span)
        self.cached_constants[value] = var
        self.add_generic_gate(
            label or "hardcode a constant",
            [var],
            [1, 0, 0, 0, VESTA.neg(value)],
            span,
        )
        return var

    def finalize_circuit(
        self,
        public_output: Var | None,
        returned_cells: list[KimchiCellVar] | None,
        main_span: Span,
    ) -> None:
        if self.pending_generic_gate is not None:
            pending = self.pending_generic_gate
            self.pending_generic_gate = None
            self.add_gate(
                pending.label,
                GateKind.DOUBLE_GENERIC,
                pending.vars,
                pending.coeffs,
                pending.span,
            )

        written_vars = {
            cvar.index for row in self.witness_table for cvar in row if cvar is not None
        }
        private_spans = dict(self.private_input_indices)
        for var in range(self.next_variable):
            if var in written_vars:
                continue
            if var in private_spans:
                raise CircuitError(
                    "constraint-finalization",
                    ErrorKind.PRIVATE_INPUT_NOT_USED,
                    private_spans[var],
                )
            raise CircuitBug(
                "there's a bug in the circuit writer, some cellvar does not end up "
                "being a cellvar in the circuit!"
            )

        if len(self.gates) <= 2:
            raise CircuitBug("the circuit is either too small or does not constrain anything")

        if public_output is not None:
            if returned_cells is None:
                raise CircuitBug("a public output needs returned cells")
            for pub_var, ret_var in zip(public_output.cvars, returned_cells):
                cell = pub_var.cvar()
                if cell is None or cell.index not in self.vars_to_value:
                    raise CircuitBug("public output is not a known cell variable")
                self.vars_to_value[cell.index] = PublicOutput(ret_var)

        self.finalized = True

    # witness generation

    def compute_var(self, env: WitnessEnv, var: KimchiCellVar) -> int:
        try:
            val = self.vars_to_value[var.index]
        except KeyError:
            raise CircuitBug(f"unknown cell variable {var.index}") from None
        return self.compute_val(env, val, var.index)

    def generate_witness(self, witness_env: WitnessEnv) -> GeneratedWitness:
        if not self.finalized:
            raise CircuitBug("the circuit must be finalized before generating a witness")

        rows: list[list[int]] = []
        deferred: dict[KimchiCellVar, list[tuple[int, int]]] = {}

        for row, row_of_vars in enumerate(self.witness_table):
            witness_row = [0] * NUM_REGISTERS
            for col, var in enumerate(row_of_vars):
                if var is None:
                    continue
                if isinstance(self.vars_to_value.get(var.index), PublicOutput):
                    deferred.setdefault(var, []).append((row, col))
                else:
                    witness_row[col] = self.compute_var(witness_env, var)
            rows.append(witness_row)

        public_outputs = []
        for var, positions in deferred.items():
            val = self.compute_var(witness_env, var)
            for row, col in positions:
                rows[row][col] = val
            public_outputs.append(val)

        f = self.field
        for row, (gate, w, debug_info) in enumerate(zip(self.gates, rows, self.debug_info)):
            if row < self.public_input_size or gate.typ is not GateKind.DOUBLE_GENERIC:
                continue
            c = gate.coeffs + [0] * (2 * GENERIC_COEFFS - len(gate.coeffs))
            sum1 = (c[0] * w[0] + c[1] * w[1] + c[2] * w[2] + c[3] * w[0] * w[1] + c[4]) % f.modulus
            sum2 = (c[5] * w[3] + c[6] * w[4] + c[7] * w[5] + c[8] * w[3] * w[4] + c[9]) % f.modulus
            if sum1 or sum2:
                raise CircuitError("runtime", ErrorKind.INVALID_WITNESS, debug_info.span, row)

        full_public_inputs = [witness_row[0] for witness_row in rows[: self.public_input_size]]

        if len(rows) != len(self.gates):
            raise CircuitBug("witness and gates have different lengths")

        return GeneratedWitness(Witness(rows), full_public_inputs, public_outputs)

    # text form

    def generate_asm(self, debug: bool = False) -> str:
        parts = [ASM_HEADER]

        coeff_vars = OrderedHashSet()
        for gate in self.gates:
            extract_vars_from_coeffs(coeff_vars, gate.coeffs)

        if debug and len(coeff_vars):
            parts.append(_title("VARS"))
        for idx, value in enumerate(coeff_vars):
            parts.append(f"c{idx} = {VESTA.pretty(value)}\n")

        if debug:
            parts.append(_title("GATES"))

        for row, (gate, debug_info) in enumerate(zip(self.gates, self.debug_info)):
            if debug:
                parts.append("╭" + "─" * 80 + "\n")
                parts.append(f"│ GATE {row} - ")
            parts.append(str(gate.typ))
            coeffs = parse_coeffs(coeff_vars, gate.coeffs)
            if coeffs:
                parts.append("<" + ",".join(coeffs) + ">")
            parts.append("\n")
            if debug:
                parts.append(_describe_span(debug_info.span))
                parts.append("    ▲\n")
                parts.append(f"    ╰── {debug_info.note}\n")
                parts.append("\n\n")

        if debug:
            parts.append(_title("WIRING"))

        cycles = sorted(w.cells for w in self.wiring.values() if w.is_wired())
        for annotated_cells in cycles:
            if debug:
                for annotated in annotated_cells:
                    parts.append(_describe_span(annotated.debug.span))
            parts.append(" -> ".join(str(a.cell) for a in annotated_cells) + "\n")
            if debug:
                parts.append("\n\n")

        return "".join(parts)

    # arithmetic

    def neg(self, var: KimchiCellVar, span: Span) -> KimchiCellVar:
        neg_var = self.new_internal_var(LinearValue(((VESTA.neg(1), var),), 0), span)
        self.add_generic_gate(
            "constraint to validate a negation (`x + (-x) = 0`)",
            [var, neg_var],
            [1, 1],
            span,
        )
        return neg_var

    def add(self, lhs: KimchiCellVar, rhs: KimchiCellVar, span: Span) -> KimchiCellVar:
        res = self.new_internal_var(LinearValue(((1, lhs), (1, rhs)), 0), span)
        self.add_generic_gate(
            "add two variables together",
            [lhs, rhs, res],
            [1, 1, VESTA.neg(1)],
            span,
        )
        return res

    def add_const(self, var: KimchiCellVar, cst: int, span: Span) -> KimchiCellVar:
        res = self.new_internal_var(LinearValue(((1, var),), cst), span)
        self.add_generic_gate(
            "add a constant with a variable",
            [var, None, res],
            [1, 0, VESTA.neg(1), 0, cst],
            span,
        )
        return res

    def mul(self, lhs: KimchiCellVar, rhs: KimchiCellVar, span: Span) -> KimchiCellVar:
        res = self.new_internal_var(MulValue(lhs, rhs), span)
        self.add_generic_gate(
            "multiply two variables together",
            [lhs, rhs, res],
            [0, 0, VESTA.neg(1), 1],
            span,
        )
        return res

    def mul_const(self, var: KimchiCellVar, cst: int, span: Span) -> KimchiCellVar:
        res = self.new_internal_var(ScaleValue(cst, var), span)
        self.add_generic_gate(
            "multiply a variable by a constant",
            [var, None, res],
            [cst, 0, VESTA.neg(1)],
            span,
        )
        return res

    def assert_eq_const(self, cvar: KimchiCellVar, cst: int, span: Span) -> None:
        self.add_generic_gate(
            "constrain var - cst = 0 to check equality",
            [cvar],
            [1, 0, 0, 0, VESTA.neg(cst)],
            span,
        )

    def assert_eq_var(self, lhs: KimchiCellVar, rhs: KimchiCellVar, span: Span) -> None:
        self.add_generic_gate(
            "constrain lhs - rhs = 0 to assert that they are equal",
            [lhs, rhs],
            [1, VESTA.neg(1)],
            span,
        )

    # inputs and outputs

    def add_public_input(self, val: Any, span: Span) -> KimchiCellVar:
        cvar = self.new_internal_var(val, span)
        self.add_gate("add public input", GateKind.DOUBLE_GENERIC, [cvar], [1], span)
        self.public_input_size += 1
        return cvar

    def add_private_input(self, val: Any, span: Span) -> KimchiCellVar:
        cvar = self.new_internal_var(val, span)
        self.private_input_indices.append((cvar.index, cvar.span))
        return cvar

    def add_public_output(self, val: Any, span: Span) -> KimchiCellVar:
        cvar = self.new_internal_var(val, span)
        self.add_generic_gate("add public output", [cvar], [1], span)
        self.public_input_size += 1
        return cvar