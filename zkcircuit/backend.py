"""The interface shared by constraint-system backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from zkcircuit.errors import CircuitError, ErrorKind
from zkcircuit.field import PrimeField
from zkcircuit.values import (
    Constant,
    External,
    Hint,
    InverseValue,
    LinearValue,
    MulValue,
    PublicOutput,
    ScaleValue,
    Span,
    Var,
    WitnessEnv,
)


class Backend(ABC):
    """A constraint-system backend over a prime field."""

    def __init__(self, field: PrimeField):
        self.field = field

    def init_circuit(self) -> None:
        """Prepare the circuit; nothing to do by default."""

    @abstractmethod
    def new_internal_var(self, val: Any, span: Span) -> Any:
        """Create and record a new cell variable."""

    @abstractmethod
    def neg(self, var: Any, span: Span) -> Any:
        """Negate a variable."""

    @abstractmethod
    def add(self, lhs: Any, rhs: Any, span: Span) -> Any:
        """Add two variables."""

    def sub(self, lhs: Any, rhs: Any, span: Span) -> Any:
        """Subtract two variables."""
        return self.add(lhs, self.neg(rhs, span), span)

    @abstractmethod
    def add_const(self, var: Any, cst: int, span: Span) -> Any:
        """Add a constant to a variable."""

    @abstractmethod
    def mul(self, lhs: Any, rhs: Any, span: Span) -> Any:
        """Multiply two variables."""

    @abstractmethod
    def mul_const(self, var: Any, cst: int, span: Span) -> Any:
        """Multiply a variable by a constant."""

    @abstractmethod
    def assert_eq_const(self, var: Any, cst: int, span: Span) -> None:
        """Constrain a variable to equal a constant."""

    @abstractmethod
    def assert_eq_var(self, lhs: Any, rhs: Any, span: Span) -> None:
        """Constrain two variables to be equal."""

    @abstractmethod
    def add_public_input(self, val: Any, span: Span) -> Any:
        """Record a public input."""

    @abstractmethod
    def add_private_input(self, val: Any, span: Span) -> Any:
        """Record a private input."""

    @abstractmethod
    def add_public_output(self, val: Any, span: Span) -> Any:
        """Record a public output."""

    @abstractmethod
    def add_constant(self, label: str | None, value: int, span: Span) -> Any:
        """Create a variable constrained to a constant."""

    @abstractmethod
    def compute_var(self, env: WitnessEnv, var: Any) -> int:
        """Compute the value of a cell variable."""

    @abstractmethod
    def finalize_circuit(
        self, public_output: Var | None, returned_cells: list | None, main_span: Span
    ) -> None:
        """Run sanity checks and bind public outputs."""

    @abstractmethod
    def generate_witness(self, witness_env: WitnessEnv) -> Any:
        """Generate the witness for the finalized circuit."""

    @abstractmethod
    def generate_asm(self, debug: bool) -> str:
        """Render the circuit as text."""

    def compute_val(self, env: WitnessEnv, val: Any, cache_key: int) -> int:
        """Compute a deferred value, caching it in ``env`` under ``cache_key``."""
        cached = env.cached_values.get(cache_key)
        if cached is not None:
            return cached

        f = self.field
        match val:
            case Hint(func):
                res = func(self, env)
            case Constant(value):
                return value
            case LinearValue(terms, constant):
                res = constant
                for coeff, var in terms:
                    res = f.add(res, f.mul(self.compute_var(env, var), coeff))
            case MulValue(lhs, rhs):
                res = f.mul(self.compute_var(env, lhs), self.compute_var(env, rhs))
            case InverseValue(var):
                x = self.compute_var(env, var)
                res = 0 if f.element(x) == 0 else f.inverse(x)
            case External(name, index):
                return env.get_external(name)[index]
            case PublicOutput(var):
                if var is None:
                    raise CircuitError("runtime", ErrorKind.MISSING_RETURN, Span())
                return self.compute_var(env, var)
            case ScaleValue(scalar, var):
                return f.mul(scalar, self.compute_var(env, var))
            case _:
                raise TypeError(f"unknown value: {val!r}")

        env.cached_values[cache_key] = res
        return res