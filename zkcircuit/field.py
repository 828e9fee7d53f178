"""Prime field arithmetic over plain integers."""

from __future__ import annotations

import operator
from dataclasses import dataclass


@dataclass(frozen=True)
class PrimeField:
    """A prime field whose elements are integers in ``range(modulus)``."""

    name: str
    modulus: int

    def element(self, value: int) -> int:
        """Reduce an integer into the field."""
        return operator.index(value) % self.modulus

    def neg(self, a: int) -> int:
        return (-a) % self.modulus

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def inverse(self, a: int) -> int:
        """Multiplicative inverse; raises ZeroDivisionError for zero."""
        a %= self.modulus
        if a == 0:
            raise ZeroDivisionError(f"zero has no inverse in {self.name}")
        return pow(a, -1, self.modulus)

    def pretty(self, a: int) -> str:
        """Render an element, using a negative form when it is shorter."""
        a %= self.modulus
        negated = (-a) % self.modulus
        if negated < a:
            return f"-{negated}"
        return str(a)

    def parse(self, text: str) -> int:
        """Parse a decimal string into a field element."""
        digits = text.strip()
        if not digits or not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"not a decimal number: {text!r}")
        value = int(digits)
        if value >= self.modulus:
            raise ValueError(f"{text} does not fit in the field {self.name}")
        return value


VESTA = PrimeField(
    "vesta",
    0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001,
)
BLS12_381 = PrimeField(
    "bls12-381",
    52435875175126190479447740508185965837690552500527637822603658699938581184513,
)
BN254 = PrimeField(
    "bn254",
    21888242871839275222246405745257275088548364400416034343698204186575808495617,
)