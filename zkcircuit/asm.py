"""Helpers for rendering gate coefficients in the circuit's text form."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator

from zkcircuit.field import VESTA


class OrderedHashSet:
    """A set that remembers insertion order and each element's position."""

    def __init__(self) -> None:
        self._positions: dict[Hashable, int] = {}

    def add(self, value: Hashable) -> bool:
        """Insert a value; return False if it was already present."""
        if value in self._positions:
            return False
        self._positions[value] = len(self._positions)
        return True

    def __iter__(self) -> Iterator:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, value: object) -> bool:
        return value in self._positions

    def pos(self, value: Hashable) -> int:
        return self._positions[value]


def extract_vars_from_coeffs(vars: OrderedHashSet, coeffs: Iterable[int]) -> None:
    """Record every coefficient too long to print inline."""
    for coeff in coeffs:
        if len(VESTA.pretty(coeff)) >= 5:
            vars.add(coeff)


def parse_coeffs(vars: OrderedHashSet, coeffs: Iterable[int]) -> list[str]:
    """Render coefficients, naming long ones ``c<i>`` and dropping trailing zeros."""
    rendered = []
    for coeff in coeffs:
        text = VESTA.pretty(coeff)
        rendered.append(text if len(text) < 5 else f"c{vars.pos(coeff)}")
    while rendered and rendered[-1] == "0":
        rendered.pop()
    return rendered