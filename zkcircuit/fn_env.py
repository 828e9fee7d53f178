"""Scoped storage of a function's variables during circuit generation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from zkcircuit.errors import CircuitBug
from zkcircuit.values import Var


@dataclass
class VarInfo:
    """A variable together with its mutability and type."""

    var: Var
    mutable: bool = False
    typ: Any = None

    def reassign(self, var: Var) -> VarInfo:
        return replace(self, var=var)

    def reassign_range(self, var: Var, start: int, length: int) -> VarInfo:
        """Return a copy with ``length`` cells from ``start`` replaced by ``var``."""
        if len(var) != length:
            raise CircuitBug(f"expected a variable of length {length}, got {len(var)}")
        if start < 0 or start + length > len(self.var):
            raise CircuitBug("reassigned range is out of bounds")
        cvars = list(self.var.cvars)
        cvars[start : start + length] = var.cvars
        return replace(self, var=Var(cvars, self.var.span))


@dataclass
class FnEnv:
    """A function's local variables, indexed by name and tagged with their scope."""

    current_scope: int = 0
    vars: dict[str, tuple[int, VarInfo]] = field(default_factory=dict)

    def nest(self) -> None:
        """Enter a block."""
        self.current_scope += 1

    def pop(self) -> None:
        """Leave a block, dropping the variables created in it."""
        if self.current_scope == 0:
            raise CircuitBug("scope bug")
        self.current_scope -= 1
        self.vars = {
            name: entry
            for name, entry in self.vars.items()
            if entry[0] <= self.current_scope
        }

    def _is_in_scope(self, prefix_scope: int) -> bool:
        return self.current_scope >= prefix_scope

    def add_local_var(self, var_name: str, var_info: VarInfo) -> None:
        if var_name in self.vars:
            raise CircuitBug(f"type checker error: var `{var_name}` already exists")
        self.vars[var_name] = (self.current_scope, var_info)

    def get_local_var(self, var_name: str) -> VarInfo:
        try:
            scope, var_info = self.vars[var_name]
        except KeyError:
            raise CircuitBug(
                f"type checking bug: local variable `{var_name}` not found"
            ) from None
        if not self._is_in_scope(scope):
            raise CircuitBug(f"type checking bug: local variable `{var_name}` not in scope")
        return var_info

    def _mutable_entry(self, var_name: str) -> tuple[int, VarInfo]:
        try:
            scope, var_info = self.vars[var_name]
        except KeyError:
            raise CircuitBug(
                "type checking bug: local variable for reassigning not found"
            ) from None
        if not self._is_in_scope(scope):
            raise CircuitBug("type checking bug: local variable for reassigning not in scope")
        if not var_info.mutable:
            raise CircuitBug("type checking bug: local variable for reassigning is not mutable")
        return scope, var_info

    def reassign_local_var(self, var_name: str, var: Var) -> None:
        scope, var_info = self._mutable_entry(var_name)
        self.vars[var_name] = (scope, var_info.reassign(var))

    def reassign_var_range(self, var_name: str, var: Var, start: int, length: int) -> None:
        """Like reassign_local_var, but only for a range of the variable's cells."""
        scope, var_info = self._mutable_entry(var_name)
        self.vars[var_name] = (scope, var_info.reassign_range(var, start, length))