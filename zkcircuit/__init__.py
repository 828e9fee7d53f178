"""Constraint-system backends (PLONK-style gates and R1CS) with witness generation and snarkjs export."""

__version__ = "0.1.0"

__all__ = [
    "asm",
    "backend",
    "backend_kind",
    "errors",
    "field",
    "fn_env",
    "gates",
    "kimchi",
    "r1cs",
    "snarkjs",
    "values",
]