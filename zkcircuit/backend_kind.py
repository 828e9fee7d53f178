"""Selection of a concrete backend together with its field."""

from __future__ import annotations

from dataclasses import dataclass

from zkcircuit.backend import Backend
from zkcircuit.field import BLS12_381, BN254
from zkcircuit.kimchi import KimchiVesta
from zkcircuit.r1cs import R1CS

KIMCHI_VESTA = "kimchi-vesta"
R1CS_BLS12_381 = "r1cs-bls12-381"
R1CS_BN254 = "r1cs-bn254"


@dataclass(frozen=True)
class BackendKind:
    """A backend instance tagged with the kind of backend it is."""

    name: str
    backend: Backend

    @property
    def is_r1cs(self) -> bool:
        return self.name in (R1CS_BLS12_381, R1CS_BN254)


def new_kimchi_vesta(use_double_generic: bool) -> BackendKind:
    """A kimchi backend over the Vesta scalar field."""
    return BackendKind(KIMCHI_VESTA, KimchiVesta(use_double_generic))


def new_r1cs_bls12_381() -> BackendKind:
    """An R1CS backend over the BLS12-381 scalar field."""
    return BackendKind(R1CS_BLS12_381, R1CS(BLS12_381))


def new_r1cs_bn254() -> BackendKind:
    """An R1CS backend over the BN254 scalar field."""
    return BackendKind(R1CS_BN254, R1CS(BN254))