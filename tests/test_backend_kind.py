import pytest

from zkcircuit.backend_kind import (
    KIMCHI_VESTA,
    R1CS_BLS12_381,
    R1CS_BN254,
    new_kimchi_vesta,
    new_r1cs_bls12_381,
    new_r1cs_bn254,
)
from zkcircuit.values import Constant


@pytest.mark.parametrize(
    "factory, name, expected",
    [
        (
            new_r1cs_bls12_381,
            R1CS_BLS12_381,
            "52435875175126190479447740508185965837690552500527637822603658699938581184513",
        ),
        (
            new_r1cs_bn254,
            R1CS_BN254,
            "21888242871839275222246405745257275088548364400416034343698204186575808495617",
        ),
    ],
)
def test_prime(factory, name, expected):
    kind = factory()
    assert kind.name == name
    assert kind.is_r1cs
    assert str(kind.backend.prime()) == expected


def test_init_circuit():
    r1cs = new_r1cs_bls12_381().backend
    r1cs.init_circuit()
    assert len(r1cs.witness_vector) == 1
    assert r1cs.witness_vector[0] == Constant(1)


@pytest.mark.parametrize("flag", [True, False])
def test_kimchi_vesta_keeps_double_generic_flag(flag):
    kind = new_kimchi_vesta(flag)
    assert kind.name == KIMCHI_VESTA
    assert not kind.is_r1cs
    assert kind.backend.double_generic_gate_optimization is flag


def test_factories_return_fresh_backends():
    first = new_r1cs_bn254().backend
    second = new_r1cs_bn254().backend
    first.init_circuit()
    assert len(first.witness_vector) == 1
    assert len(second.witness_vector) == 0