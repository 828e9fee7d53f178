import pytest

from zkcircuit.errors import CircuitBug, CircuitError, ErrorKind
from zkcircuit.field import BLS12_381, BN254
from zkcircuit.r1cs import R1CS, CellVar, Constraint, LinearCombination
from zkcircuit.values import (
    Constant,
    ConstOrCell,
    External,
    PublicOutput,
    Span,
    Var,
    WitnessEnv,
)

SPAN = Span()


def build_add_circuit():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    out = r1cs.add_public_output(PublicOutput(), SPAN)
    x = r1cs.add_public_input(External("x", 0), SPAN)
    y = r1cs.add_private_input(External("y", 0), SPAN)
    s = r1cs.add(x, y, SPAN)
    r1cs.assert_eq_const(s, 2, SPAN)
    t = r1cs.add_const(s, 6, SPAN)
    r1cs.assert_eq_var(out, t, SPAN)
    r1cs.finalize_circuit(Var([ConstOrCell(cell=out)]), [t], SPAN)
    return r1cs


@pytest.mark.parametrize(
    "field, expected",
    [
        (BLS12_381, "52435875175126190479447740508185965837690552500527637822603658699938581184513"),
        (BN254, "21888242871839275222246405745257275088548364400416034343698204186575808495617"),
    ],
)
def test_prime(field, expected):
    assert str(R1CS(field).prime()) == expected


def test_init_circuit():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    assert len(r1cs.witness_vector) == 1
    assert r1cs.witness_vector[0] == Constant(1)


def test_witness_of_add_circuit():
    r1cs = build_add_circuit()
    result = r1cs.generate_witness(WitnessEnv({"x": [1], "y": [1]}))
    assert result.witness == [1, 8, 1, 1]
    assert result.outputs == [8]
    assert r1cs.num_constraints() == 2


def test_private_input_number():
    r1cs = build_add_circuit()
    assert r1cs.private_input_number() == 2


def test_invalid_witness_reports_constraint_index():
    r1cs = build_add_circuit()
    with pytest.raises(CircuitError) as info:
        r1cs.generate_witness(WitnessEnv({"x": [1], "y": [2]}))
    assert info.value.kind is ErrorKind.INVALID_WITNESS
    assert info.value.detail == 0


def test_asm_of_add_circuit():
    asm = build_add_circuit().generate_asm(False)
    assert asm == (
        "@ noname.0.7.0\n\n"
        "2 == (v_2 + v_3) * (1)\n"
        "v_2 + v_3 + 6 == (v_1) * (1)\n"
    )


def test_asm_shows_negative_factor():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    x = r1cs.add_public_input(External("x", 0), SPAN)
    r1cs.assert_eq_const(r1cs.neg(x, SPAN), 0, SPAN)
    assert r1cs.generate_asm(False).endswith("0 == (-1 * v_1) * (1)\n")


def test_mul_creates_constraint_and_value():
    r1cs = R1CS(BN254)
    r1cs.init_circuit()
    x = r1cs.add_public_input(External("x", 0), SPAN)
    y = r1cs.add_private_input(External("y", 0), SPAN)
    m = r1cs.mul(x, y, SPAN)
    r1cs.assert_eq_const(m, 12, SPAN)
    r1cs.finalize_circuit(None, None, SPAN)
    result = r1cs.generate_witness(WitnessEnv({"x": [3], "y": [4]}))
    assert result.witness == [1, 3, 4, 12]
    assert result.outputs == []


def test_add_constant_is_constrained():
    r1cs = R1CS(BN254)
    r1cs.init_circuit()
    c = r1cs.add_constant(None, 7, SPAN)
    r1cs.finalize_circuit(None, None, SPAN)
    assert r1cs.generate_witness(WitnessEnv()).witness == [1, 7]
    assert c.to_cell_var().index == 1


def test_unused_private_input_is_reported():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    x = r1cs.add_public_input(External("x", 0), SPAN)
    r1cs.add_private_input(External("y", 0), SPAN)
    r1cs.assert_eq_const(x, 1, SPAN)
    with pytest.raises(CircuitError) as info:
        r1cs.finalize_circuit(None, None, SPAN)
    assert info.value.kind is ErrorKind.PRIVATE_INPUT_NOT_USED


def test_unused_internal_var_is_a_bug():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    r1cs.new_internal_var(Constant(5), SPAN)
    with pytest.raises(CircuitBug):
        r1cs.finalize_circuit(None, None, SPAN)


def test_witness_before_finalize_is_a_bug():
    r1cs = R1CS(BLS12_381)
    r1cs.init_circuit()
    with pytest.raises(CircuitBug):
        r1cs.generate_witness(WitnessEnv())


def test_linear_combination_add_merges_terms():
    a, b = CellVar(1), CellVar(2)
    lhs = LinearCombination({a: 2, b: 1}, 3, SPAN, BN254)
    rhs = LinearCombination({a: 5}, 4, SPAN, BN254)
    total = lhs.add(rhs, SPAN)
    assert total.terms == {a: 7, b: 1}
    assert total.constant == 7


def test_linear_combination_scale_reduces():
    a = CellVar(1)
    lc = LinearCombination({a: 1}, 1, SPAN, BN254).scale(BN254.neg(1), SPAN)
    assert lc.terms == {a: BN254.modulus - 1}
    assert lc.scale(BN254.neg(1), SPAN).terms == {a: 1}


def test_linear_combination_evaluate():
    lc = LinearCombination.from_vars([CellVar(1), CellVar(2)], SPAN)
    lc = lc.add(LinearCombination.from_const(10, SPAN), SPAN)
    assert lc.evaluate([1, 3, 4]) == 17


def test_to_cell_var():
    var = CellVar(3)
    assert LinearCombination.from_var(var).to_cell_var() == var
    with pytest.raises(CircuitBug):
        LinearCombination.from_vars([CellVar(1), CellVar(2)], SPAN).to_cell_var()
    with pytest.raises(CircuitBug):
        LinearCombination({var: 1}, 1, SPAN).to_cell_var()


def test_constraint_as_array():
    a = LinearCombination.from_const(1, SPAN)
    b = LinearCombination.from_const(2, SPAN)
    c = LinearCombination.from_const(3, SPAN)
    assert Constraint(a, b, c).as_array() == (a, b, c)