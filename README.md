# zkcircuit

Backends for building arithmetic constraint systems for zero-knowledge
circuits, computing and checking their witnesses, rendering them as text,
and exporting R1CS circuits to the binary formats snarkjs reads.

The package has no dependencies outside the standard library. Field
elements are plain Python integers.

## Modules

- `zkcircuit.field`: `PrimeField` with `element`, `neg`, `add`, `sub`, `mul`,
  `inverse`, `pretty` and `parse`, and the fields `VESTA`, `BLS12_381` and
  `BN254`.
- `zkcircuit.values`: `Span`, `ConstOrCell`, `Var`, the deferred value classes
  (`Hint`, `Constant`, `LinearValue`, `MulValue`, `InverseValue`, `External`,
  `PublicOutput`, `ScaleValue`) and `WitnessEnv`.
- `zkcircuit.errors`: `CircuitError` (user-facing, with an `ErrorKind`) and
  `CircuitBug` (internal inconsistency).
- `zkcircuit.backend`: the abstract `Backend`, including `compute_val`, which
  evaluates deferred values and caches them in a `WitnessEnv`.
- `zkcircuit.kimchi`: `KimchiVesta`, a PLONK-style backend over the Vesta
  scalar field. Constraints become rows of generic gates (optionally paired
  two per row as double generic gates), with a wiring table linking the cells
  that hold the same variable. `generate_asm(debug)` renders the gates,
  long coefficients as `c<i>` variables, and the wiring cycles.
- `zkcircuit.gates`: the gate, cell, wiring and witness-table types used by
  `KimchiVesta`.
- `zkcircuit.asm`: `OrderedHashSet`, `extract_vars_from_coeffs` and
  `parse_coeffs`, used to render coefficients.
- `zkcircuit.r1cs`: `R1CS`, a rank-1 constraint system backend where each
  `Constraint` is `a * b = c` over `LinearCombination`s of `CellVar`s.
- `zkcircuit.backend_kind`: `new_kimchi_vesta(use_double_generic)`,
  `new_r1cs_bls12_381()` and `new_r1cs_bn254()`, each returning a
  `BackendKind` holding a `name` and a `backend`.
- `zkcircuit.fn_env`: `FnEnv` and `VarInfo`, scoped storage for a function's
  local variables.
- `zkcircuit.snarkjs`: `SnarkjsExporter`, `WitnessWriter` and `field_size`.

## Building a circuit and its witness

Every backend offers `add_public_input`, `add_private_input`,
`add_public_output`, `add_constant`, `add`, `sub`, `neg`, `add_const`, `mul`,
`mul_const`, `assert_eq_const` and `assert_eq_var`. After the circuit is
built, `finalize_circuit(public_output, returned_cells, main_span)` binds the
public output to the returned cells and checks that every variable appears
in a constraint; an unused private input raises a `CircuitError` of kind
`ErrorKind.PRIVATE_INPUT_NOT_USED`.

`generate_witness(env)` computes every value and checks every constraint,
raising a `CircuitError` of kind `ErrorKind.INVALID_WITNESS` when one does
not hold.

```python
from zkcircuit.backend_kind import new_r1cs_bn254
from zkcircuit.values import ConstOrCell, External, PublicOutput, Span, Var, WitnessEnv

r1cs = new_r1cs_bn254().backend
r1cs.init_circuit()
span = Span()

out = r1cs.add_public_output(PublicOutput(), span)
x = r1cs.add_public_input(External("x", 0), span)
y = r1cs.add_private_input(External("y", 0), span)
prod = r1cs.mul(x, y, span)
r1cs.assert_eq_var(out, prod, span)

r1cs.finalize_circuit(Var([ConstOrCell(cell=out)], span), [prod], span)
witness = r1cs.generate_witness(WitnessEnv({"x": [3], "y": [4]}))
print(witness.outputs)  # [12]
print(r1cs.generate_asm())
```

`KimchiVesta` is used the same way; its `finalize_circuit` rejects circuits
with two gates or fewer, and its `generate_witness` returns a
`GeneratedWitness` with `all_witness`, `full_public_inputs` and
`public_outputs`.

## Exporting to snarkjs

```python
from zkcircuit.snarkjs import SnarkjsExporter

exporter = SnarkjsExporter(r1cs)
exporter.gen_r1cs_file("circuit.r1cs")
exporter.gen_wtns_file("witness.wtns", witness)
```

`WitnessWriter` can also write a wtns file to any seekable binary stream.

## What the package does not do

- There is no language front end: no parser, type checker or compiler turns
  source programs into circuits. Circuits are built by calling the backend
  operations directly.
- There is no command-line tool.
- `KimchiVesta` does not create or verify proofs, and there is no Poseidon
  hash gadget; `GateKind.POSEIDON` exists as a gate kind only.
- `R1CS` circuits are only exported; proving is left to snarkjs.

## Running the tests

```
pip install ".[test]"
pytest
```