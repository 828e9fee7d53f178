import io
import struct

import pytest

from zkcircuit.errors import CircuitBug
from zkcircuit.field import BN254
from zkcircuit.r1cs import R1CS, CellVar, LinearCombination
from zkcircuit.snarkjs import SnarkjsExporter, WitnessWriter, field_size
from zkcircuit.values import ConstOrCell, External, PublicOutput, Span, Var, WitnessEnv


def _read_sections(data: bytes):
    magic = data[:4]
    version, n_sections = struct.unpack_from("<II", data, 4)
    pos = 12
    sections = {}
    order = []
    while pos < len(data):
        section_id, size = struct.unpack_from("<IQ", data, pos)
        pos += 12
        sections[section_id] = data[pos : pos + size]
        order.append(section_id)
        pos += size
    return magic, version, n_sections, sections, order


def _circuit():
    span = Span()
    r1cs = R1CS(BN254)
    r1cs.init_circuit()
    out = r1cs.add_public_output(PublicOutput(None), span)
    x = r1cs.add_public_input(External("x", 0), span)
    y = r1cs.add_private_input(External("y", 0), span)
    z = r1cs.mul(x, y, span)
    r1cs.assert_eq_var(out, z, span)
    r1cs.finalize_circuit(Var([ConstOrCell(cell=out)], span), [z], span)
    return r1cs, x, y, z


def test_field_size_of_known_primes():
    assert field_size(BN254.modulus) == 32
    assert field_size(18446744073709551557) == 8


def test_field_size_is_multiple_of_eight_and_fits_prime():
    for prime in (3, 251, 65521, BN254.modulus):
        size = field_size(prime)
        assert size % 8 == 0
        assert prime < 256**size


def test_witness_writer_round_trip():
    stream = io.BytesIO()
    values = [1, 15, 3, 5, 15]
    WitnessWriter(stream).write(values, BN254.modulus)
    magic, version, n_sections, sections, order = _read_sections(stream.getvalue())
    assert magic == b"wtns"
    assert version == 2
    assert n_sections == 2
    assert order == [1, 2]
    header = sections[1]
    n8 = struct.unpack_from("<I", header, 0)[0]
    assert n8 == field_size(BN254.modulus)
    assert int.from_bytes(header[4 : 4 + n8], "little") == BN254.modulus
    assert struct.unpack_from("<I", header, 4 + n8)[0] == len(values)
    body = sections[2]
    assert len(body) == n8 * len(values)
    decoded = [int.from_bytes(body[i : i + n8], "little") for i in range(0, len(body), n8)]
    assert decoded == values


def test_witness_writer_rejects_oversized_value():
    writer = WitnessWriter(io.BytesIO())
    with pytest.raises(ValueError):
        writer.write([2 ** (8 * field_size(BN254.modulus))], BN254.modulus)


def test_gen_wtns_file(tmp_path):
    r1cs, *_ = _circuit()
    witness = r1cs.generate_witness(WitnessEnv({"x": [3], "y": [5]}))
    path = tmp_path / "circuit.wtns"
    SnarkjsExporter(r1cs).gen_wtns_file(str(path), witness)
    magic, _, _, sections, _ = _read_sections(path.read_bytes())
    assert magic == b"wtns"
    n8 = struct.unpack_from("<I", sections[1], 0)[0]
    body = sections[2]
    decoded = [int.from_bytes(body[i : i + n8], "little") for i in range(0, len(body), n8)]
    assert decoded == witness.witness
    assert decoded[0] == 1


def test_gen_r1cs_file_header(tmp_path):
    r1cs, *_ = _circuit()
    path = tmp_path / "circuit.r1cs"
    SnarkjsExporter(r1cs).gen_r1cs_file(str(path))
    magic, version, n_sections, sections, order = _read_sections(path.read_bytes())
    assert magic == b"r1cs"
    assert version == 1
    assert n_sections == len(order)
    assert sections[3] == b""
    header = sections[1]
    n8 = struct.unpack_from("<I", header, 0)[0]
    assert n8 == field_size(BN254.modulus)
    assert int.from_bytes(header[4 : 4 + n8], "little") == r1cs.prime()
    wires, pub_out, pub_in, prv_in = struct.unpack_from("<IIII", header, 4 + n8)
    labels = struct.unpack_from("<Q", header, 4 + n8 + 16)[0]
    n_constraints = struct.unpack_from("<I", header, 4 + n8 + 24)[0]
    assert wires == len(r1cs.witness_vector)
    assert pub_out == len(r1cs.public_outputs)
    assert pub_in == len(r1cs.public_inputs)
    assert prv_in == r1cs.private_input_number()
    assert labels == 0
    assert n_constraints == r1cs.num_constraints()


def test_gen_r1cs_file_constraints(tmp_path):
    r1cs, x, y, z = _circuit()
    path = tmp_path / "circuit.r1cs"
    SnarkjsExporter(r1cs).gen_r1cs_file(str(path))
    _, _, _, sections, _ = _read_sections(path.read_bytes())
    n8 = field_size(BN254.modulus)
    body = sections[2]
    pos = 0
    lcs = []
    while pos < len(body):
        count = struct.unpack_from("<I", body, pos)[0]
        pos += 4
        terms = {}
        for _ in range(count):
            wire = struct.unpack_from("<I", body, pos)[0]
            terms[wire] = int.from_bytes(body[pos + 4 : pos + 4 + n8], "little")
            pos += 4 + n8
        lcs.append(terms)
    assert len(lcs) == 3 * r1cs.num_constraints()
    a, b, c = lcs[:3]
    assert a == {0: 0, x.to_cell_var().index: 1}
    assert b == {0: 0, y.to_cell_var().index: 1}
    assert c == {0: 0, z.to_cell_var().index: 1}


def test_constant_wire_must_stay_free(tmp_path):
    r1cs = R1CS(BN254)
    r1cs.init_circuit()
    one = LinearCombination.from_var(CellVar(0))
    r1cs.enforce_constraint(one, one, one, Span())
    with pytest.raises(CircuitBug):
        SnarkjsExporter(r1cs).gen_r1cs_file(str(tmp_path / "bad.r1cs"))