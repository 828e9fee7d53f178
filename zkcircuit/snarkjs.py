"""Export of R1CS circuits and witnesses to the snarkjs binary formats."""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable

from zkcircuit.errors import CircuitBug
from zkcircuit.r1cs import R1CS, LinearCombination, R1CSWitness

R1CS_MAGIC = b"r1cs"
R1CS_VERSION = 1
R1CS_SECTIONS = 3

WTNS_MAGIC = b"wtns"
WTNS_VERSION = 2
WTNS_SECTIONS = 2

_HEADER_SECTION = 1
_CONSTRAINT_SECTION = 2
_WIRE_TO_LABEL_SECTION = 3


def field_size(prime: int) -> int:
    """Number of bytes used to store one element of the prime field."""
    bits = prime.bit_length()
    if bits % 64 == 0:
        return bits // 8
    return (bits // 64 + 1) * 8


class _SectionedWriter:
    """Writes the sectioned binary layout shared by the r1cs and wtns files."""

    def __init__(self, stream: BinaryIO, magic: bytes, version: int, n_sections: int):
        if len(magic) != 4:
            raise ValueError("file type must be 4 characters long")
        self._stream = stream
        self._size_position: int | None = None
        stream.write(magic)
        stream.write(struct.pack("<II", version, n_sections))

    def _write_u32(self, value: int) -> None:
        self._stream.write(struct.pack("<I", value))

    def _write_u64(self, value: int) -> None:
        self._stream.write(struct.pack("<Q", value))

    def _write_big_int(self, value: int, size: int) -> None:
        if value < 0:
            raise ValueError(f"cannot write negative integer {value}")
        try:
            self._stream.write(value.to_bytes(size, "little"))
        except OverflowError:
            raise ValueError(f"{value} does not fit in {size} bytes") from None

    def _start_section(self, section_id: int) -> None:
        if self._size_position is not None:
            raise CircuitBug("a section is already being written")
        self._write_u32(section_id)
        self._size_position = self._stream.tell()
        self._write_u64(0)

    def _end_section(self) -> None:
        if self._size_position is None:
            raise CircuitBug("no section is being written")
        current = self._stream.tell()
        size = current - self._size_position - 8
        self._stream.seek(self._size_position)
        self._write_u64(size)
        self._stream.seek(current)
        self._stream.flush()
        self._size_position = None


class WitnessWriter(_SectionedWriter):
    """Writes a witness in the snarkjs wtns format."""

    def __init__(self, stream: BinaryIO):
        super().__init__(stream, WTNS_MAGIC, WTNS_VERSION, WTNS_SECTIONS)

    def write(self, witness: Iterable[int], prime: int) -> None:
        """Write the header section, then every witness value in a second section."""
        values = list(witness)
        n8 = field_size(prime)

        self._start_section(1)
        self._write_u32(n8)
        self._write_big_int(prime, n8)
        self._write_u32(len(values))
        self._end_section()

        self._start_section(2)
        for value in values:
            self._write_big_int(value, n8)
        self._end_section()


class _R1CSFileWriter(_SectionedWriter):
    def __init__(self, stream: BinaryIO):
        super().__init__(stream, R1CS_MAGIC, R1CS_VERSION, R1CS_SECTIONS)


class SnarkjsExporter:
    """Exports a finalized R1CS circuit and its witness to snarkjs files."""

    def __init__(self, r1cs_backend: R1CS):
        self.r1cs_backend = r1cs_backend

    def _prime(self) -> int:
        return self.r1cs_backend.prime()

    def _restructure_lc(self, lc: LinearCombination) -> dict[int, int]:
        """Map wire indices to coefficients, with the constant on wire 0."""
        prime = self._prime()
        terms = {var.index: factor % prime for var, factor in lc.terms.items()}
        if 0 in terms:
            raise CircuitBug("the first var should be preserved for the constant term")
        terms[0] = lc.constant % prime
        return terms

    def gen_r1cs_file(self, path: str) -> None:
        """Write the circuit as an r1cs file."""
        backend = self.r1cs_backend
        prime = self._prime()
        n8 = field_size(prime)
        constraints = [
            [self._restructure_lc(lc) for lc in constraint.as_array()]
            for constraint in backend.constraints
        ]

        with open(path, "wb") as stream:
            writer = _R1CSFileWriter(stream)

            writer._start_section(_CONSTRAINT_SECTION)
            for lcs in constraints:
                for terms in lcs:
                    writer._write_u32(len(terms))
                    for wire in sorted(terms):
                        writer._write_u32(wire)
                        writer._write_big_int(terms[wire], n8)
            writer._end_section()

            writer._start_section(_HEADER_SECTION)
            writer._write_u32(n8)
            writer._write_big_int(prime, n8)
            writer._write_u32(len(backend.witness_vector))
            writer._write_u32(len(backend.public_outputs))
            writer._write_u32(len(backend.public_inputs))
            writer._write_u32(backend.private_input_number())
            writer._write_u64(0)  # no labels
            writer._write_u32(len(constraints))
            writer._end_section()

            writer._start_section(_WIRE_TO_LABEL_SECTION)
            writer._end_section()

    def gen_wtns_file(self, path: str, witness: R1CSWitness) -> None:
        """Write a generated witness as a wtns file."""
        prime = self._prime()
        values = [value % prime for value in witness.witness]
        with open(path, "wb") as stream:
            WitnessWriter(stream).write(values, prime)