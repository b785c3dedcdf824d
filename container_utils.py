#!/usr/bin/env python3
import struct
from typing import Dict, NamedTuple

from huffman_utils import EncodeResult, FormatError
from wav_utils import HEADER_SIZE, WavHeader, parse_wav_header, write_chunks


U32 = struct.Struct("<I")
U32_MAX = 0xFFFFFFFF
CODE_ENTRY = struct.Struct("<hI")


class EncodedFile(NamedTuple):
    header: WavHeader
    codes: Dict[int, str]
    data: bytes
    total_bits: int


def dump_encoded(header: WavHeader, result: EncodeResult) -> bytes:
    if result.total_bits > U32_MAX:
        raise FormatError(f"Encoded stream of {result.total_bits} bits exceeds the 32-bit bit count field.")
    out = bytearray(header.raw)
    out += U32.pack(len(result.codes))
    for sample, code in sorted(result.codes.items()):
        out += CODE_ENTRY.pack(sample, len(code))
        # One ASCII byte per code bit.
        out += code.encode("ascii")
    out += U32.pack(result.total_bits)
    out += result.data
    return bytes(out)


class _Cursor:
    def __init__(self, blob: bytes) -> None:
        self.blob = blob
        self.pos = 0

    def take(self, n: int, what: str) -> bytes:
        end = self.pos + n
        if end > len(self.blob):
            raise FormatError(f"Truncated {what}: need {n} bytes at offset {self.pos}, file has {len(self.blob)}.")
        chunk = self.blob[self.pos:end]
        self.pos = end
        return chunk


def load_encoded(blob: bytes) -> EncodedFile:
    cur = _Cursor(blob)
    header = parse_wav_header(cur.take(HEADER_SIZE, "WAV header"))

    (count,) = U32.unpack(cur.take(U32.size, "code count"))
    codes: Dict[int, str] = {}
    for i in range(count):
        sample, length = CODE_ENTRY.unpack(cur.take(CODE_ENTRY.size, f"code table entry {i}"))
        if length == 0:
            raise FormatError(f"Zero-length code for sample {sample}.")
        raw = cur.take(length, f"code string for sample {sample}")
        if raw.translate(None, b"01"):
            raise FormatError(f"Code for sample {sample} contains non-binary characters.")
        if sample in codes:
            raise FormatError(f"Duplicate code table entry for sample {sample}.")
        codes[sample] = raw.decode("ascii")

    (total_bits,) = U32.unpack(cur.take(U32.size, "bit count"))
    data = cur.take((total_bits + 7) // 8, "bit stream")
    if cur.pos != len(blob):
        raise FormatError(f"{len(blob) - cur.pos} trailing bytes after the bit stream.")
    return EncodedFile(header, codes, data, total_bits)


def write_encoded(path: str, header: WavHeader, result: EncodeResult) -> None:
    write_chunks(path, [dump_encoded(header, result)])


def read_encoded(path: str) -> EncodedFile:
    with open(path, "rb") as f:
        blob = f.read()
    return load_encoded(blob)
