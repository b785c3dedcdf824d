#!/usr/bin/env python3
import os
import struct
from typing import Iterable, NamedTuple, Tuple

import numpy as np

from huffman_utils import FormatError, as_samples


HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")
HEADER_SIZE = HEADER_STRUCT.size  # 44


class WavHeader(NamedTuple):
    riff: bytes
    overall_size: int
    wave: bytes
    fmt_marker: bytes
    fmt_length: int
    format_type: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_marker: bytes
    data_size: int
    raw: bytes

    @property
    def num_samples(self) -> int:
        return self.data_size // 2


def parse_wav_header(raw: bytes) -> WavHeader:
    if len(raw) < HEADER_SIZE:
        raise FormatError(f"WAV header truncated: {len(raw)} of {HEADER_SIZE} bytes.")
    raw = bytes(raw[:HEADER_SIZE])
    header = WavHeader(*HEADER_STRUCT.unpack(raw), raw=raw)
    if header.riff != b"RIFF" or header.wave != b"WAVE":
        raise FormatError("Missing RIFF/WAVE tokens.")
    if header.fmt_marker != b"fmt " or header.data_marker != b"data":
        raise FormatError("Missing 'fmt ' or 'data' chunk marker.")
    if header.bits_per_sample != 16:
        raise FormatError(f"Only 16-bit PCM is supported (got {header.bits_per_sample} bits).")
    if header.data_size % 2 != 0:
        raise FormatError(f"Odd data size {header.data_size} for 16-bit samples.")
    return header


def make_wav_header(num_samples: int, sample_rate: int = 44100, channels: int = 1) -> WavHeader:
    data_size = num_samples * 2
    raw = HEADER_STRUCT.pack(
        b"RIFF", 36 + data_size, b"WAVE", b"fmt ", 16, 1, channels,
        sample_rate, sample_rate * channels * 2, channels * 2, 16, b"data", data_size,
    )
    return parse_wav_header(raw)


def read_wav(path: str) -> Tuple[WavHeader, np.ndarray]:
    with open(path, "rb") as f:
        header = parse_wav_header(f.read(HEADER_SIZE))
        data = f.read(header.data_size)
    if len(data) < header.data_size:
        raise FormatError(f"WAV data truncated: {len(data)} of {header.data_size} bytes.")
    return header, np.frombuffer(data, dtype="<i2").astype(np.int16)


def write_chunks(path: str, chunks: Iterable[bytes]) -> None:
    f = open(path, "wb")
    # Only a file this call opened is removed on a failed write.
    try:
        with f:
            for chunk in chunks:
                f.write(chunk)
    except OSError:
        os.remove(path)
        raise


def write_wav(path: str, header: WavHeader, samples) -> None:
    arr = as_samples(samples)
    write_chunks(path, [header.raw, arr.astype("<i2").tobytes()])
