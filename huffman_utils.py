#!/usr/bin/env python3
import heapq
import math
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np


SAMPLE_MIN = -32768
SAMPLE_MAX = 32767
SAMPLE_OFFSET = 1 << 15


class FormatError(ValueError):
    """Structural problem in an input file or bit stream."""


class HuffmanNode:
    __slots__ = ("sample", "weight", "left", "right")

    def __init__(self, sample: Optional[int] = None, weight: int = 0,
                 left: Optional["HuffmanNode"] = None, right: Optional["HuffmanNode"] = None) -> None:
        self.sample = sample
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.sample is not None

    def child(self, bit: int) -> Optional["HuffmanNode"]:
        return self.right if bit else self.left


class EncodeResult(NamedTuple):
    codes: Dict[int, str]
    data: bytes
    total_bits: int


def as_samples(samples) -> np.ndarray:
    arr = np.asarray(samples)
    if arr.dtype == np.int16:
        return arr.reshape(-1)
    arr = arr.reshape(-1)
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"Samples must be integers, got dtype {arr.dtype}.")
    if arr.size and (arr.min() < SAMPLE_MIN or arr.max() > SAMPLE_MAX):
        raise ValueError("Samples must fit in a signed 16-bit integer.")
    return arr.astype(np.int16)


def count_frequencies(samples) -> Dict[int, int]:
    arr = as_samples(samples)
    counts = np.bincount(arr.astype(np.int32) + SAMPLE_OFFSET, minlength=1 << 16)
    present = np.flatnonzero(counts)
    return {int(idx) - SAMPLE_OFFSET: int(counts[idx]) for idx in present}


def build_huffman_tree(freqs: Dict[int, int]) -> Optional[HuffmanNode]:
    # Heap entries are (weight, order, node); order is the insertion index, so
    # among equal weights the earliest inserted node is popped first.
    heap: List[Tuple[int, int, HuffmanNode]] = []
    for order, sample in enumerate(sorted(freqs)):
        heap.append((freqs[sample], order, HuffmanNode(sample, freqs[sample])))
    heapq.heapify(heap)

    if not heap:
        return None
    if len(heap) == 1:
        leaf = heap[0][2]
        return HuffmanNode(weight=leaf.weight, left=leaf)

    order = len(heap)
    while len(heap) > 1:
        w1, _, left = heapq.heappop(heap)
        w2, _, right = heapq.heappop(heap)
        heapq.heappush(heap, (w1 + w2, order, HuffmanNode(weight=w1 + w2, left=left, right=right)))
        order += 1
    return heap[0][2]


def build_code_table(root: Optional[HuffmanNode]) -> Dict[int, str]:
    codes: Dict[int, str] = {}
    if root is None:
        return codes
    stack = [(root, "")]
    while stack:
        node, prefix = stack.pop()
        if node.is_leaf:
            codes[node.sample] = prefix
            continue
        if node.right is not None:
            stack.append((node.right, prefix + "1"))
        if node.left is not None:
            stack.append((node.left, prefix + "0"))
    return dict(sorted(codes.items()))


def build_decode_tree(codes: Dict[int, str]) -> Optional[HuffmanNode]:
    """Rebuild a decoding tree from a code table, one root-to-leaf path per code."""
    if not codes:
        return None
    root = HuffmanNode()
    for sample, code in codes.items():
        if not SAMPLE_MIN <= sample <= SAMPLE_MAX:
            raise FormatError(f"Sample {sample} is outside the 16-bit range.")
        if not code:
            raise FormatError(f"Empty code for sample {sample}.")
        node = root
        for ch in code:
            if ch not in "01":
                raise FormatError(f"Invalid character {ch!r} in code for sample {sample}.")
            if node.is_leaf:
                raise FormatError(f"Code table is not prefix-free (sample {sample}).")
            nxt = node.right if ch == "1" else node.left
            if nxt is None:
                nxt = HuffmanNode()
                if ch == "1":
                    node.right = nxt
                else:
                    node.left = nxt
            node = nxt
        if node.is_leaf or node.left is not None or node.right is not None:
            raise FormatError(f"Code table is not prefix-free (sample {sample}).")
        node.sample = sample
    return root


def pack_bits(codes: Iterable[str]) -> Tuple[bytes, int]:
    parts = []
    for code in codes:
        if not code:
            raise RuntimeError("Empty code reached the bit packer.")
        parts.append(code)
    text = "".join(parts)
    if not text:
        return b"", 0
    bits = np.frombuffer(text.encode("ascii"), dtype=np.uint8) - ord("0")
    if bits.max() > 1:
        raise RuntimeError("Code strings must contain only '0' and '1'.")
    return np.packbits(bits, bitorder="little").tobytes(), int(bits.size)


def unpack_bits(data: bytes, total_bits: int, root: Optional[HuffmanNode]) -> np.ndarray:
    if total_bits < 0:
        raise FormatError(f"Negative bit count {total_bits}.")
    need = (total_bits + 7) // 8
    if len(data) < need:
        raise FormatError(f"Bit stream truncated: need {need} bytes, got {len(data)}.")
    if total_bits == 0:
        return np.zeros(0, dtype=np.int16)
    if root is None:
        raise FormatError("Non-empty bit stream with an empty code table.")

    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8, count=need), bitorder="little", count=total_bits)
    out = []
    node = root
    for pos, bit in enumerate(bits.tolist()):
        node = node.child(bit)
        if node is None:
            raise FormatError(f"Invalid bitstream: no matching Huffman code at bit {pos}.")
        if node.is_leaf:
            out.append(node.sample)
            node = root
    if node is not root:
        raise FormatError("Bit stream ends in the middle of a code.")
    return np.array(out, dtype=np.int16)


def encode_samples(samples) -> EncodeResult:
    arr = as_samples(samples)
    freqs = count_frequencies(arr)
    codes = build_code_table(build_huffman_tree(freqs))
    try:
        data, total_bits = pack_bits(codes[s] for s in arr.tolist())
    except KeyError as exc:
        raise RuntimeError(f"Sample {exc.args[0]} has no code.") from exc
    return EncodeResult(codes, data, total_bits)


def decode_samples(codes: Dict[int, str], data: bytes, total_bits: int) -> np.ndarray:
    return unpack_bits(data, total_bits, build_decode_tree(codes))


def average_code_length(freqs: Dict[int, int], codes: Dict[int, str]) -> float:
    total = sum(freqs.values())
    if total == 0:
        return 0.0
    return sum(f * len(codes[s]) for s, f in freqs.items()) / total


def entropy_bits(freqs: Dict[int, int]) -> float:
    total = sum(freqs.values())
    if total == 0:
        return 0.0
    h = 0.0
    for f in freqs.values():
        p = f / total
        h -= p * math.log2(p)
    return h


def kraft_sum(codes: Dict[int, str]) -> float:
    return sum(2.0 ** -len(code) for code in codes.values())
