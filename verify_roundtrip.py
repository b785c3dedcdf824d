#!/usr/bin/env python3
import argparse
import os
import sys
from typing import Iterator, List, Optional, Tuple

import numpy as np

from container_utils import dump_encoded, load_encoded
from huffman_utils import decode_samples, encode_samples
from wav_utils import WavHeader, read_wav


def iter_wav_files(paths: List[str]) -> Iterator[str]:
    for root in paths:
        # Missing paths are passed through so the reader reports them.
        if os.path.isfile(root) or not os.path.exists(root):
            yield root
            continue
        for dirpath, _, filenames in os.walk(root):
            for name in sorted(filenames):
                if name.lower().endswith(".wav"):
                    yield os.path.join(dirpath, name)


def roundtrip_samples(samples: np.ndarray, header: WavHeader) -> Tuple[bool, int]:
    enc = load_encoded(dump_encoded(header, encode_samples(samples)))
    decoded = decode_samples(enc.codes, enc.data, enc.total_bits)
    if decoded.shape != samples.shape:
        return False, abs(int(decoded.size) - int(samples.size))
    if not np.array_equal(decoded, samples):
        return False, int(np.not_equal(decoded, samples).sum())
    return True, 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Verify Huffman encode/decode roundtrip on WAV files.")
    parser.add_argument("paths", nargs="+", help="WAV files or directories to scan for *.wav.")
    parser.add_argument("--limit", type=int, default=0, help="Max number of files to check (0 = all).")
    args = parser.parse_args(argv)

    checked = 0
    failed = 0
    unreadable = 0

    for path in iter_wav_files(args.paths):
        try:
            header, samples = read_wav(path)
        except (OSError, ValueError) as exc:
            print(f"Skip {path}: {exc}", file=sys.stderr)
            unreadable += 1
            continue

        ok, diff = roundtrip_samples(samples, header)
        checked += 1
        if ok:
            print(f"OK   {path}")
        else:
            failed += 1
            print(f"FAIL {path}: diff={diff}")

        if args.limit and checked >= args.limit:
            break

    if checked == 0:
        print("No readable WAV files found.", file=sys.stderr)
        return 1
    print(f"Checked: {checked}, Failed: {failed}")
    if unreadable:
        print(f"Unreadable: {unreadable}", file=sys.stderr)
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
