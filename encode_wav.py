#!/usr/bin/env python3
import argparse
import os
import sys
from typing import List, Optional

from container_utils import write_encoded
from huffman_utils import encode_samples
from wav_utils import read_wav


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Lossless Huffman encoding of a 16-bit PCM WAV file.")
    parser.add_argument("input", help="Source .wav file.")
    parser.add_argument("output", help="Destination .enc file.")
    parser.add_argument("--quiet", action="store_true", help="Do not print the summary line.")
    args = parser.parse_args(argv)

    try:
        header, samples = read_wav(args.input)
    except OSError:
        print(f"Error opening file: {args.input}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {args.input}: {exc}", file=sys.stderr)
        return 1

    result = encode_samples(samples)

    try:
        write_encoded(args.output, header, result)
    except OSError:
        print(f"Error creating file: {args.output}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {args.input}: {exc}", file=sys.stderr)
        return 1

    if not args.quiet:
        print("Encoding completed.")
        print(f"Samples: {samples.size}, codes: {len(result.codes)}, "
              f"bits: {result.total_bits}, output bytes: {os.path.getsize(args.output)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
