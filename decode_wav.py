#!/usr/bin/env python3
import argparse
import sys
from typing import List, Optional

from container_utils import read_encoded
from huffman_utils import FormatError, decode_samples
from wav_utils import write_wav


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode a Huffman-encoded .enc file back to a WAV file.")
    parser.add_argument("input", help="Source .enc file.")
    parser.add_argument("output", help="Destination .wav file.")
    parser.add_argument("--quiet", action="store_true", help="Do not print the summary line.")
    args = parser.parse_args(argv)

    try:
        enc = read_encoded(args.input)
        samples = decode_samples(enc.codes, enc.data, enc.total_bits)
        if samples.size != enc.header.num_samples:
            raise FormatError(f"Decoded {samples.size} samples, header declares {enc.header.num_samples}.")
    except OSError:
        print(f"Error opening file: {args.input}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {args.input}: {exc}", file=sys.stderr)
        return 1

    try:
        write_wav(args.output, enc.header, samples)
    except OSError:
        print(f"Error creating file: {args.output}", file=sys.stderr)
        return 1

    if not args.quiet:
        print("Decoding completed.")
        print(f"Samples: {samples.size}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
