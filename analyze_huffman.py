#!/usr/bin/env python3
import argparse
import os
import sys
from typing import Dict, List, Optional

from container_utils import dump_encoded
from huffman_utils import average_code_length, count_frequencies, encode_samples, entropy_bits
from verify_roundtrip import iter_wav_files
from wav_utils import HEADER_SIZE, read_wav


def ratio(raw: float, comp: float) -> float:
    return raw / comp if comp > 0 else 0.0


def analyze_file(path: str) -> Dict:
    header, samples = read_wav(path)
    result = encode_samples(samples)
    freqs = count_frequencies(samples)
    raw_bytes = HEADER_SIZE + header.data_size
    enc_bytes = len(dump_encoded(header, result))
    return {
        "file": path,
        "samples": int(samples.size),
        "distinct": len(result.codes),
        "raw_bytes": raw_bytes,
        "enc_bytes": enc_bytes,
        "ratio": ratio(raw_bytes, enc_bytes),
        "bits_per_sample": average_code_length(freqs, result.codes),
        "entropy": entropy_bits(freqs),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze Huffman compression ratios for WAV files.")
    parser.add_argument("paths", nargs="+", help="WAV files or directories to scan for *.wav.")
    parser.add_argument("--out-dir", default="out", help="Directory for huffman_metrics.csv and huffman_summary.md.")
    args = parser.parse_args(argv)

    rows = []
    for path in iter_wav_files(args.paths):
        try:
            rows.append(analyze_file(path))
        except (OSError, ValueError) as exc:
            print(f"Skip {path}: {exc}", file=sys.stderr)

    if not rows:
        print("No readable WAV files found.", file=sys.stderr)
        return 1

    os.makedirs(args.out_dir, exist_ok=True)
    csv_path = os.path.join(args.out_dir, "huffman_metrics.csv")
    with open(csv_path, "w", encoding="utf-8") as f:
        headers = list(rows[0].keys())
        f.write(",".join(headers) + "\n")
        for r in rows:
            f.write(",".join(str(r[h]) for h in headers) + "\n")

    total_raw = sum(r["raw_bytes"] for r in rows)
    total_enc = sum(r["enc_bytes"] for r in rows)
    total_samples = sum(r["samples"] for r in rows)
    weighted_bps = sum(r["bits_per_sample"] * r["samples"] for r in rows) / total_samples if total_samples else 0.0

    summary_path = os.path.join(args.out_dir, "huffman_summary.md")
    with open(summary_path, "w", encoding="utf-8") as f:
        f.write("# Huffman WAV Summary\n\n")
        f.write(f"- Files analyzed: {len(rows)}\n")
        f.write(f"- Total samples: {total_samples}\n\n")
        f.write(f"- Weighted ratio: {ratio(total_raw, total_enc):.3f}\n")
        f.write(f"- Weighted bits/sample: {weighted_bps:.3f}\n")

    print(f"Wrote {csv_path}")
    print(f"Wrote {summary_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
