import builtins
import os

import numpy as np

import analyze_huffman
import decode_wav
import encode_wav
import verify_roundtrip
from container_utils import dump_encoded
from huffman_utils import EncodeResult, encode_samples
from wav_utils import make_wav_header


def test_encode_decode_byte_identical(tmp_path, make_wav, tone, capsys):
    src = make_wav(tone)
    enc = str(tmp_path / "tone.enc")
    dst = str(tmp_path / "tone_out.wav")

    assert encode_wav.main([src, enc]) == 0
    assert "Encoding completed." in capsys.readouterr().out
    assert decode_wav.main([enc, dst]) == 0
    assert "Decoding completed." in capsys.readouterr().out

    with open(src, "rb") as a, open(dst, "rb") as b:
        assert a.read() == b.read()
    assert os.path.getsize(enc) < os.path.getsize(src)


def test_encode_decode_singleton_and_empty(tmp_path, make_wav):
    for name, samples in (("one", [-32768] * 7), ("none", [])):
        src = make_wav(samples, name=f"{name}.wav")
        enc = str(tmp_path / f"{name}.enc")
        dst = str(tmp_path / f"{name}_out.wav")
        assert encode_wav.main([src, enc, "--quiet"]) == 0
        assert decode_wav.main([enc, dst, "--quiet"]) == 0
        with open(src, "rb") as a, open(dst, "rb") as b:
            assert a.read() == b.read()


def test_encode_missing_input(tmp_path, capsys):
    missing = str(tmp_path / "missing.wav")
    assert encode_wav.main([missing, str(tmp_path / "x.enc")]) == 1
    assert f"Error opening file: {missing}" in capsys.readouterr().err
    assert not (tmp_path / "x.enc").exists()


def test_encode_invalid_wav(tmp_path, capsys):
    src = tmp_path / "bad.wav"
    src.write_bytes(b"not a wav file at all" * 4)
    assert encode_wav.main([str(src), str(tmp_path / "x.enc")]) == 1
    assert "Invalid input" in capsys.readouterr().err


def test_encode_uncreatable_output(tmp_path, make_wav, capsys):
    src = make_wav([1, 2, 3])
    out = str(tmp_path / "no_such_dir" / "x.enc")
    assert encode_wav.main([src, out]) == 1
    assert f"Error creating file: {out}" in capsys.readouterr().err


def test_decode_missing_input(tmp_path, capsys):
    missing = str(tmp_path / "missing.enc")
    assert decode_wav.main([missing, str(tmp_path / "x.wav")]) == 1
    assert f"Error opening file: {missing}" in capsys.readouterr().err


def test_decode_truncated_input(tmp_path, make_wav, capsys):
    src = make_wav([0, 0, 0, 1, 1, -5])
    enc = tmp_path / "x.enc"
    assert encode_wav.main([src, str(enc), "--quiet"]) == 0
    enc.write_bytes(enc.read_bytes()[:-1])
    out = tmp_path / "x.wav"
    assert decode_wav.main([str(enc), str(out)]) == 1
    assert "Invalid input" in capsys.readouterr().err
    assert not out.exists()


def test_decode_sample_count_mismatch(tmp_path, capsys):
    enc = tmp_path / "x.enc"
    enc.write_bytes(dump_encoded(make_wav_header(10), encode_samples([1, 2, 3])))
    assert decode_wav.main([str(enc), str(tmp_path / "x.wav")]) == 1
    assert "header declares 10" in capsys.readouterr().err


def test_verify_roundtrip_directory(tmp_path, make_wav, tone, capsys):
    make_wav(tone, name="a.wav")
    make_wav([5, 5, 5], name="b.wav")
    (tmp_path / "broken.wav").write_bytes(b"RIFF")
    assert verify_roundtrip.main([str(tmp_path)]) == 0
    captured = capsys.readouterr()
    assert "Checked: 2, Failed: 0" in captured.out
    assert "Skip" in captured.err


def test_verify_roundtrip_nothing_readable(tmp_path):
    assert verify_roundtrip.main([str(tmp_path)]) == 1


def test_roundtrip_samples_reports_ok():
    samples = np.array([3, -3, 3, 32767], dtype=np.int16)
    assert verify_roundtrip.roundtrip_samples(samples, make_wav_header(samples.size)) == (True, 0)


def test_analyze_writes_reports(tmp_path, make_wav, tone):
    src = make_wav(tone)
    out_dir = tmp_path / "report"
    assert analyze_huffman.main([src, "--out-dir", str(out_dir)]) == 0
    lines = (out_dir / "huffman_metrics.csv").read_text(encoding="utf-8").splitlines()
    assert lines[0].split(",") == [
        "file", "samples", "distinct", "raw_bytes", "enc_bytes", "ratio", "bits_per_sample", "entropy",
    ]
    assert len(lines) == 2
    summary = (out_dir / "huffman_summary.md").read_text(encoding="utf-8")
    assert "Files analyzed: 1" in summary


def test_analyze_file_metrics(make_wav, tone):
    row = analyze_huffman.analyze_file(make_wav(tone))
    assert row["samples"] == tone.size
    assert row["raw_bytes"] == 44 + 2 * tone.size
    assert row["entropy"] <= row["bits_per_sample"] < row["entropy"] + 1


def _deny_writes_to(monkeypatch, target):
    real_open = builtins.open

    def fake_open(path, mode="r", *args, **kwargs):
        if str(path) == str(target) and "w" in mode:
            raise PermissionError(13, "Permission denied", str(path))
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(builtins, "open", fake_open)


def test_encode_keeps_existing_output_when_open_fails(tmp_path, make_wav, monkeypatch, capsys):
    src = make_wav([1, 2, 3])
    out = tmp_path / "keep.enc"
    out.write_bytes(b"precious")
    _deny_writes_to(monkeypatch, out)
    assert encode_wav.main([src, str(out)]) == 1
    assert "Error creating file" in capsys.readouterr().err
    assert out.read_bytes() == b"precious"


def test_decode_keeps_existing_output_when_open_fails(tmp_path, make_wav, monkeypatch, capsys):
    enc = tmp_path / "x.enc"
    enc.write_bytes(dump_encoded(make_wav_header(3), encode_samples([1, 2, 3])))
    out = tmp_path / "keep.wav"
    out.write_bytes(b"precious")
    _deny_writes_to(monkeypatch, out)
    assert decode_wav.main([str(enc), str(out)]) == 1
    assert "Error creating file" in capsys.readouterr().err
    assert out.read_bytes() == b"precious"


def test_encode_stream_too_long_for_container(tmp_path, make_wav, monkeypatch, capsys):
    src = make_wav([1, 2, 3])
    out = tmp_path / "big.enc"
    monkeypatch.setattr(encode_wav, "encode_samples", lambda samples: EncodeResult({0: "0"}, b"", 1 << 32))
    assert encode_wav.main([src, str(out)]) == 1
    assert "Invalid input" in capsys.readouterr().err
    assert not out.exists()


def test_verify_roundtrip_reports_missing_path(tmp_path, make_wav, capsys):
    make_wav([4, 4, 5], name="a.wav")
    missing = str(tmp_path / "typo.wav")
    assert verify_roundtrip.main([str(tmp_path), missing]) == 0
    captured = capsys.readouterr()
    assert "Checked: 1, Failed: 0" in captured.out
    assert f"Skip {missing}" in captured.err
    assert "Unreadable: 1" in captured.err
