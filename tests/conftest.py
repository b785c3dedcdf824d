import numpy as np
import pytest

from wav_utils import make_wav_header, write_wav


@pytest.fixture
def make_wav(tmp_path):
    def _make(samples, name="input.wav", sample_rate=8000):
        arr = np.asarray(samples, dtype=np.int16)
        path = tmp_path / name
        write_wav(str(path), make_wav_header(arr.size, sample_rate=sample_rate), arr)
        return str(path)

    return _make


@pytest.fixture
def tone():
    t = np.arange(4000)
    wave = 12000 * np.sin(2 * np.pi * 440 * t / 8000)
    return np.round(wave).astype(np.int16)
