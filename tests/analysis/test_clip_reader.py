from unittest.mock import patch

import numpy as np
import pytest

from analysis.clip_reader import read_clip


@pytest.fixture
def clip_path(tmp_path):
    path = tmp_path / "clip.wav"
    path.write_bytes(b"RIFF")
    return path


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_clip(tmp_path / "nope.wav")


@patch("analysis.clip_reader.librosa.load")
def test_mono_clip_becomes_single_column(mock_load, clip_path):
    mock_load.return_value = (np.zeros(100), 22050)

    samples, channels, sr = read_clip(clip_path)

    assert samples.shape == (100, 1)
    assert samples.dtype == np.float32
    assert channels == 1
    assert sr == 22050
    mock_load.assert_called_once_with(str(clip_path), sr=None, mono=False)


@patch("analysis.clip_reader.librosa.load")
def test_stereo_clip_is_frames_by_channels(mock_load, clip_path):
    left = np.ones(50)
    right = -np.ones(50)
    mock_load.return_value = (np.stack([left, right]), 44100.0)

    samples, channels, sr = read_clip(clip_path, sample_rate=44100)

    assert samples.shape == (50, 2)
    assert channels == 2
    assert isinstance(sr, int)
    assert np.all(samples[:, 0] == 1.0)
    assert np.all(samples[:, 1] == -1.0)
    assert mock_load.call_args.kwargs["sr"] == 44100
