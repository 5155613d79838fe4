from unittest.mock import patch

import pytest

from analysis.synthetic import sine_tone
from main import build_parser, main


def _mono_clip(freq=200.0, dur=6.0, sr=44100):
    return sine_tone(freq, sr=sr, dur=dur)[:, None], 1, sr


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_quick_test_prints_range(capsys):
    assert main(["quick-test"]) == 0
    out = capsys.readouterr().out
    assert "Voice range: 119-301 Hz" in out
    assert "female_adult" in out


def test_missing_clip_reports_error(tmp_path, capsys):
    code = main(["analyze", str(tmp_path / "missing.wav")])
    assert code == 1
    assert "error:" in capsys.readouterr().err


@patch("main.read_clip")
def test_analyze_prints_statistics(mock_read, capsys):
    mock_read.return_value = _mono_clip(dur=1.0)

    assert main(["analyze", "clip.wav", "--smooth", "3"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("PitchStats:")
    mock_read.assert_called_once_with("clip.wav")


@patch("main.read_clip")
def test_calibrate_from_clip(mock_read, capsys):
    mock_read.return_value = _mono_clip()

    assert main(["calibrate", "clip.wav"]) == 0
    out = capsys.readouterr().out
    assert "Voice range:" in out
    assert "Samples:" in out


@patch("main.read_clip")
def test_calibrate_short_clip_falls_back(mock_read, capsys):
    mock_read.return_value = _mono_clip(dur=1.0)

    assert main(["calibrate", "clip.wav"]) == 0
    assert "using default voice range" in capsys.readouterr().out


@patch("main.read_clip")
def test_invalid_settings_report_error(mock_read, capsys):
    mock_read.return_value = _mono_clip(dur=1.0)

    assert main(["analyze", "clip.wav", "--min-freq", "900"]) == 1
    assert "error:" in capsys.readouterr().err
