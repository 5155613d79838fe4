import pytest

from analysis.noise_gate import AmbientNoiseGate
from analysis.pitch import PitchObservation, PitchOutcome


def _feed_room(gate, levels, step=0.1):
    outs = []
    for i, level in enumerate(levels):
        outs.append(gate.apply(PitchObservation(i * step, 0.0, 0.0, level)))
    return outs


def test_observations_held_back_while_learning():
    gate = AmbientNoiseGate(calibration_seconds=1.0)
    outs = _feed_room(gate, [0.002] * 5)
    assert outs == [None] * 5
    assert gate.is_calibrating


def test_ambient_is_mean_of_quietest_seventy_percent():
    gate = AmbientNoiseGate(calibration_seconds=1.0, min_audio_level=0.001)
    levels = [0.001 * (i + 1) for i in range(10)] + [0.1]
    _feed_room(gate, levels)

    assert not gate.is_calibrating
    # 11 levels -> lowest 7 -> mean of 0.001..0.007
    assert gate.ambient_level == pytest.approx(0.004)
    assert gate.threshold == pytest.approx(0.012)


def test_gate_silences_quiet_frames():
    gate = AmbientNoiseGate(calibration_seconds=1.0)
    _feed_room(gate, [0.001 * (i + 1) for i in range(10)] + [0.1])

    quiet = gate.apply(PitchObservation(2.0, 220.0, 0.8, 0.01))
    assert quiet.frequency == 0.0
    assert quiet.confidence == 0.0
    assert quiet.audio_level == 0.01
    assert quiet.outcome is PitchOutcome.SILENT

    loud = PitchObservation(2.1, 220.0, 0.8, 0.05)
    assert gate.apply(loud) is loud


def test_minimum_level_applies_in_quiet_room():
    gate = AmbientNoiseGate(calibration_seconds=0.0, min_audio_level=0.001)
    assert not gate.is_calibrating
    assert gate.threshold == 0.001

    out = gate.apply(PitchObservation(0.0, 200.0, 0.9, 0.0005))
    assert out.frequency == 0.0


def test_reset_restarts_learning():
    gate = AmbientNoiseGate(calibration_seconds=0.5)
    _feed_room(gate, [0.01] * 10)
    assert not gate.is_calibrating

    gate.reset()
    assert gate.is_calibrating
    assert gate.ambient_level == 0.0
