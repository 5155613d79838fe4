# analysis/smoothing.py
from collections import deque
from dataclasses import dataclass, replace

import numpy as np

from analysis.pitch import PitchObservation


# ---------------------------------------------------------
# Moving-average smoothing over a finished sequence
# ---------------------------------------------------------
def smooth_pitch_data(observations, window_size: int):
    """
    Centered moving average over a sequence of observations.

    Frequency is averaged over the voiced members of each window only;
    confidence and level are averaged over every member. Windows shrink at
    the edges instead of wrapping or padding. Timestamps are kept.
    """
    if observations is None:
        return []
    if not observations or window_size <= 1:
        return observations

    n = len(observations)
    half = window_size // 2

    freqs = np.array([o.frequency for o in observations], dtype=float)
    confs = np.array([o.confidence for o in observations], dtype=float)
    levels = np.array([o.audio_level for o in observations], dtype=float)
    voiced = freqs > 0

    smoothed = []
    for i, obs in enumerate(observations):
        start = max(0, i - half)
        end = min(n - 1, i + half) + 1

        mask = voiced[start:end]
        pitch = float(freqs[start:end][mask].mean()) if mask.any() else 0.0

        smoothed.append(PitchObservation(
            obs.timestamp,
            pitch,
            float(confs[start:end].mean()),
            float(levels[start:end].mean()),
        ))

    return smoothed


# ---------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------
@dataclass(frozen=True)
class PitchStatistics:
    total_data_points: int = 0
    pitch_data_points: int = 0
    silence_data_points: int = 0
    min_pitch: float = 0.0
    max_pitch: float = 0.0
    average_pitch: float = 0.0
    average_confidence: float = 0.0
    average_audio_level: float = 0.0

    @property
    def pitch_percentage(self) -> float:
        if self.total_data_points <= 0:
            return 0.0
        return self.pitch_data_points / self.total_data_points * 100.0

    def __str__(self):
        return (
            f"PitchStats: {self.pitch_data_points}/{self.total_data_points} points "
            f"({self.pitch_percentage:.1f}% pitch), "
            f"Range: {self.min_pitch:.0f}-{self.max_pitch:.0f}Hz, "
            f"Avg: {self.average_pitch:.0f}Hz"
        )


def calculate_statistics(observations) -> PitchStatistics:
    if not observations:
        return PitchStatistics()

    voiced = [o for o in observations if o.has_pitch]
    if not voiced:
        return PitchStatistics(total_data_points=len(observations))

    pitches = np.array([o.frequency for o in voiced], dtype=float)

    return PitchStatistics(
        total_data_points=len(observations),
        pitch_data_points=len(voiced),
        silence_data_points=len(observations) - len(voiced),
        min_pitch=float(pitches.min()),
        max_pitch=float(pitches.max()),
        average_pitch=float(pitches.mean()),
        average_confidence=float(np.mean([o.confidence for o in voiced])),
        average_audio_level=float(np.mean([o.audio_level for o in observations])),
    )


# ---------------------------------------------------------
# Live pitch smoothing
# ---------------------------------------------------------
class PitchSmoother:
    """
    Rolling mean over the last `history_size` voiced frequencies.

    Unvoiced observations pass through untouched and leave the history
    alone, so a short gap does not restart the average.
    """

    def __init__(self, history_size=10):
        self.history_size = int(history_size)
        self.history = deque(maxlen=self.history_size)

    @property
    def current(self):
        if not self.history:
            return None
        return float(np.mean(self.history))

    def update(self, obs: PitchObservation) -> PitchObservation:
        if not obs.has_pitch:
            return obs

        self.history.append(float(obs.frequency))
        return replace(obs, frequency=self.current)

    def reset(self):
        self.history.clear()
