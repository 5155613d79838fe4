# analysis/noise_gate.py
import logging
import math

import numpy as np

from analysis.pitch import PitchObservation, PitchOutcome

logger = logging.getLogger(__name__)


class AmbientNoiseGate:
    """
    Learns the room's ambient level during the first seconds of a stream,
    then silences observations that are not clearly louder than it.

    During the learning phase `apply` returns None: those frames are used to
    measure the room and are not reported.
    """

    def __init__(
        self,
        calibration_seconds: float = 2.0,
        min_audio_level: float = 0.001,
        gate_factor: float = 3.0,
        ambient_fraction: float = 0.7,
    ):
        self.calibration_seconds = float(calibration_seconds)
        self.min_audio_level = float(min_audio_level)
        self.gate_factor = float(gate_factor)
        self.ambient_fraction = float(ambient_fraction)
        self.reset()

    def reset(self):
        self.ambient_level = 0.0
        self.is_calibrating = self.calibration_seconds > 0
        self._start_time = None
        self._levels = []

    @property
    def threshold(self) -> float:
        return max(self.min_audio_level, self.gate_factor * self.ambient_level)

    def _finish_calibration(self):
        ordered = np.sort(np.asarray(self._levels, dtype=float))
        count = max(1, math.floor(ordered.size * self.ambient_fraction))
        self.ambient_level = float(ordered[:count].mean())
        self.is_calibrating = False
        self._levels = []
        logger.info("Ambient calibration complete. Ambient noise: %.4f", self.ambient_level)

    def apply(self, obs: PitchObservation):
        if self.is_calibrating:
            if self._start_time is None:
                self._start_time = obs.timestamp
            self._levels.append(obs.audio_level)
            if obs.timestamp - self._start_time >= self.calibration_seconds:
                self._finish_calibration()
            return None

        if obs.audio_level < self.threshold:
            return PitchObservation(
                obs.timestamp, 0.0, 0.0, obs.audio_level, PitchOutcome.SILENT
            )
        return obs
