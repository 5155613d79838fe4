# tuner/live_analyzer.py
import logging

from analysis.pitch import PitchEstimator
from analysis.smoothing import PitchSmoother
from utils.ring_buffer import CircularAudioBuffer

logger = logging.getLogger(__name__)


class LivePitchTracker:
    """
    Turn a continuous sample stream into pitch observations:
      - rolling capture buffer
      - per-frame pitch estimation on the newest buffer_length samples
      - ambient noise gate (optional, None disables it)
      - optional history smoothing
      - listener notification
    """

    def __init__(
        self,
        settings,
        estimator=None,
        noise_gate=None,
        smoother=None,
        capacity_seconds: float = 10.0,
    ):
        self.settings = settings
        self.estimator = estimator or PitchEstimator()
        self.noise_gate = noise_gate
        self.smoother = smoother or PitchSmoother(settings.history_size)

        capacity = max(settings.buffer_length, int(capacity_seconds * settings.sample_rate))
        self.buffer = CircularAudioBuffer(capacity)

        self.latest = None
        self._listeners = []

    def add_listener(self, callback):
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def feed(self, samples):
        self.buffer.add_samples(samples)

    def analyze(self, timestamp: float):
        """
        Estimate pitch on the newest frame.

        Returns None until a full frame has been captured, or while the
        noise gate is still learning the room.
        """
        if self.buffer.current_size < self.settings.buffer_length:
            return None

        frame = self.buffer.get_last_samples(self.settings.buffer_length)
        obs = self.estimator.estimate(frame, timestamp, self.settings)

        if self.noise_gate is not None:
            obs = self.noise_gate.apply(obs)
            if obs is None:
                return None

        if self.settings.use_smoothing:
            obs = self.smoother.update(obs)

        self.latest = obs
        for callback in list(self._listeners):
            callback(obs)

        if self.settings.enable_debug_logging and obs.has_pitch:
            logger.debug("Pitch detected: %.1fHz", obs.frequency)
        return obs

    @property
    def current_pitch(self) -> float:
        return self.latest.frequency if self.latest is not None else 0.0

    def reset(self):
        """Reset capture and smoothing state, e.g. between sessions."""
        self.buffer.clear()
        self.smoother.reset()
        if self.noise_gate is not None:
            self.noise_gate.reset()
        self.latest = None
