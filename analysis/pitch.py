# analysis/pitch.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from analysis.settings import AnalysisSettings

logger = logging.getLogger(__name__)

SILENCE_LEVEL = 1e-4
MIN_WINDOWED_RMS = 1e-3
PROGRESS_LOG_EVERY = 50


class PitchOutcome(Enum):
    SILENT = "silent"
    BELOW_CONFIDENCE = "below_confidence"
    VOICED = "voiced"


@dataclass(frozen=True)
class PitchObservation:
    timestamp: float
    frequency: float  # Hz, 0 means no pitch
    confidence: float
    audio_level: float
    outcome: PitchOutcome | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.outcome is None:
            derived = PitchOutcome.VOICED if self.frequency > 0 else PitchOutcome.SILENT
            object.__setattr__(self, "outcome", derived)

    @property
    def has_pitch(self) -> bool:
        return self.frequency > 0

    def __str__(self):
        return (
            f"PitchData[{self.timestamp:.2f}s]: {self.frequency:.1f}Hz "
            f"(conf:{self.confidence:.2f}, level:{self.audio_level:.3f})"
        )


def _zero(timestamp, confidence=0.0, level=0.0, outcome=PitchOutcome.SILENT):
    return PitchObservation(float(timestamp), 0.0, float(confidence), float(level), outcome)


class PitchEstimator:
    """
    Normalized-autocorrelation pitch estimator.

    Owns its Hann window cache, so each live tracker or session should hold
    its own instance. Not safe to share between threads.
    """

    def __init__(self):
        self._window = None
        self.analysis_count = 0

    def window_for(self, length: int) -> np.ndarray:
        if self._window is None or self._window.size != length:
            # symmetric Hann: 0.5 * (1 - cos(2*pi*i / (N - 1)))
            self._window = np.hanning(length)
            logger.debug("Initialized window for buffer length: %d", length)
        return self._window

    def estimate(self, buffer, timestamp: float, settings: AnalysisSettings) -> PitchObservation:
        self.analysis_count += 1

        if buffer is None:
            return _zero(timestamp)
        frame = np.asarray(buffer, dtype=float).ravel()
        if frame.size == 0:
            if settings.enable_debug_logging:
                logger.debug("Invalid audio buffer")
            return _zero(timestamp)

        audio_level = float(np.mean(np.abs(frame)))
        if not np.isfinite(audio_level):
            return _zero(timestamp)

        if audio_level < SILENCE_LEVEL:
            if settings.enable_debug_logging and self.analysis_count % PROGRESS_LOG_EVERY == 1:
                logger.debug("Audio too quiet: %.6f", audio_level)
            return _zero(timestamp, level=audio_level)

        windowed = frame * self.window_for(frame.size)

        frequency, confidence, outcome = self._autocorrelate(windowed, settings)
        obs = PitchObservation(float(timestamp), frequency, confidence, audio_level, outcome)

        if obs.has_pitch and settings.enable_debug_logging:
            logger.debug("Analysis #%d: %s", self.analysis_count, obs)
        return obs

    def _autocorrelate(self, x: np.ndarray, settings: AnalysisSettings):
        n = x.size
        half = n // 2
        min_period = settings.min_period
        max_period = settings.max_period

        if not settings.period_fits(n):
            if settings.enable_debug_logging:
                logger.debug(
                    "Buffer too small for analysis: %d vs required %d", n, min_period * 2
                )
            return 0.0, 0.0, PitchOutcome.SILENT

        rms = float(np.sqrt(np.mean(x * x)))
        if rms < MIN_WINDOWED_RMS:
            return 0.0, 0.0, PitchOutcome.SILENT

        last_period = min(max_period, half - 1)
        if last_period < min_period:
            return 0.0, 0.0, PitchOutcome.SILENT
        periods = np.arange(min_period, last_period + 1)

        # r[p] = sum_i x[i] * x[i + p]
        corr = np.correlate(x, x, mode="full")[n - 1:]
        cumulative = np.concatenate(([0.0], np.cumsum(x * x)))
        energy1 = cumulative[n - periods]
        energy2 = cumulative[n] - cumulative[periods]

        normalized = np.zeros(periods.size, dtype=float)
        valid = (energy1 > 0) & (energy2 > 0)
        normalized[valid] = corr[periods[valid]] / np.sqrt(energy1[valid] * energy2[valid])

        best_idx = int(np.argmax(normalized))
        max_corr = float(normalized[best_idx])
        if max_corr <= 0.0:
            return 0.0, 0.0, PitchOutcome.BELOW_CONFIDENCE

        best_period = int(periods[best_idx])
        if max_corr > settings.correlation_threshold:
            frequency = settings.sample_rate / best_period
            # guards against numerical edge artifacts at the range limits
            if settings.min_frequency <= frequency <= settings.max_frequency:
                return float(frequency), max_corr, PitchOutcome.VOICED

        return 0.0, max_corr, PitchOutcome.BELOW_CONFIDENCE


_default_estimator = PitchEstimator()


def estimate_pitch(buffer, timestamp: float, settings: AnalysisSettings) -> PitchObservation:
    """
    Estimate pitch for one frame using the module-level estimator.

    Single-threaded use only; threads or concurrent sessions should hold
    their own PitchEstimator.
    """
    return _default_estimator.estimate(buffer, timestamp, settings)


def to_mono(samples, channels: int) -> np.ndarray:
    """
    Average channels down to one.

    Accepts interleaved 1D data or a (frames, channels) array. A trailing
    partial frame in interleaved data is dropped.
    """
    data = np.asarray(samples, dtype=float)
    if data.ndim == 2:
        return data.mean(axis=1) if data.shape[1] > 1 else data[:, 0]

    data = data.ravel()
    if channels <= 1:
        return data
    frames = data.size // channels
    return data[: frames * channels].reshape(frames, channels).mean(axis=1)


def pre_analyze_clip(
    samples,
    channels: int,
    settings: AnalysisSettings,
    analysis_interval: float,
    estimator: PitchEstimator | None = None,
) -> list[PitchObservation]:
    """
    Slide a buffer_length window across a whole clip.

    Windows start every analysis_interval seconds; the final partial window
    is dropped rather than zero-padded.
    """
    if samples is None:
        logger.error("pre_analyze_clip: samples is None")
        return []

    step = int(np.floor(analysis_interval * settings.sample_rate))
    if step <= 0:
        raise ValueError(
            f"analysis_interval {analysis_interval}s is shorter than one sample "
            f"at {settings.sample_rate} Hz"
        )

    estimator = estimator or _default_estimator
    mono = to_mono(samples, channels)
    total = mono.size
    length = settings.buffer_length

    if settings.enable_debug_logging:
        logger.debug(
            "Pre-analyzing clip (%.1fs, %d samples)", total / settings.sample_rate, total
        )

    results = []
    for start in range(0, total - length + 1, step):
        timestamp = start / settings.sample_rate
        results.append(estimator.estimate(mono[start:start + length], timestamp, settings))

        if settings.enable_debug_logging and len(results) % PROGRESS_LOG_EVERY == 0:
            logger.debug(
                "Pre-analysis progress: %.1f%% (%d points)",
                start / total * 100.0,
                len(results),
            )

    if settings.enable_debug_logging:
        logger.debug("Pre-analysis complete: %d data points", len(results))
    return results
