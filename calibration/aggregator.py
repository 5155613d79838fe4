# calibration/aggregator.py
from dataclasses import dataclass

import numpy as np

TRIM_FRACTION = 0.10
RANGE_BUFFER_FRACTION = 0.15
VOICE_FLOOR_HZ = 50.0
VOICE_CEILING_HZ = 800.0


class CalibrationError(Exception):
    pass


class InsufficientCalibrationData(CalibrationError):
    """
    Raised when a calibration buffer cannot produce a trustworthy range.

    reason is "insufficient_samples" (too few raw readings) or
    "too_many_outliers" (too few left after trimming).
    """

    def __init__(self, reason, sample_count, required):
        self.reason = reason
        self.sample_count = sample_count
        self.required = required
        super().__init__(f"{reason}: {sample_count} < {required}")


@dataclass(frozen=True)
class CalibrationResult:
    min_pitch: float
    max_pitch: float
    sample_count: int
    quality: float


def trim_outliers(frequencies, fraction=TRIM_FRACTION):
    """Sort ascending and drop round(n * fraction) readings from each tail."""
    ordered = np.sort(np.asarray(frequencies, dtype=float))
    remove = int(round(ordered.size * fraction))
    if remove == 0:
        return ordered
    return ordered[remove:ordered.size - remove]


def reduce_calibration(raw_frequencies, minimum_samples: int) -> CalibrationResult:
    """
    Turn raw per-frame pitch readings into a buffered voice range.

    The result does not depend on input order. Quality is the fraction of
    readings that survived trimming, so it stays below 1 whenever any
    trimming happens.
    """
    raw = np.asarray(raw_frequencies if raw_frequencies is not None else [], dtype=float)
    raw_count = raw.size

    if raw_count < minimum_samples:
        raise InsufficientCalibrationData("insufficient_samples", raw_count, minimum_samples)

    cleaned = trim_outliers(raw)
    if cleaned.size == 0 or cleaned.size < minimum_samples / 2:
        raise InsufficientCalibrationData(
            "too_many_outliers", int(cleaned.size), minimum_samples / 2
        )

    min_pitch = float(cleaned[0])
    max_pitch = float(cleaned[-1])
    spread = max_pitch - min_pitch

    buffered_min = max(VOICE_FLOOR_HZ, min_pitch - spread * RANGE_BUFFER_FRACTION)
    buffered_max = min(VOICE_CEILING_HZ, max_pitch + spread * RANGE_BUFFER_FRACTION)

    quality = float(np.clip(cleaned.size / raw_count, 0.0, 1.0))

    return CalibrationResult(
        min_pitch=float(buffered_min),
        max_pitch=float(buffered_max),
        sample_count=int(cleaned.size),
        quality=quality,
    )
