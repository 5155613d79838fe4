# calibration/profile.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)

TARGET_RANGE_EXPANSION = 1.2
TARGET_FLOOR_HZ = 50.0
TARGET_CEILING_HZ = 600.0


class VoiceType(Enum):
    UNKNOWN = "unknown"
    AUTO = "auto"
    MALE_ADULT = "male_adult"
    FEMALE_ADULT = "female_adult"
    CHILD = "child"
    MALE_DEEP = "male_deep"
    FEMALE_LOW = "female_low"


# Hz ranges used until a calibration has run
DEFAULT_RANGES = {
    VoiceType.MALE_ADULT: (80.0, 250.0),
    VoiceType.FEMALE_ADULT: (120.0, 350.0),
    VoiceType.CHILD: (200.0, 500.0),
    VoiceType.MALE_DEEP: (60.0, 200.0),
    VoiceType.FEMALE_LOW: (100.0, 280.0),
}
FALLBACK_RANGE = (100.0, 300.0)


def detect_voice_type(min_pitch: float, max_pitch: float) -> VoiceType:
    """Bucket a calibrated range by its midpoint."""
    avg = (min_pitch + max_pitch) / 2.0

    if avg >= 300.0:
        return VoiceType.CHILD
    if avg >= 200.0:
        return VoiceType.FEMALE_ADULT
    if avg >= 150.0:
        return VoiceType.FEMALE_ADULT if max_pitch > 300.0 else VoiceType.MALE_ADULT
    if avg < 130.0:
        return VoiceType.MALE_DEEP
    return VoiceType.MALE_ADULT


@dataclass
class VoiceProfile:
    """Per-user voice range, overwritten by each calibration run."""

    calibrated_min_pitch: float = 100.0
    calibrated_max_pitch: float = 300.0
    calibration_sample_count: int = 0
    calibration_quality: float = 0.0
    calibration_date: str = ""
    detected_voice_type: VoiceType = VoiceType.UNKNOWN
    preferred_voice_type: VoiceType = VoiceType.AUTO
    target_min_pitch: float = 100.0
    target_max_pitch: float = 300.0

    @property
    def is_calibrated(self) -> bool:
        return (
            self.calibration_sample_count > 0
            and self.calibrated_max_pitch > self.calibrated_min_pitch
        )

    @property
    def effective_voice_type(self) -> VoiceType:
        if self.preferred_voice_type == VoiceType.AUTO:
            return self.detected_voice_type
        return self.preferred_voice_type

    def default_range(self):
        return DEFAULT_RANGES.get(self.effective_voice_type, FALLBACK_RANGE)

    @property
    def effective_min_pitch(self) -> float:
        return self.calibrated_min_pitch if self.is_calibrated else self.default_range()[0]

    @property
    def effective_max_pitch(self) -> float:
        return self.calibrated_max_pitch if self.is_calibrated else self.default_range()[1]

    def apply_calibration_result(self, result, now: datetime | None = None):
        self.calibrated_min_pitch = float(result.min_pitch)
        self.calibrated_max_pitch = float(result.max_pitch)
        self.calibration_sample_count = int(result.sample_count)
        self.calibration_quality = float(result.quality)
        self.calibration_date = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

        self.detected_voice_type = detect_voice_type(
            self.calibrated_min_pitch, self.calibrated_max_pitch
        )

        # target range starts out identical to the calibrated range
        self.target_min_pitch = self.calibrated_min_pitch
        self.target_max_pitch = self.calibrated_max_pitch

        logger.info(
            "Applied calibration %.1f-%.1fHz (%d samples, quality %.2f) -> %s",
            self.calibrated_min_pitch,
            self.calibrated_max_pitch,
            self.calibration_sample_count,
            self.calibration_quality,
            self.detected_voice_type.value,
        )

    def apply_default(self, voice_type: VoiceType = VoiceType.MALE_ADULT):
        """Fallback when calibration could not produce a range."""
        self.preferred_voice_type = voice_type
        logger.info("Using default voice range for %s", voice_type.value)

    def map_to_target_range(self, native_min: float, native_max: float):
        """
        Centre a reference speaker's range on this user's voice.

        The reference range is widened by TARGET_RANGE_EXPANSION and clamped
        to [TARGET_FLOOR_HZ, TARGET_CEILING_HZ].
        """
        user_center = (self.calibrated_min_pitch + self.calibrated_max_pitch) / 2.0
        mapped_range = (native_max - native_min) * TARGET_RANGE_EXPANSION

        self.target_min_pitch = max(TARGET_FLOOR_HZ, user_center - mapped_range / 2.0)
        self.target_max_pitch = min(TARGET_CEILING_HZ, user_center + mapped_range / 2.0)
        return self.target_min_pitch, self.target_max_pitch

    def to_dict(self):
        data = asdict(self)
        data["detected_voice_type"] = self.detected_voice_type.value
        data["preferred_voice_type"] = self.preferred_voice_type.value
        data["effective_min_pitch"] = self.effective_min_pitch
        data["effective_max_pitch"] = self.effective_max_pitch
        return data
