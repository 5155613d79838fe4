import logging

from calibration.aggregator import InsufficientCalibrationData, reduce_calibration
from calibration.profile import VoiceProfile, VoiceType
from calibration.state_machine import CalibrationStateMachine

logger = logging.getLogger(__name__)

# Phrases chosen to pull the voice through its natural range
DEFAULT_PHRASES = (
    "Hello, how are you today?",
    "What a beautiful morning!",
    "I'm really excited about this.",
    "That sounds good to me.",
    "Oh no, that's terrible!",
    "Please count from one to ten.",
)

QUICK_TEST_PITCHES = [120.0, 140.0, 160.0, 180.0, 200.0, 220.0, 240.0, 260.0, 280.0, 300.0]


class VoiceRangeCalibrationSession:
    """
    Collects voiced pitch readings for one calibration run and reduces them
    into the user's VoiceProfile.

    The raw buffer belongs to this session only and is cleared on start().
    If the readings cannot produce a range, the profile falls back to the
    default voice type instead of guessing.
    """

    def __init__(
        self,
        profile=None,
        minimum_samples: int = 50,
        confidence_threshold: float = 0.0,
        phrases=DEFAULT_PHRASES,
        default_voice_type: VoiceType = VoiceType.MALE_ADULT,
    ):
        self.profile = profile if profile is not None else VoiceProfile()
        self.minimum_samples = int(minimum_samples)
        self.confidence_threshold = float(confidence_threshold)
        self.phrases = list(phrases)
        self.default_voice_type = default_voice_type

        self.pitches = []
        self.is_active = False
        self.state = None
        self.last_result = None
        self.last_error = None

    # ---------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------
    def start(self, **timing):
        """Clear the buffer and begin collecting. No-op if already running."""
        if self.is_active:
            return False

        self.pitches.clear()
        self.last_result = None
        self.last_error = None
        self.state = CalibrationStateMachine(self.phrases, **timing)
        self.is_active = True
        return True

    def abandon(self):
        """Drop everything collected so far; the profile is untouched."""
        self.pitches.clear()
        self.is_active = False
        self.state = None

    def skip(self):
        self.abandon()
        self.profile.apply_default(self.default_voice_type)
        logger.info("Calibration skipped, using defaults")

    # ---------------------------------------------------------
    # Collecting readings
    # ---------------------------------------------------------
    def add_observation(self, obs) -> bool:
        if not self.is_active or not obs.has_pitch:
            return False
        if obs.confidence < self.confidence_threshold:
            return False

        self.pitches.append(float(obs.frequency))
        return True

    def add_frequency(self, frequency: float) -> bool:
        if not self.is_active or frequency is None or frequency <= 0:
            return False

        self.pitches.append(float(frequency))
        return True

    @property
    def sample_count(self) -> int:
        return len(self.pitches)

    # ---------------------------------------------------------
    # Reduction
    # ---------------------------------------------------------
    def finish(self):
        """
        Reduce the collected readings into the profile.

        Returns the CalibrationResult, or None after falling back to the
        default profile when there was not enough usable data.
        """
        self.is_active = False

        try:
            result = reduce_calibration(self.pitches, self.minimum_samples)
        except InsufficientCalibrationData as e:
            self.last_error = e
            if e.reason == "too_many_outliers":
                logger.warning("Too many outliers removed (%d left)", e.sample_count)
            else:
                logger.warning(
                    "Insufficient samples: %d < %d", e.sample_count, e.required
                )
            self.profile.apply_default(self.default_voice_type)
            return None

        self.profile.apply_calibration_result(result)
        self.last_result = result
        logger.info(
            "Calibration complete: %.1f-%.1fHz (%d samples, quality: %.2f)",
            result.min_pitch,
            result.max_pitch,
            result.sample_count,
            result.quality,
        )
        return result

    def calibrate_from_observations(self, observations):
        """Run a whole session over an already-analyzed sequence."""
        self.start()
        for obs in observations:
            self.add_observation(obs)
        return self.finish()

    def quick_test(self):
        """Synthetic calibration for development without a microphone."""
        saved = self.minimum_samples
        self.minimum_samples = len(QUICK_TEST_PITCHES)
        try:
            self.start()
            for pitch in QUICK_TEST_PITCHES:
                self.add_frequency(pitch)
            result = self.finish()
        finally:
            self.minimum_samples = saved
        logger.info("Quick test calibration applied")
        return result

    # ---------------------------------------------------------
    # Driving from a tick loop
    # ---------------------------------------------------------
    def tick(self):
        """
        Advance the guided phrase timer by one second. When it reports
        "finished", the session is reduced and the result attached.
        """
        if self.state is None:
            return {"event": "idle"}

        event = self.state.tick()
        if event["event"] == "finished" and self.is_active:
            event["result"] = self.finish()
        return event

    def is_capturing(self) -> bool:
        return self.is_active and self.state is not None and self.state.is_capturing()
