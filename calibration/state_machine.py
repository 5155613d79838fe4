import logging

logger = logging.getLogger(__name__)


class CalibrationStateMachine:
    """
    One-second tick phase machine for a guided calibration:

      phases: "prep" → "speak" → "pause" → next phrase → ... → "finished"

    The session also finishes once `total_seconds` of speaking time have
    elapsed, even if phrases remain.
    """

    def __init__(
        self,
        phrases,
        prep_seconds: int = 3,
        phrase_seconds: int = 5,
        pause_seconds: int = 1,
        total_seconds: int = 30,
    ):
        self.phrases = list(phrases)
        self.prep_seconds_default = prep_seconds
        self.phrase_seconds_default = phrase_seconds
        self.pause_seconds_default = pause_seconds
        self.total_seconds = total_seconds

        self.index = 0
        self.phase = "prep" if self.phrases else "finished"

        self.prep_secs = self.prep_seconds_default
        self.phrase_secs = self.phrase_seconds_default
        self.pause_secs = self.pause_seconds_default

        self.elapsed_seconds = 0

    @property
    def current_phrase(self):
        if 0 <= self.index < len(self.phrases):
            return self.phrases[self.index]
        return None

    @property
    def progress(self) -> float:
        if self.phase == "finished":
            return 1.0
        budget = min(self.total_seconds, len(self.phrases) * self.phrase_seconds_default)
        if budget <= 0:
            return 0.0
        return min(1.0, self.elapsed_seconds / budget)

    def is_capturing(self) -> bool:
        """True while pitch readings should be collected."""
        return self.phase == "speak"

    def tick(self):
        if self.phase == "finished" or self.current_phrase is None:
            self.phase = "finished"
            return {"event": "finished"}

        if self.phase == "prep":
            if self.prep_secs > 0:
                secs = self.prep_secs
                self.prep_secs -= 1
                return {"event": "prep_countdown", "secs": secs}
            return self._start_phrase()

        if self.phase == "speak":
            if self.phrase_secs > 0 and self.elapsed_seconds < self.total_seconds:
                self.phrase_secs -= 1
                self.elapsed_seconds += 1
                return {"event": "phrase_tick", "secs": self.phrase_secs}
            return self._phrase_done()

        if self.phase == "pause":
            if self.pause_secs > 0:
                self.pause_secs -= 1
                return {"event": "pause_tick"}
            return self._start_phrase()

        return {"event": "noop"}

    def _start_phrase(self):
        self.phase = "speak"
        self.phrase_secs = self.phrase_seconds_default
        logger.debug("calibration phrase %d/%d", self.index + 1, len(self.phrases))
        return {
            "event": "start_phrase",
            "phrase": self.current_phrase,
            "number": self.index + 1,
            "total": len(self.phrases),
        }

    def _phrase_done(self):
        self.index += 1
        if self.index >= len(self.phrases) or self.elapsed_seconds >= self.total_seconds:
            self.phase = "finished"
            return {"event": "finished"}

        self.phase = "pause"
        self.pause_secs = self.pause_seconds_default
        return {"event": "phrase_done", "next": self.current_phrase}

    def is_done(self):
        return self.phase == "finished"
