# analysis/settings.py
from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Parameters shared by every pitch analysis call.

    Validated once at construction; per-frame code trusts these values.
    """

    min_frequency: float = 80.0
    max_frequency: float = 800.0
    correlation_threshold: float = 0.1
    sample_rate: int = 44100
    buffer_length: int = 4096

    # live smoothing
    history_size: int = 10
    use_smoothing: bool = True

    enable_debug_logging: bool = False

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.buffer_length <= 0:
            raise ValueError(f"buffer_length must be positive, got {self.buffer_length}")
        if self.min_frequency <= 0:
            raise ValueError(f"min_frequency must be positive, got {self.min_frequency}")
        if self.min_frequency >= self.max_frequency:
            raise ValueError(
                f"min_frequency ({self.min_frequency}) must be below "
                f"max_frequency ({self.max_frequency})"
            )
        if not 0.0 <= self.correlation_threshold <= 1.0:
            raise ValueError(
                f"correlation_threshold must be in [0, 1], got {self.correlation_threshold}"
            )
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")

    @property
    def min_period(self) -> int:
        return max(1, int(self.sample_rate // self.max_frequency))

    @property
    def max_period(self) -> int:
        return int(self.sample_rate // self.min_frequency)

    def period_fits(self, length: int) -> bool:
        """True when at least one candidate period fits in half of a `length` frame."""
        return self.min_period < int(length) // 2

    @property
    def searchable(self) -> bool:
        return self.period_fits(self.buffer_length)
