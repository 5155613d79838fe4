# conftest.py
import logging

import numpy as np
import pytest

from analysis.pitch import PitchEstimator, PitchObservation
from analysis.settings import AnalysisSettings


@pytest.fixture
def settings():
    """Default analysis settings: 44.1 kHz, 4096-sample frames, 80-800 Hz."""
    return AnalysisSettings()


@pytest.fixture
def estimator():
    """Fresh estimator so window caches never leak between tests."""
    return PitchEstimator()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def quiet_logging(caplog):
    caplog.set_level(logging.INFO)
    yield


def make_observations(freqs, confidence=0.9, level=0.2, step=0.1):
    """Observation sequence from a list of frequencies (0 = silent)."""
    return [
        PitchObservation(i * step, float(f), confidence if f > 0 else 0.0, level)
        for i, f in enumerate(freqs)
    ]
