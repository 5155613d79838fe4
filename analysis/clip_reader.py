# analysis/clip_reader.py
import logging
from pathlib import Path

import librosa
import numpy as np

logger = logging.getLogger(__name__)


def read_clip(path, sample_rate=None):
    """
    Load an audio file for batch analysis.

    Returns (samples, channels, sample_rate) where samples is a float32
    (frames, channels) array in [-1, 1]. Pass sample_rate to resample;
    None keeps the file's native rate.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"audio clip not found: {path}")

    y, sr = librosa.load(str(path), sr=sample_rate, mono=False)
    y = np.asarray(y, dtype=np.float32)

    # librosa returns (n,) for mono and (channels, n) otherwise
    if y.ndim == 1:
        samples = y[:, np.newaxis]
    else:
        samples = y.T

    channels = samples.shape[1]
    logger.debug(
        "Loaded %s: %d frames, %d channel(s), %d Hz", path, samples.shape[0], channels, sr
    )
    return samples, channels, int(sr)
