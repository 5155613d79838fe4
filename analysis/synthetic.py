import numpy as np
from scipy.signal import lfilter


def sine_tone(freq, sr=44100, dur=0.1, amplitude=0.5):
    """
    Generate a pure sine tone.

    Parameters
    ----------
    freq : float
        Frequency in Hz.
    sr : int
        Sample rate.
    dur : float
        Duration in seconds.
    amplitude : float
        Peak amplitude, kept inside [-1, 1].

    Returns
    -------
    np.ndarray
        float32 samples.
    """
    t = np.arange(int(round(sr * dur))) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def _resonator(fc, sr, bw=100):
    r = np.exp(-np.pi * bw / sr)
    theta = 2 * np.pi * fc / sr
    a = [1, -2 * r * np.cos(theta), r ** 2]
    b = [1 - r]
    return b, a


def synthetic_voice(f0, sr=44100, dur=0.5, formants=(500, 1500), amplitude=0.5):
    """
    Source-filter voice: a harmonic-rich glottal source at f0 shaped by
    second-order formant resonators. Normalized to the given peak amplitude.
    """
    n = int(round(sr * dur))
    t = np.arange(n) / sr

    # sawtooth-like source: harmonics with 1/k rolloff below Nyquist
    source = np.zeros(n)
    k = 1
    while k * f0 < sr / 2 and k <= 20:
        source += np.sin(2 * np.pi * k * f0 * t) / k
        k += 1

    y = source
    for fc in formants:
        b, a = _resonator(fc, sr)
        y = lfilter(b, a, y)

    peak = np.max(np.abs(y))
    if peak > 0:
        y = y / peak * amplitude
    return y.astype(np.float32)


def pitch_glide(f_start, f_end, sr=44100, dur=1.0, amplitude=0.5):
    """Exponential sine sweep from f_start to f_end Hz."""
    n = int(round(sr * dur))
    t = np.arange(n) / sr
    k = np.log(f_end / f_start) / dur
    if k == 0:
        phase = 2 * np.pi * f_start * t
    else:
        phase = 2 * np.pi * f_start * (np.exp(k * t) - 1) / k
    return (amplitude * np.sin(phase)).astype(np.float32)


def interleave(*channels):
    """Interleave equal-length channels into a 1D array (L R L R ...)."""
    stacked = np.stack([np.asarray(c, dtype=np.float32) for c in channels], axis=1)
    return stacked.ravel()
