import numpy as np

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
# -------------------------
# Pitch to MIDI + note names
# -------------------------


def hz_to_midi(f0):
    """Convert frequency in Hz to MIDI note number."""
    if f0 is None or f0 <= 0:
        return None
    return int(round(69 + 12 * np.log2(f0 / 440.0)))


def freq_to_note_name(freq: float) -> str:
    if not freq or freq <= 0:
        return "N/A"
    midi = hz_to_midi(freq)
    if midi < 0 or midi >= 128:
        return "N/A"
    name = NOTE_NAMES[midi % 12]
    octave = midi // 12 - 1
    return f"{name}{octave}"


def describe_range(min_hz: float, max_hz: float) -> str:
    """Human-readable range, e.g. '119-301 Hz (A#2-D4)'."""
    return (
        f"{min_hz:.0f}-{max_hz:.0f} Hz "
        f"({freq_to_note_name(min_hz)}-{freq_to_note_name(max_hz)})"
    )
