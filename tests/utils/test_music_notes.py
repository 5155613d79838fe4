from utils.music_utils import describe_range, freq_to_note_name, hz_to_midi


# ---------------------------------------------------------
# hz_to_midi tests
# ---------------------------------------------------------

def test_hz_to_midi_basic():
    assert hz_to_midi(440) == 69      # A4
    assert hz_to_midi(880) == 81      # A5
    assert hz_to_midi(220) == 57      # A3


def test_hz_to_midi_invalid_inputs():
    assert hz_to_midi(None) is None
    assert hz_to_midi(0) is None
    assert hz_to_midi(-10) is None


def test_hz_to_midi_fractional_rounding():
    midi = hz_to_midi(445)
    assert isinstance(midi, int)
    assert midi == 69


# ---------------------------------------------------------
# freq_to_note_name tests
# ---------------------------------------------------------

def test_freq_to_note_name_basic():
    assert freq_to_note_name(440.0) == "A4"
    assert freq_to_note_name(261.63) == "C4"
    assert freq_to_note_name(82.41) == "E2"


def test_freq_to_note_name_invalid():
    assert freq_to_note_name(0) == "N/A"
    assert freq_to_note_name(None) == "N/A"
    assert freq_to_note_name(1e-6) == "N/A"
    assert freq_to_note_name(20000.0) == "N/A"


def test_describe_range():
    assert describe_range(119.0, 301.0) == "119-301 Hz (A#2-D4)"
