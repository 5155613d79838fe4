import argparse
import logging
import sys
import time

from analysis.clip_reader import read_clip
from analysis.noise_gate import AmbientNoiseGate
from analysis.pitch import PitchEstimator, pre_analyze_clip
from analysis.settings import AnalysisSettings
from analysis.smoothing import calculate_statistics, smooth_pitch_data
from calibration.profile import VoiceProfile
from calibration.session import VoiceRangeCalibrationSession
from utils.music_utils import describe_range

logger = logging.getLogger(__name__)


def device_arg(value):
    """sounddevice takes an int index or a (partial) device name."""
    try:
        return int(value)
    except ValueError:
        return value


def build_parser():
    p = argparse.ArgumentParser(
        prog="voice-range",
        description="Pitch tracking and voice-range calibration",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    def add_analysis_args(sp):
        sp.add_argument("clip", help="audio file to analyze")
        sp.add_argument("--interval", type=float, default=0.1,
                        help="seconds between analysis windows")
        sp.add_argument("--buffer-length", type=int, default=4096)
        sp.add_argument("--min-freq", type=float, default=80.0)
        sp.add_argument("--max-freq", type=float, default=800.0)
        sp.add_argument("--threshold", type=float, default=0.1,
                        help="minimum normalized correlation")

    analyze = sub.add_parser("analyze", help="pitch statistics for a clip")
    add_analysis_args(analyze)
    analyze.add_argument("--smooth", type=int, default=1,
                         help="moving-average window (frames)")

    calibrate = sub.add_parser("calibrate", help="calibrate a voice range from a clip")
    add_analysis_args(calibrate)
    calibrate.add_argument("--minimum-samples", type=int, default=50)

    listen = sub.add_parser("listen", help="guided calibration from the microphone")
    listen.add_argument("--minimum-samples", type=int, default=50)
    listen.add_argument("--sample-rate", type=int, default=44100)
    listen.add_argument("--device", type=device_arg, default=None,
                        help="input device index or name")

    sub.add_parser("quick-test", help="calibrate from built-in synthetic readings")
    return p


def _settings_from_args(args, sample_rate):
    return AnalysisSettings(
        min_frequency=args.min_freq,
        max_frequency=args.max_freq,
        correlation_threshold=args.threshold,
        sample_rate=sample_rate,
        buffer_length=args.buffer_length,
        enable_debug_logging=args.verbose,
    )


def _analyze_clip(args):
    samples, channels, sr = read_clip(args.clip)
    settings = _settings_from_args(args, sr)
    return pre_analyze_clip(samples, channels, settings, args.interval, PitchEstimator())


def _print_profile(profile, result):
    if result is None:
        print("Not enough usable pitch data; using default voice range "
              f"{describe_range(profile.effective_min_pitch, profile.effective_max_pitch)}")
        return
    print(f"Voice range: {describe_range(result.min_pitch, result.max_pitch)}")
    print(f"Voice type:  {profile.detected_voice_type.value}")
    print(f"Quality:     {result.quality * 100:.0f}%")
    print(f"Samples:     {result.sample_count}")


def cmd_analyze(args):
    observations = _analyze_clip(args)
    if args.smooth > 1:
        observations = smooth_pitch_data(observations, args.smooth)
    print(calculate_statistics(observations))
    return 0


def cmd_calibrate(args):
    observations = _analyze_clip(args)
    profile = VoiceProfile()
    session = VoiceRangeCalibrationSession(profile, minimum_samples=args.minimum_samples)
    result = session.calibrate_from_observations(observations)
    _print_profile(profile, result)
    return 0


def cmd_listen(args):
    from tuner.live_analyzer import LivePitchTracker
    from tuner.mic_stream import MicStream

    settings = AnalysisSettings(sample_rate=args.sample_rate,
                                enable_debug_logging=args.verbose)
    profile = VoiceProfile()
    session = VoiceRangeCalibrationSession(profile, minimum_samples=args.minimum_samples)
    tracker = LivePitchTracker(settings, noise_gate=AmbientNoiseGate())

    # runs on this thread only, from mic.process_pending()
    def collect(obs):
        if session.is_capturing():
            session.add_observation(obs)

    tracker.add_listener(collect)
    mic = MicStream(tracker, device=args.device)

    session.start()
    mic.start()
    try:
        while True:
            # audio captured since the last tick belongs to the current phase
            mic.process_pending()
            event = session.tick()
            if event["event"] == "start_phrase":
                print(f"Phrase {event['number']} of {event['total']}: {event['phrase']}")
            elif event["event"] == "finished":
                _print_profile(profile, event.get("result"))
                break
            time.sleep(1.0)
    except KeyboardInterrupt:
        session.abandon()
        print("Calibration abandoned")
    finally:
        mic.stop()
    return 0


def cmd_quick_test(_args):
    profile = VoiceProfile()
    session = VoiceRangeCalibrationSession(profile)
    _print_profile(profile, session.quick_test())
    return 0


COMMANDS = {
    "analyze": cmd_analyze,
    "calibrate": cmd_calibrate,
    "listen": cmd_listen,
    "quick-test": cmd_quick_test,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
