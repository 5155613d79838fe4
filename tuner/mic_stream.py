# tuner/mic_stream.py
import logging
import queue
from typing import Any, List, Optional

import numpy as np
import sounddevice as sd

logger = logging.getLogger(__name__)


class MicStream:
    """
    Captures microphone audio with a sounddevice input stream.

    The audio callback only downmixes and enqueues blocks. All analysis
    happens in process_pending(), on whichever thread drives the session,
    so the tracker, its listeners and the calibration buffer are never
    touched from the audio thread.
    """

    def __init__(
        self,
        tracker,
        analysis_interval: float = 0.1,
        device: Optional[Any] = None,
        blocksize: int = 1024,
        max_blocks: int = 256,
    ) -> None:
        self.tracker = tracker
        self.analysis_interval = float(analysis_interval)
        self.device = device
        self.blocksize = int(blocksize)
        self.max_blocks = int(max_blocks)
        self.stream: Optional[sd.InputStream] = None

        self.blocks: "queue.Queue[np.ndarray]" = queue.Queue(maxsize=self.max_blocks)
        self.dropped_blocks = 0

        self.sample_rate = int(tracker.settings.sample_rate)
        self.samples_seen = 0
        self._last_analysis = None
        self.is_running = False

    @property
    def stream_time(self) -> float:
        return self.samples_seen / self.sample_rate

    # -------------------------
    # Audio callback (fast)
    # -------------------------
    def audio_callback(
        self, indata: np.ndarray, _frames: int, _time_info: Any, status: Any
    ) -> None:
        """Sounddevice callback: downmix and enqueue, nothing else."""
        try:
            if status:
                logger.debug("input stream status: %s", status)

            data = np.asarray(indata, dtype=np.float32)
            # sounddevice reuses indata, so always hand over a copy
            mono = data.mean(axis=1) if data.ndim == 2 else data.ravel().copy()

            try:
                self.blocks.put_nowait(mono)
            except queue.Full:
                # drop the oldest block so the stream stays current
                self.dropped_blocks += 1
                try:
                    self.blocks.get_nowait()
                    self.blocks.put_nowait(mono)
                except (queue.Empty, queue.Full):
                    pass
        except Exception:  # noqa: BLE001
            # never raise into the audio thread
            logger.exception("MicStream audio callback failed")

    # -------------------------
    # Consumer side
    # -------------------------
    def process_pending(self) -> List:
        """
        Drain captured blocks on the calling thread: feed the tracker and
        analyze once per `analysis_interval` of stream time.

        Returns the observations the tracker produced.
        """
        produced = []
        while True:
            try:
                block = self.blocks.get_nowait()
            except queue.Empty:
                break

            self.tracker.feed(block)
            self.samples_seen += int(block.size)

            now = self.stream_time
            if self._last_analysis is None or now - self._last_analysis >= self.analysis_interval:
                self._last_analysis = now
                obs = self.tracker.analyze(now)
                if obs is not None:
                    produced.append(obs)
        return produced

    def start(self) -> None:
        if self.is_running:
            return

        self.tracker.reset()
        self.blocks = queue.Queue(maxsize=self.max_blocks)
        self.dropped_blocks = 0
        self.samples_seen = 0
        self._last_analysis = None

        self.stream = sd.InputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
            blocksize=self.blocksize,
            device=self.device,
            callback=self.audio_callback,
        )
        self.stream.start()
        self.is_running = True
        logger.info("Microphone stream started at %d Hz", self.sample_rate)

    def stop(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop()
                self.stream.close()
            finally:
                self.stream = None
        if self.is_running:
            logger.info(
                "Microphone stream stopped (%d block(s) dropped)", self.dropped_blocks
            )
        self.is_running = False
