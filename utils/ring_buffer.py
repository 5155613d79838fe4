import numpy as np


class CircularAudioBuffer:
    """
    Fixed-size sample buffer for continuous capture. Once full, new samples
    overwrite the oldest ones.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"buffer size must be positive, got {size}")
        self._size = int(size)
        self._data = np.zeros(self._size, dtype=np.float32)
        self._write = 0
        self._written = 0

    def add_samples(self, samples):
        if samples is None:
            return
        samples = np.asarray(samples, dtype=np.float32).ravel()
        n = samples.size
        if n == 0:
            return

        self._written += n
        if n >= self._size:
            # only the newest `size` samples survive
            self._data[:] = samples[-self._size:]
            self._write = 0
            return

        end = self._write + n
        if end <= self._size:
            self._data[self._write:end] = samples
        else:
            first = self._size - self._write
            self._data[self._write:] = samples[:first]
            self._data[:n - first] = samples[first:]
        self._write = end % self._size

    def add_sample(self, sample: float):
        self._data[self._write] = sample
        self._write = (self._write + 1) % self._size
        self._written += 1

    def get_last_samples(self, count: int) -> np.ndarray:
        """
        Return up to `count` of the newest samples, oldest first.
        A non-positive or oversized count means the whole buffer.
        """
        if count <= 0 or count > self._size:
            count = self._size
        count = min(count, self.current_size)
        if count == 0:
            return np.zeros(0, dtype=np.float32)

        idx = (self._write - count + np.arange(count)) % self._size
        return self._data[idx]

    def get_all_data(self) -> np.ndarray:
        return self.get_last_samples(self._size)

    def clear(self):
        self._data.fill(0.0)
        self._write = 0
        self._written = 0

    @property
    def buffer_size(self) -> int:
        return self._size

    @property
    def current_size(self) -> int:
        return min(self._written, self._size)

    @property
    def is_full(self) -> bool:
        return self._written >= self._size

    @property
    def has_data(self) -> bool:
        return self._written > 0

    @property
    def fill_percentage(self) -> float:
        return self.current_size / self._size
