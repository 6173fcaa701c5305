import numpy as np
from scipy import signal

from constellation.constants import HOP_SIZE, MAX_FREQUENCY_HZ, WINDOW_SIZE
from constellation.stars import Bounds


class Spectrogram:
    """
    Magnitude spectrogram shaped (n_bins, n_frames), rows are frequency
    bins from low to high and columns are time frames.

    Star buffers only look at its bounds; the magnitudes are there for the
    extractor that scans it.
    """

    def __init__(self, magnitudes, times=None, frequencies=None):
        magnitudes = np.asarray(magnitudes, dtype=np.float64)
        if magnitudes.ndim != 2:
            raise ValueError(f"Spectrogram must be 2D, got shape {magnitudes.shape}")
        self.magnitudes = magnitudes
        self.times = times
        self.frequencies = frequencies

    @classmethod
    def from_samples(cls, samples, sample_rate,
                     window_size=WINDOW_SIZE,
                     hop_size=HOP_SIZE,
                     max_frequency=MAX_FREQUENCY_HZ):
        """
        Computes a magnitude spectrogram with a Hamming window.

        Frequencies at or above max_frequency are cut off. Returns an empty
        (0-bin) spectrogram if no bin is below the limit.
        """
        hamming_window = np.hamming(window_size)
        freqs, times, spec = signal.spectrogram(
            samples, fs=sample_rate, window=hamming_window,
            nperseg=window_size, noverlap=window_size - hop_size, mode='magnitude'
        )
        spec = np.abs(spec)

        valid_idx = np.where(freqs < max_frequency)[0]
        max_bin = valid_idx[-1] + 1 if valid_idx.size else 0
        return cls(spec[:max_bin, :], times=times, frequencies=freqs[:max_bin])

    @property
    def bin_count(self):
        return self.magnitudes.shape[0]

    @property
    def frame_count(self):
        return self.magnitudes.shape[1]

    @property
    def bounds(self):
        return Bounds(self.frame_count, self.bin_count)

    def magnitude_at(self, time, frequency):
        return float(self.magnitudes[frequency, time])
