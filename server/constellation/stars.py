from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Star:
    """A candidate spectrogram peak.

    Attributes:
        time: frame index of the peak.
        frequency: frequency bin index of the peak.
        magnitude: peak intensity; higher is better.
    """

    time: int
    frequency: int
    magnitude: float

    @property
    def coordinates(self):
        return (self.time, self.frequency)


@dataclass(frozen=True)
class Bounds:
    """Frame/bin extent of a spectrogram, or of a region inside one."""

    frame_count: int
    bin_count: int
    frame_offset: int = 0
    bin_offset: int = 0

    @property
    def area(self):
        return self.frame_count * self.bin_count

    @property
    def frame_stop(self):
        return self.frame_offset + self.frame_count

    @property
    def bin_stop(self):
        return self.bin_offset + self.bin_count

    def contains(self, star):
        return (self.frame_offset <= star.time < self.frame_stop
                and self.bin_offset <= star.frequency < self.bin_stop)

    def frequency_slice(self, low, high):
        """Region covering bins [low, high) relative to this region's first bin."""
        return Bounds(self.frame_count, high - low,
                      frame_offset=self.frame_offset,
                      bin_offset=self.bin_offset + low)


class ConstellationMap:
    """
    The finalized set of retained stars, keyed by (time, frequency).

    Built from whatever StarBuffer.flush() returns. If the same coordinates
    show up more than once, the first star seen is kept.
    """

    def __init__(self, stars=()):
        self._stars = {}
        for star in stars:
            self._stars.setdefault(star.coordinates, star)

    def __len__(self):
        return len(self._stars)

    def __iter__(self):
        return iter(self._stars.values())

    def __contains__(self, item):
        if isinstance(item, Star):
            return self._stars.get(item.coordinates) == item
        return tuple(item) in self._stars

    def get(self, time, frequency):
        return self._stars.get((time, frequency))

    def sorted_by_time(self):
        """Stars ordered by time, then frequency."""
        return sorted(self._stars.values(), key=lambda s: (s.time, s.frequency))

    def to_array(self):
        """
        Returns a float array of shape (n, 3) with columns
        (time, frequency, magnitude), ordered by time then frequency.
        """
        stars = self.sorted_by_time()
        if not stars:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([(s.time, s.frequency, s.magnitude) for s in stars],
                        dtype=np.float64)
