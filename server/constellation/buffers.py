"""
StarBuffer strategies.

Every strategy shares the Bucket retention core and only differs in how a
star is routed to a bucket:

    CoordinateAgnosticStarBuffer        one bucket for everything
    EvenlySpreadInTimeStarBuffer        one bucket per window of frames
    EvenlySpreadInFrequencyStarBuffer   one bucket per frequency bin
    EvenFrequencyBandsStarBuffer        one inner buffer per equal band
    ManualFrequencyBandsStarBuffer      one inner buffer per configured band

Buffers are thread safe. offer_star only locks the bucket it touches;
flush() drains each bucket under that bucket's lock, so a star offered while
a flush is running either lands in this flush or stays for the next one.
"""

import logging
import math
import numbers
from abc import ABC, abstractmethod

from constellation.retention import Bucket, capacity_for

logger = logging.getLogger(__name__)


def _is_index(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_valid(star):
    return (_is_index(star.time) and _is_index(star.frequency)
            and isinstance(star.magnitude, numbers.Real) and math.isfinite(star.magnitude))


class StarBuffer(ABC):
    """
    Fed candidate stars by an extractor, keeps the ones worth keeping.

    Candidates outside `bounds`, with non-integer coordinates or with a
    non-finite magnitude are dropped without error.
    """

    strategy = None

    def __init__(self, bounds):
        self.bounds = bounds

    def offer_star(self, star):
        """Offers a star. It may or may not be returned by the next flush()."""
        if not _is_valid(star) or not self.bounds.contains(star):
            return
        self._offer(star)

    def offer_stars(self, stars):
        for star in stars:
            self.offer_star(star)

    def flush(self):
        """
        Returns an iterator over the stars this buffer keeps, and empties
        the buffer so it can be fed a new scan.
        """
        stars = self._drain()
        logger.debug("%s flushed %d stars (capacity %d)", self.strategy, len(stars), self.capacity)
        return iter(stars)

    @property
    @abstractmethod
    def capacity(self):
        """Maximum number of stars a single flush can return."""

    @abstractmethod
    def _offer(self, star):
        pass

    @abstractmethod
    def _drain(self):
        pass


class BucketedStarBuffer(StarBuffer):
    """A StarBuffer backed directly by buckets; subclasses pick the bucket."""

    def __init__(self, bounds, capacities):
        super().__init__(bounds)
        self.buckets = [Bucket(capacity) for capacity in capacities]

    @property
    def capacity(self):
        return sum(bucket.capacity for bucket in self.buckets)

    @abstractmethod
    def bucket_index(self, star):
        pass

    def _offer(self, star):
        self.buckets[self.bucket_index(star)].offer(star)

    def _drain(self):
        stars = []
        for bucket in self.buckets:
            stars.extend(bucket.drain())
        return stars


class CoordinateAgnosticStarBuffer(BucketedStarBuffer):
    """Keeps the strongest stars wherever they are."""

    strategy = "coordinate_agnostic"

    def __init__(self, bounds, budget):
        super().__init__(bounds, [capacity_for(budget)])

    def bucket_index(self, star):
        return 0


class EvenlySpreadInTimeStarBuffer(BucketedStarBuffer):
    """
    Splits the time axis into windows of `window_frames` frames. Each window
    gets a share of the budget proportional to its length (the last window
    may be shorter).
    """

    strategy = "evenly_spread_in_time"

    def __init__(self, bounds, budget, window_frames):
        self.window_frames = window_frames
        frames = bounds.frame_count
        capacities = [
            capacity_for(budget * min(window_frames, frames - start) / frames)
            for start in range(0, frames, window_frames)
        ]
        super().__init__(bounds, capacities)

    def bucket_index(self, star):
        return (star.time - self.bounds.frame_offset) // self.window_frames


class EvenlySpreadInFrequencyStarBuffer(BucketedStarBuffer):
    """One bucket per frequency bin, all with the same share of the budget."""

    strategy = "evenly_spread_in_frequency"

    def __init__(self, bounds, budget):
        bins = bounds.bin_count
        super().__init__(bounds, [capacity_for(budget / bins)] * bins)

    def bucket_index(self, star):
        return star.frequency - self.bounds.bin_offset


class FrequencyBandsStarBuffer(StarBuffer):
    """
    Routes each star to the band holding its frequency and lets that band's
    inner buffer decide. Stars above the last band are dropped.

    `inner_factory(bounds, budget)` builds the buffer for one band; each band
    gets `band.weight * budget`.
    """

    def __init__(self, bounds, budget, band_table, inner_factory):
        super().__init__(bounds)
        self.band_table = band_table
        self.band_buffers = []
        for band in band_table:
            if band.bin_count == 0:
                self.band_buffers.append(None)
                continue
            region = bounds.frequency_slice(band.low, band.high)
            self.band_buffers.append(inner_factory(region, band.weight * budget))

    @property
    def capacity(self):
        return sum(buf.capacity for buf in self.band_buffers if buf is not None)

    def _offer(self, star):
        band = self.band_table.band_for(star.frequency - self.bounds.bin_offset)
        if band is None:
            return
        self.band_buffers[band.index].offer_star(star)

    def _drain(self):
        stars = []
        for buf in self.band_buffers:
            if buf is not None:
                stars.extend(buf._drain())
        return stars


class EvenFrequencyBandsStarBuffer(FrequencyBandsStarBuffer):
    strategy = "even_frequency_bands"


class ManualFrequencyBandsStarBuffer(FrequencyBandsStarBuffer):
    strategy = "manual_frequency_bands"
