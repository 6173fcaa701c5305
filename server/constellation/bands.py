"""
Weighted partition of the frequency axis.

A BandLayout is the configuration (fractions of the axis and relative
weights). A FrequencyBandTable is that layout resolved against a concrete
number of frequency bins.
"""

import bisect
import numbers
from dataclasses import dataclass

import numpy as np

from constellation.constants import BAND_SIZE_TOLERANCE, FAIR_BAND_SIZES, FAIR_BAND_WEIGHTS
from constellation.errors import ConfigurationError
from constellation.retention import round_half_up


@dataclass(frozen=True)
class BandLayout:
    """
    Band sizes (fractions of the frequency axis, positive, summing to at
    most 1.0) and band weights (non-negative, normalized when resolved).
    """

    sizes: tuple
    weights: tuple

    def __post_init__(self):
        sizes = tuple(float(s) for s in self.sizes)
        weights = tuple(float(w) for w in self.weights)
        object.__setattr__(self, "sizes", sizes)
        object.__setattr__(self, "weights", weights)

        if len(sizes) != len(weights):
            raise ConfigurationError(
                f"bandSizes and bandWeights differ in length ({len(sizes)} != {len(weights)})"
            )
        if not sizes:
            raise ConfigurationError("at least one band is required")
        if any(not np.isfinite(s) or s <= 0 for s in sizes):
            raise ConfigurationError(f"band sizes must be positive, got {sizes}")
        if any(not np.isfinite(w) or w < 0 for w in weights):
            raise ConfigurationError(f"band weights must be non-negative, got {weights}")
        if sum(weights) <= 0:
            raise ConfigurationError("at least one band weight must be positive")
        if sum(sizes) > 1.0 + BAND_SIZE_TOLERANCE:
            raise ConfigurationError(f"band sizes sum to {sum(sizes):.4f}, above 1.0")

    @classmethod
    def even(cls, num_bands):
        if isinstance(num_bands, bool) or not isinstance(num_bands, numbers.Integral) or num_bands < 1:
            raise ConfigurationError(f"number of bands must be a positive integer, got {num_bands!r}")
        num_bands = int(num_bands)
        return cls((1.0 / num_bands,) * num_bands, (1.0,) * num_bands)

    @classmethod
    def fair(cls):
        return cls(FAIR_BAND_SIZES, FAIR_BAND_WEIGHTS)

    @property
    def normalized_weights(self):
        total = sum(self.weights)
        return tuple(w / total for w in self.weights)


@dataclass(frozen=True)
class FrequencyBand:
    """Bins [low, high) of the frequency axis and the band's share of the budget."""

    index: int
    low: int
    high: int
    size: float
    weight: float

    @property
    def bin_count(self):
        return self.high - self.low

    def __contains__(self, frequency):
        return self.low <= frequency < self.high


class FrequencyBandTable:
    """Ordered, non-overlapping bands starting at bin 0."""

    def __init__(self, bands):
        self.bands = tuple(bands)
        self._highs = [band.high for band in self.bands]

    @classmethod
    def from_layout(cls, layout, bin_count):
        """
        Resolves a layout against `bin_count` bins.

        Boundaries come from the cumulative sizes so rounding never drifts;
        when sizes sum to 1.0 the last band ends exactly at bin_count.
        Bands may end up empty on very narrow spectrograms.
        """
        cumulative = np.cumsum(layout.sizes) * bin_count
        highs = [min(bin_count, round_half_up(edge)) for edge in cumulative]
        if abs(sum(layout.sizes) - 1.0) <= BAND_SIZE_TOLERANCE:
            highs[-1] = bin_count

        bands = []
        low = 0
        for i, (high, size, weight) in enumerate(zip(highs, layout.sizes, layout.normalized_weights)):
            high = max(low, high)
            bands.append(FrequencyBand(i, low, high, size, weight))
            low = high
        return cls(bands)

    def __len__(self):
        return len(self.bands)

    def __iter__(self):
        return iter(self.bands)

    @property
    def sizes(self):
        return tuple(band.size for band in self.bands)

    @property
    def weights(self):
        return tuple(band.weight for band in self.bands)

    @property
    def covered_bins(self):
        return self.bands[-1].high if self.bands else 0

    def band_for(self, frequency):
        """The band holding `frequency`, or None when it lies outside every band."""
        if frequency < 0:
            return None
        i = bisect.bisect_right(self._highs, frequency)
        if i >= len(self.bands):
            return None
        return self.bands[i]
