"""
Configuration and construction of StarBuffers.

A StarBufferConfig is a frozen, eagerly validated description of a buffer.
Builders are a fluent way of producing one:

    >>> buffer = coordinate_agnostic(0.02).fairly_banded().create(spectrogram)
    >>> for star in candidates:
    ...     buffer.offer_star(star)
    >>> constellation = ConstellationMap(buffer.flush())

Banding wraps the builder it is called on: `evenly_spread_in_time(d)
.evenly_banded(4)` splits the budget over 4 bands, then spreads each band's
share over time.

The density factor is "retained stars per spectrogram cell": every strategy
starts from a budget of `density * frame_count * bin_count` for the
spectrogram handed to create(), then splits it over its buckets.
"""

import functools
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Optional

from constellation.bands import BandLayout, FrequencyBandTable
from constellation.buffers import (
    CoordinateAgnosticStarBuffer,
    EvenFrequencyBandsStarBuffer,
    EvenlySpreadInFrequencyStarBuffer,
    EvenlySpreadInTimeStarBuffer,
    ManualFrequencyBandsStarBuffer,
)
from constellation.constants import (
    DEFAULT_STAR_DENSITY_FACTOR,
    FAIR_BAND_SIZES,
    FAIR_BAND_WEIGHTS,
    TIME_WINDOW_FRAMES,
)
from constellation.errors import ConfigurationError
from constellation.stars import Bounds

logger = logging.getLogger(__name__)

COORDINATE_AGNOSTIC = "coordinate_agnostic"
EVENLY_SPREAD_IN_TIME = "evenly_spread_in_time"
EVENLY_SPREAD_IN_FREQUENCY = "evenly_spread_in_frequency"
EVEN_FREQUENCY_BANDS = "even_frequency_bands"
MANUAL_FREQUENCY_BANDS = "manual_frequency_bands"

BANDED_STRATEGIES = frozenset({EVEN_FREQUENCY_BANDS, MANUAL_FREQUENCY_BANDS})
STRATEGIES = frozenset({COORDINATE_AGNOSTIC, EVENLY_SPREAD_IN_TIME, EVENLY_SPREAD_IN_FREQUENCY}) | BANDED_STRATEGIES


def _check_density(value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"star density factor must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"star density factor must be positive, got {value}")
    return float(value)


def _check_window(value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise ConfigurationError(f"time window must be a positive number of frames, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class StarBufferConfig:
    """
    Everything needed to build a StarBuffer for a given spectrogram.

    Attributes:
        strategy: one of STRATEGIES.
        star_density_factor: retained stars per spectrogram cell.
        time_window_frames: frames per bucket, used by evenly_spread_in_time.
        bands: band layout, required by (and only allowed for) banded strategies.
        inner: strategy applied inside each band. Defaults to coordinate
            agnostic. Its own density factor is ignored; a band's budget is
            its weighted share of the outer budget.
    """

    strategy: str
    star_density_factor: float = DEFAULT_STAR_DENSITY_FACTOR
    time_window_frames: int = TIME_WINDOW_FRAMES
    bands: Optional[BandLayout] = None
    inner: Optional["StarBufferConfig"] = None

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown strategy {self.strategy!r}, valid options: {sorted(STRATEGIES)}"
            )
        object.__setattr__(self, "star_density_factor", _check_density(self.star_density_factor))
        object.__setattr__(self, "time_window_frames", _check_window(self.time_window_frames))

        if self.strategy in BANDED_STRATEGIES:
            if self.bands is None:
                raise ConfigurationError(f"{self.strategy} requires a band layout")
            if self.inner is None:
                object.__setattr__(self, "inner", StarBufferConfig(COORDINATE_AGNOSTIC, self.star_density_factor))
        elif self.bands is not None or self.inner is not None:
            raise ConfigurationError(f"{self.strategy} does not take bands")


def _build(config, bounds, budget):
    if config.strategy == COORDINATE_AGNOSTIC:
        return CoordinateAgnosticStarBuffer(bounds, budget)
    if config.strategy == EVENLY_SPREAD_IN_TIME:
        return EvenlySpreadInTimeStarBuffer(bounds, budget, config.time_window_frames)
    if config.strategy == EVENLY_SPREAD_IN_FREQUENCY:
        return EvenlySpreadInFrequencyStarBuffer(bounds, budget)

    table = FrequencyBandTable.from_layout(config.bands, bounds.bin_count)
    buffer_cls = EvenFrequencyBandsStarBuffer if config.strategy == EVEN_FREQUENCY_BANDS else ManualFrequencyBandsStarBuffer
    return buffer_cls(bounds, budget, table, functools.partial(_build, config.inner))


def create_star_buffer(config, spectrogram):
    """
    Binds a configuration to a spectrogram (or its Bounds).

    Raises ConfigurationError if the spectrogram has no frames or no bins.
    """
    bounds = spectrogram if isinstance(spectrogram, Bounds) else spectrogram.bounds
    if bounds.frame_count < 1 or bounds.bin_count < 1:
        raise ConfigurationError(
            f"cannot bind a star buffer to an empty spectrogram "
            f"({bounds.frame_count} frames x {bounds.bin_count} bins)"
        )

    budget = config.star_density_factor * bounds.area
    buffer = _build(config, bounds, budget)
    logger.debug(
        "Created %s star buffer: %d frames x %d bins, budget %.1f, capacity %d",
        config.strategy, bounds.frame_count, bounds.bin_count, budget, buffer.capacity,
    )
    return buffer


class Builder:
    """Fluent StarBufferConfig construction. Each setter validates immediately."""

    def __init__(self, strategy, star_density_factor=DEFAULT_STAR_DENSITY_FACTOR,
                 time_window_frames=TIME_WINDOW_FRAMES):
        self.strategy = strategy
        self.time_window_frames = _check_window(time_window_frames)
        self.star_density_factor(star_density_factor)

    @property
    def density(self):
        return self._star_density_factor

    def star_density_factor(self, star_density_factor):
        self._star_density_factor = _check_density(star_density_factor)
        return self

    def evenly_banded(self, num_bands):
        """Splits the frequency axis into `num_bands` equal, equally weighted bands."""
        return BandedBuilder(EVEN_FREQUENCY_BANDS, BandLayout.even(num_bands), self)

    def manually_banded(self, band_sizes, band_weights):
        """
        Splits the frequency axis into bands covering the given fractions of
        it, starting at the lowest bin, with the given relative weights.
        """
        return BandedBuilder(MANUAL_FREQUENCY_BANDS, BandLayout(band_sizes, band_weights), self)

    def fairly_banded(self):
        return self.manually_banded(FAIR_BAND_SIZES, FAIR_BAND_WEIGHTS)

    def config(self):
        return StarBufferConfig(self.strategy, self.density, self.time_window_frames)

    def create(self, spectrogram):
        return create_star_buffer(self.config(), spectrogram)


class BandedBuilder(Builder):
    """Builds a banded buffer whose bands are filled by `parent`'s strategy."""

    def __init__(self, strategy, layout, parent):
        self.layout = layout
        self.parent = parent
        super().__init__(strategy, parent.density, parent.time_window_frames)

    @property
    def band_sizes(self):
        return self.layout.sizes

    @property
    def band_weights(self):
        return self.layout.normalized_weights

    def config(self):
        return StarBufferConfig(self.strategy, self.density, self.time_window_frames,
                                bands=self.layout, inner=self.parent.config())


def coordinate_agnostic(star_density_factor=DEFAULT_STAR_DENSITY_FACTOR):
    return Builder(COORDINATE_AGNOSTIC, star_density_factor)


def evenly_spread_in_time(star_density_factor=DEFAULT_STAR_DENSITY_FACTOR,
                          time_window_frames=TIME_WINDOW_FRAMES):
    return Builder(EVENLY_SPREAD_IN_TIME, star_density_factor, time_window_frames)


def evenly_spread_in_frequency(star_density_factor=DEFAULT_STAR_DENSITY_FACTOR):
    return Builder(EVENLY_SPREAD_IN_FREQUENCY, star_density_factor)
