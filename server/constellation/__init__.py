"""Star retention buffers for constellation-map audio fingerprinting."""

from constellation.builders import (
    Builder,
    BandedBuilder,
    StarBufferConfig,
    coordinate_agnostic,
    create_star_buffer,
    evenly_spread_in_frequency,
    evenly_spread_in_time,
)
from constellation.buffers import StarBuffer
from constellation.errors import ConfigurationError
from constellation.spectrogram import Spectrogram
from constellation.stars import Bounds, ConstellationMap, Star

__version__ = "0.1.0"
__all__ = [
    "BandedBuilder",
    "Bounds",
    "Builder",
    "ConfigurationError",
    "ConstellationMap",
    "Spectrogram",
    "Star",
    "StarBuffer",
    "StarBufferConfig",
    "coordinate_agnostic",
    "create_star_buffer",
    "evenly_spread_in_frequency",
    "evenly_spread_in_time",
]
