# Star retention parameters
DEFAULT_STAR_DENSITY_FACTOR = 0.02  # retained stars per spectrogram cell (frame x bin)

# "Fair" banding: favors the second band, where hearing is most sensitive
FAIR_BAND_SIZES = (0.05, 0.15, 0.40)    # fractions of the frequency axis
FAIR_BAND_WEIGHTS = (0.1, 0.7, 0.2)     # relative importance, normalized on use

TIME_WINDOW_FRAMES = 8       # frames per bucket for time-spread buffers
BAND_SIZE_TOLERANCE = 1e-9   # slack when checking that band sizes sum to <= 1.0

# Spectrogram parameters
WINDOW_SIZE = 4096           # FFT window length (samples)
HOP_SIZE = 1024              # hop size (samples)
MAX_FREQUENCY_HZ = 5000.0    # bins at or above this frequency are discarded

# Constellation hashing parameters
FANOUT = 10                  # number of target pairings per anchor
MAX_DELTA_FRAMES = 64        # max pairing time gap in frames
