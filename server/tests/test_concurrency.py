import sys
import os
import threading
import unittest
import concurrent.futures
import numpy as np

# Add parent directory to path so we can import constellation
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from constellation import Bounds, Star, coordinate_agnostic, evenly_spread_in_time

BOUNDS = Bounds(frame_count=160, bin_count=256)
N_THREADS = 8


def frame_range_stars(rng, start, stop, bins=256):
    # every cell of frames [start, stop), shuffled magnitudes
    stars = [Star(t, f, 0.0) for t in range(start, stop) for f in range(bins)]
    mags = rng.random(len(stars))
    return [Star(s.time, s.frequency, float(m)) for s, m in zip(stars, mags)]


class TestConcurrentOffers(unittest.TestCase):

    def _scan_in_parallel(self, buffer, chunks):
        barrier = threading.Barrier(len(chunks))

        def scan(chunk):
            barrier.wait()
            for star in chunk:
                buffer.offer_star(star)

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            futures = [executor.submit(scan, chunk) for chunk in chunks]
            for future in concurrent.futures.as_completed(futures):
                future.result()

    def test_disjoint_ranges_into_banded_buffer(self):
        rng = np.random.default_rng(5)
        frames = BOUNDS.frame_count // N_THREADS
        chunks = [frame_range_stars(rng, i * frames, (i + 1) * frames) for i in range(N_THREADS)]

        buffer = coordinate_agnostic(0.01).evenly_banded(4).create(BOUNDS)
        self._scan_in_parallel(buffer, chunks)
        result = list(buffer.flush())

        self.assertLessEqual(len(result), buffer.capacity)
        self.assertEqual(len(result), buffer.capacity)
        self.assertEqual(len({s.coordinates for s in result}), len(result))

    def test_result_matches_sequential_scan(self):
        # Distinct magnitudes make the retained set independent of interleaving
        rng = np.random.default_rng(9)
        frames = BOUNDS.frame_count // N_THREADS
        chunks = [frame_range_stars(rng, i * frames, (i + 1) * frames) for i in range(N_THREADS)]

        builder = evenly_spread_in_time(0.005, time_window_frames=16).fairly_banded()
        sequential = builder.create(BOUNDS)
        for chunk in chunks:
            sequential.offer_stars(chunk)
        parallel = builder.create(BOUNDS)
        self._scan_in_parallel(parallel, chunks)

        self.assertEqual(set(parallel.flush()), set(sequential.flush()))

    def test_flush_during_offers(self):
        rng = np.random.default_rng(13)
        frames = BOUNDS.frame_count // N_THREADS
        chunks = [frame_range_stars(rng, i * frames, (i + 1) * frames) for i in range(N_THREADS)]
        buffer = coordinate_agnostic(0.02).evenly_banded(2).create(BOUNDS)

        flushes = []
        done = threading.Event()

        def flusher():
            while not done.is_set():
                flushes.append(list(buffer.flush()))

        thread = threading.Thread(target=flusher)
        thread.start()
        try:
            self._scan_in_parallel(buffer, chunks)
        finally:
            done.set()
            thread.join()
        flushes.append(list(buffer.flush()))

        seen = set()
        for stars in flushes:
            self.assertLessEqual(len(stars), buffer.capacity)
            for star in stars:
                self.assertTrue(BOUNDS.contains(star))
                self.assertNotIn(star.coordinates, seen)
                seen.add(star.coordinates)


if __name__ == '__main__':
    unittest.main()
