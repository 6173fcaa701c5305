"""
Bounded, magnitude-ranked star retention shared by every StarBuffer.

A Bucket keeps the strongest `capacity` stars it has been offered. Ties on
magnitude go to the star offered first, so replaying the same offers in the
same order always leaves the same stars behind.

Offering coordinates the bucket already holds upgrades the held star when
the new one is strictly stronger.
"""

import heapq
import math
import threading


def round_half_up(value):
    """Rounds .5 away from zero for positive values (round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def capacity_for(budget):
    """Bucket capacity for a (possibly fractional) star budget. Never below 1."""
    return max(1, round_half_up(budget))


class Bucket:
    """
    Holds at most `capacity` stars in a min-heap keyed by (magnitude, -sequence).

    The heap root is always the weakest held star: lowest magnitude, and
    among equal magnitudes the most recently offered one.
    """

    def __init__(self, capacity):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._heap = []
        self._held = {}
        self._sequence = 0
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._heap)

    def offer(self, star):
        """
        Offers a star to the bucket.

        Returns True if the star is now held, False if it was rejected.
        """
        with self._lock:
            entry = (star.magnitude, -self._sequence, star)
            held = self._held.get(star.coordinates)
            if held is not None:
                # Same coordinates: the stronger star stays, the earlier one on ties
                if star.magnitude <= held[0]:
                    return False
                self._sequence += 1
                self._heap.remove(held)
                self._heap.append(entry)
                heapq.heapify(self._heap)
                self._held[star.coordinates] = entry
                return True

            self._sequence += 1

            if len(self._heap) < self.capacity:
                heapq.heappush(self._heap, entry)
                self._held[star.coordinates] = entry
                return True

            weakest = self._heap[0][2]
            if star.magnitude <= weakest.magnitude:
                return False

            heapq.heapreplace(self._heap, entry)
            del self._held[weakest.coordinates]
            self._held[star.coordinates] = entry
            return True

    def weakest(self):
        with self._lock:
            return self._heap[0][2] if self._heap else None

    def snapshot(self):
        """Held stars, strongest first."""
        with self._lock:
            return self._ordered()

    def drain(self):
        """Returns the held stars, strongest first, and empties the bucket."""
        with self._lock:
            stars = self._ordered()
            self._heap = []
            self._held = {}
            self._sequence = 0
            return stars

    def _ordered(self):
        return [entry[2] for entry in sorted(self._heap, reverse=True)]
