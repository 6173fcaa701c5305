import sys
import os
import unittest
import numpy as np

# Add parent directory to path so we can import constellation
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from constellation.retention import Bucket, capacity_for, round_half_up
from constellation.stars import Star


class TestCapacity(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.49), 2)

    def test_capacity_never_below_one(self):
        self.assertEqual(capacity_for(0.0), 1)
        self.assertEqual(capacity_for(0.2), 1)
        self.assertEqual(capacity_for(19.6), 20)


class TestBucket(unittest.TestCase):

    def test_accepts_until_full(self):
        bucket = Bucket(3)
        for i in range(3):
            self.assertTrue(bucket.offer(Star(i, 0, 1.0)))
        self.assertEqual(len(bucket), 3)

    def test_evicts_weakest_for_stronger_candidate(self):
        bucket = Bucket(2)
        bucket.offer(Star(0, 0, 1.0))
        bucket.offer(Star(1, 0, 3.0))
        self.assertTrue(bucket.offer(Star(2, 0, 2.0)))
        self.assertEqual([s.magnitude for s in bucket.snapshot()], [3.0, 2.0])
        self.assertEqual(bucket.weakest(), Star(2, 0, 2.0))

    def test_rejects_weaker_or_equal_candidate(self):
        bucket = Bucket(2)
        bucket.offer(Star(0, 0, 2.0))
        bucket.offer(Star(1, 0, 3.0))
        self.assertFalse(bucket.offer(Star(2, 0, 1.0)))
        self.assertFalse(bucket.offer(Star(3, 0, 2.0)))
        self.assertEqual(set(bucket.snapshot()), {Star(0, 0, 2.0), Star(1, 0, 3.0)})

    def test_ties_go_to_earliest_offered(self):
        bucket = Bucket(2)
        bucket.offer(Star(0, 0, 1.0))
        bucket.offer(Star(1, 0, 1.0))
        # Both held stars tie; the later one is evicted first
        bucket.offer(Star(2, 0, 5.0))
        self.assertEqual(set(bucket.snapshot()), {Star(0, 0, 1.0), Star(2, 0, 5.0)})

    def test_stronger_duplicate_replaces_held_star(self):
        bucket = Bucket(4)
        self.assertTrue(bucket.offer(Star(3, 7, 1.0)))
        self.assertTrue(bucket.offer(Star(3, 7, 9.0)))
        self.assertEqual(bucket.snapshot(), [Star(3, 7, 9.0)])
        self.assertEqual(len(bucket), 1)

    def test_weaker_or_equal_duplicate_rejected(self):
        bucket = Bucket(4)
        bucket.offer(Star(3, 7, 5.0))
        self.assertFalse(bucket.offer(Star(3, 7, 2.0)))
        self.assertFalse(bucket.offer(Star(3, 7, 5.0)))
        self.assertEqual(bucket.snapshot(), [Star(3, 7, 5.0)])

    def test_duplicate_replacement_when_full(self):
        bucket = Bucket(2)
        bucket.offer(Star(0, 0, 1.0))
        bucket.offer(Star(1, 0, 2.0))
        # Upgrading the weakest held star keeps the bucket at capacity
        self.assertTrue(bucket.offer(Star(0, 0, 3.0)))
        self.assertEqual(bucket.snapshot(), [Star(0, 0, 3.0), Star(1, 0, 2.0)])
        self.assertEqual(bucket.weakest(), Star(1, 0, 2.0))
        self.assertFalse(bucket.offer(Star(2, 0, 1.5)))
        self.assertTrue(bucket.offer(Star(2, 0, 2.5)))
        self.assertEqual(set(bucket.snapshot()), {Star(0, 0, 3.0), Star(2, 0, 2.5)})

    def test_quality_floor_with_repeated_coordinates(self):
        rng = np.random.default_rng(21)
        capacity = 8
        bucket = Bucket(capacity)
        rejected = []
        for i, magnitude in enumerate(rng.random(400)):
            star = Star(int(i % 30), 0, float(magnitude))
            full = len(bucket) == capacity
            if not bucket.offer(star) and full:
                rejected.append(star)

        held = {s.coordinates: s for s in bucket.snapshot()}
        self.assertEqual(len(held), capacity)
        floor = min(s.magnitude for s in held.values())
        elsewhere = [s for s in rejected if s.coordinates not in held]
        self.assertGreater(len(elsewhere), 0)
        self.assertGreaterEqual(floor, max(s.magnitude for s in elsewhere))
        # A rejected re-offer of held coordinates is covered by a stronger copy
        for star in rejected:
            if star.coordinates in held:
                self.assertGreaterEqual(held[star.coordinates].magnitude, star.magnitude)

    def test_evicted_coordinates_can_return(self):
        bucket = Bucket(1)
        bucket.offer(Star(0, 0, 1.0))
        bucket.offer(Star(1, 1, 2.0))
        self.assertTrue(bucket.offer(Star(0, 0, 3.0)))
        self.assertEqual(bucket.snapshot(), [Star(0, 0, 3.0)])

    def test_drain_empties_bucket(self):
        bucket = Bucket(2)
        bucket.offer(Star(0, 0, 1.0))
        bucket.offer(Star(1, 0, 2.0))
        self.assertEqual(bucket.drain(), [Star(1, 0, 2.0), Star(0, 0, 1.0)])
        self.assertEqual(len(bucket), 0)
        self.assertIsNone(bucket.weakest())
        self.assertTrue(bucket.offer(Star(0, 0, 1.0)))

    def test_rejects_non_positive_capacity(self):
        with self.assertRaises(ValueError):
            Bucket(0)

    def test_quality_floor(self):
        rng = np.random.default_rng(7)
        capacity = 10
        bucket = Bucket(capacity)
        rejected = []
        for i, magnitude in enumerate(rng.random(500)):
            star = Star(i, 0, float(magnitude))
            full = len(bucket) == capacity
            if not bucket.offer(star) and full:
                rejected.append(star)

        held = bucket.snapshot()
        self.assertEqual(len(held), capacity)
        self.assertGreater(len(rejected), 0)
        self.assertGreaterEqual(min(s.magnitude for s in held),
                                max(s.magnitude for s in rejected))


if __name__ == '__main__':
    unittest.main()
