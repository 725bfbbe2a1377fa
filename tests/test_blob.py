"""
Tests for Skin Blob Module
===========================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handseg.geometry.points import ORIGIN, Point
from handseg.segmentation.blob import SEARCH_RANGE, SkinBlob, merge
from handseg.segmentation.passes import assign_point


def make_blob(min_point, max_point, size=1):
    """Blob with an explicit bounding box."""
    min_point, max_point = Point(*min_point), Point(*max_point)
    return SkinBlob(min_point=min_point, max_point=max_point,
                    mean_point=min_point.midpoint(max_point), size=size)


class TestSkinBlob:
    """Test suite for SkinBlob."""

    def test_seed(self):
        """A seeded blob is a single point."""
        blob = SkinBlob.seed(Point(5, 5))

        assert blob.min_point == blob.max_point == blob.mean_point == Point(5, 5)
        assert blob.size == 1
        assert blob.area == 0
        assert blob.merge_radius == SEARCH_RANGE

    def test_accepts_within_radius(self):
        """Points within search range of a seed are accepted."""
        blob = SkinBlob.seed(Point(5, 5))

        assert blob.accepts(Point(6, 5))
        assert blob.accepts(Point(7, 5))
        assert not blob.accepts(Point(8, 5))

    def test_merge_grows_box(self):
        """Merging stretches the box and counts the point."""
        blob = merge(SkinBlob.seed(Point(5, 5)), Point(7, 3))

        assert blob.min_point == Point(5, 3)
        assert blob.max_point == Point(7, 5)
        assert blob.size == 2
        assert blob.area == 4

    def test_merge_is_pure(self):
        """The original blob is untouched by merge."""
        seed = SkinBlob.seed(Point(1, 1))
        seed.merge(Point(2, 2))

        assert seed.size == 1

    def test_test_point(self):
        """test_point returns the grown blob or None."""
        blob = SkinBlob.seed(Point(0, 0))

        grown = blob.test_point(Point(1, 1))
        assert grown is not None and grown.size == 2
        assert blob.test_point(Point(10, 10)) is None

    def test_merge_radius_tracks_box(self):
        """Radius is half the diagonal plus the search range."""
        blob = make_blob((0, 0), (6, 8))

        assert blob.median_point == Point(3, 4)
        assert blob.merge_radius == pytest.approx(5 + SEARCH_RANGE)
        assert blob.accepts(Point(3, 4 + 7))
        assert not blob.accepts(Point(3, 4 + 7.5))

    def test_add_to_mean(self):
        """Rolling mean over the added points, seed excluded."""
        blob = SkinBlob.seed(Point(0, 0))
        points = [Point(2, 4), Point(4, 8), Point(9, 0)]
        for point in points:
            blob = blob.add_to_mean(point)

        assert blob.sample_size == 3
        assert blob.mean_point.x == pytest.approx(5.0)
        assert blob.mean_point.y == pytest.approx(4.0)

    def test_add_points_matches_sequential(self):
        """Batch mean update equals adding points one at a time."""
        rng = np.random.default_rng(7)
        xs = rng.integers(0, 320, size=40)
        ys = rng.integers(0, 240, size=40)

        start = SkinBlob.seed(Point(3, 3)).add_to_mean(Point(10, 20))
        sequential = start
        for x, y in zip(xs, ys):
            sequential = sequential.add_to_mean(Point(float(x), float(y)))
        batched = start.add_points_to_mean(xs, ys)

        assert batched.sample_size == sequential.sample_size == 41
        assert batched.mean_point.x == pytest.approx(sequential.mean_point.x)
        assert batched.mean_point.y == pytest.approx(sequential.mean_point.y)

    def test_add_points_empty(self):
        """An empty batch leaves the blob unchanged."""
        blob = SkinBlob.seed(Point(1, 2))
        assert blob.add_points_to_mean([], []) is blob

    def test_test_width(self):
        """Width only grows."""
        blob = SkinBlob.seed(Point(0, 0)).test_width(12)

        assert blob.width == 12
        assert blob.test_width(4).width == 12
        assert blob.test_width(20).width == 20

    def test_strictly_contains(self):
        """Box edges are excluded."""
        blob = make_blob((0, 0), (10, 10))

        assert blob.strictly_contains(Point(5, 5))
        assert not blob.strictly_contains(Point(0, 5))
        assert not blob.strictly_contains(Point(5, 10))

    def test_outranks(self):
        """Outranking needs both area and size."""
        big = make_blob((0, 0), (10, 10), size=50)
        bigger_box = make_blob((0, 0), (20, 20), size=10)

        assert big.outranks(big)
        assert not bigger_box.outranks(big)
        assert not big.outranks(bigger_box)

    def test_flipped(self):
        """Mirroring keeps the box and mean but swaps their rows."""
        blob = make_blob((2, 0), (8, 5), size=12).add_to_mean(Point(4, 1)).test_width(6)

        flipped = blob.flipped(10)

        assert flipped.min_point == Point(2, 4)
        assert flipped.max_point == Point(8, 9)
        assert flipped.mean_point == Point(4, 8)
        assert flipped.area == blob.area
        assert (flipped.size, flipped.sample_size, flipped.width) == (12, 1, 6)
        assert flipped.flipped(10) == blob


class TestAssignPoint:
    """Test suite for blob assignment."""

    def test_seeds_first_blob(self):
        """With no blobs the point seeds one; the dominant blob stays."""
        largest = SkinBlob.seed(ORIGIN)
        blobs, new_largest = assign_point([], Point(4, 4), largest)

        assert len(blobs) == 1
        assert blobs[0].min_point == Point(4, 4)
        assert new_largest is largest

    def test_first_match_wins(self):
        """Only the earliest accepting blob grows."""
        a = SkinBlob.seed(Point(0, 0))
        b = SkinBlob.seed(Point(2, 0))

        blobs, _ = assign_point([a, b], Point(1, 0), SkinBlob.seed(ORIGIN))

        assert blobs[0].size == 2
        assert blobs[1] is b

    def test_prunes_small_rejecting_blobs(self):
        """A tiny blob that rejects the point is dropped."""
        tiny = SkinBlob.seed(Point(0, 0))
        big = make_blob((40, 40), (60, 60), size=100)

        blobs, largest = assign_point([tiny, big], Point(50, 50), SkinBlob.seed(ORIGIN))

        assert len(blobs) == 1
        assert blobs[0].size == 101
        assert largest == blobs[0]

    def test_keeps_large_rejecting_blobs(self):
        """A large rejecting blob survives and a new blob is seeded."""
        big = make_blob((40, 40), (60, 60), size=100)

        blobs, _ = assign_point([big], Point(0, 0), SkinBlob.seed(ORIGIN))

        assert blobs == [big, SkinBlob.seed(Point(0, 0))]

    def test_dominant_needs_area_and_size(self):
        """A growing blob with fewer points does not replace the dominant one."""
        dominant = make_blob((0, 0), (10, 10), size=50)
        wide = make_blob((20, 20), (40, 40), size=10)

        blobs, largest = assign_point([wide], Point(30, 30), dominant)

        assert blobs[0].size == 11
        assert largest is dominant


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
