from __future__ import annotations

import math
import unittest

import numpy as np

from point_cloud_formatter.core import Point, PointCloud


class TestPoint(unittest.TestCase):
    def test_defaults_are_white_and_transparent(self) -> None:
        p = Point(1.0, 2.0, 3.0)
        self.assertEqual((p.r, p.g, p.b, p.a), (255, 255, 255, 0))

    def test_validity(self) -> None:
        self.assertTrue(Point(0, 0, 0).is_valid())
        self.assertFalse(Point(math.nan, 0, 0).is_valid())
        self.assertFalse(Point(0, 0, math.inf).is_valid())


class TestPointCloud(unittest.TestCase):
    def test_from_points_keeps_storage_order(self) -> None:
        pts = [Point(0, 0, 0, 1, 2, 3, 4), Point(5, 6, 7)]
        cloud = PointCloud.from_points(pts, faces=[[1, 0]])

        self.assertEqual(len(cloud), 2)
        self.assertEqual(list(cloud), pts)
        self.assertEqual(cloud[1], Point(5, 6, 7))
        self.assertEqual(cloud.faces, [(1, 0)])

    def test_empty(self) -> None:
        cloud = PointCloud.empty()
        self.assertEqual(len(cloud), 0)
        self.assertEqual(cloud.xyz.shape, (0, 3))
        self.assertEqual(cloud.n_valid, 0)

    def test_column_length_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            PointCloud(xyz=[[0, 0, 0], [1, 1, 1]], rgb=[[0, 0, 0]], alpha=[0, 0])

    def test_valid_mask(self) -> None:
        cloud = PointCloud.with_default_colors([[0, 0, 0], [math.nan, 0, 0], [0, -math.inf, 0]])
        np.testing.assert_array_equal(cloud.valid_mask(), [True, False, False])
        self.assertEqual(cloud.n_valid, 1)

    def test_without_invalid_reindexes_faces(self) -> None:
        cloud = PointCloud.with_default_colors(
            [[0, 0, 0], [math.nan, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]],
            faces=[(0, 2, 3), (2, 3, 4, 0), (0, 1, 2), ()],
        )

        kept = cloud.without_invalid()

        self.assertEqual(len(kept), 4)
        self.assertEqual(kept.faces, [(0, 1, 2), (1, 2, 3, 0), ()])

    def test_without_invalid_legacy_keeps_faces(self) -> None:
        cloud = PointCloud.with_default_colors([[0, 0, 0], [math.nan, 0, 0], [1, 0, 0]], faces=[(0, 1, 2)])

        kept = cloud.without_invalid(reindex_faces=False)

        self.assertEqual(len(kept), 2)
        self.assertEqual(kept.faces, [(0, 1, 2)])

    def test_without_invalid_is_noop_when_all_valid(self) -> None:
        # one-based indices pass through untouched when nothing is dropped
        cloud = PointCloud.with_default_colors([[0, 0, 0], [1, 0, 0], [0, 1, 0]], faces=[(1, 2, 3)])
        self.assertEqual(cloud.without_invalid().faces, [(1, 2, 3)])

    def test_out_of_range_face_cannot_be_reindexed(self) -> None:
        cloud = PointCloud.with_default_colors([[0, 0, 0], [math.nan, 0, 0]], faces=[(0, 5, 1)])
        with self.assertRaises(ValueError):
            cloud.without_invalid()


if __name__ == "__main__":
    unittest.main()
