from __future__ import annotations

import importlib.util
import unittest

import numpy as np

from point_cloud_formatter.core import Point, PointCloud


@unittest.skipUnless(importlib.util.find_spec("pyvista") is not None, "pyvista is required")
class TestPyvistaAdapter(unittest.TestCase):
    def test_faces_and_colors_survive(self) -> None:
        from point_cloud_formatter.adapters.pyvista_adapter import from_polydata, to_polydata

        cloud = PointCloud.from_points(
            [Point(0, 0, 0, 1, 2, 3, 4), Point(1, 0, 0), Point(1, 1, 0), Point(0, 1, 0)],
            faces=[(0, 1, 2), (0, 2, 3, 1)],
        )

        poly = to_polydata(cloud)
        self.assertEqual(poly.n_points, 4)
        self.assertEqual(poly.n_cells, 2)

        back = from_polydata(poly)
        np.testing.assert_allclose(back.xyz, cloud.xyz)
        np.testing.assert_array_equal(back.rgb, cloud.rgb)
        np.testing.assert_array_equal(back.alpha, cloud.alpha)
        self.assertEqual(back.faces, cloud.faces)

    def test_point_only_cloud(self) -> None:
        from point_cloud_formatter.adapters.pyvista_adapter import from_polydata, to_polydata

        cloud = PointCloud.with_default_colors([[0, 0, 0], [1, 2, 3]])
        back = from_polydata(to_polydata(cloud))

        self.assertEqual(len(back), 2)
        self.assertEqual(back.faces, [])

    def test_empty_cloud(self) -> None:
        from point_cloud_formatter.adapters.pyvista_adapter import to_polydata

        self.assertEqual(to_polydata(PointCloud.empty()).n_points, 0)


if __name__ == "__main__":
    unittest.main()
