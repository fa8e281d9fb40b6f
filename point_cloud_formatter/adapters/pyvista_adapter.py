from __future__ import annotations

import numpy as np
import pyvista as pv

from ..config import DEFAULT_ALPHA
from ..core import PointCloud


def to_polydata(cloud: PointCloud) -> pv.PolyData:
    """
    Convert a PointCloud into PyVista PolyData.

    Colors and alpha travel as a uint8 "RGBA" point array. Empty faces have
    no geometry and are left out; a cloud without faces becomes vertex cells.
    """
    if len(cloud) == 0:
        return pv.PolyData()

    faces = [f for f in cloud.faces if len(f) > 0]
    if faces:
        padded = np.concatenate([np.asarray((len(f),) + tuple(f), dtype=np.int64) for f in faces])
        poly = pv.PolyData(cloud.xyz.copy(), faces=padded)
    else:
        poly = pv.PolyData(cloud.xyz.copy())

    rgba = np.column_stack([np.clip(cloud.rgb, 0, 255), np.clip(cloud.alpha, 0, 255)])
    poly.point_data["RGBA"] = rgba.astype(np.uint8)
    return poly


def from_polydata(mesh) -> PointCloud:
    """
    Convert any PyVista dataset into a PointCloud, keeping polygon faces as-is.
    """
    if isinstance(mesh, pv.MultiBlock):
        mesh = mesh.combine()

    if not isinstance(mesh, pv.PolyData):
        mesh = mesh.extract_surface()

    V = np.asarray(mesh.points, dtype=np.float64).reshape(-1, 3)

    # Faces (convert padded format)
    faces = []
    raw = np.asarray(mesh.faces, dtype=np.int64)
    i = 0
    while i < len(raw):
        n = int(raw[i])
        faces.append(tuple(int(v) for v in raw[i + 1 : i + 1 + n]))
        i += n + 1

    cloud = PointCloud.with_default_colors(V, faces)
    for name in ("RGBA", "RGB"):
        if name not in mesh.point_data:
            continue
        a = np.asarray(mesh.point_data[name])
        if a.ndim == 2 and a.shape[0] == len(V) and a.shape[1] in (3, 4):
            cloud.rgb = a[:, :3].astype(np.int64)
            if a.shape[1] == 4:
                cloud.alpha = a[:, 3].astype(np.int64)
            else:
                cloud.alpha = np.full(len(V), DEFAULT_ALPHA, dtype=np.int64)
            break
    return cloud
