from __future__ import annotations

from .core import Face, MalformedFormatError, Point, PointCloud
from .obj_faces import normalize_face_indices, normalize_face_line
from .off_io import load_faces_from_off, load_off, load_points_from_off, save_cloud_to_off

__version__ = "0.1.0"
