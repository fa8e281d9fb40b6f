from __future__ import annotations

import logging

import numpy as np
import open3d as o3d

from ..config import DEFAULT_ALPHA, DEFAULT_OBJ_PATH, DEFAULT_PCD_PATH, DEFAULT_PLY_PATH
from ..core import PointCloud
from ..obj_faces import normalize_face_indices

logger = logging.getLogger(__name__)

_EMPTY_PATH_MESSAGE = "Please put a file name with at least 1 (one) character!"


def _colors_from_unit(colors: np.ndarray, n: int) -> np.ndarray:
    if len(colors) != n:
        return np.full((n, 3), 255, dtype=np.int64)
    return np.rint(np.asarray(colors, dtype=np.float64) * 255.0).astype(np.int64)


def _colors_to_unit(rgb: np.ndarray) -> np.ndarray:
    return np.clip(rgb, 0, 255).astype(np.float64) / 255.0


# ----------------------------
# PointCloud <-> open3d geometry
# ----------------------------

def to_open3d(cloud: PointCloud) -> o3d.geometry.PointCloud:
    """Open3D point cloud with colors scaled to [0, 1]. Alpha and faces are not carried."""
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(cloud.xyz)
    if len(cloud):
        pcd.colors = o3d.utility.Vector3dVector(_colors_to_unit(cloud.rgb))
    return pcd


def from_open3d(pcd: o3d.geometry.PointCloud) -> PointCloud:
    xyz = np.asarray(pcd.points, dtype=np.float64).reshape(-1, 3)
    if not pcd.has_colors():
        return PointCloud.with_default_colors(xyz)
    n = xyz.shape[0]
    return PointCloud(
        xyz=xyz,
        rgb=_colors_from_unit(np.asarray(pcd.colors), n),
        alpha=np.full(n, DEFAULT_ALPHA, dtype=np.int64),
    )


def mesh_from_cloud(cloud: PointCloud) -> o3d.geometry.TriangleMesh:
    """Triangle mesh from a cloud whose faces are all triangles."""
    non_tri = [k for k, f in enumerate(cloud.faces) if len(f) != 3]
    if non_tri:
        raise ValueError(f"Only triangle faces can be stored in a triangle mesh (face {non_tri[0]} is not).")

    mesh = o3d.geometry.TriangleMesh()
    mesh.vertices = o3d.utility.Vector3dVector(cloud.xyz)
    tri = np.asarray(cloud.faces, dtype=np.int32).reshape(-1, 3)
    mesh.triangles = o3d.utility.Vector3iVector(tri)
    if len(cloud):
        mesh.vertex_colors = o3d.utility.Vector3dVector(_colors_to_unit(cloud.rgb))
    return mesh


def cloud_from_mesh(mesh: o3d.geometry.TriangleMesh) -> PointCloud:
    xyz = np.asarray(mesh.vertices, dtype=np.float64).reshape(-1, 3)
    faces = [tuple(int(i) for i in t) for t in np.asarray(mesh.triangles)]
    if not mesh.has_vertex_colors():
        return PointCloud.with_default_colors(xyz, faces)
    n = xyz.shape[0]
    return PointCloud(
        xyz=xyz,
        rgb=_colors_from_unit(np.asarray(mesh.vertex_colors), n),
        alpha=np.full(n, DEFAULT_ALPHA, dtype=np.int64),
        faces=faces,
    )


# ----------------------------
# PCD
# ----------------------------

def load_cloud_from_pcd(path: str) -> PointCloud:
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return PointCloud.empty()

    cloud = from_open3d(o3d.io.read_point_cloud(path))
    if len(cloud):
        logger.info("Loaded %d data points from %s", len(cloud), path)
    else:
        logger.error("Couldn't load the point cloud from %s", path)
    return cloud


def save_cloud_to_pcd(cloud: PointCloud, path: str = DEFAULT_PCD_PATH) -> bool:
    """ASCII PCD. Every point is written, including non-finite ones."""
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return False

    if not o3d.io.write_point_cloud(path, to_open3d(cloud), write_ascii=True):
        logger.error("Open3D failed to write %s", path)
        return False
    logger.info("Saved %d data points to %s", len(cloud), path)
    return True


# ----------------------------
# PLY
# ----------------------------

def load_cloud_from_ply(path: str) -> PointCloud:
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return PointCloud.empty()

    cloud = from_open3d(o3d.io.read_point_cloud(path))
    logger.info("Loaded %d data points from %s", len(cloud), path)
    return cloud


def save_cloud_to_ply(cloud: PointCloud, path: str = DEFAULT_PLY_PATH) -> bool:
    """PLY point cloud; points with a NaN or infinite coordinate are removed first."""
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return False

    pcd = to_open3d(cloud)
    pcd = pcd.remove_non_finite_points(remove_nan=True, remove_infinite=True)
    if not o3d.io.write_point_cloud(path, pcd, write_ascii=True):
        logger.error("Open3D failed to write %s", path)
        return False
    logger.info("Saved %d data points to %s", len(pcd.points), path)
    return True


# ----------------------------
# OBJ (textured mesh)
# ----------------------------

def load_mesh_from_obj(path: str) -> o3d.geometry.TriangleMesh:
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return o3d.geometry.TriangleMesh()

    mesh = o3d.io.read_triangle_mesh(path)
    if mesh.is_empty():
        logger.error("Couldn't load the mesh from %s", path)
    else:
        logger.info("Loaded %d vertices and %d triangles from %s", len(mesh.vertices), len(mesh.triangles), path)
    return mesh


def save_mesh_to_obj(
    mesh: o3d.geometry.TriangleMesh,
    path: str = DEFAULT_OBJ_PATH,
    normalize_faces: bool = False,
) -> bool:
    """
    Write mesh as OBJ with its UVs and material.

    normalize_faces rewrites the written face records to p/p/p afterwards.
    """
    if not path:
        logger.error(_EMPTY_PATH_MESSAGE)
        return False

    if not o3d.io.write_triangle_mesh(path, mesh, write_triangle_uvs=True):
        logger.error("Open3D failed to write %s", path)
        return False
    logger.info("Saved %d vertices to %s", len(mesh.vertices), path)

    if normalize_faces:
        return normalize_face_indices(path)
    return True
