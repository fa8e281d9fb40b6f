"""
Format conversion.

Each conversion pairs a loader with a saver. The destination name is the
source name with the target suffix appended ("scan.off" -> "scan.off.pcd").
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Optional

import pyvista as pv

from .adapters.open3d_adapter import (
    cloud_from_mesh,
    load_cloud_from_pcd,
    load_cloud_from_ply,
    load_mesh_from_obj,
    mesh_from_cloud,
    save_cloud_to_pcd,
    save_cloud_to_ply,
    save_mesh_to_obj,
)
from .adapters.pyvista_adapter import from_polydata, to_polydata
from .config import FORMAT_SUFFIXES
from .core import PointCloud
from .off_io import load_off, save_cloud_to_off

logger = logging.getLogger(__name__)


def _load_off(path: str) -> PointCloud:
    return load_off(path)[0]


def _load_obj(path: str) -> PointCloud:
    return cloud_from_mesh(load_mesh_from_obj(path))


def _load_vtp(path: str) -> PointCloud:
    return from_polydata(pv.read(path))


def _save_off(cloud: PointCloud, path: str) -> bool:
    return save_cloud_to_off(cloud, path=path)


def _save_obj(cloud: PointCloud, path: str) -> bool:
    return save_mesh_to_obj(mesh_from_cloud(cloud), path)


def _save_vtp(cloud: PointCloud, path: str) -> bool:
    if not path:
        logger.error("Please put a file name with at least 1 (one) character!")
        return False
    to_polydata(cloud).save(path)
    logger.info("Saved %d data points to %s", len(cloud), path)
    return True


LOADERS: Dict[str, Callable[[str], PointCloud]] = {
    "off": _load_off,
    "pcd": load_cloud_from_pcd,
    "ply": load_cloud_from_ply,
    "obj": _load_obj,
    "vtp": _load_vtp,
}

SAVERS: Dict[str, Callable[[PointCloud, str], bool]] = {
    "off": _save_off,
    "pcd": save_cloud_to_pcd,
    "ply": save_cloud_to_ply,
    "obj": _save_obj,
    "vtp": _save_vtp,
}


def detect_format(path: str) -> str:
    ext = os.path.splitext(path)[1].lower().lstrip(".")
    if ext not in LOADERS:
        raise ValueError(f"Unsupported input format {ext!r} for {path} (known: {', '.join(sorted(LOADERS))})")
    return ext


def convert(source: str, target_format: str, destination: Optional[str] = None) -> str:
    """
    Convert source into target_format and return the written path.

    destination defaults to source + the target suffix. Faces are kept when
    the target can hold them (off, obj, vtp).
    """
    target_format = target_format.lower().lstrip(".")
    if target_format not in SAVERS:
        raise ValueError(f"Unsupported output format {target_format!r} (known: {', '.join(sorted(SAVERS))})")

    cloud = LOADERS[detect_format(source)](source)
    if destination is None:
        destination = source + FORMAT_SUFFIXES[target_format]

    if not SAVERS[target_format](cloud, destination):
        raise OSError(f"Failed to write {destination}")
    return destination


def convert_pcd_to_off(pcd_path: str) -> str:
    cloud = load_cloud_from_pcd(pcd_path)
    destination = pcd_path + FORMAT_SUFFIXES["off"]
    if not save_cloud_to_off(cloud, faces=[], path=destination):
        raise OSError(f"Failed to write {destination}")
    return destination


def convert_off_to_pcd(off_path: str) -> str:
    cloud, _ = load_off(off_path)
    destination = off_path + FORMAT_SUFFIXES["pcd"]
    if not save_cloud_to_pcd(cloud, destination):
        raise OSError(f"Failed to write {destination}")
    return destination
