from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_ALPHA, DEFAULT_RGB

# Ordered vertex indices into the owning point sequence. () is a valid empty face.
Face = Tuple[int, ...]


class MalformedFormatError(ValueError):
    """Structurally invalid geometry file."""

    def __init__(self, path: str, line_no: Optional[int], message: str) -> None:
        where = f"{path}:{line_no}" if line_no is not None else str(path)
        super().__init__(f"{where}: {message}")
        self.path = path
        self.line_no = line_no


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    z: float
    r: int = DEFAULT_RGB[0]
    g: int = DEFAULT_RGB[1]
    b: int = DEFAULT_RGB[2]
    a: int = DEFAULT_ALPHA

    def is_valid(self) -> bool:
        return bool(np.isfinite([self.x, self.y, self.z]).all())


@dataclass
class PointCloud:
    xyz: np.ndarray            # (N, 3) float64 positions, NaN marks a removed point
    rgb: np.ndarray            # (N, 3) int64 colors, stored as read
    alpha: np.ndarray          # (N,)   int64
    faces: List[Face] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz, dtype=np.float64).reshape(-1, 3)
        n = self.xyz.shape[0]
        self.rgb = np.asarray(self.rgb, dtype=np.int64).reshape(-1, 3)
        self.alpha = np.asarray(self.alpha, dtype=np.int64).reshape(-1)
        if self.rgb.shape[0] != n or self.alpha.shape[0] != n:
            raise ValueError(
                f"Column lengths differ: xyz={n}, rgb={self.rgb.shape[0]}, alpha={self.alpha.shape[0]}"
            )
        self.faces = [tuple(int(i) for i in f) for f in self.faces]

    @classmethod
    def empty(cls) -> "PointCloud":
        return cls.with_default_colors(np.empty((0, 3)))

    @classmethod
    def with_default_colors(cls, xyz, faces: Iterable[Sequence[int]] = ()) -> "PointCloud":
        xyz = np.asarray(xyz, dtype=np.float64).reshape(-1, 3)
        n = xyz.shape[0]
        return cls(
            xyz=xyz,
            rgb=np.tile(np.asarray(DEFAULT_RGB, dtype=np.int64), (n, 1)),
            alpha=np.full(n, DEFAULT_ALPHA, dtype=np.int64),
            faces=list(faces),
        )

    @classmethod
    def from_points(cls, points: Iterable[Point], faces: Iterable[Sequence[int]] = ()) -> "PointCloud":
        pts = list(points)
        if not pts:
            cloud = cls.empty()
            cloud.faces = [tuple(int(i) for i in f) for f in faces]
            return cloud
        return cls(
            xyz=[(p.x, p.y, p.z) for p in pts],
            rgb=[(p.r, p.g, p.b) for p in pts],
            alpha=[p.a for p in pts],
            faces=list(faces),
        )

    def __len__(self) -> int:
        return int(self.xyz.shape[0])

    def __getitem__(self, i: int) -> Point:
        x, y, z = (float(v) for v in self.xyz[i])
        r, g, b = (int(v) for v in self.rgb[i])
        return Point(x, y, z, r, g, b, int(self.alpha[i]))

    def __iter__(self) -> Iterator[Point]:
        for i in range(len(self)):
            yield self[i]

    def valid_mask(self) -> np.ndarray:
        """True for points whose three coordinates are all finite."""
        return np.isfinite(self.xyz).all(axis=1)

    @property
    def n_valid(self) -> int:
        return int(self.valid_mask().sum())

    def without_invalid(self, reindex_faces: bool = True) -> "PointCloud":
        """
        Drop points with a non-finite coordinate.

        With reindex_faces, faces are renumbered into the compacted index
        space and faces touching a dropped point are removed. Without it the
        faces are carried over untouched and may reference the wrong points.
        """
        mask = self.valid_mask()
        kept = PointCloud(
            xyz=self.xyz[mask],
            rgb=self.rgb[mask],
            alpha=self.alpha[mask],
            faces=list(self.faces),
        )
        if not reindex_faces or mask.all():
            return kept

        n = len(self)
        new_index = np.cumsum(mask) - 1
        faces: List[Face] = []
        for k, face in enumerate(self.faces):
            bad = [i for i in face if not 0 <= i < n]
            if bad:
                raise ValueError(f"Face {k} references vertex {bad[0]} outside 0..{n - 1}")
            if all(mask[i] for i in face):
                faces.append(tuple(int(new_index[i]) for i in face))
        kept.faces = faces
        return kept
