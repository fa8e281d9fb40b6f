"""
OFF / COFF text format.

    <OFF | COFF>
    <points> <faces> <edges>
    x y z [r g b a]          one line per point, color only under COFF
    n i0 i1 ... i(n-1)       one line per face

Reading produces points and faces in one pass. Writing always emits COFF,
drops points with a non-finite coordinate and writes an edge count of 0.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import COFF_TAG, DEFAULT_ALPHA, DEFAULT_OFF_PATH, DEFAULT_RGB, OFF_TAG
from .core import Face, MalformedFormatError, PointCloud

logger = logging.getLogger(__name__)


def _content_lines(f) -> Iterator[Tuple[int, List[str]]]:
    """Yield (1-based line number, tokens), skipping blank and comment lines."""
    for line_no, line in enumerate(f, start=1):
        tokens = line.split()
        if not tokens or tokens[0].startswith("#"):
            continue
        yield line_no, tokens


def _next_line(lines, path: str, what: str) -> Tuple[int, List[str]]:
    try:
        return next(lines)
    except StopIteration:
        raise MalformedFormatError(path, None, f"unexpected end of file while reading {what}") from None


def _parse_ints(tokens: Sequence[str], path: str, line_no: int) -> List[int]:
    try:
        return [int(t) for t in tokens]
    except ValueError:
        raise MalformedFormatError(path, line_no, f"expected integers, got {' '.join(tokens)!r}") from None


def load_off(path: str) -> Tuple[PointCloud, bool]:
    """
    Parse an OFF or COFF file.

    Returns the cloud (points and faces) and whether the file was tagged COFF.
    An empty path is logged and yields an empty cloud. Raises
    FileNotFoundError if the file is missing and MalformedFormatError when the
    body does not match its header.
    """
    if not path:
        logger.error("Please put a file name with at least 1 (one) character!")
        return PointCloud.empty(), False

    # undecodable bytes survive as surrogates; only numeric tokens are ever parsed
    with open(path, "r", encoding="utf-8-sig", errors="surrogateescape") as f:
        lines = _content_lines(f)

        line_no, tokens = _next_line(lines, path, "tag line")
        tag = " ".join(tokens)
        if tag not in (OFF_TAG, COFF_TAG):
            raise MalformedFormatError(path, line_no, f"unknown tag {tag!r}, expected {OFF_TAG} or {COFF_TAG}")
        colored = tag == COFF_TAG

        line_no, tokens = _next_line(lines, path, "counts")
        if len(tokens) != 3:
            raise MalformedFormatError(path, line_no, "expected '<points> <faces> <edges>'")
        n_points, n_faces, _n_edges = _parse_ints(tokens, path, line_no)
        if n_points < 0 or n_faces < 0:
            raise MalformedFormatError(path, line_no, "negative element count")

        row_len = 7 if colored else 3
        xyz = np.empty((n_points, 3), dtype=np.float64)
        rgb = np.tile(np.asarray(DEFAULT_RGB, dtype=np.int64), (n_points, 1))
        alpha = np.full(n_points, DEFAULT_ALPHA, dtype=np.int64)

        for i in range(n_points):
            line_no, tokens = _next_line(lines, path, f"point {i}")
            if len(tokens) != row_len:
                raise MalformedFormatError(
                    path, line_no, f"{tag} point row needs {row_len} values, got {len(tokens)}"
                )
            try:
                xyz[i] = [float(t) for t in tokens[:3]]
            except ValueError:
                raise MalformedFormatError(path, line_no, "bad coordinate") from None
            if colored:
                r, g, b, a = _parse_ints(tokens[3:], path, line_no)
                rgb[i] = (r, g, b)
                alpha[i] = a

        faces: List[Face] = []
        for k in range(n_faces):
            line_no, tokens = _next_line(lines, path, f"face {k}")
            values = _parse_ints(tokens[:1], path, line_no)
            n = values[0]
            if n < 0 or len(tokens) - 1 < n:
                raise MalformedFormatError(path, line_no, f"face declares {n} vertices, found {len(tokens) - 1}")
            # anything past the n indices is an optional per-face color
            faces.append(tuple(_parse_ints(tokens[1:1 + n], path, line_no)))

        extra = next(lines, None)
        if extra is not None:
            raise MalformedFormatError(path, extra[0], f"data after the {n_faces} declared faces")

    cloud = PointCloud(xyz=xyz, rgb=rgb, alpha=alpha, faces=faces)
    logger.debug("Loaded %d points and %d faces from %s", len(cloud), len(faces), path)
    return cloud, colored


def load_points_from_off(path: str) -> Tuple[PointCloud, bool]:
    """Point half of load_off; the returned cloud carries no faces."""
    cloud, colored = load_off(path)
    cloud.faces = []
    return cloud, colored


def load_faces_from_off(path: str) -> List[Face]:
    return load_off(path)[0].faces


def _format_coord(v) -> str:
    # shortest text that reads back as the same single precision value
    return np.format_float_positional(np.float32(v), unique=True, trim="-")


def save_cloud_to_off(
    cloud: PointCloud,
    faces: Optional[Sequence[Sequence[int]]] = None,
    path: str = DEFAULT_OFF_PATH,
    reindex_faces: bool = True,
) -> bool:
    """
    Write cloud as COFF. faces defaults to cloud.faces.

    Points with a non-finite coordinate are left out of the body and the
    count. With reindex_faces (default) faces are renumbered to match the
    written rows and faces touching a dropped point are omitted; with
    reindex_faces=False they are written exactly as given.

    Returns False without writing anything when path is empty.
    """
    if not path:
        logger.error("Please put a file name with at least 1 (one) character!")
        return False

    source = cloud if faces is None else PointCloud(cloud.xyz, cloud.rgb, cloud.alpha, list(faces))
    written = source.without_invalid(reindex_faces=reindex_faces)
    dropped_faces = len(source.faces) - len(written.faces)
    if dropped_faces:
        logger.warning("Omitting %d face(s) that reference removed points", dropped_faces)

    rgb = np.clip(written.rgb, 0, 255)
    alpha = np.clip(written.alpha, 0, 255)

    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(f"{COFF_TAG}\n")
        f.write(f"{len(written)} {len(written.faces)} 0\n")
        for (x, y, z), (r, g, b), a in zip(written.xyz, rgb, alpha):
            f.write(f"{_format_coord(x)} {_format_coord(y)} {_format_coord(z)} {int(r)} {int(g)} {int(b)} {int(a)}\n")
        for face in written.faces:
            f.write(" ".join(str(v) for v in (len(face), *face)) + "\n")

    logger.info("Saved %d data points to %s", len(written), path)
    return True
