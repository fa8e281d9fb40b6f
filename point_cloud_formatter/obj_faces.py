"""
Face index normalization for Wavefront OBJ files.

Rewrites every face record so that the texture and normal sub-indices of each
vertex group equal its position index:

    f 1/2/3 4/5/6 7/8/9   ->   f 1/1/1 4/4/4 7/7/7

The file is rewritten in place through a temporary file in the same
directory. Only one writer per file is assumed.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from .config import FACE_MARKER, SUB_INDEX_SEPARATOR
from .core import MalformedFormatError

logger = logging.getLogger(__name__)


def _is_face_line(line: str) -> bool:
    tokens = line.split(maxsplit=1)
    return bool(tokens) and tokens[0] == FACE_MARKER


def normalize_face_line(line: str) -> str:
    """Return line with its face groups rendered as p/p/p; non-face lines are returned unchanged."""
    if not _is_face_line(line):
        return line

    body = line.rstrip("\r\n")
    ending = line[len(body):]

    indices = []
    for group in body.split()[1:]:
        if group.startswith("#"):
            break
        head = group.split(SUB_INDEX_SEPARATOR)[0]
        try:
            indices.append(int(head))
        except ValueError:
            raise ValueError(f"bad position index {head!r} in face group {group!r}") from None

    parts = [FACE_MARKER]
    parts.extend(SUB_INDEX_SEPARATOR.join([str(p)] * 3) for p in indices)
    return " ".join(parts) + ending


def normalize_face_indices(path: str) -> bool:
    """
    Rewrite the face records of an OBJ file in place.

    Returns False (and logs) if the file cannot be opened; the original is
    then left untouched. A malformed face raises MalformedFormatError, also
    leaving the original untouched.
    """
    try:
        src = open(path, "r", encoding="utf-8", errors="surrogateescape", newline="")
    except OSError as exc:
        logger.error("Unable to open file %s: %s", path, exc)
        return False

    directory = os.path.dirname(os.path.abspath(path))
    n_faces = 0
    with src:
        fd, tmp_path = tempfile.mkstemp(prefix=".faces-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as tmp:
                for line_no, line in enumerate(src, start=1):
                    if _is_face_line(line):
                        n_faces += 1
                        try:
                            line = normalize_face_line(line)
                        except ValueError as exc:
                            raise MalformedFormatError(path, line_no, str(exc)) from None
                    tmp.write(line)
        except Exception:
            os.unlink(tmp_path)
            raise

    try:
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.info("Normalized %d face record(s) in %s", n_faces, path)
    return True
