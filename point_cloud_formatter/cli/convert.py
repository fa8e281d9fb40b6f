from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from ..config import FORMAT_SUFFIXES
from ..core import MalformedFormatError
from ..obj_faces import normalize_face_indices
from ..off_io import load_off


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="point-cloud-formatter",
        description="Convert point clouds and meshes between OFF, PCD, PLY, OBJ and VTP.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_convert = sub.add_parser(
        "convert",
        help="Convert a file; the output name is the input name plus the target suffix.",
    )
    p_convert.add_argument("input", help="Input file (.off/.pcd/.ply/.obj/.vtp).")
    p_convert.add_argument("--to", required=True, choices=sorted(FORMAT_SUFFIXES), help="Target format.")
    p_convert.add_argument("-o", "--output", help="Explicit output path.")

    p_fix = sub.add_parser(
        "fix-faces",
        help="Rewrite OBJ face records in place so every group reads p/p/p.",
    )
    p_fix.add_argument("input", help="OBJ file to rewrite.")

    p_info = sub.add_parser("info", help="Print point and face counts of an OFF file.")
    p_info.add_argument("input", help="OFF or COFF file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "convert":
        # open3d and pyvista are only needed here
        from ..converters import convert

        try:
            out = convert(args.input, args.to, args.output)
        except (OSError, ValueError) as exc:
            print(f"[ERROR] {exc}")
            return 1
        print(f"[OK] Wrote {out}")
        return 0

    if args.command == "fix-faces":
        try:
            ok = normalize_face_indices(args.input)
        except MalformedFormatError as exc:
            print(f"[ERROR] {exc}")
            return 1
        return 0 if ok else 1

    try:
        cloud, colored = load_off(args.input)
    except (OSError, MalformedFormatError) as exc:
        print(f"[ERROR] {exc}")
        return 1
    print(f"Format: {'COFF' if colored else 'OFF'}")
    print(f"Points: {len(cloud)} ({cloud.n_valid} valid)")
    print(f"Faces:  {len(cloud.faces)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
