from __future__ import annotations

# Default output filenames, used as parameter defaults by the save functions
DEFAULT_PCD_PATH = "point_cloud.pcd"
DEFAULT_OFF_PATH = "point_cloud.off"
DEFAULT_OBJ_PATH = "point_cloud.obj"
DEFAULT_PLY_PATH = "point_cloud.ply"

# OFF tag lines
OFF_TAG = "OFF"
COFF_TAG = "COFF"

# Point defaults when the file carries no color (white, transparent)
DEFAULT_RGB = (255, 255, 255)
DEFAULT_ALPHA = 0

# Wavefront OBJ face records
FACE_MARKER = "f"
SUB_INDEX_SEPARATOR = "/"

# Suffix appended to the source filename by the converters
FORMAT_SUFFIXES = {
    "off": ".off",
    "pcd": ".pcd",
    "ply": ".ply",
    "obj": ".obj",
    "vtp": ".vtp",
}
