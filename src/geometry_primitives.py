"""
Geometry primitives for compound-angle beam ends.

Provides the beam-local frame transform, the closed-form plane fit that
turns a mating-face normal into per-corner end shifts, the outward-wound
quad layout of a hexahedron, and the quadratic arcs used by profiled beams.
"""
import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np

from furniture import CornerSet

logger = logging.getLogger(__name__)

# Below this |Nx| the mating face is edge-on to the beam axis and the end
# is left square.
DEGENERATE_NX_TOLERANCE = 1e-3

# Quad order for each face of a hexahedron, keyed by corner name:
# L/R = local -X/+X end, T/B = top/bottom, F/B = front (-Z)/back (+Z).
# Every quad is counter-clockwise seen from outside the solid.
HEXAHEDRON_FACES: Dict[str, Tuple[str, str, str, str]] = {
    "top": ("RTB", "RTF", "LTF", "LTB"),
    "bottom": ("RBF", "RBB", "LBB", "LBF"),
    "front": ("LTF", "RTF", "RBF", "LBF"),
    "back": ("RTB", "LTB", "LBB", "RBB"),
    "left": ("LTB", "LTF", "LBF", "LBB"),
    "right": ("RTF", "RTB", "RBB", "RBF"),
}

FACE_ORDER = ("top", "bottom", "front", "back", "left", "right")


def as_vector3(value: Sequence[float]) -> np.ndarray:
    """Coerce a 3-sequence to a float ndarray."""
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vec.shape}")
    return vec


def unit(vec: Sequence[float]) -> np.ndarray:
    v = np.asarray(vec, dtype=float)
    n = float(np.linalg.norm(v))
    if n < 1e-12:
        return v.copy()
    return v / n


def rotation_about_y(angle: float) -> np.ndarray:
    """3x3 rotation matrix about the vertical (Y) axis."""
    c = float(np.cos(angle))
    s = float(np.sin(angle))
    return np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c],
    ])


def to_local_frame(world_vector: Sequence[float], yaw: float) -> np.ndarray:
    """Express a world-space direction in a beam's local frame.

    The beam frame is the world frame rotated by ``yaw`` about Y, so the
    inverse rotation is applied. A zero vector comes back as zero.
    """
    return rotation_about_y(-yaw) @ as_vector3(world_vector)


def end_corner_offsets(half_height: float, half_thickness: float) -> np.ndarray:
    """Fixed (y, z) offsets of an end face's corners, ordered TF, TB, BF, BB."""
    return np.array([
        [half_height, -half_thickness],
        [half_height, half_thickness],
        [-half_height, -half_thickness],
        [-half_height, half_thickness],
    ])


def plane_fit_shifts(
    local_normal: Sequence[float],
    offsets: np.ndarray,
    tolerance: float = DEGENERATE_NX_TOLERANCE,
) -> np.ndarray:
    """Along-axis shifts that put end-face corners on a mating plane.

    The plane has normal N and passes through the nominal end centre
    (x0, 0, 0), so Nx*x + Ny*y + Nz*z = Nx*x0 and each corner at (y, z)
    moves by -(Ny*y + Nz*z) / Nx.

    Args:
        local_normal: Mating-face normal in the beam's local frame.
        offsets: (K, 2) array of corner (y, z) offsets.
        tolerance: |Nx| below which the face counts as edge-on.

    Returns:
        (K,) shifts; all zero when the face is edge-on to the beam axis.
    """
    n = as_vector3(local_normal)
    yz = np.asarray(offsets, dtype=float).reshape(-1, 2)
    if abs(n[0]) < tolerance:
        logger.debug("Mating normal %s is edge-on to the beam axis; square end", n)
        return np.zeros(len(yz))
    return -(yz @ n[1:]) / n[0]


def signed_plane_distance(
    points: np.ndarray,
    normal: Sequence[float],
    origin: Sequence[float],
) -> np.ndarray:
    """Signed distances of points from the plane through origin with normal."""
    n = unit(normal)
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    return (pts - as_vector3(origin)) @ n


def hexahedron_corners(left: CornerSet, right: CornerSet) -> Dict[str, np.ndarray]:
    """Name the eight corners of a solid spanning two end faces."""
    return {
        "LTF": left.top_front,
        "LTB": left.top_back,
        "LBF": left.bottom_front,
        "LBB": left.bottom_back,
        "RTF": right.top_front,
        "RTB": right.top_back,
        "RBF": right.bottom_front,
        "RBB": right.bottom_back,
    }


def hexahedron_faces(
    left: CornerSet,
    right: CornerSet,
    faces: Sequence[str] = FACE_ORDER,
) -> List[Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]]:
    """Outward-wound quads for the requested faces, in the order given."""
    corners = hexahedron_corners(left, right)
    quads = []
    for name in faces:
        quads.append(tuple(corners[key] for key in HEXAHEDRON_FACES[name]))
    return quads


def quadratic_bezier(
    start: Sequence[float],
    control: Sequence[float],
    end: Sequence[float],
    segments: int,
) -> np.ndarray:
    """Sample a 2D quadratic Bezier curve.

    Returns:
        (segments + 1, 2) points from start to end inclusive.
    """
    p0 = np.asarray(start, dtype=float)
    p1 = np.asarray(control, dtype=float)
    p2 = np.asarray(end, dtype=float)
    t = np.linspace(0.0, 1.0, max(1, int(segments)) + 1)[:, None]
    return (1 - t) ** 2 * p0 + 2 * t * (1 - t) * p1 + t ** 2 * p2
