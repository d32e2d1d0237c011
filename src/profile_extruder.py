"""
Profiled beams for the non-splayed path.

Arched and scalloped aprons keep a straight top edge and a curved underside
made of quadratic arcs. The outline is extruded straight through the
thickness; no mating-angle correction is involved.
"""
import logging
from typing import Tuple

import numpy as np
from shapely.geometry import Polygon

from furniture import BeamProfile, BeamSpec, CornerSet
from geometry_primitives import quadratic_bezier
from mesh_merge import MeshBuffer

logger = logging.getLogger(__name__)

ARCH_HEIGHT_RATIO = 0.15
SCALLOP_COUNT = 3
SCALLOP_DEPTH_RATIO = 0.1
DEFAULT_ARC_SEGMENTS = 16


def _end_drop(profile: BeamProfile, height: float) -> float:
    """How far the underside sits above -height/2 at the beam ends."""
    if profile is BeamProfile.ARCHED:
        return height * ARCH_HEIGHT_RATIO
    if profile is BeamProfile.SCALLOPED:
        return height * SCALLOP_DEPTH_RATIO
    return 0.0


def end_face_span(profile: BeamProfile, height: float) -> Tuple[float, float]:
    """(y_min, y_max) of the flat end faces of a profiled beam."""
    return (-height / 2 + _end_drop(profile, height), height / 2)


def bottom_edge(
    profile: BeamProfile,
    length: float,
    height: float,
    segments: int = DEFAULT_ARC_SEGMENTS,
) -> np.ndarray:
    """Underside points ordered from -length/2 to +length/2.

    Every arc has its control point above the midpoint of its chord, so X
    increases monotonically along the returned polyline.

    Returns:
        (K, 2) array of (x, y) points.
    """
    hl = length / 2
    hh = height / 2

    if profile is BeamProfile.ARCHED:
        arch = height * ARCH_HEIGHT_RATIO
        return quadratic_bezier(
            (-hl, -hh + arch), (0.0, -hh - arch * 0.5), (hl, -hh + arch), segments,
        )

    if profile is BeamProfile.SCALLOPED:
        depth = height * SCALLOP_DEPTH_RATIO
        width = length / SCALLOP_COUNT
        pieces = []
        for i in range(SCALLOP_COUNT):
            x0 = -hl + i * width
            x1 = x0 + width
            arc = quadratic_bezier(
                (x0, -hh + depth), ((x0 + x1) / 2, -hh - depth), (x1, -hh + depth),
                segments,
            )
            pieces.append(arc if i == 0 else arc[1:])
        return np.concatenate(pieces, axis=0)

    return np.array([[-hl, -hh], [hl, -hh]])


def profile_outline(
    profile: BeamProfile,
    length: float,
    height: float,
    segments: int = DEFAULT_ARC_SEGMENTS,
) -> Polygon:
    """2D outline of the beam's front face as a Shapely polygon."""
    bottom = bottom_edge(profile, length, height, segments)
    top = [(length / 2, height / 2), (-length / 2, height / 2)]
    return Polygon([tuple(p) for p in bottom] + top)


def extrude_profile(
    spec: BeamSpec,
    profile: BeamProfile,
    sink: MeshBuffer,
    segments: int = DEFAULT_ARC_SEGMENTS,
) -> Tuple[CornerSet, CornerSet]:
    """Extrude a profiled outline along local Z into ``sink``.

    The front and back faces, the top and the underside are split into one
    strip per underside segment so that neighbouring faces share edges.

    Returns:
        (left, right) end face corners, used to seat tenons.
    """
    hl, hh, ht = spec.half_extents
    bottom = bottom_edge(profile, spec.length, spec.height, segments)
    zf, zb = -ht, ht

    for (x0, y0), (x1, y1) in zip(bottom[:-1], bottom[1:]):
        # front (-Z)
        sink.add_quad((x0, hh, zf), (x1, hh, zf), (x1, y1, zf), (x0, y0, zf))
        # back (+Z)
        sink.add_quad((x1, hh, zb), (x0, hh, zb), (x0, y0, zb), (x1, y1, zb))
        # top
        sink.add_quad((x1, hh, zb), (x1, hh, zf), (x0, hh, zf), (x0, hh, zb))
        # underside
        sink.add_quad((x1, y1, zf), (x1, y1, zb), (x0, y0, zb), (x0, y0, zf))

    yl = float(bottom[0][1])
    yr = float(bottom[-1][1])
    left = CornerSet(
        top_front=np.array([-hl, hh, zf]),
        top_back=np.array([-hl, hh, zb]),
        bottom_front=np.array([-hl, yl, zf]),
        bottom_back=np.array([-hl, yl, zb]),
    )
    right = CornerSet(
        top_front=np.array([hl, hh, zf]),
        top_back=np.array([hl, hh, zb]),
        bottom_front=np.array([hl, yr, zf]),
        bottom_back=np.array([hl, yr, zb]),
    )
    sink.add_quad(left.top_back, left.top_front, left.bottom_front, left.bottom_back)
    sink.add_quad(right.top_front, right.top_back, right.bottom_back, right.bottom_front)

    logger.debug(
        "Extruded %s profile: %d underside segments", profile.value, len(bottom) - 1,
    )
    return left, right
