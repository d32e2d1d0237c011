"""
Tenon solids for beam ends.

A tenon is a smaller hexahedron fused to an end face. On a sheared end the
four corners no longer share one X, so the tenon is anchored at the corner
lying furthest toward the beam centre. Its inner end is then always inside
the beam body, at the cost of a seam of a few thousandths of a unit on the
other three corners. The inner end face is embedded in the beam and is not
emitted.
"""
import logging
from typing import Tuple

import numpy as np

from furniture import BeamEnd, CornerSet, TenonSpec
from geometry_primitives import hexahedron_faces
from mesh_merge import MeshBuffer

logger = logging.getLogger(__name__)


def tenon_corners(
    end_corners: CornerSet,
    end: BeamEnd,
    tenon: TenonSpec,
) -> Tuple[CornerSet, CornerSet]:
    """Compute the inner (beam-side) and outer end faces of a tenon.

    Args:
        end_corners: Shifted corners of the beam end face the tenon sits on.
        end: Which beam end; the tenon projects away from the beam centre.
        tenon: Tenon section and length.

    Returns:
        (inner, outer) corner sets in the beam's local frame.
    """
    base_x = end_corners.most_inset_x(end)
    cy, cz = end_corners.centroid_yz()
    hw = tenon.width / 2
    ht = tenon.thickness / 2
    length = tenon.effective_length
    outward = end.sign

    def _face(x_front: float, x_back: float) -> CornerSet:
        return CornerSet(
            top_front=np.array([x_front, cy + hw, cz - ht]),
            top_back=np.array([x_back, cy + hw, cz + ht]),
            bottom_front=np.array([x_front, cy - hw, cz - ht]),
            bottom_back=np.array([x_back, cy - hw, cz + ht]),
        )

    inner = _face(base_x, base_x)
    full = base_x + outward * length
    mitered = base_x + outward * (length - tenon.miter_offset)
    # The miter removes material on the miter_side face only
    if tenon.miter_side > 0:
        outer = _face(full, mitered)
    else:
        outer = _face(mitered, full)
    return inner, outer


def haunch_corners(
    inner: CornerSet,
    end: BeamEnd,
    tenon: TenonSpec,
) -> Tuple[CornerSet, CornerSet]:
    """Inner and outer faces of the haunch block sitting on top of a tenon.

    The haunch spans the tenon thickness, rises ``haunch_width`` above the
    tenon top and projects ``haunch_depth`` from the same base X.
    """
    base_x = inner.top_front[0]
    y0 = inner.top_front[1]
    y1 = y0 + tenon.haunch_width
    z_front = inner.top_front[2]
    z_back = inner.top_back[2]
    x_out = base_x + end.sign * tenon.haunch_depth

    def _face(x: float) -> CornerSet:
        return CornerSet(
            top_front=np.array([x, y1, z_front]),
            top_back=np.array([x, y1, z_back]),
            bottom_front=np.array([x, y0, z_front]),
            bottom_back=np.array([x, y0, z_back]),
        )

    return _face(base_x), _face(x_out)


def attach_tenon(
    end_corners: CornerSet,
    end: BeamEnd,
    tenon: TenonSpec,
    sink: MeshBuffer,
) -> Tuple[CornerSet, CornerSet]:
    """Emit the visible faces of a tenon (and its haunch) into ``sink``.

    Faces are top, bottom, front, back and the outer end. A haunch adds
    its top, front, back and outer end; its underside lies on the tenon top.

    Returns:
        (inner, outer) corner sets of the emitted tenon.
    """
    inner, outer = tenon_corners(end_corners, end, tenon)
    if end is BeamEnd.LEFT:
        faces = hexahedron_faces(outer, inner, ("top", "bottom", "front", "back", "left"))
    else:
        faces = hexahedron_faces(inner, outer, ("top", "bottom", "front", "back", "right"))
    sink.add_quads(faces)
    if tenon.has_haunch:
        h_inner, h_outer = haunch_corners(inner, end, tenon)
        if end is BeamEnd.LEFT:
            sink.add_quads(hexahedron_faces(h_outer, h_inner, ("top", "front", "back", "left")))
        else:
            sink.add_quads(hexahedron_faces(h_inner, h_outer, ("top", "front", "back", "right")))
    logger.debug(
        "Attached %s tenon at x=%.6f (length %.4f)",
        end.value, inner.top_front[0], tenon.effective_length,
    )
    return inner, outer
