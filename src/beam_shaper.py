"""
Beam shaper: compound-angle aprons with optional tenons.

Each end of a beam may be given the world-space normal of the leg face it
meets. The end corners are slid along the beam axis until they lie on that
face, the six faces of the resulting hexahedron are emitted, tenons are
attached as a separate stage, and everything is merged into one mesh.

Beams with no mating normals and no splay take the plain path instead:
a rectangular prism, or an extruded arched/scalloped outline.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from furniture import (
    BeamConfigError, BeamEnd, BeamProfile, BeamSpec, CornerSet, Mesh, TenonSpec,
)
from geometry_primitives import (
    DEGENERATE_NX_TOLERANCE, end_corner_offsets, hexahedron_faces,
    plane_fit_shifts, to_local_frame,
)
from mesh_merge import DEFAULT_NORMAL_DIGITS, MeshBuffer, merge_solids
from profile_extruder import DEFAULT_ARC_SEGMENTS, end_face_span, extrude_profile
from tenon import attach_tenon

logger = logging.getLogger(__name__)

TenonArg = Union[None, TenonSpec, Mapping[Union[BeamEnd, str], Optional[TenonSpec]]]


@dataclass
class MeshBuildConfig:
    """Tunables for beam mesh construction."""

    degenerate_tolerance: float = DEGENERATE_NX_TOLERANCE
    arc_segments: int = DEFAULT_ARC_SEGMENTS
    normal_digits: int = DEFAULT_NORMAL_DIGITS
    weld_normals: bool = True


def shape_end(
    spec: BeamSpec,
    end: BeamEnd,
    mating: Optional[Sequence[float]] = None,
    config: Optional[MeshBuildConfig] = None,
) -> CornerSet:
    """Corner positions of one beam end in the beam's local frame.

    Args:
        spec: Beam dimensions and yaw.
        end: Which end to shape.
        mating: World-space normal of the leg face this end meets, or None
            for a square cut.
        config: Build tunables.

    Returns:
        CornerSet with each corner at nominal X plus its plane-fit shift.
    """
    if config is None:
        config = MeshBuildConfig()
    hl, hh, ht = spec.half_extents
    offsets = end_corner_offsets(hh, ht)

    if mating is None:
        shifts = np.zeros(len(offsets))
    else:
        local_normal = to_local_frame(mating, spec.yaw)
        shifts = plane_fit_shifts(local_normal, offsets, config.degenerate_tolerance)

    x = spec.nominal_end_x(end) + shifts
    return CornerSet.from_array(np.column_stack([x, offsets]))


def emit_beam_faces(left: CornerSet, right: CornerSet, sink: MeshBuffer) -> None:
    """Write the six faces of a beam into ``sink``.

    Order: top, bottom, front, back, left end, right end.
    """
    sink.add_quads(hexahedron_faces(left, right))


def _coerce_profile(profile: Union[BeamProfile, str]) -> BeamProfile:
    if isinstance(profile, BeamProfile):
        return profile
    try:
        return BeamProfile(str(profile).lower())
    except ValueError:
        choices = ", ".join(p.value for p in BeamProfile)
        raise BeamConfigError(
            [f"Unknown profile '{profile}' (expected one of {choices})"]
        ) from None


def _coerce_end(key: Union[BeamEnd, str]) -> BeamEnd:
    if isinstance(key, BeamEnd):
        return key
    try:
        return BeamEnd(str(key).lower())
    except ValueError:
        choices = ", ".join(e.value for e in BeamEnd)
        raise BeamConfigError(
            [f"Unknown tenon end '{key}' (expected one of {choices})"]
        ) from None


def _resolve_tenons(tenon: TenonArg) -> Dict[BeamEnd, TenonSpec]:
    """Normalise the tenon argument to a per-end mapping."""
    if tenon is None:
        return {}
    if isinstance(tenon, TenonSpec):
        return {BeamEnd.LEFT: tenon, BeamEnd.RIGHT: tenon}
    resolved = {}
    for key, value in tenon.items():
        if value is None:
            continue
        resolved[_coerce_end(key)] = value
    return resolved


def uses_compound_path(
    spec: BeamSpec,
    mating_left: Optional[Sequence[float]],
    mating_right: Optional[Sequence[float]],
) -> bool:
    """Whether the beam needs the compound-angle builder."""
    return mating_left is not None or mating_right is not None or spec.splay_fallback > 0


def validate_request(
    spec: BeamSpec,
    tenons: Mapping[BeamEnd, TenonSpec],
    profile: BeamProfile,
    compound: bool,
) -> List[str]:
    """Collect every configuration issue for a build request."""
    issues = spec.validate()
    if issues:
        return issues

    if compound or profile is BeamProfile.STRAIGHT:
        section_height = spec.height
    else:
        y_min, y_max = end_face_span(profile, spec.height)
        section_height = y_max - y_min

    for end, tenon in tenons.items():
        for issue in tenon.validate_against(spec, section_height=section_height):
            issues.append(f"{end.value} end: {issue}")
    return issues


def build_beam_mesh(
    spec: BeamSpec,
    mating_left: Optional[Sequence[float]] = None,
    mating_right: Optional[Sequence[float]] = None,
    tenon: TenonArg = None,
    profile: Union[BeamProfile, str] = BeamProfile.STRAIGHT,
    config: Optional[MeshBuildConfig] = None,
) -> Mesh:
    """Build the render mesh of a beam, its shaped ends and its tenons.

    Args:
        spec: Beam dimensions, yaw and splay fallback.
        mating_left: World-space normal of the leg face at the local -X end.
        mating_right: World-space normal of the leg face at the local +X end.
        tenon: One TenonSpec for both ends, or a mapping of end -> TenonSpec.
        profile: Underside profile; only honoured on the plain path.
        config: Build tunables.

    Returns:
        Mesh in the beam's local frame. The beam body is solid 0, tenons
        follow in left, right order.

    Raises:
        BeamConfigError: Non-positive dimensions, unknown profile, or a tenon
            that does not fit inside the end section.
    """
    if config is None:
        config = MeshBuildConfig()
    beam_profile = _coerce_profile(profile)
    tenons = _resolve_tenons(tenon)
    compound = uses_compound_path(spec, mating_left, mating_right)

    issues = validate_request(spec, tenons, beam_profile, compound)
    if issues:
        raise BeamConfigError(issues)

    body = MeshBuffer()
    if compound or beam_profile is BeamProfile.STRAIGHT:
        if compound and beam_profile is not BeamProfile.STRAIGHT:
            logger.debug(
                "Profile %s ignored for compound-angle beam", beam_profile.value,
            )
        left = shape_end(spec, BeamEnd.LEFT, mating_left, config)
        right = shape_end(spec, BeamEnd.RIGHT, mating_right, config)
        emit_beam_faces(left, right, body)
    else:
        left, right = extrude_profile(spec, beam_profile, body, config.arc_segments)

    solids = [body]
    end_faces: Dict[BeamEnd, CornerSet] = {BeamEnd.LEFT: left, BeamEnd.RIGHT: right}
    for end in (BeamEnd.LEFT, BeamEnd.RIGHT):
        if end in tenons:
            sink = MeshBuffer()
            attach_tenon(end_faces[end], end, tenons[end], sink)
            solids.append(sink)

    mesh = merge_solids(
        solids, weld_normals=config.weld_normals, digits=config.normal_digits,
    )
    logger.debug(
        "Built beam %.3fx%.3fx%.3f: %d vertices, %d triangles",
        spec.length, spec.height, spec.thickness,
        mesh.vertex_count, mesh.triangle_count,
    )
    return mesh


def end_corner_sets(
    spec: BeamSpec,
    mating_left: Optional[Sequence[float]] = None,
    mating_right: Optional[Sequence[float]] = None,
    config: Optional[MeshBuildConfig] = None,
) -> Tuple[CornerSet, CornerSet]:
    """(left, right) shaped end faces without building a mesh."""
    return (
        shape_end(spec, BeamEnd.LEFT, mating_left, config),
        shape_end(spec, BeamEnd.RIGHT, mating_right, config),
    )
