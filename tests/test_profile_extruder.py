"""Tests for arched and scalloped apron extrusion."""
import numpy as np
import pytest

from beam_shaper import MeshBuildConfig, build_beam_mesh
from furniture import BeamConfigError, BeamProfile, BeamSpec, TenonSpec
from mesh_merge import MeshBuffer
from profile_extruder import (
    ARCH_HEIGHT_RATIO,
    SCALLOP_COUNT,
    bottom_edge,
    end_face_span,
    extrude_profile,
    profile_outline,
)


class TestOutline:
    """Test 2D outlines of profiled aprons."""

    def test_straight_is_rectangle(self):
        outline = profile_outline(BeamProfile.STRAIGHT, 20.0, 4.0)
        assert outline.is_valid
        assert outline.area == pytest.approx(80.0)

    @pytest.mark.parametrize("profile", [BeamProfile.ARCHED, BeamProfile.SCALLOPED])
    def test_curved_outline_is_valid(self, profile):
        outline = profile_outline(profile, 20.0, 4.0)
        assert outline.is_valid
        assert 0.7 * 80.0 < outline.area < 80.0
        minx, miny, maxx, maxy = outline.bounds
        assert (minx, maxx, maxy) == pytest.approx((-10.0, 10.0, 2.0))
        assert miny >= -2.0 - 1e-9

    def test_arch_lowest_point(self):
        pts = bottom_edge(BeamProfile.ARCHED, 20.0, 4.0, segments=16)
        arch = 4.0 * ARCH_HEIGHT_RATIO
        assert pts[:, 1].min() == pytest.approx(-2.0 + 0.25 * arch)
        assert pts[0, 1] == pytest.approx(-2.0 + arch)

    def test_scallops_are_monotone(self):
        pts = bottom_edge(BeamProfile.SCALLOPED, 18.0, 4.0, segments=8)
        assert len(pts) == SCALLOP_COUNT * 8 + 1
        assert np.all(np.diff(pts[:, 0]) > 0)
        assert pts[0, 0] == pytest.approx(-9.0)
        assert pts[-1, 0] == pytest.approx(9.0)

    def test_end_face_span(self):
        assert end_face_span(BeamProfile.STRAIGHT, 4.0) == pytest.approx((-2.0, 2.0))
        assert end_face_span(BeamProfile.ARCHED, 4.0) == pytest.approx((-1.4, 2.0))
        assert end_face_span(BeamProfile.SCALLOPED, 4.0) == pytest.approx((-1.6, 2.0))


class TestExtrusion:
    """Test the extruded solid."""

    @pytest.mark.parametrize("profile", [BeamProfile.ARCHED, BeamProfile.SCALLOPED])
    def test_solid_is_closed(self, apron_spec, profile):
        mesh = build_beam_mesh(apron_spec, profile=profile)
        body = mesh.solid_to_trimesh(0)
        assert body.is_watertight
        assert body.is_winding_consistent
        outline = profile_outline(profile, 20.0, 4.0)
        assert body.volume == pytest.approx(outline.area * 1.0, rel=1e-9)

    def test_segments_follow_config(self, apron_spec):
        coarse = build_beam_mesh(apron_spec, profile="arched", config=MeshBuildConfig(arc_segments=4))
        fine = build_beam_mesh(apron_spec, profile="arched", config=MeshBuildConfig(arc_segments=12))
        # 4 quads per underside segment plus the two ends
        assert coarse.vertex_count == (4 * 4 + 2) * 4
        assert fine.vertex_count == (4 * 12 + 2) * 4

    def test_returns_end_faces(self, apron_spec):
        sink = MeshBuffer()
        left, right = extrude_profile(apron_spec, BeamProfile.ARCHED, sink, 8)
        np.testing.assert_allclose(left.as_array()[:, 0], -10.0)
        np.testing.assert_allclose(right.as_array()[:, 0], 10.0)
        assert left.bottom_front[1] == pytest.approx(-1.4)
        assert left.top_back[1] == pytest.approx(2.0)

    def test_profile_accepts_strings(self, apron_spec):
        a = build_beam_mesh(apron_spec, profile="Scalloped")
        b = build_beam_mesh(apron_spec, profile=BeamProfile.SCALLOPED)
        np.testing.assert_array_equal(a.positions, b.positions)


class TestProfiledTenons:
    def test_tenon_centred_on_shortened_end(self, apron_spec):
        tenon = TenonSpec(thickness=0.33, width=2.0, length=1.5)
        mesh = build_beam_mesh(apron_spec, tenon={"left": tenon}, profile="arched")
        ys = mesh.solid_positions(1)[:, 1]
        centre = (-1.4 + 2.0) / 2
        assert ys.max() == pytest.approx(centre + 1.0)
        assert ys.min() == pytest.approx(centre - 1.0)

    def test_tenon_must_fit_shortened_end(self, apron_spec):
        tenon = TenonSpec(thickness=0.33, width=3.6, length=1.5)
        # Fits a straight 4.0 end but not the 3.4 end of an arched apron
        build_beam_mesh(apron_spec, tenon=tenon)
        with pytest.raises(BeamConfigError):
            build_beam_mesh(apron_spec, tenon=tenon, profile="arched")

    def test_splayed_beam_ignores_profile(self):
        spec = BeamSpec(length=20.0, height=4.0, thickness=1.0)
        tenon = TenonSpec(thickness=0.33, width=3.6, length=1.5)
        mesh = build_beam_mesh(
            spec, [1.0, 0.1, 0.0], [-1.0, 0.1, 0.0], tenon=tenon, profile="arched",
        )
        assert mesh.solid_ranges[0] == (0, 24)
