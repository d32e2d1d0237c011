#!/usr/bin/env python3
"""
Generate an apron mesh with compound-angle ends and optional tenons.

Usage:
    # Plain 20 x 4 x 1 apron
    python scripts/generate_apron.py --length 20 --height 4 --thickness 1 -o apron.stl

    # Front apron between legs splayed 8 degrees, with tenons
    python scripts/generate_apron.py --length 30 --splay 8 --position front \\
        --tenon 0.33 2 1.5 -o front.glb

    # Explicit mating normals (world space)
    python scripts/generate_apron.py --mating-left 0.17 0 0.98 \\
        --mating-right -0.17 0 0.98 -o apron.obj

The output format follows the file extension (anything trimesh can export).
"""
import sys
import argparse
import logging
import math
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from beam_shaper import MeshBuildConfig, build_beam_mesh
from furniture import ApronPosition, BeamConfigError, BeamProfile, BeamSpec, TenonSpec
from leg_geometry import LegParams, apron_mating_orientations, apron_yaw

logger = logging.getLogger("generate_apron")


def main():
    parser = argparse.ArgumentParser(
        description="Generate apron geometry for splayed-leg tables"
    )

    # Beam dimensions
    parser.add_argument("--length", type=float, default=20.0, help="Apron length")
    parser.add_argument("--height", type=float, default=4.0, help="Apron height")
    parser.add_argument("--thickness", type=float, default=1.0, help="Apron thickness")
    parser.add_argument(
        "--yaw", type=float, default=None,
        help="Yaw in degrees (default: derived from --position)",
    )
    parser.add_argument(
        "--profile", type=str, default="straight",
        choices=[p.value for p in BeamProfile],
        help="Underside profile for unsplayed aprons (default: straight)",
    )

    # Mating faces
    parser.add_argument(
        "--mating-left", type=float, nargs=3, metavar=("X", "Y", "Z"),
        help="World normal of the leg face at the left end",
    )
    parser.add_argument(
        "--mating-right", type=float, nargs=3, metavar=("X", "Y", "Z"),
        help="World normal of the leg face at the right end",
    )
    parser.add_argument(
        "--splay", type=float, default=0.0,
        help="Leg splay in degrees; derives mating normals when none are given",
    )
    parser.add_argument(
        "--position", type=str, default="front",
        choices=[p.value for p in ApronPosition],
        help="Apron position on the frame (default: front)",
    )
    parser.add_argument("--leg-size", type=float, default=2.5, help="Leg top size")
    parser.add_argument("--leg-bottom", type=float, default=None, help="Leg bottom size")
    parser.add_argument("--leg-height", type=float, default=28.0, help="Leg height")

    # Joinery
    parser.add_argument(
        "--tenon", type=float, nargs=3, metavar=("THICKNESS", "WIDTH", "LENGTH"),
        help="Add tenons of this size",
    )
    parser.add_argument(
        "--tenon-end", type=str, default="both", choices=["both", "left", "right"],
        help="Which ends get tenons (default: both)",
    )
    parser.add_argument("--miter", type=float, default=0.0, help="Tenon miter angle (deg)")
    parser.add_argument(
        "--miter-side", type=str, default="back", choices=["back", "front"],
        help="Face the miter is cut from (default: back, local +Z)",
    )
    parser.add_argument("--through", action="store_true", help="Through tenons")
    parser.add_argument(
        "--haunch", type=float, nargs=2, metavar=("WIDTH", "DEPTH"),
        help="Add a haunch above each tenon",
    )

    # Output
    parser.add_argument("-o", "--output", type=str, default=None, help="Output mesh file")
    parser.add_argument(
        "--flat-normals", action="store_true",
        help="Keep per-face normals instead of welding coincident vertices",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    position = ApronPosition(args.position)
    yaw = apron_yaw(position) if args.yaw is None else math.radians(args.yaw)
    spec = BeamSpec(
        length=args.length,
        height=args.height,
        thickness=args.thickness,
        yaw=yaw,
        splay_fallback=max(args.splay, 0.0),
    )

    mating_left = args.mating_left
    mating_right = args.mating_right
    if mating_left is None and mating_right is None and args.splay > 0:
        legs = LegParams(
            splay_deg=args.splay,
            top_size=args.leg_size,
            bottom_size=args.leg_bottom,
            height=args.leg_height,
        )
        mating_left, mating_right = apron_mating_orientations(position, legs)
        logger.info(
            "Leg face normals: left=%s right=%s",
            mating_left.round(4), mating_right.round(4),
        )

    tenon = None
    if args.tenon:
        tenon_spec = TenonSpec(
            thickness=args.tenon[0],
            width=args.tenon[1],
            length=args.tenon[2],
            miter_angle_deg=args.miter,
            through=args.through,
            miter_side=1.0 if args.miter_side == "back" else -1.0,
            haunch_width=args.haunch[0] if args.haunch else 0.0,
            haunch_depth=args.haunch[1] if args.haunch else 0.0,
        )
        tenon = tenon_spec if args.tenon_end == "both" else {args.tenon_end: tenon_spec}

    config = MeshBuildConfig(weld_normals=not args.flat_normals)

    try:
        mesh = build_beam_mesh(
            spec, mating_left, mating_right,
            tenon=tenon, profile=args.profile, config=config,
        )
    except BeamConfigError as exc:
        for issue in exc.issues:
            print(f"Error: {issue}")
        sys.exit(1)

    print(f"Vertices:  {mesh.vertex_count}")
    print(f"Triangles: {mesh.triangle_count}")
    print(f"Solids:    {len(mesh.solid_ranges)}")
    beam_only = mesh.solid_to_trimesh(0)
    print(f"Beam watertight: {beam_only.is_watertight} (volume {beam_only.volume:.4f})")

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        mesh.to_trimesh(process=False).export(str(out_path))
        print(f"Wrote {out_path}")


if __name__ == "__main__":
    main()
