"""
Volume Imaging Engine

Command line entry point. Loads a DICOM series, runs one reconstruction
or rendering operation and writes the raster to an image file.
"""

import argparse
import logging
import sys

import numpy as np
from skimage import io

from loaders.dicom_loader import load_dicom_series
from reconstruction.types import Plane, ProjectionRange, ProjectionType, VolumeRenderParams, WindowLevel
from reconstruction.volume import get_volume_info
from rendering.pipeline import (
    render_cpr,
    render_lut,
    render_projection,
    render_reformat,
    render_volume,
)


def setup_logging():
    """Configure logging to stdout."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def _window_from_args(args):
    if args.preset:
        return WindowLevel.from_preset(args.preset)
    if args.center is not None and args.width is not None:
        return WindowLevel(args.center, args.width)
    return None


def _parse_centerline(text: str):
    """Parse 'x,y,z;x,y,z;...' into a list of voxel coordinates."""
    return [tuple(float(v) for v in point.split(",")) for point in text.split(";") if point.strip()]


def _save(raster: np.ndarray, path: str):
    io.imsave(path, raster, check_contrast=False)
    logging.info(f"Saved {raster.shape} raster to {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Volumetric reconstruction and rendering of DICOM series")
    parser.add_argument("series", help="Directory containing the DICOM series")
    parser.add_argument("--workers", type=int, default=None, help="Parallel file reads")

    window = argparse.ArgumentParser(add_help=False)
    window.add_argument("--center", type=float, default=None, help="Window center")
    window.add_argument("--width", type=float, default=None, help="Window width")
    window.add_argument("--preset", default=None, help="Window preset (bone, soft_tissue, lung, brain, liver)")

    output = argparse.ArgumentParser(add_help=False)
    output.add_argument("-o", "--output", required=True, help="Output image path (.png)")

    planes = [p.value for p in Plane]
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Print volume geometry")

    mpr = sub.add_parser("mpr", parents=[window, output], help="Multi-planar reformat")
    mpr.add_argument("--plane", choices=planes, default="axial")
    mpr.add_argument("--index", type=int, default=0)

    mip = sub.add_parser("project", parents=[window, output], help="MIP / MinIP / average projection")
    mip.add_argument("--type", choices=[t.value for t in ProjectionType], default="maximum")
    mip.add_argument("--plane", choices=planes, default="axial")
    mip.add_argument("--start", type=int, default=0)
    mip.add_argument("--end", type=int, default=10 ** 6)

    vr = sub.add_parser("volume", parents=[window, output], help="Ray cast volume rendering")
    vr.add_argument("--rotation", type=float, nargs=3, default=(0.0, 0.0, 0.0), metavar=("RX", "RY", "RZ"))
    vr.add_argument("--transfer-function", default="default")
    vr.add_argument("--opacity", type=float, default=1.0)
    vr.add_argument("--size", type=int, nargs=2, default=(512, 512), metavar=("W", "H"))

    cpr = sub.add_parser("cpr", parents=[window, output], help="Curved planar reformation")
    cpr.add_argument("--centerline", required=True, help="Voxel points as 'x,y,z;x,y,z;...'")

    lut = sub.add_parser("lut", parents=[output], help="Pseudo-colour display of one slice")
    lut.add_argument("--index", type=int, default=0, help="Slice index after sorting")
    lut.add_argument("--name", default="hot")

    return parser


def main(argv=None):
    """Application entry point."""
    setup_logging()
    args = build_parser().parse_args(argv)

    slices = load_dicom_series(args.series, max_workers=args.workers)

    if args.command == "info":
        info = get_volume_info(slices)
        for key, value in vars(info).items():
            print(f"{key}: {value}")
        return

    if args.command == "mpr":
        raster = render_reformat(slices, Plane(args.plane), args.index, _window_from_args(args))
    elif args.command == "project":
        raster = render_projection(
            slices,
            ProjectionType(args.type),
            Plane(args.plane),
            ProjectionRange(args.start, args.end),
            _window_from_args(args),
        )
    elif args.command == "volume":
        rx, ry, rz = args.rotation
        params = VolumeRenderParams(
            rotation_x=rx,
            rotation_y=ry,
            rotation_z=rz,
            window=_window_from_args(args) or WindowLevel(40.0, 400.0),
            transfer_function=args.transfer_function,
            opacity=args.opacity,
            output_width=args.size[0],
            output_height=args.size[1],
        )
        raster = render_volume(slices, params)
    elif args.command == "cpr":
        raster = render_cpr(slices, _parse_centerline(args.centerline), _window_from_args(args))
    else:
        raster = render_lut(slices[min(args.index, len(slices) - 1)], args.name)

    _save(raster, args.output)


if __name__ == "__main__":
    main()
