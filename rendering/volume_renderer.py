"""
Volume Renderer

Orthographic ray casting with front-to-back alpha compositing.

Each output pixel depends only on the read-only volume and the render
parameters, so rows are split into blocks and marched in a thread pool.
Inside a block all rays advance together as numpy vectors.
"""

from typing import Optional, Tuple
import concurrent.futures
import logging
import math
import time
import numpy as np

from config import DEFAULT_VOLUME_RENDER, VolumeRenderConfig
from reconstruction.lookup_tables import get_transfer_function
from reconstruction.types import VolumeRenderParams
from reconstruction.volume import ScalarVolume


def rotation_matrix(rotation_x: float, rotation_y: float, rotation_z: float) -> np.ndarray:
    """
    Composed rotation R = Rz @ Ry @ Rx.

    Args:
        rotation_x: Angle about X in degrees
        rotation_y: Angle about Y in degrees
        rotation_z: Angle about Z in degrees

    Returns:
        (3, 3) rotation matrix
    """
    ax, ay, az = np.radians([rotation_x, rotation_y, rotation_z])

    rot_x = np.array([
        [1, 0, 0],
        [0, np.cos(ax), -np.sin(ax)],
        [0, np.sin(ax), np.cos(ax)],
    ])
    rot_y = np.array([
        [np.cos(ay), 0, np.sin(ay)],
        [0, 1, 0],
        [-np.sin(ay), 0, np.cos(ay)],
    ])
    rot_z = np.array([
        [np.cos(az), -np.sin(az), 0],
        [np.sin(az), np.cos(az), 0],
        [0, 0, 1],
    ])
    return rot_z @ rot_y @ rot_x


class VolumeRenderer:
    """
    Ray casting volume renderer.

    For each output pixel a ray origin is offset from the image center,
    scaled by the fit factor, then marched through the rotated volume from
    t = -max_steps/2 to +max_steps/2 where max_steps is the ceiling of the
    volume diagonal. Samples are normalized against the render window,
    mapped through the transfer function and composited front to back.
    """

    def __init__(self, config: Optional[VolumeRenderConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Worker pool and termination settings (uses defaults if None)
        """
        self.config = config or DEFAULT_VOLUME_RENDER
        self._last_timing = None

    @property
    def last_timing(self) -> Optional[dict]:
        """Timing info of the most recent render."""
        return self._last_timing

    def render(self, volume: ScalarVolume, params: VolumeRenderParams) -> np.ndarray:
        """
        Render the volume to an RGBA raster.

        Args:
            volume: Source volume
            params: Rotation, window, transfer function, opacity and output size

        Returns:
            (output_height, output_width, 4) uint8 array
        """
        total_start = time.perf_counter()

        out_w, out_h = int(params.output_width), int(params.output_height)
        output = np.zeros((out_h, out_w, 4), dtype=np.uint8)
        if out_w <= 0 or out_h <= 0:
            return output

        rotation = rotation_matrix(params.rotation_x, params.rotation_y, params.rotation_z)
        transfer = get_transfer_function(params.transfer_function)
        max_steps = int(math.ceil(math.sqrt(
            volume.width ** 2 + volume.height ** 2 + volume.depth ** 2
        )))
        scale = min(out_w, out_h) / max(volume.width, volume.height, volume.depth)

        block = max(1, self.config.rows_per_block)
        blocks = [(start, min(start + block, out_h)) for start in range(0, out_h, block)]

        def render_block(rows: Tuple[int, int]):
            return rows, self._march_rows(
                volume, params, rotation, transfer, scale, max_steps, rows, out_w, out_h
            )

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(render_block, rows): rows for rows in blocks}
            for future in concurrent.futures.as_completed(futures):
                (row_start, row_stop), pixels = future.result()
                output[row_start:row_stop] = pixels

        total_time = time.perf_counter() - total_start
        self._last_timing = {
            'total': total_time,
            'blocks': len(blocks),
            'max_steps': max_steps,
            'output': (out_w, out_h),
        }
        logging.info(
            f"Volume render {volume.shape} -> {out_w}x{out_h}: "
            f"{len(blocks)} blocks, {max_steps} steps, {total_time:.3f}s"
        )
        return output

    def _march_rows(
        self,
        volume: ScalarVolume,
        params: VolumeRenderParams,
        rotation: np.ndarray,
        transfer,
        scale: float,
        max_steps: int,
        rows: Tuple[int, int],
        out_w: int,
        out_h: int
    ) -> np.ndarray:
        """Composite all rays of a row block."""
        data = volume.data
        depth, height, width = data.shape
        lower = params.window.lower
        window_width = params.window.width
        termination = self.config.termination_alpha

        py, px = np.mgrid[rows[0]:rows[1], 0:out_w]
        ray_x = ((px - out_w / 2.0) / scale).ravel()
        ray_y = ((py - out_h / 2.0) / scale).ravel()
        n_rays = ray_x.size

        center = np.array([width / 2.0, height / 2.0, depth / 2.0])
        # Ray origins in volume space; the t term is added per step
        origins = (
            rotation[:, 0:1] * ray_x
            + rotation[:, 1:2] * ray_y
            + center[:, None]
        )
        direction = rotation[:, 2]

        accum_rgb = np.zeros((n_rays, 3))
        accum_a = np.zeros(n_rays)
        active = np.ones(n_rays, dtype=bool)

        for step in range(max_steps):
            ray_ids = np.flatnonzero(active)
            if ray_ids.size == 0:
                break

            t = step - max_steps / 2.0
            points = origins[:, ray_ids] + direction[:, None] * t
            voxels = np.trunc(points).astype(np.int64)
            vx, vy, vz = voxels

            inside = (
                (vx >= 0) & (vx < width)
                & (vy >= 0) & (vy < height)
                & (vz >= 0) & (vz < depth)
            )
            if not inside.any():
                continue

            ray_ids = ray_ids[inside]
            values = data[vz[inside], vy[inside], vx[inside]]
            normalized = np.clip((values - lower) / window_width, 0.0, 1.0)

            r, g, b, a = transfer(normalized)
            weight = (1.0 - accum_a[ray_ids]) * (a * params.opacity)

            accum_rgb[ray_ids, 0] += weight * r
            accum_rgb[ray_ids, 1] += weight * g
            accum_rgb[ray_ids, 2] += weight * b
            accum_a[ray_ids] += weight
            active[ray_ids] = accum_a[ray_ids] < termination

        rgba = np.concatenate([accum_rgb, accum_a[:, None]], axis=1)
        rgba = np.clip(rgba * 255.0, 0, 255).astype(np.uint8)
        return rgba.reshape(rows[1] - rows[0], out_w, 4)


def render_volume_image(
    volume: ScalarVolume,
    params: VolumeRenderParams,
    config: Optional[VolumeRenderConfig] = None
) -> np.ndarray:
    """Convenience wrapper around VolumeRenderer.render."""
    return VolumeRenderer(config).render(volume, params)
