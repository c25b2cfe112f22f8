"""
Enhancement Pipeline

Denoise / sharpen / edge / smooth filtering of a single slice followed by
brightness, contrast, gamma, invert and geometric transforms. The step
order is fixed.
"""

from typing import Optional
import numpy as np
from scipy import ndimage
from skimage.transform import rotate

from config import DEFAULT_DISPLAY, DEFAULT_ENHANCEMENT, DisplayConfig, EnhancementConfig
from core.errors import DimensionMismatchError
from loaders.slice_loader import ScalarSlice
from reconstruction.types import EnhancementParams
from reconstruction.windowing import slice_window


def gaussian_kernel(sigma: float) -> np.ndarray:
    """
    Normalized 2D Gaussian kernel.

    Kernel size is int(sigma * 6) forced to the next odd number.
    """
    size = int(sigma * 6) | 1
    half = size // 2
    y, x = np.mgrid[-half:half + 1, -half:half + 1]
    kernel = np.exp(-(x ** 2 + y ** 2) / (2 * sigma ** 2))
    return kernel / kernel.sum()


def gaussian_blur(image: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian blur with edge-clamped borders. Non-positive sigma is a no-op."""
    if sigma <= 0:
        return image.copy()
    return ndimage.convolve(image, gaussian_kernel(sigma), mode='nearest')


def unsharp_mask(image: np.ndarray, amount: float, sigma: float = 2.0) -> np.ndarray:
    """image + amount * (image - blur(image))"""
    return image + amount * (image - gaussian_blur(image, sigma))


def edge_enhance(image: np.ndarray, strength: float) -> np.ndarray:
    """Add the Sobel gradient magnitude: image + strength * sqrt(gx² + gy²)."""
    gx = ndimage.sobel(image, axis=1, mode='nearest')
    gy = ndimage.sobel(image, axis=0, mode='nearest')
    return image + strength * np.hypot(gx, gy)


def _apply_geometry(image: np.ndarray, params: EnhancementParams, config: EnhancementConfig) -> np.ndarray:
    if params.flip_horizontal:
        image = image[:, ::-1]
    if params.flip_vertical:
        image = image[::-1, :]

    angle = params.rotation % 360
    if angle == 0:
        return np.ascontiguousarray(image)
    if angle % 90 == 0:
        # Negative k turns clockwise
        return np.ascontiguousarray(np.rot90(image, k=-int(angle // 90)))

    # skimage rotates counter-clockwise; the canvas grows to fit
    rotated = rotate(
        image.astype(np.float64),
        -angle,
        resize=True,
        order=config.rotation_order,
        preserve_range=True,
        cval=0,
    )
    return np.clip(np.rint(rotated), 0, 255).astype(np.uint8)


def enhance(
    scalar_slice: ScalarSlice,
    params: EnhancementParams,
    config: Optional[EnhancementConfig] = None,
    display: DisplayConfig = DEFAULT_DISPLAY
) -> np.ndarray:
    """
    Run the enhancement pipeline on one slice.

    Order: noise reduction, sharpen, edge enhancement, smoothing, then
    brightness/contrast around the window center, gamma on the normalized
    windowed value, invert, flips and rotation.

    Args:
        scalar_slice: Source slice
        params: Step toggles and strengths
        config: Pipeline constants (uses defaults if None)

    Returns:
        uint8 raster (rotation by a non-multiple of 90 enlarges the canvas)
    """
    config = config or DEFAULT_ENHANCEMENT
    if scalar_slice.is_color:
        raise DimensionMismatchError("Enhancement requires a single-channel slice")
    if params.gamma <= 0:
        raise ValueError(f"Gamma must be positive, got {params.gamma}")

    image = scalar_slice.rescaled()

    if params.noise_reduction:
        image = gaussian_blur(image, params.noise_reduction_strength)
    if params.sharpen:
        image = unsharp_mask(image, params.sharpen_amount, config.unsharp_sigma)
    if params.edge_enhancement:
        image = edge_enhance(image, params.edge_enhancement_strength)
    if params.smooth:
        image = gaussian_blur(image, params.smooth_amount)

    window = slice_window(scalar_slice, display=display)
    wc, ww = window.center, window.width

    image = (image - wc) * (1 + params.contrast) + wc + params.brightness

    normalized = np.clip((image - (wc - ww / 2)) / ww, 0.0, 1.0)
    if params.gamma != 1.0:
        normalized = np.power(normalized, 1.0 / params.gamma)

    pixels = (normalized * 255).astype(np.uint8)
    if params.invert:
        pixels = 255 - pixels

    return _apply_geometry(pixels, params, config)
