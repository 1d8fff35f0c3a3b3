"""Image export utilities for rendered images.

This module turns the renderer's per-pixel sample mean into 8-bit pixels and
writes them to disk.

Supported formats:
    - PPM (plain-text P3 pixmap, written directly)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from pathtracer.preview.export import save_image
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> save_image("output.ppm", renderer.get_image_numpy())
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Largest value kept before scaling to 8 bits, so 1.0 maps to 255 not 256
MAX_INTENSITY = 0.999


class ImageWriteError(RuntimeError):
    """Raised when a rendered image cannot be written to disk."""


def to_rgb8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear sample-mean image to 8-bit pixels.

    Applies gamma 2 (square root), clamps to [0, MAX_INTENSITY], scales by
    256 and truncates.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    image = np.asarray(image, dtype=np.float64)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")

    # Negative or non-finite means never reach the buffer, but guard the sqrt anyway
    image = np.nan_to_num(image, nan=0.0, posinf=MAX_INTENSITY, neginf=0.0)
    corrected = np.sqrt(np.maximum(image, 0.0))
    return (256.0 * np.clip(corrected, 0.0, MAX_INTENSITY)).astype(np.uint8)


def format_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Format 8-bit pixels as a plain-text P3 pixmap.

    The header is ``P3``, ``width height`` and the maximum value 255, each on
    its own line, followed by one ``r g b`` line per pixel in row-major
    order starting at the top-left.

    Args:
        pixels: 8-bit image array of shape (H, W, 3).

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixels of shape (H, W, 3), got {pixels.shape}")

    height, width, _ = pixels.shape
    lines = [f"P3\n{width} {height}\n255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def save_ppm(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Write 8-bit pixels as a P3 pixmap.

    Args:
        filepath: Output file path.
        pixels: 8-bit image array of shape (H, W, 3).

    Raises:
        ImageWriteError: If the file cannot be written.
    """
    text = format_ppm(pixels)
    try:
        Path(filepath).write_text(text, encoding="ascii")
    except OSError as e:
        raise ImageWriteError(f"Failed to write {filepath}: {e}") from e
    logger.info("Wrote %s", filepath)


def save_png(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Write 8-bit pixels as a PNG file using Pillow.

    Args:
        filepath: Output file path (should end in .png).
        pixels: 8-bit image array of shape (H, W, 3).

    Raises:
        ImageWriteError: If the file cannot be written.
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    try:
        pil_image.save(filepath)
    except OSError as e:
        raise ImageWriteError(f"Failed to write {filepath}: {e}") from e
    logger.info("Wrote %s", filepath)


def save_image(filepath: str | Path, image: npt.NDArray[np.floating]) -> None:
    """Convert a linear sample-mean image and write it to disk.

    The format is chosen from the file suffix: ``.png`` is written with
    Pillow, ``.ppm`` as a plain-text P3 pixmap.

    Args:
        filepath: Output file path.
        image: Linear image array of shape (H, W, 3), top row first.

    Raises:
        ValueError: If the suffix is not a supported format.
        ImageWriteError: If the file cannot be written.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".png":
        save_png(filepath, to_rgb8(image))
    elif suffix == ".ppm":
        save_ppm(filepath, to_rgb8(image))
    else:
        raise ValueError(f"Unsupported image format: {suffix!r} (use .ppm or .png)")


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
