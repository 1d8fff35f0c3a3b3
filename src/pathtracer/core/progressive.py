"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for UI updates
- Easy reset and re-render functionality

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import create_three_sphere_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_sphere_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, max_depth=50)
    >>> renderer.render(100)  # Render 100 SPP
    >>> image = renderer.get_image_numpy()
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_image,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.preview.export import save_image, to_rgb8

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps its own width, height and path depth and delegates
    to the global integrator buffers (which are Taichi fields). The scene
    and camera must be set up before rendering.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of scatters followed per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum number of scatters followed per path.

        Raises:
            ValueError: If dimensions are out of range or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self._max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are out of range.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        This is a generator-based alternative to render() with callbacks.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        start_samples = self.sample_count
        target_samples = start_samples + num_samples
        logger.info(
            "Rendering %dx%d, %d spp, max depth %d",
            self._width,
            self._height,
            num_samples,
            self._max_depth,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self._max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image(self) -> Any:
        """Get the raw Taichi color buffer field.

        Note: This returns the full preallocated buffer. Use width/height
        properties to determine the active region.
        """
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the per-pixel sample mean as a NumPy array.

        Returns:
            Linear image of shape (height, width, 3), top row first.
        """
        return get_normalized_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as gamma-corrected 8-bit pixels."""
        return to_rgb8(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image, choosing the format from the suffix.

        Raises:
            ValueError: If the suffix is not .ppm or .png.
            ImageWriteError: If the file cannot be written.
        """
        save_image(filepath, self.get_image_numpy())

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
