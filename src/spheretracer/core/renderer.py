"""Render driver for still images.

This module provides a convenient wrapper around the core integrator that supports:
- Render settings (image size, samples per pixel, bounce budget)
- Batched rendering with progress callbacks
- Resolving the accumulated radiance into an 8-bit image
- Writing the result as PPM or PNG

Each batch is one kernel launch that adds a few samples to every pixel in
parallel. The launch returning is the point where all samples of the
batch are in; pixels are read back and written in row-major order only
after the last batch.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.spheretracer.core.renderer import Renderer, RenderSettings
    >>> from src.spheretracer.scene.weekend import create_random_scene
    >>> from src.spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> settings = RenderSettings(image_width=400, samples_per_pixel=50)
    >>> scene, camera = create_random_scene(seed=1, aspect_ratio=settings.aspect_ratio)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(settings)
    >>> renderer.render(batch_size=10)
    >>> with open("spheres.ppm", "w") as f:
    ...     renderer.write_ppm(f)
"""

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.spheretracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_color_sum_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.spheretracer.output.png import save_png
from src.spheretracer.output.ppm import resolve_pixels, write_ppm

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Numeric render configuration.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height. The height is derived.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Bounce budget per path.
    """

    image_width: int = 512
    aspect_ratio: float = 1.0
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH

    @property
    def image_height(self) -> int:
        """Output height in pixels, int(image_width / aspect_ratio)."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any value is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive.")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel = {self.samples_per_pixel} must be positive."
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative.")


class Renderer:
    """Renders the current scene through the current camera.

    The scene and camera live in module-level Taichi fields and must be
    set up before rendering. The renderer owns the render target.

    Attributes:
        settings: The render settings.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If the settings are invalid or the image is larger
                than the render target supports.
        """
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()
        setup_render_target(self.width, self.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.image_height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard accumulated samples."""
        clear_render_target()

    def render(
        self,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render all samples_per_pixel samples into a fresh image.

        Args:
            batch_size: Samples per kernel launch. None renders all samples
                in one launch.
            callback: Optional callback called after each batch.
                Receives (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        batch_size: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render all samples, yielding progress after each batch.

        Args:
            batch_size: Samples per kernel launch. None renders all samples
                in one launch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        target_samples = self.settings.samples_per_pixel
        if batch_size is None or batch_size <= 0:
            batch_size = target_samples

        self.reset()
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            self.width,
            self.height,
            target_samples,
            self.settings.max_depth,
        )

        remaining = target_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.settings.max_depth)
            remaining -= batch
            logger.debug("Rendered %d/%d samples", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as 8-bit pixels.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8,
            top row first.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return resolve_pixels(get_color_sum_numpy(), samples)

    def write_ppm(self, stream: TextIO) -> int:
        """Write the rendered image to a text stream as P3.

        Returns:
            The number of pixel lines that could not be written.
        """
        return write_ppm(stream, self.get_pixels())

    def save_image(self, filepath: str) -> int:
        """Save the rendered image, choosing the format by file extension.

        Args:
            filepath: Output path ending in .ppm or .png.

        Returns:
            The number of pixel lines that could not be written. Always 0
            for PNG, which is written in one piece.

        Raises:
            ValueError: If the extension is not supported.
        """
        suffix = Path(filepath).suffix.lower()
        failures = 0
        if suffix == ".png":
            save_png(self.get_pixels(), filepath)
        elif suffix == ".ppm":
            with open(filepath, "w", encoding="ascii") as f:
                failures = self.write_ppm(f)
        else:
            raise ValueError(f"Unsupported image format: {filepath}")
        logger.info("Saved image to %s (%d pixels failed)", filepath, failures)
        return failures

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.settings.samples_per_pixel})"
        )
