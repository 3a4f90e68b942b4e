"""Plain-text PPM (P3) image output.

The renderer accumulates a radiance sum per pixel. Turning that into an
8-bit image is a fixed pipeline, applied per channel:
    average over samples -> sqrt (gamma 2) -> clamp to [0, 0.999]
    -> scale by 256 -> truncate to integer

The P3 layout is a three-line header followed by one pixel per line:

    P3
    <width> <height>
    255
    r g b
    ...

Pixels are written in row-major order, top row first, left to right.

Example:
    >>> import sys
    >>> import numpy as np
    >>> from src.spheretracer.output.ppm import write_ppm
    >>> pixels = np.zeros((2, 3, 3), dtype=np.uint8)
    >>> failures = write_ppm(sys.stdout, pixels)
"""

import logging
from typing import TextIO

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)

# Maximum channel value declared in the header
MAX_CHANNEL_VALUE = 255

# Largest value a channel may reach before scaling by 256
CHANNEL_CLAMP_MAX = 0.999


def resolve_pixels(
    color_sum: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert accumulated radiance sums to 8-bit pixel values.

    Args:
        color_sum: Array of shape (height, width, 3) with the radiance
            summed over all samples of each pixel.
        samples_per_pixel: Number of samples in each sum. Must be positive.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive.")

    average = np.asarray(color_sum, dtype=np.float64) / samples_per_pixel
    # Gamma 2
    corrected = np.sqrt(average)
    clamped = np.clip(corrected, 0.0, CHANNEL_CLAMP_MAX)
    return (256.0 * clamped).astype(np.uint8)


def format_pixel(r: int, g: int, b: int) -> str:
    """Format one pixel as a P3 body line (with trailing newline)."""
    return f"{int(r)} {int(g)} {int(b)}\n"


def format_header(width: int, height: int) -> str:
    """Format the three-line P3 header."""
    return f"P3\n{width} {height}\n{MAX_CHANNEL_VALUE}\n"


def write_ppm(stream: TextIO, pixels: npt.NDArray[np.integer]) -> int:
    """Write an image to a text stream in P3 format.

    A failed pixel write is logged and skipped; the remaining pixels are
    still written. A failed header write is not caught.

    Args:
        stream: Writable text stream.
        pixels: Array of shape (height, width, 3), top row first.

    Returns:
        The number of pixel lines that could not be written.
    """
    height, width = pixels.shape[0], pixels.shape[1]
    stream.write(format_header(width, height))

    failures = 0
    for row in range(height):
        for col in range(width):
            r, g, b = pixels[row, col]
            try:
                stream.write(format_pixel(r, g, b))
            except (OSError, ValueError) as exc:
                failures += 1
                logger.error("Failed to write pixel (%d, %d): %s", col, row, exc)

    if failures:
        logger.warning("%d of %d pixels could not be written", failures, width * height)
    return failures
