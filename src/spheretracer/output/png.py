"""PNG image output via Pillow.

Example:
    >>> from src.spheretracer.output.png import save_png
    >>> save_png(renderer.get_pixels(), "spheres.png")
"""

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def save_png(pixels: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        pixels: Array of shape (height, width, 3), top row first.
        filepath: Output file path (should end in .png).
    """
    image = np.ascontiguousarray(pixels, dtype=np.uint8)
    PILImage.fromarray(image).save(filepath)
