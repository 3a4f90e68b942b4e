"""Camera module for view setup and primary ray generation.

Components:
    thin_lens: Look-at perspective camera with thin-lens defocus blur

Ray generation uses normalized screen coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    camera_ray_numpy,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
    "camera_ray_numpy",
]
