"""Scene module for world storage and scene construction.

Components:
    world: Sphere list in Taichi fields and the nearest-hit query
    manager: Unified scene manager coordinating spheres and materials
    weekend: Builders for the random-spheres and three-sphere scenes

Scene data is organized for parallel access from render kernels:
    - Structure-of-Arrays layout for sphere data
    - One material handle per sphere, shared materials by handle
    - Read-only once the scene is built
"""

from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .weekend import create_random_scene, create_three_sphere_scene
from .world import (
    MAX_SPHERES,
    WorldHitRecord,
    add_sphere,
    clear_world,
    get_sphere_count,
    hit_world,
)

__all__ = [
    # World module
    "WorldHitRecord",
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "hit_world",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Scene builders
    "create_random_scene",
    "create_three_sphere_scene",
]
