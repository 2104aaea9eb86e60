"""
Graphics module.

Exports:
- Camera, CameraMode: Snap camera over a tile grid
- compute_offset: Pure clamped camera offset calculation
"""

from engine.graphics.camera import Camera, CameraMode, compute_offset

__all__ = [
    "Camera",
    "CameraMode",
    "compute_offset",
]
