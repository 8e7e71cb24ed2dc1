"""
2D affine transform helpers.

Matrices are 3x3 float arrays acting on column vectors in continuous
y-down canvas coordinates (pixel (i, j) covers [i, i+1) x [j, j+1)).
A positive angle rotates clockwise on screen, matching a 2D canvas.
"""

import math

import numpy as np


def identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


def translate(tx: float, ty: float) -> np.ndarray:
    matrix = identity()
    matrix[0, 2] = tx
    matrix[1, 2] = ty
    return matrix


def scale(sx: float, sy: float) -> np.ndarray:
    matrix = identity()
    matrix[0, 0] = sx
    matrix[1, 1] = sy
    return matrix


def rotate(degrees: float) -> np.ndarray:
    """Rotation matrix; multiples of 90 degrees are exact."""
    quarter_turns = degrees / 90.0
    if quarter_turns.is_integer():
        # Exact values avoid cos(pi/2) ~ 6e-17 smearing pixel-aligned rotations
        cos_a, sin_a = [(1, 0), (0, 1), (-1, 0), (0, -1)][int(quarter_turns) % 4]
    else:
        radians = degrees * math.pi / 180.0
        cos_a, sin_a = math.cos(radians), math.sin(radians)

    matrix = identity()
    matrix[0, 0] = cos_a
    matrix[0, 1] = -sin_a
    matrix[1, 0] = sin_a
    matrix[1, 1] = cos_a
    return matrix


def compose(*matrices: np.ndarray) -> np.ndarray:
    """Compose left to right, like successive canvas context calls."""
    result = identity()
    for matrix in matrices:
        result = result @ matrix
    return result


def is_identity(matrix: np.ndarray) -> bool:
    return bool(np.allclose(matrix, identity(), atol=1e-12))


def to_pixel_space(matrix: np.ndarray) -> np.ndarray:
    """
    Convert a continuous-coordinate matrix to pixel-index space.

    OpenCV maps pixel indices, whose centers sit at +0.5 in continuous
    coordinates.
    """
    return compose(translate(-0.5, -0.5), matrix, translate(0.5, 0.5))
