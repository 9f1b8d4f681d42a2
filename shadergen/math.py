# shadergen/math.py
import math

import numpy as np

# All builders return row-major numpy matrices in the column-vector
# convention (translation in the last column). Transpose before upload.


def create_rotation_y(angle: float) -> np.ndarray:
    """Rotation about the vertical (+Y) axis by `angle` radians."""
    c = math.cos(angle)
    s = math.sin(angle)

    mat = np.eye(4, dtype=np.float32)
    mat[0, 0] = c
    mat[0, 2] = -s
    mat[2, 0] = s
    mat[2, 2] = c
    return mat


def create_translation(x: float, y: float, z: float) -> np.ndarray:
    mat = np.eye(4, dtype=np.float32)
    mat[0, 3] = x
    mat[1, 3] = y
    mat[2, 3] = z
    return mat


def create_perspective_projection(
    fov_deg: float, aspect: float, near: float, far: float
) -> np.ndarray:
    """
    Right-handed OpenGL projection for a vertical field of view in degrees.
    Maps z = -near to -1 and z = -far to +1 in NDC.
    """
    half_fov = math.radians(fov_deg) / 2.0
    f = 1.0 / math.tan(half_fov) if half_fov else 1000.0
    aspect = aspect or 1.0
    depth = (near - far) or -0.001

    return np.array(
        [
            [f / aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (far + near) / depth, 2.0 * far * near / depth],
            [0.0, 0.0, -1.0, 0.0],
        ],
        dtype=np.float32,
    )
