"""Rotation and rigid-transform helpers on SO(3) and SE(3)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi

_SMALL_ANGLE = 1e-10


def _vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def hat(v) -> np.ndarray:
    """Skew-symmetric matrix of a 3-vector, so that hat(a) @ b == a x b."""
    x, y, z = _vec3(v)
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def exp_so3(omega) -> np.ndarray:
    """Rotation matrix of a rotation vector (Rodrigues' formula)."""
    w = _vec3(omega)
    theta = float(np.linalg.norm(w))
    big_w = hat(w)
    if theta < _SMALL_ANGLE:
        return np.eye(3) + big_w + 0.5 * big_w @ big_w
    return (
        np.eye(3)
        + math.sin(theta) / theta * big_w
        + (1.0 - math.cos(theta)) / (theta * theta) * big_w @ big_w
    )


def quaternion_from_matrix(rotation) -> np.ndarray:
    """Unit quaternion (w, x, y, z) of a rotation matrix, with w >= 0."""
    m = np.asarray(rotation, dtype=float).reshape(3, 3)
    diag_sum = float(m[0, 0] + m[1, 1] + m[2, 2])
    if diag_sum > 0.0:
        s = math.sqrt(diag_sum + 1.0) * 2.0
        q = [0.25 * s, (m[2, 1] - m[1, 2]) / s, (m[0, 2] - m[2, 0]) / s, (m[1, 0] - m[0, 1]) / s]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0
        q = [(m[2, 1] - m[1, 2]) / s, 0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s]
    elif m[1, 1] > m[2, 2]:
        s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0
        q = [(m[0, 2] - m[2, 0]) / s, (m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s]
    else:
        s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0
        q = [(m[1, 0] - m[0, 1]) / s, (m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s]
    quat = np.array(q)
    quat /= np.linalg.norm(quat)
    return -quat if quat[0] < 0.0 else quat


def matrix_from_quaternion(q) -> np.ndarray:
    """Rotation matrix of a quaternion (w, x, y, z); the quaternion is normalised first."""
    quat = np.asarray(q, dtype=float).reshape(4)
    w, x, y, z = quat / np.linalg.norm(quat)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ]
    )


def log_so3(rotation) -> np.ndarray:
    """Rotation vector of a rotation matrix."""
    w, *vec = quaternion_from_matrix(rotation)
    vec = np.array(vec)
    n = float(np.linalg.norm(vec))
    if n < _SMALL_ANGLE:
        scale = 2.0 / w - 2.0 / 3.0 * (n * n) / (w * w * w)
    elif abs(w) < _SMALL_ANGLE:
        scale = (math.pi if w > 0 else -math.pi) / n
    else:
        scale = 2.0 * math.atan(n / w) / n
    return scale * vec


def right_jacobian(omega) -> np.ndarray:
    """Right Jacobian of SO(3) at a rotation vector."""
    w = _vec3(omega)
    theta = float(np.linalg.norm(w))
    big_w = hat(w)
    if theta < 1e-8:
        return np.eye(3) - 0.5 * big_w
    t2 = theta * theta
    return (
        np.eye(3)
        - (1.0 - math.cos(theta)) / t2 * big_w
        + (theta - math.sin(theta)) / (t2 * theta) * big_w @ big_w
    )


def right_jacobian_inv(omega) -> np.ndarray:
    """Inverse of the right Jacobian of SO(3) at a rotation vector."""
    w = _vec3(omega)
    theta = float(np.linalg.norm(w))
    big_w = hat(w)
    if theta < 1e-8:
        return np.eye(3) + 0.5 * big_w
    coeff = 1.0 / (theta * theta) - (1.0 + math.cos(theta)) / (2.0 * theta * math.sin(theta))
    return np.eye(3) + 0.5 * big_w + coeff * big_w @ big_w


def rot_z(angle: float) -> np.ndarray:
    """Rotation matrix about the z axis by an angle in radians."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _quat_mul(a, b) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ]
    )


@dataclass(eq=False)
class SE3:
    """Rigid transform: a rotation matrix and a translation vector."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    __array_ufunc__ = None

    def __post_init__(self) -> None:
        self.rotation = np.array(self.rotation, dtype=float).reshape(3, 3)
        self.translation = np.array(self.translation, dtype=float).reshape(3)

    @classmethod
    def from_matrix(cls, matrix) -> "SE3":
        m = np.asarray(matrix, dtype=float).reshape(4, 4)
        return cls(m[:3, :3], m[:3, 3])

    @property
    def quaternion(self) -> np.ndarray:
        return quaternion_from_matrix(self.rotation)

    def inverse(self) -> "SE3":
        rt = self.rotation.T
        return SE3(rt, -rt @ self.translation)

    def __matmul__(self, other):
        if not isinstance(other, SE3):
            return NotImplemented
        return SE3(
            self.rotation @ other.rotation,
            self.rotation @ other.translation + self.translation,
        )

    def act(self, point) -> np.ndarray:
        """Transform a 3D point."""
        return self.rotation @ _vec3(point) + self.translation

    def matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rotation
        m[:3, 3] = self.translation
        return m


def simulate_circular_motion(
    angular_velocity_deg: float = 10.0,
    linear_velocity: float = 5.0,
    dt: float = 0.05,
    steps: int = 100,
    use_quaternion: bool = False,
) -> list[tuple[SE3, np.ndarray]]:
    """Integrate a vehicle moving on a circle; return (pose, world velocity) per step."""
    omega = np.array([0.0, 0.0, angular_velocity_deg * DEG2RAD])
    v_body = np.array([linear_velocity, 0.0, 0.0])
    pose = SE3()
    trajectory = []
    for _ in range(steps):
        v_world = pose.rotation @ v_body
        translation = pose.translation + v_world * dt
        if use_quaternion:
            dq = np.concatenate(([1.0], 0.5 * omega * dt))
            q = _quat_mul(pose.quaternion, dq)
            rotation = matrix_from_quaternion(q / np.linalg.norm(q))
        else:
            rotation = pose.rotation @ exp_so3(omega * dt)
        pose = SE3(rotation, translation)
        trajectory.append((pose, v_world))
    return trajectory