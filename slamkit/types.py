"""Sensor readings and navigation state."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .lie import SE3


def _as_vec3(v) -> np.ndarray:
    return np.array(v, dtype=float).reshape(3)


def _zeros3() -> np.ndarray:
    return np.zeros(3)


@dataclass(eq=False)
class IMU:
    """One IMU reading: angular rate and specific force."""

    timestamp: float = 0.0
    gyro: np.ndarray = field(default_factory=_zeros3)
    acce: np.ndarray = field(default_factory=_zeros3)

    def __post_init__(self) -> None:
        self.gyro = _as_vec3(self.gyro)
        self.acce = _as_vec3(self.acce)


@dataclass
class Odom:
    """One wheel-encoder reading: pulses of both wheels in a measuring span."""

    timestamp: float = 0.0
    left_pulse: float = 0.0
    right_pulse: float = 0.0


@dataclass(eq=False)
class GNSS:
    """One GNSS reading with its pose in map (UTM) coordinates."""

    unix_time: float = 0.0
    utm_pose: SE3 = field(default_factory=SE3)
    heading_valid: bool = False
    heading: float = 0.0
    lat_lon_alt: np.ndarray = field(default_factory=_zeros3)

    def __post_init__(self) -> None:
        self.lat_lon_alt = _as_vec3(self.lat_lon_alt)


@dataclass(eq=False)
class NavState:
    """Full navigation state: time, attitude, position, velocity and IMU biases."""

    timestamp: float = 0.0
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    position: np.ndarray = field(default_factory=_zeros3)
    velocity: np.ndarray = field(default_factory=_zeros3)
    bg: np.ndarray = field(default_factory=_zeros3)
    ba: np.ndarray = field(default_factory=_zeros3)

    def __post_init__(self) -> None:
        self.rotation = np.array(self.rotation, dtype=float).reshape(3, 3)
        self.position = _as_vec3(self.position)
        self.velocity = _as_vec3(self.velocity)
        self.bg = _as_vec3(self.bg)
        self.ba = _as_vec3(self.ba)

    def se3(self) -> SE3:
        return SE3(self.rotation, self.position)