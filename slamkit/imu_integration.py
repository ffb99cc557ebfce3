"""Dead reckoning by direct integration of IMU readings."""

from __future__ import annotations

import numpy as np

from .lie import exp_so3
from .types import IMU, NavState


class IMUIntegration:
    """Integrates IMU readings into attitude, velocity and position with known biases."""

    def __init__(self, gravity=(0.0, 0.0, -9.8), init_bg=(0.0, 0.0, 0.0), init_ba=(0.0, 0.0, 0.0)):
        self.gravity = np.array(gravity, dtype=float).reshape(3)
        self.bg = np.array(init_bg, dtype=float).reshape(3)
        self.ba = np.array(init_ba, dtype=float).reshape(3)
        self.rotation = np.eye(3)
        self.velocity = np.zeros(3)
        self.position = np.zeros(3)
        self.timestamp = 0.0

    def add_imu(self, imu: IMU) -> None:
        """Integrate one reading; gaps outside (0, 0.1) s only advance the clock."""
        dt = imu.timestamp - self.timestamp
        if 0.0 < dt < 0.1:
            acc_world = self.rotation @ (imu.acce - self.ba)
            self.position = (
                self.position
                + self.velocity * dt
                + 0.5 * self.gravity * dt * dt
                + 0.5 * acc_world * dt * dt
            )
            self.velocity = self.velocity + acc_world * dt + self.gravity * dt
            self.rotation = self.rotation @ exp_so3((imu.gyro - self.bg) * dt)
        self.timestamp = imu.timestamp

    def nav_state(self) -> NavState:
        return NavState(
            self.timestamp,
            self.rotation.copy(),
            self.position.copy(),
            self.velocity.copy(),
            self.bg.copy(),
            self.ba.copy(),
        )