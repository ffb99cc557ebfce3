"""Estimating IMU biases, noise and gravity while the vehicle stands still."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

import numpy as np

from .types import IMU, Odom

log = logging.getLogger(__name__)


@dataclass
class StaticIMUInitOptions:
    init_time_seconds: float = 10.0
    init_imu_queue_max_size: int = 2000
    static_odom_pulse: int = 5
    max_static_gyro_var: float = 0.5
    max_static_acce_var: float = 0.05
    gravity_norm: float = 9.81
    use_speed_for_static_checking: bool = True


def _mean_and_cov_diag(samples: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    mean = samples.mean(axis=0)
    cov = ((samples - mean) ** 2).sum(axis=0) / (len(samples) - 1)
    return mean, cov


class StaticIMUInit:
    """Collects static IMU readings and estimates initial biases, noise and gravity.

    When odometry is used, readings are only collected while both wheels report
    fewer pulses than the static threshold.
    """

    def __init__(self, options: StaticIMUInitOptions | None = None):
        self.options = options if options is not None else StaticIMUInitOptions()
        self._init_success = False
        self._cov_gyro = np.zeros(3)
        self._cov_acce = np.zeros(3)
        self._init_bg = np.zeros(3)
        self._init_ba = np.zeros(3)
        self._gravity = np.zeros(3)
        self._is_static = False
        self._queue: deque[IMU] = deque()
        self._current_time = 0.0
        self._init_start_time = 0.0

    @property
    def init_success(self) -> bool:
        return self._init_success

    @property
    def cov_gyro(self) -> np.ndarray:
        return self._cov_gyro.copy()

    @property
    def cov_acce(self) -> np.ndarray:
        return self._cov_acce.copy()

    @property
    def init_bg(self) -> np.ndarray:
        return self._init_bg.copy()

    @property
    def init_ba(self) -> np.ndarray:
        return self._init_ba.copy()

    @property
    def gravity(self) -> np.ndarray:
        return self._gravity.copy()

    def add_imu(self, imu: IMU) -> bool:
        """Add a reading; True only once initialisation has already succeeded."""
        if self._init_success:
            return True

        if self.options.use_speed_for_static_checking and not self._is_static:
            log.warning("waiting for the vehicle to stand still")
            self._queue.clear()
            return False

        if not self._queue:
            self._init_start_time = imu.timestamp

        self._queue.append(imu)

        if imu.timestamp - self._init_start_time > self.options.init_time_seconds:
            self._try_init()

        while len(self._queue) > self.options.init_imu_queue_max_size:
            self._queue.popleft()

        self._current_time = imu.timestamp
        return False

    def add_odom(self, odom: Odom) -> bool:
        """Update the standstill flag from wheel pulses."""
        if self._init_success:
            return True
        threshold = self.options.static_odom_pulse
        self._is_static = odom.left_pulse < threshold and odom.right_pulse < threshold
        self._current_time = odom.timestamp
        return True

    def _try_init(self) -> bool:
        if len(self._queue) < 10:
            return False

        gyros = np.array([imu.gyro for imu in self._queue])
        acces = np.array([imu.acce for imu in self._queue])

        mean_gyro, self._cov_gyro = _mean_and_cov_diag(gyros)
        mean_acce, self._cov_acce = _mean_and_cov_diag(acces)

        log.info("mean acce: %s", mean_acce)
        self._gravity = -mean_acce / np.linalg.norm(mean_acce) * self.options.gravity_norm

        mean_acce, self._cov_acce = _mean_and_cov_diag(acces + self._gravity)

        gyro_var = float(np.linalg.norm(self._cov_gyro))
        if gyro_var > self.options.max_static_gyro_var:
            log.error("gyro noise too large: %s > %s", gyro_var, self.options.max_static_gyro_var)
            return False

        acce_var = float(np.linalg.norm(self._cov_acce))
        if acce_var > self.options.max_static_acce_var:
            log.error("accelerometer noise too large: %s > %s", acce_var, self.options.max_static_acce_var)
            return False

        self._init_bg = mean_gyro
        self._init_ba = mean_acce
        log.info(
            "IMU initialised after %.3f s, bg = %s, ba = %s, gravity = %s",
            self._current_time - self._init_start_time,
            self._init_bg,
            self._init_ba,
            self._gravity,
        )
        self._init_success = True
        return True