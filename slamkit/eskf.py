"""Error-state Kalman filter fusing IMU, wheel odometry, GNSS and pose observations.

The 18-dimensional error state is ordered p, v, theta, bg, ba, g.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .lie import DEG2RAD, SE3, exp_so3, hat, log_so3
from .types import GNSS, IMU, NavState, Odom

log = logging.getLogger(__name__)

_DIM = 18


@dataclass
class ESKFOptions:
    imu_dt: float = 0.01
    gyro_var: float = 1e-5
    acce_var: float = 1e-2
    bias_gyro_var: float = 1e-6
    bias_acce_var: float = 1e-4
    odom_var: float = 0.5
    odom_span: float = 0.1
    wheel_radius: float = 0.155
    circle_pulse: float = 1024.0
    gnss_pos_noise: float = 0.1
    gnss_height_noise: float = 0.1
    gnss_ang_noise: float = 1.0 * DEG2RAD
    update_bias_gyro: bool = True
    update_bias_acce: bool = True


class ESKF:
    """Error-state Kalman filter over an 18-dimensional state."""

    def __init__(self, options: ESKFOptions | None = None):
        self._options = options if options is not None else ESKFOptions()
        self._time = 0.0
        self._p = np.zeros(3)
        self._v = np.zeros(3)
        self._R = np.eye(3)
        self._bg = np.zeros(3)
        self._ba = np.zeros(3)
        self._g = np.array([0.0, 0.0, -9.8])
        self._dx = np.zeros(_DIM)
        self._cov = np.eye(_DIM)
        self._Q = np.zeros((_DIM, _DIM))
        self._odom_noise = np.zeros((3, 3))
        self._first_gnss = True
        self._build_noise(self._options)

    @property
    def options(self) -> ESKFOptions:
        return self._options

    @property
    def gravity(self) -> np.ndarray:
        return self._g.copy()

    @property
    def cov(self) -> np.ndarray:
        return self._cov.copy()

    def set_initial_conditions(self, options, init_bg, init_ba, gravity=(0.0, 0.0, -9.8)) -> None:
        """Set noise options, initial biases and gravity; reset the covariance."""
        self._build_noise(options)
        self._options = options
        self._bg = np.array(init_bg, dtype=float).reshape(3)
        self._ba = np.array(init_ba, dtype=float).reshape(3)
        self._g = np.array(gravity, dtype=float).reshape(3)
        self._cov = np.eye(_DIM) * 1e-4

    def predict(self, imu: IMU) -> bool:
        """Propagate with one IMU reading; False if the time step is implausible."""
        dt = imu.timestamp - self._time
        if dt > 5 * self._options.imu_dt or dt < 0:
            log.info("skip this imu because dt = %s", dt)
            self._time = imu.timestamp
            return False

        acc = imu.acce - self._ba
        gyr = imu.gyro - self._bg
        acc_world = self._R @ acc
        new_p = self._p + self._v * dt + 0.5 * acc_world * dt * dt + 0.5 * self._g * dt * dt
        new_v = self._v + acc_world * dt + self._g * dt
        new_R = self._R @ exp_so3(gyr * dt)

        self._R = new_R
        self._v = new_v
        self._p = new_p

        eye3 = np.eye(3)
        F = np.eye(_DIM)
        F[0:3, 3:6] = eye3 * dt
        F[3:6, 6:9] = -self._R @ hat(acc) * dt
        F[3:6, 12:15] = -self._R * dt
        F[3:6, 15:18] = eye3 * dt
        F[6:9, 6:9] = exp_so3(-gyr * dt)
        F[6:9, 9:12] = -eye3 * dt

        self._dx = F @ self._dx
        self._cov = F @ self._cov @ F.T + self._Q
        self._time = imu.timestamp
        return True

    def observe_wheel_speed(self, odom: Odom) -> bool:
        """Correct the velocity with a forward speed from wheel pulses."""
        H = np.zeros((3, _DIM))
        H[:, 3:6] = np.eye(3)
        K = self._cov @ H.T @ np.linalg.inv(H @ self._cov @ H.T + self._odom_noise)

        opts = self._options
        scale = opts.wheel_radius / opts.circle_pulse * 2 * math.pi / opts.odom_span
        average_vel = 0.5 * (odom.left_pulse * scale + odom.right_pulse * scale)
        vel_world = self._R @ np.array([average_vel, 0.0, 0.0])

        self._dx = K @ (vel_world - self._v)
        self._cov = (np.eye(_DIM) - K @ H) @ self._cov
        self._update_and_reset()
        return True

    def observe_gps(self, gnss: GNSS) -> bool:
        """Correct with a GNSS pose; the first reading sets the pose directly."""
        if self._first_gnss:
            self._R = gnss.utm_pose.rotation.copy()
            self._p = gnss.utm_pose.translation.copy()
            self._first_gnss = False
            self._time = gnss.unix_time
            return True

        if not gnss.heading_valid:
            raise ValueError("GNSS observation requires a valid heading")
        self.observe_se3(gnss.utm_pose, self._options.gnss_pos_noise, self._options.gnss_ang_noise)
        self._time = gnss.unix_time
        return True

    def observe_se3(self, pose: SE3, trans_noise: float = 0.1, ang_noise: float = 1.0 * DEG2RAD) -> bool:
        """Correct position and attitude with a full pose observation."""
        H = np.zeros((6, _DIM))
        H[0:3, 0:3] = np.eye(3)
        H[3:6, 6:9] = np.eye(3)

        V = np.diag([trans_noise] * 3 + [ang_noise] * 3)
        K = self._cov @ H.T @ np.linalg.inv(H @ self._cov @ H.T + V)

        innov = np.concatenate((pose.translation - self._p, log_so3(self._R.T @ pose.rotation)))
        self._dx = K @ innov
        self._cov = (np.eye(_DIM) - K @ H) @ self._cov
        self._update_and_reset()
        return True

    def nominal_state(self) -> NavState:
        return NavState(
            self._time, self._R.copy(), self._p.copy(), self._v.copy(), self._bg.copy(), self._ba.copy()
        )

    def nominal_se3(self) -> SE3:
        return SE3(self._R, self._p)

    def set_state(self, state: NavState, gravity) -> None:
        self._time = state.timestamp
        self._R = state.rotation.copy()
        self._p = state.position.copy()
        self._v = state.velocity.copy()
        self._bg = state.bg.copy()
        self._ba = state.ba.copy()
        self._g = np.array(gravity, dtype=float).reshape(3)

    def set_cov(self, cov) -> None:
        self._cov = np.array(cov, dtype=float).reshape(_DIM, _DIM)

    def _build_noise(self, options: ESKFOptions) -> None:
        ev, et = options.acce_var, options.gyro_var
        eg, ea = options.bias_gyro_var, options.bias_acce_var
        self._Q = np.diag([0.0] * 3 + [ev] * 3 + [et] * 3 + [eg] * 3 + [ea] * 3 + [0.0] * 3)
        # Odometry noise comes from the options currently held by the filter.
        o2 = self._options.odom_var * self._options.odom_var
        self._odom_noise = np.diag([o2, o2, o2])

    def _update_and_reset(self) -> None:
        dx = self._dx
        self._p = self._p + dx[0:3]
        self._v = self._v + dx[3:6]
        self._R = self._R @ exp_so3(dx[6:9])
        if self._options.update_bias_gyro:
            self._bg = self._bg + dx[9:12]
        if self._options.update_bias_acce:
            self._ba = self._ba + dx[12:15]
        self._g = self._g + dx[15:18]

        J = np.eye(_DIM)
        J[6:9, 6:9] = np.eye(3) - 0.5 * hat(dx[6:9])
        self._cov = J @ self._cov @ J.T
        self._dx = np.zeros(_DIM)