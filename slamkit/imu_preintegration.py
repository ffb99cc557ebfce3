"""IMU preintegration between two keyframes, with bias Jacobians for first-order correction."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .lie import exp_so3, hat, right_jacobian
from .types import IMU, NavState


def _zeros3() -> np.ndarray:
    return np.zeros(3)


@dataclass
class PreintegrationOptions:
    """Initial biases and measurement noise (standard deviations) of the preintegrator."""

    init_bg: np.ndarray = field(default_factory=_zeros3)
    init_ba: np.ndarray = field(default_factory=_zeros3)
    noise_gyro: float = 1e-2
    noise_acce: float = 1e-1


class IMUPreintegration:
    """Accumulates IMU readings into relative rotation, velocity and position increments.

    The increments, their covariance and their Jacobians with respect to the
    biases are exposed as attributes so that optimisation edges can use them.
    """

    def __init__(self, options: PreintegrationOptions | None = None):
        opts = options if options is not None else PreintegrationOptions()
        self.bg = np.array(opts.init_bg, dtype=float).reshape(3)
        self.ba = np.array(opts.init_ba, dtype=float).reshape(3)
        ng2 = opts.noise_gyro * opts.noise_gyro
        na2 = opts.noise_acce * opts.noise_acce
        self.noise_gyro_acce = np.diag([ng2] * 3 + [na2] * 3)

        self.dt = 0.0
        self.cov = np.zeros((9, 9))

        self.dR = np.eye(3)
        self.dv = np.zeros(3)
        self.dp = np.zeros(3)

        self.dR_dbg = np.zeros((3, 3))
        self.dV_dbg = np.zeros((3, 3))
        self.dV_dba = np.zeros((3, 3))
        self.dP_dbg = np.zeros((3, 3))
        self.dP_dba = np.zeros((3, 3))

    def integrate(self, imu: IMU, dt: float) -> None:
        """Add one IMU reading held for dt seconds."""
        gyr = imu.gyro - self.bg
        acc = imu.acce - self.ba
        dR = self.dR
        dt2 = dt * dt

        self.dp = self.dp + self.dv * dt + 0.5 * dR @ acc * dt2
        self.dv = self.dv + dR @ acc * dt

        acc_hat = hat(acc)
        A = np.eye(9)
        B = np.zeros((9, 6))
        A[3:6, 0:3] = -dR * dt @ acc_hat
        A[6:9, 0:3] = -0.5 * dR @ acc_hat * dt2
        A[6:9, 3:6] = dt * np.eye(3)
        B[3:6, 3:6] = dR * dt
        B[6:9, 3:6] = 0.5 * dR * dt2

        # Bias Jacobians use the increments before this step.
        self.dP_dba = self.dP_dba + self.dV_dba * dt - 0.5 * dR * dt2
        self.dP_dbg = self.dP_dbg + self.dV_dbg * dt - 0.5 * dR * dt2 @ acc_hat @ self.dR_dbg
        self.dV_dba = self.dV_dba - dR * dt
        self.dV_dbg = self.dV_dbg - dR * dt @ acc_hat @ self.dR_dbg

        omega = gyr * dt
        right_j = right_jacobian(omega)
        delta_r = exp_so3(omega)
        self.dR = dR @ delta_r

        A[0:3, 0:3] = delta_r.T
        B[0:3, 0:3] = right_j * dt

        self.cov = A @ self.cov @ A.T + B @ self.noise_gyro_acce @ B.T
        self.dR_dbg = delta_r.T @ self.dR_dbg - right_j * dt
        self.dt += dt

    def predict(self, start: NavState, gravity=(0.0, 0.0, -9.81)) -> NavState:
        """State reached from start after the integrated interval."""
        g = np.array(gravity, dtype=float).reshape(3)
        rj = start.rotation @ self.dR
        vj = start.rotation @ self.dv + start.velocity + g * self.dt
        pj = (
            start.rotation @ self.dp
            + start.position
            + start.velocity * self.dt
            + 0.5 * g * self.dt * self.dt
        )
        return NavState(start.timestamp + self.dt, rj, pj, vj, self.bg.copy(), self.ba.copy())

    def delta_rotation(self, bg) -> np.ndarray:
        """Rotation increment corrected to first order for a gyro bias."""
        dbg = np.asarray(bg, dtype=float).reshape(3) - self.bg
        return self.dR @ exp_so3(self.dR_dbg @ dbg)

    def delta_velocity(self, bg, ba) -> np.ndarray:
        """Velocity increment corrected to first order for both biases."""
        dbg = np.asarray(bg, dtype=float).reshape(3) - self.bg
        dba = np.asarray(ba, dtype=float).reshape(3) - self.ba
        return self.dv + self.dV_dbg @ dbg + self.dV_dba @ dba

    def delta_position(self, bg, ba) -> np.ndarray:
        """Position increment corrected to first order for both biases."""
        dbg = np.asarray(bg, dtype=float).reshape(3) - self.bg
        dba = np.asarray(ba, dtype=float).reshape(3) - self.ba
        return self.dp + self.dP_dbg @ dbg + self.dP_dba @ dba