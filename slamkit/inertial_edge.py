"""Preintegration residual linking two consecutive navigation states."""

from __future__ import annotations

import numpy as np

from .imu_preintegration import IMUPreintegration
from .lie import SE3, hat, log_so3, right_jacobian, right_jacobian_inv


class InertialEdge:
    """Nine-dimensional preintegration residual (rotation, velocity, position).

    It connects pose, velocity, gyro bias and accelerometer bias of the first
    state with pose and velocity of the second. Pose increments are applied on
    the right for rotation and additively for translation.
    """

    def __init__(self, preinteg: IMUPreintegration, gravity, weight: float = 1.0):
        self.preint = preinteg
        self.dt = preinteg.dt
        self.gravity = np.array(gravity, dtype=float).reshape(3)
        try:
            self.information = np.linalg.inv(preinteg.cov) * weight
        except np.linalg.LinAlgError as exc:
            raise ValueError("preintegration covariance is singular") from exc

    def error(self, pose1: SE3, v1, bg1, ba1, pose2: SE3, v2) -> np.ndarray:
        """Residual ordered rotation, velocity, position."""
        v1 = np.asarray(v1, dtype=float).reshape(3)
        v2 = np.asarray(v2, dtype=float).reshape(3)
        g, dt = self.gravity, self.dt

        dR = self.preint.delta_rotation(bg1)
        dv = self.preint.delta_velocity(bg1, ba1)
        dp = self.preint.delta_position(bg1, ba1)

        r1t = pose1.rotation.T
        er = log_so3(dR.T @ r1t @ pose2.rotation)
        ev = r1t @ (v2 - v1 - g * dt) - dv
        ep = r1t @ (pose2.translation - pose1.translation - v1 * dt - g * dt * dt / 2) - dp
        return np.concatenate((er, ev, ep))

    def jacobians(self, pose1: SE3, v1, bg1, ba1, pose2: SE3, v2) -> tuple[np.ndarray, ...]:
        """Jacobians of the residual with respect to each of the six connected variables."""
        v1 = np.asarray(v1, dtype=float).reshape(3)
        v2 = np.asarray(v2, dtype=float).reshape(3)
        bg = np.asarray(bg1, dtype=float).reshape(3)
        g, dt = self.gravity, self.dt
        pre = self.preint
        dbg = bg - pre.bg

        r1 = pose1.rotation
        r1t = r1.T
        r2 = pose2.rotation
        pi, pj = pose1.translation, pose2.translation

        dR = pre.delta_rotation(bg)
        eR = dR.T @ r1t @ r2
        inv_jr = right_jacobian_inv(log_so3(eR))

        j_pose1 = np.zeros((9, 6))
        j_pose1[0:3, 0:3] = -inv_jr @ (r2.T @ r1)
        j_pose1[3:6, 0:3] = hat(r1t @ (v2 - v1 - g * dt))
        j_pose1[6:9, 0:3] = hat(r1t @ (pj - pi - v1 * dt - 0.5 * g * dt * dt))
        j_pose1[6:9, 3:6] = -r1t

        j_v1 = np.zeros((9, 3))
        j_v1[3:6] = -r1t
        j_v1[6:9] = -r1t * dt

        j_bg = np.zeros((9, 3))
        j_bg[0:3] = -inv_jr @ eR.T @ right_jacobian(pre.dR_dbg @ dbg) @ pre.dR_dbg
        j_bg[3:6] = -pre.dV_dbg
        j_bg[6:9] = -pre.dP_dbg

        j_ba = np.zeros((9, 3))
        j_ba[3:6] = -pre.dV_dba
        j_ba[6:9] = -pre.dP_dba

        j_pose2 = np.zeros((9, 6))
        j_pose2[0:3, 0:3] = inv_jr
        j_pose2[6:9, 3:6] = r1t

        j_v2 = np.zeros((9, 3))
        j_v2[3:6] = r1t

        return j_pose1, j_v1, j_bg, j_ba, j_pose2, j_v2

    def hessian(self, pose1: SE3, v1, bg1, ba1, pose2: SE3, v2) -> np.ndarray:
        """24x24 Gauss-Newton Hessian J^T * information * J over all connected variables."""
        jac = np.hstack(self.jacobians(pose1, v1, bg1, ba1, pose2, v2))
        return jac.T @ self.information @ jac