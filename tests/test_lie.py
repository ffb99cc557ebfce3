import math

import numpy as np
import pytest

from slamkit.lie import (
    SE3,
    exp_so3,
    hat,
    log_so3,
    matrix_from_quaternion,
    quaternion_from_matrix,
    right_jacobian,
    right_jacobian_inv,
    rot_z,
    simulate_circular_motion,
)

VECTORS = [
    [0.1, -0.2, 0.3],
    [1.0, 0.5, -0.7],
    [0.0, 0.0, 2.9],
    [1e-9, 0.0, 0.0],
    [-1.2, 0.4, 0.9],
]


def test_hat_matches_cross_product():
    a = np.array([0.3, -1.1, 2.0])
    b = np.array([1.5, 0.2, -0.4])
    np.testing.assert_allclose(hat(a) @ b, np.cross(a, b))
    np.testing.assert_allclose(hat(a), -hat(a).T)


@pytest.mark.parametrize("omega", VECTORS)
def test_exp_log_round_trip(omega):
    rotation = exp_so3(omega)
    np.testing.assert_allclose(log_so3(rotation), omega, atol=1e-9)


@pytest.mark.parametrize("omega", VECTORS)
def test_exp_is_rotation(omega):
    rotation = exp_so3(omega)
    np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-12)
    assert np.linalg.det(rotation) == pytest.approx(1.0)


def test_rot_z():
    np.testing.assert_allclose(rot_z(math.pi / 2) @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(rot_z(0.7), exp_so3([0.0, 0.0, 0.7]), atol=1e-12)


def test_identity_quaternion():
    np.testing.assert_allclose(quaternion_from_matrix(np.eye(3)), [1.0, 0.0, 0.0, 0.0])


@pytest.mark.parametrize("omega", VECTORS)
def test_quaternion_round_trip(omega):
    rotation = exp_so3(omega)
    q = quaternion_from_matrix(rotation)
    assert q[0] >= 0.0
    assert np.linalg.norm(q) == pytest.approx(1.0)
    np.testing.assert_allclose(matrix_from_quaternion(q), rotation, atol=1e-12)


@pytest.mark.parametrize("omega", VECTORS)
def test_right_jacobian_inverse(omega):
    np.testing.assert_allclose(right_jacobian(omega) @ right_jacobian_inv(omega), np.eye(3), atol=1e-9)


def test_right_jacobian_first_order():
    omega = np.array([0.4, -0.3, 0.8])
    delta = np.array([1e-6, -2e-6, 1.5e-6])
    lhs = exp_so3(omega + delta)
    rhs = exp_so3(omega) @ exp_so3(right_jacobian(omega) @ delta)
    np.testing.assert_allclose(lhs, rhs, atol=1e-10)


def test_se3_inverse_and_composition():
    pose = SE3(exp_so3([0.2, -0.1, 0.5]), [1.0, 2.0, -3.0])
    ident = pose @ pose.inverse()
    np.testing.assert_allclose(ident.matrix(), np.eye(4), atol=1e-12)
    other = SE3(exp_so3([0.0, 0.3, 0.1]), [0.5, 0.0, 1.0])
    np.testing.assert_allclose((pose @ other).matrix(), pose.matrix() @ other.matrix(), atol=1e-12)


def test_se3_act_matches_matrix():
    pose = SE3(exp_so3([0.3, 0.2, -0.4]), [4.0, -1.0, 0.5])
    point = np.array([1.0, 2.0, 3.0])
    homogeneous = pose.matrix() @ np.append(point, 1.0)
    np.testing.assert_allclose(pose.act(point), homogeneous[:3])
    np.testing.assert_allclose(pose.inverse().act(pose.act(point)), point, atol=1e-12)
    np.testing.assert_allclose(SE3.from_matrix(pose.matrix()).translation, pose.translation)


def test_se3_matmul_rejects_other_types():
    with pytest.raises(TypeError):
        SE3() @ 3


def test_circular_motion_speed_and_steps():
    trajectory = simulate_circular_motion(10.0, 5.0, 0.05, 40, False)
    assert len(trajectory) == 40
    previous = np.zeros(3)
    for pose, v_world in trajectory:
        assert np.linalg.norm(v_world) == pytest.approx(5.0)
        assert np.linalg.norm(pose.translation - previous) == pytest.approx(5.0 * 0.05)
        previous = pose.translation


def test_circular_motion_heading():
    trajectory = simulate_circular_motion(10.0, 5.0, 0.05, 30, False)
    for i, (pose, _) in enumerate(trajectory):
        yaw = math.atan2(pose.rotation[1, 0], pose.rotation[0, 0])
        assert yaw == pytest.approx((i + 1) * 10.0 * math.pi / 180 * 0.05)


def test_quaternion_update_close_to_exponential():
    by_exp = simulate_circular_motion(10.0, 5.0, 0.05, 20, False)
    by_quat = simulate_circular_motion(10.0, 5.0, 0.05, 20, True)
    for (p1, _), (p2, _) in zip(by_exp, by_quat):
        np.testing.assert_allclose(p1.rotation, p2.rotation, atol=1e-5)
        np.testing.assert_allclose(p1.translation, p2.translation, atol=1e-4)