import numpy as np
import pytest

from slamkit.lie import SE3, exp_so3
from slamkit.types import GNSS, IMU, NavState, Odom


def test_imu_converts_vectors():
    imu = IMU(0.5, [1, 2, 3], (4, 5, 6))
    np.testing.assert_array_equal(imu.gyro, [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(imu.acce, [4.0, 5.0, 6.0])
    assert imu.gyro.dtype == np.float64 and imu.timestamp == 0.5


def test_imu_rejects_wrong_length():
    with pytest.raises(ValueError):
        IMU(0.0, [1.0, 2.0], [0.0, 0.0, 0.0])


def test_default_nav_state():
    state = NavState()
    np.testing.assert_array_equal(state.rotation, np.eye(3))
    np.testing.assert_array_equal(state.se3().matrix(), np.eye(4))


def test_nav_state_se3():
    rotation = exp_so3([0.1, 0.2, 0.3])
    state = NavState(2.0, rotation, [1.0, 2.0, 3.0], [0.1, 0.0, 0.0])
    pose = state.se3()
    np.testing.assert_allclose(pose.rotation, rotation)
    np.testing.assert_allclose(pose.matrix()[:3, 3], state.position)
    np.testing.assert_array_equal(state.bg, np.zeros(3))


def test_gnss_defaults():
    gnss = GNSS(unix_time=3.0)
    assert gnss.heading_valid is False
    np.testing.assert_array_equal(gnss.utm_pose.matrix(), np.eye(4))


def test_gnss_keeps_pose():
    pose = SE3(exp_so3([0.0, 0.0, 0.4]), [5.0, 6.0, 7.0])
    gnss = GNSS(1.0, pose, True)
    np.testing.assert_allclose(gnss.utm_pose.translation, [5.0, 6.0, 7.0])


def test_odom_fields():
    odom = Odom(1.5, 10, 12)
    assert (odom.timestamp, odom.left_pulse, odom.right_pulse) == (1.5, 10, 12)