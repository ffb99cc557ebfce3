import numpy as np
import pytest

from slamkit.static_imu_init import StaticIMUInit, StaticIMUInitOptions
from slamkit.types import IMU, Odom

GYRO_BIAS = np.array([0.001, -0.002, 0.0005])
ACCE_MEAN = np.array([0.05, -0.03, 9.75])


def _static_imus(n=1200, rate=100.0, gyro_std=1e-3, acce_std=1e-2, seed=0):
    rng = np.random.default_rng(seed)
    return [
        IMU(i / rate, GYRO_BIAS + rng.normal(0.0, gyro_std, 3), ACCE_MEAN + rng.normal(0.0, acce_std, 3))
        for i in range(n)
    ]


def _no_odom():
    return StaticIMUInit(StaticIMUInitOptions(use_speed_for_static_checking=False))


def test_initialisation_succeeds_without_odom():
    init = _no_odom()
    for imu in _static_imus():
        init.add_imu(imu)
    assert init.init_success
    gravity = init.gravity
    assert np.linalg.norm(gravity) == pytest.approx(9.81)
    np.testing.assert_allclose(gravity / np.linalg.norm(gravity), -ACCE_MEAN / np.linalg.norm(ACCE_MEAN), atol=1e-3)
    np.testing.assert_allclose(init.init_bg, GYRO_BIAS, atol=3e-4)
    np.testing.assert_allclose(init.init_ba, ACCE_MEAN + gravity, atol=3e-3)
    np.testing.assert_allclose(init.cov_gyro, (1e-3) ** 2, rtol=0.25)


def test_add_imu_returns_true_after_success():
    init = _no_odom()
    results = [init.add_imu(imu) for imu in _static_imus()]
    assert results[0] is False
    assert results[-1] is True
    assert True in results
    first_true = results.index(True)
    assert first_true > 1000
    assert results[:first_true] == [False] * first_true
    assert results[first_true:] == [True] * (len(results) - first_true)


def test_waits_for_standstill_without_odom():
    init = StaticIMUInit()
    results = [init.add_imu(imu) for imu in _static_imus()]
    assert not any(results)
    assert init.init_success is False


def test_odom_standstill_enables_initialisation():
    init = StaticIMUInit()
    assert init.add_odom(Odom(0.0, 1, 1)) is True
    for imu in _static_imus():
        init.add_imu(imu)
    assert init.init_success


def test_moving_odom_blocks_initialisation():
    init = StaticIMUInit()
    init.add_odom(Odom(0.0, 10, 10))
    for imu in _static_imus():
        init.add_imu(imu)
    assert init.init_success is False


def test_noisy_gyro_rejected():
    init = _no_odom()
    for i in range(1200):
        sign = 1.0 if i % 2 else -1.0
        init.add_imu(IMU(i / 100.0, [sign, sign, sign], ACCE_MEAN))
    assert init.init_success is False
    assert np.linalg.norm(init.cov_gyro) > 0.5


def test_too_few_samples():
    init = _no_odom()
    init.add_imu(IMU(0.0, GYRO_BIAS, ACCE_MEAN))
    init.add_imu(IMU(10.5, GYRO_BIAS, ACCE_MEAN))
    assert init.init_success is False
    np.testing.assert_array_equal(init.gravity, np.zeros(3))