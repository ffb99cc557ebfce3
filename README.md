# slamkit

Building blocks for vehicle localisation, in plain Python on top of NumPy.

## Modules

- `slamkit.lie` — rotations and rigid transforms: `hat`, `exp_so3`, `log_so3`,
  `right_jacobian`, `right_jacobian_inv`, `rot_z`, `quaternion_from_matrix`,
  `matrix_from_quaternion` and the `SE3` class (`inverse`, composition with
  `@`, `act`, `matrix`, `from_matrix`, `quaternion`). `simulate_circular_motion`
  integrates a vehicle driving in a circle and returns `(pose, world velocity)`
  for each step.
- `slamkit.types` — sensor readings and state: `IMU`, `Odom`, `GNSS` and
  `NavState` (with `se3()`).
- `slamkit.imu_integration` — dead reckoning by direct IMU integration with
  known biases (`IMUIntegration.add_imu`, `IMUIntegration.nav_state`).
- `slamkit.static_imu_init` — `StaticIMUInit` estimates gyro and accelerometer
  biases, noise and gravity from readings taken while the vehicle stands still;
  `StaticIMUInitOptions` holds its settings. Results are read from
  `init_success`, `init_bg`, `init_ba`, `cov_gyro`, `cov_acce` and `gravity`.
- `slamkit.eskf` — an 18-state error-state Kalman filter (`ESKF`,
  `ESKFOptions`): `predict` with IMU readings, `observe_wheel_speed`,
  `observe_gps` and `observe_se3` corrections, `nominal_state`, `nominal_se3`,
  `set_state` and `set_cov`. `observe_gps` raises `ValueError` for a reading
  without a valid heading once the first reading has been taken.
- `slamkit.imu_preintegration` — `IMUPreintegration` accumulates rotation,
  velocity and position increments with their covariance and bias Jacobians;
  `delta_rotation`, `delta_velocity` and `delta_position` correct them to first
  order for new biases, and `predict` carries a `NavState` across the interval.
- `slamkit.inertial_edge` — `InertialEdge` gives the 9-dimensional
  preintegration residual between two states, its Jacobians and its 24x24
  Hessian.
- `slamkit.bfnn` — brute-force nearest neighbours over `N x 3` arrays:
  `bfnn_point`, `bfnn_point_k`, `bfnn_cloud`, and the threaded `bfnn_cloud_mt`
  and `bfnn_cloud_mt_k`. Matches are `(index in cloud1, index in cloud2)`.
- `slamkit.bird_eye` — `generate_bev_image` renders a top-down RGB image of a
  cloud within a height band; `write_image` saves an image with Pillow.
- `slamkit.range_image` — `generate_range_image` renders a lidar scan as an RGB
  range image, columns by azimuth and rows by elevation, coloured by range.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Preintegrating a constant turn:

```python
import numpy as np
from slamkit.imu_preintegration import IMUPreintegration
from slamkit.types import IMU, NavState

preinteg = IMUPreintegration()
gravity = np.array([0.0, 0.0, -9.8])
for i in range(1, 101):
    imu = IMU(timestamp=0.01 * i, gyro=[0.0, 0.0, np.pi], acce=-gravity)
    preinteg.integrate(imu, 0.01)

state = preinteg.predict(NavState(timestamp=0.0), gravity)
print(state.position, state.velocity)
```

Nearest neighbours in a cloud of points:

```python
import numpy as np
from slamkit.bfnn import bfnn_point, bfnn_point_k

cloud = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]], dtype=float)
print(bfnn_point(cloud, [0.9, 0.1, 0.0]))        # 1
print(bfnn_point_k(cloud, [0.9, 0.1, 0.0], k=2))
```

A bird's-eye image:

```python
from slamkit.bird_eye import generate_bev_image, write_image

image = generate_bev_image(cloud_array, resolution=0.1, min_z=0.2, max_z=2.5)
write_image(image, "bev.png")
```

## What it does not do

- Nearest-neighbour search is brute force only; there is no grid, k-d tree or
  octree index.
- Clouds are NumPy arrays; there is no reader for point-cloud or sensor log
  files.
- There are no command-line programs and no viewer window; results are
  returned as arrays and objects for the caller to save or display.
- There is no graph optimiser; `InertialEdge` supplies residuals, Jacobians and
  a Hessian for one to use.