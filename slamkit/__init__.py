"""State estimation, brute-force nearest-neighbour search and point-cloud images for vehicle localisation."""

__version__ = "0.1.0"

__all__ = [
    "lie",
    "types",
    "imu_integration",
    "static_imu_init",
    "eskf",
    "imu_preintegration",
    "inertial_edge",
    "bfnn",
    "bird_eye",
    "range_image",
]