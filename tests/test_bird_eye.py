import numpy as np
import pytest
from PIL import Image

from slamkit.bird_eye import POINT_COLOR, generate_bev_image, write_image


def _cloud():
    return np.array(
        [
            [0.0, 0.0, 1.0],
            [10.0, 5.0, 1.0],
            [5.0, 2.5, 1.0],
        ]
    )


def _colored(image):
    return {tuple(p) for p in np.argwhere(np.all(image == POINT_COLOR, axis=2))}


def test_shape_follows_extent_and_resolution():
    image = generate_bev_image(_cloud(), resolution=1.0)
    assert image.shape == (5, 10, 3)
    assert image.dtype == np.uint8


def test_points_drawn_at_expected_pixels():
    image = generate_bev_image(_cloud(), resolution=1.0)
    assert _colored(image) == {(0, 0), (2, 5)}


def test_background_is_white():
    image = generate_bev_image(_cloud(), resolution=1.0)
    white = np.all(image == 255, axis=2)
    assert int(white.sum()) == 48
    assert image[0, 1].tolist() == [255, 255, 255]
    assert image[4, 9].tolist() == [255, 255, 255]
    assert not white[0, 0]
    assert not white[2, 5]


def test_height_filter():
    cloud = _cloud().copy()
    cloud[2, 2] = 5.0
    image = generate_bev_image(cloud, resolution=1.0)
    assert _colored(image) == {(0, 0)}


def test_empty_cloud_raises():
    with pytest.raises(ValueError):
        generate_bev_image(np.zeros((0, 3)))


def test_write_round_trip(tmp_path):
    image = generate_bev_image(_cloud(), resolution=1.0)
    path = tmp_path / "bev.png"
    write_image(image, path)
    with Image.open(path) as loaded:
        assert np.array_equal(np.asarray(loaded.convert("RGB")), image)


def test_write_empty_image_raises(tmp_path):
    with pytest.raises(ValueError):
        write_image(np.zeros((0, 0, 3), dtype=np.uint8), tmp_path / "x.png")