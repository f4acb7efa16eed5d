import math

import numpy as np
import pytest

from earthviewer_app.math import transforms


def test_rotation_y_turns_x_towards_negative_z():
    point = transforms.transform_point(transforms.rotation_y(math.pi / 2), (1.0, 0.0, 0.0))
    np.testing.assert_allclose(point, [0.0, 0.0, -1.0], atol=1e-12)


def test_rotation_x_turns_y_towards_z():
    point = transforms.transform_point(transforms.rotation_x(math.pi / 2), (0.0, 1.0, 0.0))
    np.testing.assert_allclose(point, [0.0, 0.0, 1.0], atol=1e-12)


def test_rotation_z_turns_x_towards_y():
    point = transforms.transform_point(transforms.rotation_z(math.pi / 2), (1.0, 0.0, 0.0))
    np.testing.assert_allclose(point, [0.0, 1.0, 0.0], atol=1e-12)


def test_compose_trs_scales_before_translating():
    matrix = transforms.compose_trs((1.0, 2.0, 3.0), (0.0, 0.0, 0.0), (2.0, 2.0, 2.0))
    point = transforms.transform_point(matrix, (1.0, 1.0, 1.0))
    np.testing.assert_allclose(point, [3.0, 4.0, 5.0])


def test_compose_trs_applies_roll_before_yaw():
    matrix = transforms.compose_trs((0.0, 0.0, 0.0), (0.0, math.pi / 2, math.pi / 2), (1.0, 1.0, 1.0))
    # Roll sends +X to +Y; yaw leaves +Y unchanged.
    point = transforms.transform_point(matrix, (1.0, 0.0, 0.0))
    np.testing.assert_allclose(point, [0.0, 1.0, 0.0], atol=1e-12)


def test_mirrored_scaling_flips_x():
    point = transforms.transform_point(transforms.scaling_matrix(-0.01, 0.01, 0.01), (100.0, 100.0, 100.0))
    np.testing.assert_allclose(point, [-1.0, 1.0, 1.0])


def test_look_at_moves_eye_to_origin_and_target_forward():
    view = transforms.look_at((0.0, 0.0, 10.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    np.testing.assert_allclose(transforms.transform_point(view, (0.0, 0.0, 10.0)), [0.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(transforms.transform_point(view, (0.0, 0.0, 0.0)), [0.0, 0.0, -10.0], atol=1e-12)


def test_look_at_handles_view_along_up_axis():
    view = transforms.look_at((0.0, 5.0, 0.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    assert np.all(np.isfinite(view))
    np.testing.assert_allclose(transforms.transform_point(view, (0.0, 0.0, 0.0)), [0.0, 0.0, -5.0], atol=1e-12)


def test_look_at_rejects_coincident_eye_and_target():
    with pytest.raises(ValueError):
        transforms.look_at((1.0, 1.0, 1.0), (1.0, 1.0, 1.0), (0.0, 1.0, 0.0))


def test_project_to_screen_centre_and_behind_camera():
    view = transforms.look_at((0.0, 0.0, 10.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    projection = transforms.perspective(math.radians(60.0), 2.0, 0.1, 100.0)
    view_projection = projection @ view

    centre = transforms.project_to_screen(view_projection, (0.0, 0.0, 0.0), 800.0, 400.0)
    assert centre == pytest.approx((400.0, 200.0))

    above = transforms.project_to_screen(view_projection, (0.0, 1.0, 0.0), 800.0, 400.0)
    assert above is not None
    assert above[1] < 200.0

    assert transforms.project_to_screen(view_projection, (0.0, 0.0, 20.0), 800.0, 400.0) is None


def test_gl_matrix_is_column_major():
    matrix = transforms.translation_matrix(1.0, 2.0, 3.0)
    data = transforms.gl_matrix(matrix).ravel()
    assert data.dtype == np.float32
    np.testing.assert_allclose(data[12:15], [1.0, 2.0, 3.0])


def test_z_flip_negates_depth_only():
    np.testing.assert_allclose(transforms.transform_point(transforms.Z_FLIP, (1.0, 2.0, 3.0)), [1.0, 2.0, -3.0])
