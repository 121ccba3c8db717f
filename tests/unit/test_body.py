import numpy as np
import pytest

from rewardarena.sim.body import PointBody


def test_fresh_command_moves_by_damped_velocity():
    body = PointBody((100.0, 150.0), radius=15.0, air_friction=0.1)
    body.set_velocity(np.array([3.0, 0.0]))
    body.advance(1.0 / 60.0)

    np.testing.assert_allclose(body.get_position(), [102.7, 150.0])
    np.testing.assert_allclose(body.get_velocity(), [2.7, 0.0])


def test_velocity_decays_without_new_commands():
    body = PointBody((0.0, 0.0), radius=1.0, air_friction=0.1)
    body.set_velocity(np.array([0.0, 10.0]))
    body.advance(1.0 / 60.0)
    body.advance(1.0 / 60.0)

    assert body.get_position()[1] == pytest.approx(9.0 + 8.1)
    assert body.get_velocity()[1] == pytest.approx(8.1)


def test_set_position_copies_input():
    body = PointBody((0.0, 0.0), radius=1.0)
    pos = np.array([5.0, 6.0])
    body.set_position(pos)
    pos[0] = -1.0
    np.testing.assert_array_equal(body.get_position(), [5.0, 6.0])


def test_zero_velocity_stays_put():
    body = PointBody((42.0, 24.0), radius=1.0)
    body.advance(1.0 / 60.0)
    np.testing.assert_array_equal(body.get_position(), [42.0, 24.0])
