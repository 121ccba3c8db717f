import numpy as np
import pytest

from rewardarena.sim.episode import (
    PolicyState,
    make_episode,
    observe_distance,
    record_position,
    reset_episode,
    reset_policy_state,
)


def test_fresh_episode_starts_at_spawn(make_ep):
    ep = make_ep()
    np.testing.assert_array_equal(ep.agent_pos, [100.0, 150.0])
    np.testing.assert_array_equal(ep.goal_pos, [300.0, 150.0])
    assert ep.distance == 200.0
    assert ep.initial_distance is None
    assert ep.previous_distance is None
    assert len(ep.distance_history) == 0
    assert ep.success_count == 0


def test_goal_is_read_only(make_ep):
    ep = make_ep()
    with pytest.raises(ValueError):
        ep.goal_pos[0] = 0.0


@pytest.mark.parametrize("threshold", [0.0, -5.0])
def test_threshold_must_be_positive(threshold):
    with pytest.raises(ValueError):
        make_episode((0.0, 0.0), (10.0, 0.0), threshold)


def test_history_is_bounded_and_evicts_oldest(make_ep):
    ep = make_ep()
    for i in range(15):
        record_position(ep, np.array([100.0 + i, 150.0]))

    assert len(ep.distance_history) == 10
    np.testing.assert_array_equal(ep.distance_history[0], [105.0, 150.0])
    np.testing.assert_array_equal(ep.distance_history[-1], [114.0, 150.0])
    np.testing.assert_array_equal(ep.agent_pos, [114.0, 150.0])
    assert ep.ticks == 15


def test_history_entries_are_copies(make_ep):
    ep = make_ep()
    pos = np.array([120.0, 150.0])
    record_position(ep, pos)
    pos[0] = 999.0
    assert ep.distance_history[0][0] == 120.0


def test_initial_distance_latches_once(make_ep):
    ep = make_ep()
    assert observe_distance(ep) == 200.0
    record_position(ep, np.array([200.0, 150.0]))
    assert observe_distance(ep) == 100.0
    assert ep.initial_distance == 200.0


def test_reset_restores_spawn_but_keeps_success_count(make_ep):
    ep = make_ep()
    observe_distance(ep)
    record_position(ep, np.array([150.0, 140.0]), np.array([2.0, -1.0]))
    ep.previous_distance = 180.0
    ep.success_count = 4

    reset_episode(ep)

    np.testing.assert_array_equal(ep.agent_pos, ep.spawn_pos)
    np.testing.assert_array_equal(ep.agent_vel, [0.0, 0.0])
    assert len(ep.distance_history) == 0
    assert ep.initial_distance is None
    assert ep.previous_distance is None
    assert ep.ticks == 0
    assert ep.success_count == 4


def test_reset_does_not_alias_spawn(make_ep):
    ep = make_ep()
    reset_episode(ep)
    ep.agent_pos[0] = 0.0
    assert ep.spawn_pos[0] == 100.0


def test_is_success_is_strict(make_ep):
    assert make_ep(agent=(265.0, 150.0)).is_success is False  # d == 35
    assert make_ep(agent=(266.0, 150.0)).is_success is True


def test_policy_state_reset():
    state = PolicyState()
    state.momentum = np.array([0.6, 0.8])
    for i in range(12):
        state.reward_history.append(float(i))
    assert len(state.reward_history) == 10

    reset_policy_state(state)

    np.testing.assert_array_equal(state.momentum, [0.0, 0.0])
    assert len(state.reward_history) == 0
