import pytest

from elevator_control.exceptions import InvalidDirectionRequestError
from elevator_control.models.elevator import Direction


def serve_all(scheduler, state):
    """Visit every pending floor in dispatch order, like the control loop does."""
    visited = []
    while scheduler.has_destinations():
        next_floor = scheduler.get_next_destination(state)
        state.direction = Direction.between(state.current_floor, next_floor)
        state.current_floor = next_floor
        scheduler.remove_destination(next_floor)
        visited.append(next_floor)
    return visited


def test_add_destination_files_floors_by_position(scheduler, state):
    # Arrange
    state.current_floor = 5

    # Act
    assert scheduler.add_destination(8, state)
    assert scheduler.add_destination(2, state)

    # Assert
    assert 8 in scheduler.upward
    assert 2 in scheduler.downward
    assert scheduler.all_destinations() == [2, 8]


def test_add_destination_while_moving_up_defers_floors_behind(scheduler, state):
    state.current_floor = 6
    state.direction = Direction.UP

    scheduler.add_destination(9, state)
    scheduler.add_destination(4, state)

    assert list(scheduler.upward) == [9]
    assert list(scheduler.downward) == [4]


def test_add_destination_rejects_current_invalid_and_duplicate_floors(scheduler, state):
    state.current_floor = 3

    assert scheduler.add_destination(3, state) is False
    assert scheduler.add_destination(0, state) is False
    assert scheduler.add_destination(21, state) is False

    assert scheduler.add_destination(7, state) is True
    assert scheduler.add_destination(7, state) is False
    assert scheduler.all_destinations() == [7]


def test_floor_never_appears_in_both_sets(scheduler, state):
    state.current_floor = 5
    scheduler.add_with_explicit_direction(8, Direction.DOWN, state)

    # Same floor pressed from inside the car
    assert scheduler.add_destination(8, state) is False
    assert 8 not in scheduler.upward
    assert scheduler.destination_count() == 1


def test_hall_call_honors_requested_direction(scheduler, state):
    state.current_floor = 5

    scheduler.add_with_explicit_direction(8, Direction.DOWN, state)
    scheduler.add_with_explicit_direction(2, Direction.UP, state)

    assert 8 in scheduler.downward
    assert 2 in scheduler.upward


@pytest.mark.parametrize(
    "floor, direction",
    [(1, Direction.DOWN), (20, Direction.UP), (7, Direction.NONE)],
)
def test_hall_call_rejects_meaningless_directions(scheduler, state, floor, direction):
    with pytest.raises(InvalidDirectionRequestError):
        scheduler.add_with_explicit_direction(floor, direction, state)
    assert not scheduler.has_destinations()


def test_next_destination_is_none_without_requests(scheduler, state):
    assert scheduler.get_next_destination(state) is None


def test_stationary_car_prefers_upward_requests(scheduler, state):
    state.current_floor = 10
    scheduler.add_destination(4, state)
    scheduler.add_destination(14, state)
    scheduler.add_destination(12, state)

    assert scheduler.get_next_destination(state) == 12


def test_stationary_car_takes_highest_downward_when_no_upward(scheduler, state):
    state.current_floor = 10
    scheduler.add_destination(4, state)
    scheduler.add_destination(7, state)

    assert scheduler.get_next_destination(state) == 7


def test_moving_up_picks_nearest_floor_ahead(scheduler, state):
    state.current_floor = 5
    state.direction = Direction.UP
    scheduler.add_destination(9, state)
    scheduler.add_destination(7, state)
    scheduler.add_destination(6, state)
    scheduler.add_destination(4, state)

    assert scheduler.get_next_destination(state) == 6


def test_moving_up_reverses_at_highest_downward_floor(scheduler, state):
    state.current_floor = 5
    state.direction = Direction.UP
    scheduler.add_with_explicit_direction(9, Direction.DOWN, state)
    scheduler.add_destination(2, state)

    assert scheduler.get_next_destination(state) == 9


def test_moving_up_falls_back_to_lowest_upward_floor(scheduler, state):
    state.current_floor = 10
    state.direction = Direction.UP
    scheduler.add_with_explicit_direction(6, Direction.UP, state)
    scheduler.add_with_explicit_direction(3, Direction.UP, state)

    assert scheduler.get_next_destination(state) == 3


def test_moving_down_picks_nearest_floor_below(scheduler, state):
    state.current_floor = 12
    state.direction = Direction.DOWN
    scheduler.add_destination(15, state)
    scheduler.add_destination(4, state)
    scheduler.add_destination(9, state)

    assert scheduler.get_next_destination(state) == 9


def test_moving_down_reverses_at_lowest_upward_floor(scheduler, state):
    state.current_floor = 12
    state.direction = Direction.DOWN
    scheduler.add_destination(15, state)
    scheduler.add_with_explicit_direction(8, Direction.UP, state)

    assert scheduler.get_next_destination(state) == 8


def test_moving_down_falls_back_to_highest_downward_floor(scheduler, state):
    state.current_floor = 5
    state.direction = Direction.DOWN
    scheduler.add_with_explicit_direction(11, Direction.DOWN, state)
    scheduler.add_with_explicit_direction(8, Direction.DOWN, state)

    assert scheduler.get_next_destination(state) == 11


def test_scan_order_is_reproducible(scheduler, state):
    state.current_floor = 5
    state.direction = Direction.UP
    for floor in (7, 3, 9, 2):
        scheduler.add_destination(floor, state)

    assert serve_all(scheduler, state) == [7, 9, 3, 2]


def test_scan_never_reverses_with_floors_ahead(scheduler, state):
    state.current_floor = 10
    state.direction = Direction.DOWN
    for floor in (12, 4, 18, 8, 1, 15):
        scheduler.add_destination(floor, state)

    visited = serve_all(scheduler, state)

    assert visited == [8, 4, 1, 12, 15, 18]
    reversals = sum(
        1
        for prev, cur, nxt in zip([10] + visited, visited, visited[1:])
        if (cur - prev) * (nxt - cur) < 0
    )
    assert reversals == 1


def test_should_stop_for_floors_in_travel_direction(scheduler, state):
    state.current_floor = 1
    scheduler.add_destination(5, state)

    assert scheduler.should_stop_at(5, Direction.UP)
    assert not scheduler.should_stop_at(4, Direction.UP)


def test_should_pass_opposite_direction_call_with_work_ahead(scheduler, state):
    state.current_floor = 1
    scheduler.add_destination(5, state)
    scheduler.add_with_explicit_direction(3, Direction.DOWN, state)

    assert not scheduler.should_stop_at(3, Direction.UP)


def test_should_stop_at_turnaround_floor(scheduler, state):
    state.current_floor = 1
    scheduler.add_with_explicit_direction(6, Direction.DOWN, state)
    scheduler.add_with_explicit_direction(3, Direction.DOWN, state)

    assert not scheduler.should_stop_at(3, Direction.UP)
    assert scheduler.should_stop_at(6, Direction.UP)


def test_remove_destination(scheduler, state):
    state.current_floor = 5
    scheduler.add_destination(8, state)
    scheduler.add_destination(2, state)

    assert scheduler.remove_destination(8) is True
    assert scheduler.remove_destination(8) is False
    assert scheduler.all_destinations() == [2]


def test_clear_all(scheduler, state):
    scheduler.add_destination(4, state)
    scheduler.add_with_explicit_direction(9, Direction.DOWN, state)

    scheduler.clear_all()

    assert not scheduler.has_destinations()
    assert scheduler.all_destinations() == []
    assert scheduler.destination_count() == 0
