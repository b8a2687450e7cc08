import threading

from elevator_control.scheduler.floor_set import FloorSet


def test_add_keeps_floors_unique_and_ordered():
    floors = FloorSet()

    assert floors.add(7)
    assert floors.add(2)
    assert floors.add(11)
    assert not floors.add(7)

    assert list(floors) == [2, 7, 11]
    assert len(floors) == 3
    assert 7 in floors
    assert 8 not in floors


def test_descending_iteration():
    floors = FloorSet(descending=True)
    for floor in (3, 9, 5):
        floors.add(floor)

    assert list(floors) == [9, 5, 3]
    assert floors.highest() == 9
    assert floors.lowest() == 3


def test_neighbour_lookups():
    floors = FloorSet()
    for floor in (2, 6, 10):
        floors.add(floor)

    assert floors.first_above(6) == 10
    assert floors.first_above(5) == 6
    assert floors.first_above(10) is None
    assert floors.first_below(6) == 2
    assert floors.first_below(7) == 6
    assert floors.first_below(2) is None


def test_discard_and_clear():
    floors = FloorSet()
    floors.add(4)
    floors.add(8)

    assert floors.discard(4)
    assert not floors.discard(4)
    assert list(floors) == [8]

    floors.clear()
    assert not floors
    assert floors.lowest() is None
    assert floors.highest() is None


def test_iteration_is_a_stable_copy():
    floors = FloorSet()
    for floor in (1, 2, 3):
        floors.add(floor)

    seen = []
    for floor in floors:
        floors.discard(floor)
        seen.append(floor)

    assert seen == [1, 2, 3]
    assert len(floors) == 0


def test_concurrent_adds_and_removes():
    floors = FloorSet()

    def worker(offset):
        for floor in range(offset, offset + 200):
            floors.add(floor)
        for floor in range(offset, offset + 200, 2):
            floors.discard(floor)

    threads = [threading.Thread(target=worker, args=(i * 200,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(floors) == 800
    assert list(floors) == sorted(floors)
    assert all(floor % 2 == 1 for floor in floors)
