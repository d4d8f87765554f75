import pytest

from dispatch import FloorQueue


def test_ascending_queue_pops_lowest_first():
    queue = FloorQueue(ascending=True)
    for floor in (8, 3, 10, 6):
        queue.push(floor)
    assert [queue.pop() for _ in range(4)] == [3, 6, 8, 10]
    assert not queue


def test_descending_queue_pops_highest_first():
    queue = FloorQueue(ascending=False)
    for floor in (2, 7, 1):
        queue.push(floor)
    assert queue.peek() == 7
    assert queue.floors() == [7, 2, 1]
    assert queue.pop() == 7


def test_duplicates_collapse():
    queue = FloorQueue()
    assert queue.push(4) is True
    assert queue.push(4) is False
    assert len(queue) == 1
    queue.pop()
    # a served floor can be requested again
    assert queue.push(4) is True


def test_discard_and_clear():
    queue = FloorQueue(ascending=False)
    for floor in (9, 5, 3):
        queue.push(floor)
    assert queue.discard(5) is True
    assert queue.discard(5) is False
    assert 5 not in queue
    assert queue.pop() == 9
    assert queue.clear() == [3]
    assert len(queue) == 0


def test_pop_from_empty_queue_raises():
    with pytest.raises(IndexError):
        FloorQueue().pop()
