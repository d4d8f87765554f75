import pytest

from dispatch import Direction, InvalidRequestError, Request, RequestKind


def test_external_request_has_no_destination():
    request = Request.external(4, Direction.DOWN)
    assert request.kind is RequestKind.EXTERNAL
    assert request.destination_floor is None
    assert request.target_floor == 4


def test_internal_direction_is_derived():
    assert Request.internal(0, 2, 7).direction is Direction.UP
    assert Request.internal(0, 7, 2).direction is Direction.DOWN
    assert Request.internal(0, 7, 2).target_floor == 2


def test_external_request_cannot_be_idle():
    with pytest.raises(InvalidRequestError):
        Request.external(3, Direction.IDLE)


def test_requests_are_immutable():
    request = Request.external(3, Direction.UP)
    with pytest.raises(AttributeError):
        request.source_floor = 5


@pytest.mark.parametrize(
    "value, expected",
    [("up", Direction.UP), ("DOWN", Direction.DOWN), (1, Direction.UP), (Direction.DOWN, Direction.DOWN)],
)
def test_direction_parse(value, expected):
    assert Direction.parse(value) is expected


def test_direction_parse_rejects_unknown_values():
    with pytest.raises(InvalidRequestError):
        Direction.parse("sideways")
    with pytest.raises(InvalidRequestError):
        Direction.parse(5)


def test_opposite():
    assert Direction.UP.opposite is Direction.DOWN
    assert Direction.IDLE.opposite is Direction.IDLE
