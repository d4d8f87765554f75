import pytest
from fastapi.testclient import TestClient

from server.app import app, manager


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as client:
        yield client


def test_state_lists_cars(client):
    response = client.get("/state")
    assert response.status_code == 200
    body = response.json()
    assert len(body["cars"]) == manager.config.car_count
    assert body["floors"]["lowest"] == 0


def test_hall_call_is_assigned(client):
    response = client.post("/calls", json={"floor": 3, "direction": "up"})
    assert response.status_code == 200
    body = response.json()
    assert body["car_id"] in manager.building.dispatcher.cars
    assert body["queued"] is False


def test_hall_call_outside_the_building_is_rejected(client):
    response = client.post("/calls", json={"floor": 99, "direction": "down"})
    assert response.status_code == 400


def test_hall_call_direction_is_validated(client):
    response = client.post("/calls", json={"floor": 3, "direction": "sideways"})
    assert response.status_code == 422


def test_cabin_selection(client):
    response = client.post("/cars/0/destinations", json={"floor": 8})
    assert response.status_code == 200
    assert response.json()["car_id"] == 0
    assert client.post("/cars/42/destinations", json={"floor": 8}).status_code == 404


def test_strategy_switch(client):
    assert client.post("/strategy", json={"name": "coin_flip"}).status_code == 400
    response = client.post("/strategy", json={"name": "nearest"})
    assert response.status_code == 200
    assert response.json()["strategy"] == "nearest"
    client.post("/strategy", json={"name": "cost"})


def test_maintenance_round_trip(client):
    response = client.post("/cars/1/availability", json={"available": False, "reason": "inspection"})
    assert response.status_code == 200
    assert response.json()["cars"][1]["status"] == "maintenance"
    assert client.post("/cars/1/destinations", json={"floor": 4}).status_code == 409

    response = client.post("/cars/1/availability", json={"available": True})
    assert response.json()["cars"][1]["status"] == "in_service"


def test_boarding_is_capped_at_capacity(client):
    capacity = manager.config.capacity
    response = client.post("/cars/0/board", json={"count": capacity + 3})
    assert response.json()["moved"] == capacity
    response = client.post("/cars/0/alight", json={"count": capacity})
    assert response.json()["load"] == 0


def test_stream_sends_state_on_connect(client):
    with client.websocket_connect("/ws/stream") as websocket:
        payload = websocket.receive_json()
    assert "cars" in payload
