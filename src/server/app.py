from __future__ import annotations

import contextlib
import json
import logging
from dataclasses import asdict
from typing import Dict, List, Literal, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from dispatch import (
    ArrivalEvent,
    Building,
    CarUnavailableError,
    DispatchConfig,
    TickDriver,
    UnknownCarError,
)

logger = logging.getLogger(__name__)


class StrategySelection(BaseModel):
    name: str
    options: Dict[str, object] = {}


class HallCall(BaseModel):
    floor: int
    direction: Literal["up", "down"]


class CabinSelection(BaseModel):
    floor: int


class RiderUpdate(BaseModel):
    count: int = Field(1, ge=0)


class AvailabilityUpdate(BaseModel):
    available: bool
    reason: Optional[str] = None


class DispatchManager:
    def __init__(self, config: Optional[DispatchConfig] = None) -> None:
        self.config = config or DispatchConfig()
        self.building = Building.from_config(self.config)
        self.driver = TickDriver(
            self.building.dispatcher,
            tick_interval=self.config.tick_interval,
            after_tick=self._publish,
        )
        self.clients: Set[WebSocket] = set()

    async def start(self) -> None:
        await self.driver.start()

    async def stop(self) -> None:
        await self.driver.stop()

    async def _publish(self, arrivals: List[ArrivalEvent]) -> None:
        payload = self.current_state()
        payload["arrivals"] = [asdict(event) for event in arrivals]
        await self.broadcast(payload)

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.current_state()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        return self.building.snapshot()

    async def call(self, floor: int, direction: str) -> dict:
        car_id = await self.building.request_elevator(floor, direction)
        return {"car_id": car_id, "queued": car_id is None}

    async def select(self, car_id: int, floor: int) -> dict:
        await self.building.select_floor(car_id, floor)
        state = self.current_state()
        state["car_id"] = car_id
        return state

    async def set_strategy(self, name: str, options: Dict[str, object]) -> dict:
        self.building.dispatcher.set_strategy(name, **options)
        return self.current_state()

    async def set_availability(self, car_id: int, available: bool, reason: Optional[str]) -> dict:
        dispatcher = self.building.dispatcher
        if available:
            await dispatcher.restore(car_id)
            rerouted = 0
        else:
            rerouted = len(await dispatcher.start_maintenance(car_id, reason))
        state = self.current_state()
        state["car_id"] = car_id
        state["available"] = available
        state["reason"] = reason
        state["rerouted"] = rerouted
        return state

    async def riders(self, car_id: int, count: int, boarding: bool) -> dict:
        if boarding:
            moved = await self.building.board(car_id, count)
        else:
            moved = await self.building.alight(car_id, count)
        car = self.building.dispatcher.get_car(car_id)
        return {"car_id": car_id, "moved": moved, "load": car.load, "capacity": car.capacity}


manager = DispatchManager()
app = FastAPI(title="LiftDispatch API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    await manager.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await manager.stop()


@app.get("/state")
async def get_state() -> dict:
    return manager.current_state()


@app.post("/strategy")
async def set_strategy(selection: StrategySelection) -> dict:
    try:
        return await manager.set_strategy(selection.name, selection.options)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/calls")
async def hall_call(call: HallCall) -> dict:
    try:
        return await manager.call(call.floor, call.direction)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/cars/{car_id}/destinations")
async def cabin_selection(car_id: int, selection: CabinSelection) -> dict:
    try:
        return await manager.select(car_id, selection.floor)
    except UnknownCarError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except CarUnavailableError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/cars/{car_id}/board")
async def board(car_id: int, update: RiderUpdate) -> dict:
    try:
        return await manager.riders(car_id, update.count, boarding=True)
    except UnknownCarError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.post("/cars/{car_id}/alight")
async def alight(car_id: int, update: RiderUpdate) -> dict:
    try:
        return await manager.riders(car_id, update.count, boarding=False)
    except UnknownCarError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.post("/cars/{car_id}/availability")
async def update_availability(car_id: int, availability: AvailabilityUpdate) -> dict:
    try:
        return await manager.set_availability(car_id, availability.available, availability.reason)
    except UnknownCarError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.websocket("/ws/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await manager.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
