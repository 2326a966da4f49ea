from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from automail import Simulation, SimulationConfig

logger = logging.getLogger(__name__)


class OrderingSelection(BaseModel):
    name: str


class MailRequest(BaseModel):
    destination: int
    weight: int


class SimulationManager:
    def __init__(self, config: Optional[SimulationConfig] = None, tick_interval: float = 0.25) -> None:
        self.simulation = Simulation(config or SimulationConfig(random_seed=7))
        self.tick_interval = tick_interval
        self.clients: Set[WebSocket] = set()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while True:
            async with self._lock:
                self.simulation.step()
                payload = self.current_state()
            await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)

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
        return self.simulation.snapshot()

    async def set_ordering(self, name: str) -> dict:
        async with self._lock:
            self.simulation.set_pool_ordering(name)
            return self.current_state()

    async def inject_mail(self, destination: int, weight: int) -> dict:
        async with self._lock:
            item = self.simulation.inject_mail(destination, weight)
            logger.info("Injected %s", item)
            state = self.current_state()
            state["injected"] = item.item_id
            return state


manager = SimulationManager()
app = FastAPI(title="Automail Simulation API")
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


@app.post("/pool/ordering")
async def set_ordering(selection: OrderingSelection) -> dict:
    try:
        return await manager.set_ordering(selection.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/mail")
async def inject_mail(request: MailRequest) -> dict:
    try:
        return await manager.inject_mail(request.destination, request.weight)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


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

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
