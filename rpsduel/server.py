import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from rpsduel.core.game import GameEngine
from rpsduel.core.registry import GameRegistry
from rpsduel.gateway import ConnectionManager, GameGateway
from rpsduel.utils.config import Config, config

logger = logging.getLogger(__name__)


def create_app(settings: Config | None = None, rng: random.Random | None = None) -> FastAPI:
    """Build the server with its own registry, engine and gateway.

    ``rng`` feeds both game id generation and damage jitter, so a seeded
    (or pinned) instance makes a whole server deterministic.
    """
    settings = settings or config

    registry = GameRegistry(
        starting_health=settings.starting_health,
        starting_attack=settings.starting_attack,
        starting_defense=settings.starting_defense,
        game_id_length=settings.game_id_length,
        max_log_entries=settings.max_log_entries,
        rng=rng,
    )
    engine = GameEngine(rng=rng, min_damage=settings.min_damage, max_jitter=settings.max_jitter)
    connections = ConnectionManager()
    gateway = GameGateway(registry, connections, engine, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("RPS Duel server ready")
        try:
            yield
        finally:
            # Let pending animation / cleanup tasks finish
            await gateway.drain()
            logger.info("Stop Server")

    app = FastAPI(title="RPS Duel", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.registry = registry
    app.state.gateway = gateway

    # --- Endpoints ---

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "RPS Duel server is running"

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        socket_id = connections.connect(websocket)
        logger.info("Client connected: %s", socket_id)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                # Binary frames go through the same JSON parsing as text
                frame = message.get("text")
                if frame is None:
                    frame = message.get("bytes") or b""
                await gateway.dispatch(socket_id, frame)
        except WebSocketDisconnect as exc:
            logger.debug("Socket %s closed with code %s", socket_id, exc.code)
        finally:
            gateway.disconnect(socket_id)

    return app


app = create_app()
