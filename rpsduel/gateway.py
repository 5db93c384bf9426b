"""Realtime event gateway.

Translates client events into registry / engine calls and pushes the
results to every connection in the game's room. Transport agnostic: a
"socket" is anything with an async ``send_json`` method, which is what
the FastAPI WebSocket endpoint in ``rpsduel.server`` hands over.

Every message, both ways, is an envelope::

    {"event": "submit_move", "data": {...}}
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from rpsduel.core.errors import GameError, GameNotFoundError
from rpsduel.core.game import GameEngine, GameState, TurnResult
from rpsduel.core.moves import MoveType
from rpsduel.core.registry import GameRegistry
from rpsduel.utils.config import Config, config

logger = logging.getLogger(__name__)

# Outbound event names
GAME_JOINED = "game_joined"
GAME_STATE_UPDATE = "game_state_update"
AVAILABLE_GAMES = "available_games"
ATTACK_ANIMATION = "attack_animation"
GAME_OVER = "game_over"
ERROR = "error"


# --- Models ---


class ClientMessage(BaseModel):
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class InboundPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateGamePayload(InboundPayload):
    player_id: str = Field(min_length=1)
    player_name: str = Field(min_length=1)


class JoinGamePayload(InboundPayload):
    game_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)
    player_name: str = Field(min_length=1)


class SubmitMovePayload(InboundPayload):
    game_id: str
    player_id: str
    attack_type: MoveType
    defense_type: MoveType


class LeaveGamePayload(InboundPayload):
    game_id: str
    player_id: str


# --- Connections ---


class ConnectionManager:
    """Tracks open sockets and which game rooms they belong to."""

    def __init__(self) -> None:
        self.active_connections: dict[str, WebSocket] = {}
        self.rooms: dict[str, set[str]] = {}

    def connect(self, websocket: WebSocket, socket_id: str | None = None) -> str:
        """Register an accepted socket and return its id."""
        socket_id = socket_id or uuid.uuid4().hex
        self.active_connections[socket_id] = websocket
        return socket_id

    def disconnect(self, socket_id: str) -> None:
        """Forget a socket and drop it from every room."""
        self.active_connections.pop(socket_id, None)
        for room in list(self.rooms):
            self.leave_room(socket_id, room)

    def join_room(self, socket_id: str, room: str) -> None:
        self.rooms.setdefault(room, set()).add(socket_id)

    def leave_room(self, socket_id: str, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(socket_id)
        # Clean up if there are no more connections for this room
        if not members:
            del self.rooms[room]

    def close_room(self, room: str) -> None:
        self.rooms.pop(room, None)

    def room_members(self, room: str) -> set[str]:
        return set(self.rooms.get(room, ()))

    async def send(self, socket_id: str, event: str, data: dict[str, Any]) -> None:
        websocket = self.active_connections.get(socket_id)
        if websocket is None:
            return
        try:
            await websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.warning("Dropping socket %s after failed send: %s", socket_id, exc)
            self.disconnect(socket_id)

    async def broadcast(self, room: str, event: str, data: dict[str, Any]) -> None:
        logger.debug("Broadcasting %s to room %s", event, room)
        for socket_id in sorted(self.room_members(room)):
            await self.send(socket_id, event, data)


# --- Gateway ---


class GameGateway:
    """Routes client events to the game engine and broadcasts results."""

    def __init__(
        self,
        registry: GameRegistry,
        connections: ConnectionManager,
        engine: GameEngine,
        settings: Config | None = None,
    ) -> None:
        self.registry = registry
        self.connections = connections
        self.engine = engine
        self.settings = settings or config
        self._tasks: set[asyncio.Task] = set()
        self._handlers: dict[str, Callable[[str, dict[str, Any]], Awaitable[None]]] = {
            "create_game": self.create_game,
            "join_game": self.join_game,
            "get_available_games": self.get_available_games,
            "submit_move": self.submit_move,
            "leave_game": self.leave_game,
        }

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def dispatch(self, socket_id: str, message: str | bytes | dict[str, Any]) -> None:
        """Handle one inbound message. Rejections go back to the sender only.

        Text and binary frames are both parsed as a JSON envelope.
        """
        try:
            if isinstance(message, (str, bytes)):
                envelope = ClientMessage.model_validate_json(message)
            else:
                envelope = ClientMessage.model_validate(message)
        except ValidationError:
            await self._send_error(socket_id, "invalid_payload", "Malformed message")
            return

        handler = self._handlers.get(envelope.event)
        if handler is None:
            await self._send_error(socket_id, "unknown_event", f"Unknown event: {envelope.event}")
            return

        try:
            await handler(socket_id, envelope.data)
        except ValidationError as exc:
            logger.debug("Invalid %s payload from %s: %s", envelope.event, socket_id, exc)
            await self._send_error(
                socket_id, "invalid_payload", f"Invalid payload for {envelope.event}"
            )
        except GameError as exc:
            logger.debug("Rejected %s from %s: %s", envelope.event, socket_id, exc.message)
            await self._send_error(socket_id, exc.code, exc.message)

    def disconnect(self, socket_id: str) -> None:
        self.connections.disconnect(socket_id)
        logger.info("Client disconnected: %s", socket_id)

    # -----------------------------------------------------------------------
    # Event handlers
    # -----------------------------------------------------------------------

    async def create_game(self, socket_id: str, data: dict[str, Any]) -> None:
        payload = CreateGamePayload.model_validate(data)
        game_id = self.registry.create(payload.player_id, payload.player_name)
        game = self._get_game(game_id)
        self.connections.join_room(socket_id, game_id)
        await self.connections.send(
            socket_id, GAME_JOINED, {"gameId": game_id, "gameState": game.to_wire()}
        )

    async def join_game(self, socket_id: str, data: dict[str, Any]) -> None:
        payload = JoinGamePayload.model_validate(data)
        game = self._get_game(payload.game_id)
        async with game.lock:
            self.registry.join(payload.game_id, payload.player_id, payload.player_name)
            self.connections.join_room(socket_id, game.id)
            state = game.to_wire()
        await self.connections.broadcast(game.id, GAME_STATE_UPDATE, state)
        await self.connections.send(socket_id, GAME_JOINED, {"gameId": game.id, "gameState": state})

    async def get_available_games(self, socket_id: str, data: dict[str, Any]) -> None:
        games = [summary.model_dump() for summary in self.registry.list_joinable()]
        await self.connections.send(socket_id, AVAILABLE_GAMES, {"games": games})

    async def submit_move(self, socket_id: str, data: dict[str, Any]) -> None:
        payload = SubmitMovePayload.model_validate(data)
        game = self._get_game(payload.game_id)
        async with game.lock:
            result = self.engine.submit_move(
                game, payload.player_id, payload.attack_type, payload.defense_type
            )
            state = None if result.resolved else game.to_wire()

        if state is None:
            await self._announce_battle(game, result)
        else:
            await self.connections.broadcast(game.id, GAME_STATE_UPDATE, state)

    async def leave_game(self, socket_id: str, data: dict[str, Any]) -> None:
        payload = LeaveGamePayload.model_validate(data)
        game = self.registry.get(payload.game_id)
        if game is None:
            self.connections.leave_room(socket_id, payload.game_id)
            return

        # A rejected leave keeps the socket subscribed to its game
        async with game.lock:
            remaining = self.engine.leave(game, payload.player_id)
            state = game.to_wire()
            if remaining is None and self._is_live(game):
                self.registry.remove(game.id)
        await self.connections.broadcast(game.id, GAME_STATE_UPDATE, state)
        self.connections.leave_room(socket_id, game.id)

        if remaining is None:
            self.connections.close_room(game.id)
        else:
            self._schedule(self.settings.cleanup_delay, self._remove_later, game)

    # -----------------------------------------------------------------------
    # Battle announcements
    # -----------------------------------------------------------------------

    async def _announce_battle(self, game: GameState, result: TurnResult) -> None:
        """Send the animation / game over events, then the state later.

        The final state push waits for the client animations to play out.
        """
        first, second = result.attacks
        await self.connections.broadcast(game.id, ATTACK_ANIMATION, first.to_wire())
        self._schedule(
            self.settings.animation_delay,
            self._broadcast_later, game, ATTACK_ANIMATION, second.to_wire(),
        )

        if result.game_over:
            await self.connections.broadcast(
                game.id, GAME_OVER, {"winnerId": result.winner_id, "isDraw": result.is_draw}
            )

        self._schedule(self.settings.state_update_delay, self._push_state_later, game)
        if result.game_over:
            self._schedule(
                self.settings.state_update_delay + self.settings.cleanup_delay,
                self._remove_later, game,
            )

    # -----------------------------------------------------------------------
    # Delayed tasks
    # -----------------------------------------------------------------------

    def _schedule(self, delay: float, callback: Callable[..., Awaitable[None]], *args: Any) -> None:
        task = asyncio.get_running_loop().create_task(self._run_later(delay, callback, *args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_later(self, delay: float, callback: Callable[..., Awaitable[None]], *args: Any) -> None:
        await asyncio.sleep(delay)
        try:
            await callback(*args)
        except Exception:
            logger.exception("Delayed %s failed", callback.__name__)

    async def drain(self) -> None:
        """Wait for every scheduled task, including ones they schedule."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _broadcast_later(self, game: GameState, event: str, data: dict[str, Any]) -> None:
        if not self._is_live(game):
            return
        await self.connections.broadcast(game.id, event, data)

    async def _push_state_later(self, game: GameState) -> None:
        if not self._is_live(game):
            return
        async with game.lock:
            state = game.to_wire()
        await self.connections.broadcast(game.id, GAME_STATE_UPDATE, state)

    async def _remove_later(self, game: GameState) -> None:
        async with game.lock:
            if not self._is_live(game):
                return
            self.registry.remove(game.id)
        self.connections.close_room(game.id)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _get_game(self, game_id: str) -> GameState:
        game = self.registry.get(game_id)
        if game is None:
            raise GameNotFoundError()
        return game

    def _is_live(self, game: GameState) -> bool:
        """True while this exact game object is still registered."""
        return self.registry.get(game.id) is game

    async def _send_error(self, socket_id: str, code: str, message: str) -> None:
        await self.connections.send(socket_id, ERROR, {"message": message, "code": code})
