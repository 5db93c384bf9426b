"""In-memory store of active games.

One registry lives for the lifetime of the server process and is passed
to whoever needs it. Games are only ever removed by an explicit call.
"""

from __future__ import annotations

import logging
import random

from pydantic import BaseModel

from rpsduel.core.errors import GameNotFoundError
from rpsduel.core.game import DEFAULT_MAX_LOG_ENTRIES, GamePhase, GameState, Player
from rpsduel.utils.helpers import generate_game_id

logger = logging.getLogger(__name__)


class GameSummary(BaseModel):
    """An entry in the list of open games."""

    id: str
    host: str
    players: int


class GameRegistry:
    """Maps game ids to GameState objects."""

    def __init__(
        self,
        starting_health: int = 100,
        starting_attack: int = 15,
        starting_defense: int = 5,
        game_id_length: int = 6,
        max_log_entries: int | None = DEFAULT_MAX_LOG_ENTRIES,
        rng: random.Random | None = None,
    ) -> None:
        self._games: dict[str, GameState] = {}
        self.starting_health = starting_health
        self.starting_attack = starting_attack
        self.starting_defense = starting_defense
        self.game_id_length = game_id_length
        self.max_log_entries = max_log_entries
        self.rng = rng

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._games

    def new_player(self, player_id: str, name: str) -> Player:
        """Create a player with the configured starting stats."""
        return Player(
            id=player_id,
            name=name,
            health=self.starting_health,
            max_health=self.starting_health,
            attack=self.starting_attack,
            defense=self.starting_defense,
        )

    def create(self, host_id: str, host_name: str) -> str:
        """Open a new game hosted by ``host_id`` and return its id."""
        game_id = generate_game_id(self._games, length=self.game_id_length, rng=self.rng)
        game = GameState(
            id=game_id,
            players=[self.new_player(host_id, host_name)],
            max_log_entries=self.max_log_entries,
        )
        game.add_log("Waiting for opponent to join...")
        self._games[game_id] = game
        logger.info("Game created: %s by player %s (%s)", game_id, host_name, host_id)
        return game_id

    def join(self, game_id: str, player_id: str, player_name: str) -> GameState:
        """Seat a second player in an open game.

        Raises GameNotFoundError for unknown ids and GameFullError when
        the game already has two players.
        """
        game = self._games.get(game_id)
        if game is None:
            raise GameNotFoundError()
        game.add_player(self.new_player(player_id, player_name))
        logger.info("Player %s (%s) joined game %s", player_name, player_id, game_id)
        return game

    def get(self, game_id: str) -> GameState | None:
        return self._games.get(game_id)

    def remove(self, game_id: str) -> bool:
        """Drop a game. Returns False if it was already gone."""
        removed = self._games.pop(game_id, None) is not None
        if removed:
            logger.info("Game removed: %s", game_id)
        return removed

    def list_joinable(self) -> list[GameSummary]:
        """Snapshot of games still waiting for an opponent."""
        return [
            GameSummary(id=game.id, host=game.host.name, players=len(game.players))
            for game in list(self._games.values())
            if game.phase == GamePhase.WAITING and not game.is_full and game.host is not None
        ]
