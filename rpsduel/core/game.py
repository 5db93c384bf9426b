"""Authoritative game state machine.

Handles the full lifecycle of a two-player duel:
    create -> join -> both players submit moves -> resolve -> ... -> game over

Both players pick an attack and a defense each round. The first player
submits, the turn passes to the second, and once both have submitted the
round resolves: each attack is matched against the opposing defense.
Clients never compute damage -- the server runs this code.
"""

from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from rpsduel.core.errors import (
    GameFullError,
    InvalidMoveError,
    InvalidStateError,
    NotYourTurnError,
    PlayerNotFoundError,
)
from rpsduel.core.moves import (
    EFFECTIVENESS_TEXT,
    MAX_JITTER,
    MIN_DAMAGE,
    EffectivenessTier,
    MoveType,
    calculate_damage,
    get_effectiveness,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_LOG_ENTRIES = 50


class GamePhase(str, Enum):
    """Lifecycle phase of a game."""

    WAITING = "waiting"  # Host alone, waiting for an opponent
    SELECTION = "selection"  # Players submitting moves
    BATTLE = "battle"  # Round being resolved (transient)
    GAME_OVER = "game_over"


class WireModel(BaseModel):
    """Base for models sent to clients with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Supporting models
# ---------------------------------------------------------------------------

class Player(WireModel):
    """A participant in one game. Owned by its GameState."""

    id: str
    name: str
    health: int = 100
    max_health: int = 100
    attack: int = 15
    defense: int = 5

    # Moves submitted for the current round
    current_attack_type: MoveType | None = None
    current_defense_type: MoveType | None = None
    ready: bool = False

    @property
    def is_defeated(self) -> bool:
        return self.health <= 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, return actual amount dealt. Clamps to 0."""
        actual = min(amount, self.health)
        self.health -= actual
        return actual

    def clear_moves(self) -> None:
        self.current_attack_type = None
        self.current_defense_type = None
        self.ready = False


class AttackEvent(WireModel):
    """One attack of a resolved round.

    Clients use these to play the attack animation.
    """

    attacker_id: str
    defender_id: str
    attack_type: MoveType
    defense_type: MoveType
    effectiveness: EffectivenessTier
    multiplier: float = Field(default=1.0, exclude=True)
    damage: int = 0


class TurnResult(BaseModel):
    """What happened as the result of one move submission."""

    game_id: str
    resolved: bool = False  # Both players had submitted; the round ran
    attacks: list[AttackEvent] = Field(default_factory=list)
    game_over: bool = False
    winner_id: str | None = None
    is_draw: bool = False


# ---------------------------------------------------------------------------
# Main game state
# ---------------------------------------------------------------------------

class GameState(WireModel):
    """The complete state of one game.

    The whole model (minus the lock) is what clients receive as
    ``game_state_update``.
    """

    id: str
    players: list[Player] = Field(default_factory=list)
    current_turn: str | None = None
    phase: GamePhase = GamePhase.WAITING
    winner: str | None = None
    is_draw: bool = False
    game_log: list[str] = Field(default_factory=list)  # Most recent first

    max_log_entries: int | None = Field(default=DEFAULT_MAX_LOG_ENTRIES, exclude=True)

    # Serializes every read-modify-write of this game
    _lock: asyncio.Lock = PrivateAttr(default_factory=asyncio.Lock)

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def log(self) -> tuple[str, ...]:
        """Read-only view of the game log, most recent first."""
        return tuple(self.game_log)

    @property
    def host(self) -> Player | None:
        return self.players[0] if self.players else None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= 2

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def add_log(self, *lines: str) -> None:
        """Prepend lines to the log, keeping their given order."""
        self.game_log[:0] = lines
        if self.max_log_entries is not None:
            del self.game_log[self.max_log_entries:]

    def get_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_opponent(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id != player_id:
                return player
        return None

    def both_moves_submitted(self) -> bool:
        return len(self.players) == 2 and all(p.ready for p in self.players)

    def add_player(self, player: Player) -> None:
        """Seat a player. The second player starts the game."""
        if self.is_full:
            raise GameFullError()
        if self.phase != GamePhase.WAITING:
            raise InvalidStateError("Game is no longer open")
        if self.get_player(player.id) is not None:
            raise InvalidStateError("Player already in game")

        self.players.append(player)
        if self.is_full:
            host = self.players[0]
            self.phase = GamePhase.SELECTION
            self.current_turn = host.id
            self.game_log = [f"{player.name} joined the game. {host.name} goes first!"]


# ---------------------------------------------------------------------------
# Turn resolution engine
# ---------------------------------------------------------------------------

class GameEngine:
    """Applies player actions to a GameState.

    Holds no game state of its own, only the damage settings and the
    random source used for damage jitter.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        min_damage: int = MIN_DAMAGE,
        max_jitter: int = MAX_JITTER,
    ) -> None:
        self.rng = rng or random.Random()
        self.min_damage = min_damage
        self.max_jitter = max_jitter

    def submit_move(
        self,
        game: GameState,
        player_id: str,
        attack_type: MoveType | str,
        defense_type: MoveType | str,
    ) -> TurnResult:
        """Record a player's attack and defense for this round.

        Raises PlayerNotFoundError / NotYourTurnError / InvalidMoveError
        without touching the game. Resolves the round once both players
        have submitted.
        """
        player = game.get_player(player_id)
        if player is None:
            raise PlayerNotFoundError()
        if game.phase != GamePhase.SELECTION or game.current_turn != player_id:
            raise NotYourTurnError()
        try:
            attack = MoveType(attack_type)
            defense = MoveType(defense_type)
        except ValueError:
            raise InvalidMoveError() from None

        player.current_attack_type = attack
        player.current_defense_type = defense
        player.ready = True

        if game.both_moves_submitted():
            return self.resolve_battle(game)

        opponent = game.get_opponent(player_id)
        game.current_turn = opponent.id if opponent else None
        game.add_log(f"{player.name} has chosen their move. Waiting for opponent...")
        logger.debug("Game %s: %s submitted", game.id, player.name)
        return TurnResult(game_id=game.id)

    def resolve_battle(self, game: GameState) -> TurnResult:
        """Resolve a round where both players have submitted moves.

        Mutation: updates health, phase, turn, winner and log in place.
        """
        if len(game.players) != 2:
            raise InvalidStateError("Battle needs two players")
        player1, player2 = game.players
        for player in (player1, player2):
            if player.current_attack_type is None or player.current_defense_type is None:
                raise InvalidStateError(f"{player.name} has not chosen a move")

        game.phase = GamePhase.BATTLE

        # Damage is computed from pre-round stats and applied together
        attack1 = self._attack(player1, player2)
        attack2 = self._attack(player2, player1)
        player2.take_damage(attack1.damage)
        player1.take_damage(attack2.damage)

        game.add_log(
            self._describe(player1, attack1),
            self._describe(player2, attack2),
        )
        result = TurnResult(game_id=game.id, resolved=True, attacks=[attack1, attack2])
        logger.info(
            "Game %s: %s dealt %d, %s dealt %d",
            game.id, player1.name, attack1.damage, player2.name, attack2.damage,
        )

        if player1.is_defeated or player2.is_defeated:
            game.phase = GamePhase.GAME_OVER
            game.current_turn = None
            if player1.is_defeated and player2.is_defeated:
                game.winner = None
                game.is_draw = True
                game.add_log("The battle ended in a draw!")
            else:
                winner = player2 if player1.is_defeated else player1
                game.winner = winner.id
                game.add_log(f"{winner.name} wins the battle!")
            result.game_over = True
            result.winner_id = game.winner
            result.is_draw = game.is_draw
            logger.info("Game %s over (winner=%s, draw=%s)", game.id, game.winner, game.is_draw)
        else:
            player1.clear_moves()
            player2.clear_moves()
            game.phase = GamePhase.SELECTION
            game.current_turn = player1.id

        return result

    def leave(self, game: GameState, player_id: str) -> Player | None:
        """Remove a player from the game.

        A remaining opponent wins by default unless the game already
        ended. Returns the remaining player, if any.
        """
        player = game.get_player(player_id)
        if player is None:
            raise PlayerNotFoundError()

        game.players.remove(player)
        game.add_log(f"{player.name} left the game.")
        opponent = game.players[0] if game.players else None

        if opponent is not None and not game.is_over:
            opponent.clear_moves()
            game.phase = GamePhase.GAME_OVER
            game.current_turn = None
            game.winner = opponent.id
            game.is_draw = False
            game.add_log(f"{opponent.name} wins by default!")
        elif opponent is None:
            game.current_turn = None
        logger.info("Game %s: %s left", game.id, player.name)
        return opponent

    def _attack(self, attacker: Player, defender: Player) -> AttackEvent:
        attack_type = attacker.current_attack_type
        defense_type = defender.current_defense_type
        multiplier, tier = get_effectiveness(attack_type, defense_type)
        damage = calculate_damage(
            attacker.attack,
            multiplier,
            defender.defense,
            rng=self.rng,
            min_damage=self.min_damage,
            max_jitter=self.max_jitter,
        )
        return AttackEvent(
            attacker_id=attacker.id,
            defender_id=defender.id,
            attack_type=attack_type,
            defense_type=defense_type,
            effectiveness=tier,
            multiplier=multiplier,
            damage=damage,
        )

    @staticmethod
    def _describe(attacker: Player, attack: AttackEvent) -> str:
        line = f"{attacker.name} attacks with {attack.attack_type.value} for {attack.damage} damage!"
        eff_msg = EFFECTIVENESS_TEXT[attack.effectiveness]
        return f"{line} {eff_msg}".strip()
