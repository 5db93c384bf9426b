"""Move types, effectiveness chart, and damage calculation."""

import math
import random
from enum import Enum


class MoveType(str, Enum):
    """The three move types. Used for both attacks and defenses."""

    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class EffectivenessTier(str, Enum):
    """Qualitative outcome of an attack against a defense."""

    SUPER = "super"
    NORMAL = "normal"
    NOT = "not"


SUPER_EFFECTIVE = 2.0
NORMAL_EFFECTIVE = 1.0
NOT_EFFECTIVE = 0.5

MIN_DAMAGE = 5
MAX_JITTER = 5


# ---------------------------------------------------------------------------
# Effectiveness chart
# ---------------------------------------------------------------------------
# BEATS[attack] is the one defense that attack is super effective against.
# ---------------------------------------------------------------------------

BEATS: dict[MoveType, MoveType] = {
    MoveType.ROCK: MoveType.SCISSORS,
    MoveType.SCISSORS: MoveType.PAPER,
    MoveType.PAPER: MoveType.ROCK,
}

_TIER_MULTIPLIERS: dict[EffectivenessTier, float] = {
    EffectivenessTier.SUPER: SUPER_EFFECTIVE,
    EffectivenessTier.NORMAL: NORMAL_EFFECTIVE,
    EffectivenessTier.NOT: NOT_EFFECTIVE,
}

EFFECTIVENESS_TEXT: dict[EffectivenessTier, str] = {
    EffectivenessTier.SUPER: "It's super effective!",
    EffectivenessTier.NORMAL: "",
    EffectivenessTier.NOT: "It's not very effective...",
}


def get_effectiveness(
    attack_type: MoveType | str, defense_type: MoveType | str
) -> tuple[float, EffectivenessTier]:
    """Resolve an attack against a defense.

    Returns (multiplier, tier): 2.0/super when the attack beats the
    defense, 1.0/normal on a mirror match, 0.5/not otherwise.
    """
    attack = MoveType(attack_type)
    defense = MoveType(defense_type)
    if BEATS[attack] == defense:
        tier = EffectivenessTier.SUPER
    elif attack == defense:
        tier = EffectivenessTier.NORMAL
    else:
        tier = EffectivenessTier.NOT
    return _TIER_MULTIPLIERS[tier], tier


# ---------------------------------------------------------------------------
# Damage calculation
# ---------------------------------------------------------------------------

def calculate_damage(
    attack: int,
    multiplier: float,
    defense: int,
    rng: random.Random | None = None,
    min_damage: int = MIN_DAMAGE,
    max_jitter: int = MAX_JITTER,
) -> int:
    """Calculate the damage of one attack.

    Formula:
        damage = max(min_damage, floor(attack * multiplier - defense + jitter))

    jitter is an integer drawn uniformly from [0, max_jitter) using ``rng``
    (any object with a ``randrange`` method; the module-level ``random``
    when omitted).
    """
    rng = rng or random
    jitter = rng.randrange(max_jitter) if max_jitter > 0 else 0
    return max(min_damage, math.floor(attack * multiplier - defense + jitter))
