"""Tests for move types, the effectiveness chart, and damage calculation."""

import random

import pytest

from rpsduel.core.moves import (
    BEATS,
    EFFECTIVENESS_TEXT,
    MIN_DAMAGE,
    EffectivenessTier,
    MoveType,
    calculate_damage,
    get_effectiveness,
)

from tests.helpers import FixedRandom


class TestMoveType:
    """Tests for the MoveType enum."""

    def test_three_moves(self):
        assert {m.value for m in MoveType} == {"rock", "paper", "scissors"}

    def test_each_move_beats_exactly_one_other(self):
        assert set(BEATS) == set(MoveType)
        assert set(BEATS.values()) == set(MoveType)
        for attack, beaten in BEATS.items():
            assert attack != beaten


class TestEffectiveness:
    """Tests for get_effectiveness."""

    @pytest.mark.parametrize("move", list(MoveType))
    def test_mirror_match_is_normal(self, move):
        assert get_effectiveness(move, move) == (1.0, EffectivenessTier.NORMAL)

    @pytest.mark.parametrize(
        "attack,defense",
        [
            (MoveType.ROCK, MoveType.SCISSORS),
            (MoveType.SCISSORS, MoveType.PAPER),
            (MoveType.PAPER, MoveType.ROCK),
        ],
    )
    def test_winning_matchups_are_super(self, attack, defense):
        assert get_effectiveness(attack, defense) == (2.0, EffectivenessTier.SUPER)

    @pytest.mark.parametrize(
        "attack,defense",
        [
            (MoveType.SCISSORS, MoveType.ROCK),
            (MoveType.PAPER, MoveType.SCISSORS),
            (MoveType.ROCK, MoveType.PAPER),
        ],
    )
    def test_losing_matchups_are_not_effective(self, attack, defense):
        assert get_effectiveness(attack, defense) == (0.5, EffectivenessTier.NOT)

    def test_accepts_plain_strings(self):
        assert get_effectiveness("rock", "scissors") == (2.0, EffectivenessTier.SUPER)

    def test_unknown_move_rejected(self):
        with pytest.raises(ValueError):
            get_effectiveness("lizard", "rock")

    def test_tier_distribution(self):
        """Of the 9 matchups, 3 are super, 3 normal, 3 not effective."""
        tiers = [get_effectiveness(a, d)[1] for a in MoveType for d in MoveType]
        for tier in EffectivenessTier:
            assert tiers.count(tier) == 3

    def test_effectiveness_text(self):
        assert EFFECTIVENESS_TEXT[EffectivenessTier.SUPER] == "It's super effective!"
        assert EFFECTIVENESS_TEXT[EffectivenessTier.NOT] == "It's not very effective..."
        assert EFFECTIVENESS_TEXT[EffectivenessTier.NORMAL] == ""


class TestCalculateDamage:
    """Tests for calculate_damage."""

    def test_super_effective_without_jitter(self):
        # 15 * 2.0 - 5 + 0
        assert calculate_damage(15, 2.0, 5, rng=FixedRandom(value=0)) == 25

    def test_normal_without_jitter(self):
        assert calculate_damage(15, 1.0, 5, rng=FixedRandom(value=0)) == 10

    def test_result_is_floored(self):
        # 15 * 0.5 - 5 + 4 = 6.5
        assert calculate_damage(15, 0.5, 5, rng=FixedRandom(value=4)) == 6

    def test_minimum_damage(self):
        # 15 * 0.5 - 5 + 0 = 2.5 -> floor damage
        assert calculate_damage(15, 0.5, 5, rng=FixedRandom(value=0)) == MIN_DAMAGE

    def test_minimum_damage_with_deeply_negative_raw(self):
        assert calculate_damage(1, 0.5, 1000, rng=FixedRandom(value=4)) == 5

    def test_jitter_stays_in_range(self):
        rng = random.Random(42)
        results = {calculate_damage(15, 1.0, 5, rng=rng) for _ in range(500)}
        assert results <= set(range(10, 15))
        assert len(results) > 1

    def test_seeded_rng_is_deterministic(self):
        a = [calculate_damage(15, 2.0, 5, rng=random.Random(7)) for _ in range(5)]
        b = [calculate_damage(15, 2.0, 5, rng=random.Random(7)) for _ in range(5)]
        assert a == b

    def test_custom_floor(self):
        assert calculate_damage(1, 0.5, 10, rng=FixedRandom(value=0), min_damage=1) == 1

    def test_no_jitter(self):
        assert calculate_damage(15, 1.0, 5, rng=random.Random(3), max_jitter=0) == 10

    def test_default_rng(self):
        assert 25 <= calculate_damage(15, 2.0, 5) <= 29
