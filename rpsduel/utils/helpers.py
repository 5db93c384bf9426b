"""Helper utilities for RPS Duel."""

import random
import string
from collections.abc import Container

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def generate_game_id(
    taken: Container[str] = (),
    length: int = 6,
    rng: random.Random | None = None,
) -> str:
    """Generate a short upper-case base-36 game id.

    Retries until the id is not in ``taken``, so ids stay unique for as
    long as the caller keeps ``taken`` current.
    """
    rng = rng or random
    while True:
        game_id = "".join(rng.choice(BASE36_ALPHABET) for _ in range(length))
        if game_id not in taken:
            return game_id
