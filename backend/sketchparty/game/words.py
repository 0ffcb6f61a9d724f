from __future__ import annotations

import random
from typing import Sequence


DEFAULT_WORDS: tuple[str, ...] = (
    "Apple",
    "Banana",
    "Bicycle",
    "Bridge",
    "Butterfly",
    "Camera",
    "Candle",
    "Castle",
    "Cactus",
    "Cloud",
    "Dolphin",
    "Dragon",
    "Elephant",
    "Feather",
    "Giraffe",
    "Guitar",
    "Hammer",
    "Helicopter",
    "House",
    "Island",
    "Kangaroo",
    "Ladder",
    "Lighthouse",
    "Mountain",
    "Mushroom",
    "Octopus",
    "Pencil",
    "Penguin",
    "Pizza",
    "Rainbow",
    "Robot",
    "Rocket",
    "Sandwich",
    "Scissors",
    "Snowman",
    "Spider",
    "Sunflower",
    "Telescope",
    "Tiger",
    "Tornado",
    "Train",
    "Umbrella",
    "Volcano",
    "Whale",
    "Windmill",
)


def pick_word(words: Sequence[str] | None = None, rng: random.Random | None = None) -> str:
    pool = list(words or DEFAULT_WORDS)
    return (rng or random).choice(pool)
