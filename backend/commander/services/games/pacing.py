import math

from .difficulty import DIFFICULTY_SETTINGS, HARDEST, DifficultyConfig


MIN_WAIT_TIME = 1.0


def wait_time(round_index: int, config: DifficultyConfig) -> float:
    """Seconds to wait before announcing round ``round_index`` (1-based).

    The hardest tier is already at the floor and stays flat. Other tiers
    decay linearly from ``config.wait_time`` toward MIN_WAIT_TIME as the
    session progresses, rounded half-up to one decimal.
    """
    if config == DIFFICULTY_SETTINGS[HARDEST]:
        return config.wait_time
    progress = round_index / config.rounds
    dynamic = config.wait_time - (config.wait_time - MIN_WAIT_TIME) * progress
    return max(MIN_WAIT_TIME, math.floor(dynamic * 10 + 0.5) / 10)
