from .difficulty import HARDEST, Difficulty, DifficultyConfig


# Flat reward for correctly holding still on a negated command
TIMEOUT_RESTRAINT_SCORE = 1


def multiplier_for(difficulty: Difficulty) -> int:
    return 2 if difficulty == HARDEST else 1


def round_score(config: DifficultyConfig, elapsed: float, multiplier: int = 1) -> float:
    """Score a correct manual response.

    Ten points per second left on the clock, floored at zero, times the
    tier multiplier. Faster responses score more.
    """
    raw = (config.max_time * 10) - (elapsed * 10)
    return max(0, raw) * multiplier
