from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

from .errors import GameValidationError


class Difficulty(str, Enum):
    EASY = 'EASY'
    NORMAL = 'NORMAL'
    HARD = 'HARD'


@dataclass(frozen=True)
class DifficultyConfig:
    label: str
    max_time: float  # seconds
    rounds: int
    wait_time: float  # seconds

    def to_dict(self):
        return {
            'label': self.label,
            'max_time': self.max_time,
            'rounds': self.rounds,
            'wait_time': self.wait_time,
        }


DIFFICULTY_SETTINGS: Dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(label='Easy', max_time=3, rounds=10, wait_time=3),
    Difficulty.NORMAL: DifficultyConfig(label='Normal', max_time=2, rounds=20, wait_time=2),
    Difficulty.HARD: DifficultyConfig(label='Hard', max_time=1, rounds=40, wait_time=1),
}

# Tier whose wait time is already at the floor and which doubles round scores
HARDEST = Difficulty.HARD


def get_config(difficulty: Difficulty) -> DifficultyConfig:
    return DIFFICULTY_SETTINGS[difficulty]


def parse_difficulty(value: Union[str, Difficulty, None]) -> Difficulty:
    """Accept a Difficulty or its name in any case; default is NORMAL."""
    if value is None:
        return Difficulty.NORMAL
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).strip().upper())
    except ValueError:
        raise GameValidationError(f'Unknown difficulty: {value}')


def catalog() -> List[dict]:
    return [dict(tier=d.value, **cfg.to_dict()) for d, cfg in DIFFICULTY_SETTINGS.items()]
