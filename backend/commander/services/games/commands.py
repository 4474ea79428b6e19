import random
from dataclasses import dataclass
from enum import Enum

from .errors import GameValidationError


NOT_COMMAND_PROBABILITY = 0.15


class Color(str, Enum):
    RED = 'RED'
    WHITE = 'WHITE'

    @property
    def other(self) -> 'Color':
        return Color.WHITE if self is Color.RED else Color.RED


class Direction(str, Enum):
    UP = 'UP'
    DOWN = 'DOWN'


@dataclass(frozen=True)
class Command:
    color: Color
    direction: Direction
    is_negated: bool = False

    def spoken_text(self) -> str:
        if self.is_negated:
            return f'{self.color.value} not {self.direction.value}'
        return f'{self.color.value} {self.direction.value}'

    def is_satisfied_by(self, color: Color, direction: Direction) -> bool:
        """A plain command must be matched exactly; a negated one must not be."""
        is_match = color == self.color and direction == self.direction
        return is_match != self.is_negated

    def to_dict(self):
        return {
            'color': self.color.value,
            'direction': self.direction.value,
            'is_negated': self.is_negated,
            'text': self.spoken_text(),
        }


def generate_command(last_was_negated: bool, rng=random) -> Command:
    """Draw the next round's instruction.

    Color and direction are uniform. Negation is drawn with
    NOT_COMMAND_PROBABILITY, then forced off when the previous command was
    negated (an override, not a re-roll), so two negated rounds never follow
    each other.
    """
    is_negated = rng.random() < NOT_COMMAND_PROBABILITY
    if last_was_negated and is_negated:
        is_negated = False
    return Command(
        color=rng.choice([Color.RED, Color.WHITE]),
        direction=rng.choice([Direction.UP, Direction.DOWN]),
        is_negated=is_negated,
    )


def parse_color(value) -> Color:
    try:
        return Color(str(value).strip().upper())
    except ValueError:
        raise GameValidationError(f'Unknown color: {value}')


def parse_direction(value) -> Direction:
    try:
        return Direction(str(value).strip().upper())
    except ValueError:
        raise GameValidationError(f'Unknown direction: {value}')
