import random

import pytest

from commander.services.games.commands import (
    NOT_COMMAND_PROBABILITY,
    Color,
    Command,
    Direction,
    generate_command,
    parse_color,
    parse_direction,
)
from commander.services.games.errors import GameValidationError


class AlwaysNegate:
    def random(self):
        return 0.0

    def choice(self, seq):
        return seq[-1]


def _sequence(n, rng):
    commands = []
    last = False
    for _ in range(n):
        cmd = generate_command(last, rng)
        commands.append(cmd)
        last = cmd.is_negated
    return commands


def test_no_two_adjacent_negated_commands():
    commands = _sequence(5000, random.Random(1234))
    assert not any(a.is_negated and b.is_negated for a, b in zip(commands, commands[1:]))
    assert any(c.is_negated for c in commands)


def test_override_forces_plain_command_after_negated():
    commands = _sequence(6, AlwaysNegate())
    assert [c.is_negated for c in commands] == [True, False, True, False, True, False]
    assert commands[1].color == Color.WHITE
    assert commands[1].direction == Direction.DOWN


def test_effective_negation_rate_stays_below_nominal():
    commands = _sequence(20000, random.Random(99))
    rate = sum(c.is_negated for c in commands) / len(commands)
    assert 0.10 < rate < NOT_COMMAND_PROBABILITY


def test_colors_and_directions_are_both_drawn():
    commands = _sequence(500, random.Random(7))
    assert {c.color for c in commands} == {Color.RED, Color.WHITE}
    assert {c.direction for c in commands} == {Direction.UP, Direction.DOWN}


def test_spoken_text():
    assert Command(Color.RED, Direction.UP).spoken_text() == 'RED UP'
    assert Command(Color.WHITE, Direction.DOWN, True).spoken_text() == 'WHITE not DOWN'


@pytest.mark.parametrize('negated,color,direction,expected', [
    (False, Color.RED, Direction.UP, True),
    (False, Color.WHITE, Direction.UP, False),
    (False, Color.RED, Direction.DOWN, False),
    (True, Color.RED, Direction.UP, False),
    (True, Color.WHITE, Direction.DOWN, True),
    (True, Color.RED, Direction.DOWN, True),
    (True, Color.WHITE, Direction.UP, True),
])
def test_success_predicate(negated, color, direction, expected):
    command = Command(Color.RED, Direction.UP, negated)
    assert command.is_satisfied_by(color, direction) is expected


def test_parse_controls():
    assert parse_color(' white ') == Color.WHITE
    assert parse_direction('down') == Direction.DOWN
    with pytest.raises(GameValidationError):
        parse_color('blue')
    with pytest.raises(GameValidationError):
        parse_direction(None)
