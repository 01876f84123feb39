import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import itertools

import pytest

from models.direction import DirectionType, compound, direction_of, evaluate

UP = DirectionType.UP
DOWN = DirectionType.DOWN
AMBIG = DirectionType.AMBIGUOUS
UNMEASURED = DirectionType.UNMEASURED


@pytest.mark.parametrize('a,b', list(itertools.product(DirectionType, repeat=2)))
def test_evaluate_commutative(a, b):
    assert evaluate(a, b) is evaluate(b, a)


def test_evaluate_table():
    assert evaluate(UP, UP) is UP
    assert evaluate(DOWN, DOWN) is DOWN
    assert evaluate(UP, DOWN) is AMBIG
    assert evaluate(UNMEASURED, DOWN) is DOWN
    assert evaluate(UP, UNMEASURED) is UP
    assert evaluate(AMBIG, UP) is AMBIG
    assert evaluate(UNMEASURED, UNMEASURED) is UNMEASURED


def test_compound_second_operand_dominates():
    assert compound(UP, DOWN) is DOWN
    assert compound(DOWN, UP) is UP
    assert compound(UP, UP) is UP
    assert compound(DOWN, DOWN) is DOWN
    assert compound(UNMEASURED, DOWN) is DOWN
    assert compound(UP, UNMEASURED) is UNMEASURED
    assert compound(AMBIG, UP) is AMBIG
    assert compound(DOWN, AMBIG) is AMBIG


def test_methods_delegate():
    assert UP.evaluate(DOWN) is AMBIG
    assert UP.compound(DOWN) is DOWN


def test_direction_of_sign():
    assert direction_of(2.5) is UP
    assert direction_of(-0.1) is DOWN
    assert direction_of(0.0) is UNMEASURED
    assert direction_of(-0.0) is UNMEASURED


def test_codes_and_labels():
    assert [d.code for d in (UP, DOWN, AMBIG, UNMEASURED)] == [1, -1, 3, 0]
    assert str(AMBIG) == 'AMBIG'
    assert DirectionType.from_code(-1) is DOWN
    assert DirectionType.from_code(7) is None
    assert DirectionType.from_code(None) is None


def test_from_string():
    assert DirectionType.from_string('UP') is UP
    assert DirectionType.from_string('ambig') is AMBIG
    assert DirectionType.from_string('Unmeasured') is UNMEASURED
    assert DirectionType.from_string('sideways') is None
    assert DirectionType.from_string(None) is None
