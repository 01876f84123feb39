"""Directional signal shared by measurements, downstreams and hypotheses.

A direction is one of ``UP``, ``DOWN``, ``AMBIGUOUS`` or ``UNMEASURED``.
Two combination rules are provided:

``evaluate``
    Symmetric merge used when the same node is reached by several direct
    edges. Disagreement yields ``AMBIGUOUS``.
``compound``
    Directional merge used along multi-hop paths, where the later edge's
    polarity dominates.
"""

from __future__ import annotations

from enum import Enum


class DirectionType(Enum):
    UP = (1, "UP")
    DOWN = (-1, "DOWN")
    AMBIGUOUS = (3, "AMBIG")
    UNMEASURED = (0, "UNMEASURED")

    def __init__(self, code: int, label: str):
        self.code = code
        self.label = label

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_code(cls, code: int | None) -> "DirectionType | None":
        if code is None:
            return None
        for d in cls:
            if d.code == code:
                return d
        return None

    @classmethod
    def from_string(cls, s: str | None) -> "DirectionType | None":
        """Exact label match first, then a case-insensitive one."""
        if s is None:
            return None
        for d in cls:
            if d.label == s:
                return d
        for d in cls:
            if d.label.lower() == s.lower():
                return d
        return None

    def evaluate(self, other: "DirectionType") -> "DirectionType":
        return evaluate(self, other)

    def compound(self, other: "DirectionType") -> "DirectionType":
        return compound(self, other)


def evaluate(a: DirectionType, b: DirectionType) -> DirectionType:
    if a is DirectionType.AMBIGUOUS or b is DirectionType.AMBIGUOUS:
        return DirectionType.AMBIGUOUS
    if a is DirectionType.UNMEASURED:
        return b
    if b is DirectionType.UNMEASURED:
        return a
    if a is b:
        return a
    return DirectionType.AMBIGUOUS


def compound(a: DirectionType, b: DirectionType) -> DirectionType:
    if a is DirectionType.AMBIGUOUS or b is DirectionType.AMBIGUOUS:
        return DirectionType.AMBIGUOUS
    if a is DirectionType.UNMEASURED:
        return b
    # an unmeasured second operand wins, it does not fall back to ``a``
    if b is DirectionType.UNMEASURED:
        return b
    if a is b:
        return a
    return b


def direction_of(fold_change: float) -> DirectionType:
    # -0.0 == 0.0 so both map to UNMEASURED
    if fold_change == 0.0:
        return DirectionType.UNMEASURED
    if fold_change > 0.0:
        return DirectionType.UP
    return DirectionType.DOWN
