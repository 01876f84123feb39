from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Hashable, Iterable, Set, Tuple

from .direction import DirectionType
from .measurement import Measurement

CORRECT = "Correct"
CONTRA = "Contra"
AMBIGUOUS = "Ambiguous"
NOT_SIGNIFICANT = "Not significant"


@dataclass(eq=False)
class Downstream:
    """A graph node together with a predicted or observed direction.

    Downstreams compare by identity: two objects for the same node are
    distinct members of a set.
    """

    node: Hashable
    direction: DirectionType


@dataclass(eq=False)
class Hypothesis(Downstream):
    depth: int = 0
    downstreams: Set[Downstream] = field(default_factory=set)

    def downstream_nodes(self) -> Set[Hashable]:
        return {d.node for d in self.downstreams}


class MappedMeasurement(Downstream):
    """A graph node paired with the single measurement selected for it."""

    def __init__(self, node: Hashable, measurement: Measurement):
        super().__init__(node, measurement.direction)
        self.measurement = measurement

    def __repr__(self) -> str:
        return f"MappedMeasurement(node={self.node!r}, measurement={self.measurement!r})"


@dataclass(frozen=True)
class Prediction:
    correct: FrozenSet[Downstream]
    contra: FrozenSet[Downstream]
    ambiguous: FrozenSet[Downstream]

    def __init__(
        self,
        correct: Iterable[Downstream],
        contra: Iterable[Downstream],
        ambiguous: Iterable[Downstream],
    ):
        if correct is None or contra is None or ambiguous is None:
            raise ValueError("downstreams are None")
        object.__setattr__(self, "correct", frozenset(correct))
        object.__setattr__(self, "contra", frozenset(contra))
        object.__setattr__(self, "ambiguous", frozenset(ambiguous))

    @property
    def number_correct(self) -> int:
        return len(self.correct)

    @property
    def number_contra(self) -> int:
        return len(self.contra)

    @property
    def number_ambiguous(self) -> int:
        return len(self.ambiguous)

    def flipped(self) -> "Prediction":
        return Prediction(self.contra, self.correct, self.ambiguous)

    def classify(self, downstream: Downstream) -> str:
        if downstream in self.correct:
            return CORRECT
        if downstream in self.contra:
            return CONTRA
        if downstream in self.ambiguous:
            return AMBIGUOUS
        return NOT_SIGNIFICANT


@dataclass(eq=False)
class ScoredHypothesis(Hypothesis):
    """Score of a hypothesis.

    ``downstreams`` holds only the downstreams whose node is a state change.
    The statistics stay ``None`` when the hypothesis was not scorable.
    """

    prediction: Prediction | None = None
    richness: float | None = None
    concordance: float | None = None
    possible: int | None = None
    observed: int | None = None

    @classmethod
    def of(cls, hypothesis: Hypothesis) -> "ScoredHypothesis":
        return cls(
            node=hypothesis.node,
            direction=hypothesis.direction,
            depth=hypothesis.depth,
        )

    @property
    def number_correct(self) -> int:
        return 0 if self.prediction is None else self.prediction.number_correct

    @property
    def number_contra(self) -> int:
        return 0 if self.prediction is None else self.prediction.number_contra

    @property
    def number_ambiguous(self) -> int:
        return 0 if self.prediction is None else self.prediction.number_ambiguous


@dataclass(frozen=True)
class MappingResult:
    mapped_measurements: Tuple[MappedMeasurement, ...]
    population_size: int

    def __init__(self, mapped_measurements: Iterable[MappedMeasurement], population_size: int):
        object.__setattr__(self, "mapped_measurements", tuple(mapped_measurements))
        object.__setattr__(self, "population_size", int(population_size))
