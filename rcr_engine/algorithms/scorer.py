from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Collection, Dict, Hashable, List, Mapping, Optional, Protocol, Set

from joblib import Parallel, delayed

from models.cutoffs import Cutoffs
from models.direction import DirectionType
from models.hypothesis import Hypothesis, MappedMeasurement, Prediction, ScoredHypothesis
from metrics.statistics import MathError, concordance, richness

# fewer measured downstreams than this cannot pass a richness cutoff
MIN_POSSIBLES = 4

STATE_CHANGE = "State Change"
FAILED_CUTOFFS = "Failed cutoffs"


class ScoringError(ValueError):
    """Raised when the scorer is wired with missing or invalid inputs."""


class ScoringReporter(Protocol):
    def state_change(self, mm: MappedMeasurement) -> None:
        ...

    def failed_cutoffs(self, mm: MappedMeasurement) -> None:
        ...


class StateChangeReport:
    """Status of each mapped measurement against the cutoffs, for the detail output."""

    def __init__(self):
        self.status: Dict[object, str] = {}
        self.state_changes: Dict[Hashable, MappedMeasurement] = {}

    def state_change(self, mm: MappedMeasurement) -> None:
        self.status[mm.measurement] = STATE_CHANGE
        self.state_changes[mm.node] = mm

    def failed_cutoffs(self, mm: MappedMeasurement) -> None:
        self.status[mm.measurement] = FAILED_CUTOFFS


def measured_nodes(mapped_measurements: Collection[MappedMeasurement]) -> Set[Hashable]:
    return {mm.node for mm in mapped_measurements}


def state_change_map(
    mapped_measurements: Collection[MappedMeasurement],
    cutoffs: Cutoffs,
    reporter: Optional[ScoringReporter] = None,
) -> Dict[Hashable, MappedMeasurement]:
    """Mapped measurements passing ``cutoffs``, keyed by node."""
    ret: Dict[Hashable, MappedMeasurement] = {}
    for mm in mapped_measurements:
        if cutoffs.evaluate(mm.measurement):
            ret[mm.node] = mm
            if reporter is not None:
                reporter.state_change(mm)
        elif reporter is not None:
            reporter.failed_cutoffs(mm)
    return ret


def predict(hypothesis: Hypothesis, state_changes: Mapping[Hashable, MappedMeasurement]) -> Prediction:
    correct, contra, ambiguous = set(), set(), set()
    for downstream in hypothesis.downstreams:
        mm = state_changes.get(downstream.node)
        if mm is None:
            continue
        observed_down = mm.measurement.fold_change < 0.0
        if downstream.direction is DirectionType.AMBIGUOUS:
            ambiguous.add(downstream)
        elif downstream.direction is DirectionType.UP:
            (contra if observed_down else correct).add(downstream)
        else:
            (correct if observed_down else contra).add(downstream)
    return Prediction(correct, contra, ambiguous)


class Scorer:
    """Scores hypotheses for richness and concordance against state changes.

    Each hypothesis is scored independently over read-only shared inputs, so
    ``n_jobs`` threads can score in parallel; results keep input order.
    """

    def __init__(self, n_jobs: int = 1):
        self.n_jobs = n_jobs

    def score(
        self,
        hypotheses: Collection[Hypothesis],
        mapped_measurements: Collection[MappedMeasurement],
        cutoffs: Cutoffs,
        population_size: int,
        reporter: Optional[ScoringReporter] = None,
    ) -> List[ScoredHypothesis]:
        if hypotheses is None or mapped_measurements is None or cutoffs is None:
            raise ScoringError("hypotheses, mapped measurements and cutoffs cannot be None.")
        logger = logging.getLogger("rcr")
        measured = frozenset(measured_nodes(mapped_measurements))
        state_changes = MappingProxyType(state_change_map(mapped_measurements, cutoffs, reporter))
        logger.info("%d mapped measurements are state changes", len(state_changes))

        if self.n_jobs == 1:
            results = [
                self.score_one(h, measured, state_changes, population_size) for h in hypotheses
            ]
        else:
            results = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self.score_one)(h, measured, state_changes, population_size)
                for h in hypotheses
            )
        logger.info("Scored %d hypotheses", len(results))
        return list(results)

    def score_one(
        self,
        hypothesis: Hypothesis,
        measured: Set[Hashable],
        state_changes: Mapping[Hashable, MappedMeasurement],
        population_size: int,
    ) -> ScoredHypothesis:
        if hypothesis is None or hypothesis.downstreams is None or measured is None or state_changes is None:
            raise ScoringError("Hypothesis, downstream nodes and state changes cannot be None.")
        if population_size is None or population_size < 0:
            raise ScoringError("population_size must be a positive number.")

        scored = ScoredHypothesis.of(hypothesis)
        downstream_nodes = set()
        for d in hypothesis.downstreams:
            downstream_nodes.add(d.node)
            if d.node in state_changes:
                scored.downstreams.add(d)
        possibles = downstream_nodes & set(measured)
        scored.possible = len(possibles)

        if len(possibles) < MIN_POSSIBLES:
            logging.getLogger("rcr").debug(
                "Hypothesis %s discarded with %d possibles", hypothesis.node, len(possibles)
            )
            scored.direction = DirectionType.UNMEASURED
            return scored

        prediction = predict(hypothesis, state_changes)
        correct = prediction.number_correct
        contra = prediction.number_contra
        direction = DirectionType.UP
        if contra > correct:
            direction = DirectionType.DOWN
            correct, contra = contra, correct
            prediction = prediction.flipped()

        observed = correct + contra + prediction.number_ambiguous
        try:
            rich = richness(observed, len(possibles), len(state_changes), population_size)
        except MathError:
            rich = 1.0

        conc = 1.0
        if correct > 0:
            try:
                conc = concordance(correct, contra)
            except MathError:
                conc = 1.0

        scored.prediction = prediction
        scored.richness = rich
        scored.concordance = conc
        scored.observed = observed
        scored.direction = DirectionType.UNMEASURED if correct == 0 else direction
        return scored
