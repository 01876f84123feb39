from .direction import DirectionType, evaluate, compound, direction_of
from .measurement import Term, Measurement, Comparison, RNA_ABUNDANCE
from .hypothesis import (
    Downstream,
    Hypothesis,
    MappedMeasurement,
    Prediction,
    ScoredHypothesis,
    MappingResult,
)
from .cutoffs import Cutoffs

__all__ = [
    'DirectionType',
    'evaluate',
    'compound',
    'direction_of',
    'Term',
    'Measurement',
    'Comparison',
    'RNA_ABUNDANCE',
    'Downstream',
    'Hypothesis',
    'MappedMeasurement',
    'Prediction',
    'ScoredHypothesis',
    'MappingResult',
    'Cutoffs',
]
