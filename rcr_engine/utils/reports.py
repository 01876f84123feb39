"""Tabular reports of a scoring run.

Three tables are produced:

* results: one row per scored hypothesis;
* mapping: the fate of every input measurement;
* detail: every population downstream of every hypothesis with its
  classification.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Mapping, Sequence

import logging

import pandas as pd

from models.direction import DirectionType
from models.hypothesis import (
    AMBIGUOUS,
    NOT_SIGNIFICANT,
    Hypothesis,
    MappedMeasurement,
    ScoredHypothesis,
)
from models.measurement import Measurement

RESULT_COLUMNS = [
    "Id", "Direction", "Correct", "Richness", "Concordance",
    "Ambiguous", "Contra", "Possible", "Observed",
]
MAPPING_COLUMNS = ["Id", "KAM_NODE", "STATUS"]
DETAIL_COLUMNS = ["Source", "Relationship", "Target", "Type", "Direction"]

NOT_MAPPED_STATUS = "Not mapped to KAM"
NOT_IN_POPULATION_STATUS = "Not present in population: {}"
COLLAPSED_STATUS = "Collapsed to: {}"


def _label(node) -> str:
    return getattr(node, "label", str(node))


def results_frame(scores: Iterable[ScoredHypothesis]) -> pd.DataFrame:
    rows = []
    for s in scores:
        rows.append({
            "Id": _label(s.node),
            "Direction": s.direction.code,
            "Correct": s.number_correct,
            "Richness": s.richness,
            "Concordance": s.concordance,
            "Ambiguous": s.number_ambiguous,
            "Contra": s.number_contra,
            "Possible": s.possible,
            "Observed": s.observed,
        })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def measurement_status(mapping_report, scoring_report=None) -> Dict[Measurement, str]:
    """Status per measurement; later pipeline stages overwrite earlier ones."""
    status: Dict[Measurement, str] = {}
    for m in mapping_report.unmapped_measurements:
        status[m] = NOT_MAPPED_STATUS
    for node, ms in mapping_report.not_in_population_nodes.items():
        for m in ms:
            status[m] = NOT_IN_POPULATION_STATUS.format(_label(node))
    for node, ms in mapping_report.collapsed_away.items():
        for m in ms:
            status[m] = COLLAPSED_STATUS.format(_label(node))
    if scoring_report is not None:
        status.update(scoring_report.status)
    return status


def mapping_frame(
    measurements: Sequence[Measurement],
    mapped_measurements: Iterable[MappedMeasurement],
    status: Mapping[Measurement, str],
) -> pd.DataFrame:
    nodes = {mm.measurement: mm.node for mm in mapped_measurements}
    rows = []
    for m in measurements:
        node = nodes.get(m)
        rows.append({
            "Id": m.term.value,
            "KAM_NODE": "" if node is None else _label(node),
            "STATUS": status.get(m, ""),
        })
    return pd.DataFrame(rows, columns=MAPPING_COLUMNS)


def _relationship(direction: DirectionType) -> str:
    if direction is DirectionType.UP:
        return "increases"
    if direction is DirectionType.DOWN:
        return "decreases"
    return AMBIGUOUS


def detail_frame(
    hypotheses: Sequence[Hypothesis],
    scores: Sequence[ScoredHypothesis],
    population: Iterable[Hashable],
    state_changes: Mapping[Hashable, MappedMeasurement],
) -> pd.DataFrame:
    """Classify each population downstream of each hypothesis.

    ``hypotheses`` and ``scores`` must be in the same order, as returned by
    :meth:`Scorer.score`.
    """
    if len(hypotheses) != len(scores):
        raise ValueError("hypotheses and scores must have the same length")
    population = set(population)
    rows: List[dict] = []
    for hypothesis, score in zip(hypotheses, scores):
        downstreams = sorted(
            (d for d in hypothesis.downstreams if d.node in population),
            key=lambda d: _label(d.node),
        )
        for d in downstreams:
            mm = state_changes.get(d.node)
            rows.append({
                "Source": _label(score.node),
                "Relationship": _relationship(d.direction),
                "Target": _label(d.node),
                "Type": NOT_SIGNIFICANT if score.prediction is None else score.prediction.classify(d),
                "Direction": NOT_SIGNIFICANT if mm is None else mm.measurement.direction.label,
            })
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS)


def write_frame(df: pd.DataFrame, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logging.getLogger("rcr").info("Saved %d rows to %s", len(df), str(path))
    return path
