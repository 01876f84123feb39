from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import logging
import re

import pandas as pd

from models.measurement import Comparison, Measurement, Term
from utils.graph_ops import KnowledgeGraph, TableEquivalencer

ID_PATTERN = re.compile(r"\[ID\]", re.IGNORECASE)
COL_PATTERN = re.compile(r"\[(.+)]\s*\[(.+)\]")

FOLD_CHANGE = "M"
P_VALUE = "P"
ABUNDANCE = "A"
ANALYST_SELECTION = "AS"
COLUMNS = (FOLD_CHANGE, P_VALUE, ABUNDANCE, ANALYST_SELECTION)
_COLUMN_NAMES = {
    FOLD_CHANGE: "Direction",
    P_VALUE: "p-value",
    ABUNDANCE: "Abundance",
}


class DataFileError(ValueError):
    """Raised for a malformed measurement data file."""


def _parse_header(columns: List[str]) -> Tuple[int, Dict[str, str], Dict[str, Dict[str, int]]]:
    id_idx = -1
    names: Dict[str, str] = {}
    comp_cols: Dict[str, Dict[str, int]] = {}
    logger = logging.getLogger("rcr")
    for i, header in enumerate(columns):
        header = header.strip()
        if ID_PATTERN.fullmatch(header):
            if id_idx != -1:
                raise DataFileError(f"Duplicate id columns: {id_idx} and {i}")
            logger.debug("ID column at index %d", i)
            id_idx = i
            continue
        match = COL_PATTERN.fullmatch(header)
        if not match:
            logger.debug("Ignoring column %s at index %d", header, i)
            continue
        label, comp_name = match.group(1).upper(), match.group(2)
        if label not in COLUMNS:
            logger.debug("Unrecognized column %s at index %d", header, i)
            continue
        key = comp_name.upper()
        cols = comp_cols.setdefault(key, {})
        names.setdefault(key, comp_name)
        if label in cols:
            raise DataFileError(
                f"Comparison {comp_name} defines duplicate {label} columns at columns {cols[label]} and {i}"
            )
        cols[label] = i
    if id_idx == -1:
        raise DataFileError("Data file must define an [ID] column")
    for key, cols in comp_cols.items():
        if FOLD_CHANGE not in cols:
            raise DataFileError(f"Comparison {names[key]} must define a {FOLD_CHANGE} column")
    return id_idx, names, comp_cols


def _to_float(raw: str, line: int, label: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise DataFileError(f"Line {line}: Invalid {_COLUMN_NAMES[label]}: {raw}") from None


def load_comparisons(path: str | Path, namespace: str) -> List[Comparison]:
    """Read every comparison defined in a measurement data file.

    The file is a CSV with a header row holding exactly one ``[ID]`` column
    and, per comparison ``name``, a required ``[M][name]`` fold-change column
    and optional ``[P][name]`` p-value, ``[A][name]`` abundance and
    ``[AS][name]`` analyst-selection (``1`` means selected) columns. Other
    columns are ignored. Identifiers are taken as values of ``namespace``.
    """
    logger = logging.getLogger("rcr")
    # header=None keeps duplicate headers visible instead of letting pandas rename them
    raw = pd.read_csv(path, dtype=str, keep_default_na=False, header=None)
    if raw.empty:
        raise DataFileError(f"Data file {path} is empty")
    id_idx, names, comp_cols = _parse_header(list(raw.iloc[0]))
    df = raw.iloc[1:]

    measurements: Dict[str, List[Measurement]] = {key: [] for key in comp_cols}
    for line, row in enumerate(df.itertuples(index=False, name=None), start=1):
        raw_id = row[id_idx].strip()
        if not raw_id:
            raise DataFileError(f"Line {line}: Cannot convert ID to term: {row[id_idx]!r}")
        term = Term(namespace, raw_id)
        for key, cols in comp_cols.items():
            fold_change = _to_float(row[cols[FOLD_CHANGE]], line, FOLD_CHANGE)
            p_value = _to_float(row[cols[P_VALUE]], line, P_VALUE) if P_VALUE in cols else None
            abundance = _to_float(row[cols[ABUNDANCE]], line, ABUNDANCE) if ABUNDANCE in cols else None
            selected = ANALYST_SELECTION in cols and row[cols[ANALYST_SELECTION]].strip() == "1"
            measurements[key].append(Measurement(term, fold_change, p_value, abundance, selected))

    comparisons = [Comparison(names[key], measurements[key]) for key in comp_cols]
    logger.info(
        "Loaded data file '%s': rows=%d comparisons=%s",
        str(path), len(df), [c.name for c in comparisons],
    )
    return comparisons


def select_comparison(comparisons: List[Comparison], name: str | None = None) -> Comparison:
    if not comparisons:
        raise ValueError("No comparisons were found in input file.")
    if name is None:
        if len(comparisons) > 1:
            raise ValueError(
                f"Multiple comparisons found, choose one of: {[c.name for c in comparisons]}"
            )
        return comparisons[0]
    for c in comparisons:
        if c.name.upper() == name.upper():
            return c
    raise ValueError(f"Unknown comparison: {name}")


def load_graph(nodes_path: str | Path, edges_path: str | Path) -> KnowledgeGraph:
    nodes_df = pd.read_csv(nodes_path, dtype=str)
    edges_df = pd.read_csv(edges_path, dtype=str)
    kg = KnowledgeGraph.from_frames(nodes_df, edges_df)
    logging.getLogger("rcr").info(
        "Loaded graph: nodes=%d edges=%d path=%s",
        kg.number_of_nodes(), kg.number_of_edges(), str(edges_path),
    )
    return kg


def load_equivalences(path: str | Path | None) -> TableEquivalencer:
    if path is None:
        return TableEquivalencer()
    eq = TableEquivalencer.from_frame(pd.read_csv(path, dtype=str))
    logging.getLogger("rcr").info("Loaded %d equivalences from %s", len(eq), str(path))
    return eq
