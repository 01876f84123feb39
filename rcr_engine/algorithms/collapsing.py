"""Reduce several measurements mapped to one graph node to a single one.

The cascade, stopping as soon as a unique measurement remains:

1. a single measurement is returned as is;
2. when respecting analyst selection, the selected measurements are kept
   (a single selected one wins, none selected keeps everything);
3. the lowest fold change (signed) is kept;
4. measurements are split by fold-change sign. An even split returns a
   synthetic measurement with fold change 0, p-value 1 and abundance 0, which
   keeps the node in the population while failing any rational cutoff.
   Otherwise the larger side is kept;
5. the highest absolute fold change is kept;
6. the highest abundance is kept;
7. the lowest term short form wins; a tie there yields ``None``.

Stage 3 carries the name "lowest p-value" but compares fold changes. With
the default, every measurement left
after stage 3 shares one fold change, so the even split of stage 4 is only
reachable with ``compare_p_values=True``, which ranks stage 3 by p-value
(missing p-values rank last).
"""

from __future__ import annotations

import logging
from typing import Callable, Collection, List, Optional

from models.measurement import Measurement


def _lowest(measurements: Collection[Measurement], key: Callable[[Measurement], float]) -> List[Measurement]:
    lowest: List[Measurement] = []
    best = None
    for m in measurements:
        cur = key(m)
        if best is None:
            best = cur
            lowest.append(m)
            continue
        if cur < best:
            lowest.clear()
        if cur <= best:
            best = cur
            lowest.append(m)
    return lowest


def _highest(measurements: Collection[Measurement], key: Callable[[Measurement], float]) -> List[Measurement]:
    highest: List[Measurement] = []
    best = None
    for m in measurements:
        cur = key(m)
        if best is None:
            best = cur
            highest.append(m)
            continue
        if cur > best:
            highest.clear()
        if cur >= best:
            best = cur
            highest.append(m)
    return highest


def _fold_change(m: Measurement) -> float:
    return m.fold_change


def _p_value(m: Measurement) -> float:
    return float("inf") if m.p_value is None else m.p_value


def _abundance(m: Measurement) -> float:
    # missing abundance never beats a recorded one
    return float("-inf") if m.abundance is None else m.abundance


class CollapsingStrategy:
    def __init__(self, respect_analyst_selection: bool = False, compare_p_values: bool = False):
        self.respect_analyst_selection = respect_analyst_selection
        self.compare_p_values = compare_p_values

    def collapse(self, measurements: Collection[Measurement]) -> Optional[Measurement]:
        if not measurements:
            return None
        measurements = list(measurements)
        if len(measurements) == 1:
            return measurements[0]

        if self.respect_analyst_selection:
            selected = [m for m in measurements if m.analyst_selection]
            if len(selected) == 1:
                return selected[0]
            if len(selected) > 1:
                measurements = selected

        lowest = _lowest(measurements, _p_value if self.compare_p_values else _fold_change)
        if len(lowest) == 1:
            return lowest[0]
        measurements = lowest

        positive = [m for m in measurements if m.fold_change > 0]
        negative = [m for m in measurements if m.fold_change < 0]
        if positive and negative:
            if len(positive) == len(negative):
                return Measurement(positive[0].term, 0.0, 1.0, 0.0)
            measurements = positive if len(positive) > len(negative) else negative

        highest = _highest(measurements, lambda m: abs(m.fold_change))
        if len(highest) == 1:
            return highest[0]
        measurements = highest

        highest = _highest(measurements, _abundance)
        if len(highest) == 1:
            return highest[0]
        measurements = highest

        return self._lowest_term(measurements)

    def _lowest_term(self, measurements: Collection[Measurement]) -> Optional[Measurement]:
        lowest = _lowest(measurements, lambda m: m.term.short_form())
        if len(lowest) != 1:
            logging.getLogger("rcr").warning(
                "Non-unique measurement id found: %s", lowest[0].term.short_form()
            )
            return None
        return lowest[0]
