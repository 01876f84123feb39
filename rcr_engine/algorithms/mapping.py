from __future__ import annotations

import logging
from typing import Collection, Dict, Hashable, Iterable, List, Optional, Protocol, Set

from models.hypothesis import Hypothesis, MappedMeasurement, MappingResult
from models.measurement import Measurement
from .collapsing import CollapsingStrategy

# a hypothesis contributes to the population only with at least this many resolved downstreams
MIN_POPULATION_DOWNSTREAMS = 4


class Equivalencer(Protocol):
    def resolve(self, namespace: str, value: str) -> Optional[str]:
        ...


class MappingReporter(Protocol):
    """Receives the bookkeeping events of :meth:`MappingService.map`."""

    def unmapped(self, measurement: Measurement) -> None:
        ...

    def not_in_population(self, node: Hashable, measurements: Set[Measurement]) -> None:
        ...

    def in_population(self, node: Hashable) -> None:
        ...

    def collapsed(
        self, node: Hashable, kept: Optional[Measurement], discarded: Set[Measurement]
    ) -> None:
        ...


class MappingReport:
    """Records every mapping event for the detailed run output."""

    def __init__(self):
        self.unmapped_measurements: List[Measurement] = []
        self.not_in_population_nodes: Dict[Hashable, Set[Measurement]] = {}
        self.population: List[Hashable] = []
        self.collapsed_away: Dict[Hashable, Set[Measurement]] = {}
        self.ambiguous_collapses: List[Hashable] = []

    def unmapped(self, measurement: Measurement) -> None:
        self.unmapped_measurements.append(measurement)

    def not_in_population(self, node: Hashable, measurements: Set[Measurement]) -> None:
        self.not_in_population_nodes[node] = set(measurements)

    def in_population(self, node: Hashable) -> None:
        self.population.append(node)

    def collapsed(
        self, node: Hashable, kept: Optional[Measurement], discarded: Set[Measurement]
    ) -> None:
        self.collapsed_away[node] = set(discarded)
        if kept is None:
            self.ambiguous_collapses.append(node)


class MappingService:
    """Maps measurements onto graph nodes and collapses them to one per node.

    Parameters
    ----------
    equivalencer:
        Resolves a measurement's ``(namespace, value)`` to a canonical id.
    collapsing_strategy:
        Picks the representative measurement of a node.
    """

    def __init__(self, equivalencer: Equivalencer, collapsing_strategy: CollapsingStrategy):
        if equivalencer is None or collapsing_strategy is None:
            raise ValueError("equivalencer and collapsing_strategy must not be None")
        self.equivalencer = equivalencer
        self.collapsing_strategy = collapsing_strategy

    def map(
        self,
        graph,
        hypotheses: Collection[Hypothesis],
        measurements: Collection[Measurement],
        reporter: Optional[MappingReporter] = None,
    ) -> MappingResult:
        logger = logging.getLogger("rcr")

        # node -> measurements, insertion ordered and de-duplicated
        index: Dict[Hashable, Dict[Measurement, None]] = {}
        total = len(measurements)
        for num, m in enumerate(measurements, start=1):
            if num % 100 == 0:
                logger.debug("Processing measurement %d/%d", num, total)
            try:
                nodes = self._resolve(graph, m)
            except Exception as e:
                logger.warning("%s failed to obtain graph nodes; ignoring (%s)", m.term, e)
                continue
            if not nodes:
                logger.debug("%s no graph matches found", m.term)
                if reporter is not None:
                    reporter.unmapped(m)
                continue
            if len(nodes) > 1:
                logger.info("Found multiple graph nodes for %s; using %s", m.term, nodes[0])
            index.setdefault(nodes[0], {})[m] = None

        population = self.population_nodes(index.keys(), hypotheses)

        mapped: List[MappedMeasurement] = []
        for node, ms in index.items():
            ms = set(ms)
            if node not in population:
                logger.debug("%d measurements mapping to %s are not in the population", len(ms), node)
                if reporter is not None:
                    reporter.not_in_population(node, ms)
                continue
            if reporter is not None:
                reporter.in_population(node)

            kept = self.collapsing_strategy.collapse(list(index[node]))
            if reporter is not None:
                reporter.collapsed(node, kept, ms - {kept})
            if kept is not None:
                mapped.append(MappedMeasurement(node, kept))

        logger.info(
            "Mapped %d of %d measurements; population size %d",
            len(mapped), total, len(population),
        )
        return MappingResult(mapped, len(population))

    def _resolve(self, graph, m: Measurement) -> list:
        term = m.term
        canonical_id = None
        try:
            canonical_id = self.equivalencer.resolve(term.namespace, term.value)
        except Exception as e:
            logging.getLogger("rcr").warning(
                "%s failed to equivalence; will attempt lookup by namespace/value (%s)", term, e
            )
        if canonical_id is not None:
            return graph.lookup_by_canonical_id(term.function, canonical_id)
        return graph.lookup_by_namespace_value(term.namespace, term.value)

    @staticmethod
    def population_nodes(
        resolved_nodes: Iterable[Hashable], hypotheses: Iterable[Hypothesis]
    ) -> Set[Hashable]:
        resolved = set(resolved_nodes)
        population: Set[Hashable] = set()
        for hypothesis in hypotheses:
            possibles = hypothesis.downstream_nodes() & resolved
            if len(possibles) >= MIN_POPULATION_DOWNSTREAMS:
                population |= possibles
        return population
