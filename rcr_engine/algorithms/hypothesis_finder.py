from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from models.direction import DirectionType
from models.hypothesis import Downstream, Hypothesis
from models.measurement import RNA_ABUNDANCE
from utils.graph_ops import (
    CAUSAL_RELATIONSHIPS,
    DECREASING_RELATIONSHIPS,
    INCREASING_RELATIONSHIPS,
    GraphNode,
)

# a source needs more than this many downstream expression nodes
MIN_DOWNSTREAMS = 3


def relationship_direction(relationship: str) -> DirectionType:
    if relationship in INCREASING_RELATIONSHIPS:
        return DirectionType.UP
    if relationship in DECREASING_RELATIONSHIPS:
        return DirectionType.DOWN
    return DirectionType.AMBIGUOUS


class HypothesisFinder:
    """Bounded depth-first search for upstream hypothesis nodes.

    For each source node, depths ``1 .. max_depth - 1`` are tried in order.
    The first depth that reaches more than three distinct RNA-abundance nodes
    produces a hypothesis labelled with ``depth + 1``, so directly connected
    hypotheses carry depth 2.
    """

    def __init__(
        self,
        relationships=CAUSAL_RELATIONSHIPS,
        terminal_function: str = RNA_ABUNDANCE,
    ):
        self.relationships = frozenset(relationships)
        self.terminal_function = terminal_function

    def find_all(
        self,
        graph,
        max_depth: int,
        node_filter: Optional[Callable[[GraphNode], bool]] = None,
    ) -> List[Hypothesis]:
        logger = logging.getLogger("rcr")
        hypotheses: List[Hypothesis] = []
        downstreams: Dict[GraphNode, DirectionType] = {}
        for source in graph.nodes(node_filter):
            for depth in range(1, max_depth):
                downstreams.clear()
                self._find(graph, source, 1, downstreams, depth)
                if len(downstreams) > MIN_DOWNSTREAMS:
                    # all hypotheses are assumed upregulated until scored
                    hypothesis = Hypothesis(source, DirectionType.UP, depth + 1)
                    for node, direction in downstreams.items():
                        hypothesis.downstreams.add(Downstream(node, direction))
                    hypotheses.append(hypothesis)
                    break
        logger.info("Found %d hypotheses (max_depth=%d)", len(hypotheses), max_depth)
        return hypotheses

    def _find(
        self,
        graph,
        node: GraphNode,
        current_depth: int,
        downstreams: Dict[GraphNode, DirectionType],
        max_depth: int,
    ) -> None:
        for edge in graph.adjacent_forward_edges(node, self.relationships):
            target = edge.target
            direction = relationship_direction(edge.relationship)
            if target.function == self.terminal_function:
                if target in downstreams:
                    if current_depth == 1:
                        direction = downstreams[target].evaluate(direction)
                    else:
                        direction = downstreams[target].compound(direction)
                downstreams[target] = direction
            elif current_depth < max_depth:
                self._find(graph, target, current_depth + 1, downstreams, max_depth)
