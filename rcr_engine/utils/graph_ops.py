from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx
import pandas as pd

from models.measurement import RNA_ABUNDANCE

INCREASES = "increases"
DIRECTLY_INCREASES = "directlyIncreases"
DECREASES = "decreases"
DIRECTLY_DECREASES = "directlyDecreases"
RATE_LIMITING_STEP_OF = "rateLimitingStepOf"
POSITIVE_CORRELATION = "positiveCorrelation"
NEGATIVE_CORRELATION = "negativeCorrelation"

INCREASING_RELATIONSHIPS = frozenset({INCREASES, DIRECTLY_INCREASES})
DECREASING_RELATIONSHIPS = frozenset({DECREASES, DIRECTLY_DECREASES})

# relationships followed when searching for hypotheses
CAUSAL_RELATIONSHIPS = frozenset(
    INCREASING_RELATIONSHIPS | DECREASING_RELATIONSHIPS | {RATE_LIMITING_STEP_OF}
)


@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    function: str

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class GraphEdge:
    source: GraphNode
    relationship: str
    target: GraphNode


class KnowledgeGraph:
    """Causal network backed by a ``networkx.MultiDiGraph``.

    Nodes carry a label, a function (semantic type), an optional canonical
    identifier and the ``(namespace, value)`` pairs that name them. Edges carry
    a ``relationship`` attribute.

    Examples
    --------
    >>> kg = KnowledgeGraph()
    >>> _ = kg.add_node("1", "kin(p(HGNC:AKT1))", function="kinaseActivity")
    >>> _ = kg.add_node("2", "r(HGNC:FOS)", terms=[("HGNC", "FOS")])
    >>> kg.add_edge("1", INCREASES, "2")
    >>> [e.target.label for e in kg.adjacent_forward_edges(kg.node("1"))]
    ['r(HGNC:FOS)']
    """

    def __init__(self):
        self._g = nx.MultiDiGraph()
        self._by_canonical_id: Dict[Tuple[str, str], List[GraphNode]] = {}
        self._by_term: Dict[Tuple[str, str], List[GraphNode]] = {}

    def add_node(
        self,
        node_id: str,
        label: str | None = None,
        function: str = RNA_ABUNDANCE,
        canonical_id: str | None = None,
        terms: Iterable[Tuple[str, str]] = (),
    ) -> GraphNode:
        node_id = str(node_id)
        if node_id in self._g:
            raise ValueError(f"Duplicate node id: {node_id}")
        node = GraphNode(node_id, label if label is not None else node_id, function)
        self._g.add_node(node_id, obj=node, canonical_id=canonical_id)
        if canonical_id is not None:
            self._by_canonical_id.setdefault((function, canonical_id), []).append(node)
        for ns, value in terms:
            self._by_term.setdefault((ns, value), []).append(node)
        return node

    def add_edge(self, source_id: str, relationship: str, target_id: str) -> None:
        source_id, target_id = str(source_id), str(target_id)
        if source_id not in self._g or target_id not in self._g:
            raise ValueError(f"Both {source_id} and {target_id} must be nodes in the graph")
        self._g.add_edge(source_id, target_id, relationship=relationship)

    def node(self, node_id: str) -> GraphNode:
        return self._g.nodes[str(node_id)]["obj"]

    def nodes(self, node_filter: Optional[Callable[[GraphNode], bool]] = None) -> List[GraphNode]:
        objs = [data["obj"] for _, data in self._g.nodes(data=True)]
        if node_filter is None:
            return objs
        return [n for n in objs if node_filter(n)]

    def adjacent_forward_edges(
        self, node: GraphNode, relationships: Optional[Set[str]] = None
    ) -> List[GraphEdge]:
        edges = []
        for _, target_id, rel in self._g.out_edges(node.id, data="relationship"):
            if relationships is not None and rel not in relationships:
                continue
            edges.append(GraphEdge(node, rel, self._g.nodes[target_id]["obj"]))
        return edges

    def lookup_by_canonical_id(self, function: str, canonical_id: str) -> List[GraphNode]:
        return list(self._by_canonical_id.get((function, canonical_id), []))

    def lookup_by_namespace_value(self, namespace: str, value: str) -> List[GraphNode]:
        return list(self._by_term.get((namespace, value), []))

    def number_of_nodes(self) -> int:
        return self._g.number_of_nodes()

    def number_of_edges(self) -> int:
        return self._g.number_of_edges()

    def to_networkx(self) -> nx.MultiDiGraph:
        return self._g.copy()

    @classmethod
    def from_frames(cls, nodes_df: pd.DataFrame, edges_df: pd.DataFrame) -> "KnowledgeGraph":
        """Build a graph from node and edge tables.

        ``nodes_df`` needs an ``id`` column and may have ``label``,
        ``function``, ``canonical_id`` and ``terms`` (``NS:value`` pairs
        separated by ``|``). ``edges_df`` needs ``source``, ``relationship``
        and ``target``.
        """
        missing = {"id"} - set(nodes_df.columns)
        if missing:
            raise ValueError(f"Node table missing columns: {sorted(missing)}")
        missing = {"source", "relationship", "target"} - set(edges_df.columns)
        if missing:
            raise ValueError(f"Edge table missing columns: {sorted(missing)}")

        kg = cls()
        for row in nodes_df.to_dict("records"):
            kg.add_node(
                str(row["id"]),
                label=_optional_str(row.get("label")),
                function=_optional_str(row.get("function")) or RNA_ABUNDANCE,
                canonical_id=_optional_str(row.get("canonical_id")),
                terms=parse_terms(_optional_str(row.get("terms"))),
            )
        for row in edges_df.to_dict("records"):
            kg.add_edge(str(row["source"]), str(row["relationship"]), str(row["target"]))
        return kg


class TableEquivalencer:
    """Resolves ``(namespace, value)`` pairs to canonical identifiers from a lookup table."""

    def __init__(self, table: Dict[Tuple[str, str], str] | None = None):
        self._table = dict(table or {})

    def resolve(self, namespace: str, value: str) -> str | None:
        return self._table.get((namespace, value))

    def __len__(self) -> int:
        return len(self._table)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "TableEquivalencer":
        missing = {"namespace", "value", "canonical_id"} - set(df.columns)
        if missing:
            raise ValueError(f"Equivalence table missing columns: {sorted(missing)}")
        table = {
            (str(ns), str(value)): str(cid)
            for ns, value, cid in zip(df["namespace"], df["value"], df["canonical_id"])
        }
        return cls(table)


def parse_terms(raw: str | None) -> List[Tuple[str, str]]:
    """Split ``"HGNC:FOS|EG:2353"`` into ``[("HGNC", "FOS"), ("EG", "2353")]``."""
    if not raw:
        return []
    terms = []
    for part in raw.split("|"):
        part = part.strip()
        if not part:
            continue
        ns, sep, value = part.partition(":")
        if not sep:
            raise ValueError(f"Term '{part}' must be of the form NS:value")
        terms.append((ns, value))
    return terms


def _optional_str(value) -> str | None:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    return str(value)
