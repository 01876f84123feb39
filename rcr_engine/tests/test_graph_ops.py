import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import pandas as pd
import networkx as nx
import pytest

from utils.graph_ops import (
    DECREASES,
    INCREASES,
    KnowledgeGraph,
    TableEquivalencer,
    parse_terms,
)


def _frames():
    nodes = pd.DataFrame({
        'id': ['1', '2', '3'],
        'label': ['kin(p(HGNC:AKT1))', 'r(HGNC:FOS)', None],
        'function': ['kinaseActivity', 'rnaAbundance', None],
        'canonical_id': [None, 'EG:2353', None],
        'terms': [None, 'HGNC:FOS|EG:2353', 'HGNC:JUN'],
    })
    edges = pd.DataFrame({
        'source': ['1', '1'],
        'relationship': [INCREASES, DECREASES],
        'target': ['2', '3'],
    })
    return nodes, edges


def test_from_frames():
    kg = KnowledgeGraph.from_frames(*_frames())
    assert kg.number_of_nodes() == 3
    assert kg.number_of_edges() == 2
    third = kg.node('3')
    assert third.label == '3'
    assert third.function == 'rnaAbundance'
    assert kg.lookup_by_canonical_id('rnaAbundance', 'EG:2353') == [kg.node('2')]
    assert kg.lookup_by_namespace_value('EG', '2353') == [kg.node('2')]
    assert kg.lookup_by_namespace_value('HGNC', 'JUN') == [third]
    assert kg.lookup_by_namespace_value('HGNC', 'NOPE') == []


def test_from_frames_missing_columns():
    nodes, edges = _frames()
    with pytest.raises(ValueError):
        KnowledgeGraph.from_frames(nodes.drop(columns=['id']), edges)
    with pytest.raises(ValueError):
        KnowledgeGraph.from_frames(nodes, edges.drop(columns=['relationship']))


def test_adjacent_forward_edges_filter():
    kg = KnowledgeGraph.from_frames(*_frames())
    src = kg.node('1')
    assert {e.relationship for e in kg.adjacent_forward_edges(src)} == {INCREASES, DECREASES}
    only = kg.adjacent_forward_edges(src, {INCREASES})
    assert [(e.source.id, e.target.id) for e in only] == [('1', '2')]
    assert kg.adjacent_forward_edges(kg.node('2')) == []


def test_parallel_edges_are_kept():
    kg = KnowledgeGraph.from_frames(*_frames())
    kg.add_edge('1', DECREASES, '2')
    assert len(kg.adjacent_forward_edges(kg.node('1'))) == 3


def test_invalid_structure():
    kg = KnowledgeGraph()
    kg.add_node('a')
    with pytest.raises(ValueError):
        kg.add_node('a')
    with pytest.raises(ValueError):
        kg.add_edge('a', INCREASES, 'b')


def test_node_filter_and_networkx_copy():
    kg = KnowledgeGraph.from_frames(*_frames())
    rna = kg.nodes(lambda n: n.function == 'rnaAbundance')
    assert {n.id for n in rna} == {'2', '3'}
    g = kg.to_networkx()
    assert isinstance(g, nx.MultiDiGraph)
    g.remove_node('1')
    assert kg.number_of_nodes() == 3


def test_parse_terms():
    assert parse_terms('HGNC:FOS|EG:2353') == [('HGNC', 'FOS'), ('EG', '2353')]
    assert parse_terms(None) == []
    assert parse_terms('HGNC:A| ') == [('HGNC', 'A')]
    with pytest.raises(ValueError):
        parse_terms('FOS')


def test_table_equivalencer():
    df = pd.DataFrame({'namespace': ['HGNC'], 'value': ['FOS'], 'canonical_id': ['EG:2353']})
    eq = TableEquivalencer.from_frame(df)
    assert len(eq) == 1
    assert eq.resolve('HGNC', 'FOS') == 'EG:2353'
    assert eq.resolve('HGNC', 'JUN') is None
    with pytest.raises(ValueError):
        TableEquivalencer.from_frame(df.drop(columns=['value']))
