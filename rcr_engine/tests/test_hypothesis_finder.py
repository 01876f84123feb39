import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from algorithms.hypothesis_finder import HypothesisFinder, relationship_direction
from models.direction import DirectionType
from utils.graph_ops import (
    DECREASES,
    DIRECTLY_INCREASES,
    INCREASES,
    POSITIVE_CORRELATION,
    RATE_LIMITING_STEP_OF,
    KnowledgeGraph,
)


def _rna(kg, name):
    return kg.add_node(name, f'r(HGNC:{name})', terms=[('HGNC', name)])


def _star(n_targets, rel=INCREASES):
    kg = KnowledgeGraph()
    kg.add_node('src', 'kin(p(HGNC:AKT1))', function='kinaseActivity')
    for i in range(n_targets):
        _rna(kg, f'G{i}')
        kg.add_edge('src', rel, f'G{i}')
    return kg


def _by_label(hypotheses):
    return {h.node.label: h for h in hypotheses}


def test_relationship_direction():
    assert relationship_direction(INCREASES) is DirectionType.UP
    assert relationship_direction(DIRECTLY_INCREASES) is DirectionType.UP
    assert relationship_direction(DECREASES) is DirectionType.DOWN
    assert relationship_direction(RATE_LIMITING_STEP_OF) is DirectionType.AMBIGUOUS


def test_four_downstreams_make_a_hypothesis():
    hypotheses = HypothesisFinder().find_all(_star(4), max_depth=2)
    assert len(hypotheses) == 1
    h = hypotheses[0]
    assert h.node.label == 'kin(p(HGNC:AKT1))'
    assert h.direction is DirectionType.UP
    assert h.depth == 2
    assert {d.node.id for d in h.downstreams} == {'G0', 'G1', 'G2', 'G3'}
    assert all(d.direction is DirectionType.UP for d in h.downstreams)


def test_three_downstreams_are_not_enough():
    assert HypothesisFinder().find_all(_star(3), max_depth=2) == []


def test_max_depth_one_finds_nothing():
    assert HypothesisFinder().find_all(_star(6), max_depth=1) == []


def test_non_causal_relationships_ignored():
    assert HypothesisFinder().find_all(_star(5, POSITIVE_CORRELATION), max_depth=2) == []


def test_conflicting_direct_edges_are_ambiguous():
    kg = _star(4)
    kg.add_edge('src', DECREASES, 'G0')
    h = HypothesisFinder().find_all(kg, max_depth=2)[0]
    directions = {d.node.id: d.direction for d in h.downstreams}
    assert directions['G0'] is DirectionType.AMBIGUOUS
    assert directions['G1'] is DirectionType.UP


def test_indirect_search_and_compound_merge():
    kg = KnowledgeGraph()
    kg.add_node('src', 'a(CHEBI:drug)', function='abundance')
    kg.add_node('mid', 'p(HGNC:MYC)', function='proteinAbundance')
    kg.add_edge('src', INCREASES, 'mid')
    for i in range(4):
        _rna(kg, f'G{i}')
        kg.add_edge('mid', DECREASES, f'G{i}')
    # a second route to G0 whose direction wins when compounded
    kg.add_node('mid2', 'p(HGNC:JUN)', function='proteinAbundance')
    kg.add_edge('src', INCREASES, 'mid2')
    kg.add_edge('mid2', INCREASES, 'G0')

    found = _by_label(HypothesisFinder().find_all(kg, max_depth=3))
    assert found['a(CHEBI:drug)'].depth == 3
    assert found['p(HGNC:MYC)'].depth == 2
    assert 'p(HGNC:JUN)' not in found

    directions = {d.node.id: d.direction for d in found['a(CHEBI:drug)'].downstreams}
    assert directions['G0'] is DirectionType.UP
    assert directions['G1'] is DirectionType.DOWN


def test_shallowest_depth_wins():
    kg = _star(4)
    kg.add_node('mid', 'p(HGNC:MYC)', function='proteinAbundance')
    kg.add_edge('src', INCREASES, 'mid')
    _rna(kg, 'EXTRA')
    kg.add_edge('mid', INCREASES, 'EXTRA')
    h = _by_label(HypothesisFinder().find_all(kg, max_depth=3))['kin(p(HGNC:AKT1))']
    assert h.depth == 2
    assert len(h.downstreams) == 4


def test_node_filter():
    kg = _star(4)
    assert HypothesisFinder().find_all(kg, 2, node_filter=lambda n: n.function == 'rnaAbundance') == []
