import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import json
from pathlib import Path

import pandas as pd
import pytest
import yaml
from scipy.special import betainc

from experiments import run_rcr

EXAMPLE_CONFIG = Path(__file__).resolve().parents[1] / 'experiments' / 'config.yaml'
EXAMPLE_DATA = Path(__file__).resolve().parents[1] / 'data' / 'example'


@pytest.mark.timeout(30)
def test_run_example(tmp_path):
    scores = run_rcr.run(str(EXAMPLE_CONFIG), output_dir=tmp_path)
    assert [s.node.label for s in scores] == ['kin(p(HGNC:AKT1))', 'tscript(p(HGNC:TP53))']

    result = pd.read_csv(tmp_path / 'example_result.csv')
    assert list(result['Direction']) == [1, 1]
    assert list(result['Correct']) == [4, 4]
    assert list(result['Contra']) == [1, 1]
    assert list(result['Possible']) == [5, 5]
    assert result['Concordance'].tolist() == pytest.approx([float(betainc(4, 2, 0.5))] * 2)
    assert result['Richness'].between(0, 1).all()

    mapping = pd.read_csv(tmp_path / 'example_mapping.csv', keep_default_na=False)
    assert len(mapping) == 10
    rows = list(zip(mapping['Id'], mapping['STATUS']))
    assert rows[7] == ('CCND1', 'State Change')
    assert rows[8] == ('CCND1', 'Collapsed to: r(HGNC:CCND1)')
    assert rows[9] == ('XIST', 'Not mapped to KAM')

    detail = pd.read_csv(tmp_path / 'example_detail.csv')
    assert len(detail) == 10

    meta = json.loads((tmp_path / 'example_metadata.json').read_text())
    assert meta['parameters']['comparison'] == 'treated'
    assert meta['parameters']['population_size'] == 8
    assert meta['inputs']['data_file']['sha256']
    assert (tmp_path / 'example.log').exists()


def _config(tmp_path, **overrides):
    cfg = {
        'run_name': 'tmp',
        'graph': {
            'nodes': str(EXAMPLE_DATA / 'nodes.csv'),
            'edges': str(EXAMPLE_DATA / 'edges.csv'),
        },
        'equivalences': str(EXAMPLE_DATA / 'equivalences.csv'),
        'data_file': str(EXAMPLE_DATA / 'data.csv'),
        'namespace': 'HGNC',
        'comparison': 'late',
        'cutoffs': {'fold_change': 1.3, 'p_value': 0.05},
    }
    cfg.update(overrides)
    path = tmp_path / 'cfg.yaml'
    with open(path, 'w') as f:
        yaml.safe_dump(cfg, f)
    return path


@pytest.mark.timeout(30)
def test_run_without_detail_and_population_override(tmp_path):
    path = _config(tmp_path, population_size=1000, parallel_jobs=2)
    scores = run_rcr.run(str(path), output_dir=tmp_path)
    assert len(scores) == 2
    assert (tmp_path / 'tmp_result.csv').exists()
    assert not (tmp_path / 'tmp_mapping.csv').exists()
    assert not (tmp_path / 'tmp_detail.csv').exists()
    meta = json.loads((tmp_path / 'tmp_metadata.json').read_text())
    assert meta['parameters']['population_size'] == 1000


def test_run_requires_comparison_when_ambiguous(tmp_path):
    path = _config(tmp_path, comparison=None)
    with pytest.raises(ValueError, match='Multiple comparisons'):
        run_rcr.run(str(path), output_dir=tmp_path)


def test_run_requires_namespace(tmp_path):
    path = _config(tmp_path, namespace=None)
    with pytest.raises(ValueError, match='namespace'):
        run_rcr.run(str(path), output_dir=tmp_path)


def test_run_rejects_negative_population(tmp_path):
    path = _config(tmp_path, population_size=-5)
    with pytest.raises(ValueError):
        run_rcr.run(str(path), output_dir=tmp_path)
