import argparse
import yaml
from pathlib import Path
import logging
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from algorithms.collapsing import CollapsingStrategy
from algorithms.hypothesis_finder import HypothesisFinder
from algorithms.mapping import MappingReport, MappingService
from algorithms.scorer import Scorer, StateChangeReport
from models.cutoffs import Cutoffs
from utils.loaders import load_comparisons, load_equivalences, load_graph, select_comparison
from utils.logging_utils import setup_logging
from utils.provenance import save_run_metadata
from utils.reports import (
    detail_frame,
    mapping_frame,
    measurement_status,
    results_frame,
    write_frame,
)


RESULTS_DIR = Path(__file__).resolve().parents[1] / "results"
RESULT_FILE_SUFFIX = "_result.csv"
MAPPING_FILE_SUFFIX = "_mapping.csv"
DETAIL_FILE_SUFFIX = "_detail.csv"
DEFAULT_MAX_DEPTH = 2


def _resolve(base: Path, value) -> Path | None:
    if value is None:
        return None
    p = Path(value)
    return p if p.is_absolute() else base / p


def _required(cfg: dict, key: str):
    if cfg.get(key) is None:
        raise ValueError(f"Config is missing required key '{key}'")
    return cfg[key]


def run(
    config_path: str,
    output_dir: str | Path | None = None,
    parallel_jobs: int | None = None,
    log_level: int = logging.INFO,
    to_stdout: bool = False,
):
    """Score hypotheses for one comparison as described by a YAML config.

    Returns the scored hypotheses in graph node order.
    """
    config_path = Path(config_path)
    with open(config_path) as f:
        cfg = yaml.safe_load(f) or {}
    base = config_path.resolve().parent

    out_dir = Path(output_dir) if output_dir is not None else RESULTS_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    run_name = str(cfg.get("run_name", "rcr"))
    logger = setup_logging(out_dir / f"{run_name}.log", level=log_level, to_stdout=to_stdout)

    graph_cfg = _required(cfg, "graph")
    nodes_path = _resolve(base, _required(graph_cfg, "nodes"))
    edges_path = _resolve(base, _required(graph_cfg, "edges"))
    data_path = _resolve(base, _required(cfg, "data_file"))
    equivalences_path = _resolve(base, cfg.get("equivalences"))
    namespace = str(_required(cfg, "namespace"))

    cutoffs = Cutoffs.from_config(cfg.get("cutoffs"))
    max_depth = int(cfg.get("max_depth", DEFAULT_MAX_DEPTH))
    detail = bool(cfg.get("detail", False))
    parallel_jobs = int(parallel_jobs if parallel_jobs is not None else cfg.get("parallel_jobs", 1))
    population_override = cfg.get("population_size")
    if population_override is not None and int(population_override) < 0:
        raise ValueError("population_size must be a positive integer")

    comparison = select_comparison(load_comparisons(data_path, namespace), cfg.get("comparison"))
    measurements = comparison.measurements
    logger.info("Comparison %s contains %d measurements", comparison.name, len(measurements))

    graph = load_graph(nodes_path, edges_path)
    equivalencer = load_equivalences(equivalences_path)

    hypotheses = HypothesisFinder().find_all(graph, max_depth)

    mapping_service = MappingService(
        equivalencer,
        CollapsingStrategy(
            respect_analyst_selection=bool(cfg.get("respect_analyst_selection", False)),
            compare_p_values=bool(cfg.get("collapse_by_p_value", False)),
        ),
    )
    mapping_report = MappingReport()
    mapping_result = mapping_service.map(graph, hypotheses, measurements, reporter=mapping_report)

    population_size = (
        int(population_override) if population_override is not None else mapping_result.population_size
    )
    logger.info("Using population size: %d", population_size)

    scoring_report = StateChangeReport()
    scores = Scorer(n_jobs=parallel_jobs).score(
        hypotheses,
        mapping_result.mapped_measurements,
        cutoffs,
        population_size,
        reporter=scoring_report,
    )

    result_path = write_frame(results_frame(scores), out_dir / f"{run_name}{RESULT_FILE_SUFFIX}")
    logger.info("Complete: scores have been saved to %s", str(result_path))

    if detail:
        status = measurement_status(mapping_report, scoring_report)
        write_frame(
            mapping_frame(measurements, mapping_result.mapped_measurements, status),
            out_dir / f"{run_name}{MAPPING_FILE_SUFFIX}",
        )
        write_frame(
            detail_frame(hypotheses, scores, mapping_report.population, scoring_report.state_changes),
            out_dir / f"{run_name}{DETAIL_FILE_SUFFIX}",
        )

    save_run_metadata(
        out_dir / f"{run_name}_metadata.json",
        run_name,
        {
            "nodes": nodes_path,
            "edges": edges_path,
            "data_file": data_path,
            "equivalences": equivalences_path,
        },
        {
            "comparison": comparison.name,
            "namespace": namespace,
            "cutoffs": repr(cutoffs),
            "max_depth": max_depth,
            "population_size": population_size,
            "parallel_jobs": parallel_jobs,
        },
        counts={
            "measurements": len(measurements),
            "hypotheses": len(hypotheses),
            "mapped_measurements": len(mapping_result.mapped_measurements),
            "state_changes": len(scoring_report.state_changes),
        },
    )
    return scores


def main():
    parser = argparse.ArgumentParser(description="Reverse causal reasoning over a causal network")
    parser.add_argument(
        "--config", default=str(Path(__file__).with_name("config.yaml"))
    )
    parser.add_argument("--out-dir", default=None)
    parser.add_argument("--parallel-jobs", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    run(
        args.config,
        args.out_dir,
        parallel_jobs=args.parallel_jobs,
        log_level=logging.DEBUG if args.verbose else logging.INFO,
        to_stdout=True,
    )


if __name__ == "__main__":
    main()
