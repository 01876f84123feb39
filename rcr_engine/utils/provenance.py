import json
import hashlib
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Dict, Any

import joblib
import networkx as nx
import numpy as np
import pandas as pd
import scipy
import yaml


def calculate_file_hash(filepath: Path) -> str:
    """Calculate SHA256 hash of a file."""
    sha256_hash = hashlib.sha256()
    with open(filepath, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def get_library_versions() -> Dict[str, str]:
    """Get versions of key libraries."""
    libs = {
        "python": sys.version,
        "platform": platform.platform(),
        "pandas": pd.__version__,
        "numpy": np.__version__,
        "networkx": nx.__version__,
        "scipy": scipy.__version__,
        "joblib": joblib.__version__,
        "pyyaml": getattr(yaml, "__version__", "unknown"),
    }
    try:
        libs["rcr-engine"] = version("rcr-engine")
    except PackageNotFoundError:
        libs["rcr-engine"] = "unknown"
    return libs


def save_run_metadata(
    output_path: Path,
    run_name: str,
    input_files: Dict[str, Path | None],
    parameters: Dict[str, Any],
    counts: Dict[str, int] | None = None,
):
    """Save input hashes, parameters and library versions for a single run."""
    metadata = {
        "run_name": run_name,
        "inputs": {
            name: {
                "path": str(path),
                "sha256": calculate_file_hash(path) if path.exists() else None,
            }
            for name, path in input_files.items()
            if path is not None
        },
        "parameters": parameters,
        "counts": counts or {},
        "environment": {
            "libraries": get_library_versions(),
        },
    }

    with open(output_path, "w") as f:
        json.dump(metadata, f, indent=2, default=str)
