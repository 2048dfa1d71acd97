from __future__ import annotations

import json
import os
import platform
import sys
from pathlib import Path

import pytest
from jinja2 import DictLoader as Jinja2DictLoader
from jinja2 import Environment as Jinja2Environment

from benchmarks.fixtures.context_large import LARGE_CONTEXT
from benchmarks.fixtures.context_medium import MEDIUM_CONTEXT
from benchmarks.fixtures.context_small import SMALL_CONTEXT
from benchmarks.fixtures.templates import JINJA2_TEMPLATES, MANDIRA_TEMPLATES
from mandira import DictLoader as MandiraDictLoader
from mandira import Environment as MandiraEnvironment

try:
    import importlib.metadata as importlib_metadata
except ModuleNotFoundError:  # pragma: no cover
    import importlib_metadata  # type: ignore


BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"
BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)

def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "mandira": _version("mandira"),
        "jinja2": _version("jinja2"),
    }


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def mandira_env() -> MandiraEnvironment:
    return MandiraEnvironment(loader=MandiraDictLoader(MANDIRA_TEMPLATES))


@pytest.fixture(scope="session")
def jinja2_env() -> Jinja2Environment:
    return Jinja2Environment(loader=Jinja2DictLoader(JINJA2_TEMPLATES), autoescape=True)


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return SMALL_CONTEXT


@pytest.fixture(scope="session")
def medium_context() -> dict[str, object]:
    return MEDIUM_CONTEXT


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return LARGE_CONTEXT
