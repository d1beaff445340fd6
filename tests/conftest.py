"""Pytest fixtures for testsieve tests.

This module provides reusable fixtures: a small category hierarchy, a
description tree mirroring a typical JUnit-style layout, and a plan file
describing the same tree on disk.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# Make the src layout importable without an installed package
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from testsieve.config import reset_config  # noqa: E402
from testsieve.config.env import get_env_var_docs  # noqa: E402
from testsieve.core import logging as sieve_logging  # noqa: E402
from testsieve.core.categories import CategoryHierarchy  # noqa: E402
from testsieve.core.description import CategoryExtractor, Description  # noqa: E402

SAMPLE_PLAN = """\
categories:
  Slow: []
  Fast: []
  Flaky: []
  Integration: []
  Database: [Slow, Integration]

units:
  com.acme.RepoTest: [Database]
  com.acme.MathTest: [Fast]

tree:
  name: all
  children:
    - name: RepoTest
      owner: com.acme.RepoTest
      children:
        - {name: testSave, owner: com.acme.RepoTest}
        - {name: testRetry, owner: com.acme.RepoTest, categories: [Flaky]}
    - name: MathTest
      owner: com.acme.MathTest
      children:
        - {name: testAdd, owner: com.acme.MathTest}
        - {name: testHuge, owner: com.acme.MathTest, categories: [Slow]}
    - name: SmokeTest
      children:
        - testPing
"""


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test from an empty directory with no testsieve env vars.

    Keeps config discovery and environment overrides from leaking
    between tests or in from the developer's machine.
    """
    for name in get_env_var_docs():
        monkeypatch.delenv(name, raising=False)
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    reset_config()
    yield
    reset_config()

    # setup_logging() stops propagation, which would hide records from caplog
    logger = logging.getLogger(sieve_logging.LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def hierarchy() -> CategoryHierarchy:
    """Return the hierarchy used by the sample plan.

    ``Database`` is both ``Slow`` and ``Integration``.
    """
    return CategoryHierarchy.from_mapping(
        {
            "Slow": [],
            "Fast": [],
            "Flaky": [],
            "Integration": [],
            "Database": ["Slow", "Integration"],
        }
    )


@pytest.fixture
def extractor(hierarchy: CategoryHierarchy) -> CategoryExtractor:
    """Return an extractor with the sample unit categories."""
    return CategoryExtractor(
        {
            "com.acme.RepoTest": [hierarchy.get("Database")],
            "com.acme.MathTest": [hierarchy.get("Fast")],
        }
    )


@pytest.fixture
def sample_tree(hierarchy: CategoryHierarchy) -> Description:
    """Return the description tree of the sample plan, built in memory."""
    repo = "com.acme.RepoTest"
    math = "com.acme.MathTest"
    return Description(
        "all",
        children=[
            Description(
                "RepoTest",
                owner=repo,
                children=[
                    Description("testSave", owner=repo),
                    Description("testRetry", owner=repo, categories=[hierarchy.get("Flaky")]),
                ],
            ),
            Description(
                "MathTest",
                owner=math,
                children=[
                    Description("testAdd", owner=math),
                    Description("testHuge", owner=math, categories=[hierarchy.get("Slow")]),
                ],
            ),
            Description("SmokeTest", children=[Description("testPing")]),
        ],
    )


@pytest.fixture
def plan_file(tmp_path: Path) -> Path:
    """Write the sample plan as YAML and return its path."""
    path = tmp_path / "plan.yml"
    path.write_text(SAMPLE_PLAN)
    return path
