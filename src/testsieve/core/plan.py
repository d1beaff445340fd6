"""Test plan loading.

A test plan file describes everything the category filter consumes:
the category hierarchy, the categories declared on each owning unit,
and the description tree itself. Plans can be written in YAML, TOML or
JSON::

    categories:
      Slow: []
      Database: [Slow]
    units:
      com.acme.RepoTest: [Database]
    tree:
      name: all
      children:
        - name: RepoTest
          owner: com.acme.RepoTest
          children:
            - {name: testSave, owner: com.acme.RepoTest, categories: [Fast]}
            - testLoad

A node written as a plain string is a leaf without categories or owner.
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from testsieve.core.categories import CategoryHierarchy, CategoryId
from testsieve.core.description import CategoryExtractor, Description
from testsieve.core.exceptions import CategoryError, PlanError

logger = logging.getLogger(__name__)

PLAN_SUFFIXES = (".yml", ".yaml", ".toml", ".json")


@dataclass(frozen=True)
class TestPlan:
    """A loaded test plan.

    Attributes:
        hierarchy: Declared category markers and their parents.
        extractor: Owning-unit categories, ready for the filter.
        tree: Root of the description tree.
        source: Path the plan was loaded from, if any.
    """

    __test__ = False  # not a pytest test class

    hierarchy: CategoryHierarchy
    extractor: CategoryExtractor
    tree: Description
    source: str | None = None


def _read_document(path: Path) -> dict[str, Any]:
    """Read a YAML, TOML or JSON plan document."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PlanError(f"Could not read plan file: {e}", plan_path=str(path)) from e

    suffix = path.suffix.lower()
    try:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(content)
        elif suffix == ".toml":
            data = tomllib.loads(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise PlanError(f"Invalid plan file: {e}", plan_path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PlanError(
            f"Plan file must contain a mapping, got: {type(data).__name__}",
            plan_path=str(path),
        )
    return data


def _name_list(value: Any, location: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PlanError(f"Expected a list of category names at {location}")
    return value


def _resolve(hierarchy: CategoryHierarchy, names: list[str], location: str) -> frozenset[CategoryId]:
    try:
        return hierarchy.resolve(names)
    except CategoryError as e:
        raise PlanError(f"{e.message} at {location}", context={"category": e.category}) from e


def _build_tree(raw: Any, hierarchy: CategoryHierarchy) -> Description:
    """Build the description tree from its raw form without recursion."""
    # First pass: flatten in pre-order, remembering each node's parent
    order: list[tuple[Any, int | None, str]] = []
    stack: list[tuple[Any, int | None, str]] = [(raw, None, "tree")]
    while stack:
        item, parent, location = stack.pop()
        if isinstance(item, str):
            item = {"name": item}
        if not isinstance(item, dict):
            raise PlanError(f"Node at {location} must be a mapping or a name")
        children = item.get("children") or []
        if not isinstance(children, list):
            raise PlanError(f"'children' at {location} must be a list")
        index = len(order)
        order.append((item, parent, location))
        for position in range(len(children) - 1, -1, -1):
            stack.append((children[position], index, f"{location}.children[{position}]"))

    # Second pass: children are built before their parents
    built: list[list[Description]] = [[] for _ in order]
    nodes: dict[int, Description] = {}
    for index in range(len(order) - 1, -1, -1):
        item, parent, location = order[index]
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise PlanError(f"Node at {location} is missing a name")
        owner = item.get("owner")
        if owner is not None and not isinstance(owner, str):
            raise PlanError(f"'owner' at {location} must be a string")

        node = Description(
            name=name,
            categories=_resolve(
                hierarchy,
                _name_list(item.get("categories"), f"{location}.categories"),
                location,
            ),
            owner=owner,
            children=tuple(reversed(built[index])),
        )
        nodes[index] = node
        if parent is not None:
            built[parent].append(node)

    # The root is always the first node in pre-order
    return nodes[0]


def parse_plan(data: dict[str, Any], source: str | None = None) -> TestPlan:
    """Build a TestPlan from an already parsed document.

    Args:
        data: Mapping with ``categories``, ``units`` and ``tree`` keys.
        source: Optional origin of the document, for error messages.

    Raises:
        PlanError: If the document is malformed or references unknown
            categories.
    """
    try:
        declarations = data.get("categories") or {}
        if not isinstance(declarations, dict):
            raise PlanError("'categories' must map category names to parent lists")
        bad_names = sorted(repr(name) for name in declarations if not isinstance(name, str))
        if bad_names:
            raise PlanError("Category names must be strings", context={"names": bad_names})
        try:
            hierarchy = CategoryHierarchy.from_mapping(
                {name: _name_list(parents, f"categories.{name}") for name, parents in declarations.items()}
            )
        except CategoryError as e:
            raise PlanError(e.message, context=e.context) from e

        units = data.get("units") or {}
        if not isinstance(units, dict):
            raise PlanError("'units' must map unit names to category lists")
        bad_units = sorted(repr(unit) for unit in units if not isinstance(unit, str))
        if bad_units:
            raise PlanError("Unit names must be strings", context={"units": bad_units})
        extractor = CategoryExtractor(
            {
                unit: _resolve(hierarchy, _name_list(names, f"units.{unit}"), f"units.{unit}")
                for unit, names in units.items()
            }
        )

        if "tree" not in data:
            raise PlanError("Plan has no 'tree'")
        tree = _build_tree(data["tree"], hierarchy)
    except PlanError as e:
        if source and e.plan_path is None:
            e.plan_path = source
            e.context["plan_path"] = source
        raise

    logger.debug(
        "Loaded plan with %d categories, %d units and %d nodes",
        len(hierarchy),
        len(extractor.units),
        sum(1 for _ in tree.walk()),
    )
    return TestPlan(hierarchy=hierarchy, extractor=extractor, tree=tree, source=source)


def load_plan(path: Path | str) -> TestPlan:
    """Load a test plan file.

    Args:
        path: Path to a ``.yml``/``.yaml``, ``.toml`` or ``.json`` plan.

    Returns:
        The loaded TestPlan.

    Raises:
        PlanError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise PlanError(f"Plan file not found: {path}", plan_path=str(path))
    if path.suffix.lower() not in PLAN_SUFFIXES:
        raise PlanError(
            f"Unsupported plan format '{path.suffix}'. Use one of: {', '.join(PLAN_SUFFIXES)}",
            plan_path=str(path),
        )

    return parse_plan(_read_document(path), source=str(path))
