"""High-level API functions for testsieve.

These functions wire the category hierarchy, the extractor and the
filter together, making it easy to use testsieve as a library.

Example usage::

    from testsieve.api import select_plan

    result = select_plan("plan.yml", include=["Slow"], exclude=["Flaky"])
    for path in result.selected_paths():
        print(path)
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from testsieve.config.schema import FilterSettings, SieveConfig
from testsieve.core.categories import CategoryHierarchy
from testsieve.core.category_filter import CategoryFilter
from testsieve.core.description import CategoryExtractor
from testsieve.core.exceptions import CategoryError, ConfigError
from testsieve.core.models import SelectionResult
from testsieve.core.plan import load_plan
from testsieve.core.selector import select


def build_filter(
    settings: FilterSettings | SieveConfig,
    hierarchy: CategoryHierarchy,
    extractor: CategoryExtractor | None = None,
) -> CategoryFilter:
    """Build a CategoryFilter from configured category names.

    Args:
        settings: Filter settings, or a full config holding them.
        hierarchy: Hierarchy the names are resolved against.
        extractor: Optional source of owning-unit categories.

    Returns:
        The configured CategoryFilter.

    Raises:
        ConfigError: If a configured name is not a known category.
    """
    if isinstance(settings, SieveConfig):
        settings = settings.filter

    resolved = {}
    for key in ("include_categories", "exclude_categories"):
        try:
            resolved[key] = hierarchy.resolve(getattr(settings, key))
        except CategoryError as e:
            raise ConfigError(
                f"{e.message}. Known categories: {', '.join(hierarchy.names()) or 'none'}",
                config_key=f"filter.{key}",
                context={"category": e.category},
            ) from e

    return CategoryFilter(
        included=resolved["include_categories"],
        excluded=resolved["exclude_categories"],
        hierarchy=hierarchy,
        extractor=extractor,
    )


def select_plan(
    path: str | Path,
    *,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> SelectionResult:
    """Load a test plan and select the tests matching the given categories.

    Args:
        path: Plan file (YAML, TOML or JSON).
        include: Category names to run. None or empty runs everything.
        exclude: Category names never to run.

    Returns:
        SelectionResult for every node of the plan's tree.

    Raises:
        PlanError: If the plan cannot be loaded.
        ConfigError: If a category name is unknown to the plan.
    """
    plan = load_plan(path)
    settings = FilterSettings(
        include_categories=list(include or []),
        exclude_categories=list(exclude or []),
    )
    category_filter = build_filter(settings, plan.hierarchy, plan.extractor)
    return select(plan.tree, category_filter, source=plan.source)
