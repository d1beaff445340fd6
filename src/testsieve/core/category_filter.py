"""Category filter for test descriptions.

This module provides the CategoryFilter class which decides whether a
test description should run, based on the category markers that apply
to it and a fixed pair of included/excluded category sets.

Matching rules for a single node:

1. A node without categories runs only when no inclusion is configured.
2. A node with a category assignable to an excluded one never runs,
   whatever its included categories. Exclusion wins.
3. Otherwise the node runs when nothing is included, or when one of its
   categories is assignable to an included one.

A suite runs when it matches itself or when any descendant matches, so
a suite is never pruned while it still holds a runnable test. Leaves that
do not match still report False individually.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from testsieve.core.categories import CategoryHierarchy, CategoryId
from testsieve.core.description import CategoryExtractor, Description

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterDecision:
    """Outcome of evaluating one description.

    Attributes:
        should_run: Whether the description should run.
        reason: Human-readable reason for the decision.
        matched: The filter category that decided the outcome, if any.
        via: Name of the descendant whose match made a suite run, if any.
    """

    should_run: bool
    reason: str
    matched: CategoryId | None = None
    via: str | None = None


class CategoryFilter:
    """Decides which test descriptions run based on category markers.

    The filter holds no mutable state once built, so one instance can be
    queried from any number of threads at once.

    Example:
        >>> hierarchy = CategoryHierarchy.from_mapping({"Slow": [], "Database": ["Slow"]})
        >>> slow = hierarchy.get("Slow")
        >>> category_filter = CategoryFilter(included=[slow], hierarchy=hierarchy)
        >>> category_filter.should_run(Description("t", categories=[hierarchy.get("Database")]))
        True
        >>> category_filter.describe()
        'categories [Slow]'
    """

    def __init__(
        self,
        included: Iterable[CategoryId] | None = None,
        excluded: Iterable[CategoryId] | None = None,
        hierarchy: CategoryHierarchy | None = None,
        extractor: CategoryExtractor | None = None,
    ):
        """Initialize the category filter.

        Args:
            included: Categories to run. Empty means every category runs.
            excluded: Categories never to run. Takes precedence over
                      ``included`` when a node matches both.
            hierarchy: Is-a relation between categories. Without one, only
                       identical categories match.
            extractor: Source of each node's effective categories. Without
                       one, only the categories declared on the node count.
        """
        self._included: frozenset[CategoryId] = frozenset(included or ())
        self._excluded: frozenset[CategoryId] = frozenset(excluded or ())
        self._hierarchy = hierarchy or CategoryHierarchy()
        self._extractor = extractor or CategoryExtractor()

    @property
    def included(self) -> frozenset[CategoryId]:
        return self._included

    @property
    def excluded(self) -> frozenset[CategoryId]:
        return self._excluded

    @property
    def hierarchy(self) -> CategoryHierarchy:
        return self._hierarchy

    @property
    def extractor(self) -> CategoryExtractor:
        return self._extractor

    def _first_assignable(
        self,
        categories: frozenset[CategoryId],
        targets: frozenset[CategoryId],
    ) -> CategoryId | None:
        """Return the first target some category is assignable to.

        Targets are checked in name order so the reported match is stable.
        """
        for target in sorted(targets):
            for category in categories:
                if self._hierarchy.is_assignable(category, target):
                    return target
        return None

    def match(self, node: Description) -> FilterDecision:
        """Apply the matching rules to a single node, ignoring its children.

        Args:
            node: Description to check.

        Returns:
            FilterDecision for the node's own categories.
        """
        categories = self._extractor.categories(node)

        if not categories:
            return FilterDecision(not self._included, "no categories")

        if self._excluded:
            excluded_by = self._first_assignable(categories, self._excluded)
            if excluded_by is not None:
                return FilterDecision(False, f"excluded by {excluded_by}", matched=excluded_by)

        if not self._included:
            return FilterDecision(True, "all categories included")

        included_by = self._first_assignable(categories, self._included)
        if included_by is not None:
            return FilterDecision(True, f"included by {included_by}", matched=included_by)

        return FilterDecision(False, "no included category matched")

    def direct_match(self, node: Description) -> bool:
        """Check whether the node itself matches, ignoring its children.

        Args:
            node: Description to check.

        Returns:
            True if the node's own categories select it.
        """
        return self.match(node).should_run

    def evaluate(self, node: Description) -> FilterDecision:
        """Decide whether a node should run and explain why.

        Descendants are visited with an explicit stack in pre-order and the
        walk stops at the first matching descendant.

        Args:
            node: Description to evaluate.

        Returns:
            FilterDecision for the node. For a suite that runs only because
            of a descendant, ``via`` names that descendant.
        """
        decision = self.match(node)
        if decision.should_run:
            logger.debug("%s: run (%s)", node.name, decision.reason)
            return decision

        stack = list(reversed(node.children))
        while stack:
            child = stack.pop()
            child_decision = self.match(child)
            if child_decision.should_run:
                logger.debug("%s: run (descendant %s matches)", node.name, child.name)
                return FilterDecision(
                    True,
                    f"descendant {child.name} matches",
                    matched=child_decision.matched,
                    via=child.name,
                )
            stack.extend(reversed(child.children))

        logger.debug("%s: skip (%s)", node.name, decision.reason)
        return decision

    def should_run(self, node: Description) -> bool:
        """Check whether a node should run.

        Args:
            node: Description to check.

        Returns:
            True if the node matches or any of its descendants matches.
        """
        return self.evaluate(node).should_run

    async def should_run_async(self, node: Description) -> bool:
        """Async version of should_run.

        Runs the evaluation in a thread pool to avoid blocking.
        """
        return await asyncio.to_thread(self.should_run, node)

    @staticmethod
    def _format_categories(categories: frozenset[CategoryId]) -> str:
        return "[" + ", ".join(category.name for category in sorted(categories)) + "]"

    def describe(self) -> str:
        """Describe the filter for logs and reports.

        Returns:
            ``"categories [all]"`` when nothing is included, otherwise the
            sorted included names, followed by ``" - [<excluded>]"`` when
            exclusions are configured. For example
            ``"categories [Flaky, Slow] - [Integration]"``.
        """
        description = "categories " + (
            "[all]" if not self._included else self._format_categories(self._included)
        )
        if self._excluded:
            description += " - " + self._format_categories(self._excluded)
        return description

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return (
            f"CategoryFilter(included={sorted(c.name for c in self._included)!r}, "
            f"excluded={sorted(c.name for c in self._excluded)!r})"
        )
