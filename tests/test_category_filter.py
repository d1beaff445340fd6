"""Tests for the CategoryFilter class.

This module tests the selection rules:
- nodes without categories run only when nothing is included
- exclusion takes precedence over inclusion
- subtypes of a filter category match it
- suites run when any descendant matches
- the rendered filter description
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from testsieve.core.categories import CategoryHierarchy, CategoryId
from testsieve.core.category_filter import CategoryFilter, FilterDecision
from testsieve.core.description import CategoryExtractor, Description

SLOW = CategoryId("Slow")
FAST = CategoryId("Fast")
FLAKY = CategoryId("Flaky")
INTEGRATION = CategoryId("Integration")


def leaf(*categories: CategoryId, name: str = "test") -> Description:
    return Description(name, categories=categories)


class TestLeafScenarios:
    """End-to-end leaf decisions."""

    def test_matching_category_runs(self) -> None:
        assert CategoryFilter(included=[SLOW]).should_run(leaf(SLOW))

    def test_other_category_skipped(self) -> None:
        assert not CategoryFilter(included=[SLOW]).should_run(leaf(FAST))

    def test_no_category_skipped_when_including(self) -> None:
        assert not CategoryFilter(included=[SLOW]).should_run(leaf())

    def test_excluded_wins_over_included(self) -> None:
        assert not CategoryFilter(included=[SLOW], excluded=[SLOW]).should_run(leaf(SLOW))

    def test_one_of_several_categories_matches(self) -> None:
        assert CategoryFilter(included=[SLOW]).should_run(leaf(FAST, SLOW))


class TestEmptyCategories:
    """A node without categories runs iff nothing is included."""

    @pytest.mark.parametrize(
        "included, excluded, expected",
        [
            ([], [], True),
            ([], [SLOW], True),
            ([SLOW], [], False),
            ([SLOW], [FLAKY], False),
        ],
    )
    def test_runs_iff_no_inclusion(
        self, included: list[CategoryId], excluded: list[CategoryId], expected: bool
    ) -> None:
        category_filter = CategoryFilter(included=included, excluded=excluded)
        assert category_filter.should_run(leaf()) is expected
        assert category_filter.evaluate(leaf()).reason == "no categories"


class TestNoFilter:
    """With nothing included or excluded, everything runs."""

    def test_every_node_runs(self, sample_tree: Description, extractor: CategoryExtractor) -> None:
        category_filter = CategoryFilter(extractor=extractor)
        assert all(category_filter.should_run(node) for node in sample_tree.walk())

    def test_none_arguments_mean_empty(self) -> None:
        category_filter = CategoryFilter(None, None)
        assert category_filter.included == frozenset()
        assert category_filter.excluded == frozenset()
        assert category_filter.should_run(leaf(SLOW))


class TestExclusion:
    """Exclusion always takes precedence."""

    def test_excluded_without_inclusion(self) -> None:
        category_filter = CategoryFilter(excluded=[SLOW])
        assert not category_filter.should_run(leaf(SLOW))
        assert category_filter.should_run(leaf(FAST))

    def test_any_excluded_category_suppresses(self) -> None:
        category_filter = CategoryFilter(included=[SLOW], excluded=[FLAKY])
        assert not category_filter.should_run(leaf(SLOW, FLAKY))

    def test_excluded_through_supertype(self, hierarchy: CategoryHierarchy) -> None:
        category_filter = CategoryFilter(excluded=[hierarchy.get("Integration")], hierarchy=hierarchy)
        assert not category_filter.should_run(leaf(hierarchy.get("Database")))

    def test_multi_path_tie_excluded(self, hierarchy: CategoryHierarchy) -> None:
        # Database is both Slow (included) and Integration (excluded)
        category_filter = CategoryFilter(
            included=[hierarchy.get("Slow")],
            excluded=[hierarchy.get("Integration")],
            hierarchy=hierarchy,
        )
        decision = category_filter.evaluate(leaf(hierarchy.get("Database")))
        assert decision.should_run is False
        assert decision.reason == "excluded by Integration"
        assert decision.matched == hierarchy.get("Integration")

    def test_overlapping_sets_accepted(self) -> None:
        category_filter = CategoryFilter(included=[SLOW, FAST], excluded=[SLOW])
        assert category_filter.should_run(leaf(FAST))
        assert not category_filter.should_run(leaf(SLOW))


class TestAssignability:
    """Subtypes of a filter category match it."""

    def test_subtype_matches_included_supertype(self, hierarchy: CategoryHierarchy) -> None:
        category_filter = CategoryFilter(included=[hierarchy.get("Slow")], hierarchy=hierarchy)
        decision = category_filter.evaluate(leaf(hierarchy.get("Database")))
        assert decision.should_run
        assert decision.reason == "included by Slow"

    def test_supertype_does_not_match_included_subtype(self, hierarchy: CategoryHierarchy) -> None:
        category_filter = CategoryFilter(included=[hierarchy.get("Database")], hierarchy=hierarchy)
        assert not category_filter.should_run(leaf(hierarchy.get("Slow")))

    def test_without_hierarchy_only_identity_matches(self, hierarchy: CategoryHierarchy) -> None:
        category_filter = CategoryFilter(included=[hierarchy.get("Slow")])
        assert not category_filter.should_run(leaf(hierarchy.get("Database")))
        assert category_filter.should_run(leaf(hierarchy.get("Slow")))


class TestOwnerCategories:
    """Leaves inherit the categories of their owning unit."""

    def test_owner_category_included(self, hierarchy: CategoryHierarchy, extractor: CategoryExtractor) -> None:
        category_filter = CategoryFilter(included=[hierarchy.get("Slow")], hierarchy=hierarchy, extractor=extractor)
        assert category_filter.should_run(Description("testSave", owner="com.acme.RepoTest"))

    def test_owner_category_excluded(self, hierarchy: CategoryHierarchy, extractor: CategoryExtractor) -> None:
        category_filter = CategoryFilter(
            excluded=[hierarchy.get("Fast")], hierarchy=hierarchy, extractor=extractor
        )
        node = Description("testHuge", owner="com.acme.MathTest", categories=[hierarchy.get("Slow")])
        assert not category_filter.should_run(node)


class TestTreePropagation:
    """Suites run when they or any descendant match."""

    @pytest.fixture
    def slow_filter(self, hierarchy: CategoryHierarchy, extractor: CategoryExtractor) -> CategoryFilter:
        return CategoryFilter(included=[hierarchy.get("Slow")], hierarchy=hierarchy, extractor=extractor)

    def test_suite_runs_through_descendant(self, sample_tree: Description, slow_filter: CategoryFilter) -> None:
        math = sample_tree.find("MathTest")
        assert math is not None
        assert not slow_filter.direct_match(math)
        assert slow_filter.should_run(math)

        decision = slow_filter.evaluate(math)
        assert decision.via == "testHuge"
        assert decision.reason == "descendant testHuge matches"
        assert decision.matched == CategoryId("Slow")

    def test_non_matching_leaf_still_skipped(self, sample_tree: Description, slow_filter: CategoryFilter) -> None:
        test_add = sample_tree.find("testAdd")
        assert test_add is not None
        assert not slow_filter.should_run(test_add)

    def test_root_runs(self, sample_tree: Description, slow_filter: CategoryFilter) -> None:
        decision = slow_filter.evaluate(sample_tree)
        assert decision.should_run
        assert decision.via == "RepoTest"

    def test_suite_without_matches_skipped(self, sample_tree: Description, slow_filter: CategoryFilter) -> None:
        smoke = sample_tree.find("SmokeTest")
        assert smoke is not None
        assert not slow_filter.should_run(smoke)
        assert slow_filter.evaluate(smoke).reason == "no categories"

    def test_excluded_suite_runs_for_included_descendant(self) -> None:
        # Exclusion on a suite does not prune children that match on their own
        suite = Description("Suite", categories=[FLAKY], children=[leaf(SLOW, name="slow")])
        category_filter = CategoryFilter(included=[SLOW], excluded=[FLAKY])
        assert not category_filter.direct_match(suite)
        assert category_filter.should_run(suite)

    def test_deep_match(self) -> None:
        node = leaf(SLOW, name="bottom")
        for i in range(10000):
            node = Description(f"level{i}", children=[node])
        category_filter = CategoryFilter(included=[SLOW])
        decision = category_filter.evaluate(node)
        assert decision.should_run
        assert decision.via == "bottom"

    def test_deep_no_match(self) -> None:
        node = leaf(FAST, name="bottom")
        for i in range(10000):
            node = Description(f"level{i}", children=[node])
        assert not CategoryFilter(included=[SLOW]).should_run(node)

    def test_first_matching_descendant_in_tree_order(self) -> None:
        suite = Description(
            "Suite",
            children=[
                Description("Inner", children=[leaf(FAST, name="a"), leaf(SLOW, name="b")]),
                leaf(SLOW, name="c"),
            ],
        )
        decision = CategoryFilter(included=[SLOW]).evaluate(suite)
        assert decision.via == "b"


class TestDescribe:
    """Test the rendered filter description."""

    @pytest.mark.parametrize(
        "included, excluded, expected",
        [
            ([], [], "categories [all]"),
            ([SLOW], [], "categories [Slow]"),
            ([], [SLOW], "categories [all] - [Slow]"),
            ([SLOW, FLAKY], [INTEGRATION], "categories [Flaky, Slow] - [Integration]"),
            ([FLAKY, SLOW], [SLOW, FAST], "categories [Flaky, Slow] - [Fast, Slow]"),
        ],
    )
    def test_describe(
        self, included: list[CategoryId], excluded: list[CategoryId], expected: str
    ) -> None:
        category_filter = CategoryFilter(included=included, excluded=excluded)
        assert category_filter.describe() == expected
        assert str(category_filter) == expected

    def test_describe_independent_of_input_order(self) -> None:
        names = ["Zeta", "Alpha", "Mu", "Beta"]
        forward = CategoryFilter(included=[CategoryId(n) for n in names])
        backward = CategoryFilter(included=[CategoryId(n) for n in reversed(names)])
        assert forward.describe() == backward.describe() == "categories [Alpha, Beta, Mu, Zeta]"

    def test_repr(self) -> None:
        category_filter = CategoryFilter(included=[SLOW], excluded=[FLAKY])
        assert repr(category_filter) == "CategoryFilter(included=['Slow'], excluded=['Flaky'])"


class TestDecisions:
    """Test decision reasons."""

    def test_all_categories_included_reason(self) -> None:
        decision = CategoryFilter().evaluate(leaf(SLOW))
        assert decision == FilterDecision(True, "all categories included")

    def test_no_included_category_matched_reason(self) -> None:
        decision = CategoryFilter(included=[SLOW]).evaluate(leaf(FAST))
        assert decision == FilterDecision(False, "no included category matched")

    def test_decisions_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="testsieve.core.category_filter"):
            CategoryFilter(included=[SLOW]).should_run(leaf(FAST, name="testAdd"))
        assert "testAdd: skip (no included category matched)" in caplog.text


class TestConcurrency:
    """The filter is safe to share between threads and tasks."""

    def test_threads_agree(self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor) -> None:
        category_filter = CategoryFilter(included=[hierarchy.get("Slow")], hierarchy=hierarchy, extractor=extractor)
        nodes = list(sample_tree.walk()) * 50
        expected = [category_filter.should_run(node) for node in nodes]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(category_filter.should_run, nodes))
        assert results == expected

    @pytest.mark.asyncio
    async def test_should_run_async(self, sample_tree: Description) -> None:
        category_filter = CategoryFilter(included=[SLOW])
        results = await asyncio.gather(
            category_filter.should_run_async(leaf(SLOW)),
            category_filter.should_run_async(leaf(FAST)),
        )
        assert results == [True, False]
