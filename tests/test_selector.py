"""Tests for the selection driver.

This module tests that select() records one decision per node, in tree
order, and that its decisions agree with CategoryFilter.evaluate().
"""

from __future__ import annotations

import logging

import pytest

from testsieve.core.categories import CategoryHierarchy
from testsieve.core.category_filter import CategoryFilter
from testsieve.core.description import CategoryExtractor, Description
from testsieve.core.models import NodeKind
from testsieve.core.selector import select


def make_filter(
    hierarchy: CategoryHierarchy,
    extractor: CategoryExtractor,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> CategoryFilter:
    return CategoryFilter(
        included=hierarchy.resolve(include or []),
        excluded=hierarchy.resolve(exclude or []),
        hierarchy=hierarchy,
        extractor=extractor,
    )


class TestSelect:
    """Tests for select()."""

    def test_every_node_recorded_in_order(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        """Test that paths follow pre-order and join names with slashes."""
        result = select(sample_tree, make_filter(hierarchy, extractor))
        assert [node.path for node in result.nodes] == [
            "all",
            "all/RepoTest",
            "all/RepoTest/testSave",
            "all/RepoTest/testRetry",
            "all/MathTest",
            "all/MathTest/testAdd",
            "all/MathTest/testHuge",
            "all/SmokeTest",
            "all/SmokeTest/testPing",
        ]

    def test_depth_and_kind(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(sample_tree, make_filter(hierarchy, extractor))
        root = result.get("all")
        leaf = result.get("all/SmokeTest/testPing")
        assert root is not None and leaf is not None
        assert (root.depth, root.kind) == (0, NodeKind.SUITE)
        assert (leaf.depth, leaf.kind) == (2, NodeKind.LEAF)

    def test_categories_include_owner(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(sample_tree, make_filter(hierarchy, extractor))
        node = result.get("all/RepoTest/testRetry")
        assert node is not None
        assert node.categories == ["Database", "Flaky"]
        assert node.owner == "com.acme.RepoTest"

    def test_no_filter_selects_everything(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(sample_tree, make_filter(hierarchy, extractor))
        assert result.leaf_count == 5
        assert result.selected_count == 5
        assert result.skipped_count == 0
        assert result.filter_description == "categories [all]"

    def test_include_slow(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        """Test that Slow selects Database tests through the hierarchy."""
        result = select(sample_tree, make_filter(hierarchy, extractor, include=["Slow"]))
        assert result.selected_paths() == [
            "all/RepoTest/testSave",
            "all/RepoTest/testRetry",
            "all/MathTest/testHuge",
        ]
        assert result.get("all").reason == "descendant RepoTest matches"
        assert result.get("all/MathTest").should_run
        assert result.get("all/MathTest").reason == "descendant testHuge matches"
        assert not result.get("all/SmokeTest").should_run
        assert not result.get("all/MathTest/testAdd").should_run

    def test_include_slow_exclude_flaky(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(sample_tree, make_filter(hierarchy, extractor, include=["Slow"], exclude=["Flaky"]))
        assert result.selected_paths() == ["all/RepoTest/testSave", "all/MathTest/testHuge"]
        assert result.get("all/RepoTest/testRetry").reason == "excluded by Flaky"
        assert result.filter_description == "categories [Slow] - [Flaky]"

    def test_exclude_supertype(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(sample_tree, make_filter(hierarchy, extractor, exclude=["Integration"]))
        assert not result.get("all/RepoTest").should_run
        assert result.selected_paths() == [
            "all/MathTest/testAdd",
            "all/MathTest/testHuge",
            "all/SmokeTest/testPing",
        ]

    def test_exclusion_wins_for_multi_path_category(
        self, sample_tree: Description, hierarchy: CategoryHierarchy, extractor: CategoryExtractor
    ) -> None:
        result = select(
            sample_tree,
            make_filter(hierarchy, extractor, include=["Integration"], exclude=["Slow"]),
        )
        assert result.selected_paths() == []
        assert not result.get("all").should_run

    @pytest.mark.parametrize(
        "include, exclude",
        [([], []), (["Slow"], []), (["Slow"], ["Flaky"]), ([], ["Integration"]), (["Fast"], ["Slow"])],
    )
    def test_agrees_with_evaluate(
        self,
        sample_tree: Description,
        hierarchy: CategoryHierarchy,
        extractor: CategoryExtractor,
        include: list[str],
        exclude: list[str],
    ) -> None:
        """Test that the single-pass decisions match per-node evaluation."""
        category_filter = make_filter(hierarchy, extractor, include=include, exclude=exclude)
        result = select(sample_tree, category_filter)
        for recorded, node in zip(result.nodes, sample_tree.walk()):
            expected = category_filter.evaluate(node)
            assert recorded.name == node.name
            assert recorded.should_run == expected.should_run
            assert recorded.reason == expected.reason

    def test_source_recorded(self, sample_tree: Description) -> None:
        result = select(sample_tree, CategoryFilter(), source="plan.yml")
        assert result.source == "plan.yml"
        assert result.duration >= 0

    def test_deep_tree(self, hierarchy: CategoryHierarchy) -> None:
        node = Description("bottom", categories=[hierarchy.get("Slow")])
        for i in range(5000):
            node = Description(f"level{i}", children=[node])
        result = select(node, CategoryFilter(included=[hierarchy.get("Slow")]))
        assert len(result.nodes) == 5001
        assert all(n.should_run for n in result.nodes)
        assert result.nodes[-1].depth == 5000

    def test_summary_logged(
        self, sample_tree: Description, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="testsieve.core.selector"):
            select(sample_tree, CategoryFilter())
        assert "Selected 5 of 5 tests with categories [all]" in caplog.text


class TestSelectionResult:
    """Tests for SelectionResult helpers."""

    def test_get_missing_path(self, sample_tree: Description) -> None:
        assert select(sample_tree, CategoryFilter()).get("all/nope") is None

    def test_json_round_trip_fields(self, sample_tree: Description) -> None:
        result = select(sample_tree, CategoryFilter())
        data = result.model_dump()
        assert data["filter_description"] == "categories [all]"
        assert data["nodes"][0]["kind"] == NodeKind.SUITE
