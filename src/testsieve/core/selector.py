"""Selection driver for testsieve.

Walks a description tree once and records the category filter's
decision for every node, producing a SelectionResult that reporters can
render. Tests are never executed here.
"""

from __future__ import annotations

import logging
import time

from testsieve.core.category_filter import CategoryFilter, FilterDecision
from testsieve.core.description import Description
from testsieve.core.models import NodeKind, SelectedNode, SelectionResult

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def _decide_all(tree: Description, category_filter: CategoryFilter) -> dict[Description, FilterDecision]:
    """Compute every node's decision in a single bottom-up pass.

    Equivalent to calling ``category_filter.evaluate`` on each node, but
    linear in the size of the tree: each node keeps the first matching
    node of its subtree in pre-order.
    """
    decisions: dict[Description, FilterDecision] = {}
    first_match: dict[Description, tuple[Description, FilterDecision] | None] = {}

    # Reversed pre-order visits every child before its parent
    for node in reversed(list(tree.walk())):
        own = category_filter.match(node)
        if own.should_run:
            decisions[node] = own
            first_match[node] = (node, own)
            continue

        found = None
        for child in node.children:
            found = first_match[child]
            if found is not None:
                break

        first_match[node] = found
        if found is None:
            decisions[node] = own
        else:
            match_node, match_decision = found
            decisions[node] = FilterDecision(
                True,
                f"descendant {match_node.name} matches",
                matched=match_decision.matched,
                via=match_node.name,
            )

    return decisions


def select(
    tree: Description,
    category_filter: CategoryFilter,
    source: str | None = None,
) -> SelectionResult:
    """Apply a category filter to every node of a description tree.

    Args:
        tree: Root description.
        category_filter: Filter deciding which nodes run.
        source: Optional label for where the tree came from (e.g. plan path).

    Returns:
        SelectionResult listing a decision for every node in tree order.
    """
    start = time.perf_counter()
    decisions = _decide_all(tree, category_filter)
    extractor = category_filter.extractor

    nodes: list[SelectedNode] = []
    stack: list[tuple[Description, str, int]] = [(tree, tree.name, 0)]
    while stack:
        node, path, depth = stack.pop()
        decision = decisions[node]
        logger.debug("%s: %s (%s)", path, "run" if decision.should_run else "skip", decision.reason)
        nodes.append(
            SelectedNode(
                path=path,
                name=node.name,
                depth=depth,
                kind=NodeKind.LEAF if node.is_leaf else NodeKind.SUITE,
                owner=node.owner,
                categories=sorted(c.name for c in extractor.categories(node)),
                should_run=decision.should_run,
                reason=decision.reason,
            )
        )
        for child in reversed(node.children):
            stack.append((child, f"{path}{PATH_SEPARATOR}{child.name}", depth + 1))

    result = SelectionResult(
        source=source,
        filter_description=category_filter.describe(),
        nodes=nodes,
        duration=time.perf_counter() - start,
    )
    logger.info(
        "Selected %d of %d tests with %s",
        result.selected_count,
        result.leaf_count,
        result.filter_description,
    )
    return result
