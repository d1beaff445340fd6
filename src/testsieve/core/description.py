"""Test description tree and category extraction.

A Description identifies one unit of the test hierarchy: a suite holding
child descriptions, or a leaf (a single test method). Descriptions are
built once by discovery and never mutated.

The CategoryExtractor answers which category markers apply to a node:
those declared directly on it plus those declared on its owning unit
(the enclosing test class), so a method inherits its class's markers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from testsieve.core.categories import CategoryId


@dataclass(frozen=True, eq=False)
class Description:
    """Immutable node of the test description tree.

    Nodes compare and hash by identity, so deep trees never recurse on
    equality checks.

    Attributes:
        name: Display name of the unit (suite, class or method name).
        categories: Markers declared directly on this unit.
        owner: Identity of the enclosing unit (e.g. the test class), used to
               look up the markers declared on it. None for top-level suites.
        children: Ordered child descriptions; empty for leaves.
    """

    name: str
    categories: frozenset[CategoryId] = field(default_factory=frozenset)
    owner: str | None = None
    children: tuple[Description, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable for convenience while staying hashable
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def is_suite(self) -> bool:
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[Description]:
        """Yield this node and all descendants in pre-order."""
        stack: list[Description] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> Iterator[Description]:
        """Yield the leaf descendants in tree order."""
        return (node for node in self.walk() if node.is_leaf)

    def find(self, name: str) -> Description | None:
        """Return the first node in pre-order with the given name."""
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def __repr__(self) -> str:
        return (
            f"Description(name={self.name!r}, "
            f"categories={sorted(c.name for c in self.categories)!r}, "
            f"owner={self.owner!r}, children={len(self.children)})"
        )


class CategoryExtractor:
    """Derives the effective category set of a description.

    Example:
        >>> slow = CategoryId("Slow")
        >>> extractor = CategoryExtractor({"com.acme.RepoTest": [slow]})
        >>> leaf = Description("testSave", owner="com.acme.RepoTest")
        >>> extractor.categories(leaf) == frozenset({slow})
        True
    """

    def __init__(self, unit_categories: Mapping[str, Iterable[CategoryId]] | None = None) -> None:
        """Initialize the extractor.

        Args:
            unit_categories: Markers declared on each owning unit, keyed by
                the unit identity that descriptions reference as ``owner``.
        """
        self._unit_categories: dict[str, frozenset[CategoryId]] = {
            unit: frozenset(categories) for unit, categories in (unit_categories or {}).items()
        }

    def direct_categories(self, node: Description) -> frozenset[CategoryId]:
        """Return the markers declared directly on ``node``."""
        return node.categories

    def unit_categories(self, node: Description) -> frozenset[CategoryId]:
        """Return the markers declared on the unit that owns ``node``."""
        if node.owner is None:
            return frozenset()
        return self._unit_categories.get(node.owner, frozenset())

    def categories(self, node: Description) -> frozenset[CategoryId]:
        """Return the union of direct and owning-unit markers."""
        return self.direct_categories(node) | self.unit_categories(node)

    @property
    def units(self) -> list[str]:
        return sorted(self._unit_categories)

    def __repr__(self) -> str:
        return f"CategoryExtractor(units={self.units!r})"
