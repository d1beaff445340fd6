"""Category marker types and their is-a hierarchy.

A category marker is a tag-only type used to classify tests (``Slow``,
``Integration``...). Markers may declare parent markers, and a marker is
assignable to each of its ancestors: a test tagged ``Database`` is also a
``Slow`` test when ``Database`` declares ``Slow`` as a parent.

The hierarchy is an explicit registry rather than runtime introspection.
Parents have to be registered before their children, which keeps the
graph acyclic and lets each marker's ancestor set be computed once at
registration time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from testsieve.core.exceptions import CategoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class CategoryId:
    """Identity of a category marker type.

    Attributes:
        name: Marker name, also used as the sort key when rendering.
    """

    name: str

    def __str__(self) -> str:
        return self.name


class CategoryHierarchy:
    """Registry of category markers and their declared parents.

    Example:
        >>> hierarchy = CategoryHierarchy()
        >>> slow = hierarchy.register("Slow")
        >>> database = hierarchy.register("Database", parents=["Slow"])
        >>> hierarchy.is_assignable(database, slow)
        True
        >>> hierarchy.is_assignable(slow, database)
        False
    """

    def __init__(self) -> None:
        """Initialize an empty hierarchy."""
        self._by_name: dict[str, CategoryId] = {}
        self._parents: dict[CategoryId, frozenset[CategoryId]] = {}
        self._ancestors: dict[CategoryId, frozenset[CategoryId]] = {}

    def register(self, name: str, parents: Iterable[str | CategoryId] = ()) -> CategoryId:
        """Register a marker type.

        Args:
            name: Name of the marker.
            parents: Names (or ids) of already registered parent markers.

        Returns:
            The id of the registered marker.

        Raises:
            CategoryError: If the name is empty, a parent is unknown, or the
                name is already registered with different parents.
        """
        name = name.strip()
        if not name:
            raise CategoryError("Category name must not be empty")

        parent_ids = frozenset(self.get(p) for p in parents)

        existing = self._by_name.get(name)
        if existing is not None:
            if self._parents[existing] != parent_ids:
                raise CategoryError(
                    f"Category '{name}' is already registered with different parents",
                    category=name,
                    context={
                        "registered": sorted(p.name for p in self._parents[existing]),
                        "requested": sorted(p.name for p in parent_ids),
                    },
                )
            return existing

        category = CategoryId(name)
        ancestors = {category}
        for parent in parent_ids:
            ancestors.update(self._ancestors[parent])

        self._by_name[name] = category
        self._parents[category] = parent_ids
        self._ancestors[category] = frozenset(ancestors)

        logger.debug(
            "Registered category %s (parents: %s)",
            name,
            ", ".join(sorted(p.name for p in parent_ids)) or "none",
        )
        return category

    def get(self, name: str | CategoryId) -> CategoryId:
        """Look up a registered marker.

        Args:
            name: Marker name, or an id to check for membership.

        Raises:
            CategoryError: If the marker is not registered.
        """
        key = name.name if isinstance(name, CategoryId) else name.strip()
        try:
            return self._by_name[key]
        except KeyError:
            raise CategoryError(f"Unknown category '{key}'", category=key) from None

    def resolve(self, names: Iterable[str | CategoryId]) -> frozenset[CategoryId]:
        """Resolve a collection of names into marker ids.

        Raises:
            CategoryError: If any name is not registered.
        """
        return frozenset(self.get(name) for name in names)

    def parents(self, category: CategoryId) -> frozenset[CategoryId]:
        """Return the directly declared parents of a marker."""
        return self._parents.get(category, frozenset())

    def ancestors(self, category: CategoryId) -> frozenset[CategoryId]:
        """Return every marker the given one is assignable to, itself included."""
        return self._ancestors.get(category, frozenset({category}))

    def is_assignable(self, source: CategoryId, target: CategoryId) -> bool:
        """Check whether ``source`` is-a ``target``.

        True when both are the same marker or ``target`` is reachable from
        ``source`` through declared parents. Markers unknown to this
        hierarchy are only assignable to themselves.
        """
        if source == target:
            return True
        return target in self._ancestors.get(source, ())

    def names(self) -> list[str]:
        """Return the sorted names of all registered markers."""
        return sorted(self._by_name)

    @classmethod
    def from_mapping(cls, declarations: Mapping[str, Iterable[str] | None]) -> CategoryHierarchy:
        """Build a hierarchy from a ``name -> parent names`` mapping.

        Declarations may appear in any order; parents are registered
        before their children.

        Raises:
            CategoryError: If a parent is never declared, a name is declared
                twice once surrounding whitespace is trimmed, or the
                declarations contain a cycle.
        """
        hierarchy = cls()
        pending: dict[str, list[str]] = {}
        for raw_name, parents in declarations.items():
            # Names are compared as register() stores them
            name = raw_name.strip()
            if name in pending:
                raise CategoryError(f"Category '{name}' is declared more than once", category=name)
            pending[name] = [parent.strip() for parent in parents or []]

        for name, parents in pending.items():
            for parent in parents:
                if parent not in pending:
                    raise CategoryError(
                        f"Category '{name}' declares unknown parent '{parent}'",
                        category=name,
                    )

        while pending:
            ready = [
                name
                for name, parents in pending.items()
                if all(parent in hierarchy for parent in parents)
            ]
            if not ready:
                raise CategoryError(
                    "Category hierarchy contains a cycle",
                    context={"categories": sorted(pending)},
                )
            for name in sorted(ready):
                hierarchy.register(name, pending.pop(name))

        return hierarchy

    def __contains__(self, item: object) -> bool:
        if isinstance(item, CategoryId):
            return item in self._parents
        return item in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[CategoryId]:
        return iter(sorted(self._parents))

    def __repr__(self) -> str:
        return f"CategoryHierarchy(categories={self.names()!r})"
