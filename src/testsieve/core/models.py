"""Core data models for testsieve.

This module defines the Pydantic models used to report which nodes of
a test description tree were selected by a category filter.
"""

from enum import Enum

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    """Kind of description node."""

    SUITE = "suite"
    LEAF = "leaf"


class SelectedNode(BaseModel):
    """Decision recorded for one node of the description tree."""

    path: str = Field(..., description="Slash-joined names from the root to this node")
    name: str = Field(..., description="Name of the node")
    depth: int = Field(default=0, ge=0, description="Depth below the root (root is 0)")
    kind: NodeKind = Field(default=NodeKind.LEAF, description="Whether the node is a suite or a leaf")
    owner: str | None = Field(default=None, description="Owning unit of the node, if any")
    categories: list[str] = Field(
        default_factory=list,
        description="Sorted names of the categories applying to the node",
    )
    should_run: bool = Field(..., description="Whether the node should run")
    reason: str = Field(default="", description="Why the filter decided as it did")


class SelectionResult(BaseModel):
    """Complete result of applying a category filter to a description tree."""

    source: str | None = Field(default=None, description="Plan file the tree was loaded from")
    filter_description: str = Field(..., description="Rendered description of the active filter")
    nodes: list[SelectedNode] = Field(
        default_factory=list,
        description="Decisions for every node, in tree order",
    )
    duration: float = Field(default=0.0, description="Time spent selecting, in seconds")

    @property
    def leaf_count(self) -> int:
        return sum(1 for node in self.nodes if node.kind == NodeKind.LEAF)

    @property
    def selected_count(self) -> int:
        return len(self.selected_paths())

    @property
    def skipped_count(self) -> int:
        return self.leaf_count - self.selected_count

    def selected_paths(self) -> list[str]:
        """Return the paths of the leaves that should run, in tree order."""
        return [node.path for node in self.nodes if node.kind == NodeKind.LEAF and node.should_run]

    def get(self, path: str) -> SelectedNode | None:
        """Return the recorded decision for a node path."""
        for node in self.nodes:
            if node.path == path:
                return node
        return None
