"""
Contains the step recorder, which the btree invokes at fixed checkpoints
of an operation, to produce an ordered trace of tree snapshots, e.g. for
stepwise playback by a visualizer.

A step is never mutated after it is recorded, and its snapshot shares no
state with the live tree.
"""
from __future__ import annotations

import logging

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .node import Key, Node, NodeStore, NodeType, LeafNode, iter_leaf_chain

if TYPE_CHECKING:
    from .btree import Tree


class StepType(Enum):
    Start = "start"
    Traverse = "traverse"
    Found = "found"
    Split = "split"
    Merge = "merge"
    BorrowLeft = "borrow-left"
    BorrowRight = "borrow-right"
    UpdateParent = "update-parent"
    NewRoot = "new-root"
    Final = "final"
    NoChange = "no-change"


# section: step metadata


@dataclass(frozen=True)
class KeyRef:
    node_id: int
    key_index: int


@dataclass(frozen=True)
class Highlights:
    """
    Which nodes and keys a step concerns. Only meant for rendering;
    the btree never reads these.
    """
    nodes: List[int] = field(default_factory=list)
    keys: List[KeyRef] = field(default_factory=list)

    def __post_init__(self):
        # own copies; callers keep using the lists they passed in, e.g. a find path
        object.__setattr__(self, "nodes", list(self.nodes))
        object.__setattr__(self, "keys", list(self.keys))


@dataclass(frozen=True)
class SplitInfo:
    old_node_id: int
    new_node_id: int
    pushed_key: Key
    # None when the split creates a new root
    pushed_to_node_id: Optional[int]


@dataclass(frozen=True)
class MergeInfo:
    left_node_id: int
    right_node_id: int
    # the node that survives the merge
    merged_node_id: int
    # separator removed from the parent
    pulled_key: Key
    from_parent_id: int


@dataclass(frozen=True)
class BorrowInfo:
    from_node_id: int
    to_node_id: int
    key: Key
    parent_key_node_id: int


# section: snapshots


class TreeSnapshot:
    """
    Read-only copy of a tree at one instant.

    Nodes handed out by `root`, `get_node` and `leaves` are copies, so
    modifying them does not change the snapshot.
    """

    def __init__(self, order: int, root_id: Optional[int], store: NodeStore):
        self.order = order
        self.root_id = root_id
        self._store = store

    @property
    def root(self) -> Optional[Node]:
        if self.root_id is None:
            return None
        return self.get_node(self.root_id)

    def get_node(self, node_id: int) -> Node:
        return self._store.get_node(node_id).copy()

    def node_ids(self) -> List[int]:
        return list(self._store)

    def leaves(self) -> List[LeafNode]:
        return [leaf.copy() for leaf in iter_leaf_chain(self._store, self.root_id)]

    def keys(self) -> List[Key]:
        return [key for leaf in self.leaves() for key in leaf.keys]

    def node_to_dict(self, node_id: int) -> Dict[str, Any]:
        node = self._store.get_node(node_id)
        if node.node_type == NodeType.NodeInternal:
            return {
                "id": node.node_id,
                "type": "internal",
                "keys": list(node.keys),
                "parent": node.parent,
                "children": [self.node_to_dict(child_id) for child_id in node.children],
            }
        return {
            "id": node.node_id,
            "type": "leaf",
            "keys": list(node.keys),
            "values": list(node.values),
            "parent": node.parent,
            "prev": node.prev,
            "next": node.next,
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        nested, json-friendly form; root is None for an empty tree
        """
        root = None if self.root_id is None else self.node_to_dict(self.root_id)
        return {"order": self.order, "root": root}

    def __repr__(self):
        return f"TreeSnapshot(order={self.order}, keys={self.keys()})"


@dataclass(frozen=True)
class Step:
    kind: StepType
    message: str
    highlights: Highlights
    snapshot: TreeSnapshot
    split_info: Optional[SplitInfo] = None
    merge_info: Optional[MergeInfo] = None
    borrow_info: Optional[BorrowInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "highlights": asdict(self.highlights),
            "snapshot": self.snapshot.to_dict(),
            "split_info": asdict(self.split_info) if self.split_info else None,
            "merge_info": asdict(self.merge_info) if self.merge_info else None,
            "borrow_info": asdict(self.borrow_info) if self.borrow_info else None,
        }


class StepRecorder:
    """
    Accumulates the steps of a single traced operation.

    The tree passes itself at every checkpoint; the recorder snapshots it
    and appends a step. Recording never mutates the tree.
    """

    def __init__(self):
        self.steps: List[Step] = []

    def record(
        self,
        tree: Tree,
        kind: StepType,
        message: str,
        highlights: Highlights = None,
        split_info: SplitInfo = None,
        merge_info: MergeInfo = None,
        borrow_info: BorrowInfo = None,
    ) -> Step:
        step = Step(
            kind,
            message,
            highlights if highlights is not None else Highlights(),
            tree.snapshot(),
            split_info=split_info,
            merge_info=merge_info,
            borrow_info=borrow_info,
        )
        logging.debug(f"recorded step [{len(self.steps)}] {kind.value}: {message}")
        self.steps.append(step)
        return step

    def get_steps(self) -> List[Step]:
        return list(self.steps)
