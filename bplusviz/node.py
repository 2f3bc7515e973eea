"""
Contains the node model of the btree, i.e. the leaf and internal
node variants, and the node store that owns every live node.

Nodes never hold references to other nodes. Parent, child, and sibling
relations are node ids, resolved through the `NodeStore` that owns the
nodes; the same way pages refer to each other by page number.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

# keys are totally ordered numbers
Key = Union[int, float]


class NodeType(Enum):
    NodeInternal = 1
    NodeLeaf = 2


@dataclass
class LeafNode:
    """
    Leaf node. Holds keys and their values (1:1 by position),
    and links to its neighbors in the leaf chain.
    """
    node_id: int
    keys: List[Key] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    # id of owning internal node; None for root
    parent: Optional[int] = None
    # leaf chain
    prev: Optional[int] = None
    next: Optional[int] = None

    @property
    def node_type(self) -> NodeType:
        return NodeType.NodeLeaf

    def copy(self) -> LeafNode:
        # values are opaque; only the list holding them is copied
        return LeafNode(
            self.node_id,
            list(self.keys),
            list(self.values),
            parent=self.parent,
            prev=self.prev,
            next=self.next,
        )


@dataclass
class InternalNode:
    """
    Internal node. Child i holds keys in [keys[i-1], keys[i]).
    """
    node_id: int
    keys: List[Key] = field(default_factory=list)
    children: List[int] = field(default_factory=list)
    parent: Optional[int] = None

    @property
    def node_type(self) -> NodeType:
        return NodeType.NodeInternal

    def copy(self) -> InternalNode:
        return InternalNode(
            self.node_id, list(self.keys), list(self.children), parent=self.parent
        )


Node = Union[LeafNode, InternalNode]


class NodeStore:
    """
    Owns all live nodes of one tree, and allocates node ids.

    Ids are handed out in increasing order and are never reused, even after
    the node holding it is dropped. Each tree has its own store, so id
    sequences are reproducible per tree.
    """

    def __init__(self):
        self.nodes: Dict[int, Node] = {}
        self.next_node_id = 0

    def get_unused_node_id(self) -> int:
        node_id = self.next_node_id
        self.next_node_id += 1
        return node_id

    def new_leaf(self, keys: List[Key] = None, values: List[Any] = None) -> LeafNode:
        """
        create a leaf with a fresh id and no links; the caller is
        responsible for linking it into the tree
        """
        node = LeafNode(self.get_unused_node_id(), keys or [], values or [])
        self.nodes[node.node_id] = node
        return node

    def new_internal(self, keys: List[Key] = None, children: List[int] = None) -> InternalNode:
        """
        create an internal node with a fresh id; children are not re-parented here
        """
        node = InternalNode(self.get_unused_node_id(), keys or [], children or [])
        self.nodes[node.node_id] = node
        return node

    def get_node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def drop(self, node_id: int):
        del self.nodes[node_id]

    def clone(self) -> NodeStore:
        """
        Return an independent copy of the store. Since links are ids,
        no relinking is needed; the copy keeps the id counter so both
        stores would allocate the same next id.
        """
        other = NodeStore()
        other.nodes = {node_id: node.copy() for node_id, node in self.nodes.items()}
        other.next_node_id = self.next_node_id
        return other

    def __contains__(self, node_id: int) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[int]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


def iter_leaf_chain(store: NodeStore, root_id: Optional[int]) -> Iterator[LeafNode]:
    """
    walk down the leftmost spine from `root_id`, then follow
    the leaf chain to the right
    """
    if root_id is None:
        return
    node = store.get_node(root_id)
    while node.node_type == NodeType.NodeInternal:
        node = store.get_node(node.children[0])
    while node is not None:
        yield node
        node = store.get_node(node.next) if node.next is not None else None
