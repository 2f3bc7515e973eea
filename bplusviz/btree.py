"""
Contains the implementation of the btree
"""
from __future__ import annotations

import logging
import math

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator, List, Optional, Tuple

from .constants import MIN_ORDER
from .node import (
    Key,
    InternalNode,
    LeafNode,
    Node,
    NodeStore,
    NodeType,
    iter_leaf_chain,
)
from .steps import (
    BorrowInfo,
    Highlights,
    KeyRef,
    MergeInfo,
    SplitInfo,
    Step,
    StepRecorder,
    StepType,
    TreeSnapshot,
)


class InvalidOrder(ValueError):
    """
    raised when a tree is constructed with an order less than MIN_ORDER
    """


class TreeInsertResult(Enum):
    Success = auto()
    DuplicateKey = auto()


class TreeDeleteResult(Enum):
    Success = auto()
    KeyNotFound = auto()
    EmptyTree = auto()


@dataclass
class FindResult:
    value: Any
    # node ids from root to the leaf holding the key
    path: List[int]


class Tree:
    """
    In-memory B+ tree of order M, i.e. internal nodes have at most M
    children, and leaves at most M keys.

    The public interface consists of `find`, `insert` and `delete`,
    their traced variants, and validators. The remaining methods should
    not be invoked by external actors.

    Every public operation accepts an optional `StepRecorder`. When one is
    passed, the tree reports a step at each checkpoint of the operation,
    e.g. each hop of the descent, and each split, borrow and merge. When
    none is passed, no snapshots are taken.

    Expected failures (duplicate key, missing key, empty tree) are returned
    as result enums; a failed operation leaves the tree unchanged.
    """

    def __init__(self, order: int):
        """
        :param order: max number of children of an internal node; must be >= 3
        """
        if not isinstance(order, int) or isinstance(order, bool) or order < MIN_ORDER:
            raise InvalidOrder(f"order must be an integer >= {MIN_ORDER}; received [{order}]")
        self.order = order
        self.store = NodeStore()
        self.root_id: Optional[int] = None
        # fill bounds for non-root nodes
        self.min_leaf_keys = math.ceil(order / 2)
        self.min_children = math.ceil(order / 2)
        self.min_internal_keys = self.min_children - 1

    # section : public interface: find, insert, and delete
    # NB: the helper methods are clustered along these 3 methods

    def find(self, key: Key, recorder: StepRecorder = None) -> Optional[FindResult]:
        """
        find value for `key`

        :param key: key being seeked
        :param recorder: optional step recorder
        :return: FindResult with the value and the root-to-leaf path,
            or None if the key (or any key) does not exist
        """
        if self.root_id is None:
            self.record(recorder, StepType.NoChange, f"Key {key} not found in empty tree.")
            return None

        self.record(
            recorder, StepType.Start, f"Searching for key {key}.", Highlights(nodes=[self.root_id])
        )
        leaf, path = self.find_leaf(key, recorder)
        key_index = self.leaf_node_find(leaf, key)
        if key_index is None:
            self.record(recorder, StepType.NoChange, f"Key {key} not found.", Highlights(nodes=path))
            return None

        self.record(
            recorder,
            StepType.Found,
            f"Key {key} found in leaf node.",
            Highlights(nodes=path, keys=[KeyRef(leaf.node_id, key_index)]),
        )
        return FindResult(leaf.values[key_index], path)

    def insert(self, key: Key, value: Any, recorder: StepRecorder = None) -> TreeInsertResult:
        """
        insert a `key` into the tree

        Algorithm:
            If the key already exists, return failure, since duplicate keys
            are not supported; the tree is untouched.

            If the tree is empty, the key becomes the only entry of a new root leaf.

            Otherwise, descend to the leaf the key belongs in and insert it
            at its sorted position. If the leaf now holds more than M keys,
            split it into lower (left) and upper (right) halves. The convention
            is that after a split, the left is the older node, while the right
            is newly created. A copy of the right's first key is inserted into
            the parent, along with a pointer to the right.

            If the parent now has more than M children, it too is split. An
            internal split removes its middle key and pushes it up. This proceeds
            recursively until an ancestor has enough room. If the root is split,
            a new root is created, and the tree grows by one level.

        :param key:
        :param value: opaque payload stored with the key
        :param recorder: optional step recorder
        :return: TreeInsertResult
        """
        if self.find(key) is not None:
            self.record(recorder, StepType.NoChange, f"Error: Key {key} already exists.")
            return TreeInsertResult.DuplicateKey

        self.record(recorder, StepType.Start, f"Starting insertion of key {key}.")

        if self.root_id is None:
            leaf = self.store.new_leaf([key], [value])
            self.root_id = leaf.node_id
            logging.debug(f"created root leaf [{leaf.node_id}] for key {key}")
            self.record(
                recorder,
                StepType.NewRoot,
                f"Tree was empty. Created a new root for key {key}.",
                Highlights(nodes=[leaf.node_id]),
            )
        else:
            leaf, path = self.find_leaf(key, recorder)
            self.record(
                recorder, StepType.Found, f"Found target leaf for key {key}.", Highlights(nodes=path)
            )
            self.leaf_node_insert(leaf, key, value)
            if len(leaf.keys) > self.order:
                self.leaf_node_split(leaf, recorder)

        self.record(recorder, StepType.Final, f"Insertion of {key} complete.")
        return TreeInsertResult.Success

    def delete(self, key: Key, recorder: StepRecorder = None) -> TreeDeleteResult:
        """
        delete `key`

        Algorithm:
            find the leaf holding the key; if the key does not exist,
            the op terminates.

            remove the key and its value. If the leaf is the root and is now
            empty, the tree becomes empty.

            Otherwise, if the node holds fewer than its min number of keys,
            handle the underflow: borrow a key from the left sibling if it has
            one to spare, else from the right sibling. If neither can spare one,
            merge the node into a sibling (left preferred), and remove the
            separator and the node's pointer from the parent. The parent has
            lost a child, and may underflow in turn; this proceeds recursively
            towards the root. If the root is left with one child, that child
            becomes the new root, and the tree shrinks by one level.

        :param key:
        :param recorder: optional step recorder
        :return: TreeDeleteResult
        """
        if self.root_id is None:
            self.record(recorder, StepType.NoChange, f"Key {key} not found in empty tree.")
            return TreeDeleteResult.EmptyTree

        self.record(
            recorder,
            StepType.Start,
            f"Searching for key {key} to delete.",
            Highlights(nodes=[self.root_id]),
        )
        leaf, path = self.find_leaf(key, recorder)
        key_index = self.leaf_node_find(leaf, key)
        if key_index is None:
            self.record(
                recorder, StepType.NoChange, f"Key {key} not found for deletion.", Highlights(nodes=path)
            )
            return TreeDeleteResult.KeyNotFound

        self.record(
            recorder,
            StepType.Found,
            f"Found key {key} in leaf node. Preparing to delete.",
            Highlights(nodes=[leaf.node_id], keys=[KeyRef(leaf.node_id, key_index)]),
        )
        del leaf.keys[key_index]
        del leaf.values[key_index]

        if leaf.node_id == self.root_id:
            if not leaf.keys:
                # last key removed; tree is empty
                self.store.drop(leaf.node_id)
                self.root_id = None
                logging.debug(f"deleted last key {key}; tree is empty")
        elif self.is_underflow(leaf):
            self.handle_underflow(leaf, recorder)

        self.record(recorder, StepType.Final, f"Deletion of {key} complete.")
        return TreeDeleteResult.Success

    def find_with_trace(self, key: Key) -> List[Step]:
        recorder = StepRecorder()
        self.find(key, recorder)
        return recorder.get_steps()

    def insert_with_trace(self, key: Key, value: Any) -> List[Step]:
        """
        same as `insert`, but return the steps of the operation
        """
        recorder = StepRecorder()
        self.insert(key, value, recorder)
        return recorder.get_steps()

    def delete_with_trace(self, key: Key) -> List[Step]:
        """
        same as `delete`, but return the steps of the operation
        """
        recorder = StepRecorder()
        self.delete(key, recorder)
        return recorder.get_steps()

    # section : read helpers

    @property
    def root(self) -> Optional[Node]:
        if self.root_id is None:
            return None
        return self.store.get_node(self.root_id)

    def get_node(self, node_id: int) -> Node:
        return self.store.get_node(node_id)

    def leaves(self) -> Iterator[LeafNode]:
        """
        leaves in key order, by following the leaf chain
        """
        return iter_leaf_chain(self.store, self.root_id)

    def items(self) -> Iterator[Tuple[Key, Any]]:
        for leaf in self.leaves():
            yield from zip(leaf.keys, leaf.values)

    def keys(self) -> List[Key]:
        return [key for leaf in self.leaves() for key in leaf.keys]

    @property
    def height(self) -> int:
        """
        number of levels; 0 for an empty tree
        """
        if self.root_id is None:
            return 0
        height = 1
        node = self.root
        while node.node_type == NodeType.NodeInternal:
            node = self.store.get_node(node.children[0])
            height += 1
        return height

    def snapshot(self) -> TreeSnapshot:
        return TreeSnapshot(self.order, self.root_id, self.store.clone())

    def record(
        self,
        recorder: Optional[StepRecorder],
        kind: StepType,
        message: str,
        highlights: Highlights = None,
        **info,
    ):
        """
        report a checkpoint to `recorder`, if any
        """
        if recorder is None:
            return
        recorder.record(self, kind, message, highlights, **info)

    def __contains__(self, key: Key) -> bool:
        return self.find(key) is not None

    def __len__(self) -> int:
        return sum(len(leaf.keys) for leaf in self.leaves())

    # section : find helpers

    @staticmethod
    def internal_node_find(node: InternalNode, key: Key) -> int:
        """
        return the child number to descend into for `key`, i.e. the
        first i such that key < keys[i]; equal keys go right
        """
        return bisect_right(node.keys, key)

    @staticmethod
    def leaf_node_find(node: LeafNode, key: Key) -> Optional[int]:
        """
        return position of `key` in leaf, or None if absent
        """
        cell_num = bisect_left(node.keys, key)
        if cell_num < len(node.keys) and node.keys[cell_num] == key:
            return cell_num
        return None

    def find_leaf(self, key: Key, recorder: StepRecorder = None) -> Tuple[LeafNode, List[int]]:
        """
        descend from root to the leaf where `key` exists or should go

        :return: (leaf, path of node ids from root to leaf)
        """
        node = self.store.get_node(self.root_id)
        path = [node.node_id]
        while node.node_type == NodeType.NodeInternal:
            child_num = self.internal_node_find(node, key)
            node = self.store.get_node(node.children[child_num])
            path.append(node.node_id)
            self.record(
                recorder,
                StepType.Traverse,
                f"Traversing to child {child_num} for key {key}.",
                Highlights(nodes=list(path)),
            )
        return node, path

    # section : insert helpers

    @staticmethod
    def leaf_node_insert(leaf: LeafNode, key: Key, value: Any):
        cell_num = bisect_left(leaf.keys, key)
        leaf.keys.insert(cell_num, key)
        leaf.values.insert(cell_num, value)

    def leaf_node_split(self, leaf: LeafNode, recorder: StepRecorder = None):
        """
        split an overfull leaf. The upper half, starting at ceil(len/2),
        moves to a new leaf, linked right after `leaf` in the leaf chain.

        NOTE: the key pushed to the parent is a copy of the new leaf's
        first key; it remains in the new leaf.
        """
        split_at = math.ceil(len(leaf.keys) / 2)
        new_leaf = self.store.new_leaf(leaf.keys[split_at:], leaf.values[split_at:])
        del leaf.keys[split_at:]
        del leaf.values[split_at:]

        new_leaf.prev = leaf.node_id
        new_leaf.next = leaf.next
        if leaf.next is not None:
            self.store.get_node(leaf.next).prev = new_leaf.node_id
        leaf.next = new_leaf.node_id

        pushed_key = new_leaf.keys[0]
        logging.debug(
            f"split leaf [{leaf.node_id}] into [{leaf.node_id}] and [{new_leaf.node_id}]; "
            f"pushing up key {pushed_key}"
        )
        self.record(
            recorder,
            StepType.Split,
            f"Leaf node full. Splitting and pushing key {pushed_key} up.",
            Highlights(nodes=[leaf.node_id, new_leaf.node_id]),
            split_info=SplitInfo(leaf.node_id, new_leaf.node_id, pushed_key, leaf.parent),
        )
        self.insert_into_parent(leaf, pushed_key, new_leaf, recorder)

    def insert_into_parent(self, left: Node, key: Key, right: Node, recorder: StepRecorder = None):
        """
        insert `key` and `right` into the parent of `left`, immediately
        after `left`. If `left` is the root, a new root is created.

        :param left: the older node of a split
        :param key: separator between `left` and `right`
        :param right: the newly created node of a split
        """
        if left.parent is None:
            root = self.store.new_internal([key], [left.node_id, right.node_id])
            left.parent = root.node_id
            right.parent = root.node_id
            self.root_id = root.node_id
            logging.debug(f"created new root [{root.node_id}] with key {key}")
            self.record(recorder, StepType.NewRoot, "Created new root node.", Highlights(nodes=[root.node_id]))
            return

        parent = self.store.get_node(left.parent)
        child_num = parent.children.index(left.node_id)
        parent.keys.insert(child_num, key)
        parent.children.insert(child_num + 1, right.node_id)
        right.parent = parent.node_id
        self.record(
            recorder,
            StepType.UpdateParent,
            f"Inserted key {key} into parent node.",
            Highlights(nodes=[parent.node_id]),
        )

        if len(parent.children) > self.order:
            self.internal_node_split(parent, recorder)

    def internal_node_split(self, node: InternalNode, recorder: StepRecorder = None):
        """
        split an overfull internal node at floor(M/2).

        NOTE: unlike a leaf split, the middle key is removed from the
        node and pushed up; it is not kept in either half.
        """
        split_at = self.order // 2
        pushed_key = node.keys[split_at]
        new_node = self.store.new_internal(node.keys[split_at + 1:], node.children[split_at + 1:])
        del node.keys[split_at:]
        del node.children[split_at + 1:]
        for child_id in new_node.children:
            self.store.get_node(child_id).parent = new_node.node_id

        logging.debug(
            f"split internal [{node.node_id}] into [{node.node_id}] and [{new_node.node_id}]; "
            f"pushing up key {pushed_key}"
        )
        self.record(
            recorder,
            StepType.Split,
            f"Internal node full. Splitting and pushing key {pushed_key} up.",
            Highlights(nodes=[node.node_id, new_node.node_id]),
            split_info=SplitInfo(node.node_id, new_node.node_id, pushed_key, node.parent),
        )
        self.insert_into_parent(node, pushed_key, new_node, recorder)

    # section : delete helpers

    def get_min_keys(self, node: Node) -> int:
        if node.node_type == NodeType.NodeLeaf:
            return self.min_leaf_keys
        return self.min_internal_keys

    def is_underflow(self, node: Node) -> bool:
        return len(node.keys) < self.get_min_keys(node)

    def has_surplus(self, node: Node) -> bool:
        """
        whether `node` can give up a key and remain valid
        """
        return len(node.keys) > self.get_min_keys(node)

    def get_left_sibling(self, node: Node) -> Optional[Node]:
        parent = self.store.get_node(node.parent)
        child_num = parent.children.index(node.node_id)
        if child_num == 0:
            return None
        return self.store.get_node(parent.children[child_num - 1])

    def get_right_sibling(self, node: Node) -> Optional[Node]:
        parent = self.store.get_node(node.parent)
        child_num = parent.children.index(node.node_id)
        if child_num == len(parent.children) - 1:
            return None
        return self.store.get_node(parent.children[child_num + 1])

    def handle_underflow(self, node: Node, recorder: StepRecorder = None):
        """
        restore min fill of non-root `node`; borrowing is preferred
        over merging, and the left sibling over the right
        """
        left = self.get_left_sibling(node)
        right = self.get_right_sibling(node)
        logging.debug(f"node [{node.node_id}] with keys {node.keys} is in underflow")

        if left is not None and self.has_surplus(left):
            self.borrow_from_left(node, left, recorder)
        elif right is not None and self.has_surplus(right):
            self.borrow_from_right(node, right, recorder)
        elif left is not None:
            self.merge(node, left, recorder)
        else:
            self.merge(node, right, recorder)

    def borrow_from_left(self, node: Node, left: Node, recorder: StepRecorder = None):
        """
        move the left sibling's last entry to the front of `node`
        """
        parent = self.store.get_node(node.parent)
        separator_num = parent.children.index(node.node_id) - 1
        moved_key = left.keys[-1]
        self.record(
            recorder,
            StepType.BorrowLeft,
            "Borrowing from left sibling.",
            Highlights(nodes=[node.node_id, left.node_id, parent.node_id]),
            borrow_info=BorrowInfo(left.node_id, node.node_id, moved_key, parent.node_id),
        )

        if node.node_type == NodeType.NodeLeaf:
            node.keys.insert(0, left.keys.pop())
            node.values.insert(0, left.values.pop())
            parent.keys[separator_num] = node.keys[0]
        else:
            # rotate through the parent
            node.keys.insert(0, parent.keys[separator_num])
            parent.keys[separator_num] = left.keys.pop()
            child_id = left.children.pop()
            node.children.insert(0, child_id)
            self.store.get_node(child_id).parent = node.node_id

        logging.debug(f"node [{node.node_id}] borrowed key {moved_key} from left [{left.node_id}]")
        self.record(
            recorder,
            StepType.UpdateParent,
            "Updated parent key after borrowing.",
            Highlights(nodes=[parent.node_id]),
        )

    def borrow_from_right(self, node: Node, right: Node, recorder: StepRecorder = None):
        """
        move the right sibling's first entry to the end of `node`
        """
        parent = self.store.get_node(node.parent)
        separator_num = parent.children.index(node.node_id)
        moved_key = right.keys[0]
        self.record(
            recorder,
            StepType.BorrowRight,
            "Borrowing from right sibling.",
            Highlights(nodes=[node.node_id, right.node_id, parent.node_id]),
            borrow_info=BorrowInfo(right.node_id, node.node_id, moved_key, parent.node_id),
        )

        if node.node_type == NodeType.NodeLeaf:
            node.keys.append(right.keys.pop(0))
            node.values.append(right.values.pop(0))
            parent.keys[separator_num] = right.keys[0]
        else:
            node.keys.append(parent.keys[separator_num])
            parent.keys[separator_num] = right.keys.pop(0)
            child_id = right.children.pop(0)
            node.children.append(child_id)
            self.store.get_node(child_id).parent = node.node_id

        logging.debug(f"node [{node.node_id}] borrowed key {moved_key} from right [{right.node_id}]")
        self.record(
            recorder,
            StepType.UpdateParent,
            "Updated parent key after borrowing.",
            Highlights(nodes=[parent.node_id]),
        )

    def merge(self, node: Node, sibling: Node, recorder: StepRecorder = None):
        """
        merge underflowing `node` into adjacent `sibling`; `node` is dropped.

        For leaves, the keys and values are concatenated and `node` is unlinked
        from the leaf chain. For internal nodes, the parent's separator is pulled
        down between the two key runs, and `node`'s children are re-parented.
        In both cases the separator and `node`'s pointer are removed from the
        parent, which may then underflow.
        """
        parent = self.store.get_node(node.parent)
        node_num = parent.children.index(node.node_id)
        sibling_num = parent.children.index(sibling.node_id)
        left, right = (sibling, node) if sibling_num < node_num else (node, sibling)
        separator_num = min(node_num, sibling_num)
        separator = parent.keys[separator_num]

        self.record(
            recorder,
            StepType.Merge,
            "Cannot borrow. Merging nodes.",
            Highlights(nodes=[left.node_id, right.node_id, parent.node_id]),
            merge_info=MergeInfo(left.node_id, right.node_id, sibling.node_id, separator, parent.node_id),
        )

        if node.node_type == NodeType.NodeLeaf:
            keys = left.keys + right.keys
            values = left.values + right.values
            # node and sibling are adjacent in the chain
            if node.prev is not None:
                self.store.get_node(node.prev).next = node.next
            if node.next is not None:
                self.store.get_node(node.next).prev = node.prev
            sibling.keys = keys
            sibling.values = values
        else:
            keys = left.keys + [separator] + right.keys
            children = left.children + right.children
            for child_id in node.children:
                self.store.get_node(child_id).parent = sibling.node_id
            sibling.keys = keys
            sibling.children = children

        del parent.keys[separator_num]
        del parent.children[node_num]
        self.store.drop(node.node_id)
        logging.debug(
            f"merged [{node.node_id}] into [{sibling.node_id}]; removed key {separator} "
            f"from parent [{parent.node_id}]"
        )

        if parent.node_id == self.root_id:
            if len(parent.children) == 1:
                self.collapse_root(parent, recorder)
        elif self.is_underflow(parent):
            self.handle_underflow(parent, recorder)

    def collapse_root(self, root: InternalNode, recorder: StepRecorder = None):
        """
        replace a root with a single child, by the child
        """
        child = self.store.get_node(root.children[0])
        child.parent = None
        self.root_id = child.node_id
        self.store.drop(root.node_id)
        logging.debug(f"collapsed root [{root.node_id}]; [{child.node_id}] is the new root")
        self.record(
            recorder,
            StepType.NewRoot,
            "Root has a single child. Promoting it to be the new root.",
            Highlights(nodes=[child.node_id]),
        )

    # section: btree debugging utilities

    @staticmethod
    def depth_to_indent(depth: int) -> str:
        return " " * (depth * 4)

    def print_tree(self, node_id: int = None, depth: int = 0):
        """
        print entire tree node by node, starting at an optional node
        :param node_id:
        :param depth: depth of current invocation (used for formatting indentation)
        """
        if node_id is None:
            if self.root_id is None:
                print("<empty tree>")
                return
            node_id = self.root_id

        indent = self.depth_to_indent(depth)
        node = self.store.get_node(node_id)
        parent_id = "NULLPTR" if node.parent is None else node.parent
        if node.node_type == NodeType.NodeLeaf:
            print(
                f"{indent}leaf [{node_id}] (size: {len(node.keys)}, parent: {parent_id}, "
                f"prev: {node.prev}, next: {node.next})"
            )
            for cell_num, (key, value) in enumerate(zip(node.keys, node.values)):
                print(f"{indent}{cell_num} - {key}: {value!r}")
        else:
            print(f"{indent}internal [{node_id}] (size: {len(node.keys)}, parent: {parent_id})")
            for key_num, key in enumerate(node.keys):
                print(f"{indent}{key_num}-key: {key}")
            for child_id in node.children:
                self.print_tree(child_id, depth=depth + 1)

    def validate(self) -> bool:
        """
        invoke all sub-validators
        :return:
            raises AssertionError on failure
            True on success
        """
        self.validate_parent_refs()
        self.validate_ordering()
        self.validate_fill()
        self.validate_depth()
        self.validate_leaf_chain()
        return True

    def validate_parent_refs(self) -> bool:
        """
        validate:
            1) root has no parent
            2) each child's ref to its parent matches the parent that lists it
            3) every node in the store is reachable from the root
        """
        if self.root_id is None:
            assert len(self.store) == 0, f"empty tree holds {len(self.store)} nodes"
            return True

        assert self.root.parent is None, f"root [{self.root_id}] has parent [{self.root.parent}]"
        reachable = 0
        stack = [self.root_id]
        while stack:
            node_id = stack.pop()
            node = self.store.get_node(node_id)
            reachable += 1
            if node.node_type == NodeType.NodeInternal:
                for child_id in node.children:
                    child_parent_ref = self.store.get_node(child_id).parent
                    assert child_parent_ref == node_id, (
                        f"child ref to parent [{child_parent_ref}], does not match parent id: [{node_id}] "
                        f"child id is {child_id}"
                    )
                    stack.append(child_id)
        assert reachable == len(self.store), (
            f"store holds {len(self.store)} nodes; only {reachable} are reachable from root"
        )
        return True

    def validate_ordering(self) -> bool:
        """
        traverse the tree, starting at root, and ensure keys are ordered and
        within the bounds set by their ancestors' separators, i.e. child i
        holds keys in [keys[i-1], keys[i])
        """
        if self.root_id is None:
            return True

        stack = [(self.root_id, float("-inf"), float("inf"))]
        while stack:
            node_id, lower_bound, upper_bound = stack.pop()
            node = self.store.get_node(node_id)
            for key_num, key in enumerate(node.keys):
                if key_num > 0:
                    prev_key = node.keys[key_num - 1]
                    assert key > prev_key, (
                        f"validation: keys of node [{node_id}] must be strictly increasing; "
                        f"key: {key}, prev_key: {prev_key}"
                    )
                assert lower_bound <= key < upper_bound, (
                    f"validation: key {key} of node [{node_id}] outside bounds "
                    f"[{lower_bound}, {upper_bound})"
                )

            if node.node_type == NodeType.NodeInternal:
                for child_num, child_id in enumerate(node.children):
                    child_lower_bound = node.keys[child_num - 1] if child_num > 0 else lower_bound
                    child_upper_bound = node.keys[child_num] if child_num < len(node.keys) else upper_bound
                    stack.append((child_id, child_lower_bound, child_upper_bound))
        return True

    def validate_fill(self) -> bool:
        """
        validate every node's key and child counts are within bounds for the order
        """
        if self.root_id is None:
            return True

        for node_id in self.store:
            node = self.store.get_node(node_id)
            is_root = node_id == self.root_id
            if node.node_type == NodeType.NodeLeaf:
                assert len(node.keys) == len(node.values), (
                    f"leaf [{node_id}] has {len(node.keys)} keys and {len(node.values)} values"
                )
                min_keys = 1 if is_root else self.min_leaf_keys
                assert min_keys <= len(node.keys) <= self.order, (
                    f"leaf [{node_id}] has {len(node.keys)} keys; expected [{min_keys}, {self.order}]"
                )
            else:
                assert len(node.children) == len(node.keys) + 1, (
                    f"internal [{node_id}] has {len(node.keys)} keys and {len(node.children)} children"
                )
                min_children = 2 if is_root else self.min_children
                assert min_children <= len(node.children) <= self.order, (
                    f"internal [{node_id}] has {len(node.children)} children; "
                    f"expected [{min_children}, {self.order}]"
                )
        return True

    def validate_depth(self) -> bool:
        """
        validate all leaves are at the same depth
        """
        if self.root_id is None:
            return True

        depths = set()
        stack = [(self.root_id, 0)]
        while stack:
            node_id, depth = stack.pop()
            node = self.store.get_node(node_id)
            if node.node_type == NodeType.NodeLeaf:
                depths.add(depth)
            else:
                stack.extend((child_id, depth + 1) for child_id in node.children)
        assert len(depths) == 1, f"leaves found at depths {sorted(depths)}"
        return True

    def validate_leaf_chain(self) -> bool:
        """
        validate the leaf chain visits the same leaves as an in-order
        traversal, with consistent back links, and yields increasing keys
        """
        if self.root_id is None:
            return True

        in_order = []
        stack = [self.root_id]
        while stack:
            node = self.store.get_node(stack.pop())
            if node.node_type == NodeType.NodeLeaf:
                in_order.append(node.node_id)
            else:
                stack.extend(reversed(node.children))

        chain = [leaf.node_id for leaf in self.leaves()]
        assert chain == in_order, f"leaf chain {chain} does not match in-order leaves {in_order}"

        prev_id = None
        for leaf in self.leaves():
            assert leaf.prev == prev_id, (
                f"leaf [{leaf.node_id}] has prev [{leaf.prev}]; expected [{prev_id}]"
            )
            prev_id = leaf.node_id

        keys = self.keys()
        assert all(a < b for a, b in zip(keys, keys[1:])), f"leaf chain keys not increasing: {keys}"
        return True
